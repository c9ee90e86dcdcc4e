"""Engine and session management for the QuoteBridge database.

One synchronous engine serves the API and the CLI. The sessions table and
the quote log live in the same database, so a request needs exactly one
``Session``:

    # FastAPI
    def handler(db: Session = Depends(get_db)): ...

    # CLI / scripts
    with get_db_context() as db:
        SessionStore(db).delete_sessions(shop)
"""

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from quotebridge.db.models import Base

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///./quotebridge.db"


def get_database_url() -> str:
    """Resolve the SQLAlchemy URL.

    DATABASE_URL wins; QUOTEBRIDGE_DB_PATH names a SQLite file (or is
    itself a sqlite: URL); otherwise ./quotebridge.db.
    """
    url = os.environ.get("DATABASE_URL", "").strip()
    if url:
        return url

    path = os.environ.get("QUOTEBRIDGE_DB_PATH", "").strip()
    if not path:
        return DEFAULT_DATABASE_URL
    return path if path.startswith("sqlite:") else f"sqlite:///{path}"


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def build_engine(url: str) -> Engine:
    """Create an engine for ``url``, applying SQLite connection settings."""
    is_sqlite = url.startswith("sqlite")
    built = create_engine(
        url,
        connect_args={"check_same_thread": False} if is_sqlite else {},
        echo=os.environ.get("SQL_ECHO", "").lower() == "true",
        pool_pre_ping=not is_sqlite,
    )
    if is_sqlite:
        event.listen(built, "connect", _enable_sqlite_foreign_keys)
    return built


DATABASE_URL = get_database_url()
engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False)


def get_db() -> Iterator[Session]:
    """FastAPI dependency yielding a request-scoped session.

    Handlers commit explicitly; the session is always closed.
    """
    with SessionLocal() as db:
        yield db


@contextmanager
def get_db_context() -> Iterator[Session]:
    """Session for code outside a request: commit on success, else roll back."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db() -> None:
    """Create any missing tables."""
    Base.metadata.create_all(bind=engine)
    logger.debug("Schema ensured on %s", engine.url.render_as_string(hide_password=True))


def close_db() -> None:
    engine.dispose()
