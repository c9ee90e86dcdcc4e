"""Root-level pytest fixtures for all tests.

Provides shared fixtures:
- In-memory database sessions
- Stored Shopify session factories
- Sample quote payloads
"""

import os
from collections.abc import Callable, Generator

# The application engine is built when quotebridge.db is first imported;
# keep it off the working directory.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from quotebridge.db.models import Base, ShopSession  # noqa: E402
from tests.helpers import SHOP  # noqa: E402


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """In-memory SQLite session with all tables created."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def make_session(db_session: Session) -> Callable[..., ShopSession]:
    """Factory that inserts ShopSession rows.

    Later calls get later created_at values so ordering is deterministic.
    """
    counter = {"n": 0}

    def _make(
        shop: str = SHOP,
        access_token: str = "shpat_valid_token",
        scope: str | None = "write_products,write_draft_orders",
        expires: str | None = None,
        is_online: bool = False,
        session_id: str | None = None,
    ) -> ShopSession:
        counter["n"] += 1
        record = ShopSession(
            id=session_id or f"offline_{shop}_{counter['n']}",
            shop=shop,
            state="",
            is_online=is_online,
            scope=scope,
            expires=expires,
            access_token=access_token,
            created_at=f"2020-01-01T00:00:{counter['n']:02d}+00:00",
        )
        db_session.add(record)
        db_session.commit()
        return record

    return _make


# ============================================================================
# Test Data Fixtures
# ============================================================================


@pytest.fixture
def quote_payload() -> dict:
    """A minimal valid quote request body."""
    return {
        "shop": SHOP,
        "email": "buyer@example.com",
        "lineItems": [{"variantId": "gid://shopify/ProductVariant/1", "quantity": 2}],
    }

