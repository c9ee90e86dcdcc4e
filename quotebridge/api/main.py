"""FastAPI application for the QuoteBridge API.

Provides the main application instance with routers and exception
handlers configured.
"""

import logging
import sys
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

# Configure logging to stdout for uvicorn to capture
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logging.getLogger("quotebridge").setLevel(logging.INFO)

from quotebridge.api.routes import auth, quotes  # noqa: E402
from quotebridge.api.schemas import HealthResponse  # noqa: E402
from quotebridge.db.connection import close_db, init_db  # noqa: E402
from quotebridge.errors import DomainError  # noqa: E402

logger = logging.getLogger(__name__)


def _app_version() -> str:
    try:
        return _pkg_version("quotebridge")
    except PackageNotFoundError:
        return "unknown"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup, release the pool on shutdown."""
    init_db()
    logger.info("QuoteBridge API started (version %s)", _app_version())
    yield
    close_db()


app = FastAPI(
    title="QuoteBridge API",
    description="Storefront quote requests as Shopify draft orders",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Render DomainError exceptions raised outside the quote handler."""
    logger.warning(
        "%s %s failed [%s]: %s (remediation: %s)",
        request.method, request.url.path, exc.code, exc, exc.remediation,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


app.include_router(quotes.router)
app.include_router(auth.router)


@app.get("/health", response_model=HealthResponse)
def health_check() -> dict:
    """Liveness probe."""
    return {"status": "healthy", "version": _app_version()}
