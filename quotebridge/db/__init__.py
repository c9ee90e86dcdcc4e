"""Database module for QuoteBridge sessions and quote persistence."""

from quotebridge.db.connection import (
    SessionLocal,
    engine,
    get_db,
    get_db_context,
    init_db,
)
from quotebridge.db.models import (
    Base,
    OAuthState,
    Quote,
    QuoteStatus,
    ShopSession,
)

__all__ = [
    # Models
    "Base",
    "ShopSession",
    "Quote",
    "OAuthState",
    # Enums
    "QuoteStatus",
    # Connection
    "engine",
    "SessionLocal",
    "get_db",
    "get_db_context",
    "init_db",
]
