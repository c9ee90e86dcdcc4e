"""SQLAlchemy ORM models for the QuoteBridge database.

This module defines the Shopify session records the OAuth flow writes and
the quote pipeline reads, the local quote log, and pending OAuth states.
Uses SQLAlchemy 2.0 style with Mapped and mapped_column.
"""

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def generate_uuid() -> str:
    """Generate a UUID4 string for primary keys."""
    return str(uuid4())


def utc_now_iso() -> str:
    """Generate current UTC timestamp in ISO8601 format."""
    return datetime.now(UTC).isoformat()


def offline_session_id(shop: str) -> str:
    """Session id used for a shop's offline (non-interactive) token."""
    return f"offline_{shop}"


class QuoteStatus(str, Enum):
    """Status values for locally recorded quotes."""

    CREATED = "CREATED"


# SQLAlchemy Base


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# Models


class ShopSession(Base):
    """Persisted Shopify session (credential record).

    Mirrors the session schema used by Shopify's app libraries. Offline
    sessions carry the long-lived token used for server-to-server calls;
    several may accumulate for one shop across reinstalls.

    Attributes:
        id: Session id ("offline_<shop>" for offline sessions)
        shop: Shop domain, e.g. "my-shop.myshopify.com"
        state: OAuth state the session was created from
        is_online: True for per-user interactive sessions
        scope: Comma-separated granted scopes
        expires: ISO8601 expiry of the access token, if it expires
        access_token: Admin API access token
        refresh_token: Refresh token for expiring offline tokens
        refresh_token_expires: ISO8601 expiry of the refresh token
        created_at: ISO8601 timestamp of record creation
    """

    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    shop: Mapped[str] = mapped_column(String(255), nullable=False)
    state: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    is_online: Mapped[bool] = mapped_column(nullable=False, default=False)
    scope: Mapped[str | None] = mapped_column(Text, nullable=True)
    expires: Mapped[str | None] = mapped_column(String(50), nullable=True)
    access_token: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Online-session user details
    user_id: Mapped[int | None] = mapped_column(nullable=True)
    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    account_owner: Mapped[bool] = mapped_column(nullable=False, default=False)
    locale: Mapped[str | None] = mapped_column(String(20), nullable=True)
    collaborator: Mapped[bool | None] = mapped_column(nullable=True, default=False)
    email_verified: Mapped[bool | None] = mapped_column(nullable=True, default=False)

    refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    refresh_token_expires: Mapped[str | None] = mapped_column(String(50), nullable=True)

    created_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )

    __table_args__ = (
        Index("idx_sessions_shop", "shop"),
        Index("idx_sessions_shop_online", "shop", "is_online"),
    )

    def __repr__(self) -> str:
        return (
            f"<ShopSession(id={self.id[:8]!r}..., shop={self.shop!r}, "
            f"is_online={self.is_online}, scope={self.scope!r})>"
        )


class Quote(Base):
    """Local record of a draft order created through the quote endpoint.

    Attributes:
        id: UUID primary key returned to callers as quoteId
        shopify_draft_order_id: Shopify GID of the draft order
        shop: Normalized shop domain
        email: Customer email from the request
        po_number: Purchase-order number, if supplied
        po_file_url: Purchase-order file URL, if supplied
        status: Quote status (CREATED)
        created_at: ISO8601 timestamp of creation
        updated_at: ISO8601 timestamp of last update
    """

    __tablename__ = "quotes"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    shopify_draft_order_id: Mapped[str] = mapped_column(String(255), nullable=False)
    shop: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    po_number: Mapped[str | None] = mapped_column(String(255), nullable=True)
    po_file_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=QuoteStatus.CREATED.value
    )
    created_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )
    updated_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso, onupdate=utc_now_iso
    )

    __table_args__ = (
        Index("idx_quotes_shop", "shop"),
        Index("idx_quotes_draft_order", "shopify_draft_order_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Quote(id={self.id!r}, shop={self.shop!r}, "
            f"draft_order={self.shopify_draft_order_id!r}, status={self.status!r})>"
        )


class OAuthState(Base):
    """Pending OAuth install nonce, consumed by the callback."""

    __tablename__ = "oauth_states"

    state: Mapped[str] = mapped_column(String(64), primary_key=True)
    shop: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )

    def __repr__(self) -> str:
        return f"<OAuthState(shop={self.shop!r})>"
