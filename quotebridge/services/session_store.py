"""Credential store over persisted Shopify sessions.

Resolves which stored offline session the quote pipeline should use for a
shop. Several offline sessions can accumulate across reinstalls, so
selection runs an ordered list of predicates and returns the newest
record matching the first predicate that matches anything:

1. a live token that carries the draft-order write scope
2. any live token
3. nothing: UnauthenticatedError

"Live" means a non-empty access token with no expiry or an expiry in the
future. Expiry is checked before scope, so a valid scope-less token beats
an expired token that has the scope.

Example:
    store = SessionStore(db)
    credential = store.find_active_credential("https://my-shop.myshopify.com/")
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from quotebridge.db.models import ShopSession, offline_session_id, utc_now_iso
from quotebridge.errors import UnauthenticatedError
from quotebridge.utils.redaction import mask_identifier

logger = logging.getLogger(__name__)

REQUIRED_SCOPE = "write_draft_orders"


def normalize_shop_domain(shop: str) -> str:
    """Strip a leading http(s):// scheme and one trailing slash."""
    shop = shop.strip()
    for prefix in ("https://", "http://"):
        if shop.startswith(prefix):
            shop = shop[len(prefix):]
            break
    if shop.endswith("/"):
        shop = shop[:-1]
    return shop


def parse_scopes(scope: str | None) -> frozenset[str]:
    """Split a comma-separated scope string into a set."""
    if not scope:
        return frozenset()
    return frozenset(s.strip() for s in scope.split(",") if s.strip())


def parse_iso_timestamp(value: str | None) -> datetime | None:
    """Parse ISO8601 timestamp to UTC datetime."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


@dataclass(frozen=True)
class Credential:
    """Read-only view of a stored session used for Admin API calls."""

    id: str
    shop_domain: str
    is_online: bool
    access_token: str
    scopes: frozenset[str]
    expires_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at <= now

    @classmethod
    def from_record(cls, record: ShopSession) -> "Credential":
        return cls(
            id=record.id,
            shop_domain=record.shop,
            is_online=record.is_online,
            access_token=record.access_token or "",
            scopes=parse_scopes(record.scope),
            expires_at=parse_iso_timestamp(record.expires),
        )


CredentialPredicate = Callable[[Credential, datetime], bool]


def _is_live(credential: Credential, now: datetime) -> bool:
    return bool(credential.access_token) and not credential.is_expired(now)


def _has_required_scope(credential: Credential, now: datetime) -> bool:
    return _is_live(credential, now) and REQUIRED_SCOPE in credential.scopes


SELECTION_POLICY: list[tuple[str, CredentialPredicate]] = [
    ("required-scope", _has_required_scope),
    ("any-valid", _is_live),
]


def select_credential(
    candidates: list[Credential],
    now: datetime | None = None,
    policy: list[tuple[str, CredentialPredicate]] = SELECTION_POLICY,
) -> tuple[str, Credential] | None:
    """Apply the selection policy to candidates (assumed newest first).

    Returns:
        (policy label, credential) for the first match, or None.
    """
    now = now or datetime.now(UTC)
    for label, predicate in policy:
        for credential in candidates:
            if predicate(credential, now):
                return label, credential
    return None


class SessionStore:
    """Query and maintenance interface over the ``sessions`` table."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def offline_credentials(self, shop: str) -> list[Credential]:
        """All offline credentials for a normalized shop, newest first."""
        stmt = (
            select(ShopSession)
            .where(ShopSession.shop == shop, ShopSession.is_online.is_(False))
            .order_by(ShopSession.created_at.desc())
        )
        return [Credential.from_record(r) for r in self._db.scalars(stmt).all()]

    def find_active_credential(self, shop: str, now: datetime | None = None) -> Credential:
        """Pick the offline credential to use for Admin API calls.

        Raises:
            UnauthenticatedError: If no stored session qualifies.
        """
        normalized = normalize_shop_domain(shop)
        logger.info("Looking up session for shop: %s", normalized)

        candidates = self.offline_credentials(normalized)
        logger.info("Found %d session(s) for shop", len(candidates))
        for i, c in enumerate(candidates):
            logger.debug(
                "Session %d: id=%s, scope=%s, expires=%s",
                i, mask_identifier(c.id), ",".join(sorted(c.scopes)), c.expires_at,
            )

        selected = select_credential(candidates, now=now)
        if selected is None:
            raise UnauthenticatedError(normalized)

        label, credential = selected
        logger.info(
            "Using session %s (%s), scope: %s",
            mask_identifier(credential.id), label, ",".join(sorted(credential.scopes)),
        )
        return credential

    def list_sessions(self, shop: str | None = None) -> list[ShopSession]:
        stmt = select(ShopSession).order_by(ShopSession.shop, ShopSession.created_at.desc())
        if shop:
            stmt = stmt.where(ShopSession.shop == normalize_shop_domain(shop))
        return list(self._db.scalars(stmt).all())

    def save_offline_session(
        self,
        shop: str,
        access_token: str,
        scope: str,
        state: str = "",
        expires: str | None = None,
        refresh_token: str | None = None,
        refresh_token_expires: str | None = None,
    ) -> ShopSession:
        """Create or replace the offline session for a shop.

        The record keeps its id (``offline_<shop>``); its created_at is
        refreshed so it sorts as the newest credential.
        """
        shop = normalize_shop_domain(shop)
        session_id = offline_session_id(shop)
        record = self._db.get(ShopSession, session_id)
        if record is None:
            record = ShopSession(id=session_id, shop=shop)
            self._db.add(record)

        record.state = state
        record.is_online = False
        record.access_token = access_token
        record.scope = scope
        record.expires = expires
        record.refresh_token = refresh_token
        record.refresh_token_expires = refresh_token_expires
        record.created_at = utc_now_iso()

        self._db.commit()
        self._db.refresh(record)
        logger.info("Stored offline session %s for %s", mask_identifier(record.id), shop)
        return record

    def delete_sessions(self, shop: str) -> int:
        """Delete every session (online and offline) for a shop.

        Returns:
            Number of records deleted.
        """
        shop = normalize_shop_domain(shop)
        result = self._db.execute(delete(ShopSession).where(ShopSession.shop == shop))
        self._db.commit()
        deleted = result.rowcount or 0
        logger.info("Deleted %d session(s) for %s", deleted, shop)
        return deleted
