"""Shopify OAuth install flow for offline access tokens.

Builds the authorize redirect, verifies callback HMACs, and exchanges the
authorization code for an offline Admin API token. The resulting token is
stored through SessionStore as the shop's offline session, which is what
the quote pipeline later resolves.
"""

import hashlib
import hmac
import logging
import re
from datetime import UTC, datetime, timedelta
from typing import Any
from urllib.parse import urlencode

import httpx

from quotebridge.config import AppConfig
from quotebridge.errors import OAuthError
from quotebridge.services.session_store import normalize_shop_domain

logger = logging.getLogger(__name__)

_MYSHOPIFY_PATTERN = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9\-]*\.myshopify\.com$")


def sanitize_shop(shop: str | None, custom_domains: list[str] | None = None) -> str:
    """Normalize and validate a shop domain from a query string.

    Raises:
        OAuthError: If the domain is neither *.myshopify.com nor a
            configured custom domain.
    """
    if not shop:
        raise OAuthError("Missing shop parameter")
    normalized = normalize_shop_domain(shop).lower()
    if _MYSHOPIFY_PATTERN.match(normalized):
        return normalized
    if normalized in {d.lower() for d in custom_domains or []}:
        return normalized
    raise OAuthError(f"Invalid shop domain: {shop}")


def build_authorize_url(config: AppConfig, shop: str, state: str) -> str:
    query = urlencode(
        {
            "client_id": config.api_key,
            "scope": config.scopes_csv,
            "redirect_uri": config.redirect_uri,
            "state": state,
        }
    )
    return f"https://{shop}/admin/oauth/authorize?{query}"


def compute_hmac(params: list[tuple[str, str]], secret: str) -> str:
    """Hex HMAC-SHA256 over the sorted key=value pairs, excluding hmac."""
    message = "&".join(
        f"{key}={value}" for key, value in sorted(params) if key not in ("hmac", "signature")
    )
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_callback_hmac(params: list[tuple[str, str]], secret: str) -> bool:
    """Check the hmac query parameter Shopify signs callbacks with."""
    provided = next((value for key, value in params if key == "hmac"), None)
    if not provided or not secret:
        return False
    return hmac.compare_digest(compute_hmac(params, secret), provided)


def _expiry_iso(seconds: Any, now: datetime) -> str | None:
    if not isinstance(seconds, int) or seconds <= 0:
        return None
    return (now + timedelta(seconds=seconds)).isoformat()


async def exchange_code_for_token(
    config: AppConfig,
    shop: str,
    code: str,
    http_client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """Trade an authorization code for an offline access token.

    Returns:
        Dict with access_token, scope, expires, refresh_token and
        refresh_token_expires (the last three may be None).

    Raises:
        OAuthError: 502 when Shopify rejects the exchange or the response
            lacks an access token.
    """
    url = f"https://{shop}/admin/oauth/access_token"
    payload: dict[str, Any] = {
        "client_id": config.api_key,
        "client_secret": config.api_secret,
        "code": code,
    }
    if config.expiring_offline_tokens:
        payload["expiring"] = 1

    try:
        if http_client is not None:
            response = await http_client.post(url, json=payload)
        else:
            async with httpx.AsyncClient() as client:
                response = await client.post(url, json=payload)
    except httpx.RequestError as e:
        raise OAuthError(f"Token exchange failed: {e}", status_code=502) from e

    if response.status_code != 200:
        raise OAuthError(
            f"Token exchange failed: {response.status_code}", status_code=502
        )

    data = response.json()
    access_token = data.get("access_token")
    if not isinstance(access_token, str) or not access_token:
        raise OAuthError("Token exchange response is missing access_token", status_code=502)

    now = datetime.now(UTC)
    return {
        "access_token": access_token,
        "scope": data.get("scope") or "",
        "expires": _expiry_iso(data.get("expires_in"), now),
        "refresh_token": data.get("refresh_token"),
        "refresh_token_expires": _expiry_iso(data.get("refresh_token_expires_in"), now),
    }
