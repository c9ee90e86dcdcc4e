"""FastAPI routes for the Shopify OAuth install flow.

GET /auth?shop=...   -> redirect the merchant to Shopify's authorize page
GET /auth/callback   -> verify, exchange the code, store the offline session

The offline session written here is the credential the quote endpoint
resolves for the shop.
"""

import logging
import secrets

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from quotebridge.config import AppConfig, get_app_config
from quotebridge.db.connection import get_db
from quotebridge.db.models import OAuthState
from quotebridge.errors import OAuthError
from quotebridge.services.session_store import SessionStore
from quotebridge.services.shopify_oauth import (
    build_authorize_url,
    exchange_code_for_token,
    sanitize_shop,
    verify_callback_hmac,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("")
def begin_install(
    shop: str | None = None,
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config),
) -> RedirectResponse:
    """Start the install flow for a shop."""
    shop_domain = sanitize_shop(shop, config.custom_shop_domains)
    state = secrets.token_hex(16)
    db.add(OAuthState(state=state, shop=shop_domain))
    db.commit()

    logger.info("Starting OAuth for %s", shop_domain)
    return RedirectResponse(
        url=build_authorize_url(config, shop_domain, state), status_code=302
    )


@router.get("/callback")
async def oauth_callback(
    request: Request,
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config),
) -> RedirectResponse:
    """Complete the install flow and persist the offline session."""
    params = list(request.query_params.multi_items())
    if not verify_callback_hmac(params, config.api_secret):
        raise OAuthError("Invalid OAuth HMAC")

    shop = request.query_params.get("shop")
    code = request.query_params.get("code")
    state_value = request.query_params.get("state")
    if not shop or not code or not state_value:
        raise OAuthError("Missing required OAuth callback params: shop, code, state")

    shop_domain = sanitize_shop(shop, config.custom_shop_domains)
    oauth_state = db.get(OAuthState, state_value)
    if oauth_state is None:
        raise OAuthError("Invalid OAuth state")
    if oauth_state.shop != shop_domain:
        raise OAuthError("OAuth state does not match the shop domain")

    token = await exchange_code_for_token(config, shop_domain, code)

    db.delete(oauth_state)
    SessionStore(db).save_offline_session(
        shop=shop_domain,
        access_token=token["access_token"],
        scope=token["scope"],
        state=state_value,
        expires=token["expires"],
        refresh_token=token["refresh_token"],
        refresh_token_expires=token["refresh_token_expires"],
    )
    logger.info("Installed on %s with scope %s", shop_domain, token["scope"])

    return RedirectResponse(url=f"{config.app_url}?shop={shop_domain}", status_code=302)
