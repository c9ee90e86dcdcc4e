"""Environment-driven application configuration.

Loads the Shopify app identity, OAuth scopes, API version and CORS
allow-list from the process environment into a validated Pydantic model.
Routes receive it through the ``get_app_config`` dependency so tests can
substitute their own instance.
"""

import logging
import os
from functools import lru_cache

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "2025-10"
DEFAULT_SCOPES = ["write_products", "write_draft_orders"]
DEFAULT_APP_URL = "http://localhost:8000"

# Named Admin API releases accepted in SHOPIFY_API_VERSION.
API_VERSION_ALIASES: dict[str, str] = {
    "October25": "2025-10",
    "July24": "2024-07",
    "January24": "2024-01",
}

_TRUTHY = {"1", "true", "yes", "on"}


def resolve_api_version(value: str | None) -> str:
    """Map a release alias or literal version to the URL segment.

    Literal ``YYYY-MM`` values pass through; unknown names fall back to
    the default release.
    """
    if not value:
        return DEFAULT_API_VERSION
    value = value.strip()
    if value in API_VERSION_ALIASES:
        return API_VERSION_ALIASES[value]
    if len(value) == 7 and value[4] == "-" and value.replace("-", "").isdigit():
        return value
    logger.warning("Unknown Shopify API version %r, using %s", value, DEFAULT_API_VERSION)
    return DEFAULT_API_VERSION


def _split_csv(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


class AppConfig(BaseModel):
    """Resolved runtime configuration for the Shopify app."""

    api_key: str = ""
    api_secret: str = ""
    scopes: list[str] = Field(default_factory=lambda: list(DEFAULT_SCOPES))
    app_url: str = DEFAULT_APP_URL
    api_version: str = DEFAULT_API_VERSION
    allowed_origins: list[str] = Field(default_factory=lambda: ["*"])
    custom_shop_domains: list[str] = Field(default_factory=list)
    expiring_offline_tokens: bool = True
    auth_path_prefix: str = "/auth"

    @field_validator("app_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("api_version")
    @classmethod
    def _resolve_version(cls, value: str) -> str:
        return resolve_api_version(value)

    @property
    def scopes_csv(self) -> str:
        return ",".join(self.scopes)

    @property
    def redirect_uri(self) -> str:
        return f"{self.app_url}{self.auth_path_prefix}/callback"


def _resolve_app_url() -> str:
    """SHOPIFY_APP_URL, then the Railway public domain, then localhost."""
    explicit = os.environ.get("SHOPIFY_APP_URL", "").strip()
    if explicit:
        return explicit
    railway_domain = os.environ.get("RAILWAY_PUBLIC_DOMAIN", "").strip()
    if railway_domain:
        return f"https://{railway_domain}"
    return DEFAULT_APP_URL


def load_app_config() -> AppConfig:
    """Build an AppConfig from the current environment.

    An unset or empty ALLOWED_ORIGINS means any origin; an unset or empty
    SCOPES means the default scope set.
    """
    scopes = _split_csv(os.environ.get("SCOPES", ""))
    origins = _split_csv(os.environ.get("ALLOWED_ORIGINS", ""))
    custom_domain = os.environ.get("SHOP_CUSTOM_DOMAIN", "").strip()
    expiring = os.environ.get("SHOPIFY_EXPIRING_OFFLINE_TOKENS", "true").strip().lower()

    config = AppConfig(
        api_key=os.environ.get("SHOPIFY_API_KEY", ""),
        api_secret=os.environ.get("SHOPIFY_API_SECRET", ""),
        scopes=scopes or list(DEFAULT_SCOPES),
        app_url=_resolve_app_url(),
        api_version=os.environ.get("SHOPIFY_API_VERSION", DEFAULT_API_VERSION),
        allowed_origins=origins or ["*"],
        custom_shop_domains=[custom_domain] if custom_domain else [],
        expiring_offline_tokens=expiring in _TRUTHY,
    )
    logger.info("Configured scopes: %s", config.scopes)
    logger.info("App URL: %s", config.app_url)
    return config


@lru_cache(maxsize=1)
def get_app_config() -> AppConfig:
    """FastAPI dependency returning the process-wide configuration."""
    return load_app_config()
