"""CORS headers for the storefront-facing quote endpoint.

The allow-list comes from ALLOWED_ORIGINS. A "*" entry allows any origin;
otherwise a listed request Origin is echoed back, and an unlisted one gets
the first configured origin.
"""

CORS_ALLOW_METHODS = "POST, OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type"
CORS_MAX_AGE_SECONDS = 86400


def resolve_allowed_origin(origin: str | None, allowed_origins: list[str]) -> str:
    if not allowed_origins or "*" in allowed_origins:
        return "*"
    if origin and origin in allowed_origins:
        return origin
    return allowed_origins[0]


def cors_headers(origin: str | None, allowed_origins: list[str]) -> dict[str, str]:
    """Build the CORS response headers for a request Origin."""
    return {
        "Access-Control-Allow-Origin": resolve_allowed_origin(origin, allowed_origins),
        "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
        "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
        "Access-Control-Max-Age": str(CORS_MAX_AGE_SECONDS),
    }
