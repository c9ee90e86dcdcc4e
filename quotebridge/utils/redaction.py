"""Scrubbing of Shopify credentials from logs and client-facing messages.

Three things pass through here before they reach process output:

- inbound request headers and quote payloads (``redact_for_logging``)
- stored session ids (``mask_identifier``)
- exception text echoed back to the storefront (``sanitize_error_message``)

Admin API tokens travel as ``X-Shopify-Access-Token`` and have a
recognisable ``shp??_`` prefix, so both key names and raw values are
matched.
"""

import re
from typing import Any

REDACTED = "***REDACTED***"

# Key fragments, compared after lowercasing and dropping "-" and "_", so
# "X-Shopify-Access-Token", "accessToken" and "access_token" all match.
SENSITIVE_KEY_FRAGMENTS = frozenset({
    "token",
    "secret",
    "password",
    "authorization",
    "cookie",
    "hmac",
    "apikey",
    "credentials",
})

_SHOPIFY_TOKEN = re.compile(r"\bshp[a-z]{2}_[A-Za-z0-9]+")

_KEYWORD = r"(?:access[_-]?token|refresh[_-]?token|client[_-]?secret|api[_-]?key|token|secret|password)"
_SECRET_IN_TEXT = re.compile(
    r"(?i)"
    r"X-Shopify-Access-Token\s*:\s*\S+"
    r"|Authorization\s*:\s*Bearer\s+\S+"
    r'|"' + _KEYWORD + r'"\s*:\s*"[^"]*"'
    r'|' + _KEYWORD + r'\s*[=:]\s*(?:"[^"]*"|\S+)'
)


def _normalize_key(key: Any) -> str:
    return str(key).lower().replace("-", "").replace("_", "")


def is_sensitive_key(key: Any, fragments: frozenset[str] = SENSITIVE_KEY_FRAGMENTS) -> bool:
    normalized = _normalize_key(key)
    return any(fragment in normalized for fragment in fragments)


def _redact_value(value: Any, fragments: frozenset[str]) -> Any:
    if isinstance(value, dict):
        return redact_for_logging(value, fragments)
    if isinstance(value, (list, tuple)):
        return [_redact_value(item, fragments) for item in value]
    return value


def redact_for_logging(
    obj: dict,
    fragments: frozenset[str] = SENSITIVE_KEY_FRAGMENTS,
) -> dict:
    """Copy of ``obj`` with credential-bearing values replaced.

    Nested dicts are walked at any depth, including inside lists. The input
    is left untouched.
    """
    return {
        key: REDACTED if is_sensitive_key(key, fragments) else _redact_value(value, fragments)
        for key, value in obj.items()
    }


def mask_identifier(value: str | None, visible: int = 8) -> str:
    """Show only the first ``visible`` characters of an identifier."""
    if not value:
        return ""
    if len(value) <= visible:
        return value
    return f"{value[:visible]}..."


def sanitize_error_message(msg: str | None, max_length: int = 2000) -> str | None:
    """Strip tokens and secrets from text bound for an HTTP response.

    Header-style and key=value secrets are replaced first, then any bare
    Shopify token left in the text. The result is cut to ``max_length``
    characters, ending in "..." when truncated.
    """
    if msg is None:
        return None
    cleaned = _SHOPIFY_TOKEN.sub(REDACTED, _SECRET_IN_TEXT.sub(REDACTED, msg))
    if len(cleaned) <= max_length:
        return cleaned
    return cleaned[: max_length - 3] + "..."
