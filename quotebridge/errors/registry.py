"""Stable E-XXXX codes for every failure the quote and install flows report.

Codes are grouped by leading digit:
- E-1xxx: Request input errors
- E-3xxx: Shopify API errors
- E-4xxx: System/internal errors
- E-5xxx: Authentication errors

The default client-facing message of each domain exception is rendered from
its template here, and the code is echoed to callers as ``errorCode``.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    INPUT = "input"
    SHOPIFY_API = "shopify_api"
    SYSTEM = "system"
    AUTH = "auth"


@dataclass(frozen=True)
class ErrorCode:
    """One registered failure: its message template and operator remediation."""

    code: str
    category: ErrorCategory
    title: str
    message_template: str
    remediation: str


ERROR_REGISTRY: dict[str, ErrorCode] = {
    # Input errors (E-1xxx)
    "E-1001": ErrorCode(
        code="E-1001",
        category=ErrorCategory.INPUT,
        title="Invalid Quote Request",
        message_template="{details}",
        remediation="Send shop, email and at least one line item with a variantId and positive quantity.",
    ),
    # Shopify API errors (E-3xxx)
    "E-3001": ErrorCode(
        code="E-3001",
        category=ErrorCategory.SHOPIFY_API,
        title="Draft Order Rejected",
        message_template="Failed to create draft order",
        remediation="Correct the fields reported in userErrors and retry.",
    ),
    "E-3002": ErrorCode(
        code="E-3002",
        category=ErrorCategory.SHOPIFY_API,
        title="Protected Customer Data",
        message_template=(
            "Draft order was created but cannot be accessed due to protected customer "
            "data restrictions. Please configure your app for protected customer data "
            "access in Shopify Partners."
        ),
        remediation="See https://shopify.dev/docs/apps/launch/protected-customer-data",
    ),
    "E-3003": ErrorCode(
        code="E-3003",
        category=ErrorCategory.SHOPIFY_API,
        title="Unexpected Shopify Response",
        message_template="Invalid response from Shopify API",
        remediation="Inspect the details payload; the Admin API response shape was not recognised.",
    ),
    "E-3004": ErrorCode(
        code="E-3004",
        category=ErrorCategory.SHOPIFY_API,
        title="GraphQL Errors",
        message_template="GraphQL errors: {errors}",
        remediation="Check the query, variables and API version against the Admin API schema.",
    ),
    "E-3005": ErrorCode(
        code="E-3005",
        category=ErrorCategory.SHOPIFY_API,
        title="Shopify Request Failed",
        message_template="GraphQL request failed: {status} {body}",
        remediation="Retry later. Check Shopify status if the issue persists.",
    ),
    # System errors (E-4xxx)
    "E-4001": ErrorCode(
        code="E-4001",
        category=ErrorCategory.SYSTEM,
        title="Internal Error",
        message_template="Internal server error",
        remediation="Check the service logs.",
    ),
    # Auth errors (E-5xxx)
    "E-5001": ErrorCode(
        code="E-5001",
        category=ErrorCategory.AUTH,
        title="Shop Not Authenticated",
        message_template="Shop not authenticated or session expired. Please reinstall the app.",
        remediation="Install or reinstall the app on the shop to create an offline session.",
    ),
    "E-5002": ErrorCode(
        code="E-5002",
        category=ErrorCategory.AUTH,
        title="Access Token Rejected",
        message_template=(
            "Invalid access token. Session may be from before app reinstall. "
            "Please reinstall the app."
        ),
        remediation="Reinstall the app, then remove stale sessions with 'quotebridge sessions cleanup'.",
    ),
    "E-5003": ErrorCode(
        code="E-5003",
        category=ErrorCategory.AUTH,
        title="OAuth Failed",
        message_template="{details}",
        remediation="Restart the install flow from /auth?shop=<shop>.",
    ),
}


def get_error(code: str) -> ErrorCode | None:
    """Look up a registered code; None when unknown."""
    return ERROR_REGISTRY.get(code)


def get_errors_by_category(category: ErrorCategory) -> list[ErrorCode]:
    return [error for error in ERROR_REGISTRY.values() if error.category is category]


def format_message(code: str, **context: object) -> str:
    """Render the registered message template for a code.

    Missing placeholders leave the template as-is.
    """
    error_def = get_error(code)
    if error_def is None:
        return f"Unknown error: {code}"
    try:
        return error_def.message_template.format(**context)
    except KeyError:
        return error_def.message_template
