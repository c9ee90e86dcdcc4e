"""Typed domain exceptions for API error mapping.

Each exception carries its registry code and the HTTP status the quote
endpoint answers with, so routes convert failures to JSON without string
matching.

Usage:
    # In service layer
    raise UnauthenticatedError()

    # In route handler
    try:
        result = await service.create_quote(payload)
    except DomainError as e:
        return JSONResponse(status_code=e.status_code, content=e.to_body())
"""

from typing import Any

from quotebridge.errors.registry import format_message, get_error

INTERNAL_ERROR_MESSAGE = "Internal server error"


class DomainError(Exception):
    """Base exception for all domain errors. Maps to HTTP 500."""

    code = "E-4001"
    status_code = 500
    # Surface as a generic internal error with the message passed through.
    internal = False

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or format_message(self.code))

    @property
    def message(self) -> str:
        return str(self)

    @property
    def remediation(self) -> str | None:
        """Operator-facing fix from the registry, if the code is registered."""
        error_def = get_error(self.code)
        return error_def.remediation if error_def else None

    def to_body(self) -> dict[str, Any]:
        """Return the JSON error body for this failure."""
        if self.internal:
            return {
                "error": INTERNAL_ERROR_MESSAGE,
                "message": self.message,
                "errorCode": self.code,
            }
        return {"error": self.message, "errorCode": self.code}


class InvalidInputError(DomainError):
    """Missing or malformed quote request fields. Maps to HTTP 400."""

    code = "E-1001"
    status_code = 400


class UnauthenticatedError(DomainError):
    """No usable offline session for the shop. Maps to HTTP 401."""

    code = "E-5001"
    status_code = 401

    def __init__(self, shop: str | None = None) -> None:
        super().__init__()
        self.shop = shop


class InvalidCredentialError(DomainError):
    """Shopify rejected the access token (HTTP 401 upstream)."""

    code = "E-5002"
    internal = True


class ShopifyTransportError(DomainError):
    """Non-2xx response or network failure talking to Shopify."""

    code = "E-3005"
    internal = True

    def __init__(self, status: int | None, body: str) -> None:
        super().__init__(
            format_message(self.code, status=status if status is not None else "network", body=body)
        )
        self.status = status
        self.body = body


class RemoteProtocolError(DomainError):
    """A 2xx GraphQL response carrying a top-level errors list."""

    code = "E-3004"
    internal = True

    def __init__(self, errors: list[Any], rendered: str) -> None:
        super().__init__(format_message(self.code, errors=rendered))
        self.errors = errors


class RemoteValidationError(DomainError):
    """draftOrderCreate reported userErrors. Maps to HTTP 400."""

    code = "E-3001"
    status_code = 400

    def __init__(self, user_errors: list[dict[str, Any]]) -> None:
        super().__init__()
        self.user_errors = user_errors

    def to_body(self) -> dict[str, Any]:
        return {
            "error": self.message,
            "userErrors": self.user_errors,
            "errorCode": self.code,
        }


class RestrictedDataAccessError(DomainError):
    """Draft order likely created but unreadable. Maps to HTTP 403."""

    code = "E-3002"
    status_code = 403

    def to_body(self) -> dict[str, Any]:
        return {
            "error": self.message,
            "details": "See https://shopify.dev/docs/apps/launch/protected-customer-data",
            "errorCode": self.code,
        }


class UpstreamProtocolError(DomainError):
    """Shopify answered without the expected data shape. Maps to HTTP 500."""

    code = "E-3003"

    def __init__(self, message: str | None = None, details: Any = None) -> None:
        super().__init__(message)
        self.details = details

    def to_body(self) -> dict[str, Any]:
        return {"error": self.message, "details": self.details, "errorCode": self.code}


class OAuthError(DomainError):
    """Install/callback failure. Maps to HTTP 400 unless told otherwise."""

    code = "E-5003"
    status_code = 400

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code
