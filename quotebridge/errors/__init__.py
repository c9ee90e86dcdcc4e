"""Error handling framework for QuoteBridge.

This package provides:
- Error code registry with E-XXXX format codes
- Typed domain exceptions mapped to HTTP statuses

Error categories:
- E-1xxx: Request input errors
- E-3xxx: Shopify API errors
- E-4xxx: System/internal errors
- E-5xxx: Authentication errors
"""

from quotebridge.errors.domain import (
    INTERNAL_ERROR_MESSAGE,
    DomainError,
    InvalidCredentialError,
    InvalidInputError,
    OAuthError,
    RemoteProtocolError,
    RemoteValidationError,
    RestrictedDataAccessError,
    ShopifyTransportError,
    UnauthenticatedError,
    UpstreamProtocolError,
)
from quotebridge.errors.registry import (
    ERROR_REGISTRY,
    ErrorCategory,
    ErrorCode,
    format_message,
    get_error,
    get_errors_by_category,
)

__all__ = [
    # Registry
    "ErrorCode",
    "ErrorCategory",
    "ERROR_REGISTRY",
    "format_message",
    "get_error",
    "get_errors_by_category",
    # Domain exceptions
    "INTERNAL_ERROR_MESSAGE",
    "DomainError",
    "InvalidInputError",
    "UnauthenticatedError",
    "InvalidCredentialError",
    "ShopifyTransportError",
    "RemoteProtocolError",
    "RemoteValidationError",
    "RestrictedDataAccessError",
    "UpstreamProtocolError",
    "OAuthError",
]
