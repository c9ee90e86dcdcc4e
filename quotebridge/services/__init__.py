"""Service layer for QuoteBridge.

Provides the credential store, the Shopify GraphQL client, the quote
orchestrator and the OAuth install helpers.
"""

from quotebridge.services.quote_service import QuoteRequest, QuoteResult, QuoteService
from quotebridge.services.session_store import (
    Credential,
    SessionStore,
    normalize_shop_domain,
)
from quotebridge.services.shopify_graphql import ShopifyGraphQLClient, make_client_factory

__all__ = [
    "QuoteService",
    "QuoteRequest",
    "QuoteResult",
    "SessionStore",
    "Credential",
    "normalize_shop_domain",
    "ShopifyGraphQLClient",
    "make_client_factory",
]
