"""Shopify GraphQL Admin API client.

Issues one authenticated POST per call to
``https://<shop>/admin/api/<version>/graphql.json`` and converts transport
and protocol failures into typed domain errors:

- HTTP 401 -> InvalidCredentialError (token likely predates a reinstall)
- other non-2xx or network failure -> ShopifyTransportError
- 2xx with a top-level ``errors`` key, even an empty list -> RemoteProtocolError

There are no retries and no timeout override; each call is a single
best-effort request.
"""

import json
import logging
from collections.abc import Callable
from typing import Any

import httpx

from quotebridge.config import DEFAULT_API_VERSION
from quotebridge.errors import (
    InvalidCredentialError,
    RemoteProtocolError,
    ShopifyTransportError,
)
from quotebridge.services.session_store import Credential
from quotebridge.utils.redaction import redact_for_logging

logger = logging.getLogger(__name__)

DRAFT_ORDER_CREATE_MUTATION = """#graphql
mutation draftOrderCreate($input: DraftOrderInput!) {
  draftOrderCreate(input: $input) {
    draftOrder {
      id
      name
      invoiceUrl
      status
    }
    userErrors {
      field
      message
    }
  }
}"""

METAFIELDS_SET_MUTATION = """#graphql
mutation metafieldsSet($metafields: [MetafieldsSetInput!]!) {
  metafieldsSet(metafields: $metafields) {
    metafields {
      id
      namespace
      key
      value
    }
    userErrors {
      field
      message
    }
  }
}"""


class ShopifyGraphQLClient:
    """Admin API GraphQL client bound to one shop and access token.

    Example:
        client = ShopifyGraphQLClient("mystore.myshopify.com", "shpat_xxxx")
        result = await client.call(DRAFT_ORDER_CREATE_MUTATION, {"input": {...}})
    """

    def __init__(
        self,
        shop_domain: str,
        access_token: str,
        api_version: str = DEFAULT_API_VERSION,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._shop_domain = shop_domain
        self._access_token = access_token
        self._api_version = api_version
        self._http_client = http_client

    @property
    def endpoint(self) -> str:
        return f"https://{self._shop_domain}/admin/api/{self._api_version}/graphql.json"

    def _get_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": self._access_token,
        }

    async def _post(self, body: dict[str, Any]) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.post(
                self.endpoint, headers=self._get_headers(), json=body
            )
        async with httpx.AsyncClient() as client:
            return await client.post(self.endpoint, headers=self._get_headers(), json=body)

    async def call(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute a GraphQL operation and return the decoded payload.

        Args:
            query: GraphQL document.
            variables: Operation variables.

        Returns:
            The response JSON, unchanged.

        Raises:
            InvalidCredentialError: Shopify answered 401.
            ShopifyTransportError: Any other non-2xx status or a network error.
            RemoteProtocolError: The payload carries a top-level errors list.
        """
        try:
            response = await self._post({"query": query, "variables": variables or {}})
        except httpx.RequestError as e:
            raise ShopifyTransportError(None, str(e)) from e

        if not 200 <= response.status_code < 300:
            if response.status_code == 401:
                raise InvalidCredentialError()
            raise ShopifyTransportError(response.status_code, response.text)

        result = response.json()
        logger.info("GraphQL Response Status: %s", response.status_code)
        if isinstance(result, dict):
            logger.debug("GraphQL Response: %s", json.dumps(redact_for_logging(result)))

        errors = result.get("errors") if isinstance(result, dict) else None
        if errors is not None:
            logger.error("GraphQL errors found: %s", errors)
            if not isinstance(errors, list):
                errors = [errors]
            raise RemoteProtocolError(errors, json.dumps(errors))

        return result


ClientFactory = Callable[[Credential], ShopifyGraphQLClient]


def make_client_factory(api_version: str = DEFAULT_API_VERSION) -> ClientFactory:
    """Return a factory building a client for a resolved credential."""

    def factory(credential: Credential) -> ShopifyGraphQLClient:
        return ShopifyGraphQLClient(
            shop_domain=credential.shop_domain,
            access_token=credential.access_token,
            api_version=api_version,
        )

    return factory
