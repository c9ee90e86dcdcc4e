"""Shared test helpers."""

from tests.helpers.shopify_fakes import (
    SHOP,
    FakeGraphQLClient,
    draft_order_response,
    iso_offset,
    metafields_set_response,
)

__all__ = [
    "SHOP",
    "FakeGraphQLClient",
    "draft_order_response",
    "iso_offset",
    "metafields_set_response",
]
