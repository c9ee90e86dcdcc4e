"""Quote orchestration: request -> Shopify draft order -> local record.

Each call runs one linear pipeline:

1. validate the request structure (no remote call on failure)
2. resolve an offline credential for the shop
3. create the draft order with ``draftOrderCreate``
4. attach purchase-order metafields, one ``metafieldsSet`` call per field
5. insert a Quote row
6. return the quote id, draft order id and invoice URL

Nothing is compensated: if step 4 or 5 fails after Shopify created the draft
order, the draft order stays in Shopify without a local record.

Example:
    service = QuoteService(db, client_factory=make_client_factory("2025-10"))
    result = await service.create_quote(payload)
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.orm import Session

from quotebridge.db.models import Quote, QuoteStatus
from quotebridge.errors import (
    InvalidInputError,
    RemoteValidationError,
    RestrictedDataAccessError,
    UpstreamProtocolError,
)
from quotebridge.services.session_store import SessionStore, normalize_shop_domain
from quotebridge.services.shopify_graphql import (
    DRAFT_ORDER_CREATE_MUTATION,
    METAFIELDS_SET_MUTATION,
    ClientFactory,
)
from quotebridge.utils.redaction import redact_for_logging

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Missing required fields: shop, email, and lineItems are required"
INVALID_LINE_ITEM_MESSAGE = "Each lineItem must have variantId and quantity > 0"

METAFIELD_NAMESPACE = "quote"

ADDRESS_FIELDS = (
    "address1",
    "address2",
    "city",
    "province",
    "country",
    "zip",
    "firstName",
    "lastName",
    "phone",
)


@dataclass(frozen=True)
class LineItem:
    variant_id: str
    quantity: int


@dataclass
class QuoteRequest:
    """Validated inbound quote request."""

    shop: str
    email: str
    line_items: list[LineItem]
    shipping_address: dict[str, Any] | None = None
    notes: str | None = None
    po_number: str | None = None
    po_file_url: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "QuoteRequest":
        """Build a request from the decoded JSON body.

        Raises:
            InvalidInputError: If shop, email or lineItems are missing, or a
                line item lacks a variantId or a positive integer quantity.
        """
        if not isinstance(payload, dict):
            raise InvalidInputError("Request body must be a JSON object")

        shop = payload.get("shop")
        email = payload.get("email")
        raw_items = payload.get("lineItems")
        if (
            not shop
            or not isinstance(shop, str)
            or not email
            or not isinstance(email, str)
            or not isinstance(raw_items, list)
            or not raw_items
        ):
            raise InvalidInputError(MISSING_FIELDS_MESSAGE)

        line_items = [_parse_line_item(item) for item in raw_items]

        shipping_address = payload.get("shippingAddress")
        if shipping_address is not None and not isinstance(shipping_address, dict):
            raise InvalidInputError("shippingAddress must be an object")

        return cls(
            shop=shop,
            email=email,
            line_items=line_items,
            shipping_address=shipping_address,
            notes=_optional_text(payload.get("notes")),
            po_number=_optional_text(payload.get("poNumber")),
            po_file_url=_optional_text(payload.get("poFileUrl")),
        )


@dataclass
class QuoteResult:
    quote_id: str
    draft_order_id: str
    invoice_url: str | None
    draft_order_name: str | None = None
    metafields: list[dict[str, Any]] = field(default_factory=list)


def _parse_line_item(item: Any) -> LineItem:
    if not isinstance(item, dict):
        raise InvalidInputError(INVALID_LINE_ITEM_MESSAGE)
    variant_id = item.get("variantId")
    quantity = item.get("quantity")
    if not variant_id or not isinstance(variant_id, str):
        raise InvalidInputError(INVALID_LINE_ITEM_MESSAGE)
    # bool is an int subclass; reject it explicitly.
    if isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
        raise InvalidInputError(INVALID_LINE_ITEM_MESSAGE)
    # JSON numbers may arrive as whole floats such as 2.0.
    if (isinstance(quantity, float) and not quantity.is_integer()) or quantity <= 0:
        raise InvalidInputError(INVALID_LINE_ITEM_MESSAGE)
    return LineItem(variant_id=variant_id, quantity=int(quantity))


def _optional_text(value: Any) -> str | None:
    if not value:
        return None
    return value if isinstance(value, str) else str(value)


def build_shipping_address(address: dict[str, Any]) -> dict[str, str]:
    """Map a request address to MailingAddressInput, defaulting to ""."""
    mapped = {name: address.get(name) or "" for name in ADDRESS_FIELDS}
    mapped["zip"] = address.get("zip") or address.get("postalCode") or ""
    return mapped


def build_draft_order_input(request: QuoteRequest) -> dict[str, Any]:
    """Build the DraftOrderInput variables for draftOrderCreate."""
    draft_input: dict[str, Any] = {
        "email": request.email,
        "lineItems": [
            {"variantId": item.variant_id, "quantity": item.quantity}
            for item in request.line_items
        ],
    }
    if request.shipping_address is not None:
        draft_input["shippingAddress"] = build_shipping_address(request.shipping_address)
    if request.notes:
        draft_input["note"] = request.notes
    return draft_input


def build_metafield_inputs(
    draft_order_id: str,
    po_number: str | None,
    po_file_url: str | None,
) -> list[dict[str, str]]:
    """Ordered metafield inputs, one per supplied purchase-order field."""
    metafields = []
    if po_number:
        metafields.append({
            "namespace": METAFIELD_NAMESPACE,
            "key": "po_number",
            "value": po_number,
            "type": "single_line_text_field",
            "ownerId": draft_order_id,
        })
    if po_file_url:
        metafields.append({
            "namespace": METAFIELD_NAMESPACE,
            "key": "po_file_url",
            "value": po_file_url,
            "type": "url",
            "ownerId": draft_order_id,
        })
    return metafields


def extract_draft_order(response: dict[str, Any]) -> dict[str, Any]:
    """Pull the created draft order out of a draftOrderCreate response.

    Raises:
        UpstreamProtocolError: The response lacks data.draftOrderCreate, or
            carries neither a draft order nor a userErrors list.
        RemoteValidationError: Shopify reported userErrors.
        RestrictedDataAccessError: No draft order and no userErrors, which
            happens when protected customer data hides the created order.
    """
    data = response.get("data") if isinstance(response, dict) else None
    payload = data.get("draftOrderCreate") if isinstance(data, dict) else None
    if not isinstance(payload, dict):
        logger.error("Invalid GraphQL response: %s", json.dumps(response))
        raise UpstreamProtocolError("Invalid response from Shopify API", details=response)

    user_errors = payload.get("userErrors")
    if user_errors:
        raise RemoteValidationError(user_errors)

    draft_order = payload.get("draftOrder")
    if not draft_order:
        if isinstance(user_errors, list):
            logger.warning(
                "Draft order created but cannot be read due to protected customer data restrictions"
            )
            raise RestrictedDataAccessError()
        logger.error("No draft order in response: %s", json.dumps(response))
        raise UpstreamProtocolError("Draft order was not created", details=payload)

    return draft_order


class QuoteService:
    """Creates Shopify draft orders from quote requests and records them.

    Collaborators are injected so tests can substitute fakes:
    the DB session backs both the credential store and the quote log, and
    ``client_factory`` builds a GraphQL client for the resolved credential.
    """

    def __init__(
        self,
        db: Session,
        client_factory: ClientFactory,
        store: SessionStore | None = None,
    ) -> None:
        self._db = db
        self._client_factory = client_factory
        self._store = store or SessionStore(db)

    async def create_quote(self, payload: Any) -> QuoteResult:
        """Run the quote pipeline for one decoded request body."""
        request = QuoteRequest.from_payload(payload)
        shop = normalize_shop_domain(request.shop)

        credential = self._store.find_active_credential(shop)
        client = self._client_factory(credential)

        draft_input = build_draft_order_input(request)
        logger.info(
            "Creating draft order with input: %s",
            json.dumps(redact_for_logging(draft_input)),
        )
        response = await client.call(DRAFT_ORDER_CREATE_MUTATION, {"input": draft_input})
        draft_order = extract_draft_order(response)
        draft_order_id = draft_order["id"]

        metafields = build_metafield_inputs(
            draft_order_id, request.po_number, request.po_file_url
        )
        for metafield in metafields:
            result = await client.call(METAFIELDS_SET_MUTATION, {"metafields": [metafield]})
            self._log_metafield_errors(metafield, result)

        quote = Quote(
            shopify_draft_order_id=draft_order_id,
            shop=shop,
            email=request.email,
            po_number=request.po_number,
            po_file_url=request.po_file_url,
            status=QuoteStatus.CREATED.value,
        )
        self._db.add(quote)
        self._db.commit()
        self._db.refresh(quote)
        logger.info("Quote %s recorded for draft order %s", quote.id, draft_order_id)

        return QuoteResult(
            quote_id=quote.id,
            draft_order_id=draft_order_id,
            invoice_url=draft_order.get("invoiceUrl"),
            draft_order_name=draft_order.get("name"),
            metafields=metafields,
        )

    @staticmethod
    def _log_metafield_errors(metafield: dict[str, str], result: dict[str, Any]) -> None:
        data = result.get("data") or {}
        user_errors = (data.get("metafieldsSet") or {}).get("userErrors") or []
        if user_errors:
            logger.warning(
                "metafieldsSet reported userErrors for %s.%s: %s",
                metafield["namespace"], metafield["key"], user_errors,
            )
