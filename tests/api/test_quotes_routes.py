"""Tests for the /api/quotes endpoint."""

from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session

from quotebridge.db.models import Quote
from quotebridge.errors import ShopifyTransportError
from tests.helpers import (
    SHOP,
    draft_order_response,
    iso_offset,
    metafields_set_response,
)


def _quotes(db: Session) -> list[Quote]:
    return list(db.scalars(select(Quote)).all())


class TestCreateQuote:
    """POST /api/quotes."""

    def test_success_returns_ids_and_records_quote(
        self, client: TestClient, db_session, make_session, fake_graphql, quote_payload
    ):
        make_session()
        fake_graphql.queue(draft_order_response())

        resp = client.post("/api/quotes", json=quote_payload)

        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["draftOrderId"] == "gid://shopify/DraftOrder/1001"
        assert data["invoiceUrl"] == "https://test-shop.myshopify.com/invoices/abc"

        quotes = _quotes(db_session)
        assert len(quotes) == 1
        assert quotes[0].id == data["quoteId"]
        assert quotes[0].status == "CREATED"
        assert quotes[0].shop == SHOP
        assert quotes[0].email == "buyer@example.com"

    def test_missing_email_is_400_without_remote_call(
        self, client: TestClient, make_session, fake_graphql, quote_payload
    ):
        make_session()
        del quote_payload["email"]

        resp = client.post("/api/quotes", json=quote_payload)

        assert resp.status_code == 400
        assert resp.json()["error"] == (
            "Missing required fields: shop, email, and lineItems are required"
        )
        assert resp.json()["errorCode"] == "E-1001"
        assert fake_graphql.calls == []

    def test_empty_line_items_is_400(self, client: TestClient, fake_graphql, quote_payload):
        quote_payload["lineItems"] = []
        resp = client.post("/api/quotes", json=quote_payload)
        assert resp.status_code == 400
        assert fake_graphql.calls == []

    def test_zero_quantity_is_400(self, client: TestClient, fake_graphql, quote_payload):
        quote_payload["lineItems"] = [{"variantId": "gid://shopify/ProductVariant/1", "quantity": 0}]
        resp = client.post("/api/quotes", json=quote_payload)
        assert resp.status_code == 400
        assert resp.json()["error"] == "Each lineItem must have variantId and quantity > 0"

    def test_empty_variant_id_is_400(self, client: TestClient, quote_payload):
        quote_payload["lineItems"] = [{"variantId": "", "quantity": 1}]
        resp = client.post("/api/quotes", json=quote_payload)
        assert resp.status_code == 400

    def test_invalid_json_is_400(self, client: TestClient):
        resp = client.post(
            "/api/quotes",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json()["errorCode"] == "E-1001"

    def test_non_object_body_is_400(self, client: TestClient):
        resp = client.post("/api/quotes", json=["shop"])
        assert resp.status_code == 400

    def test_no_session_is_401(self, client: TestClient, fake_graphql, quote_payload):
        resp = client.post("/api/quotes", json=quote_payload)

        assert resp.status_code == 401
        assert resp.json()["error"] == (
            "Shop not authenticated or session expired. Please reinstall the app."
        )
        assert fake_graphql.calls == []

    def test_only_expired_session_without_scope_is_401(
        self, client: TestClient, make_session, quote_payload
    ):
        make_session(scope="write_products", expires=iso_offset(hours=-1))
        resp = client.post("/api/quotes", json=quote_payload)
        assert resp.status_code == 401

    def test_user_errors_are_echoed_and_nothing_persisted(
        self, client: TestClient, db_session, make_session, fake_graphql, quote_payload
    ):
        make_session()
        user_errors = [{"field": ["lineItems", "0", "variantId"], "message": "Variant not found"}]
        fake_graphql.queue({
            "data": {"draftOrderCreate": {"draftOrder": None, "userErrors": user_errors}}
        })

        resp = client.post("/api/quotes", json=quote_payload)

        assert resp.status_code == 400
        data = resp.json()
        assert data["error"] == "Failed to create draft order"
        assert data["userErrors"] == user_errors
        assert _quotes(db_session) == []

    def test_null_draft_order_without_user_errors_is_403(
        self, client: TestClient, db_session, make_session, fake_graphql, quote_payload
    ):
        make_session()
        fake_graphql.queue({
            "data": {"draftOrderCreate": {"draftOrder": None, "userErrors": []}}
        })

        resp = client.post("/api/quotes", json=quote_payload)

        assert resp.status_code == 403
        assert "protected-customer-data" in resp.json()["details"]
        assert _quotes(db_session) == []

    def test_missing_draft_order_create_is_500_with_details(
        self, client: TestClient, make_session, fake_graphql, quote_payload
    ):
        make_session()
        fake_graphql.queue({"data": {}})

        resp = client.post("/api/quotes", json=quote_payload)

        assert resp.status_code == 500
        assert resp.json()["error"] == "Invalid response from Shopify API"
        assert resp.json()["details"] == {"data": {}}

    def test_transport_failure_is_internal_error(
        self, client: TestClient, make_session, fake_graphql, quote_payload
    ):
        make_session()
        fake_graphql.queue(ShopifyTransportError(502, "Bad Gateway"))

        resp = client.post("/api/quotes", json=quote_payload)

        assert resp.status_code == 500
        data = resp.json()
        assert data["error"] == "Internal server error"
        assert data["message"] == "GraphQL request failed: 502 Bad Gateway"

    def test_unexpected_exception_is_generic_500(
        self, client: TestClient, make_session, fake_graphql, quote_payload
    ):
        make_session()
        fake_graphql.queue(RuntimeError("boom"))

        resp = client.post("/api/quotes", json=quote_payload)

        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal server error", "message": "boom"}

    def test_identical_requests_create_two_records(
        self, client: TestClient, db_session, make_session, fake_graphql, quote_payload
    ):
        make_session()
        fake_graphql.queue(
            draft_order_response(draft_id="gid://shopify/DraftOrder/1"),
            draft_order_response(draft_id="gid://shopify/DraftOrder/2"),
        )

        first = client.post("/api/quotes", json=quote_payload)
        second = client.post("/api/quotes", json=quote_payload)

        assert first.status_code == second.status_code == 200
        assert first.json()["quoteId"] != second.json()["quoteId"]
        assert len(_quotes(db_session)) == 2
        assert fake_graphql.mutation_names() == ["draftOrderCreate", "draftOrderCreate"]

    def test_po_fields_attach_one_metafield_call_each(
        self, client: TestClient, db_session, make_session, fake_graphql, quote_payload
    ):
        make_session()
        fake_graphql.queue(
            draft_order_response(),
            metafields_set_response(),
            metafields_set_response(),
        )
        quote_payload["poNumber"] = "PO-42"
        quote_payload["poFileUrl"] = "https://files.example.com/po-42.pdf"

        resp = client.post("/api/quotes", json=quote_payload)

        assert resp.status_code == 200
        assert fake_graphql.mutation_names() == [
            "draftOrderCreate", "metafieldsSet", "metafieldsSet",
        ]
        keys = [v["metafields"][0]["key"] for _, v in fake_graphql.calls[1:]]
        assert keys == ["po_number", "po_file_url"]
        quote = _quotes(db_session)[0]
        assert quote.po_number == "PO-42"
        assert quote.po_file_url == "https://files.example.com/po-42.pdf"

    def test_empty_shipping_address_reaches_shopify(
        self, client: TestClient, make_session, fake_graphql, quote_payload
    ):
        make_session()
        fake_graphql.queue(draft_order_response())
        quote_payload["shippingAddress"] = {}

        resp = client.post("/api/quotes", json=quote_payload)

        assert resp.status_code == 200
        sent = fake_graphql.calls[0][1]["input"]["shippingAddress"]
        assert sent["zip"] == ""
        assert len(sent) == 9

    def test_shop_domain_is_normalized(
        self, client: TestClient, make_session, fake_graphql, quote_payload
    ):
        make_session()
        fake_graphql.queue(draft_order_response())
        quote_payload["shop"] = f"https://{SHOP}/"

        resp = client.post("/api/quotes", json=quote_payload)

        assert resp.status_code == 200
        assert fake_graphql.credentials[0].shop_domain == SHOP


class TestQuoteCors:
    """CORS headers and method handling on /api/quotes."""

    def test_options_returns_204_with_headers(self, client: TestClient):
        resp = client.options("/api/quotes", headers={"Origin": "https://store.example.com"})

        assert resp.status_code == 204
        assert resp.headers["Access-Control-Allow-Origin"] == "*"
        assert resp.headers["Access-Control-Allow-Methods"] == "POST, OPTIONS"
        assert resp.headers["Access-Control-Allow-Headers"] == "Content-Type"
        assert resp.headers["Access-Control-Max-Age"] == "86400"

    def test_listed_origin_is_echoed(self, client: TestClient, app_config):
        app_config.allowed_origins = ["https://a.example.com", "https://b.example.com"]
        resp = client.options("/api/quotes", headers={"Origin": "https://b.example.com"})
        assert resp.headers["Access-Control-Allow-Origin"] == "https://b.example.com"

    def test_unlisted_origin_gets_first_listed(self, client: TestClient, app_config):
        app_config.allowed_origins = ["https://a.example.com", "https://b.example.com"]
        resp = client.options("/api/quotes", headers={"Origin": "https://evil.example.com"})
        assert resp.headers["Access-Control-Allow-Origin"] == "https://a.example.com"

    def test_error_responses_carry_cors_headers(self, client: TestClient, quote_payload):
        resp = client.post("/api/quotes", json=quote_payload)
        assert resp.status_code == 401
        assert resp.headers["Access-Control-Allow-Origin"] == "*"

    def test_get_is_405(self, client: TestClient):
        resp = client.get("/api/quotes")

        assert resp.status_code == 405
        assert resp.json() == {"error": "Method not allowed. Use POST to create quotes."}
        assert resp.headers["Access-Control-Allow-Methods"] == "POST, OPTIONS"

    def test_delete_is_405(self, client: TestClient):
        assert client.delete("/api/quotes").status_code == 405


def test_health(client: TestClient):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
