"""Tests for CLI output formatting."""

import json

from quotebridge.cli.output import format_quote_table, format_session_table
from quotebridge.db.models import Quote, ShopSession
from tests.helpers import SHOP, iso_offset


def _session(**overrides) -> ShopSession:
    fields = {
        "id": f"offline_{SHOP}",
        "shop": SHOP,
        "is_online": False,
        "scope": "write_draft_orders",
        "expires": None,
        "access_token": "shpat_hidden",
        "created_at": "2026-01-01T00:00:00+00:00",
    }
    fields.update(overrides)
    return ShopSession(**fields)


class TestFormatSessionTable:

    def test_json_masks_id_and_omits_token(self):
        rows = json.loads(format_session_table([_session()], as_json=True))

        assert rows[0]["id"] == "offline_..."
        assert rows[0]["has_token"] is True
        assert "shpat_hidden" not in json.dumps(rows)

    def test_table_hides_token(self):
        output = format_session_table([_session(expires=iso_offset(days=-1))])
        assert "shpat_hidden" not in output
        assert "Sessions" in output

    def test_empty(self):
        assert format_session_table([]) == "No sessions found."


class TestFormatQuoteTable:

    def test_json_fields(self):
        quote = Quote(
            id="7f1c",
            shopify_draft_order_id="gid://shopify/DraftOrder/1",
            shop=SHOP,
            email="buyer@example.com",
            po_number="PO-1",
            status="CREATED",
            created_at="2026-01-01T00:00:00+00:00",
        )

        rows = json.loads(format_quote_table([quote], as_json=True))

        assert rows[0]["id"] == "7f1c"
        assert rows[0]["po_number"] == "PO-1"
        assert rows[0]["status"] == "CREATED"

    def test_empty(self):
        assert format_quote_table([]) == "No quotes found."
