"""CLI output formatters for Rich tables and JSON.

Access tokens and refresh tokens are never rendered; session ids are
truncated.
"""

import json
from datetime import UTC, datetime

from rich.console import Console
from rich.table import Table

from quotebridge.db.models import Quote, ShopSession
from quotebridge.errors.registry import ErrorCode
from quotebridge.services.session_store import parse_iso_timestamp
from quotebridge.utils.redaction import mask_identifier

console = Console()


def _render(table: Table) -> str:
    with console.capture() as capture:
        console.print(table)
    return capture.get()


def _session_expired(record: ShopSession) -> bool:
    expires = parse_iso_timestamp(record.expires)
    return expires is not None and expires <= datetime.now(UTC)


def format_session_table(sessions: list[ShopSession], as_json: bool = False) -> str:
    """Format stored sessions as a Rich table or JSON."""
    if as_json:
        return json.dumps(
            [
                {
                    "id": mask_identifier(s.id),
                    "shop": s.shop,
                    "is_online": s.is_online,
                    "scope": s.scope,
                    "expires": s.expires,
                    "has_token": bool(s.access_token),
                    "created_at": s.created_at,
                }
                for s in sessions
            ],
            indent=2,
        )

    if not sessions:
        return "No sessions found."

    table = Table(title="Sessions", show_lines=True)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Shop", style="white")
    table.add_column("Online")
    table.add_column("Scope")
    table.add_column("Expires")
    table.add_column("Token")

    for s in sessions:
        expires = s.expires[:19] if s.expires else "never"
        if _session_expired(s):
            expires = f"[red]{expires}[/red]"
        table.add_row(
            mask_identifier(s.id),
            s.shop,
            "yes" if s.is_online else "no",
            s.scope or "-",
            expires,
            "[green]present[/green]" if s.access_token else "[red]missing[/red]",
        )
    return _render(table)


def format_quote_table(quotes: list[Quote], as_json: bool = False) -> str:
    """Format stored quote records as a Rich table or JSON."""
    if as_json:
        return json.dumps(
            [
                {
                    "id": q.id,
                    "shop": q.shop,
                    "email": q.email,
                    "shopify_draft_order_id": q.shopify_draft_order_id,
                    "po_number": q.po_number,
                    "po_file_url": q.po_file_url,
                    "status": q.status,
                    "created_at": q.created_at,
                }
                for q in quotes
            ],
            indent=2,
        )

    if not quotes:
        return "No quotes found."

    table = Table(title="Quotes", show_lines=True)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Shop")
    table.add_column("Email")
    table.add_column("Draft Order")
    table.add_column("PO")
    table.add_column("Status")
    table.add_column("Created")

    for q in quotes:
        table.add_row(
            q.id[:12],
            q.shop,
            q.email,
            q.shopify_draft_order_id,
            q.po_number or "-",
            f"[green]{q.status}[/green]",
            q.created_at[:19] if q.created_at else "-",
        )
    return _render(table)


def format_error_table(errors: list[ErrorCode]) -> str:
    """Format registered error codes with their titles and remediation."""
    table = Table(title="Error Codes", show_lines=True)
    table.add_column("Code", style="cyan", no_wrap=True)
    table.add_column("Category")
    table.add_column("Title", style="bold")
    table.add_column("Remediation")

    for e in errors:
        table.add_row(e.code, e.category.value, e.title, e.remediation)
    return _render(table)


def format_error_detail(error: ErrorCode) -> str:
    """Format one error code as indented Rich markup lines."""
    lines = [
        f"[bold cyan]{error.code}[/bold cyan]  [bold]{error.title}[/bold]",
        f"  Category:    {error.category.value}",
        f"  Message:     {error.message_template}",
        f"  Remediation: {error.remediation}",
    ]
    return "\n".join(lines)
