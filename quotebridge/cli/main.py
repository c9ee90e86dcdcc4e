"""QuoteBridge CLI: API server and stored-data maintenance.

Usage:
    quotebridge serve                        Run the API server
    quotebridge sessions list                List stored Shopify sessions
    quotebridge sessions cleanup SHOP        Delete every session for a shop
    quotebridge quotes list --shop SHOP      List recorded quotes
    quotebridge errors show E-5001           Explain an API errorCode
"""

import logging
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version
from typing import Optional

import typer
from rich.console import Console
from sqlalchemy import select

from quotebridge.cli.output import (
    format_error_detail,
    format_error_table,
    format_quote_table,
    format_session_table,
)
from quotebridge.db.connection import get_db_context, init_db
from quotebridge.db.models import Quote
from quotebridge.errors.registry import (
    ERROR_REGISTRY,
    ErrorCategory,
    get_error,
    get_errors_by_category,
)
from quotebridge.services.session_store import SessionStore, normalize_shop_domain

_log = logging.getLogger(__name__)

app = typer.Typer(
    name="quotebridge",
    help="Storefront quotes as Shopify draft orders",
    no_args_is_help=True,
)
sessions_app = typer.Typer(help="Manage stored Shopify sessions")
quotes_app = typer.Typer(help="Inspect recorded quotes")
errors_app = typer.Typer(help="Look up error codes returned by the API")

app.add_typer(sessions_app, name="sessions")
app.add_typer(quotes_app, name="quotes")
app.add_typer(errors_app, name="errors")

console = Console()


def _emit(output: str, as_json: bool) -> None:
    # JSON bypasses Rich markup and wrapping.
    if as_json:
        typer.echo(output)
    else:
        console.print(output)


@app.command()
def version():
    """Show QuoteBridge version."""
    try:
        v = _pkg_version("quotebridge")
    except PackageNotFoundError:
        v = "unknown"
    console.print(f"[bold]QuoteBridge[/bold] v{v}")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", help="Bind port"),
    log_level: str = typer.Option("info", "--log-level", help="Uvicorn log level"),
):
    """Run the QuoteBridge API server in the foreground."""
    import uvicorn

    console.print(f"Starting QuoteBridge on http://{host}:{port}")
    uvicorn.run(
        "quotebridge.api.main:app",
        host=host,
        port=port,
        workers=1,
        log_level=log_level,
        lifespan="on",
    )


# --- Sessions ---


@sessions_app.command("list")
def sessions_list(
    shop: Optional[str] = typer.Option(None, "--shop", help="Filter by shop domain"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List stored sessions without revealing tokens."""
    init_db()
    with get_db_context() as db:
        records = SessionStore(db).list_sessions(shop)
        output = format_session_table(records, as_json=json_output)
    _emit(output, json_output)


@sessions_app.command("cleanup")
def sessions_cleanup(
    shop: str = typer.Argument(..., help="Shop domain, e.g. my-shop.myshopify.com"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
):
    """Delete every stored session for a shop.

    The next quote request for the shop answers 401 until the app is
    reinstalled.
    """
    shop_domain = normalize_shop_domain(shop)
    if not yes:
        typer.confirm(f"Delete all sessions for {shop_domain}?", abort=True)

    init_db()
    with get_db_context() as db:
        deleted = SessionStore(db).delete_sessions(shop_domain)

    console.print(f"[green]Deleted {deleted} session(s)[/green] for {shop_domain}")
    if deleted:
        console.print("Reinstall the app to create a new offline session.")


# --- Quotes ---


@quotes_app.command("list")
def quotes_list(
    shop: Optional[str] = typer.Option(None, "--shop", help="Filter by shop domain"),
    limit: int = typer.Option(20, "--limit", "-n", min=1, help="Maximum rows"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List recorded quotes, newest first."""
    stmt = select(Quote).order_by(Quote.created_at.desc()).limit(limit)
    if shop:
        stmt = stmt.where(Quote.shop == normalize_shop_domain(shop))

    init_db()
    with get_db_context() as db:
        records = list(db.scalars(stmt).all())
        output = format_quote_table(records, as_json=json_output)
    _emit(output, json_output)


# --- Errors ---


@errors_app.command("list")
def errors_list(
    category: Optional[ErrorCategory] = typer.Option(
        None, "--category", "-c", help="Filter by category"
    ),
):
    """List registered error codes with remediation hints."""
    errors = get_errors_by_category(category) if category else list(ERROR_REGISTRY.values())
    console.print(format_error_table(errors))


@errors_app.command("show")
def errors_show(
    code: str = typer.Argument(..., help="Error code, e.g. E-5001"),
):
    """Explain an errorCode value from an API response."""
    error = get_error(code.upper())
    if error is None:
        console.print(f"[red]Unknown error code:[/red] {code}")
        raise typer.Exit(1)
    console.print(format_error_detail(error))


if __name__ == "__main__":
    app()
