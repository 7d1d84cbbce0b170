"""Typer-based CLI for the SURBTC REST client."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import typer
from rich.console import Console
from rich.table import Table

from .client import SurbtcClient
from .envelope import Envelope


def _load_settings(config_path: Optional[Path] = None):
    from .config import load_settings
    return load_settings(config_path)


def _configure_logging(log_dir: Path | None = None, secrets: tuple[str, ...] = ()):
    from .logging import configure_logging
    return configure_logging(log_dir, secrets)


def _secrets(settings) -> tuple[str, ...]:
    values = []
    if settings.credentials:
        values.append(settings.credentials.api_key.get_secret_value())
        values.append(settings.credentials.api_secret.get_secret_value())
    if settings.proxy.password:
        values.append(settings.proxy.password.get_secret_value())
    return tuple(values)


app = typer.Typer(help="SURBTC exchange REST client")
console = Console()
logger = logging.getLogger(__name__)


def run_cli(argv: list[str] | None = None) -> None:
    """Run CLI with optional argv parameter."""
    app(argv)


async def _call(settings, operation: Callable[[SurbtcClient], Awaitable[Envelope]]) -> Envelope:
    async with SurbtcClient.from_settings(settings) as client:
        return await operation(client)


def _execute(config: Optional[Path], operation: Callable[[SurbtcClient], Awaitable[Envelope]]) -> Envelope:
    """Run ``operation`` against a configured client and exit 1 on failure."""
    try:
        settings = _load_settings(config)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    _configure_logging(secrets=_secrets(settings))
    try:
        result = asyncio.run(_call(settings, operation))
    except Exception as e:
        logger.error("Request failed: %s", e, exc_info=True)
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not result.success:
        console.print(f"[red]Error:[/red] {result.error_type}")
        if result.data is not None:
            console.print_json(json.dumps(result.data, default=str))
        raise typer.Exit(1)
    return result


def _print_data(data: Any) -> None:
    console.print_json(json.dumps(data, default=str))


@app.command()
def markets(
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """List available markets."""
    result = _execute(config, lambda client: client.get_markets())
    _print_data(result.data)


@app.command()
def order_book(
    market_id: str = typer.Argument(..., help="Market id, e.g. btc-clp"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Show the order book of a market."""
    result = _execute(config, lambda client: client.get_order_book(market_id))
    _print_data(result.data)


@app.command()
def balances(
    currency: Optional[str] = typer.Argument(None, help="Currency to show"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Show account balances."""
    result = _execute(config, lambda client: client.get_balances(currency))
    _print_data(result.data)


@app.command()
def fee(
    market_id: str = typer.Argument(..., help="Market id"),
    type: str = typer.Option("bid", help="Order type (bid/ask)"),
    market_order: bool = typer.Option(False, help="Fee for market orders"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Show the fee percentage for an order type."""
    result = _execute(config, lambda client: client.get_exchange_fee(market_id, type, market_order))
    _print_data(result.data)


@app.command()
def quote(
    market_id: str = typer.Argument(..., help="Market id"),
    type: str = typer.Argument(..., help="Order type (bid/ask)"),
    amount: float = typer.Argument(..., help="Amount to quote"),
    reverse: bool = typer.Option(False, help="Quote the amount in the quote currency"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Get a quotation."""
    if reverse:
        result = _execute(config, lambda client: client.get_reverse_quotation(market_id, type, amount))
    else:
        result = _execute(config, lambda client: client.get_quotation(market_id, type, amount))
    _print_data(result.data)


@app.command()
def orders(
    market_id: str = typer.Argument(..., help="Market id"),
    state: Optional[str] = typer.Option(None, help="Only show orders in this state"),
    format_type: str = typer.Option("table", help="Output format (table/json)"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """List every order of a market."""
    result = _execute(config, lambda client: client.get_orders_by_state(market_id, state))

    if format_type == "json":
        _print_data(result.data)
        return

    listing = result.data["orders"]
    if not listing:
        console.print("[yellow]No orders found[/yellow]")
        return

    table = Table(title=f"Orders ({market_id})")
    table.add_column("ID", style="cyan")
    table.add_column("Type")
    table.add_column("State")
    table.add_column("Amount", justify="right")
    table.add_column("Limit", justify="right")
    for order in listing:
        table.add_row(
            str(order.get("id", "")),
            str(order.get("type", "")),
            str(order.get("state", "")),
            str(order.get("amount", "")),
            str(order.get("limit", "")),
        )
    console.print(table)
    console.print(f"\n[bold]Total:[/bold] {result.data['meta'].get('total_count')}")


@app.command()
def order(
    order_id: str = typer.Argument(..., help="Order id"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Show a single order."""
    result = _execute(config, lambda client: client.get_order(order_id))
    _print_data(result.data)


@app.command()
def cancel(
    order_id: str = typer.Argument(..., help="Order id"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Cancel an order."""
    result = _execute(config, lambda client: client.cancel_order(order_id))
    console.print(f"[green]✓ Order {order_id} canceling[/green]")
    _print_data(result.data)


@app.command()
def uuid(
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Generate a client-side UUID."""
    result = _execute(config, lambda client: client.generate_uuid())
    console.print(result.data["uuid"])


@app.command()
def config_show(
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Show the effective configuration with secrets masked."""
    try:
        settings = _load_settings(config)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    _print_data(settings.redacted())
