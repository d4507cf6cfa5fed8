"""CLI commands for subscribers and watchlists."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console

from crosswatch.cli.output import print_subscriber_list

watch_app = typer.Typer(help="Watchlist commands")
notify_app = typer.Typer(help="Notification endpoint commands")
console = Console()


def _stores():
    from crosswatch.core.config import get_settings
    from crosswatch.db.factory import create_sqlite_stores

    config = get_settings()
    config.ensure_data_dir()
    return create_sqlite_stores(config.database_path)


def _require_subscriber(stores, subject_id: int):
    subscriber = stores.subscribers.get_subscriber(subject_id)
    if subscriber is None:
        console.print(f"[red]Error: subject {subject_id} has no notification endpoint.[/red]")
        console.print("[yellow]Configure one with: xwatch notify set SUBJECT TOKEN CHAT_ID[/yellow]")
        raise typer.Exit(1)
    return subscriber


@watch_app.command("add")
def add_symbols(
    subject_id: int = typer.Argument(..., help="Subject identifier"),
    symbols: list[str] = typer.Argument(..., help="Symbols to watch"),
) -> None:
    """Add symbols to a subject's watchlist."""
    stores = _stores()
    for symbol in symbols:
        try:
            added = stores.subscribers.add_symbol(subject_id, symbol)
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1) from e
        if added:
            console.print(f"[green]✓[/green] Watching {symbol.strip().upper()}")
        else:
            console.print(f"[dim]{symbol.strip().upper()} already watched[/dim]")


@watch_app.command("remove")
def remove_symbol(
    subject_id: int = typer.Argument(..., help="Subject identifier"),
    symbol: str = typer.Argument(..., help="Symbol to stop watching"),
) -> None:
    """Remove a symbol and its stored position."""
    stores = _stores()
    if not stores.subscribers.remove_symbol(subject_id, symbol):
        console.print(f"[yellow]{symbol.upper()} was not on the watchlist.[/yellow]")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Removed {symbol.upper()}")


@watch_app.command("list")
def list_watchlists(
    subject_id: Optional[int] = typer.Argument(None, help="Only this subject"),
) -> None:
    """Show enabled subscribers (or one subject) and the symbols they watch."""
    stores = _stores()
    if subject_id is not None:
        subscriber = stores.subscribers.get_subscriber(subject_id)
        symbols = stores.subscribers.list_symbols(subject_id)
        if subscriber is None:
            console.print(f"[bold]Subject {subject_id}[/bold] [dim](no endpoint)[/dim]")
            console.print(", ".join(symbols) if symbols else "[yellow]No symbols watched.[/yellow]")
            return
        subscribers = [subscriber]
    else:
        subscribers = stores.subscribers.list_enabled_subscribers()

    watchlists = {s.subject_id: stores.subscribers.list_symbols(s.subject_id) for s in subscribers}
    print_subscriber_list(subscribers, watchlists, console)


@notify_app.command("set")
def set_endpoint(
    subject_id: int = typer.Argument(..., help="Subject identifier"),
    bot_token: str = typer.Argument(..., help="Telegram bot token"),
    chat_id: str = typer.Argument(..., help="Telegram chat id"),
    enabled: bool = typer.Option(True, "--enabled/--disabled", help="Enable alerts"),
) -> None:
    """Create or replace a subject's Telegram endpoint."""
    from crosswatch.models.signal import Subscriber

    stores = _stores()
    subscriber = Subscriber(
        subject_id=subject_id, bot_token=bot_token, chat_id=chat_id, enabled=enabled
    )
    stores.subscribers.save_subscriber(subscriber)
    console.print(
        f"[green]✓[/green] Endpoint saved for subject {subject_id} "
        f"(chat {chat_id}, token {subscriber.masked_token})"
    )


@notify_app.command("enable")
def enable_endpoint(subject_id: int = typer.Argument(..., help="Subject identifier")) -> None:
    """Enable alerts for a subject."""
    stores = _stores()
    _require_subscriber(stores, subject_id)
    stores.subscribers.set_enabled(subject_id, True)
    console.print(f"[green]✓[/green] Alerts enabled for subject {subject_id}")


@notify_app.command("disable")
def disable_endpoint(subject_id: int = typer.Argument(..., help="Subject identifier")) -> None:
    """Disable alerts for a subject."""
    stores = _stores()
    _require_subscriber(stores, subject_id)
    stores.subscribers.set_enabled(subject_id, False)
    console.print(f"[green]✓[/green] Alerts disabled for subject {subject_id}")


@notify_app.command("remove")
def remove_endpoint(subject_id: int = typer.Argument(..., help="Subject identifier")) -> None:
    """Delete a subject's endpoint. The watchlist is kept."""
    stores = _stores()
    if not stores.subscribers.delete_subscriber(subject_id):
        console.print(f"[yellow]Subject {subject_id} has no notification endpoint.[/yellow]")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Endpoint removed for subject {subject_id}")


@notify_app.command("test")
def test_endpoint(subject_id: int = typer.Argument(..., help="Subject identifier")) -> None:
    """Send a test message to a subject's endpoint."""
    from crosswatch.alerts.notifier import NotificationDispatcher
    from crosswatch.core.config import get_settings
    from crosswatch.errors import NotificationDeliveryError

    stores = _stores()
    subscriber = _require_subscriber(stores, subject_id)
    config = get_settings()
    dispatcher = NotificationDispatcher(
        api_base=config.telegram.api_base,
        timeout=config.telegram.timeout_seconds,
    )
    try:
        dispatcher.send_test_message(subscriber)
    except NotificationDeliveryError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from e
    console.print(f"[green]✓[/green] Test message sent to chat {subscriber.chat_id}")
