"""Rich output formatting for CLI commands."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from crosswatch.models.signal import AlertKind, CrossoverKind

if TYPE_CHECKING:
    from crosswatch.analysis.crossover import HistorySummary
    from crosswatch.models.signal import AlertRecord, Subscriber
    from crosswatch.scheduler.job import CycleSummary


def _format_money(value: Optional[Decimal]) -> str:
    """Format a value as currency."""
    if value is None:
        return "[dim]N/A[/dim]"
    return f"${float(value):,.2f}"


def print_history_summary(summary: HistorySummary, console: Console, limit: int = 5) -> None:
    """Print the crossover summary of one symbol's merged history."""
    console.print()
    console.print(
        Panel(f"[bold cyan]📊 Crossover History: {summary.symbol}[/bold cyan]", expand=False)
    )

    info_table = Table(show_header=False, box=None, padding=(0, 2))
    info_table.add_column("Label", style="dim")
    info_table.add_column("Value")

    info_table.add_row("Trading days:", str(summary.total_days))
    info_table.add_row("Days with average:", str(summary.days_with_average))
    if summary.first_date and summary.last_date:
        info_table.add_row("Period:", f"{summary.first_date} to {summary.last_date}")
    info_table.add_row("Latest close:", _format_money(summary.latest_price))
    info_table.add_row("Latest average:", _format_money(summary.latest_average))

    if summary.price_above_average is None:
        side = "[dim]unknown[/dim]"
    elif summary.price_above_average:
        side = "[green]above[/green]"
    else:
        side = "[red]below[/red]"
    info_table.add_row("Price vs average:", side)
    info_table.add_row("Crossovers:", str(len(summary.crossovers)))

    console.print(info_table)
    console.print()

    recent = summary.recent_crossovers(limit)
    if not recent:
        console.print("[yellow]No crossovers in the available history.[/yellow]")
        return

    console.print(f"[bold]📈 Last {len(recent)} Crossovers[/bold]")
    console.print("─" * 40)

    table = Table(show_header=True, box=None, padding=(0, 2))
    table.add_column("Date")
    table.add_column("Direction")
    table.add_column("Close", justify="right")

    for event in reversed(recent):
        if event.kind == CrossoverKind.ABOVE_CROSS:
            direction = "[green]above[/green]"
        else:
            direction = "[red]below[/red]"
        table.add_row(event.date.isoformat(), direction, _format_money(event.price))

    console.print(table)


def print_alert_list(alerts: list[AlertRecord], console: Console) -> None:
    """Print alert history, newest first."""
    if not alerts:
        console.print("[yellow]No alerts recorded.[/yellow]")
        return

    table = Table(show_header=True, title="Alert History")
    table.add_column("ID", style="dim")
    table.add_column("Sent (UTC)")
    table.add_column("Symbol", style="bold")
    table.add_column("Kind")
    table.add_column("Price", justify="right")
    table.add_column("Average", justify="right")
    table.add_column("Delivered")

    for alert in alerts:
        kind_color = "red" if alert.kind == AlertKind.BEARISH else "green"
        delivered = "[green]yes[/green]" if alert.delivery_succeeded else "[red]no[/red]"
        table.add_row(
            str(alert.id) if alert.id is not None else "-",
            alert.sent_at.strftime("%Y-%m-%d %H:%M"),
            alert.symbol,
            f"[{kind_color}]{alert.kind.value}[/{kind_color}]",
            _format_money(alert.price),
            _format_money(alert.moving_average_value),
            delivered,
        )

    console.print(table)


def print_subscriber_list(
    subscribers: list[Subscriber],
    watchlists: dict[int, list[str]],
    console: Console,
) -> None:
    """Print subscribers with their watchlists."""
    if not subscribers:
        console.print("[yellow]No subscribers configured.[/yellow]")
        return

    table = Table(show_header=True, title="Subscribers")
    table.add_column("Subject", style="bold")
    table.add_column("Chat")
    table.add_column("Token", style="dim")
    table.add_column("Enabled")
    table.add_column("Symbols")

    for subscriber in subscribers:
        symbols = watchlists.get(subscriber.subject_id, [])
        table.add_row(
            str(subscriber.subject_id),
            subscriber.chat_id,
            subscriber.masked_token,
            "[green]yes[/green]" if subscriber.enabled else "[dim]no[/dim]",
            ", ".join(symbols) if symbols else "[dim]-[/dim]",
        )

    console.print(table)


def print_cycle_summary(summary: CycleSummary, console: Console) -> None:
    """Print the counters of one check cycle."""
    console.print()
    console.print(Panel("[bold cyan]🔔 Crossover Check[/bold cyan]", expand=False))

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Label", style="dim")
    table.add_column("Value", justify="right")

    table.add_row("Subjects:", str(summary.subjects))
    table.add_row("Symbols checked:", str(summary.symbols_checked))
    table.add_row("Transitions:", str(summary.transitions))
    table.add_row("Alerts sent:", f"[green]{summary.alerts_sent}[/green]")
    if summary.alerts_failed:
        table.add_row("Alerts failed:", f"[red]{summary.alerts_failed}[/red]")
    table.add_row("Suppressed:", str(summary.suppressed))
    table.add_row("Skipped (kind):", str(summary.skipped_kind))
    if summary.errors:
        table.add_row("Errors:", f"[red]{summary.errors}[/red]")

    console.print(table)
    if summary.failed_symbols:
        console.print(f"[yellow]Failed symbols: {', '.join(summary.failed_symbols)}[/yellow]")
