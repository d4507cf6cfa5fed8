"""Crosswatch CLI - Entry point for the xwatch command."""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import typer
from rich.console import Console

from crosswatch import __version__
from crosswatch.cli.output import print_alert_list, print_cycle_summary, print_history_summary
from crosswatch.cli.subscribers import notify_app, watch_app

app = typer.Typer(
    name="xwatch",
    help="Crosswatch - daily moving-average crossover alerts",
    add_completion=False,
)
app.add_typer(watch_app, name="watch")
app.add_typer(notify_app, name="notify")
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold green]crosswatch[/bold green] version {__version__}")
        raise typer.Exit()


def _market_data(config):
    """Build the provider client, exiting when no API key is configured."""
    from crosswatch.data.alphavantage import MarketDataClient

    try:
        return MarketDataClient.from_config(config)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print(
            f"[yellow]Set the {config.alpha_vantage.api_key_env} environment variable.[/yellow]"
        )
        raise typer.Exit(1) from e


def _build_job(config):
    from crosswatch.db.factory import create_sqlite_stores
    from crosswatch.scheduler.job import CrossoverCheckJob

    config.ensure_data_dir()
    stores = create_sqlite_stores(config.database_path)
    return CrossoverCheckJob.from_config(config, stores, _market_data(config))


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(  # noqa: ARG001
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Crosswatch - daily moving-average crossover alerts."""
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def run(
    no_initial: bool = typer.Option(
        False, "--no-initial", help="Skip the check shortly after start"
    ),
) -> None:
    """Run the daily scheduler in the foreground."""
    from crosswatch.core.config import get_settings
    from crosswatch.core.logging import setup_logging
    from crosswatch.scheduler.runner import CrossoverCheckScheduler

    config = get_settings()
    setup_logging(config.log_level, config.log_file)
    job = _build_job(config)
    scheduler = CrossoverCheckScheduler.from_config(job, config.scheduler)
    if no_initial:
        scheduler.initial_delay_seconds = None

    console.print(
        f"[bold]Crossover scheduler[/bold] - daily at "
        f"{config.scheduler.market_open.strftime('%H:%M')} {config.scheduler.timezone}"
    )
    console.print("[dim]Press Ctrl+C to stop[/dim]")
    try:
        scheduler.run_forever()
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped.[/yellow]")


@app.command()
def check() -> None:
    """Run one crossover check cycle now."""
    from crosswatch.core.config import get_settings
    from crosswatch.core.logging import setup_logging

    config = get_settings()
    setup_logging(config.log_level, config.log_file)
    job = _build_job(config)
    summary = job.run_cycle()
    if summary is None:
        console.print("[yellow]A check is already running.[/yellow]")
        raise typer.Exit(1)
    print_cycle_summary(summary, console)


@app.command()
def history(
    symbol: str = typer.Argument(..., help="Symbol to analyze"),
    limit: int = typer.Option(5, "--limit", "-n", help="Crossovers to list"),
) -> None:
    """Show crossovers in a symbol's full price/average history."""
    from crosswatch.analysis.crossover import summarize_history
    from crosswatch.core.config import get_settings
    from crosswatch.errors import ProviderError

    config = get_settings()
    client = _market_data(config)
    try:
        records = client.get_merged_history(symbol)
    except ProviderError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from e

    print_history_summary(summarize_history(symbol.strip().upper(), records), console, limit)

    info = client.cache_info(symbol)
    console.print(
        f"[dim]Cache: daily {'yes' if info['daily_cached'] else 'no'}, "
        f"SMA {'yes' if info['sma_cached'] else 'no'} "
        f"({info['entries']} entries, TTL {info['ttl_hours']:g}h)[/dim]"
    )


@app.command()
def alerts(
    subject_id: int = typer.Argument(..., help="Subject identifier"),
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum alerts to show"),
) -> None:
    """Show a subject's alert history."""
    from crosswatch.core.config import get_settings
    from crosswatch.db.factory import create_sqlite_stores

    config = get_settings()
    config.ensure_data_dir()
    stores = create_sqlite_stores(config.database_path)
    print_alert_list(stores.alerts.list_alerts(subject_id, limit=limit), console)


@app.command()
def status() -> None:
    """Show configuration and storage status."""
    from crosswatch.core.config import get_settings
    from crosswatch.db.sqlite.connection import Database
    from crosswatch.scheduler.runner import next_run_time

    config = get_settings()
    sched = config.scheduler

    console.print("[bold]Crosswatch Status[/bold]")
    console.print(f"Version: {__version__}")
    console.print(f"Database: {config.database_path}")

    if config.alpha_vantage.get_api_key():
        console.print(f"Provider key: [green]set[/green] ({config.alpha_vantage.api_key_env})")
    else:
        console.print(f"Provider key: [red]missing[/red] ({config.alpha_vantage.api_key_env})")

    upcoming = next_run_time(datetime.now(timezone.utc), sched.market_open, ZoneInfo(sched.timezone))
    console.print(f"Next scheduled check: {upcoming.strftime('%Y-%m-%d %H:%M %Z')}")
    console.print(f"Dispatched kinds: {', '.join(k.value for k in sched.dispatch_kinds)}")

    if not config.database_path.exists():
        console.print("[yellow]No database yet. Add a subscriber with 'xwatch notify set'.[/yellow]")
        return

    db = Database(config.database_path)
    try:
        console.print(f"Subscribers: {db.get_row_count('subscribers')}")
        console.print(f"Watched symbols: {db.get_row_count('watchlist')}")
        console.print(f"Alerts recorded: {db.get_row_count('alert_history')}")
    finally:
        db.close()


if __name__ == "__main__":
    app()
