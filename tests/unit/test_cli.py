"""Tests for the xwatch CLI commands.

Settings point at a temporary data directory; the market data client is
replaced so no network calls are made.
"""

from __future__ import annotations

from decimal import Decimal

import pytest
from typer.testing import CliRunner

import crosswatch.data.alphavantage as alphavantage_mod
from crosswatch import __version__
from crosswatch.cli.main import app
from crosswatch.core.config import get_settings, reset_settings
from crosswatch.db.factory import create_sqlite_stores
from crosswatch.models.signal import AlertKind, AlertRecord

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Fresh settings rooted in a temp directory."""
    monkeypatch.setenv("CROSSWATCH_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("ALPHA_VANTAGE_API_KEY", raising=False)
    reset_settings()
    yield tmp_path
    reset_settings()


class _FakeClient:
    def __init__(self, records) -> None:
        self._records = records

    def get_merged_history(self, symbol: str):
        return self._records

    def cache_info(self, symbol: str) -> dict:
        return {"daily_cached": True, "sma_cached": True, "ttl_hours": 12.0, "entries": 2}


class TestBasics:
    """Tests for top-level commands."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_status_without_database(self) -> None:
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "missing" in result.output
        assert "No database yet" in result.output

    def test_check_requires_api_key(self, monkeypatch) -> None:
        """Without a provider key the command exits with an error."""
        monkeypatch.setattr("crosswatch.core.logging.setup_logging", lambda *args, **kwargs: None)
        result = runner.invoke(app, ["check"])
        assert result.exit_code == 1
        assert "ALPHA_VANTAGE_API_KEY" in result.output


class TestWatchAndNotify:
    """Tests for watchlist and endpoint management."""

    def test_watch_add_list_remove(self) -> None:
        result = runner.invoke(app, ["watch", "add", "1", "spy", "qqq"])
        assert result.exit_code == 0
        assert "Watching SPY" in result.output

        duplicate = runner.invoke(app, ["watch", "add", "1", "SPY"])
        assert "already watched" in duplicate.output

        listed = runner.invoke(app, ["watch", "list", "1"])
        assert "SPY, QQQ" in listed.output

        removed = runner.invoke(app, ["watch", "remove", "1", "spy"])
        assert removed.exit_code == 0

        missing = runner.invoke(app, ["watch", "remove", "1", "spy"])
        assert missing.exit_code == 1

    def test_notify_set_and_disable(self) -> None:
        result = runner.invoke(app, ["notify", "set", "1", "123456:SECRETTOKEN", "42"])
        assert result.exit_code == 0
        assert "SECRETTOKEN" not in result.output

        stores = create_sqlite_stores(get_settings().database_path)
        assert stores.subscribers.get_subscriber(1).chat_id == "42"

        disabled = runner.invoke(app, ["notify", "disable", "1"])
        assert disabled.exit_code == 0
        assert stores.subscribers.list_enabled_subscribers() == []

    def test_notify_remove(self) -> None:
        """Removing an endpoint deletes it; a second removal fails."""
        runner.invoke(app, ["notify", "set", "1", "123456:SECRETTOKEN", "42"])
        runner.invoke(app, ["watch", "add", "1", "SPY"])

        removed = runner.invoke(app, ["notify", "remove", "1"])
        assert removed.exit_code == 0
        assert "Endpoint removed" in removed.output

        stores = create_sqlite_stores(get_settings().database_path)
        assert stores.subscribers.get_subscriber(1) is None
        assert stores.subscribers.list_symbols(1) == ["SPY"]

        again = runner.invoke(app, ["notify", "remove", "1"])
        assert again.exit_code == 1

    def test_notify_unknown_subject(self) -> None:
        result = runner.invoke(app, ["notify", "enable", "9"])
        assert result.exit_code == 1


class TestHistoryAndAlerts:
    """Tests for read-only inspection commands."""

    def test_history(self, monkeypatch, records_from) -> None:
        records = records_from([95, 96, 101, 99, 104], [100] * 5)
        monkeypatch.setattr(
            alphavantage_mod.MarketDataClient,
            "from_config",
            classmethod(lambda cls, config: _FakeClient(records)),
        )

        result = runner.invoke(app, ["history", "spy"])

        assert result.exit_code == 0
        assert "SPY" in result.output
        assert "2024-01-05" in result.output
        assert "Cache: daily yes, SMA yes (2 entries, TTL 12h)" in result.output

    def test_alerts_empty(self) -> None:
        result = runner.invoke(app, ["alerts", "1"])
        assert result.exit_code == 0
        assert "No alerts recorded" in result.output

    def test_alerts_listed(self, clock) -> None:
        stores = create_sqlite_stores(get_settings().database_path)
        stores.alerts.add_alert(
            AlertRecord(
                subject_id=1,
                symbol="SPY",
                kind=AlertKind.BEARISH,
                price=Decimal("95"),
                moving_average_value=Decimal("100"),
                sent_at=clock.now,
                delivery_succeeded=True,
            )
        )

        result = runner.invoke(app, ["alerts", "1"])
        assert result.exit_code == 0
        assert "SPY" in result.output
