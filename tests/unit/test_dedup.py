"""Tests for repeated-alert suppression."""

from datetime import timedelta
from decimal import Decimal

import pytest

from crosswatch.alerts.dedup import AlertDeduplicator
from crosswatch.models.signal import AlertKind, AlertRecord


def _alert(sent_at, kind: AlertKind = AlertKind.BEARISH, delivered: bool = True) -> AlertRecord:
    return AlertRecord(
        subject_id=1,
        symbol="SPY",
        kind=kind,
        price=Decimal("95"),
        moving_average_value=Decimal("100"),
        sent_at=sent_at,
        delivery_succeeded=delivered,
    )


class TestAlertDeduplicator:
    """Tests for AlertDeduplicator."""

    @pytest.fixture
    def dedup(self, stores, clock) -> AlertDeduplicator:
        return AlertDeduplicator(stores.alerts, clock=clock)

    def test_no_history_allows(self, dedup: AlertDeduplicator) -> None:
        """Without prior alerts nothing is suppressed."""
        assert dedup.should_suppress(1, "SPY", AlertKind.BEARISH) is False

    def test_recent_alert_suppresses(self, dedup: AlertDeduplicator, stores, clock) -> None:
        """An alert one day ago suppresses a new one."""
        stores.alerts.add_alert(_alert(clock.now - timedelta(days=1)))
        assert dedup.should_suppress(1, "SPY", AlertKind.BEARISH) is True

    def test_failed_delivery_still_suppresses(self, dedup: AlertDeduplicator, stores, clock) -> None:
        """Delivery outcome is ignored."""
        stores.alerts.add_alert(_alert(clock.now - timedelta(days=2), delivered=False))
        assert dedup.should_suppress(1, "SPY", AlertKind.BEARISH) is True

    def test_old_alert_does_not_suppress(self, dedup: AlertDeduplicator, stores, clock) -> None:
        """Alerts older than the lookback are ignored."""
        stores.alerts.add_alert(_alert(clock.now - timedelta(days=8)))
        assert dedup.should_suppress(1, "SPY", AlertKind.BEARISH) is False

    def test_window_boundary_is_exclusive(self, dedup: AlertDeduplicator, stores, clock) -> None:
        """An alert exactly at the window edge is outside it."""
        stores.alerts.add_alert(_alert(clock.now - timedelta(days=7)))
        assert dedup.should_suppress(1, "SPY", AlertKind.BEARISH) is False

    def test_other_kind_does_not_suppress(self, dedup: AlertDeduplicator, stores, clock) -> None:
        """A bullish alert does not block a bearish one."""
        stores.alerts.add_alert(_alert(clock.now - timedelta(hours=1), kind=AlertKind.BULLISH))
        assert dedup.should_suppress(1, "SPY", AlertKind.BEARISH) is False

    def test_other_symbol_and_subject(self, dedup: AlertDeduplicator, stores, clock) -> None:
        """Suppression is per subject and symbol."""
        stores.alerts.add_alert(_alert(clock.now - timedelta(hours=1)))
        assert dedup.should_suppress(1, "QQQ", AlertKind.BEARISH) is False
        assert dedup.should_suppress(2, "SPY", AlertKind.BEARISH) is False

    def test_window_slides_with_clock(self, dedup: AlertDeduplicator, stores, clock) -> None:
        """Once the clock passes the window the pair is allowed again."""
        stores.alerts.add_alert(_alert(clock.now))
        clock.advance(days=6, hours=23)
        assert dedup.should_suppress(1, "SPY", AlertKind.BEARISH) is True
        clock.advance(hours=2)
        assert dedup.should_suppress(1, "SPY", AlertKind.BEARISH) is False

    def test_custom_lookback(self, dedup: AlertDeduplicator, stores, clock) -> None:
        """The lookback window is a parameter."""
        stores.alerts.add_alert(_alert(clock.now - timedelta(days=2)))
        assert dedup.should_suppress(1, "SPY", AlertKind.BEARISH, timedelta(days=1)) is False
