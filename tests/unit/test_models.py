"""Unit tests for Pydantic data models."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from crosswatch.models import (
    AlertKind,
    AlertRecord,
    CrossoverEvent,
    CrossoverKind,
    DailyBar,
    Evaluation,
    MergedRecord,
    Position,
    Subscriber,
)


class TestDailyBar:
    """Tests for DailyBar model."""

    def test_create_bar(self) -> None:
        bar = DailyBar(
            date=date(2024, 1, 2),
            open=Decimal("470.0"),
            high=Decimal("475.0"),
            low=Decimal("468.0"),
            close=Decimal("472.5"),
            volume=1_000_000,
        )
        assert bar.close == Decimal("472.5")

    def test_negative_price_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DailyBar(
                date=date(2024, 1, 2),
                open=Decimal("-1"),
                high=Decimal("1"),
                low=Decimal("1"),
                close=Decimal("1"),
            )

    def test_bar_is_immutable(self) -> None:
        bar = DailyBar(
            date=date(2024, 1, 2), open=Decimal("1"), high=Decimal("1"), low=Decimal("1"), close=Decimal("1")
        )
        with pytest.raises(ValidationError):
            bar.close = Decimal("2")


class TestMergedRecord:
    def test_has_average(self) -> None:
        base = dict(date=date(2024, 1, 2), open=1, high=1, low=1, close=1)
        assert MergedRecord(**base, moving_average=Decimal("1")).has_average is True
        assert MergedRecord(**base).has_average is False


class TestSignals:
    """Tests for signal and alert models."""

    def test_alert_kind_for_position(self) -> None:
        assert AlertKind.for_position(Position.ABOVE) == AlertKind.BULLISH
        assert AlertKind.for_position(Position.BELOW) == AlertKind.BEARISH
        with pytest.raises(ValueError):
            AlertKind.for_position(Position.UNKNOWN)

    def test_evaluation_kind(self) -> None:
        evaluation = Evaluation(
            current_position=Position.BELOW, previous_position=Position.ABOVE, transitioned=True
        )
        assert evaluation.kind == AlertKind.BEARISH

    def test_crossover_index_positive(self) -> None:
        with pytest.raises(ValidationError):
            CrossoverEvent(kind=CrossoverKind.ABOVE_CROSS, date=date(2024, 1, 2), price=Decimal("1"), index=0)

    def test_alert_record_values(self) -> None:
        alert = AlertRecord(
            subject_id=1,
            symbol="SPY",
            kind="bearish",
            price=Decimal("95"),
            moving_average_value=Decimal("100"),
            sent_at=datetime(2024, 1, 2, tzinfo=timezone.utc),
        )
        assert alert.kind == AlertKind.BEARISH
        assert alert.delivery_succeeded is False
        assert alert.id is None

    def test_masked_token(self) -> None:
        """Tokens are never displayed in full."""
        subscriber = Subscriber(subject_id=1, bot_token="123456789:AAEabcdefghijk", chat_id="5")
        assert subscriber.masked_token == "123456...hijk"
        assert Subscriber(subject_id=1, bot_token="short", chat_id="5").masked_token == "***"
