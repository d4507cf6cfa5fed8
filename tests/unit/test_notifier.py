"""Tests for Telegram notification dispatch."""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
import requests

from crosswatch.alerts.notifier import (
    NotificationDispatcher,
    format_alert_message,
    format_test_message,
)
from crosswatch.errors import NotificationDeliveryError
from crosswatch.models.signal import AlertKind, AlertRecord, Subscriber

SENT_AT = datetime(2024, 3, 15, 13, 31, 5, tzinfo=timezone.utc)


@pytest.fixture()
def subscriber() -> Subscriber:
    return Subscriber(subject_id=7, bot_token="123456:ABCDEFGHIJKLMN", chat_id="-100200")


@pytest.fixture()
def alert() -> AlertRecord:
    return AlertRecord(
        subject_id=7,
        symbol="SPY",
        kind=AlertKind.BEARISH,
        price=Decimal("498.123"),
        moving_average_value=Decimal("500.5"),
        sent_at=SENT_AT,
    )


def _response(body) -> MagicMock:
    response = MagicMock()
    response.status_code = 200
    response.json.return_value = body
    return response


class TestFormatting:
    """Tests for message rendering."""

    def test_bearish_message(self, alert: AlertRecord) -> None:
        """Bearish alerts name the downward cross and both values."""
        text = format_alert_message(alert)
        assert "📉" in text
        assert "<b>SPY</b> has crossed <b>BELOW</b> its 200-day SMA" in text
        assert "<code>$498.12</code>" in text
        assert "<code>$500.50</code>" in text
        assert "Bearish" in text
        assert "Fri, 15 Mar 2024 13:31:05 UTC" in text

    def test_bullish_message(self, alert: AlertRecord) -> None:
        """Bullish alerts use the upward variant."""
        text = format_alert_message(alert.model_copy(update={"kind": AlertKind.BULLISH}), sma_period=50)
        assert "📈" in text
        assert "<b>ABOVE</b> its 50-day SMA" in text
        assert "Bullish" in text

    def test_test_message(self) -> None:
        """The endpoint check message carries its send time."""
        text = format_test_message(SENT_AT)
        assert "Test Alert" in text
        assert "Fri, 15 Mar 2024 13:31:05 UTC" in text


class TestNotificationDispatcher:
    """Tests for NotificationDispatcher."""

    def test_send_message_payload(self, subscriber: Subscriber) -> None:
        """Posts HTML to the bot's sendMessage endpoint."""
        session = MagicMock()
        session.post.return_value = _response({"ok": True, "result": {}})
        dispatcher = NotificationDispatcher(session=session, timeout=5)

        dispatcher.send_message(subscriber, "<b>hi</b>")

        url = session.post.call_args.args[0]
        assert url == "https://api.telegram.org/bot123456:ABCDEFGHIJKLMN/sendMessage"
        body = session.post.call_args.kwargs["json"]
        assert body == {
            "chat_id": "-100200",
            "text": "<b>hi</b>",
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }
        assert session.post.call_args.kwargs["timeout"] == 5

    def test_api_error_raises_with_description(self, subscriber: Subscriber) -> None:
        """An ok=false body raises with Telegram's description."""
        session = MagicMock()
        session.post.return_value = _response({"ok": False, "description": "Bad Request: chat not found"})
        dispatcher = NotificationDispatcher(session=session)

        with pytest.raises(NotificationDeliveryError, match="chat not found"):
            dispatcher.send_message(subscriber, "x")

    def test_transport_error_hides_token(self, subscriber: Subscriber) -> None:
        """Network failures raise without echoing the request URL."""
        session = MagicMock()
        session.post.side_effect = requests.ConnectionError(
            "https://api.telegram.org/bot123456:ABCDEFGHIJKLMN/sendMessage unreachable"
        )
        dispatcher = NotificationDispatcher(session=session)

        with pytest.raises(NotificationDeliveryError) as exc_info:
            dispatcher.send_message(subscriber, "x")
        assert "ABCDEFGHIJKLMN" not in str(exc_info.value)

    def test_dispatch_success(self, subscriber: Subscriber, alert: AlertRecord) -> None:
        """A delivered alert reports success."""
        session = MagicMock()
        session.post.return_value = _response({"ok": True})
        result = NotificationDispatcher(session=session).dispatch(subscriber, alert)
        assert result.succeeded is True

    def test_dispatch_failure_does_not_raise(self, subscriber: Subscriber, alert: AlertRecord) -> None:
        """Delivery failures come back as a failed result."""
        session = MagicMock()
        session.post.side_effect = requests.Timeout()
        result = NotificationDispatcher(session=session).dispatch(subscriber, alert)
        assert result.succeeded is False
        assert "Timeout" in result.detail

    def test_send_test_message(self, subscriber: Subscriber) -> None:
        """The test message goes through the same endpoint."""
        session = MagicMock()
        session.post.return_value = _response({"ok": True})
        NotificationDispatcher(session=session).send_test_message(subscriber)
        assert "Test Alert" in session.post.call_args.kwargs["json"]["text"]

    def test_non_json_body(self, subscriber: Subscriber) -> None:
        """An unparseable response is a delivery failure."""
        session = MagicMock()
        response = _response(None)
        response.json.side_effect = ValueError("bad")
        session.post.return_value = response
        with pytest.raises(NotificationDeliveryError):
            NotificationDispatcher(session=session).send_message(subscriber, "x")
