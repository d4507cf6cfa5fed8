"""Telegram notification dispatch.

One synchronous ``sendMessage`` call per alert, no retry. Which transition
kinds get dispatched is decided by the caller.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

import requests
from pydantic import BaseModel

from crosswatch.errors import NotificationDeliveryError
from crosswatch.models.signal import AlertKind, AlertRecord, Subscriber

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.telegram.org"


class DispatchResult(BaseModel):
    """Outcome of a single send attempt."""

    succeeded: bool
    detail: str = ""


def _utc_stamp(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%a, %d %b %Y %H:%M:%S UTC")


def format_alert_message(alert: AlertRecord, sma_period: int = 200) -> str:
    """Render an alert as Telegram HTML."""
    if alert.kind == AlertKind.BEARISH:
        emoji, direction, signal = "📉", "BELOW", "Bearish 🔴"
    else:
        emoji, direction, signal = "📈", "ABOVE", "Bullish 🟢"

    return (
        f"<b>{emoji} SMA Crossover Alert: {alert.symbol}</b>\n\n"
        f"<b>{alert.symbol}</b> has crossed <b>{direction}</b> its {sma_period}-day SMA\n\n"
        f"• Price: <code>${alert.price:.2f}</code>\n"
        f"• {sma_period}-Day SMA: <code>${alert.moving_average_value:.2f}</code>\n"
        f"• Signal: <b>{signal}</b>\n\n"
        f"<i>{_utc_stamp(alert.sent_at)}</i>"
    )


def format_test_message(sent_at: Optional[datetime] = None) -> str:
    """Render the endpoint check message."""
    return (
        "<b>🔔 Crosswatch Test Alert</b>\n\n"
        "This is a test message from your Crosswatch alert system.\n"
        "If you see this, Telegram alerts are configured correctly!\n\n"
        f"<i>Sent at {_utc_stamp(sent_at or datetime.now(timezone.utc))}</i>"
    )


class NotificationDispatcher:
    """
    Sends formatted alerts through the Telegram Bot API.

    Attributes:
        session: HTTP session
        api_base: Bot API base URL
        timeout: Per-request timeout in seconds
        sma_period: Window named in the message text
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = 15,
        sma_period: int = 200,
    ) -> None:
        self.session = session or requests.Session()
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.sma_period = sma_period

    def send_message(self, endpoint: Subscriber, text: str) -> dict[str, Any]:
        """
        Post one HTML message.

        Returns:
            Telegram API response body

        Raises:
            NotificationDeliveryError: Transport failure or ``ok: false``
        """
        url = f"{self.api_base}/bot{endpoint.bot_token}/sendMessage"
        try:
            response = self.session.post(
                url,
                json={
                    "chat_id": endpoint.chat_id,
                    "text": text,
                    "parse_mode": "HTML",
                    "disable_web_page_preview": True,
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            # the URL carries the bot token, keep it out of the message
            raise NotificationDeliveryError(
                f"Telegram request failed: {type(e).__name__}"
            ) from e

        try:
            body = response.json()
        except ValueError as e:
            raise NotificationDeliveryError(
                f"Telegram returned a non-JSON body (HTTP {response.status_code})"
            ) from e

        if not isinstance(body, dict) or not body.get("ok"):
            description = body.get("description") if isinstance(body, dict) else None
            raise NotificationDeliveryError(description or "Telegram API error")
        return body

    def dispatch(self, endpoint: Subscriber, alert: AlertRecord) -> DispatchResult:
        """Send an alert; failures are reported in the result, never raised."""
        try:
            self.send_message(endpoint, format_alert_message(alert, self.sma_period))
        except NotificationDeliveryError as e:
            logger.error(
                f"Failed to send Telegram for {alert.symbol} to subject {alert.subject_id}: {e}"
            )
            return DispatchResult(succeeded=False, detail=str(e))

        logger.info(
            f"Sent {alert.kind.value} crossover alert for {alert.symbol} "
            f"to subject {alert.subject_id}"
        )
        return DispatchResult(succeeded=True, detail="sent")

    def send_test_message(self, endpoint: Subscriber) -> None:
        """Send the configuration check message; raises on failure."""
        self.send_message(endpoint, format_test_message())
