"""Suppression of repeated alerts within a lookback window."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Callable

from crosswatch.models.signal import AlertKind

if TYPE_CHECKING:
    from crosswatch.db.protocols import AlertStore

logger = logging.getLogger(__name__)

DEFAULT_LOOKBACK = timedelta(days=7)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AlertDeduplicator:
    """
    Suppresses an alert when one of the same kind was recorded recently.

    Any prior attempt counts, including one whose delivery failed; a failed
    send is not retried through this path.
    """

    def __init__(
        self,
        store: AlertStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self._clock = clock

    def should_suppress(
        self,
        subject_id: int,
        symbol: str,
        kind: AlertKind,
        lookback: timedelta = DEFAULT_LOOKBACK,
    ) -> bool:
        """Whether an alert for the triple exists inside ``lookback``."""
        since = self._clock() - lookback
        recent = self.store.get_latest_alert(subject_id, symbol, kind, since)
        if recent is None:
            return False

        logger.info(
            f"Suppressing duplicate {kind.value} alert for {symbol} (subject {subject_id}) - "
            f"last alert sent at {recent.sent_at.isoformat()}"
        )
        return True
