"""Per-(subject, symbol) position tracking across scheduled checks."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Optional

from crosswatch.errors import InsufficientDataError
from crosswatch.models.signal import Evaluation, Position, PositionState

if TYPE_CHECKING:
    from crosswatch.db.protocols import PositionStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def classify(price: Decimal, average: Decimal) -> Position:
    """ABOVE when price is strictly greater than the average, else BELOW."""
    return Position.ABOVE if price > average else Position.BELOW


class PositionTracker:
    """
    Decides whether a symbol changed sides since the previous check.

    The new position is stored on every evaluation, transition or not, so the
    stored state always reflects the latest check.

    Attributes:
        store: Position state persistence
    """

    def __init__(
        self,
        store: PositionStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self._clock = clock

    def evaluate(
        self,
        subject_id: int,
        symbol: str,
        latest_price: Optional[Decimal],
        latest_average: Optional[Decimal],
    ) -> Evaluation:
        """
        Classify the latest point and compare with the stored position.

        Args:
            subject_id: Subscriber identifier
            symbol: Watched symbol
            latest_price: Latest close
            latest_average: Moving average on the same day

        Returns:
            Evaluation with current/previous position and transition flag

        Raises:
            InsufficientDataError: Price or average missing; nothing is stored
        """
        if latest_price is None or latest_average is None:
            raise InsufficientDataError(
                f"No usable latest price/average for {symbol} "
                f"(price={latest_price}, average={latest_average})"
            )

        current = classify(latest_price, latest_average)
        stored = self.store.get_position(subject_id, symbol)
        previous = stored.last_position if stored else Position.UNKNOWN

        self.store.save_position(
            PositionState(
                subject_id=subject_id,
                symbol=symbol,
                last_position=current,
                last_checked_at=self._clock(),
            )
        )

        transitioned = previous != Position.UNKNOWN and previous != current
        if transitioned:
            logger.info(
                f"{symbol} (subject {subject_id}) moved {previous.value} -> {current.value} "
                f"(price {latest_price}, average {latest_average})"
            )
        else:
            logger.debug(f"{symbol} (subject {subject_id}) is {current.value}")

        return Evaluation(
            current_position=current,
            previous_position=previous,
            transitioned=transitioned,
        )
