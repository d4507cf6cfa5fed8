"""The crossover check cycle.

One cycle walks every enabled subscriber's watchlist sequentially:

    merged history -> latest points -> position transition -> kind filter
    -> dedup -> dispatch -> alert record

A failure on one symbol is logged and the walk continues with the next one.
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from pydantic import BaseModel, Field

from crosswatch.alerts.dedup import DEFAULT_LOOKBACK, AlertDeduplicator
from crosswatch.alerts.notifier import NotificationDispatcher
from crosswatch.alerts.tracker import PositionTracker
from crosswatch.analysis.crossover import detect_crossovers, latest_points
from crosswatch.errors import CrosswatchError, InsufficientDataError
from crosswatch.models.signal import AlertKind, AlertRecord, Subscriber

if TYPE_CHECKING:
    from crosswatch.data.alphavantage import MarketDataClient
    from crosswatch.db.factory import StoreBundle
    from crosswatch.db.protocols import AlertStore, SubscriberStore
    from crosswatch.models.config import AppConfig

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobState(str, Enum):
    """Lifecycle of the check job."""

    IDLE = "idle"
    RUNNING = "running"


class CycleSummary(BaseModel):
    """Counters collected during one cycle."""

    started_at: datetime
    finished_at: Optional[datetime] = None
    subjects: int = 0
    symbols_checked: int = 0
    transitions: int = 0
    alerts_sent: int = 0
    alerts_failed: int = 0
    suppressed: int = 0
    skipped_kind: int = 0
    errors: int = 0
    failed_symbols: list[str] = Field(default_factory=list)


class CrossoverCheckJob:
    """
    Runs crossover checks for every enabled subscriber.

    At most one cycle runs at a time: a call to ``run_cycle`` while another
    is in progress returns immediately without doing any work.

    Attributes:
        market_data: Source of merged price/average history
        subscribers: Subscriber configuration and watchlists
        alerts: Alert history
        tracker: Position transition tracker
        deduplicator: Repeated-alert filter
        dispatcher: Notification sender
        dispatch_kinds: Transition kinds that produce a notification
    """

    def __init__(
        self,
        market_data: MarketDataClient,
        subscribers: SubscriberStore,
        alerts: AlertStore,
        tracker: PositionTracker,
        deduplicator: AlertDeduplicator,
        dispatcher: NotificationDispatcher,
        dispatch_kinds: Iterable[AlertKind] = (AlertKind.BEARISH,),
        dedup_lookback: timedelta = DEFAULT_LOOKBACK,
        symbol_pacing_seconds: float = 3.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.market_data = market_data
        self.subscribers = subscribers
        self.alerts = alerts
        self.tracker = tracker
        self.deduplicator = deduplicator
        self.dispatcher = dispatcher
        self.dispatch_kinds = frozenset(dispatch_kinds)
        self.dedup_lookback = dedup_lookback
        self.symbol_pacing_seconds = symbol_pacing_seconds
        self._sleep = sleep
        self._clock = clock
        self._cycle_lock = threading.Lock()
        self._state = JobState.IDLE
        self.last_summary: Optional[CycleSummary] = None

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        stores: StoreBundle,
        market_data: MarketDataClient,
        dispatcher: Optional[NotificationDispatcher] = None,
    ) -> CrossoverCheckJob:
        """Wire a job from settings and a store bundle."""
        sched = config.scheduler
        return cls(
            market_data=market_data,
            subscribers=stores.subscribers,
            alerts=stores.alerts,
            tracker=PositionTracker(stores.positions),
            deduplicator=AlertDeduplicator(stores.alerts),
            dispatcher=dispatcher or NotificationDispatcher(
                api_base=config.telegram.api_base,
                timeout=config.telegram.timeout_seconds,
                sma_period=config.alpha_vantage.sma_period,
            ),
            dispatch_kinds=sched.dispatch_kinds,
            dedup_lookback=timedelta(days=sched.dedup_lookback_days),
            symbol_pacing_seconds=sched.symbol_pacing_seconds,
        )

    @property
    def state(self) -> JobState:
        return self._state

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------

    def run_cycle(self) -> Optional[CycleSummary]:
        """
        Run one full pass over all enabled subscribers.

        Returns:
            Summary of the pass, or None if a pass was already running
        """
        if not self._cycle_lock.acquire(blocking=False):
            logger.warning("Crossover check already running, skipping this trigger")
            return None

        self._state = JobState.RUNNING
        summary = CycleSummary(started_at=self._clock())
        logger.info(f"Running crossover check at {summary.started_at.isoformat()}")
        try:
            try:
                subscribers = self.subscribers.list_enabled_subscribers()
            except Exception:
                logger.exception("Could not load enabled subscribers")
                summary.errors += 1
                subscribers = []

            for subscriber in subscribers:
                summary.subjects += 1
                self.check_subscriber(subscriber, summary)

            summary.finished_at = self._clock()
            logger.info(
                f"Completed crossover check for {summary.subjects} subject(s): "
                f"{summary.symbols_checked} symbols, {summary.transitions} transitions, "
                f"{summary.alerts_sent} sent, {summary.alerts_failed} failed, "
                f"{summary.suppressed} suppressed, {summary.errors} errors"
            )
            self.last_summary = summary
            return summary
        finally:
            self._state = JobState.IDLE
            self._cycle_lock.release()

    def check_subscriber(self, subscriber: Subscriber, summary: CycleSummary) -> None:
        """Check every watched symbol of one subscriber, pacing between symbols."""
        subject_id = subscriber.subject_id
        try:
            symbols = self.subscribers.list_symbols(subject_id)
        except Exception:
            logger.exception(f"Could not load watchlist for subject {subject_id}")
            summary.errors += 1
            return

        if not symbols:
            logger.debug(f"Subject {subject_id} watches no symbols")
            return

        for position, symbol in enumerate(symbols):
            if position > 0 and self.symbol_pacing_seconds > 0:
                self._sleep(self.symbol_pacing_seconds)
            try:
                self.check_symbol(subscriber, symbol, summary)
            except CrosswatchError as e:
                summary.errors += 1
                summary.failed_symbols.append(symbol)
                logger.error(f"Error checking {symbol} for subject {subject_id}: {e}")
            except Exception:
                summary.errors += 1
                summary.failed_symbols.append(symbol)
                logger.exception(f"Unexpected error checking {symbol} for subject {subject_id}")

    def check_symbol(self, subscriber: Subscriber, symbol: str, summary: CycleSummary) -> None:
        """
        Evaluate one symbol and dispatch an alert if warranted.

        Raises:
            CrosswatchError: Provider or data failure for this symbol
        """
        subject_id = subscriber.subject_id
        records = self.market_data.get_merged_history(symbol)
        points = latest_points(records, count=2)
        latest = points[-1] if points else None
        average = latest.moving_average if latest is not None else None
        if latest is None or average is None:
            raise InsufficientDataError(f"No moving average values available for {symbol}")

        summary.symbols_checked += 1
        evaluation = self.tracker.evaluate(subject_id, symbol, latest.close, average)
        if not evaluation.transitioned:
            return

        summary.transitions += 1
        for event in detect_crossovers(points):
            logger.info(
                f"{symbol} {event.kind.value} on {event.date} "
                f"(close {event.price}, average {average})"
            )

        kind = evaluation.kind
        if kind not in self.dispatch_kinds:
            summary.skipped_kind += 1
            logger.info(
                f"Skipping {kind.value} crossover for {symbol} (subject {subject_id}) - "
                f"only {', '.join(sorted(k.value for k in self.dispatch_kinds)) or 'no'} alerts enabled"
            )
            return

        if self.deduplicator.should_suppress(subject_id, symbol, kind, self.dedup_lookback):
            summary.suppressed += 1
            return

        alert = AlertRecord(
            subject_id=subject_id,
            symbol=symbol,
            kind=kind,
            price=latest.close,
            moving_average_value=average,
            sent_at=self._clock(),
        )
        result = self.dispatcher.dispatch(subscriber, alert)
        alert = alert.model_copy(update={"delivery_succeeded": result.succeeded})
        self.alerts.add_alert(alert)

        if result.succeeded:
            summary.alerts_sent += 1
        else:
            summary.alerts_failed += 1
