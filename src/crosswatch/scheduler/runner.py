"""Daily trigger loop for the crossover check job."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, time, timedelta, timezone
from typing import TYPE_CHECKING, Callable, Optional
from zoneinfo import ZoneInfo

if TYPE_CHECKING:
    from crosswatch.models.config import SchedulerConfig
    from crosswatch.scheduler.job import CrossoverCheckJob

logger = logging.getLogger(__name__)

ET = ZoneInfo("America/New_York")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def next_run_time(now: datetime, at: time = time(9, 30), tz: ZoneInfo = ET) -> datetime:
    """
    Next occurrence of wall-clock ``at`` in ``tz`` strictly after ``now``.

    Runs already due today (``now`` at or past ``at``) roll to tomorrow.
    The offset comes from the zone database, so DST changes are honored.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(tz)
    target = datetime.combine(local.date(), at, tzinfo=tz)
    if local >= target:
        target = datetime.combine(local.date() + timedelta(days=1), at, tzinfo=tz)
    return target


class CrossoverCheckScheduler:
    """
    Triggers the job once shortly after start, then daily at market open.

    The next trigger is recomputed from the wall clock after every run, so a
    long cycle never shifts later runs. The loop survives any error raised by
    a cycle.
    """

    def __init__(
        self,
        job: CrossoverCheckJob,
        market_open: time = time(9, 30),
        tz: ZoneInfo = ET,
        initial_delay_seconds: Optional[float] = 30,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """
        Args:
            job: The cycle runner
            market_open: Daily wall-clock trigger time in ``tz``
            tz: Zone of ``market_open``
            initial_delay_seconds: Delay of the start-up run; None disables it
            clock: Aware "now" source
        """
        self.job = job
        self.market_open = market_open
        self.tz = tz
        self.initial_delay_seconds = initial_delay_seconds
        self._clock = clock
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.runs = 0

    @classmethod
    def from_config(cls, job: CrossoverCheckJob, config: SchedulerConfig) -> CrossoverCheckScheduler:
        return cls(
            job=job,
            market_open=config.market_open,
            tz=ZoneInfo(config.timezone),
            initial_delay_seconds=config.initial_delay_seconds,
        )

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def next_run_time(self) -> datetime:
        return next_run_time(self._clock(), self.market_open, self.tz)

    def start(self) -> None:
        """Run the loop on a daemon thread."""
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self.run_forever, name="crossover-scheduler", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Ask the loop to exit; an in-flight cycle finishes first."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def run_forever(self) -> None:
        """Blocking trigger loop, returns once ``stop()`` is called."""
        logger.info(
            f"Starting daily crossover scheduler "
            f"({self.market_open.strftime('%H:%M')} {self.tz.key})"
        )
        if self.initial_delay_seconds is not None:
            if self._stop.wait(self.initial_delay_seconds):
                return
            logger.info("Running initial check on startup...")
            self._trigger()

        while not self._stop.is_set():
            next_at = self.next_run_time()
            delay = max(0.0, (next_at - self._clock()).total_seconds())
            logger.info(
                f"Next check scheduled for {next_at.isoformat()} "
                f"(in {round(delay / 60)} minutes)"
            )
            if self._stop.wait(delay):
                break
            self._trigger()

        logger.info("Crossover scheduler stopped")

    def _trigger(self) -> None:
        try:
            self.job.run_cycle()
        except Exception:
            logger.exception("Crossover check cycle failed")
        finally:
            self.runs += 1
