"""Shared minimum-interval gate for a rate-limited provider."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class RequestPacer:
    """
    Enforces a minimum spacing between outbound requests.

    One instance is shared by every caller of a provider. ``wait()`` blocks
    until the interval since the previous dispatch has elapsed and then
    stamps the new dispatch time. Concurrent callers queue on the internal
    lock; no request is ever dropped.

    Attributes:
        min_interval: Minimum seconds between two dispatches
    """

    def __init__(
        self,
        min_interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize the pacer.

        Args:
            min_interval: Minimum seconds between two dispatches
            clock: Monotonic time source (injectable for tests)
            sleep: Blocking sleep function (injectable for tests)
        """
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_dispatch: Optional[float] = None
        self._lock = threading.Lock()

    @property
    def last_dispatch(self) -> Optional[float]:
        return self._last_dispatch

    def wait(self) -> float:
        """
        Block until the next request may be dispatched.

        Returns:
            Seconds spent waiting
        """
        with self._lock:
            waited = 0.0
            if self._last_dispatch is not None:
                waited = max(0.0, self._last_dispatch + self.min_interval - self._clock())
            if waited > 0:
                logger.debug(f"Pacing provider request for {waited:.1f}s")
                self._sleep(waited)
            self._last_dispatch = self._clock()
            return waited
