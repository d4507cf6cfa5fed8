"""In-memory TTL cache for provider responses.

Entries are keyed by ``(series_type, symbol)`` and never persisted; a process
restart starts cold.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

# Default TTL: 12 hours
DEFAULT_TTL_SECONDS: float = 12 * 60 * 60

CacheKey = Tuple[str, str]


@dataclass(frozen=True)
class ProviderCacheEntry:
    """A cached provider payload and the time it was fetched."""

    key: CacheKey
    payload: Any
    fetched_at: float


class ProviderCache:
    """TTL cache for parsed provider series.

    Args:
        ttl_seconds: Age after which an entry is treated as missing.
        clock: Returns the current time in seconds. Defaults to ``time.time``.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: Dict[CacheKey, ProviderCacheEntry] = {}
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    @property
    def size(self) -> int:
        """Number of entries currently held (fresh or not)."""
        with self._lock:
            return len(self._entries)

    def get(self, series_type: str, symbol: str) -> Optional[Any]:
        """Return the cached payload, or None when absent or expired."""
        key = (series_type, symbol)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if (self._clock() - entry.fetched_at) < self._ttl:
                return entry.payload
            # Expired
            del self._entries[key]
        logger.debug(f"Cache entry expired for {series_type}:{symbol}")
        return None

    def set(self, series_type: str, symbol: str, payload: Any) -> None:
        """Store ``payload`` stamped with the current time."""
        key = (series_type, symbol)
        with self._lock:
            self._entries[key] = ProviderCacheEntry(
                key=key, payload=payload, fetched_at=self._clock()
            )

    def contains(self, series_type: str, symbol: str) -> bool:
        """Whether a fresh entry exists."""
        return self.get(series_type, symbol) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
