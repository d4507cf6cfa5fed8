"""Repository protocol definitions for crosswatch.

Defines structural typing protocols (PEP 544) for the persistence the
crossover job consumes. The tracker, deduplicator and scheduler depend on
these Protocols, never on a concrete implementation, so the storage backend
can be swapped without touching any consumers.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from crosswatch.models.signal import AlertKind, AlertRecord, PositionState, Subscriber


@runtime_checkable
class PositionStore(Protocol):
    """Interface for per-(subject, symbol) position state.

    One row per pair, upserted on every evaluation.

    Implementations: ``SQLitePositionStore``.
    """

    def get_position(self, subject_id: int, symbol: str) -> Optional[PositionState]:
        """Return the stored state for the pair, or ``None`` if never checked."""
        ...

    def save_position(self, state: PositionState) -> None:
        """Insert or replace the state for ``(state.subject_id, state.symbol)``."""
        ...

    def delete_position(self, subject_id: int, symbol: str) -> None:
        """Forget the stored state for the pair."""
        ...


@runtime_checkable
class AlertStore(Protocol):
    """Interface for the append-only alert history.

    Implementations: ``SQLiteAlertStore``.
    """

    def add_alert(self, record: AlertRecord) -> int:
        """Append an alert record.

        Returns:
            The new row id.
        """
        ...

    def get_latest_alert(
        self,
        subject_id: int,
        symbol: str,
        kind: AlertKind,
        since: datetime,
    ) -> Optional[AlertRecord]:
        """Most recent alert for the triple sent strictly after ``since``.

        Delivery outcome is ignored.
        """
        ...

    def list_alerts(self, subject_id: int, limit: int = 50) -> list[AlertRecord]:
        """Alerts for a subject, most recent first."""
        ...


@runtime_checkable
class SubscriberStore(Protocol):
    """Interface for subscriber endpoint configuration and watchlists.

    Implementations: ``SQLiteSubscriberStore``.
    """

    def list_enabled_subscribers(self) -> list[Subscriber]:
        """All subscribers with notifications enabled, ordered by id."""
        ...

    def get_subscriber(self, subject_id: int) -> Optional[Subscriber]:
        """Return one subscriber, or ``None``."""
        ...

    def save_subscriber(self, subscriber: Subscriber) -> None:
        """Insert or update a subscriber's endpoint configuration."""
        ...

    def set_enabled(self, subject_id: int, enabled: bool) -> bool:
        """Toggle notifications. Returns False if the subscriber is unknown."""
        ...

    def delete_subscriber(self, subject_id: int) -> bool:
        """Remove a subscriber's endpoint. The watchlist is kept."""
        ...

    def list_symbols(self, subject_id: int) -> list[str]:
        """Watched symbols in the order they were added."""
        ...

    def add_symbol(self, subject_id: int, symbol: str) -> bool:
        """Watch a symbol. Returns False if it was already watched."""
        ...

    def remove_symbol(self, subject_id: int, symbol: str) -> bool:
        """Stop watching a symbol and drop its position state."""
        ...
