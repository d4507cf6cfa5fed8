"""Factory for creating store bundles backed by different storage engines."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from pathlib import Path

    from crosswatch.db.protocols import AlertStore, PositionStore, SubscriberStore


@dataclass
class StoreBundle:
    """All stores wired to the same backend.

    Used at composition roots (CLI, tests) to wire up the full
    dependency graph.
    """

    positions: PositionStore
    alerts: AlertStore
    subscribers: SubscriberStore


def create_sqlite_stores(db_path: Optional[Union[str, Path]] = None) -> StoreBundle:
    """Create all stores backed by SQLite.

    Args:
        db_path: Optional path to SQLite database file.
                 If None, uses the default path from AppConfig.
                 Use ":memory:" for in-memory testing.

    Returns:
        StoreBundle with all stores wired to the same SQLite database.
    """
    from crosswatch.db.sqlite.alert_store import SQLiteAlertStore
    from crosswatch.db.sqlite.connection import Database
    from crosswatch.db.sqlite.position_store import SQLitePositionStore
    from crosswatch.db.sqlite.subscriber_store import SQLiteSubscriberStore

    db = Database(db_path)
    return StoreBundle(
        positions=SQLitePositionStore(db),
        alerts=SQLiteAlertStore(db),
        subscribers=SQLiteSubscriberStore(db),
    )
