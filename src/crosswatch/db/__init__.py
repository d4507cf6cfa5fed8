"""Database layer: Protocol interfaces and SQLite implementations.

Usage:
    # Protocol types (for type hints in business logic)
    from crosswatch.db.protocols import AlertStore, PositionStore, SubscriberStore

    # SQLite implementations (for composition roots)
    from crosswatch.db.sqlite import SQLiteAlertStore, SQLitePositionStore

    # Factory (convenience)
    from crosswatch.db.factory import create_sqlite_stores
"""

from crosswatch.db.factory import StoreBundle, create_sqlite_stores
from crosswatch.db.protocols import AlertStore, PositionStore, SubscriberStore
from crosswatch.db.sqlite import (
    Database,
    SQLiteAlertStore,
    SQLitePositionStore,
    SQLiteSubscriberStore,
)

__all__ = [
    # Protocols
    "AlertStore",
    "PositionStore",
    "SubscriberStore",
    # SQLite
    "Database",
    "SQLiteAlertStore",
    "SQLitePositionStore",
    "SQLiteSubscriberStore",
    # Factory
    "StoreBundle",
    "create_sqlite_stores",
]
