"""SQLite implementations of repository protocols."""

from crosswatch.db.sqlite.alert_store import SQLiteAlertStore
from crosswatch.db.sqlite.connection import Database
from crosswatch.db.sqlite.position_store import SQLitePositionStore
from crosswatch.db.sqlite.subscriber_store import SQLiteSubscriberStore

__all__ = [
    "Database",
    "SQLiteAlertStore",
    "SQLitePositionStore",
    "SQLiteSubscriberStore",
]
