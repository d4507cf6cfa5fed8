"""SQLite database connection management."""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Generator, Optional, Union

from crosswatch.db.sqlite.schema import SCHEMA_SQL

if TYPE_CHECKING:
    from sqlite3 import Connection

# Fixed-width UTC format so stored timestamps compare correctly as text
_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


def to_db_timestamp(value: datetime) -> str:
    """Serialize a datetime as a sortable UTC string (naive input is UTC)."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.strftime(_TIMESTAMP_FORMAT)


def from_db_timestamp(value: str) -> datetime:
    """Parse a stored timestamp into an aware UTC datetime."""
    try:
        parsed = datetime.strptime(value, _TIMESTAMP_FORMAT)
    except ValueError:
        parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class Database:
    """
    SQLite database connection manager.

    Handles connection lifecycle, schema initialization, and transactions.

    Attributes:
        db_path: Path to the SQLite database file or ":memory:" for in-memory
    """

    def __init__(self, db_path: Optional[Union[Path, str]] = None):
        """
        Initialize the database.

        Args:
            db_path: Path to database file or ":memory:" for in-memory database.
                     If None, uses the default path from AppConfig.
        """
        if db_path is None:
            from crosswatch.models.config import AppConfig
            config = AppConfig()
            db_path = config.database_path

        # Convert to string for sqlite3
        self.db_path = str(db_path) if isinstance(db_path, Path) else db_path
        self._is_memory = self.db_path == ":memory:"

        # For in-memory databases, keep a persistent connection
        self._memory_conn: Optional[Connection] = None
        self._memory_lock = threading.RLock()

        if not self._is_memory:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self._init_schema()

    def _init_schema(self) -> None:
        """Create tables if they don't exist."""
        with self.connect() as conn:
            conn.executescript(SCHEMA_SQL)

    @contextmanager
    def connect(self) -> Generator[Connection, None, None]:
        """
        Get a database connection as a context manager.

        Handles transaction commit/rollback automatically.
        Returns dict-like Row objects for query results.

        For in-memory databases, reuses the same connection.
        For file databases, creates a new connection each time.

        Example:
            with db.connect() as conn:
                cursor = conn.execute("SELECT * FROM watchlist")
                rows = cursor.fetchall()
        """
        if self._is_memory:
            # The scheduler thread and the caller may share one in-memory db
            with self._memory_lock:
                if self._memory_conn is None:
                    self._memory_conn = sqlite3.connect(":memory:", check_same_thread=False)
                    self._memory_conn.row_factory = sqlite3.Row
                try:
                    yield self._memory_conn
                    self._memory_conn.commit()
                except Exception:
                    self._memory_conn.rollback()
                    raise
        else:
            # For file databases, create a new connection
            conn = sqlite3.connect(self.db_path)
            conn.row_factory = sqlite3.Row
            try:
                yield conn
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            finally:
                conn.close()

    def table_exists(self, table_name: str) -> bool:
        """Check if a table exists in the database."""
        with self.connect() as conn:
            cursor = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
                (table_name,)
            )
            return cursor.fetchone() is not None

    def get_row_count(self, table_name: str) -> int:
        """Get the number of rows in a table."""
        with self.connect() as conn:
            cursor = conn.execute(f"SELECT COUNT(*) FROM {table_name}")  # noqa: S608
            result = cursor.fetchone()
            return result[0] if result else 0

    def close(self) -> None:
        """Close the database connection (for in-memory databases)."""
        if self._memory_conn is not None:
            self._memory_conn.close()
            self._memory_conn = None
