"""SQLite-backed store for subscribers and their watchlists."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from crosswatch.db.sqlite.connection import to_db_timestamp
from crosswatch.models.signal import Subscriber

if TYPE_CHECKING:
    from sqlite3 import Row

    from crosswatch.db.sqlite.connection import Database


def _normalize(symbol: str) -> str:
    return symbol.strip().upper()


class SQLiteSubscriberStore:
    """SQLite implementation of ``SubscriberStore`` protocol."""

    def __init__(self, db: Database) -> None:
        self.db = db

    @staticmethod
    def _row_to_subscriber(row: Row) -> Subscriber:
        return Subscriber(
            subject_id=row["subject_id"],
            bot_token=row["bot_token"],
            chat_id=row["chat_id"],
            enabled=bool(row["enabled"]),
        )

    # -- subscribers ---------------------------------------------------------

    def list_enabled_subscribers(self) -> list[Subscriber]:
        """All subscribers with notifications enabled, ordered by id."""
        with self.db.connect() as conn:
            rows = conn.execute(
                "SELECT * FROM subscribers WHERE enabled = 1 ORDER BY subject_id"
            ).fetchall()
        return [self._row_to_subscriber(r) for r in rows]

    def get_subscriber(self, subject_id: int) -> Optional[Subscriber]:
        """Return one subscriber, or None."""
        with self.db.connect() as conn:
            row = conn.execute(
                "SELECT * FROM subscribers WHERE subject_id = ?", (subject_id,)
            ).fetchone()
        return self._row_to_subscriber(row) if row else None

    def save_subscriber(self, subscriber: Subscriber) -> None:
        """Insert or update a subscriber's endpoint configuration."""
        now = to_db_timestamp(datetime.now(timezone.utc))
        with self.db.connect() as conn:
            conn.execute(
                """
                INSERT INTO subscribers (subject_id, bot_token, chat_id, enabled, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(subject_id) DO UPDATE SET
                    bot_token = excluded.bot_token,
                    chat_id = excluded.chat_id,
                    enabled = excluded.enabled,
                    updated_at = excluded.updated_at
                """,
                (
                    subscriber.subject_id,
                    subscriber.bot_token,
                    str(subscriber.chat_id),
                    int(subscriber.enabled),
                    now,
                    now,
                ),
            )

    def set_enabled(self, subject_id: int, enabled: bool) -> bool:
        """Toggle notifications for a subscriber."""
        with self.db.connect() as conn:
            cursor = conn.execute(
                "UPDATE subscribers SET enabled = ?, updated_at = ? WHERE subject_id = ?",
                (int(enabled), to_db_timestamp(datetime.now(timezone.utc)), subject_id),
            )
            return cursor.rowcount > 0

    def delete_subscriber(self, subject_id: int) -> bool:
        """Remove a subscriber's endpoint. Returns False if none existed."""
        with self.db.connect() as conn:
            cursor = conn.execute(
                "DELETE FROM subscribers WHERE subject_id = ?", (subject_id,)
            )
            return cursor.rowcount > 0

    # -- watchlist -----------------------------------------------------------

    def list_symbols(self, subject_id: int) -> list[str]:
        """Watched symbols in the order they were added."""
        with self.db.connect() as conn:
            rows = conn.execute(
                "SELECT symbol FROM watchlist WHERE subject_id = ? ORDER BY id",
                (subject_id,),
            ).fetchall()
        return [row["symbol"] for row in rows]

    def add_symbol(self, subject_id: int, symbol: str) -> bool:
        """Watch a symbol. Returns False if it was already watched."""
        symbol = _normalize(symbol)
        if not symbol:
            raise ValueError("Symbol required")
        try:
            with self.db.connect() as conn:
                conn.execute(
                    "INSERT INTO watchlist (subject_id, symbol) VALUES (?, ?)",
                    (subject_id, symbol),
                )
        except sqlite3.IntegrityError:
            return False
        return True

    def remove_symbol(self, subject_id: int, symbol: str) -> bool:
        """Stop watching a symbol and drop its position state."""
        symbol = _normalize(symbol)
        with self.db.connect() as conn:
            cursor = conn.execute(
                "DELETE FROM watchlist WHERE subject_id = ? AND symbol = ?",
                (subject_id, symbol),
            )
            conn.execute(
                "DELETE FROM position_state WHERE subject_id = ? AND symbol = ?",
                (subject_id, symbol),
            )
            return cursor.rowcount > 0
