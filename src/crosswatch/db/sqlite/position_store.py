"""SQLite-backed store for position state."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from crosswatch.db.sqlite.connection import from_db_timestamp, to_db_timestamp
from crosswatch.models.signal import Position, PositionState

if TYPE_CHECKING:
    from crosswatch.db.sqlite.connection import Database


class SQLitePositionStore:
    """SQLite implementation of ``PositionStore`` protocol."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def get_position(self, subject_id: int, symbol: str) -> Optional[PositionState]:
        """Return the stored state for the pair, or None."""
        with self.db.connect() as conn:
            row = conn.execute(
                """
                SELECT subject_id, symbol, last_position, last_checked_at
                FROM position_state
                WHERE subject_id = ? AND symbol = ?
                """,
                (subject_id, symbol),
            ).fetchone()

        if row is None:
            return None

        return PositionState(
            subject_id=row["subject_id"],
            symbol=row["symbol"],
            last_position=Position(row["last_position"]),
            last_checked_at=from_db_timestamp(row["last_checked_at"]),
        )

    def save_position(self, state: PositionState) -> None:
        """Upsert the state keyed by (subject_id, symbol)."""
        if state.last_checked_at is None:
            raise ValueError("last_checked_at is required to save a position")

        with self.db.connect() as conn:
            conn.execute(
                """
                INSERT INTO position_state (subject_id, symbol, last_position, last_checked_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(subject_id, symbol) DO UPDATE SET
                    last_position = excluded.last_position,
                    last_checked_at = excluded.last_checked_at
                """,
                (
                    state.subject_id,
                    state.symbol,
                    state.last_position.value,
                    to_db_timestamp(state.last_checked_at),
                ),
            )

    def delete_position(self, subject_id: int, symbol: str) -> None:
        """Forget the stored state for the pair."""
        with self.db.connect() as conn:
            conn.execute(
                "DELETE FROM position_state WHERE subject_id = ? AND symbol = ?",
                (subject_id, symbol),
            )
