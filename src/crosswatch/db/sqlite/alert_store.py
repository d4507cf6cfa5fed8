"""SQLite-backed store for the alert history."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from crosswatch.db.sqlite.connection import from_db_timestamp, to_db_timestamp
from crosswatch.models.signal import AlertKind, AlertRecord

if TYPE_CHECKING:
    from sqlite3 import Row

    from crosswatch.db.sqlite.connection import Database


class SQLiteAlertStore:
    """SQLite implementation of ``AlertStore`` protocol.

    Rows are only ever inserted; there is no update path.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    @staticmethod
    def _row_to_alert(row: Row) -> AlertRecord:
        """Convert a database row to an ``AlertRecord``."""
        return AlertRecord(
            id=row["id"],
            subject_id=row["subject_id"],
            symbol=row["symbol"],
            kind=AlertKind(row["kind"]),
            price=Decimal(str(row["price"])),
            moving_average_value=Decimal(str(row["sma_value"])),
            sent_at=from_db_timestamp(row["sent_at"]),
            delivery_succeeded=bool(row["delivery_succeeded"]),
        )

    def add_alert(self, record: AlertRecord) -> int:
        """Append an alert record and return its row id."""
        with self.db.connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO alert_history
                    (subject_id, symbol, kind, price, sma_value, sent_at, delivery_succeeded)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.subject_id,
                    record.symbol,
                    record.kind.value,
                    float(record.price),
                    float(record.moving_average_value),
                    to_db_timestamp(record.sent_at),
                    int(record.delivery_succeeded),
                ),
            )
            return int(cursor.lastrowid)

    def get_latest_alert(
        self,
        subject_id: int,
        symbol: str,
        kind: AlertKind,
        since: datetime,
    ) -> Optional[AlertRecord]:
        """Most recent alert for the triple sent after ``since``."""
        with self.db.connect() as conn:
            row = conn.execute(
                """
                SELECT * FROM alert_history
                WHERE subject_id = ? AND symbol = ? AND kind = ?
                    AND sent_at > ?
                ORDER BY sent_at DESC, id DESC
                LIMIT 1
                """,
                (subject_id, symbol, kind.value, to_db_timestamp(since)),
            ).fetchone()
        return self._row_to_alert(row) if row else None

    def list_alerts(self, subject_id: int, limit: int = 50) -> list[AlertRecord]:
        """Alerts for a subject, most recent first."""
        with self.db.connect() as conn:
            rows = conn.execute(
                """
                SELECT * FROM alert_history
                WHERE subject_id = ?
                ORDER BY sent_at DESC, id DESC
                LIMIT ?
                """,
                (subject_id, limit),
            ).fetchall()
        return [self._row_to_alert(r) for r in rows]
