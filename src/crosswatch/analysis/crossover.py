"""Series merging and moving-average crossover detection.

Everything here is a pure function of its inputs: no I/O, no state.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

import pandas as pd
from pydantic import BaseModel, Field

from crosswatch.models.bar import DailyBar, MergedRecord, MovingAveragePoint
from crosswatch.models.signal import CrossoverEvent, CrossoverKind, Position

_BAR_COLUMNS = ["date", "open", "high", "low", "close", "volume"]


def merge_series(
    bars: Sequence[DailyBar],
    averages: Sequence[MovingAveragePoint],
) -> list[MergedRecord]:
    """
    Left-join daily bars with the moving average series on date.

    The output has one record per bar date, ascending. Dates present only in
    the average series are dropped; bar dates the average does not cover
    keep ``moving_average=None``. Values are never interpolated.

    Args:
        bars: Daily bars (any order, dates unique)
        averages: Sparse moving average points

    Returns:
        Merged records ordered by date
    """
    if not bars:
        return []

    frame = (
        pd.DataFrame([bar.model_dump() for bar in bars], columns=_BAR_COLUMNS)
        .drop_duplicates(subset="date", keep="last")
        .set_index("date")
        .sort_index()
    )
    sma = pd.Series(
        {point.date: point.value for point in averages if point.value is not None},
        name="moving_average",
        dtype=object,
    )
    merged = frame.join(sma, how="left")

    records: list[MergedRecord] = []
    for day, row in merged.iterrows():
        average = row["moving_average"]
        records.append(
            MergedRecord(
                date=day,
                open=row["open"],
                high=row["high"],
                low=row["low"],
                close=row["close"],
                volume=int(row["volume"]),
                moving_average=None if pd.isna(average) else average,
            )
        )
    return records


def _strict_side(close: Decimal, average: Decimal) -> Optional[Position]:
    """ABOVE/BELOW for a strict inequality, None when close equals the average."""
    if close > average:
        return Position.ABOVE
    if close < average:
        return Position.BELOW
    return None


def detect_crossovers(records: Sequence[MergedRecord]) -> list[CrossoverEvent]:
    """
    Find every boundary where the close crosses the moving average.

    Single forward pass over consecutive records. A boundary where either
    record lacks an average is skipped.

    Ties: a close equal to its average counts as "not above".

    - above_cross: previous close <= its average, current close > average.
    - below_cross: current close < average and the previous record was above,
      where an equal record carries the side of the record before it. So
      ``[above, equal, below]`` fires once, while ``[below, equal, below]``
      never fires.

    Args:
        records: Merged records ordered by date

    Returns:
        Crossover events in sequence order
    """
    events: list[CrossoverEvent] = []
    # None until a previous record with an average exists
    prev_not_above: Optional[bool] = None
    # side of the previous record after carrying through equal records
    prev_side: Optional[Position] = None

    for index, record in enumerate(records):
        average = record.moving_average
        if average is None:
            prev_not_above, prev_side = None, None
            continue

        side = _strict_side(record.close, average)
        if prev_not_above is not None:
            if side == Position.ABOVE and prev_not_above:
                events.append(
                    CrossoverEvent(
                        kind=CrossoverKind.ABOVE_CROSS,
                        date=record.date,
                        price=record.close,
                        index=index,
                    )
                )
            elif side == Position.BELOW and prev_side == Position.ABOVE:
                events.append(
                    CrossoverEvent(
                        kind=CrossoverKind.BELOW_CROSS,
                        date=record.date,
                        price=record.close,
                        index=index,
                    )
                )

        if side is not None:
            prev_side = side
        prev_not_above = record.close <= average

    return events


def latest_points(records: Sequence[MergedRecord], count: int = 2) -> list[MergedRecord]:
    """Last ``count`` records with a defined average, oldest first."""
    if count <= 0:
        return []
    found: list[MergedRecord] = []
    for record in reversed(records):
        if record.moving_average is not None:
            found.append(record)
            if len(found) == count:
                break
    found.reverse()
    return found


class HistorySummary(BaseModel):
    """Overview of a merged history, used for inspection from the CLI."""

    symbol: str
    total_days: int
    days_with_average: int
    first_date: Optional[str] = None
    last_date: Optional[str] = None
    latest_price: Optional[Decimal] = None
    latest_average: Optional[Decimal] = None
    price_above_average: Optional[bool] = None
    crossovers: list[CrossoverEvent] = Field(default_factory=list)

    def recent_crossovers(self, limit: int = 5) -> list[CrossoverEvent]:
        return self.crossovers[-limit:] if limit > 0 else []


def summarize_history(symbol: str, records: Sequence[MergedRecord]) -> HistorySummary:
    """Summarize a merged history and its crossovers."""
    latest = records[-1] if records else None
    latest_average = latest.moving_average if latest else None
    above: Optional[bool] = None
    if latest is not None and latest_average is not None:
        above = latest.close > latest_average

    return HistorySummary(
        symbol=symbol.upper(),
        total_days=len(records),
        days_with_average=sum(1 for r in records if r.moving_average is not None),
        first_date=records[0].date.isoformat() if records else None,
        last_date=latest.date.isoformat() if latest else None,
        latest_price=latest.close if latest else None,
        latest_average=latest_average,
        price_above_average=above,
        crossovers=detect_crossovers(records),
    )
