"""Test configuration and fixtures for pytest."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional, Sequence

import pytest

from crosswatch.db.factory import StoreBundle, create_sqlite_stores
from crosswatch.models.bar import MergedRecord


def make_records(
    closes: Sequence[float],
    averages: Sequence[Optional[float]],
    start: date = date(2024, 1, 1),
) -> list[MergedRecord]:
    """Build consecutive merged records from parallel close/average lists."""
    records = []
    for offset, (close, average) in enumerate(zip(closes, averages)):
        price = Decimal(str(close))
        records.append(
            MergedRecord(
                date=start + timedelta(days=offset),
                open=price,
                high=price,
                low=price,
                close=price,
                volume=1000,
                moving_average=None if average is None else Decimal(str(average)),
            )
        )
    return records


class FixedClock:
    """Controllable aware UTC clock."""

    def __init__(self, now: Optional[datetime] = None) -> None:
        self.now = now or datetime(2024, 6, 3, 14, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FixedClock:
    """A fixed, advanceable UTC clock."""
    return FixedClock()


@pytest.fixture
def stores() -> StoreBundle:
    """All stores wired to one in-memory database."""
    return create_sqlite_stores(":memory:")


@pytest.fixture
def records_from():
    """Factory for merged records from parallel close/average lists."""
    return make_records
