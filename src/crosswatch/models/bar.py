"""Daily price and moving average series models."""

import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DailyBar(BaseModel):
    """
    OHLCV bar for a single trading day.

    Attributes:
        date: Trading day
        open: Opening price
        high: Highest price during the day
        low: Lowest price during the day
        close: Closing price
        volume: Trading volume
    """

    date: dt.date = Field(..., description="Trading day")
    open: Decimal = Field(..., description="Opening price", ge=0)
    high: Decimal = Field(..., description="Highest price", ge=0)
    low: Decimal = Field(..., description="Lowest price", ge=0)
    close: Decimal = Field(..., description="Closing price", ge=0)
    volume: int = Field(default=0, description="Trading volume", ge=0)

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return (
            f"DailyBar({self.date} O:{self.open} H:{self.high} "
            f"L:{self.low} C:{self.close} V:{self.volume})"
        )


class MovingAveragePoint(BaseModel):
    """A single value of the long-window moving average series.

    ``value`` is None until the window has enough history.
    """

    date: dt.date = Field(..., description="Trading day")
    value: Optional[Decimal] = Field(default=None, description="Moving average value")

    model_config = ConfigDict(frozen=True)


class MergedRecord(BaseModel):
    """
    One trading day of price data joined with its moving average.

    ``moving_average`` is None wherever the average series has no value for
    the date. None means "position undefined", never zero.
    """

    date: dt.date = Field(..., description="Trading day")
    open: Decimal = Field(..., description="Opening price")
    high: Decimal = Field(..., description="Highest price")
    low: Decimal = Field(..., description="Lowest price")
    close: Decimal = Field(..., description="Closing price")
    volume: int = Field(default=0, description="Trading volume")
    moving_average: Optional[Decimal] = Field(
        default=None, description="Moving average value for the day"
    )

    model_config = ConfigDict(frozen=True)

    @property
    def has_average(self) -> bool:
        """Whether the moving average is defined for this day."""
        return self.moving_average is not None
