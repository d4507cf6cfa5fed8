"""Crossover, position and alert models."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CrossoverKind(str, Enum):
    """Direction of a historical price / moving average crossing."""

    ABOVE_CROSS = "above_cross"  # close moved from <= average to > average
    BELOW_CROSS = "below_cross"  # close moved from >= average to < average


class Position(str, Enum):
    """Qualitative relationship between price and moving average."""

    ABOVE = "above"
    BELOW = "below"
    UNKNOWN = "unknown"


class AlertKind(str, Enum):
    """Directional classification of a position transition."""

    BULLISH = "bullish"  # moved above the average
    BEARISH = "bearish"  # moved below the average

    @classmethod
    def for_position(cls, position: Position) -> AlertKind:
        """Kind of the transition that ends in ``position``."""
        if position == Position.ABOVE:
            return cls.BULLISH
        if position == Position.BELOW:
            return cls.BEARISH
        raise ValueError(f"No alert kind for position {position.value!r}")


class CrossoverEvent(BaseModel):
    """
    A sign change between close and moving average at a record boundary.

    Attributes:
        kind: Crossing direction
        date: Date of the record on the far side of the crossing
        price: Close on that date
        index: Position of that record in the merged sequence
    """

    kind: CrossoverKind = Field(description="Crossing direction")
    date: dt.date = Field(description="Date of the crossing record")
    price: Decimal = Field(description="Close on the crossing date")
    index: int = Field(description="Index in the merged sequence", ge=1)

    model_config = ConfigDict(frozen=True)


class PositionState(BaseModel):
    """Last known position for a (subject, symbol) pair."""

    subject_id: int = Field(description="Subscriber identifier")
    symbol: str = Field(description="Watched symbol")
    last_position: Position = Field(default=Position.UNKNOWN)
    last_checked_at: Optional[dt.datetime] = Field(default=None)


class Evaluation(BaseModel):
    """Outcome of comparing a fresh position with the stored one."""

    current_position: Position
    previous_position: Position = Position.UNKNOWN
    transitioned: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def kind(self) -> AlertKind:
        """Kind of the move into ``current_position``."""
        return AlertKind.for_position(self.current_position)


class AlertRecord(BaseModel):
    """
    One dispatched (or attempted) notification.

    Rows are append-only; ``delivery_succeeded`` records the outcome of the
    single send attempt.
    """

    id: Optional[int] = Field(default=None, description="Row id once stored")
    subject_id: int = Field(description="Subscriber identifier")
    symbol: str = Field(description="Symbol the alert is about")
    kind: AlertKind = Field(description="Transition direction")
    price: Decimal = Field(description="Latest close at evaluation time")
    moving_average_value: Decimal = Field(description="Latest moving average value")
    sent_at: dt.datetime = Field(description="When the alert was attempted")
    delivery_succeeded: bool = Field(default=False)

    model_config = ConfigDict(frozen=True)


class Subscriber(BaseModel):
    """A subject with a notification endpoint configuration."""

    subject_id: int = Field(description="Subscriber identifier")
    bot_token: str = Field(description="Telegram bot token")
    chat_id: str = Field(description="Telegram chat identifier")
    enabled: bool = Field(default=True)

    @property
    def masked_token(self) -> str:
        """Bot token with the middle hidden, safe for display."""
        if len(self.bot_token) <= 10:
            return "***"
        return f"{self.bot_token[:6]}...{self.bot_token[-4:]}"
