"""Pydantic models for data representation."""

from crosswatch.models.bar import DailyBar, MergedRecord, MovingAveragePoint
from crosswatch.models.config import (
    AlphaVantageConfig,
    AppConfig,
    SchedulerConfig,
    TelegramConfig,
)
from crosswatch.models.signal import (
    AlertKind,
    AlertRecord,
    CrossoverEvent,
    CrossoverKind,
    Evaluation,
    Position,
    PositionState,
    Subscriber,
)

__all__ = [
    # Series
    "DailyBar",
    "MergedRecord",
    "MovingAveragePoint",
    # Signals
    "AlertKind",
    "AlertRecord",
    "CrossoverEvent",
    "CrossoverKind",
    "Evaluation",
    "Position",
    "PositionState",
    "Subscriber",
    # Config
    "AlphaVantageConfig",
    "AppConfig",
    "SchedulerConfig",
    "TelegramConfig",
]
