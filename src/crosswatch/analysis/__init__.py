"""Pure series analysis: merging and crossover detection."""

from crosswatch.analysis.crossover import (
    HistorySummary,
    detect_crossovers,
    latest_points,
    merge_series,
    summarize_history,
)

__all__ = [
    "HistorySummary",
    "detect_crossovers",
    "latest_points",
    "merge_series",
    "summarize_history",
]
