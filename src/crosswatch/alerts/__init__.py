"""Transition tracking, alert deduplication and notification dispatch."""

from crosswatch.alerts.dedup import AlertDeduplicator
from crosswatch.alerts.notifier import (
    DispatchResult,
    NotificationDispatcher,
    format_alert_message,
)
from crosswatch.alerts.tracker import PositionTracker, classify

__all__ = [
    "AlertDeduplicator",
    "DispatchResult",
    "NotificationDispatcher",
    "PositionTracker",
    "classify",
    "format_alert_message",
]
