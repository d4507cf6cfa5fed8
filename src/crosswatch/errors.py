"""Exception hierarchy for crosswatch.

Every failure a single symbol check can hit derives from ``CrosswatchError``
so the scheduler can catch the whole family at the per-symbol boundary.
"""

from __future__ import annotations

from typing import Optional


class CrosswatchError(Exception):
    """Base exception for crosswatch errors."""

    pass


class ProviderError(CrosswatchError):
    """Base exception for market data provider failures.

    Attributes:
        symbol: Symbol the failing request was made for
        series_type: Series requested ("daily" or "sma")
    """

    def __init__(
        self,
        message: str,
        symbol: Optional[str] = None,
        series_type: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.symbol = symbol
        self.series_type = series_type


class ProviderTransportError(ProviderError):
    """HTTP or network level failure talking to the provider."""

    pass


class ProviderQuotaError(ProviderError):
    """The provider answered with a rate-limit or informational message."""

    pass


class ProviderNoDataError(ProviderError):
    """The provider returned no usable series (unknown or empty symbol)."""

    pass


class InsufficientDataError(CrosswatchError):
    """No usable latest price / moving average to classify a position."""

    pass


class NotificationDeliveryError(CrosswatchError):
    """The messaging endpoint rejected or failed to accept a message."""

    pass
