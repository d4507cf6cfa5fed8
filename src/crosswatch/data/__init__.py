"""Market data access: provider client, pacing and caching."""

from crosswatch.data.alphavantage import MarketDataClient
from crosswatch.data.cache import ProviderCache, ProviderCacheEntry
from crosswatch.data.pacer import RequestPacer

__all__ = [
    "MarketDataClient",
    "ProviderCache",
    "ProviderCacheEntry",
    "RequestPacer",
]
