"""Alpha Vantage market data client.

Fetches compact daily OHLCV history (``TIME_SERIES_DAILY``) and the
pre-computed long-window simple moving average (``SMA``) for a symbol.
Every outbound call goes through a shared ``RequestPacer`` and every parsed
series is kept in a ``ProviderCache`` so a watchlist check stays inside the
free-tier quota.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Optional

import requests

from crosswatch.analysis.crossover import merge_series
from crosswatch.data.cache import ProviderCache
from crosswatch.data.pacer import RequestPacer
from crosswatch.errors import (
    ProviderNoDataError,
    ProviderQuotaError,
    ProviderTransportError,
)
from crosswatch.models.bar import DailyBar, MergedRecord, MovingAveragePoint

if TYPE_CHECKING:
    from crosswatch.models.config import AppConfig

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.alphavantage.co/query"

DAILY_SERIES = "daily"
DAILY_SERIES_KEY = "Time Series (Daily)"
SMA_SERIES_KEY = "Technical Analysis: SMA"


def _to_decimal(raw: Any) -> Decimal:
    value = Decimal(str(raw))
    if not value.is_finite():
        raise InvalidOperation(f"non-finite value {raw!r}")
    return value


def _to_volume(raw: Any) -> int:
    try:
        return max(int(Decimal(str(raw))), 0)
    except (InvalidOperation, ValueError):
        return 0


class MarketDataClient:
    """
    Cache-first, rate-limited access to Alpha Vantage daily series.

    Attributes:
        cache: TTL cache for parsed series
        pacer: Shared minimum-interval gate for outbound calls
        sma_period: Moving average window in days
    """

    def __init__(
        self,
        api_key: str,
        session: Optional[requests.Session] = None,
        cache: Optional[ProviderCache] = None,
        pacer: Optional[RequestPacer] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30,
        sma_period: int = 200,
    ) -> None:
        """
        Initialize the client.

        Args:
            api_key: Alpha Vantage API key
            session: HTTP session (a new ``requests.Session`` if omitted)
            cache: Cache instance; share it between clients to share hits
            pacer: Pacer instance; must be shared by every caller of the API
            base_url: Query endpoint
            timeout: Per-request timeout in seconds
            sma_period: Moving average window in days
        """
        self.api_key = api_key
        self.session = session or requests.Session()
        self.cache = cache or ProviderCache()
        self.pacer = pacer or RequestPacer(min_interval=12.5)
        self.base_url = base_url
        self.timeout = timeout
        self.sma_period = sma_period

    @classmethod
    def from_config(cls, config: AppConfig) -> MarketDataClient:
        """Build a client from application settings."""
        av = config.alpha_vantage
        return cls(
            api_key=config.alpha_vantage_api_key,
            cache=ProviderCache(ttl_seconds=av.cache_ttl_hours * 3600),
            pacer=RequestPacer(min_interval=av.min_request_interval_seconds),
            base_url=av.base_url,
            timeout=av.request_timeout_seconds,
            sma_period=av.sma_period,
        )

    @property
    def sma_series(self) -> str:
        """Cache key series type for the moving average."""
        return f"sma{self.sma_period}"

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_daily_series(self, symbol: str) -> list[DailyBar]:
        """
        Fetch daily OHLCV history, oldest first.

        Raises:
            ProviderTransportError: HTTP/network failure
            ProviderQuotaError: Rate-limit or informational payload
            ProviderNoDataError: No usable series for the symbol
        """
        symbol = symbol.strip().upper()
        cached = self.cache.get(DAILY_SERIES, symbol)
        if cached is not None:
            logger.debug(f"Cache hit for daily prices: {symbol}")
            return cached

        logger.info(f"Fetching daily prices for {symbol}...")
        payload = self._request(
            symbol,
            DAILY_SERIES,
            {"function": "TIME_SERIES_DAILY", "symbol": symbol},
        )
        bars = self._parse_daily(payload, symbol)
        logger.info(
            f"Got {len(bars)} daily prices for {symbol} "
            f"({bars[0].date} to {bars[-1].date})"
        )
        self.cache.set(DAILY_SERIES, symbol, bars)
        return bars

    def get_moving_average_series(self, symbol: str) -> list[MovingAveragePoint]:
        """
        Fetch the pre-computed moving average series, oldest first.

        Raises:
            ProviderTransportError: HTTP/network failure
            ProviderQuotaError: Rate-limit or informational payload
            ProviderNoDataError: No usable series for the symbol
        """
        symbol = symbol.strip().upper()
        cached = self.cache.get(self.sma_series, symbol)
        if cached is not None:
            logger.debug(f"Cache hit for {self.sma_period}-day SMA: {symbol}")
            return cached

        logger.info(f"Fetching {self.sma_period}-day SMA for {symbol}...")
        payload = self._request(
            symbol,
            self.sma_series,
            {
                "function": "SMA",
                "symbol": symbol,
                "interval": "daily",
                "time_period": str(self.sma_period),
                "series_type": "close",
            },
        )
        points = self._parse_sma(payload, symbol)
        logger.info(
            f"Got {len(points)} SMA data points for {symbol} "
            f"({points[0].date} to {points[-1].date})"
        )
        self.cache.set(self.sma_series, symbol, points)
        return points

    def get_merged_history(self, symbol: str) -> list[MergedRecord]:
        """Fetch both series and join them by date."""
        bars = self.get_daily_series(symbol)
        averages = self.get_moving_average_series(symbol)
        return merge_series(bars, averages)

    def cache_info(self, symbol: str) -> dict[str, Any]:
        """Report which series for ``symbol`` are currently cached."""
        symbol = symbol.strip().upper()
        return {
            "daily_cached": self.cache.contains(DAILY_SERIES, symbol),
            "sma_cached": self.cache.contains(self.sma_series, symbol),
            "ttl_hours": self.cache.ttl_seconds / 3600,
            "entries": self.cache.size,
        }

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def _request(self, symbol: str, series_type: str, params: dict[str, str]) -> dict[str, Any]:
        """Paced GET returning a validated JSON payload."""
        self.pacer.wait()
        try:
            response = self.session.get(
                self.base_url,
                params={**params, "apikey": self.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ProviderTransportError(
                f"Alpha Vantage request failed for {symbol}: {e}",
                symbol=symbol,
                series_type=series_type,
            ) from e

        if not response.ok:
            raise ProviderTransportError(
                f"Alpha Vantage HTTP {response.status_code} for {symbol}",
                symbol=symbol,
                series_type=series_type,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderTransportError(
                f"Alpha Vantage returned a non-JSON body for {symbol}",
                symbol=symbol,
                series_type=series_type,
            ) from e

        if not isinstance(payload, dict):
            raise ProviderTransportError(
                f"Alpha Vantage returned an unexpected payload for {symbol}",
                symbol=symbol,
                series_type=series_type,
            )

        self._check_payload(payload, symbol, series_type)
        return payload

    @staticmethod
    def _check_payload(payload: dict[str, Any], symbol: str, series_type: str) -> None:
        """Raise the typed failure for provider-level error fields."""
        if "Note" in payload:
            raise ProviderQuotaError(
                f"Alpha Vantage rate limit: {payload['Note']}",
                symbol=symbol,
                series_type=series_type,
            )
        if "Information" in payload:
            raise ProviderQuotaError(
                f"Alpha Vantage: {payload['Information']}",
                symbol=symbol,
                series_type=series_type,
            )
        if "Error Message" in payload:
            raise ProviderNoDataError(
                f"Alpha Vantage: {payload['Error Message']}",
                symbol=symbol,
                series_type=series_type,
            )

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def _parse_daily(self, payload: dict[str, Any], symbol: str) -> list[DailyBar]:
        series = payload.get(DAILY_SERIES_KEY)
        if not series:
            raise ProviderNoDataError(
                f"No daily data returned for {symbol}",
                symbol=symbol,
                series_type=DAILY_SERIES,
            )

        bars: list[DailyBar] = []
        for day in sorted(series):
            values = series[day]
            try:
                bars.append(
                    DailyBar(
                        date=date.fromisoformat(day[:10]),
                        open=_to_decimal(values["1. open"]),
                        high=_to_decimal(values["2. high"]),
                        low=_to_decimal(values["3. low"]),
                        close=_to_decimal(values["4. close"]),
                        volume=_to_volume(values.get("5. volume", 0)),
                    )
                )
            except (KeyError, TypeError, ValueError, InvalidOperation) as e:
                logger.warning(f"Skipping malformed daily bar {symbol} {day}: {e}")

        if not bars:
            raise ProviderNoDataError(
                f"No usable daily bars for {symbol}",
                symbol=symbol,
                series_type=DAILY_SERIES,
            )
        return bars

    def _parse_sma(self, payload: dict[str, Any], symbol: str) -> list[MovingAveragePoint]:
        series = payload.get(SMA_SERIES_KEY)
        if not series:
            raise ProviderNoDataError(
                f"No SMA data returned for {symbol}",
                symbol=symbol,
                series_type=self.sma_series,
            )

        points: list[MovingAveragePoint] = []
        for day in sorted(series):
            try:
                points.append(
                    MovingAveragePoint(
                        date=date.fromisoformat(day[:10]),
                        value=_to_decimal(series[day]["SMA"]),
                    )
                )
            except (KeyError, TypeError, ValueError, InvalidOperation) as e:
                logger.warning(f"Skipping malformed SMA point {symbol} {day}: {e}")

        if not points:
            raise ProviderNoDataError(
                f"No usable SMA points for {symbol}",
                symbol=symbol,
                series_type=self.sma_series,
            )
        return points
