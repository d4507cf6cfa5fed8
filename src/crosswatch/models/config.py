"""Configuration models for crosswatch."""

from __future__ import annotations

import os
from datetime import time
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from crosswatch.models.signal import AlertKind


class AlphaVantageConfig(BaseModel):
    """Alpha Vantage API configuration.

    Attributes:
        api_key_env: Environment variable name for the API key
        base_url: Query endpoint
        cache_ttl_hours: How long fetched series stay fresh in memory
        min_request_interval_seconds: Minimum spacing between provider calls
        request_timeout_seconds: Upper bound for a single provider call
        sma_period: Moving average window in days
    """

    api_key_env: str = Field(default="ALPHA_VANTAGE_API_KEY", description="Env var for API key")
    base_url: str = Field(default="https://www.alphavantage.co/query", description="Query endpoint")
    cache_ttl_hours: float = Field(default=12, gt=0)
    # free tier allows 5 requests per minute
    min_request_interval_seconds: float = Field(default=12.5, ge=0)
    request_timeout_seconds: float = Field(default=30, gt=0)
    sma_period: int = Field(default=200, ge=2)

    def get_api_key(self) -> Optional[str]:
        """Get API key from environment."""
        return os.environ.get(self.api_key_env)


class TelegramConfig(BaseModel):
    """Telegram Bot API settings shared by all subscribers."""

    api_base: str = Field(default="https://api.telegram.org", description="Bot API base URL")
    timeout_seconds: float = Field(default=15, gt=0)


class SchedulerConfig(BaseModel):
    """Timing and alert policy for the crossover check job.

    Attributes:
        market_open: Local wall-clock time of the daily run (HH:MM)
        timezone: IANA zone ``market_open`` is expressed in
        initial_delay_seconds: Delay of the smoke-test run after start
        symbol_pacing_seconds: Pause between consecutive symbols of a watchlist
        dedup_lookback_days: Window in which a repeated alert is suppressed
        dispatch_kinds: Transition kinds that produce notifications
    """

    market_open: time = Field(default=time(9, 30))
    timezone: str = Field(default="America/New_York")
    initial_delay_seconds: float = Field(default=30, ge=0)
    symbol_pacing_seconds: float = Field(default=3, ge=0)
    dedup_lookback_days: int = Field(default=7, ge=0)
    dispatch_kinds: list[AlertKind] = Field(default_factory=lambda: [AlertKind.BEARISH])

    @field_validator("market_open", mode="before")
    @classmethod
    def _parse_market_open(cls, value: object) -> object:
        """Accept "HH:MM" strings from the environment."""
        if isinstance(value, str) and value.count(":") == 1:
            hours, minutes = value.split(":")
            return time(int(hours), int(minutes))
        return value


class AppConfig(BaseSettings):
    """Main application configuration.

    Loads configuration from environment variables with CROSSWATCH_ prefix.

    Attributes:
        alpha_vantage: Market data provider configuration
        telegram: Messaging endpoint configuration
        scheduler: Crossover job configuration
        data_dir: Directory for data storage
        db_path: Path to SQLite database (defaults to data_dir/crosswatch.db)
    """

    alpha_vantage: AlphaVantageConfig = Field(default_factory=AlphaVantageConfig)
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".crosswatch",
        description="Data directory"
    )
    db_path: Optional[Path] = Field(default=None, description="Database path")
    log_level: str = Field(default="INFO", description="Root log level")
    log_file: Optional[Path] = Field(default=None, description="Optional log file")

    model_config = SettingsConfigDict(
        env_prefix="CROSSWATCH_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @property
    def alpha_vantage_api_key(self) -> str:
        """Get Alpha Vantage API key from environment."""
        key = self.alpha_vantage.get_api_key()
        if not key:
            raise ValueError(f"{self.alpha_vantage.api_key_env} not set in environment")
        return key

    @property
    def database_path(self) -> Path:
        """Get the database path, defaulting to data_dir/crosswatch.db."""
        return self.db_path or (self.data_dir / "crosswatch.db")

    def ensure_data_dir(self) -> Path:
        """Ensure data directory exists and return its path."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        return self.data_dir
