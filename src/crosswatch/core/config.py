"""Configuration loading utilities."""

from __future__ import annotations

from crosswatch.models.config import AppConfig


def load_app_config() -> AppConfig:
    """Load application configuration from environment variables.

    Returns:
        AppConfig object with settings from environment
    """
    return AppConfig()


# Singleton settings instance
_settings: AppConfig | None = None


def get_settings() -> AppConfig:
    """Get or create the settings singleton.

    This ensures we only load settings once and reuse them.
    """
    global _settings
    if _settings is None:
        from dotenv import load_dotenv
        load_dotenv()  # Ensure .env is loaded
        _settings = load_app_config()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call reloads them."""
    global _settings
    _settings = None
