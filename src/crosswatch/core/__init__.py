"""Core utilities and configuration."""

from crosswatch.core.config import get_settings, load_app_config, reset_settings
from crosswatch.core.logging import setup_logging

__all__ = [
    "get_settings",
    "load_app_config",
    "reset_settings",
    "setup_logging",
]
