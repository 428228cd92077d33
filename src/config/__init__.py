"""Configuration package."""

from src.config.settings import (
    AppSettings,
    ExchangeRateSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "ExchangeRateSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
