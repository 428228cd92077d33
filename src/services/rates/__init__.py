"""
Rate Services Package

Provides the rate table cache used by the split engine, the abstract
provider interface, and the ExchangeRate-API implementation.
"""

from src.services.rates.cache import (
    FALLBACK_SYMBOLS,
    InvalidRateTableError,
    RateTableCache,
    build_currency_metadata,
    fallback_symbol,
    resolve_symbol,
)
from src.services.rates.interface import (
    RateProviderConnectionError,
    RateProviderError,
    RateProviderInterface,
    RateProviderResponseError,
)
from src.services.rates.exchangerate_api import ExchangeRateApiProvider

__all__ = [
    # Cache
    "FALLBACK_SYMBOLS",
    "InvalidRateTableError",
    "RateTableCache",
    "build_currency_metadata",
    "fallback_symbol",
    "resolve_symbol",
    # Interface
    "RateProviderInterface",
    # Exceptions
    "RateProviderConnectionError",
    "RateProviderError",
    "RateProviderResponseError",
    # ExchangeRate-API implementation
    "ExchangeRateApiProvider",
]
