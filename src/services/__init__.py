"""Services package."""

from src.services.rates import (
    ExchangeRateApiProvider,
    InvalidRateTableError,
    RateProviderConnectionError,
    RateProviderError,
    RateProviderInterface,
    RateProviderResponseError,
    RateTableCache,
)

__all__ = [
    "ExchangeRateApiProvider",
    "InvalidRateTableError",
    "RateProviderConnectionError",
    "RateProviderError",
    "RateProviderInterface",
    "RateProviderResponseError",
    "RateTableCache",
]
