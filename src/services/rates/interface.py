"""
Abstract Rate Provider Interface

DESIGN DECISION: The split engine never talks to the network. Rate tables
and currency lists are fetched by a provider and handed to the cache
wholesale. Defining the provider as an interface allows us to:
1. Swap ExchangeRate-API for another source later
2. Use canned providers in tests
3. Keep the engine free of I/O
"""

from abc import ABC, abstractmethod


class RateProviderError(Exception):
    """Base exception for rate provider errors."""
    pass


class RateProviderConnectionError(RateProviderError):
    """Could not reach the provider (network failure, timeout, 5xx)."""
    pass


class RateProviderResponseError(RateProviderError):
    """Provider answered, but not with a usable payload."""

    def __init__(self, message: str, error_type: str = "invalid_response"):
        self.error_type = error_type
        super().__init__(message)


class RateProviderInterface(ABC):
    """
    Abstract interface for exchange rate sources.

    Implementations return fully parsed data or raise RateProviderError.
    They must never return a partial table in place of an error.
    """

    @abstractmethod
    async def fetch_supported_currencies(self) -> list[tuple[str, str]]:
        """
        Fetch the list of supported currencies.

        Returns:
            (code, display name) pairs in provider order

        Raises:
            RateProviderError: If the list could not be fetched
        """
        pass

    @abstractmethod
    async def fetch_latest_rates(self, base_currency: str) -> dict[str, float]:
        """
        Fetch current rates against a base currency.

        Args:
            base_currency: Code every rate is expressed against

        Returns:
            Mapping of code -> units of that currency per 1 unit of base

        Raises:
            RateProviderError: If the table could not be fetched
        """
        pass
