"""
Rate Table Cache

Holds the most recently fetched exchange rate table and currency
metadata, and resolves display symbols for currency codes.

DESIGN DECISION: Tables are replaced wholesale, never merged. A refresh
that fails never reaches this class, and a table that is empty or
malformed is rejected here, so the previously cached table always
survives a bad refresh.

Keys are case-sensitive and stored exactly as supplied.
"""

import math
from datetime import datetime
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from src.models.split import CurrencyInfo


# Symbols for common codes, used when metadata has no entry for a code.
FALLBACK_SYMBOLS: Mapping[str, str] = MappingProxyType({
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "NGN": "₦",
    "CAD": "C$",
    "AUD": "A$",
    "JPY": "¥",
    "CNY": "¥",
    "INR": "₹",
    "ZAR": "R",
})


class InvalidRateTableError(ValueError):
    """A rate table or metadata table was rejected; the cache is unchanged."""
    pass


def fallback_symbol(code: str) -> str:
    """Symbol from the static table, or the code itself."""
    return FALLBACK_SYMBOLS.get(code, code)


def resolve_symbol(code: str, metadata: Mapping[str, CurrencyInfo]) -> str:
    """
    Resolve the display symbol for a currency code.

    Lookup order: metadata entry, static fallback table, the code itself.
    Never raises.
    """
    info = metadata.get(code)
    if info is not None:
        return info.symbol
    return fallback_symbol(code)


def build_currency_metadata(pairs: Iterable[tuple[str, str]]) -> list[CurrencyInfo]:
    """
    Turn provider (code, name) pairs into currency metadata.

    Providers do not supply symbols, so each entry takes its symbol from
    the static fallback table (or the code when the table has none).
    """
    return [
        CurrencyInfo(code=code, name=name, symbol=fallback_symbol(code))
        for code, name in pairs
    ]


def _is_valid_rate(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value >= 0


class RateTableCache:
    """
    Latest rate table plus currency metadata.

    Rates are "1 unit of base currency = rate units of this currency".
    The base currency itself always has rate 1, whether or not the
    provider listed it.
    """

    def __init__(
        self,
        rates: Optional[Mapping[str, float]] = None,
        base_currency: Optional[str] = None,
        metadata: Optional[Iterable[CurrencyInfo]] = None,
    ):
        self._rates: dict[str, float] = {}
        self._base_currency: Optional[str] = None
        self._metadata: dict[str, CurrencyInfo] = {}
        self.rates_updated_at: Optional[datetime] = None
        self.metadata_updated_at: Optional[datetime] = None

        if rates is not None:
            self.set_rates(rates, base_currency)
        if metadata is not None:
            self.set_metadata(metadata)

    # -------------------------------------------------------------------------
    # Rates
    # -------------------------------------------------------------------------

    @property
    def rates(self) -> Mapping[str, float]:
        """Read-only view of the current rate table."""
        return MappingProxyType(self._rates)

    @property
    def base_currency(self) -> Optional[str]:
        """Base currency the current rate table was fetched against."""
        return self._base_currency

    @property
    def has_rates(self) -> bool:
        return bool(self._rates)

    def set_rates(
        self,
        table: Mapping[str, float],
        base_currency: Optional[str] = None,
    ) -> None:
        """
        Replace the rate table wholesale.

        Raises:
            InvalidRateTableError: If the table is empty or contains
                non-numeric, negative or non-finite rates. The previous
                table is kept.
        """
        if not isinstance(table, Mapping) or not table:
            raise InvalidRateTableError("Rate table is empty")

        bad_codes = [
            code for code, rate in table.items()
            if not isinstance(code, str) or not code or not _is_valid_rate(rate)
        ]
        if bad_codes:
            raise InvalidRateTableError(
                f"Rate table has invalid entries for: {', '.join(map(str, bad_codes))}"
            )

        self._rates = {code: float(rate) for code, rate in table.items()}
        self._base_currency = base_currency
        self.rates_updated_at = datetime.utcnow()

    def get_rate(self, code: str) -> Optional[float]:
        """
        Rate for a code against the cached base.

        Returns 1.0 for the base currency itself and None for unknown codes.
        """
        if code == self._base_currency:
            return 1.0
        return self._rates.get(code)

    # -------------------------------------------------------------------------
    # Metadata
    # -------------------------------------------------------------------------

    @property
    def metadata(self) -> Mapping[str, CurrencyInfo]:
        """Read-only view of currency metadata keyed by code."""
        return MappingProxyType(self._metadata)

    @property
    def currencies(self) -> list[CurrencyInfo]:
        """Metadata entries in the order they were supplied."""
        return list(self._metadata.values())

    def set_metadata(self, currencies: Iterable[CurrencyInfo]) -> None:
        """
        Replace currency metadata wholesale.

        The first entry for a code wins; later duplicates are ignored.

        Raises:
            InvalidRateTableError: If no currencies were supplied.
        """
        table: dict[str, CurrencyInfo] = {}
        for info in currencies:
            table.setdefault(info.code, info)

        if not table:
            raise InvalidRateTableError("Currency metadata is empty")

        self._metadata = table
        self.metadata_updated_at = datetime.utcnow()

    def resolve_symbol(self, code: str) -> str:
        """Display symbol for a code. Never raises."""
        return resolve_symbol(code, self._metadata)
