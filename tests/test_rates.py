"""
Tests for the rate table cache and the ExchangeRate-API provider.

No real API calls: the provider is driven through httpx.MockTransport
and its coroutines are awaited by pytest-asyncio.
"""

import json

import httpx
import pytest

from src.config import ExchangeRateSettings
from src.models.split import CurrencyInfo
from src.services.rates import (
    FALLBACK_SYMBOLS,
    ExchangeRateApiProvider,
    InvalidRateTableError,
    RateProviderConnectionError,
    RateProviderResponseError,
    RateTableCache,
    build_currency_metadata,
    resolve_symbol,
)


class TestSymbolResolution:
    """Tests for currency symbol lookup."""

    def test_metadata_symbol_wins(self):
        """Test an explicit metadata symbol is used."""
        metadata = {"USD": CurrencyInfo(code="USD", name="US Dollar", symbol="US$")}
        assert resolve_symbol("USD", metadata) == "US$"

    @pytest.mark.parametrize("code, symbol", [
        ("USD", "$"), ("EUR", "€"), ("GBP", "£"), ("NGN", "₦"), ("CAD", "C$"),
        ("AUD", "A$"), ("JPY", "¥"), ("CNY", "¥"), ("INR", "₹"), ("ZAR", "R"),
    ])
    def test_fallback_table(self, code, symbol):
        """Test well-known codes resolve without metadata."""
        assert resolve_symbol(code, {}) == symbol

    def test_unknown_code_returns_code(self):
        """Test an unknown code resolves to itself."""
        assert resolve_symbol("XAF", {}) == "XAF"
        assert resolve_symbol("", {}) == ""

    def test_fallback_table_is_read_only(self):
        """Test the static table cannot be modified."""
        with pytest.raises(TypeError):
            FALLBACK_SYMBOLS["USD"] = "X"

    def test_build_metadata_uses_fallback_symbols(self):
        """Test provider pairs get fallback symbols or their code."""
        metadata = build_currency_metadata([("EUR", "Euro"), ("KES", "Kenyan Shilling")])
        assert metadata == [
            CurrencyInfo(code="EUR", name="Euro", symbol="€"),
            CurrencyInfo(code="KES", name="Kenyan Shilling", symbol="KES"),
        ]


class TestRateTableCache:
    """Tests for RateTableCache."""

    def test_starts_empty(self):
        """Test a new cache holds no tables."""
        cache = RateTableCache()
        assert not cache.has_rates
        assert cache.base_currency is None
        assert cache.rates_updated_at is None
        assert cache.get_rate("EUR") is None

    def test_set_rates_replaces_wholesale(self):
        """Test a new table replaces the old one without merging."""
        cache = RateTableCache(rates={"EUR": 0.9, "GBP": 0.8}, base_currency="USD")
        cache.set_rates({"NGN": 1600}, base_currency="USD")

        assert dict(cache.rates) == {"NGN": 1600.0}
        assert cache.get_rate("EUR") is None

    def test_base_currency_rate_is_one(self):
        """Test the base currency has rate 1 even if not listed."""
        cache = RateTableCache(rates={"EUR": 0.9}, base_currency="USD")
        assert cache.get_rate("USD") == 1.0
        assert cache.get_rate("EUR") == 0.9

    @pytest.mark.parametrize("table", [
        {}, None, [("EUR", 0.9)], {"EUR": "0.9"}, {"EUR": -1}, {"EUR": float("nan")},
        {"EUR": True}, {"": 1.0},
    ])
    def test_rejects_bad_tables_and_keeps_previous(self, table):
        """Test empty or malformed tables leave the cache unchanged."""
        cache = RateTableCache(rates={"EUR": 0.9}, base_currency="USD")
        stamp = cache.rates_updated_at

        with pytest.raises(InvalidRateTableError):
            cache.set_rates(table, base_currency="GBP")

        assert dict(cache.rates) == {"EUR": 0.9}
        assert cache.base_currency == "USD"
        assert cache.rates_updated_at == stamp

    def test_zero_rate_is_stored(self):
        """Test a zero rate is kept; the engine treats it as missing."""
        cache = RateTableCache(rates={"EUR": 0}, base_currency="USD")
        assert cache.rates["EUR"] == 0.0

    def test_rates_view_is_read_only(self):
        """Test callers cannot edit the cached table."""
        cache = RateTableCache(rates={"EUR": 0.9}, base_currency="USD")
        with pytest.raises(TypeError):
            cache.rates["EUR"] = 1.0

    def test_keys_are_case_sensitive(self):
        """Test lookups match codes exactly."""
        cache = RateTableCache(rates={"EUR": 0.9}, base_currency="USD")
        assert cache.get_rate("eur") is None

    def test_metadata_first_entry_wins(self):
        """Test duplicate codes keep the first entry."""
        cache = RateTableCache()
        cache.set_metadata([
            CurrencyInfo(code="EUR", name="Euro", symbol="€"),
            CurrencyInfo(code="EUR", name="Other", symbol="E"),
        ])
        assert cache.resolve_symbol("EUR") == "€"
        assert len(cache.currencies) == 1

    def test_empty_metadata_rejected(self):
        """Test an empty currency list does not clear metadata."""
        cache = RateTableCache(metadata=[CurrencyInfo(code="EUR", name="Euro", symbol="EU")])
        with pytest.raises(InvalidRateTableError):
            cache.set_metadata([])
        assert cache.resolve_symbol("EUR") == "EU"

    def test_resolve_symbol_falls_back(self):
        """Test the cache resolves via fallback table and then the code."""
        cache = RateTableCache(metadata=[CurrencyInfo(code="EUR", name="Euro", symbol="EU")])
        assert cache.resolve_symbol("EUR") == "EU"
        assert cache.resolve_symbol("GBP") == "£"
        assert cache.resolve_symbol("XYZ") == "XYZ"


def make_provider(handler, max_retries=1):
    settings = ExchangeRateSettings(
        api_key="test-key",
        base_url="https://rates.example/v6/",
        max_retries=max_retries,
    )
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ExchangeRateApiProvider(settings=settings, client=client)


def json_response(payload, status_code=200):
    return httpx.Response(status_code, content=json.dumps(payload).encode("utf-8"))


class TestExchangeRateApiProvider:
    """Tests for the ExchangeRate-API client."""

    @pytest.mark.asyncio
    async def test_fetch_supported_currencies(self):
        """Test the codes endpoint is parsed into pairs."""
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return json_response({
                "result": "success",
                "supported_codes": [["EUR", "Euro"], ["USD", "United States Dollar"]],
            })

        provider = make_provider(handler)
        pairs = await provider.fetch_supported_currencies()

        assert pairs == [("EUR", "Euro"), ("USD", "United States Dollar")]
        assert seen == ["https://rates.example/v6/test-key/codes"]

    @pytest.mark.asyncio
    async def test_fetch_latest_rates(self):
        """Test the latest endpoint is parsed into a float table."""
        def handler(request):
            assert request.url.path == "/v6/test-key/latest/USD"
            return json_response({
                "result": "success",
                "base_code": "USD",
                "conversion_rates": {"USD": 1, "EUR": 0.92, "NGN": 1640},
            })

        rates = await make_provider(handler).fetch_latest_rates("USD")
        assert rates == {"USD": 1.0, "EUR": 0.92, "NGN": 1640.0}
        assert all(isinstance(rate, float) for rate in rates.values())

    @pytest.mark.asyncio
    async def test_error_payload_is_not_retried(self):
        """Test an API error answer raises immediately with its type."""
        calls = []

        def handler(request):
            calls.append(request)
            return json_response({"result": "error", "error-type": "invalid-key"}, 403)

        provider = make_provider(handler, max_retries=3)
        with pytest.raises(RateProviderResponseError) as exc_info:
            await provider.fetch_latest_rates("USD")

        assert exc_info.value.error_type == "invalid-key"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_error_key_is_failure(self):
        """Test a payload with an 'error' key is a failure."""
        handler = lambda request: json_response({"error": "bad base"})
        with pytest.raises(RateProviderResponseError):
            await make_provider(handler).fetch_latest_rates("XXX")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"result": "success"},
        {"result": "success", "conversion_rates": {}},
        {"result": "success", "conversion_rates": {"EUR": "0.9"}},
        ["not", "an", "object"],
    ])
    async def test_malformed_rates_payload(self, payload):
        """Test unusable rate payloads raise instead of returning partial data."""
        handler = lambda request: json_response(payload)
        with pytest.raises(RateProviderResponseError):
            await make_provider(handler).fetch_latest_rates("USD")

    @pytest.mark.asyncio
    async def test_malformed_codes_payload(self):
        """Test a bad currency entry fails the whole list."""
        handler = lambda request: json_response({
            "result": "success",
            "supported_codes": [["EUR", "Euro"], ["USD"]],
        })
        with pytest.raises(RateProviderResponseError):
            await make_provider(handler).fetch_supported_currencies()

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        """Test a non-JSON body is a response error."""
        handler = lambda request: httpx.Response(200, content=b"<html>oops</html>")
        with pytest.raises(RateProviderResponseError):
            await make_provider(handler).fetch_latest_rates("USD")

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        """Test network errors surface as connection errors."""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(RateProviderConnectionError):
            await make_provider(handler).fetch_latest_rates("USD")

    @pytest.mark.asyncio
    async def test_non_transport_http_error(self):
        """Test other httpx failures become provider errors and are not retried."""
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.DecodingError("bad body encoding", request=request)

        provider = make_provider(handler, max_retries=3)
        with pytest.raises(RateProviderResponseError) as exc_info:
            await provider.fetch_latest_rates("USD")

        assert exc_info.value.error_type == "http_error"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_server_error_is_retried(self):
        """Test a 5xx answer is retried before succeeding."""
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                return httpx.Response(503)
            return json_response({"result": "success", "conversion_rates": {"EUR": 0.9}})

        rates = await make_provider(handler, max_retries=2).fetch_latest_rates("USD")
        assert rates == {"EUR": 0.9}
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_context_manager_owns_client(self):
        """Test the provider opens and closes its own client."""
        provider = ExchangeRateApiProvider(settings=ExchangeRateSettings(api_key="test-key"))
        async with provider:
            client = provider._client
            assert client is not None

        assert client.is_closed


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
