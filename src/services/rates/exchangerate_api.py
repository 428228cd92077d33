"""
Rate Provider using ExchangeRate-API (v6)

Endpoints used:
- GET {base_url}/{api_key}/codes          -> supported currency list
- GET {base_url}/{api_key}/latest/{base}  -> conversion rates against base

Both answer with a JSON object carrying "result": "success" on success,
or "result": "error" plus an "error-type" on failure (often with a 4xx
status, so the body is inspected before the status code).

DESIGN DECISION: Only transport failures are retried. A well-formed error
answer (bad key, unsupported code, quota reached) will not improve on
retry and is raised immediately.
"""

from typing import Any, Optional

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.config import ExchangeRateSettings, get_settings
from src.services.rates.interface import (
    RateProviderConnectionError,
    RateProviderInterface,
    RateProviderResponseError,
)


logger = structlog.get_logger(__name__)


class ExchangeRateApiProvider(RateProviderInterface):
    """
    Fetches currency lists and rate tables from ExchangeRate-API.

    Can be used as an async context manager to share one HTTP client
    across calls; otherwise a short-lived client is opened per request.
    """

    def __init__(
        self,
        settings: Optional[ExchangeRateSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._settings = settings or get_settings().exchange_rate
        self._client = client
        self._owns_client = False

    async def __aenter__(self) -> "ExchangeRateApiProvider":
        if self._client is None:
            self._client = self._new_client()
            self._owns_client = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
            self._owns_client = False

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._settings.timeout_seconds,
            headers={"Accept": "application/json"},
        )

    def _url(self, path: str) -> str:
        return f"{self._settings.base_url}/{self._settings.api_key}/{path}"

    async def _request(self, client: httpx.AsyncClient, path: str) -> httpx.Response:
        try:
            response = await client.get(self._url(path))
        except httpx.TransportError as e:
            raise RateProviderConnectionError(f"Could not reach ExchangeRate-API: {e}")
        except httpx.HTTPError as e:
            raise RateProviderResponseError(
                f"ExchangeRate-API request failed: {e}",
                error_type="http_error",
            )

        if response.status_code >= 500:
            raise RateProviderConnectionError(
                f"ExchangeRate-API unavailable (HTTP {response.status_code})"
            )
        return response

    async def _get_json(self, path: str) -> dict[str, Any]:
        """
        Fetch an endpoint and return its payload once it reports success.

        Raises:
            RateProviderConnectionError: After all retry attempts fail
            RateProviderResponseError: If the payload reports an error
                or is not a JSON object
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._settings.max_retries),
            wait=wait_exponential(multiplier=1, min=2, max=10),
            retry=retry_if_exception_type(RateProviderConnectionError),
            reraise=True,
        )

        async for attempt in retrying:
            with attempt:
                if self._client is not None:
                    response = await self._request(self._client, path)
                else:
                    async with self._new_client() as client:
                        response = await self._request(client, path)

        try:
            data = response.json()
        except ValueError:
            raise RateProviderResponseError(
                f"ExchangeRate-API returned non-JSON body (HTTP {response.status_code})"
            )

        if not isinstance(data, dict):
            raise RateProviderResponseError("ExchangeRate-API returned an unexpected payload")

        if data.get("result") != "success" or "error" in data:
            error_type = str(data.get("error-type") or data.get("error") or "unknown-error")
            raise RateProviderResponseError(
                f"ExchangeRate-API request failed: {error_type}",
                error_type=error_type,
            )

        return data

    async def fetch_supported_currencies(self) -> list[tuple[str, str]]:
        data = await self._get_json("codes")

        codes = data.get("supported_codes")
        if not isinstance(codes, list) or not codes:
            raise RateProviderResponseError("Invalid currency data")

        pairs = []
        for entry in codes:
            if (
                not isinstance(entry, (list, tuple))
                or len(entry) != 2
                or not all(isinstance(part, str) for part in entry)
            ):
                raise RateProviderResponseError(f"Invalid currency entry: {entry!r}")
            pairs.append((entry[0], entry[1]))

        logger.debug("currencies_fetched", count=len(pairs))
        return pairs

    async def fetch_latest_rates(self, base_currency: str) -> dict[str, float]:
        data = await self._get_json(f"latest/{base_currency}")

        rates = data.get("conversion_rates")
        if not isinstance(rates, dict) or not rates:
            raise RateProviderResponseError(f"No conversion rates for {base_currency}")

        table = {}
        for code, rate in rates.items():
            if isinstance(rate, bool) or not isinstance(rate, (int, float)):
                raise RateProviderResponseError(f"Invalid rate for {code}: {rate!r}")
            table[code] = float(rate)

        logger.debug("rates_fetched", base_currency=base_currency, count=len(table))
        return table
