"""Async client for the public CoinGecko REST API."""

import json
from typing import Any
from urllib.parse import quote

import httpx

from src.utils.config import APIConfig, config
from src.utils.logger import StructuredLogger

logger = StructuredLogger("CoinGeckoClient")


class FetchError(Exception):
    """Base class for everything that can go wrong fetching from the API."""

    status_code: int | None = None


class NetworkError(FetchError):
    """Transport failure: DNS, connection refused, timeout."""


class HttpError(FetchError):
    """The API answered with a non-2xx status."""

    def __init__(self, status_code: int, reason: str = ""):
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"HTTP error! status: {status_code} {reason}".rstrip())


class ParseError(FetchError):
    """The response body was not valid JSON."""


class CoinGeckoClient:
    """Thin wrapper over httpx.AsyncClient for the two dashboard endpoints."""

    def __init__(
        self,
        api_config: APIConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            api_config: Base URL, key and timeout (defaults to the global config)
            transport: Optional httpx transport, e.g. httpx.MockTransport in tests
        """
        self.api_config = api_config or config.api
        headers = {"accept": "application/json"}
        if self.api_config.api_key:
            headers["x-cg-demo-api-key"] = self.api_config.api_key

        self._client = httpx.AsyncClient(
            base_url=self.api_config.base_url,
            headers=headers,
            timeout=self.api_config.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "CoinGeckoClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_coin(self, coin_id: str) -> dict[str, Any]:
        """GET /coins/{id}: the full asset detail document."""
        return await self._get_json(f"/coins/{quote(coin_id, safe='')}")

    async def get_market_chart(self, coin_id: str, days: int, vs_currency: str = "usd") -> dict[str, Any]:
        """GET /coins/{id}/market_chart: price, market cap and volume history."""
        return await self._get_json(
            f"/coins/{quote(coin_id, safe='')}/market_chart",
            params={"vs_currency": vs_currency, "days": days},
        )

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        logger.debug("Requesting CoinGecko resource", context={"path": path, "params": params or {}})

        try:
            response = await self._client.get(path, params=params)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise NetworkError(str(e) or type(e).__name__) from e

        if not response.is_success:
            raise HttpError(response.status_code, response.reason_phrase)

        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(f"Invalid JSON in response: {e}") from e
