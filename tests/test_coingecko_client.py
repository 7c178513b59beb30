"""Tests for the CoinGecko client and its error taxonomy."""

import httpx
import pytest

from src.services.coingecko_client import (
    CoinGeckoClient,
    FetchError,
    HttpError,
    NetworkError,
    ParseError,
)
from src.utils.config import APIConfig


class TestCoinGeckoClient:
    """Tests for request building and error mapping."""

    @pytest.mark.asyncio
    async def test_get_coin_requests_coin_path(self, client, fake_api):
        payload = await client.get_coin("bitcoin")

        assert payload["name"] == "Bitcoin"
        assert fake_api.paths() == ["/coins/bitcoin"]

    @pytest.mark.asyncio
    async def test_get_market_chart_sends_currency_and_days(self, client, fake_api):
        await client.get_market_chart("ethereum", 30)

        request = fake_api.requests[0]
        assert request.url.path.endswith("/coins/ethereum/market_chart")
        assert request.url.query.decode() == "vs_currency=usd&days=30"

    @pytest.mark.asyncio
    async def test_non_2xx_raises_http_error_with_status(self, client):
        with pytest.raises(HttpError) as exc_info:
            await client.get_coin("not-a-coin")

        assert exc_info.value.status_code == 404
        assert "404" in str(exc_info.value)
        assert isinstance(exc_info.value, FetchError)

    @pytest.mark.asyncio
    async def test_rate_limited_response_is_http_error(self, client, fake_api):
        fake_api.status_overrides["bitcoin"] = 429

        with pytest.raises(HttpError, match="429"):
            await client.get_coin("bitcoin")

    @pytest.mark.asyncio
    async def test_invalid_json_raises_parse_error(self, client, fake_api):
        fake_api.raw_bodies["bitcoin"] = b"<html>maintenance</html>"

        with pytest.raises(ParseError):
            await client.get_coin("bitcoin")

    @pytest.mark.asyncio
    async def test_identifier_stays_a_single_path_segment(self, client, fake_api):
        with pytest.raises(HttpError, match="404"):
            await client.get_coin("bitcoin/market_chart")

        assert fake_api.requests[0].url.raw_path == b"/api/v3/coins/bitcoin%2Fmarket_chart"

    @pytest.mark.asyncio
    async def test_control_characters_are_escaped(self, client, fake_api):
        with pytest.raises(HttpError, match="404"):
            await client.get_market_chart("bit\ncoin", 7)

        assert fake_api.requests[0].url.raw_path.startswith(b"/api/v3/coins/bit%0Acoin/market_chart")

    @pytest.mark.asyncio
    async def test_unbuildable_url_raises_network_error(self, client, fake_api):
        with pytest.raises(NetworkError):
            await client.get_coin("a" * 70_000)

        assert fake_api.requests == []

    @pytest.mark.asyncio
    async def test_transport_failure_raises_network_error(self, client, fake_api):
        fake_api.network_down = True

        with pytest.raises(NetworkError, match="Name or service not known"):
            await client.get_coin("bitcoin")

    @pytest.mark.asyncio
    async def test_api_key_is_sent_as_header(self, fake_api):
        config = APIConfig(base_url="https://coingecko.test/api/v3", api_key="demo-key")
        async with CoinGeckoClient(config, transport=fake_api.transport()) as client:
            await client.get_coin("bitcoin")

        assert fake_api.requests[0].headers["x-cg-demo-api-key"] == "demo-key"

    @pytest.mark.asyncio
    async def test_no_api_key_header_by_default(self, client, fake_api):
        await client.get_coin("bitcoin")
        assert "x-cg-demo-api-key" not in fake_api.requests[0].headers

    def test_network_error_has_no_status(self):
        assert NetworkError("boom").status_code is None
        assert HttpError(503, "Service Unavailable").status_code == 503
        assert str(HttpError(500)) == "HTTP error! status: 500"

    @pytest.mark.asyncio
    async def test_timeout_maps_to_network_error(self, api_config):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with CoinGeckoClient(api_config, transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(NetworkError, match="timed out"):
                await client.get_coin("bitcoin")
