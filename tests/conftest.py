"""Pytest configuration and fixtures."""

import asyncio
from urllib.parse import unquote

import httpx
import pytest

from src.services.coingecko_client import CoinGeckoClient
from src.utils.config import APIConfig, Config, DashboardConfig

TEST_BASE_URL = "https://coingecko.test/api/v3"
API_PREFIX = "/api/v3"


def coin_payload(coin_id: str, name: str, price: float) -> dict:
    """A trimmed /coins/{id} document."""
    return {
        "id": coin_id,
        "name": name,
        "sentiment_votes_up_percentage": 80.5,
        "market_data": {
            "current_price": {"usd": price},
            "market_cap_change_percentage_24h": -1.25,
            "ath": {"usd": price * 2},
            "atl": {"usd": price / 100},
            "high_24h": {"usd": price * 1.01},
            "low_24h": {"usd": price * 0.99},
            "price_change_24h_in_currency": {"usd": 12.5},
            "market_cap": {"usd": price * 19_000_000},
            "total_volume": {"usd": 25_000_000_000},
            "circulating_supply": 19_000_000,
        },
        "community_data": {"twitter_followers": 6_500_000},
    }


def chart_payload(start_price: float, points: int = 3) -> dict:
    timestamps = [1_700_000_000_000 + i * 3_600_000 for i in range(points)]
    return {
        "prices": [[ts, start_price + i] for i, ts in enumerate(timestamps)],
        "market_caps": [[ts, (start_price + i) * 1000] for i, ts in enumerate(timestamps)],
        "total_volumes": [[ts, 500.0 + i] for i, ts in enumerate(timestamps)],
    }


class FakeCoinGecko:
    """
    Programmable stand-in for the CoinGecko API, served through httpx.MockTransport.

    Unknown coins answer 404. `status_overrides` forces a status per coin id,
    `raw_bodies` replaces the JSON body, and `gates` holds a response for a
    coin id until the matching asyncio.Event is set.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.coins: dict[str, dict] = {
            "bitcoin": coin_payload("bitcoin", "Bitcoin", 60_000.0),
            "ethereum": coin_payload("ethereum", "Ethereum", 3_000.0),
        }
        self.status_overrides: dict[str, int] = {}
        self.raw_bodies: dict[str, bytes] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.network_down = False

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.network_down:
            raise httpx.ConnectError("Name or service not known", request=request)

        raw_path = request.url.raw_path.decode("ascii").split("?")[0]
        parts = [unquote(p) for p in raw_path.removeprefix(API_PREFIX).strip("/").split("/")]
        coin_id = parts[1] if len(parts) > 1 else ""

        gate = self.gates.get(coin_id)
        if gate is not None:
            await gate.wait()

        if coin_id in self.status_overrides:
            return httpx.Response(self.status_overrides[coin_id], json={"error": "forced"})
        if coin_id in self.raw_bodies:
            return httpx.Response(200, content=self.raw_bodies[coin_id])
        if coin_id not in self.coins:
            return httpx.Response(404, json={"error": "coin not found"})

        if len(parts) == 3 and parts[2] == "market_chart":
            days = int(request.url.params["days"])
            return httpx.Response(200, json=chart_payload(float(days)))
        return httpx.Response(200, json=self.coins[coin_id])

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def paths(self) -> list[str]:
        return [r.url.path.removeprefix(API_PREFIX) for r in self.requests]

    def chart_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/market_chart")]

    def asset_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if not r.url.path.endswith("/market_chart")]


@pytest.fixture
def fake_api():
    return FakeCoinGecko()


@pytest.fixture
def api_config():
    return APIConfig(base_url=TEST_BASE_URL, timeout=5.0)


@pytest.fixture
def client(fake_api, api_config):
    """CoinGecko client wired to the fake API."""
    return CoinGeckoClient(api_config, transport=fake_api.transport())


@pytest.fixture
def dashboard_config():
    return DashboardConfig()


@pytest.fixture
def app_config(api_config, dashboard_config):
    cfg = Config()
    cfg.api = api_config
    cfg.dashboard = dashboard_config
    return cfg


@pytest.fixture
def test_client(app_config, fake_api):
    """TestClient for an app whose lifespan skips the initial load."""
    from fastapi.testclient import TestClient

    from main import create_app

    app = create_app(app_config, transport=fake_api.transport(), load_on_startup=False)
    with TestClient(app) as test_client:
        yield test_client
