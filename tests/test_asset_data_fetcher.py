"""Tests for AssetDataFetcher."""

import asyncio

import pytest

from src.models.market_data import DerivedAssetView, FetchStatus
from src.services.asset_data_fetcher import AssetDataFetcher
from src.services.fetcher import RefreshSignal
from src.utils.event_store import EventStore


class TestAssetDataFetcher:
    """State machine and request behaviour of the asset fetcher."""

    def test_initial_state_is_idle_and_empty(self, client):
        fetcher = AssetDataFetcher(client)

        assert fetcher.state.status is FetchStatus.IDLE
        assert fetcher.state.data == {}
        assert fetcher.state.last_updated is None
        assert fetcher.view == DerivedAssetView()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("coin_id", ["", None])
    async def test_empty_identifier_is_a_noop(self, client, fake_api, coin_id):
        fetcher = AssetDataFetcher(client)

        state = await fetcher.fetch(coin_id)

        assert state.status is FetchStatus.IDLE
        assert fake_api.requests == []

    @pytest.mark.asyncio
    async def test_successful_fetch(self, client, fake_api):
        fetcher = AssetDataFetcher(client)

        state = await fetcher.fetch("bitcoin")

        assert state.status is FetchStatus.SUCCESS
        assert state.data["name"] == "Bitcoin"
        assert state.error is None
        assert state.last_updated is not None
        assert fetcher.view.name == "Bitcoin"
        assert fetcher.view.current_price == 60_000.0
        assert fake_api.paths() == ["/coins/bitcoin"]

    @pytest.mark.asyncio
    async def test_loading_is_observable_while_in_flight(self, client, fake_api):
        fake_api.gates["bitcoin"] = asyncio.Event()
        fetcher = AssetDataFetcher(client)

        task = asyncio.ensure_future(fetcher.fetch("bitcoin"))
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert fetcher.state.status is FetchStatus.LOADING
        assert fetcher.state.loading

        fake_api.gates["bitcoin"].set()
        await task
        assert fetcher.state.status is FetchStatus.SUCCESS

    @pytest.mark.asyncio
    async def test_changing_identifier_issues_exactly_one_request(self, client, fake_api):
        fetcher = AssetDataFetcher(client)
        await fetcher.fetch("bitcoin")

        await fetcher.fetch("ethereum")

        assert fake_api.paths() == ["/coins/bitcoin", "/coins/ethereum"]
        assert fetcher.view.name == "Ethereum"

    @pytest.mark.asyncio
    async def test_404_fails_then_recovers(self, client):
        fetcher = AssetDataFetcher(client)

        state = await fetcher.fetch("no-such-coin")
        assert state.status is FetchStatus.FAILED
        assert "404" in state.error
        assert state.error_status == 404

        state = await fetcher.fetch("ethereum")
        assert state.status is FetchStatus.SUCCESS
        assert state.error is None
        assert state.error_status is None

    @pytest.mark.asyncio
    async def test_network_error_becomes_failed_state(self, client, fake_api):
        fake_api.network_down = True
        fetcher = AssetDataFetcher(client)

        state = await fetcher.fetch("bitcoin")

        assert state.status is FetchStatus.FAILED
        assert "Name or service not known" in state.error
        assert state.error_status is None

    @pytest.mark.asyncio
    async def test_unusual_identifiers_still_settle(self, client, fake_api):
        fetcher = AssetDataFetcher(client)

        state = await fetcher.fetch("bit\ncoin")
        assert state.status is FetchStatus.FAILED
        assert state.error_status == 404

        state = await fetcher.fetch("a" * 70_000)
        assert state.status is FetchStatus.FAILED
        assert state.error_status is None
        assert len(fake_api.requests) == 1

    @pytest.mark.asyncio
    async def test_parse_error_becomes_failed_state(self, client, fake_api):
        fake_api.raw_bodies["bitcoin"] = b"not json"
        fetcher = AssetDataFetcher(client)

        state = await fetcher.fetch("bitcoin")

        assert state.status is FetchStatus.FAILED
        assert "Invalid JSON" in state.error

    @pytest.mark.asyncio
    async def test_last_updated_survives_loading_and_failure(self, client, fake_api):
        fetcher = AssetDataFetcher(client)
        await fetcher.fetch("bitcoin")
        first_update = fetcher.state.last_updated

        fake_api.gates["bitcoin"] = asyncio.Event()
        task = asyncio.ensure_future(fetcher.refresh())
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert fetcher.state.status is FetchStatus.LOADING
        assert fetcher.state.last_updated == first_update

        fake_api.status_overrides["bitcoin"] = 500
        fake_api.gates["bitcoin"].set()
        await task

        assert fetcher.state.status is FetchStatus.FAILED
        assert fetcher.state.last_updated == first_update
        assert fetcher.view.name == "Bitcoin"

    @pytest.mark.asyncio
    async def test_refresh_signal_refetches_current_coin(self, client, fake_api):
        signal = RefreshSignal()
        fetcher = AssetDataFetcher(client, refresh_signal=signal)
        await fetcher.fetch("ethereum")

        tasks = signal.emit()
        await asyncio.gather(*tasks)

        assert len(tasks) == 1
        assert fake_api.paths() == ["/coins/ethereum", "/coins/ethereum"]

    @pytest.mark.asyncio
    async def test_refresh_before_any_fetch_does_nothing(self, client, fake_api):
        signal = RefreshSignal()
        AssetDataFetcher(client, refresh_signal=signal)

        assert signal.emit() == []
        assert fake_api.requests == []

    @pytest.mark.asyncio
    async def test_superseded_response_is_discarded(self, client, fake_api):
        fake_api.gates["bitcoin"] = asyncio.Event()
        fetcher = AssetDataFetcher(client)

        slow = asyncio.ensure_future(fetcher.fetch("bitcoin"))
        await asyncio.sleep(0)
        await fetcher.fetch("ethereum")
        fake_api.gates["bitcoin"].set()
        await slow

        assert fetcher.state.status is FetchStatus.SUCCESS
        assert fetcher.view.name == "Ethereum"
        assert fetcher.state.request == {"coin_id": "ethereum"}

    @pytest.mark.asyncio
    async def test_last_resolution_wins_without_stale_discard(self, client, fake_api):
        fake_api.gates["bitcoin"] = asyncio.Event()
        fetcher = AssetDataFetcher(client, discard_stale=False)

        slow = asyncio.ensure_future(fetcher.fetch("bitcoin"))
        await asyncio.sleep(0)
        await fetcher.fetch("ethereum")
        fake_api.gates["bitcoin"].set()
        await slow

        assert fetcher.view.name == "Bitcoin"
        assert fetcher.state.request == {"coin_id": "bitcoin"}

    @pytest.mark.asyncio
    async def test_fetch_lifecycle_is_recorded(self, client):
        store = EventStore()
        fetcher = AssetDataFetcher(client, event_store=store)

        await fetcher.fetch("bitcoin")
        await fetcher.fetch("no-such-coin")

        completes = store.get_events_by_type("fetch_complete")
        assert [e.context["status"] for e in completes] == ["success", "failed"]
        assert all(e.component == "AssetDataFetcher" for e in completes)
        assert all(e.duration_ms is not None for e in completes)
        assert len(store.get_events_by_type("fetch_start")) == 2

        trace_id = completes[0].trace_id
        assert [e.event_type for e in store.get_events_by_trace(trace_id)] == ["fetch_start", "fetch_complete"]

    @pytest.mark.asyncio
    async def test_view_is_rederived_only_on_payload_change(self, client):
        fetcher = AssetDataFetcher(client)
        await fetcher.fetch("bitcoin")

        first = fetcher.view
        assert fetcher.view is first

        await fetcher.fetch("bitcoin")
        assert fetcher.view is not first
        assert fetcher.view == first
