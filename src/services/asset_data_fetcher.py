"""Fetcher for the full asset detail document of the selected coin."""

from src.models.market_data import AssetDetailPayload, DerivedAssetView, FetchState
from src.services.coingecko_client import CoinGeckoClient
from src.services.derivation import derive_asset_view
from src.services.fetcher import BaseFetcher, RefreshSignal
from src.utils.event_store import EventStore


class AssetDataFetcher(BaseFetcher[AssetDetailPayload]):
    """Retrieves GET /coins/{id} and derives the flat card values from it."""

    component = "AssetDataFetcher"

    def __init__(
        self,
        client: CoinGeckoClient,
        refresh_signal: RefreshSignal | None = None,
        event_store: EventStore | None = None,
        discard_stale: bool = True,
    ):
        super().__init__(client, initial_data={}, event_store=event_store, discard_stale=discard_stale)
        self.coin_id: str | None = None
        self._view = derive_asset_view({})
        self._view_source: AssetDetailPayload = self.state.data
        if refresh_signal is not None:
            refresh_signal.connect(self.refresh)

    async def fetch(self, coin_id: str | None) -> FetchState[AssetDetailPayload]:
        """
        Fetch the asset detail payload for a coin.

        An empty or missing id is a no-op and the current state is returned
        unchanged. Errors never propagate; they end up in state.error.

        Args:
            coin_id: CoinGecko asset identifier, e.g. "bitcoin"

        Returns:
            The fetcher state once the request has resolved
        """
        if not coin_id:
            return self.state
        self.coin_id = coin_id
        return await self._run({"coin_id": coin_id}, lambda: self.client.get_coin(coin_id))

    def refresh(self):
        """Refetch the current coin. Returns None when nothing was fetched yet."""
        if not self.coin_id:
            return None
        return self.fetch(self.coin_id)

    @property
    def view(self) -> DerivedAssetView:
        """Derived view of the last successful payload, rebuilt only when it changes."""
        if self.state.data is not self._view_source:
            self._view = derive_asset_view(self.state.data)
            self._view_source = self.state.data
        return self._view
