"""Fetcher for the historical chart series of the selected coin and range."""

from src.models.market_data import ChartSeries, FetchState
from src.services.coingecko_client import CoinGeckoClient
from src.services.derivation import parse_chart_series
from src.services.fetcher import BaseFetcher
from src.utils.event_store import EventStore


class ChartDataFetcher(BaseFetcher[ChartSeries]):
    """
    Retrieves GET /coins/{id}/market_chart for a number of trailing days.

    A failed fetch leaves the previous series in place; callers check
    state.status to decide between showing stale data and an error.
    """

    component = "ChartDataFetcher"

    def __init__(
        self,
        client: CoinGeckoClient,
        event_store: EventStore | None = None,
        discard_stale: bool = True,
        vs_currency: str = "usd",
    ):
        super().__init__(client, initial_data=ChartSeries(), event_store=event_store, discard_stale=discard_stale)
        self.vs_currency = vs_currency
        self.coin_id: str | None = None
        self.days: int | None = None

    async def fetch(self, coin_id: str | None, days: int | None) -> FetchState[ChartSeries]:
        """
        Fetch price, market cap and volume series.

        No-op when either input is missing.
        """
        if not coin_id or not days:
            return self.state
        self.coin_id = coin_id
        self.days = days

        async def load() -> ChartSeries:
            payload = await self.client.get_market_chart(coin_id, days, vs_currency=self.vs_currency)
            return parse_chart_series(payload)

        return await self._run({"coin_id": coin_id, "days": days}, load)

    def refresh(self):
        if not self.coin_id or not self.days:
            return None
        return self.fetch(self.coin_id, self.days)
