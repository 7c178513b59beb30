"""Selection state of one dashboard and the fetches it drives."""

import asyncio
from collections.abc import Coroutine
from typing import Any

from src.services.asset_data_fetcher import AssetDataFetcher
from src.services.chart_data_fetcher import ChartDataFetcher
from src.services.coingecko_client import CoinGeckoClient
from src.services.fetcher import RefreshSignal
from src.utils.config import DashboardConfig, config
from src.utils.event_store import EventStore
from src.utils.logger import StructuredLogger

logger = StructuredLogger("DashboardSession")


class DashboardSession:
    """
    Owns the selected coin and time range plus both fetchers.

    Each command only schedules fetches whose inputs actually changed: a coin
    change refetches the asset and the chart, a range change refetches the
    chart alone, and a refresh request refetches the asset alone. Commands
    return the scheduled tasks; state can be read while they are in flight.
    """

    def __init__(
        self,
        client: CoinGeckoClient,
        dashboard_config: DashboardConfig | None = None,
        event_store: EventStore | None = None,
    ):
        self.config = dashboard_config or config.dashboard
        self.refresh_signal = RefreshSignal()
        self.asset_fetcher = AssetDataFetcher(
            client,
            refresh_signal=self.refresh_signal,
            event_store=event_store,
            discard_stale=self.config.discard_stale_responses,
        )
        self.chart_fetcher = ChartDataFetcher(
            client,
            event_store=event_store,
            discard_stale=self.config.discard_stale_responses,
        )
        self.coin_id: str = self.config.default_coin
        self.days: int = self.config.default_days
        self._tasks: set[asyncio.Task] = set()

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._track(task)
        return task

    def _track(self, task: asyncio.Task) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def start(self) -> list[asyncio.Task]:
        """Initial load of both fetchers for the current selection."""
        logger.info("Starting dashboard session", context={"coin_id": self.coin_id, "days": self.days})
        return [
            self._spawn(self.asset_fetcher.fetch(self.coin_id)),
            self._spawn(self.chart_fetcher.fetch(self.coin_id, self.days)),
        ]

    def select_coin(self, coin_id: str) -> list[asyncio.Task]:
        """
        Change the selected coin.

        Raises:
            ValueError: If coin_id is empty
        """
        if not coin_id:
            raise ValueError("coin_id must not be empty")
        if coin_id == self.coin_id:
            return []

        logger.info("Selected coin", context={"previous": self.coin_id, "coin_id": coin_id})
        self.coin_id = coin_id
        return [
            self._spawn(self.asset_fetcher.fetch(coin_id)),
            self._spawn(self.chart_fetcher.fetch(coin_id, self.days)),
        ]

    def select_range(self, days: int) -> list[asyncio.Task]:
        """
        Change the chart window.

        Raises:
            ValueError: If days is not one of the configured ranges
        """
        if days not in self.config.range_days:
            raise ValueError(f"Unsupported time range: {days} days")
        if days == self.days:
            return []

        logger.info("Selected time range", context={"previous": self.days, "days": days})
        self.days = days
        return [self._spawn(self.chart_fetcher.fetch(self.coin_id, days))]

    def request_refresh(self) -> list[asyncio.Task]:
        """Raise the refresh event; subscribers refetch their current data."""
        logger.info("Manual refresh requested", context={"coin_id": self.coin_id})
        tasks = self.refresh_signal.emit()
        for task in tasks:
            self._track(task)
        return tasks

    def refresh_chart(self) -> list[asyncio.Task]:
        awaitable = self.chart_fetcher.refresh()
        return [self._spawn(awaitable)] if awaitable is not None else []

    def snapshot(self) -> dict[str, Any]:
        """Everything the presentation layer needs to render one frame."""
        return {
            "selection": {"coin_id": self.coin_id, "days": self.days},
            "asset": {
                "state": self.asset_fetcher.state.to_dict(),
                "view": self.asset_fetcher.view.to_dict(),
            },
            "chart": {
                "state": self.chart_fetcher.state.to_dict(),
                "series": self.chart_fetcher.state.data.to_dict(),
            },
        }

    async def wait_pending(self) -> None:
        """Wait until every fetch scheduled so far has settled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel fetches still in flight."""
        pending = list(self._tasks)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
