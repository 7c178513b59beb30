"""Shared fetch lifecycle for the dashboard data fetchers."""

import asyncio
import time
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from src.models.market_data import FetchState, FetchStatus
from src.services.coingecko_client import CoinGeckoClient, FetchError
from src.utils.event_store import EventStore
from src.utils.logger import StructuredLogger
from src.utils.trace_context import fetch_trace

T = TypeVar("T")


class RefreshSignal:
    """
    "Refresh requested" event.

    Subscribers return an awaitable (or None); emit() schedules each one as a
    task on the running loop and hands the tasks back to the caller.
    """

    def __init__(self):
        self._handlers: list[Callable[[], Awaitable[Any] | None]] = []

    def connect(self, handler: Callable[[], Awaitable[Any] | None]) -> None:
        if handler not in self._handlers:
            self._handlers.append(handler)

    def emit(self) -> list[asyncio.Task]:
        tasks = []
        for handler in list(self._handlers):
            awaitable = handler()
            if awaitable is not None:
                tasks.append(asyncio.ensure_future(awaitable))
        return tasks


class BaseFetcher(Generic[T]):
    """
    Idle/Loading/Success/Failed state machine around one API call.

    Every call takes the next generation number. With discard_stale enabled a
    response whose generation is no longer the newest is dropped, so a slow
    earlier request can never overwrite a faster later one. With it disabled
    the last response to arrive wins.
    """

    component = "Fetcher"

    def __init__(
        self,
        client: CoinGeckoClient,
        initial_data: T,
        event_store: EventStore | None = None,
        discard_stale: bool = True,
    ):
        self.client = client
        self.event_store = event_store
        self.discard_stale = discard_stale
        self.state: FetchState[T] = FetchState(data=initial_data)
        self.logger = StructuredLogger(self.component)
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def _is_stale(self, generation: int) -> bool:
        return self.discard_stale and generation != self._generation

    def _record(self, trace_id: str, event_type: str, message: str, context: dict, duration_ms=None) -> None:
        if self.event_store is not None:
            self.event_store.add_event(
                trace_id=trace_id,
                event_type=event_type,
                component=self.component,
                message=message,
                context=context,
                duration_ms=duration_ms,
            )

    async def _run(self, request: dict[str, Any], call: Callable[[], Awaitable[T]]) -> FetchState[T]:
        """
        Drive one fetch through the state machine.

        Args:
            request: Inputs of this fetch, kept on the state for observers
            call: Coroutine factory performing the request and decoding the body

        Returns:
            The fetcher's state after this fetch resolved (or was discarded)
        """
        self._generation += 1
        generation = self._generation

        with fetch_trace() as trace_id:
            context = {**request, "generation": generation}

            self.state.status = FetchStatus.LOADING
            self.state.error = None
            self.state.error_status = None
            self.state.request = dict(request)

            self.logger.info("Starting fetch", context=context)
            self._record(trace_id, "fetch_start", "Fetch started", context)
            started = time.perf_counter()

            try:
                data = await call()
            except FetchError as e:
                duration_ms = (time.perf_counter() - started) * 1000
                if self._is_stale(generation):
                    self._discard(trace_id, context, duration_ms)
                    return self.state

                self.state.status = FetchStatus.FAILED
                self.state.error = str(e)
                self.state.error_status = e.status_code
                self.state.request = dict(request)

                self.logger.error(
                    "Fetch failed",
                    context={**context, "result": "failed", "duration_ms": round(duration_ms, 2)},
                    exception=e,
                )
                self._record(
                    trace_id,
                    "fetch_complete",
                    "Fetch failed",
                    {**context, "status": "failed", "error": str(e)},
                    duration_ms,
                )
                return self.state

            duration_ms = (time.perf_counter() - started) * 1000
            if self._is_stale(generation):
                self._discard(trace_id, context, duration_ms)
                return self.state

            self.state.data = data
            self.state.status = FetchStatus.SUCCESS
            self.state.last_updated = datetime.now(UTC)
            self.state.request = dict(request)

            self.logger.info(
                "Fetch succeeded",
                context={**context, "result": "success", "duration_ms": round(duration_ms, 2)},
            )
            self._record(
                trace_id, "fetch_complete", "Fetch succeeded", {**context, "status": "success"}, duration_ms
            )
            return self.state

    def _discard(self, trace_id: str, context: dict, duration_ms: float) -> None:
        self.logger.debug(
            "Discarding superseded response",
            context={**context, "latest_generation": self._generation},
        )
        self._record(trace_id, "fetch_discarded", "Superseded response discarded", context, duration_ms)
