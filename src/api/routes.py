"""API routes for the dashboard presentation layer."""

import asyncio

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from src.api.dependencies import get_event_store, get_metrics_calculator, get_session
from src.api.error_handlers import create_invalid_range_error, create_unknown_coin_error
from src.services.dashboard_session import DashboardSession
from src.services.display import build_asset_display, build_chart_display, format_last_updated
from src.utils.config import CHART_COLORS, CRYPTO_OPTIONS, TIME_RANGES
from src.utils.event_store import EventStore
from src.utils.metrics import MetricsCalculator

router = APIRouter()


class CoinSelection(BaseModel):
    """Request model for changing the selected coin."""

    coin_id: str = Field(min_length=1)


class RangeSelection(BaseModel):
    """Request model for changing the chart window."""

    days: int


async def _settle(tasks: list[asyncio.Task], wait: bool) -> None:
    if wait and tasks:
        await asyncio.gather(*tasks)


def _dashboard_payload(session: DashboardSession) -> dict:
    snapshot = session.snapshot()
    snapshot["display"] = {
        "asset": build_asset_display(session.asset_fetcher.view),
        "chart": build_chart_display(session.chart_fetcher.state.data),
        "lastUpdated": format_last_updated(session.asset_fetcher.state.last_updated),
    }
    return snapshot


@router.get("/options")
async def get_options(session: DashboardSession = Depends(get_session)):
    """Selectable coins and ranges, chart colours, and the defaults."""
    return {
        "coins": [{"id": o.id, "name": o.name, "symbol": o.symbol} for o in CRYPTO_OPTIONS],
        "time_ranges": [{"label": r.label, "days": r.days} for r in TIME_RANGES],
        "colors": CHART_COLORS,
        "defaults": {"coin_id": session.config.default_coin, "days": session.config.default_days},
    }


@router.get("/dashboard")
async def get_dashboard(session: DashboardSession = Depends(get_session)):
    """
    Current selection, fetch states, derived card values and chart series.

    Fetch failures are reported inside the payload (state.status == "failed"),
    never as an HTTP error.
    """
    return _dashboard_payload(session)


@router.put("/selection/coin")
async def select_coin(
    selection: CoinSelection,
    wait: bool = Query(True, description="Wait for the triggered fetches to resolve"),
    session: DashboardSession = Depends(get_session),
):
    if selection.coin_id not in session.config.coin_ids:
        raise create_unknown_coin_error(selection.coin_id, sorted(session.config.coin_ids)).to_http_exception()

    await _settle(session.select_coin(selection.coin_id), wait)
    return _dashboard_payload(session)


@router.put("/selection/range")
async def select_range(
    selection: RangeSelection,
    wait: bool = Query(True, description="Wait for the triggered fetch to resolve"),
    session: DashboardSession = Depends(get_session),
):
    if selection.days not in session.config.range_days:
        raise create_invalid_range_error(selection.days, sorted(session.config.range_days)).to_http_exception()

    await _settle(session.select_range(selection.days), wait)
    return _dashboard_payload(session)


@router.post("/refresh")
async def refresh(
    wait: bool = Query(True, description="Wait for the refreshed fetch to resolve"),
    session: DashboardSession = Depends(get_session),
):
    """Raise a manual refresh of the asset data."""
    await _settle(session.request_refresh(), wait)
    return _dashboard_payload(session)


@router.get("/chart")
async def get_chart(session: DashboardSession = Depends(get_session)):
    fetcher = session.chart_fetcher
    return {
        "selection": {"coin_id": session.coin_id, "days": session.days},
        "state": fetcher.state.to_dict(),
        "series": fetcher.state.data.to_dict(),
        "display": build_chart_display(fetcher.state.data),
    }


@router.get("/debug/events")
async def get_debug_events(
    limit: int = Query(50, ge=1, le=1000),
    event_type: str | None = Query(None, description="fetch_start, fetch_complete or fetch_discarded"),
    event_store: EventStore = Depends(get_event_store),
):
    """Recent fetch lifecycle events, oldest first."""
    if event_type:
        events = event_store.get_events_by_type(event_type, limit=limit)
    else:
        events = event_store.get_recent_events(limit=limit)
    return {"events": [e.to_dict() for e in events], "count": len(events)}


@router.get("/debug/metrics")
async def get_debug_metrics(calculator: MetricsCalculator = Depends(get_metrics_calculator)):
    return calculator.calculate().to_dict()
