"""Pure transformations from raw CoinGecko payloads to display models."""

import math
from typing import Any

from src.models.market_data import AssetDetailPayload, ChartSeries, DerivedAssetView, SeriesPoint

# DerivedAssetView field -> path inside the /coins/{id} document
FIELD_PATHS: dict[str, tuple[str, ...]] = {
    "name": ("name",),
    "current_price": ("market_data", "current_price", "usd"),
    "market_cap_change_24h": ("market_data", "market_cap_change_percentage_24h"),
    "all_time_high": ("market_data", "ath", "usd"),
    "all_time_low": ("market_data", "atl", "usd"),
    "sentiment": ("sentiment_votes_up_percentage",),
    "high_24h": ("market_data", "high_24h", "usd"),
    "low_24h": ("market_data", "low_24h", "usd"),
    "price_change_24h": ("market_data", "price_change_24h_in_currency", "usd"),
    "market_cap": ("market_data", "market_cap", "usd"),
    "total_volume": ("market_data", "total_volume", "usd"),
    "circulating_supply": ("market_data", "circulating_supply"),
    "twitter_followers": ("community_data", "twitter_followers"),
}

CHART_SERIES_KEYS = ("prices", "market_caps", "total_volumes")


def _lookup(payload: Any, path: tuple[str, ...]) -> Any:
    node = payload
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
        if node is None:
            return None
    return node


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large for a float
        return False


def _as_number(value: Any) -> int | float:
    return value if _is_number(value) else 0


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def extract_field(payload: AssetDetailPayload | None, field_name: str) -> int | float | str:
    """
    Read one DerivedAssetView field from a raw payload.

    Args:
        payload: Raw asset detail document (may be partial or None)
        field_name: A key of FIELD_PATHS

    Returns:
        The value at the field's path, or "" / 0 when any segment is missing,
        null, or holds a value of the wrong type
    """
    value = _lookup(payload, FIELD_PATHS[field_name])
    if field_name == "name":
        return _as_text(value)
    return _as_number(value)


def derive_asset_view(payload: AssetDetailPayload | None) -> DerivedAssetView:
    """
    Flatten an asset detail payload into a DerivedAssetView.

    Total over partial payloads: every field is always populated, and no
    None or NaN ever reaches the result.
    """
    return DerivedAssetView(**{name: extract_field(payload, name) for name in FIELD_PATHS})


def _parse_points(raw: Any) -> tuple[SeriesPoint, ...]:
    if not isinstance(raw, list):
        return ()

    points: list[SeriesPoint] = []
    for entry in raw:
        if not isinstance(entry, (list, tuple)) or len(entry) < 2:
            continue
        timestamp, value = entry[0], entry[1]
        if not (_is_number(timestamp) and _is_number(value)):
            continue
        points.append((timestamp, value))
    return tuple(points)


def parse_chart_series(payload: Any) -> ChartSeries:
    """
    Convert a /market_chart body into a ChartSeries.

    Missing keys produce empty series; malformed points are dropped.
    """
    if not isinstance(payload, dict):
        return ChartSeries()
    return ChartSeries(**{key: _parse_points(payload.get(key)) for key in CHART_SERIES_KEYS})
