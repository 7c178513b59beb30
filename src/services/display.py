"""Formatted strings for the cards and chart headers."""

from datetime import datetime
from typing import Any

from src.models.market_data import ChartSeries, DerivedAssetView
from src.utils.formatters import (
    calculate_percentage_change,
    clamp,
    format_currency,
    format_large_number,
    format_number,
    format_percentage,
)


def format_last_updated(moment: datetime | None) -> str:
    """24-hour HH:MM:SS, or "" before the first successful fetch."""
    return moment.strftime("%H:%M:%S") if moment else ""


def build_asset_display(view: DerivedAssetView) -> dict[str, str]:
    return {
        "name": view.name,
        "currentPrice": f"${format_number(view.current_price)}",
        "marketCapChange24h": format_percentage(view.market_cap_change_24h),
        "allTimeHigh": format_number(view.all_time_high),
        "allTimeLow": format_number(view.all_time_low),
        "sentiment": format_percentage(clamp(view.sentiment, 0, 100)),
        "high24h": format_number(view.high_24h),
        "low24h": format_number(view.low_24h),
        "priceChange24h": format_currency(view.price_change_24h),
        "marketCap": f"${format_large_number(view.market_cap)}",
        "totalVolume": f"${format_large_number(view.total_volume)}",
        "circulatingSupply": format_large_number(view.circulating_supply),
        "twitterFollowers": format_large_number(view.twitter_followers),
    }


def build_chart_display(series: ChartSeries) -> dict[str, Any]:
    """Change over the charted window, from the first to the last price."""
    change = 0.0
    if len(series.prices) >= 2:
        change = calculate_percentage_change(series.prices[0][1], series.prices[-1][1])
    return {
        "rangeChange": format_percentage(change),
        "rangeChangeDirection": "positive" if change >= 0 else "negative",
        "points": len(series.prices),
    }
