"""Market data models for asset details, chart series and fetch state."""

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, Generic, TypeVar

# Raw JSON document returned by GET /coins/{id}
AssetDetailPayload = dict[str, Any]

# (timestamp in milliseconds, value)
SeriesPoint = tuple[float, float]

T = TypeVar("T")


@dataclass(frozen=True)
class DerivedAssetView:
    """Flat, display-ready projection of an asset detail payload."""

    name: str = ""
    current_price: float = 0
    market_cap_change_24h: float = 0
    all_time_high: float = 0
    all_time_low: float = 0
    sentiment: float = 0
    high_24h: float = 0
    low_24h: float = 0
    price_change_24h: float = 0
    market_cap: float = 0
    total_volume: float = 0
    circulating_supply: float = 0
    twitter_followers: float = 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys the presentation layer reads."""
        return {
            "name": self.name,
            "currentPrice": self.current_price,
            "marketCapChange24h": self.market_cap_change_24h,
            "allTimeHigh": self.all_time_high,
            "allTimeLow": self.all_time_low,
            "sentiment": self.sentiment,
            "high24h": self.high_24h,
            "low24h": self.low_24h,
            "priceChange24h": self.price_change_24h,
            "marketCap": self.market_cap,
            "totalVolume": self.total_volume,
            "circulatingSupply": self.circulating_supply,
            "twitterFollowers": self.twitter_followers,
        }

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]


@dataclass(frozen=True)
class ChartSeries:
    """Historical series for one asset over one time range."""

    prices: tuple[SeriesPoint, ...] = ()
    market_caps: tuple[SeriesPoint, ...] = ()
    total_volumes: tuple[SeriesPoint, ...] = ()

    def is_empty(self) -> bool:
        return not (self.prices or self.market_caps or self.total_volumes)

    def to_dict(self) -> dict[str, list[list[float]]]:
        return {
            "prices": [list(point) for point in self.prices],
            "market_caps": [list(point) for point in self.market_caps],
            "total_volumes": [list(point) for point in self.total_volumes],
        }


class FetchStatus(str, Enum):
    """Lifecycle of a single fetcher."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class FetchState(Generic[T]):
    """
    Observable state of a fetcher.

    `data` keeps the last successful payload through later LOADING and FAILED
    transitions, and `last_updated` is only ever advanced by a success, so the
    presentation layer can keep showing "last updated" during a refresh.
    """

    data: T
    status: FetchStatus = FetchStatus.IDLE
    error: str | None = None
    error_status: int | None = None
    last_updated: datetime | None = None
    request: dict[str, Any] = field(default_factory=dict)

    @property
    def loading(self) -> bool:
        return self.status is FetchStatus.LOADING

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "loading": self.loading,
            "error": self.error,
            "error_status": self.error_status,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
            "request": dict(self.request),
        }
