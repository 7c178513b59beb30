"""Configuration management for the dashboard."""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


@dataclass(frozen=True)
class CryptoOption:
    """A selectable cryptocurrency."""

    id: str
    name: str
    symbol: str


@dataclass(frozen=True)
class TimeRangeOption:
    """A selectable chart window."""

    label: str
    days: int


CRYPTO_OPTIONS: tuple[CryptoOption, ...] = (
    CryptoOption("bitcoin", "Bitcoin", "BTC"),
    CryptoOption("ethereum", "Ethereum", "ETH"),
    CryptoOption("binancecoin", "Binance Coin", "BNB"),
    CryptoOption("solana", "Solana", "SOL"),
    CryptoOption("cardano", "Cardano", "ADA"),
    CryptoOption("ripple", "Ripple", "XRP"),
    CryptoOption("dogecoin", "Dogecoin", "DOGE"),
    CryptoOption("avalanche-2", "Avalanche", "AVAX"),
    CryptoOption("decentraland", "Decentraland", "MANA"),
    CryptoOption("tether", "Tether", "USDT"),
)

TIME_RANGES: tuple[TimeRangeOption, ...] = (
    TimeRangeOption("1D", 1),
    TimeRangeOption("1W", 7),
    TimeRangeOption("1M", 30),
    TimeRangeOption("6M", 182),
    TimeRangeOption("1Y", 365),
)

CHART_COLORS: dict[str, str] = {
    "price": "#fcdf03",
    "marketCap": "#ff69f5",
    "volume": "#00ffea",
    "positive": "rgb(51, 255, 0)",
    "negative": "rgb(255, 32, 32)",
}

COIN_IDS = frozenset(option.id for option in CRYPTO_OPTIONS)
RANGE_DAYS = frozenset(option.days for option in TIME_RANGES)


@dataclass
class APIConfig:
    """Remote market data API configuration."""

    base_url: str = "https://api.coingecko.com/api/v3"
    api_key: str | None = None
    timeout: float = 10.0


@dataclass
class DashboardConfig:
    """Selection defaults and refresh behaviour."""

    default_coin: str = "bitcoin"
    default_days: int = 365
    discard_stale_responses: bool = True
    asset_refresh_seconds: int = 0  # 0 disables polling
    chart_refresh_seconds: int = 0
    coin_ids: frozenset[str] = field(default_factory=lambda: COIN_IDS)
    range_days: frozenset[int] = field(default_factory=lambda: RANGE_DAYS)


class Config:
    """Main application configuration."""

    def __init__(self):
        self.api = APIConfig(
            base_url=os.getenv("COINGECKO_BASE_URL", "https://api.coingecko.com/api/v3").rstrip("/"),
            api_key=os.getenv("COINGECKO_API_KEY") or None,
            timeout=float(os.getenv("HTTP_TIMEOUT", "10")),
        )

        self.dashboard = DashboardConfig(
            default_coin=os.getenv("DEFAULT_COIN", "bitcoin"),
            default_days=int(os.getenv("DEFAULT_DAYS", "365")),
            discard_stale_responses=os.getenv("DISCARD_STALE_RESPONSES", "true").lower() == "true",
            asset_refresh_seconds=int(os.getenv("ASSET_REFRESH_SECONDS", "0")),
            chart_refresh_seconds=int(os.getenv("CHART_REFRESH_SECONDS", "0")),
        )

    def validate(self) -> bool:
        """
        Validate configuration.

        Returns:
            True if configuration is valid

        Raises:
            ValueError if configuration is invalid
        """
        if not self.api.base_url:
            raise ValueError("COINGECKO_BASE_URL must not be empty")
        if self.api.timeout <= 0:
            raise ValueError(f"Invalid HTTP_TIMEOUT: {self.api.timeout}")

        if self.dashboard.default_coin not in self.dashboard.coin_ids:
            raise ValueError(f"Unknown DEFAULT_COIN: {self.dashboard.default_coin}")
        if self.dashboard.default_days not in self.dashboard.range_days:
            raise ValueError(f"Invalid DEFAULT_DAYS: {self.dashboard.default_days}")

        for name in ("asset_refresh_seconds", "chart_refresh_seconds"):
            if getattr(self.dashboard, name) < 0:
                raise ValueError(f"Invalid {name.upper()}: must not be negative")

        return True


# Global config instance
config = Config()
