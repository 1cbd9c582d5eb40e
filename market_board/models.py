"""Data models for Market Board."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class FeedItem:
    """Represents a single news feed item."""

    title: str
    link: str
    published: str  # Publication date as it appears in the feed


@dataclass
class Coin:
    """Represents one row of the market listing."""

    id: str
    symbol: str
    name: str
    current_price: float | None
    market_cap: float | None
    market_cap_rank: int | None
    total_volume: float | None
    circulating_supply: float | None
    change_1h: float | None
    change_24h: float | None
    change_7d: float | None
    sparkline: list[float] = field(default_factory=list)  # 7 days, hourly


@dataclass
class GlobalStats:
    """Represents global market statistics."""

    total_market_cap_usd: float
    total_volume_usd: float
    btc_dominance: float
    eth_dominance: float
    market_cap_change_24h: float | None


@dataclass
class DashboardSnapshot:
    """Everything needed to render the dashboard once."""

    coins: list[Coin]
    global_stats: GlobalStats
    news: list[FeedItem]
    gainers: list[Coin]
    losers: list[Coin]
    generated_at: datetime
