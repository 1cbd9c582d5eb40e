"""Configuration management for Market Board."""

import os
from dataclasses import dataclass


@dataclass
class MarketConfig:
    """Configuration for the CoinGecko market API."""

    base_url: str = "https://api.coingecko.com/api/v3"
    coin_limit: int = 80
    coins_revalidate_seconds: int = 60
    global_revalidate_seconds: int = 120
    timeout: int = 15


@dataclass
class NewsConfig:
    """Configuration for the news feed."""

    feed_url: str = "https://cointelegraph.com/rss"
    limit: int = 5
    timeout: int = 15


@dataclass
class DashboardConfig:
    """Configuration for page rendering."""

    movers_limit: int = 5
    news_limit: int = 5
    refresh_seconds: int = 60


class Config:
    """Main configuration manager."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.coingecko_base_url = os.getenv(
            "COINGECKO_BASE_URL", "https://api.coingecko.com/api/v3"
        ).rstrip("/")
        self.news_feed_url = os.getenv("NEWS_FEED_URL", "https://cointelegraph.com/rss")
        self.coin_limit = _int_env("COIN_LIMIT", 80)
        self.news_limit = _int_env("NEWS_LIMIT", 5)
        self.movers_limit = _int_env("MOVERS_LIMIT", 5)
        self.coins_revalidate_seconds = _int_env("COINS_REVALIDATE_SECONDS", 60)
        self.global_revalidate_seconds = _int_env("GLOBAL_REVALIDATE_SECONDS", 120)
        self.request_timeout = _int_env("REQUEST_TIMEOUT", 15)

    def get_market_config(self) -> MarketConfig:
        """Get market API configuration."""
        return MarketConfig(
            base_url=self.coingecko_base_url,
            coin_limit=self.coin_limit,
            coins_revalidate_seconds=self.coins_revalidate_seconds,
            global_revalidate_seconds=self.global_revalidate_seconds,
            timeout=self.request_timeout,
        )

    def get_news_config(self) -> NewsConfig:
        """Get news feed configuration."""
        return NewsConfig(
            feed_url=self.news_feed_url,
            limit=self.news_limit,
            timeout=self.request_timeout,
        )

    def get_dashboard_config(self) -> DashboardConfig:
        """Get rendering configuration."""
        return DashboardConfig(
            movers_limit=self.movers_limit,
            news_limit=self.news_limit,
            refresh_seconds=self.coins_revalidate_seconds,
        )


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    return value
