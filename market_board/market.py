"""Market data fetching and derived views for Market Board."""

import threading
import time
from collections.abc import Callable
from typing import Any

import requests

from .config import MarketConfig
from .logging_config import create_execution_logger
from .models import Coin, GlobalStats


class MarketDataError(Exception):
    """Raised when the market API cannot deliver listings or global stats."""


class MarketDataClient:
    """Fetches coin listings and global statistics from CoinGecko.

    Results are reused for a per-endpoint revalidation window so warm
    invocations do not hit the API on every request.
    """

    def __init__(
        self,
        config: MarketConfig,
        session: requests.Session | None = None,
        execution_id: str | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize MarketDataClient with configuration.

        Args:
            config: Market API configuration
            session: Optional HTTP session
            execution_id: Execution ID for logging context
            clock: Monotonic time source used for revalidation windows
        """
        self.config = config
        self.logger = create_execution_logger("market_data", execution_id)
        self.session = session or requests.Session()
        self.session.headers.update(
            {"User-Agent": "Market-Board/1.0", "Accept": "application/json"}
        )
        self._clock = clock
        self._cache: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def fetch_coins(self) -> list[Coin]:
        """Fetch the market listing ordered by market cap.

        Raises:
            MarketDataError: If the request fails or the payload is not a list
        """
        params = {
            "vs_currency": "usd",
            "order": "market_cap_desc",
            "per_page": self.config.coin_limit,
            "page": 1,
            "sparkline": "true",
            "price_change_percentage": "1h,24h,7d",
        }
        return self._revalidate(
            "coins",
            self.config.coins_revalidate_seconds,
            lambda: self._load_coins(params),
        )

    def fetch_global(self) -> GlobalStats:
        """Fetch global market statistics.

        Raises:
            MarketDataError: If the request fails or the payload is malformed
        """
        return self._revalidate(
            "global", self.config.global_revalidate_seconds, self._load_global
        )

    def _load_coins(self, params: dict[str, Any]) -> list[Coin]:
        payload = self._get_json("/coins/markets", params)
        if not isinstance(payload, list):
            raise MarketDataError("Failed to fetch coins: unexpected payload")

        try:
            coins = [parse_coin(raw) for raw in payload if isinstance(raw, dict)]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise MarketDataError(f"Failed to fetch coins: malformed payload ({e})")

        self.logger.log_fetch("/coins/markets", 200, len(coins))
        return coins

    def _load_global(self) -> GlobalStats:
        payload = self._get_json("/global")
        try:
            stats = parse_global(payload)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise MarketDataError(f"Failed to fetch global: malformed payload ({e})")
        self.logger.log_fetch("/global", 200, 1)
        return stats

    def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = f"{self.config.base_url}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.config.timeout)
        except requests.RequestException as e:
            self.logger.error(f"Request to {url} failed: {e}", url=url, error=str(e))
            raise MarketDataError(f"Failed to fetch {path}: {e}") from e

        if not response.ok:
            self.logger.error(
                f"{url} returned HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
            )
            raise MarketDataError(f"Failed to fetch {path}: HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise MarketDataError(f"Failed to fetch {path}: invalid JSON") from e

    def _revalidate(self, key: str, max_age: int, loader: Callable[[], Any]) -> Any:
        now = self._clock()
        with self._lock:
            cached = self._cache.get(key)
        if cached is not None and now - cached[0] < max_age:
            self.logger.debug(f"Serving {key} from revalidation window")
            return cached[1]

        value = loader()
        with self._lock:
            self._cache[key] = (now, value)
        return value


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def parse_coin(raw: dict[str, Any]) -> Coin:
    """Convert one /coins/markets entry into a Coin."""
    sparkline = raw.get("sparkline_in_7d")
    if not isinstance(sparkline, dict):
        sparkline = {}
    prices = [p for p in (sparkline.get("price") or []) if _number(p) is not None]
    rank = raw.get("market_cap_rank")

    return Coin(
        id=_text(raw.get("id")),
        symbol=_text(raw.get("symbol")),
        name=_text(raw.get("name")),
        current_price=_number(raw.get("current_price")),
        market_cap=_number(raw.get("market_cap")),
        market_cap_rank=rank if isinstance(rank, int) else None,
        total_volume=_number(raw.get("total_volume")),
        circulating_supply=_number(raw.get("circulating_supply")),
        change_1h=_number(raw.get("price_change_percentage_1h_in_currency")),
        change_24h=_number(raw.get("price_change_percentage_24h")),
        change_7d=_number(raw.get("price_change_percentage_7d_in_currency")),
        sparkline=[float(p) for p in prices],
    )


def parse_global(payload: dict[str, Any]) -> GlobalStats:
    """Convert the /global payload into GlobalStats."""
    data = payload["data"]
    dominance = data.get("market_cap_percentage") or {}
    return GlobalStats(
        total_market_cap_usd=float(data["total_market_cap"]["usd"]),
        total_volume_usd=float(data["total_volume"]["usd"]),
        btc_dominance=float(dominance.get("btc") or 0),
        eth_dominance=float(dominance.get("eth") or 0),
        market_cap_change_24h=_number(data.get("market_cap_change_percentage_24h_usd")),
    )


def top_gainers(coins: list[Coin], n: int = 5) -> list[Coin]:
    """Return the n coins with the largest 24h change."""
    ranked = [c for c in coins if c.change_24h is not None]
    return sorted(ranked, key=lambda c: c.change_24h, reverse=True)[:n]


def top_losers(coins: list[Coin], n: int = 5) -> list[Coin]:
    """Return the n coins with the smallest 24h change."""
    ranked = [c for c in coins if c.change_24h is not None]
    return sorted(ranked, key=lambda c: c.change_24h)[:n]
