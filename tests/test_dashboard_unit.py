"""Unit tests for dashboard assembly and rendering."""

from datetime import UTC, datetime
from unittest.mock import Mock

import pytest

from market_board.config import DashboardConfig
from market_board.dashboard import (
    build_snapshot,
    render_dashboard,
    render_news,
    sparkline_svg,
)
from market_board.market import MarketDataError
from market_board.models import Coin, DashboardSnapshot, FeedItem, GlobalStats


def make_coin(symbol: str, change_24h: float | None, rank: int = 1) -> Coin:
    return Coin(
        id=symbol,
        symbol=symbol,
        name=f"{symbol.title()} Coin",
        current_price=10.0,
        market_cap=1500000.0,
        market_cap_rank=rank,
        total_volume=25000.0,
        circulating_supply=1000000.0,
        change_1h=0.1,
        change_24h=change_24h,
        change_7d=-2.0,
        sparkline=[1.0, 2.0, 1.5],
    )


GLOBAL = GlobalStats(
    total_market_cap_usd=2450000000000,
    total_volume_usd=98000000000,
    btc_dominance=53.912,
    eth_dominance=16.4,
    market_cap_change_24h=-0.83,
)


class TestBuildSnapshotUnit:
    """Unit tests for build_snapshot."""

    def setup_method(self):
        self.config = DashboardConfig(movers_limit=2, news_limit=3, refresh_seconds=60)
        self.client = Mock()
        self.fetcher = Mock()
        self.coins = [make_coin("a", 1.0), make_coin("b", -3.0), make_coin("c", 5.0)]
        self.client.fetch_coins.return_value = self.coins
        self.client.fetch_global.return_value = GLOBAL
        self.fetcher.fetch_news.return_value = [FeedItem("News", "https://e.com/n", "")]

    def test_build_snapshot(self):
        snapshot = build_snapshot(self.client, self.fetcher, self.config)

        assert snapshot.coins == self.coins
        assert snapshot.global_stats == GLOBAL
        assert [c.symbol for c in snapshot.gainers] == ["c", "a"]
        assert [c.symbol for c in snapshot.losers] == ["b", "a"]
        assert len(snapshot.news) == 1
        self.fetcher.fetch_news.assert_called_once_with(3)

    def test_market_error_propagates(self):
        self.client.fetch_global.side_effect = MarketDataError("Failed to fetch /global")

        with pytest.raises(MarketDataError):
            build_snapshot(self.client, self.fetcher, self.config)

    def test_empty_news_still_builds(self):
        self.fetcher.fetch_news.return_value = []

        snapshot = build_snapshot(self.client, self.fetcher, self.config)

        assert snapshot.news == []


class TestRenderingUnit:
    """Unit tests for HTML rendering."""

    def setup_method(self):
        self.config = DashboardConfig(movers_limit=5, news_limit=5, refresh_seconds=60)
        coins = [make_coin("btc", 2.5, 1), make_coin("eth", -1.25, 2)]
        self.snapshot = DashboardSnapshot(
            coins=coins,
            global_stats=GLOBAL,
            news=[FeedItem("BTC & ETH <rally>", "https://e.com/a?x=1&y=2", "Mon, 01 Jan 2024 10:05:00 GMT")],
            gainers=coins[:1],
            losers=coins[1:],
            generated_at=datetime(2024, 1, 1, 12, 0, tzinfo=UTC),
        )

    def test_render_dashboard_sections(self):
        html = render_dashboard(self.snapshot, self.config)

        assert html.startswith("<!DOCTYPE html>")
        assert "2 ASSETS" in html
        assert "60s REFRESH" in html
        assert "$2.45T" in html
        assert "$98B" in html
        assert "53.91%" in html
        assert '<div class="value down">-0.83%</div>' in html
        assert "TOP GAINERS 24H" in html
        assert "TOP LOSERS 24H" in html
        assert "<span>BTC</span>" in html
        assert '<span class="up">+2.50%</span>' in html
        assert '<span class="down">-1.25%</span>' in html

    def test_render_coin_rows(self):
        html = render_dashboard(self.snapshot, self.config)

        assert "Btc Coin" in html
        assert "$10.00" in html
        assert "$1.5M" in html
        assert "$25K" in html
        assert '<td class="down">-2.00%</td>' in html
        assert "<polyline" in html

    def test_render_news_escapes_text(self):
        html = render_news(self.snapshot.news)

        assert "BTC &amp; ETH &lt;rally&gt;" in html
        assert 'href="https://e.com/a?x=1&amp;y=2"' in html
        assert "Jan 01, 10:05" in html

    def test_render_news_placeholder(self):
        assert "No news available." in render_news([])

    def test_render_news_respects_limit(self):
        items = [FeedItem(f"Story {i}", f"https://e.com/{i}", "") for i in range(8)]

        html = render_news(items, limit=5)

        assert "Story 4" in html
        assert "Story 5" not in html

    def test_sparkline_svg(self):
        svg = sparkline_svg([1.0, 3.0, 2.0], "up")

        assert svg.startswith('<svg class="up"')
        assert 'points="0.0,28.0 60.0,0.0 120.0,14.0"' in svg

    def test_sparkline_flat_and_short_series(self):
        assert sparkline_svg([]) == ""
        assert sparkline_svg([5.0]) == ""
        assert 'points="0.0,28.0 120.0,28.0"' in sparkline_svg([5.0, 5.0])
