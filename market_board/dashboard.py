"""Dashboard assembly and HTML rendering for Market Board."""

from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime
from html import escape

from .config import DashboardConfig
from .feed import NewsFeedFetcher
from .formatting import compact, feed_date, pct, tone, usd
from .logging_config import create_execution_logger
from .market import MarketDataClient, top_gainers, top_losers
from .models import Coin, DashboardSnapshot, FeedItem, GlobalStats

SPARK_WIDTH = 120
SPARK_HEIGHT = 28

STYLE = """
body { margin: 0; background: #07090d; color: #f4f4f5; font-family: ui-monospace, monospace; font-size: 12px; }
main { max-width: 80rem; margin: 0 auto; padding: 1rem; display: flex; flex-direction: column; gap: .75rem; }
.card { border: 1px solid #27272a; border-radius: 6px; background: #0e1117; padding: .75rem; }
.grid { display: grid; gap: .5rem; grid-template-columns: repeat(auto-fit, minmax(14rem, 1fr)); }
.label { color: #a1a1aa; font-size: 11px; }
.value { font-size: 15px; }
.row { display: flex; justify-content: space-between; border-bottom: 1px solid #27272a99; padding: .25rem 0; }
table { width: 100%; border-collapse: collapse; }
th, td { padding: .35rem .5rem; text-align: right; border-bottom: 1px solid #27272ab3; }
th:nth-child(-n+2), td:nth-child(-n+2) { text-align: left; }
a { color: #f4f4f5; }
.up { color: #34d399; } .down { color: #f87171; } .flat { color: #d4d4d8; } .muted { color: #a1a1aa; }
"""


def build_snapshot(
    client: MarketDataClient,
    fetcher: NewsFeedFetcher,
    config: DashboardConfig,
    execution_id: str | None = None,
) -> DashboardSnapshot:
    """Fetch listings, global stats and news concurrently.

    Market errors propagate to the caller; the news fetch degrades to an
    empty list on its own.
    """
    logger = create_execution_logger("dashboard", execution_id)

    with ThreadPoolExecutor(max_workers=3) as pool:
        coins_future = pool.submit(client.fetch_coins)
        global_future = pool.submit(client.fetch_global)
        news_future = pool.submit(fetcher.fetch_news, config.news_limit)

        coins = coins_future.result()
        global_stats = global_future.result()
        news = news_future.result()

    snapshot = DashboardSnapshot(
        coins=coins,
        global_stats=global_stats,
        news=news,
        gainers=top_gainers(coins, config.movers_limit),
        losers=top_losers(coins, config.movers_limit),
        generated_at=datetime.now(UTC),
    )
    logger.log_metrics(
        {"coins": len(coins), "news_items": len(news), "movers": len(snapshot.gainers)}
    )
    return snapshot


def sparkline_svg(prices: list[float], css_class: str = "muted") -> str:
    """Render a price series as a small inline SVG trend line."""
    if len(prices) < 2:
        return ""

    low, high = min(prices), max(prices)
    span = (high - low) or 1.0
    step = SPARK_WIDTH / (len(prices) - 1)
    points = " ".join(
        f"{i * step:.1f},{SPARK_HEIGHT - (p - low) / span * SPARK_HEIGHT:.1f}"
        for i, p in enumerate(prices)
    )
    return (
        f'<svg class="{css_class}" width="{SPARK_WIDTH}" height="{SPARK_HEIGHT}" '
        f'viewBox="0 0 {SPARK_WIDTH} {SPARK_HEIGHT}">'
        f'<polyline fill="none" stroke="currentColor" stroke-width="1.5" points="{points}"/>'
        "</svg>"
    )


def _stat_card(label: str, value: str, css_class: str = "") -> str:
    return (
        '<div class="card">'
        f'<div class="label">{escape(label)}</div>'
        f'<div class="value {css_class}">{escape(value)}</div>'
        "</div>"
    )


def _stat_cards(stats: GlobalStats) -> str:
    cards = [
        _stat_card("Total Mkt Cap", f"${compact(stats.total_market_cap_usd)}"),
        _stat_card("24h Volume", f"${compact(stats.total_volume_usd)}"),
        _stat_card("BTC Dominance", f"{stats.btc_dominance:.2f}%"),
        _stat_card(
            "Mkt Cap 24h",
            pct(stats.market_cap_change_24h),
            tone(stats.market_cap_change_24h),
        ),
    ]
    return f'<section class="grid">{"".join(cards)}</section>'


def _movers_card(title: str, coins: list[Coin], css_class: str) -> str:
    rows = "".join(
        f'<div class="row"><span>{escape(c.symbol.upper())}</span>'
        f'<span class="{css_class}">{pct(c.change_24h)}</span></div>'
        for c in coins
    )
    return f'<div class="card"><div class="{css_class}">{escape(title)}</div>{rows}</div>'


def _coin_row(coin: Coin) -> str:
    rank = coin.market_cap_rank if coin.market_cap_rank is not None else ""
    arrow = "&#8599;" if (coin.change_24h or 0) > 0 else "&#8600;"
    return (
        "<tr>"
        f'<td class="muted">{rank}</td>'
        f"<td>{escape(coin.symbol.upper())} "
        f'<span class="muted">{escape(coin.name)}</span></td>'
        f"<td>{usd(coin.current_price)}</td>"
        f'<td class="{tone(coin.change_1h)}">{pct(coin.change_1h)}</td>'
        f'<td class="{tone(coin.change_24h)}">{arrow} {pct(coin.change_24h)}</td>'
        f'<td class="{tone(coin.change_7d)}">{pct(coin.change_7d)}</td>'
        f"<td>${compact(coin.market_cap)}</td>"
        f"<td>${compact(coin.total_volume)}</td>"
        f'<td class="muted">{compact(coin.circulating_supply)}</td>'
        f"<td>{sparkline_svg(coin.sparkline, tone(coin.change_7d))}</td>"
        "</tr>"
    )


def _coin_table(coins: list[Coin]) -> str:
    headers = ["#", "Asset", "Price", "1h", "24h", "7d", "Mkt Cap", "Vol 24h", "Supply", "7d Trend"]
    head = "".join(f"<th>{h}</th>" for h in headers)
    body = "".join(_coin_row(c) for c in coins)
    return f'<div class="card"><table><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table></div>'


def render_news(items: list[FeedItem], limit: int = 5) -> str:
    """Render the news card, or a placeholder when there is nothing to show."""
    if not items:
        body = '<p class="muted">No news available.</p>'
    else:
        body = "".join(
            '<div class="row">'
            f'<a href="{escape(item.link)}" target="_blank" rel="noopener">{escape(item.title)}</a>'
            f'<span class="muted">{escape(feed_date(item.published))}</span>'
            "</div>"
            for item in items[:limit]
        )
    return f'<div class="card"><div class="label">LATEST NEWS</div>{body}</div>'


def render_dashboard(snapshot: DashboardSnapshot, config: DashboardConfig) -> str:
    """Render the complete dashboard page."""
    header = (
        '<header class="card">'
        '<div class="label">MARKET BOARD // CRYPTO</div>'
        f'<div class="value">{len(snapshot.coins)} ASSETS &middot; '
        f"{config.refresh_seconds}s REFRESH</div>"
        f'<div class="muted">Updated {snapshot.generated_at:%Y-%m-%d %H:%M:%S} UTC</div>'
        "</header>"
    )
    movers = (
        '<section class="grid">'
        f'{_movers_card("TOP GAINERS 24H", snapshot.gainers, "up")}'
        f'{_movers_card("TOP LOSERS 24H", snapshot.losers, "down")}'
        "</section>"
    )

    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head><meta charset="utf-8">'
        f'<meta http-equiv="refresh" content="{config.refresh_seconds}">'
        f"<title>Market Board</title><style>{STYLE}</style></head>"
        "<body><main>"
        f"{header}"
        f"{_stat_cards(snapshot.global_stats)}"
        f"{movers}"
        f"{render_news(snapshot.news, config.news_limit)}"
        f"{_coin_table(snapshot.coins)}"
        "</main></body></html>"
    )
