"""Number, percentage and date formatters used by the dashboard."""

import math

from dateutil import parser as date_parser

PLACEHOLDER = "—"

COMPACT_TIERS = [(1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K"), (1.0, "")]


def _missing(value: float | None) -> bool:
    return value is None or math.isnan(value)


def usd(value: float | None) -> str:
    """Format as US dollars with two decimals, e.g. $1,234.57."""
    if _missing(value):
        return PLACEHOLDER
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def compact(value: float | None) -> str:
    """Format in compact notation with at most two decimals, e.g. 1.23T."""
    if _missing(value):
        return PLACEHOLDER

    sign = "-" if value < 0 else ""
    magnitude = abs(value)

    for index, (threshold, suffix) in enumerate(COMPACT_TIERS):
        if magnitude >= threshold or not suffix:
            scaled = round(magnitude / threshold, 2)
            # 999,999 rounds to 1000K, which reads as 1M
            if scaled >= 1000 and index > 0:
                threshold, suffix = COMPACT_TIERS[index - 1]
                scaled = round(magnitude / threshold, 2)
            break

    digits = f"{scaled:.2f}".rstrip("0").rstrip(".")
    return f"{sign}{digits}{suffix}"


def pct(value: float | None) -> str:
    """Format a percentage change with an explicit sign for gains."""
    if _missing(value):
        return PLACEHOLDER
    prefix = "+" if value > 0 else ""
    return f"{prefix}{value:.2f}%"


def tone(value: float | None) -> str:
    """Map a change to the CSS class used to color it."""
    if _missing(value):
        return "muted"
    if value > 0:
        return "up"
    if value < 0:
        return "down"
    return "flat"


def feed_date(text: str) -> str:
    """Render a feed publication date as 'Oct 18, 14:05'.

    Text that dateutil cannot parse is shown unchanged.
    """
    if not text:
        return ""
    try:
        published = date_parser.parse(text)
    except (ValueError, OverflowError):
        return text
    return published.strftime("%b %d, %H:%M")
