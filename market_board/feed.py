"""News feed extraction and fetching for Market Board."""

import re
from itertools import islice

import requests

from .config import NewsConfig
from .logging_config import create_execution_logger
from .models import FeedItem

# The only character references decoded from feed text
ENTITIES = {
    "&amp;": "&",
    "&quot;": '"',
    "&#39;": "'",
    "&lt;": "<",
    "&gt;": ">",
}

ENTITY_RE = re.compile("|".join(re.escape(entity) for entity in ENTITIES))
CDATA_RE = re.compile(r"^<!\[CDATA\[(.*)\]\]>$", re.IGNORECASE | re.DOTALL)
# https:/ followed by anything but a second slash
BROKEN_HTTPS_RE = re.compile(r"^https:/(?=[^/])")


def _tag_pattern(tag: str) -> re.Pattern:
    """Compile a case-insensitive, non-greedy pattern for <tag>...</tag>."""
    name = re.escape(tag)
    return re.compile(
        rf"<{name}(?:\s[^>]*)?(?<!/)>(.*?)</{name}\s*>",
        re.IGNORECASE | re.DOTALL,
    )


def decode_entities(value: str) -> str:
    """Decode the fixed set of HTML character references in a single pass."""
    return ENTITY_RE.sub(lambda match: ENTITIES[match.group(0)], value)


def clean_field(value: str) -> str:
    """Run a raw field value through the cleaning pipeline.

    Decodes entities, trims, unwraps a CDATA section spanning the whole
    value, repairs ``https:/host`` into ``https://host`` and trims again.
    """
    value = decode_entities(value).strip()

    cdata = CDATA_RE.match(value)
    if cdata:
        value = cdata.group(1).strip()

    value = BROKEN_HTTPS_RE.sub("https://", value)
    return value.strip()


class FeedItemExtractor:
    """Pulls title/link/date records out of RSS-like markup.

    Matching is pattern based rather than a real XML parse, so malformed
    documents are tolerated: missing fields become empty strings and items
    without a title or link are dropped.
    """

    def __init__(
        self,
        container: str = "item",
        title_tag: str = "title",
        link_tag: str = "link",
        date_tag: str = "pubDate",
    ):
        self.container_re = _tag_pattern(container)
        self.title_re = _tag_pattern(title_tag)
        self.link_re = _tag_pattern(link_tag)
        self.date_re = _tag_pattern(date_tag)

    def extract(self, markup: str | None, max_items: int = 5) -> list[FeedItem]:
        """Extract up to ``max_items`` feed items in document order.

        The first ``max_items`` blocks are taken before filtering, so the
        result can be shorter than ``max_items`` when some blocks are
        incomplete.

        Args:
            markup: Full feed document; None or empty yields no items
            max_items: Maximum number of item blocks to consider

        Returns:
            List of cleaned FeedItem objects

        Raises:
            ValueError: If max_items is negative
        """
        if max_items < 0:
            raise ValueError(f"max_items must not be negative, got {max_items}")
        if not markup:
            return []

        items = []
        for block in islice(self.container_re.finditer(markup), max_items):
            item = self.parse_block(block.group(1))
            if item is not None:
                items.append(item)
        return items

    def parse_block(self, block: str) -> FeedItem | None:
        """Build a FeedItem from one item block, or None if incomplete."""
        title = self._field(self.title_re, block)
        link = self._field(self.link_re, block)
        if not title or not link:
            return None
        return FeedItem(
            title=title, link=link, published=self._field(self.date_re, block)
        )

    @staticmethod
    def _field(pattern: re.Pattern, block: str) -> str:
        match = pattern.search(block)
        if match is None:
            return ""
        return clean_field(match.group(1))


_default_extractor = FeedItemExtractor()


def decode_body(response: requests.Response) -> str:
    """Return the response body as text, reading it as UTF-8 unless a charset is declared."""
    content_type = response.headers.get("Content-Type", "")
    if "charset=" in content_type.lower():
        return response.text
    return response.content.decode("utf-8", errors="replace")


def extract_feed_items(markup: str | None, max_items: int = 5) -> list[FeedItem]:
    """Extract RSS items using the default item/title/link/pubDate tags."""
    return _default_extractor.extract(markup, max_items)


class NewsFeedFetcher:
    """Downloads the news feed and turns it into FeedItems."""

    def __init__(
        self,
        config: NewsConfig,
        session: requests.Session | None = None,
        execution_id: str | None = None,
    ):
        """Initialize NewsFeedFetcher with configuration.

        Args:
            config: News feed configuration
            session: Optional HTTP session to share between fetchers
            execution_id: Execution ID for logging context
        """
        self.config = config
        self.extractor = FeedItemExtractor()
        self.logger = create_execution_logger("news_feed", execution_id)
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": "Market-Board/1.0"})

    def fetch_news(self, limit: int | None = None) -> list[FeedItem]:
        """Fetch the feed and extract its newest items.

        Download failures are logged and produce an empty list.

        Args:
            limit: Maximum number of items, defaults to the configured limit

        Returns:
            List of FeedItem objects, possibly empty
        """
        if limit is None:
            limit = self.config.limit
        url = self.config.feed_url

        try:
            response = self.session.get(url, timeout=self.config.timeout)
        except requests.RequestException as e:
            self.logger.warning(
                f"Failed to download news feed {url}: {e}", url=url, error=str(e)
            )
            return []

        if not response.ok:
            self.logger.warning(
                f"News feed {url} returned HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
            )
            return []

        items = self.extractor.extract(decode_body(response), limit)
        self.logger.log_fetch(url, response.status_code, len(items))
        return items
