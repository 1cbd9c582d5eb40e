"""Property-based tests for news feed extraction."""

from hypothesis import given
from hypothesis import strategies as st

from market_board.feed import clean_field, extract_feed_items

# Text that cannot form tags or character references
plain_text = st.text(
    alphabet=st.characters(blacklist_characters="<>&", blacklist_categories=("Cs",)),
    max_size=60,
)
non_blank_text = plain_text.filter(
    lambda x: x.strip() and not x.strip().startswith("https:/")
)
url_path = st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789-/", max_size=30)


def item_block(title: str, link: str) -> str:
    return f"<item><title>{title}</title><link>{link}</link></item>"


class TestFeedExtractionProperties:
    """Property-based tests for feed extraction."""

    @given(plain_text, st.integers(min_value=0, max_value=10))
    def test_no_container_regions_property(self, text, max_items):
        """For any input without item regions, extraction returns nothing."""
        assert extract_feed_items(f"<rss><channel>{text}</channel></rss>", max_items) == []

    @given(
        st.lists(st.tuples(plain_text, plain_text), max_size=12),
        st.integers(min_value=0, max_value=10),
    )
    def test_result_bounded_by_max_items_property(self, pairs, max_items):
        """For any document, at most max_items items are returned."""
        markup = "".join(item_block(title, link) for title, link in pairs)

        items = extract_feed_items(markup, max_items)

        assert len(items) <= max_items

    @given(st.lists(st.tuples(non_blank_text, url_path), min_size=1, max_size=12))
    def test_well_formed_items_kept_in_order_property(self, pairs):
        """Complete items come back in document order, cleaned."""
        markup = "".join(
            item_block(title, f"https://example.com/{path}") for title, path in pairs
        )

        items = extract_feed_items(markup, max_items=len(pairs))

        assert [item.title for item in items] == [title.strip() for title, _ in pairs]
        assert all(item.link.startswith("https://example.com/") for item in items)

    @given(plain_text)
    def test_cleaning_idempotent_property(self, value):
        """Cleaning an already-cleaned value changes nothing."""
        once = clean_field(value)
        assert clean_field(once) == once

    @given(url_path.filter(lambda x: not x.startswith("/")))
    def test_https_repair_property(self, path):
        """Single-slash https links gain exactly one slash; good ones are untouched."""
        assert clean_field(f"https:/{path}") == (f"https://{path}" if path else "https:/")
        assert clean_field(f"https://{path}") == f"https://{path}"

    @given(non_blank_text)
    def test_missing_link_always_dropped_property(self, title):
        """An item without a link is never emitted."""
        markup = f"<item><title>{title}</title><pubDate>today</pubDate></item>"
        assert extract_feed_items(markup, 5) == []
