"""Property-based tests for the RSS feed generator."""

import xml.etree.ElementTree as ET
from datetime import UTC, datetime, timedelta
from email.utils import parsedate_to_datetime

from hypothesis import given
from hypothesis import strategies as st

from blogfeed.config import FeedConfig
from blogfeed.rss import FeedGenerator
from tests.fakes import InMemoryPostSource, make_post_document

text_alphabet = st.characters(whitelist_categories=("Lu", "Ll", "Nd"))

slugs = st.text(
    alphabet="abcdefghijklmnopqrstuvwxyz0123456789", min_size=1, max_size=20
).filter(lambda s: s != "index")
titles = st.text(alphabet=text_alphabet, min_size=1, max_size=60)
pub_dates = st.datetimes(
    min_value=datetime(2000, 1, 1), max_value=datetime(2099, 12, 31)
).map(lambda d: d.replace(microsecond=0, tzinfo=UTC))

posts = st.dictionaries(slugs, st.tuples(titles, pub_dates), max_size=8)
configs = st.builds(
    FeedConfig,
    title=st.text(alphabet=text_alphabet, min_size=1, max_size=40),
    description=st.text(alphabet=text_alphabet, min_size=1, max_size=80),
    site_url=st.just("https://blog.huyknguyen.com"),
)


def build_source(post_map):
    return InMemoryPostSource(
        {
            f"posts/{slug}.mdx": make_post_document(title, published)
            for slug, (title, published) in post_map.items()
        }
    )


class TestFeedGeneratorProperties:
    """Property-based tests for FeedGenerator."""

    @given(posts)
    def test_one_item_per_post_property(self, post_map):
        """
        For any set of N valid post documents the feed holds exactly N items,
        each with the title, link and date of its document.
        """
        config = FeedConfig(title="T", description="D", site_url="https://blog.huyknguyen.com")
        document = FeedGenerator(config, build_source(post_map)).generate()

        items = ET.fromstring(document.encode("utf-8")).findall("channel/item")
        assert len(items) == len(post_map)

        for item, slug in zip(items, sorted(post_map)):
            title, published = post_map[slug]
            assert item.findtext("title") == title
            assert item.findtext("link") == f"https://blog.huyknguyen.com/posts/{slug}"
            assert parsedate_to_datetime(item.findtext("pubDate")) == published

    @given(configs, posts)
    def test_channel_fields_independent_of_posts_property(self, config, post_map):
        """
        Title and description come from configuration and the language is
        always en-us, whatever the posts contain.
        """
        document = FeedGenerator(config, build_source(post_map)).generate()
        channel = ET.fromstring(document.encode("utf-8")).find("channel")

        assert channel.findtext("title") == config.title
        assert channel.findtext("description") == config.description
        assert channel.findtext("link") == config.site_url
        assert channel.findtext("language") == "en-us"

    @given(posts)
    def test_generation_is_idempotent_property(self, post_map):
        """
        Two generations against an unchanged source are byte-identical.
        """
        config = FeedConfig(title="T", description="D", site_url="https://blog.huyknguyen.com")
        source = build_source(post_map)
        generator = FeedGenerator(config, source)

        assert generator.generate() == generator.generate()

    @given(posts, st.integers(min_value=0, max_value=10_000))
    def test_item_order_follows_document_paths_property(self, post_map, shift_days):
        """
        Items follow the enumeration order of document paths, not dates.
        """
        shifted = {
            slug: (title, published - timedelta(days=shift_days * i))
            for i, (slug, (title, published)) in enumerate(sorted(post_map.items()))
        }
        config = FeedConfig(title="T", description="D", site_url="https://blog.huyknguyen.com")

        document = FeedGenerator(config, build_source(shifted)).generate()
        links = [
            item.findtext("link")
            for item in ET.fromstring(document.encode("utf-8")).findall("channel/item")
        ]

        assert links == [
            f"https://blog.huyknguyen.com/posts/{slug}" for slug in sorted(shifted)
        ]
