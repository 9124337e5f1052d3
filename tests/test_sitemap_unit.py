"""Unit tests for the sitemap generator."""

import xml.etree.ElementTree as ET
from datetime import date

import pytest

from blogfeed.config import SitemapConfig
from blogfeed.exceptions import PostMetadataError
from blogfeed.sitemap import SitemapGenerator, sitemap_chunk_path
from tests.fakes import InMemoryPostSource, make_post_document

NS = {"sm": "http://www.sitemaps.org/schemas/sitemap/0.9"}
SITE_URL = "https://blog.huyknguyen.com"


def three_posts() -> InMemoryPostSource:
    return InMemoryPostSource(
        {
            "posts/hello-world.mdx": make_post_document("Hello World", date(2024, 1, 1)),
            "posts/second-post.mdx": make_post_document("Second Post", date(2024, 2, 1)),
            "posts/third-post.mdx": make_post_document("Third Post", date(2024, 3, 1)),
        }
    )


class TestSitemapGeneratorUnit:
    """Unit tests for SitemapGenerator."""

    def test_urls_list_root_then_posts(self):
        generator = SitemapGenerator(SitemapConfig(site_url=SITE_URL), three_posts())

        entries = generator.urls()

        assert [e.loc for e in entries] == [
            "https://blog.huyknguyen.com/",
            "https://blog.huyknguyen.com/posts/hello-world",
            "https://blog.huyknguyen.com/posts/second-post",
            "https://blog.huyknguyen.com/posts/third-post",
        ]
        assert entries[0].lastmod is None
        assert entries[1].lastmod.date() == date(2024, 1, 1)

    def test_single_chunk_document(self):
        generator = SitemapGenerator(SitemapConfig(site_url=SITE_URL), three_posts())

        root = ET.fromstring(generator.render_chunk(0).encode("utf-8"))

        assert root.tag == "{http://www.sitemaps.org/schemas/sitemap/0.9}urlset"
        urls = root.findall("sm:url", NS)
        assert len(urls) == 4
        assert urls[1].findtext("sm:loc", namespaces=NS) == (
            "https://blog.huyknguyen.com/posts/hello-world"
        )
        assert urls[1].findtext("sm:lastmod", namespaces=NS) == "2024-01-01T00:00:00+00:00"
        assert urls[0].find("sm:lastmod", NS) is None

    def test_index_points_at_every_chunk(self):
        generator = SitemapGenerator(
            SitemapConfig(site_url=SITE_URL, entry_limit=3), three_posts()
        )

        chunks = generator.chunks()
        root = ET.fromstring(generator.render_index().encode("utf-8"))

        assert [len(chunk) for chunk in chunks] == [3, 1]
        assert [loc.text for loc in root.findall("sm:sitemap/sm:loc", NS)] == [
            "https://blog.huyknguyen.com/sitemap-0.xml",
            "https://blog.huyknguyen.com/sitemap-1.xml",
        ]

    def test_chunks_split_by_entry_limit(self):
        generator = SitemapGenerator(
            SitemapConfig(site_url=SITE_URL, entry_limit=2), three_posts()
        )

        second = ET.fromstring(generator.render_chunk(1).encode("utf-8"))

        assert [loc.text for loc in second.findall("sm:url/sm:loc", NS)] == [
            "https://blog.huyknguyen.com/posts/second-post",
            "https://blog.huyknguyen.com/posts/third-post",
        ]

    def test_site_without_posts_lists_root(self):
        generator = SitemapGenerator(SitemapConfig(site_url=SITE_URL), InMemoryPostSource({}))

        index = ET.fromstring(generator.render_index().encode("utf-8"))
        chunk = ET.fromstring(generator.render_chunk(0).encode("utf-8"))

        assert len(index.findall("sm:sitemap", NS)) == 1
        assert [loc.text for loc in chunk.findall("sm:url/sm:loc", NS)] == [
            "https://blog.huyknguyen.com/"
        ]

    def test_missing_chunk_raises_index_error(self):
        generator = SitemapGenerator(SitemapConfig(site_url=SITE_URL), three_posts())

        with pytest.raises(IndexError):
            generator.render_chunk(1)

    def test_invalid_entry_limit(self):
        generator = SitemapGenerator(
            SitemapConfig(site_url=SITE_URL, entry_limit=0), three_posts()
        )

        with pytest.raises(ValueError, match="entry_limit"):
            generator.chunks()

    def test_malformed_post_fails(self):
        source = InMemoryPostSource({"posts/a.mdx": make_post_document("A", None)})

        with pytest.raises(PostMetadataError):
            SitemapGenerator(SitemapConfig(site_url=SITE_URL), source).render_index()

    def test_chunk_path(self):
        assert sitemap_chunk_path(0) == "/sitemap-0.xml"
        assert sitemap_chunk_path(12) == "/sitemap-12.xml"
