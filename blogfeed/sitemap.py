"""Sitemap generation for blogfeed."""

from dataclasses import dataclass
from datetime import datetime
from io import StringIO
from urllib.parse import urljoin

from django.utils.xmlutils import SimplerXMLGenerator

from .config import SitemapConfig
from .logging_config import create_execution_logger
from .posts import PostSource

SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"
SITEMAP_INDEX_PATH = "/sitemap-index.xml"


@dataclass
class SitemapEntry:
    """A single URL listed in a sitemap."""

    loc: str
    lastmod: datetime | None = None


def sitemap_chunk_path(index: int) -> str:
    return f"/sitemap-{index}.xml"


class SitemapGenerator:
    """Builds the sitemap index and sitemap chunks for the site root and its posts."""

    def __init__(
        self,
        config: SitemapConfig,
        source: PostSource,
        execution_id: str | None = None,
    ):
        self.config = config
        self.source = source
        self.logger = create_execution_logger("sitemap_generator", execution_id)

    def urls(self) -> list[SitemapEntry]:
        """List the site root followed by every post, all absolute."""
        entries = [SitemapEntry(loc=urljoin(self.config.site_url, "/"))]
        for post in self.source.list_posts():
            entries.append(
                SitemapEntry(
                    loc=urljoin(self.config.site_url, post.url), lastmod=post.pub_date
                )
            )
        return entries

    def chunks(self) -> list[list[SitemapEntry]]:
        """Split the URLs into chunks of at most ``entry_limit`` entries."""
        if self.config.entry_limit < 1:
            raise ValueError("entry_limit must be at least 1")
        entries = self.urls()
        limit = self.config.entry_limit
        return [entries[i : i + limit] for i in range(0, len(entries), limit)]

    def render_index(self, chunk_count: int | None = None) -> str:
        """Render the sitemap index pointing at every chunk."""
        if chunk_count is None:
            chunk_count = len(self.chunks())

        out = StringIO()
        handler = SimplerXMLGenerator(out, "utf-8", short_empty_elements=True)
        handler.startDocument()
        handler.startElement("sitemapindex", {"xmlns": SITEMAP_NAMESPACE})
        for index in range(chunk_count):
            handler.startElement("sitemap", {})
            handler.addQuickElement(
                "loc", urljoin(self.config.site_url, sitemap_chunk_path(index))
            )
            handler.endElement("sitemap")
        handler.endElement("sitemapindex")
        handler.endDocument()

        self.logger.log_document_rendered("sitemap-index.xml", chunk_count)
        return out.getvalue()

    def render_chunk(self, index: int, chunks: list[list[SitemapEntry]] | None = None) -> str:
        """Render one sitemap chunk.

        Raises:
            IndexError: If the chunk does not exist
        """
        if chunks is None:
            chunks = self.chunks()
        if not 0 <= index < len(chunks):
            raise IndexError(f"Sitemap chunk {index} does not exist")

        out = StringIO()
        handler = SimplerXMLGenerator(out, "utf-8", short_empty_elements=True)
        handler.startDocument()
        handler.startElement("urlset", {"xmlns": SITEMAP_NAMESPACE})
        for entry in chunks[index]:
            handler.startElement("url", {})
            handler.addQuickElement("loc", entry.loc)
            if entry.lastmod is not None:
                handler.addQuickElement("lastmod", entry.lastmod.isoformat())
            handler.endElement("url")
        handler.endElement("urlset")
        handler.endDocument()

        self.logger.log_document_rendered(f"sitemap-{index}.xml", len(chunks[index]))
        return out.getvalue()
