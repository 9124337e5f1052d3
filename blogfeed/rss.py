"""RSS feed generation for blogfeed."""

from urllib.parse import urljoin

from django.utils.feedgenerator import Rss201rev2Feed, rfc2822_date

from .config import FeedConfig
from .logging_config import create_execution_logger
from .models import FeedItem, Post
from .posts import PostSource

RSS_CONTENT_TYPE = "application/xml"


class BlogRssFeed(Rss201rev2Feed):
    """RSS 2.0 feed whose channel only depends on its items.

    ``lastBuildDate`` is the latest item date and is left out of an empty feed.
    """

    content_type = f"{RSS_CONTENT_TYPE}; charset=utf-8"

    def add_root_elements(self, handler):
        handler.addQuickElement("title", self.feed["title"])
        handler.addQuickElement("link", self.feed["link"])
        handler.addQuickElement("description", self.feed["description"])
        if self.feed["feed_url"] is not None:
            handler.addQuickElement(
                "atom:link", None, {"rel": "self", "href": self.feed["feed_url"]}
            )
        if self.feed["language"] is not None:
            handler.addQuickElement("language", self.feed["language"])
        if self.items:
            handler.addQuickElement("lastBuildDate", rfc2822_date(self.latest_post_date()))


class FeedGenerator:
    """Builds the RSS feed of all posts from a document source."""

    def __init__(
        self,
        config: FeedConfig,
        source: PostSource,
        execution_id: str | None = None,
    ):
        """Initialize FeedGenerator.

        Args:
            config: Feed title, description, site URL and language
            source: Document source enumerating the posts
            execution_id: Execution ID for logging context
        """
        self.config = config
        self.source = source
        self.logger = create_execution_logger("feed_generator", execution_id)

    def to_feed_item(self, post: Post) -> FeedItem:
        """Convert a post into a feed item with an absolute link."""
        return FeedItem(
            title=post.title,
            link=urljoin(self.config.site_url, post.url),
            published=post.pub_date,
            description=post.description,
            author=post.author,
            categories=list(post.categories),
        )

    def get_items(self) -> list[FeedItem]:
        """Enumerate the posts and map each one to a feed item."""
        return [self.to_feed_item(post) for post in self.source.list_posts()]

    def build_feed(self, items: list[FeedItem]) -> BlogRssFeed:
        feed = BlogRssFeed(
            title=self.config.title,
            link=self.config.site_url,
            description=self.config.description,
            language=self.config.language,
            feed_url=urljoin(self.config.site_url, self.config.feed_path),
        )
        for item in items:
            feed.add_item(
                title=item.title,
                link=item.link,
                description=item.description,
                author_name=item.author,
                pubdate=item.published,
                unique_id=item.link,
                unique_id_is_permalink=True,
                categories=item.categories,
            )
        return feed

    def generate(self) -> str:
        """Generate the complete RSS document.

        Returns:
            Serialized RSS 2.0 document

        Raises:
            DocumentSourceError: If the posts cannot be enumerated
            PostMetadataError: If a post has malformed frontmatter
        """
        items = self.get_items()
        document = self.build_feed(items).writeString("utf-8")
        self.logger.log_document_rendered("rss.xml", len(items))
        return document
