"""Configuration management for blogfeed."""

import os
from dataclasses import dataclass
from pathlib import Path

from .constants import (
    DEFAULT_DEPLOYMENT,
    SiteConstants,
    get_site_constants,
    load_deployments,
)
from .posts import PostSource, create_post_source

FEED_LANGUAGE = "en-us"


@dataclass
class FeedConfig:
    """Configuration for the RSS feed document."""

    title: str
    description: str
    site_url: str
    language: str = FEED_LANGUAGE
    feed_path: str = "/rss.xml"


@dataclass
class SitemapConfig:
    """Configuration for the sitemap documents."""

    site_url: str
    entry_limit: int = 45000


class Config:
    """Main configuration manager."""

    # Optional file declaring additional deployments
    SITES_FILE = "sites.json"

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.deployment = os.getenv("SITE_DEPLOYMENT", DEFAULT_DEPLOYMENT)
        self.site_url_override = os.getenv("SITE_URL", "")
        self.content_root = os.getenv("CONTENT_ROOT", "src/pages")
        self.posts_pattern = os.getenv("POSTS_PATTERN", "posts/*.mdx")
        self.sites_file = os.getenv("SITES_FILE", self.SITES_FILE)
        self.aws_region = os.getenv(
            "CURRENT_AWS_REGION", os.getenv("AWS_DEFAULT_REGION", "us-east-1")
        )
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self._site_constants: SiteConstants | None = None

    def _find_sites_file(self) -> Path | None:
        # Current directory first, then the Lambda root
        sites_file = Path(self.sites_file)
        if sites_file.exists():
            return sites_file
        if not sites_file.is_absolute():
            lambda_file = Path("/var/task") / self.sites_file
            if lambda_file.exists():
                return lambda_file
        return None

    def get_site_constants(self) -> SiteConstants:
        """Get the constants record of the selected deployment."""
        if self._site_constants is None:
            sites_file = self._find_sites_file()
            extra = load_deployments(sites_file) if sites_file else None
            self._site_constants = get_site_constants(self.deployment, extra)
        return self._site_constants

    @property
    def site_url(self) -> str:
        """Canonical base URL of the site."""
        return self.site_url_override or self.get_site_constants().app_domain

    def get_feed_config(self) -> FeedConfig:
        """Get RSS feed configuration."""
        constants = self.get_site_constants()
        return FeedConfig(
            title=constants.default_page_title,
            description=constants.default_page_desc,
            site_url=self.site_url,
        )

    def get_sitemap_config(self) -> SitemapConfig:
        """Get sitemap configuration."""
        return SitemapConfig(site_url=self.site_url)

    def create_post_source(self, execution_id: str | None = None) -> PostSource:
        """Create the document source for the configured content root."""
        return create_post_source(
            self.content_root,
            self.posts_pattern,
            aws_region=self.aws_region,
            execution_id=execution_id,
        )
