"""RSS feed and sitemap endpoints for an MDX blog."""

__version__ = "1.0.0"
