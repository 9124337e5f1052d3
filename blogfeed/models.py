"""Data models for blogfeed."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Post:
    """A post document discovered by a document source."""

    path: str  # relative to the content root
    url: str  # site-relative, e.g. /posts/hello-world
    title: str
    pub_date: datetime
    description: str | None = None
    author: str | None = None
    categories: list[str] = field(default_factory=list)


@dataclass
class FeedItem:
    """Represents a single entry of the generated RSS feed."""

    title: str
    link: str
    published: datetime
    description: str | None = None
    author: str | None = None
    categories: list[str] = field(default_factory=list)
