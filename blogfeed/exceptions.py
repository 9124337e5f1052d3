"""Exceptions raised while building blog syndication documents."""


class BlogFeedError(Exception):
    """Base class for errors raised by blogfeed."""


class DocumentSourceError(BlogFeedError):
    """Raised when post documents cannot be enumerated or read."""


class PostMetadataError(BlogFeedError, ValueError):
    """Raised when a post document carries malformed frontmatter."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid metadata in {path}: {reason}")
