"""Post document sources for blogfeed.

A document source enumerates the MDX post files matching a glob pattern
under a content root and turns their YAML frontmatter into ``Post``
records. Posts are always returned sorted by their path relative to the
content root, so repeated enumerations of an unchanged source agree.
"""

import re
from collections.abc import Iterator
from datetime import UTC, date, datetime, time
from pathlib import Path, PurePosixPath
from typing import Any

import boto3
import yaml
from botocore.exceptions import ClientError
from dateutil import parser as date_parser

from .exceptions import DocumentSourceError, PostMetadataError
from .logging_config import create_execution_logger
from .models import Post

FRONTMATTER_RE = re.compile(
    r"\A\ufeff?---[ \t]*\r?\n(.*?)^---[ \t]*$", re.DOTALL | re.MULTILINE
)

# Frontmatter keys accepted for the publish date, in order of preference
PUB_DATE_KEYS = ("pubDate", "pub_date", "date")

# Two distinct fill-in values; a complete date parses the same against both
INCOMPLETE_DATE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))

# Characters XML 1.0 cannot carry
XML_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0B-\x0C\x0E-\x1F]")


def parse_frontmatter(text: str, path: str = "<string>") -> dict[str, Any]:
    """Extract the YAML frontmatter mapping of a document.

    Args:
        text: Full document text
        path: Document path, used in error messages

    Returns:
        Frontmatter mapping, empty when the document has no frontmatter

    Raises:
        PostMetadataError: If the block is not valid YAML or not a mapping
    """
    match = FRONTMATTER_RE.match(text)
    if not match:
        return {}

    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        raise PostMetadataError(path, f"invalid YAML frontmatter: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise PostMetadataError(path, "frontmatter must be a mapping")
    return data


def post_url(path: str) -> str:
    """Compute the site-relative URL of a post from its document path.

    ``posts/hello-world.mdx`` becomes ``/posts/hello-world`` and
    ``posts/index.mdx`` becomes ``/posts``.
    """
    parts = list(PurePosixPath(path).with_suffix("").parts)
    if parts and parts[-1] == "index":
        parts.pop()
    return "/" + "/".join(parts)


def _parse_pub_date(value: Any, path: str) -> datetime:
    if isinstance(value, datetime):
        published = value
    elif isinstance(value, date):
        published = datetime.combine(value, time())
    elif isinstance(value, str) and value.strip():
        try:
            published = date_parser.parse(value, default=INCOMPLETE_DATE_DEFAULTS[0])
            other_default = date_parser.parse(value, default=INCOMPLETE_DATE_DEFAULTS[1])
        except (ValueError, OverflowError) as e:
            raise PostMetadataError(path, f"unparseable pubDate {value!r}") from e
        # Missing fields would otherwise be filled from today's date
        if published != other_default:
            raise PostMetadataError(path, f"incomplete pubDate {value!r}")
    else:
        raise PostMetadataError(path, f"invalid pubDate {value!r}")

    # Naive dates are taken as UTC
    if published.tzinfo is None:
        published = published.replace(tzinfo=UTC)
    return published


def _check_xml_text(value: str, key: str, path: str) -> str:
    if XML_CONTROL_CHARS_RE.search(value):
        raise PostMetadataError(path, f"{key} contains control characters")
    return value


def _parse_categories(metadata: dict[str, Any], path: str) -> list[str]:
    value = metadata.get("categories", metadata.get("tags"))
    if value is None:
        return []
    if isinstance(value, str):
        return [_check_xml_text(value, "categories", path)]
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return [_check_xml_text(v, "categories", path) for v in value]
    raise PostMetadataError(path, "categories must be a string or a list of strings")


def _optional_str(metadata: dict[str, Any], key: str, path: str) -> str | None:
    value = metadata.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise PostMetadataError(path, f"{key} must be a string")
    return _check_xml_text(value, key, path)


def build_post(path: str, metadata: dict[str, Any]) -> Post:
    """Validate frontmatter metadata and build a Post.

    Args:
        path: Document path relative to the content root
        metadata: Parsed frontmatter

    Returns:
        Post record

    Raises:
        PostMetadataError: If title or publish date is missing or invalid
    """
    title = metadata.get("title")
    if not isinstance(title, str) or not title.strip():
        raise PostMetadataError(path, "missing or empty title")
    _check_xml_text(title, "title", path)

    raw_date = next(
        (metadata[key] for key in PUB_DATE_KEYS if metadata.get(key) is not None),
        None,
    )
    if raw_date is None:
        raise PostMetadataError(path, "missing pubDate")

    return Post(
        path=path,
        url=post_url(path),
        title=title,
        pub_date=_parse_pub_date(raw_date, path),
        description=_optional_str(metadata, "description", path),
        author=_optional_str(metadata, "author", path),
        categories=_parse_categories(metadata, path),
    )


def is_hidden(relative_path: str) -> bool:
    """Dot-prefixed files and directories are never posts."""
    return any(part.startswith(".") for part in PurePosixPath(relative_path).parts)


def matches_pattern(relative_path: str, pattern: str) -> bool:
    """Check a relative path against a glob, one path segment per pattern segment."""
    candidate = PurePosixPath(relative_path)
    if is_hidden(relative_path):
        return False
    return len(candidate.parts) == len(PurePosixPath(pattern).parts) and candidate.match(
        pattern
    )


class PostSource:
    """Base class for document sources."""

    component = "post_source"

    def __init__(self, pattern: str, execution_id: str | None = None):
        self.pattern = pattern
        self.logger = create_execution_logger(self.component, execution_id)

    def iter_documents(self) -> Iterator[tuple[str, str]]:
        """Yield ``(relative_path, text)`` for every matching document, sorted by path."""
        raise NotImplementedError

    def list_posts(self) -> list[Post]:
        """Enumerate and parse all matching post documents.

        Raises:
            DocumentSourceError: If documents cannot be enumerated or read
            PostMetadataError: If any document has malformed frontmatter
        """
        posts = []
        for path, text in self.iter_documents():
            post = build_post(path, parse_frontmatter(text, path))
            self.logger.log_post_loaded(path, post.url)
            posts.append(post)

        self.logger.info(
            f"Enumerated {len(posts)} posts", pattern=self.pattern, posts_count=len(posts)
        )
        return posts


class LocalPostSource(PostSource):
    """Reads post documents from a directory on the local filesystem."""

    def __init__(
        self,
        root: str | Path,
        pattern: str = "posts/*.mdx",
        execution_id: str | None = None,
    ):
        super().__init__(pattern, execution_id)
        self.root = Path(root)

    def iter_documents(self) -> Iterator[tuple[str, str]]:
        if not self.root.is_dir():
            raise DocumentSourceError(f"Content root not found: {self.root}")

        paths = sorted(
            (
                p
                for p in self.root.glob(self.pattern)
                if p.is_file() and not is_hidden(p.relative_to(self.root).as_posix())
            ),
            key=lambda p: p.relative_to(self.root).as_posix(),
        )
        for file_path in paths:
            relative = file_path.relative_to(self.root).as_posix()
            try:
                text = file_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                self.logger.error(
                    f"Failed to read post {relative}: {e}", post_path=relative
                )
                raise DocumentSourceError(f"Failed to read post {relative}") from e
            yield relative, text


class S3PostSource(PostSource):
    """Reads post documents from an S3 bucket prefix."""

    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        pattern: str = "posts/*.mdx",
        aws_region: str = "us-east-1",
        execution_id: str | None = None,
    ):
        super().__init__(pattern, execution_id)
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        self.s3 = boto3.client("s3", region_name=aws_region)

        self.logger.info(
            "S3PostSource initialized", bucket=bucket, prefix=self.prefix
        )

    def _relative_key(self, key: str) -> str | None:
        if not self.prefix:
            return key
        if key.startswith(self.prefix + "/"):
            return key[len(self.prefix) + 1 :]
        return None

    def _list_keys(self) -> list[tuple[str, str]]:
        list_prefix = f"{self.prefix}/" if self.prefix else ""
        matches = []
        paginator = self.s3.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self.bucket, Prefix=list_prefix):
            for obj in page.get("Contents", []):
                relative = self._relative_key(obj["Key"])
                if relative and matches_pattern(relative, self.pattern):
                    matches.append((relative, obj["Key"]))
        return sorted(matches)

    def iter_documents(self) -> Iterator[tuple[str, str]]:
        try:
            keys = self._list_keys()
            for relative, key in keys:
                response = self.s3.get_object(Bucket=self.bucket, Key=key)
                yield relative, response["Body"].read().decode("utf-8")
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            self.logger.error(
                f"S3 error reading posts from s3://{self.bucket}/{self.prefix}: {error_code}",
                bucket=self.bucket,
                error=str(e),
            )
            raise DocumentSourceError(
                f"Failed to read posts from s3://{self.bucket}/{self.prefix}"
            ) from e
        except UnicodeDecodeError as e:
            raise DocumentSourceError(
                f"Post in s3://{self.bucket}/{self.prefix} is not valid UTF-8"
            ) from e


def create_post_source(
    content_root: str,
    pattern: str = "posts/*.mdx",
    aws_region: str = "us-east-1",
    execution_id: str | None = None,
) -> PostSource:
    """Create the document source for a content root.

    ``s3://bucket/prefix`` selects S3, anything else is a local directory.
    """
    if content_root.startswith("s3://"):
        bucket, _, prefix = content_root[len("s3://") :].partition("/")
        if not bucket:
            raise ValueError(f"Invalid S3 content root: {content_root}")
        return S3PostSource(
            bucket,
            prefix,
            pattern=pattern,
            aws_region=aws_region,
            execution_id=execution_id,
        )
    return LocalPostSource(content_root, pattern=pattern, execution_id=execution_id)
