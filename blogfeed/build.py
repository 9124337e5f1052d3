#!/usr/bin/env python3
"""
Write the blog's RSS feed and sitemaps as static files.

Usage: python -m blogfeed.build [--out DIR] [--content-root PATH]
                                [--deployment ID] [--site-url URL]

Flags override the SITE_DEPLOYMENT, SITE_URL and CONTENT_ROOT environment
variables. Nothing is written unless every document renders.
"""

import argparse
import os
import sys
import tempfile
from datetime import UTC, datetime
from pathlib import Path

from .config import Config
from .logging_config import create_execution_logger, setup_structured_logging
from .rss import FeedGenerator
from .sitemap import SitemapGenerator, sitemap_chunk_path


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="blogfeed-build",
        description="Write rss.xml and sitemap files for the blog.",
    )
    parser.add_argument("--out", default="dist", help="output directory (default: dist)")
    parser.add_argument("--content-root", help="posts directory or s3://bucket/prefix")
    parser.add_argument("--deployment", help="deployment identifier")
    parser.add_argument("--site-url", help="canonical site URL")
    return parser.parse_args(argv)


def render_documents(config: Config, execution_id: str) -> dict[str, str]:
    """Render every syndication document, keyed by file name."""
    source = config.create_post_source(execution_id=execution_id)

    feed = FeedGenerator(config.get_feed_config(), source, execution_id=execution_id)
    documents = {"rss.xml": feed.generate()}

    sitemap = SitemapGenerator(
        config.get_sitemap_config(), source, execution_id=execution_id
    )
    chunks = sitemap.chunks()
    documents["sitemap-index.xml"] = sitemap.render_index(len(chunks))
    for index in range(len(chunks)):
        name = sitemap_chunk_path(index).lstrip("/")
        documents[name] = sitemap.render_chunk(index, chunks)
    return documents


def write_documents(out_dir: Path, documents: dict[str, str]) -> list[Path]:
    """Write every document into ``out_dir``.

    Files are staged in a sibling temporary directory and only moved into
    place once all of them were written.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    with tempfile.TemporaryDirectory(dir=out_dir.parent, prefix=".blogfeed-") as staging:
        staged = []
        for name, body in documents.items():
            path = Path(staging) / name
            path.write_text(body, encoding="utf-8")
            staged.append(path)

        written = []
        for path in staged:
            target = out_dir / path.name
            os.replace(path, target)
            written.append(target)
    return written


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_structured_logging(os.getenv("LOG_LEVEL", "INFO"))

    execution_id = f"build_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S_%f')}"
    logger = create_execution_logger("build", execution_id)
    logger.log_execution_start(out=args.out)

    config = Config()
    if args.content_root:
        config.content_root = args.content_root
    if args.deployment:
        config.deployment = args.deployment
    if args.site_url:
        config.site_url_override = args.site_url

    try:
        documents = render_documents(config, execution_id)
    except Exception as e:
        logger.error(f"Build failed: {e}", exc_info=True, error=str(e))
        logger.log_execution_end(success=False)
        return 1

    out_dir = Path(args.out)
    try:
        written = write_documents(out_dir, documents)
    except OSError as e:
        logger.error(f"Failed to write {out_dir}: {e}", exc_info=True, error=str(e))
        logger.log_execution_end(success=False)
        return 1

    for path in written:
        logger.info(f"Wrote {path}", file=str(path), size=path.stat().st_size)

    logger.log_execution_end(success=True, files_written=len(documents))
    return 0


if __name__ == "__main__":
    sys.exit(main())
