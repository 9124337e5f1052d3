"""Lambda handler serving the blog's RSS feed and sitemaps."""

import os
import re
from datetime import UTC, datetime
from typing import Any

from .config import Config
from .logging_config import create_execution_logger, setup_structured_logging
from .rss import RSS_CONTENT_TYPE, FeedGenerator
from .sitemap import SITEMAP_INDEX_PATH, SitemapGenerator

# Setup structured logging
setup_structured_logging(os.getenv("LOG_LEVEL", "INFO"))

FEED_PATH = "/rss.xml"
SITEMAP_CHUNK_RE = re.compile(r"^/sitemap-(\d+)\.xml$")
ALLOWED_METHODS = ("GET", "HEAD")


def get_request_route(event: dict[str, Any]) -> tuple[str, str]:
    """Extract ``(method, path)`` from an API Gateway or Function URL event.

    Handles both payload format 2.0 (``rawPath``, ``requestContext.http``)
    and the REST API format 1.0 (``path``, ``httpMethod``).
    """
    http_context = (event.get("requestContext") or {}).get("http") or {}
    method = http_context.get("method") or event.get("httpMethod") or "GET"
    path = event.get("rawPath") or event.get("path") or "/"
    return method.upper(), path


def xml_response(body: str, method: str) -> dict[str, Any]:
    return {
        "statusCode": 200,
        "headers": {"Content-Type": RSS_CONTENT_TYPE},
        "body": "" if method == "HEAD" else body,
    }


def error_response(status_code: int, message: str, **headers) -> dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "text/plain; charset=utf-8", **headers},
        "body": message,
    }


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """
    Main Lambda handler routing the syndication endpoints.

    Every invocation reads the configuration and enumerates the posts
    afresh; nothing is kept between requests.

    Args:
        event: API Gateway or Lambda Function URL event
        context: Lambda context object

    Returns:
        Proxy response dictionary with status, headers and body
    """
    execution_id = getattr(context, "aws_request_id", None) or (
        f"lambda_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S_%f')}"
    )
    main_logger = create_execution_logger("main", execution_id)

    method, path = get_request_route(event)
    main_logger.log_execution_start(
        method=method,
        path=path,
        lambda_function_name=getattr(context, "function_name", "unknown"),
    )

    chunk_match = SITEMAP_CHUNK_RE.match(path)
    if path not in (FEED_PATH, SITEMAP_INDEX_PATH) and not chunk_match:
        main_logger.log_execution_end(success=True, status_code=404)
        return error_response(404, "Not Found")

    if method not in ALLOWED_METHODS:
        main_logger.log_execution_end(success=True, status_code=405)
        return error_response(405, "Method Not Allowed", Allow=", ".join(ALLOWED_METHODS))

    try:
        config = Config()
        source = config.create_post_source(execution_id=execution_id)

        if path == FEED_PATH:
            generator = FeedGenerator(
                config.get_feed_config(), source, execution_id=execution_id
            )
            body = generator.generate()
        else:
            sitemap = SitemapGenerator(
                config.get_sitemap_config(), source, execution_id=execution_id
            )
            if path == SITEMAP_INDEX_PATH:
                body = sitemap.render_index()
            else:
                try:
                    body = sitemap.render_chunk(int(chunk_match.group(1)))
                except IndexError:
                    main_logger.log_execution_end(success=True, status_code=404)
                    return error_response(404, "Not Found")

    except Exception as e:
        error_msg = f"Failed to render {path}: {e}"
        main_logger.error(error_msg, exc_info=True, path=path, error=str(e))
        main_logger.log_execution_end(success=False, status_code=500, error=error_msg)
        return error_response(500, "Internal Server Error")

    main_logger.log_execution_end(success=True, status_code=200, content_length=len(body))
    return xml_response(body, method)
