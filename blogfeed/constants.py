"""Site constants, one record per deployment of the blog."""

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path

DEFAULT_DEPLOYMENT = "huyknguyendotcom"


@dataclass(frozen=True)
class SiteConstants:
    """Read-only values shared by every page of a deployed site."""

    post_per_page: int = 3
    related_posts_per_page: int = 2
    min_match_char_length: int = 3
    default_page_title: str = "Blog huyknguyendotcom"
    default_page_desc: str = (
        "Explore the world of web development, JavaScript, and more with "
        "insightful articles and tutorials."
    )
    default_page_author: str = "Huy K. Nguyen"
    default_social_image_url: str = "huynk-og.webp"
    app_name: str = "huyknguyendotcom"
    app_domain: str = "https://blog.huyknguyen.com"


DEPLOYMENTS: dict[str, SiteConstants] = {
    DEFAULT_DEPLOYMENT: SiteConstants(),
}


def get_site_constants(
    deployment: str = DEFAULT_DEPLOYMENT,
    extra: dict[str, SiteConstants] | None = None,
) -> SiteConstants:
    """Look up the constants for a deployment.

    Args:
        deployment: Deployment identifier
        extra: Deployments loaded from a sites file, checked first

    Returns:
        SiteConstants record for the deployment

    Raises:
        ValueError: If the deployment is unknown
    """
    if extra and deployment in extra:
        return extra[deployment]
    try:
        return DEPLOYMENTS[deployment]
    except KeyError:
        known = sorted(set(DEPLOYMENTS) | set(extra or {}))
        raise ValueError(
            f"Unknown deployment: {deployment!r} (known: {', '.join(known)})"
        ) from None


def load_deployments(path: str | Path) -> dict[str, SiteConstants]:
    """Load additional deployments from a JSON sites file.

    Each entry overrides fields of the default record::

        {"deployments": {"staging": {"app_domain": "https://staging.example.com"}}}

    Raises:
        ValueError: If the file is not valid JSON or names unknown fields
    """
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in sites file: {e}") from e

    entries = data.get("deployments", {}) if isinstance(data, dict) else None
    if not isinstance(entries, dict):
        raise ValueError("Sites file must contain a 'deployments' object")

    allowed = {f.name for f in fields(SiteConstants)}
    deployments = {}
    for name, overrides in entries.items():
        if not isinstance(overrides, dict):
            raise ValueError(f"Deployment {name!r} must be an object")
        unknown = set(overrides) - allowed
        if unknown:
            raise ValueError(
                f"Unknown fields for deployment {name!r}: {', '.join(sorted(unknown))}"
            )
        deployments[name] = replace(SiteConstants(), **overrides)
    return deployments
