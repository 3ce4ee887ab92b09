"""
URL and slug helpers.
"""

import re
from typing import Optional
from urllib.parse import urlparse

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")


def is_valid_image_url(url: Optional[str]) -> bool:
    """
    Check whether a URL can be rendered as an image reference.

    Only the string is inspected: the URL must use http or https, have a host
    and a path ending in a recognized image extension.

    Args:
        url: Candidate URL

    Returns:
        True if the URL is usable as an image source
    """
    if not url or not isinstance(url, str) or not url.strip():
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return False
    return parsed.path.lower().endswith(IMAGE_EXTENSIONS)


def is_absolute_url(url: Optional[str]) -> bool:
    """Check whether a URL parses with both a scheme and a location."""
    if not url or not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    if not parsed.scheme or " " in url.strip():
        return False
    if parsed.scheme in ("mailto", "tel"):
        return bool(parsed.path)
    return bool(parsed.netloc)


def slugify(s: str) -> str:
    s = (s or "").lower()
    s = re.sub(r"[^a-z0-9]+", "-", s)
    return s.strip("-") or "post"
