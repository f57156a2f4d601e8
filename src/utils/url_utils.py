"""
URL and naming utilities.

Handles listing URL resolution, vehicle id derivation and filesystem-safe
names for per-model state files.
"""

import hashlib
import re
import time
from typing import Optional, Tuple
from urllib.parse import urljoin, urlparse


BLANK_PAGE_URL = "about:blank"

VEHICLE_ID_RE = re.compile(r"/vehicle/([^/?#]+)")


def absolute_url(base_url: str, href: str) -> str:
    """
    Resolve a listing href against the site base URL.

    Example:
        >>> absolute_url("https://usedcars.bmw.co.uk", "/vehicle/abc123?x=1")
        'https://usedcars.bmw.co.uk/vehicle/abc123?x=1'
    """
    return urljoin(base_url, (href or "").strip())


def strip_query(url: str) -> str:
    """Drop the query string and fragment from a URL or id."""
    return (url or "").split("?", 1)[0].split("#", 1)[0].strip()


def is_navigable(url: Optional[str]) -> bool:
    """True for http(s) URLs with a host; blank and about:blank are not."""
    if not url or url.strip() == BLANK_PAGE_URL:
        return False
    parsed = urlparse(url.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def vehicle_id_from_url(url: str, now_ms: Optional[int] = None) -> Tuple[str, bool]:
    """
    Derive the listing id from the /vehicle/<id> path segment.

    Returns:
        (id, synthetic) where synthetic is True when the pattern did not
        match and an `unknown-<ms>` placeholder was generated instead.

    Example:
        >>> vehicle_id_from_url("https://usedcars.bmw.co.uk/vehicle/39212-x5?ref=list")
        ('39212-x5', False)
    """
    match = VEHICLE_ID_RE.search(url or "")
    if match and match.group(1).strip():
        return match.group(1).strip(), False
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"unknown-{now_ms}", True


def safe_model_name(model: str) -> str:
    """
    Filesystem-safe model key.

    Example:
        >>> safe_model_name("5 Series")
        '5_Series'
    """
    return re.sub(r"\s+", "_", model.strip())


def content_hash(text: str) -> str:
    """MD5 of rendered markup, used to spot a page served twice."""
    return hashlib.md5((text or "").encode("utf-8", errors="ignore")).hexdigest()
