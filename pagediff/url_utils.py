"""Shared URL utilities — normalize URLs, validate targets, derive file-safe names."""

from __future__ import annotations

import re
from urllib.parse import urlparse

from pagediff.errors import IdenticalTargetsError


def normalize_url(url: str) -> str:
    """Normalize a URL for comparison of page identifiers."""
    parsed = urlparse(url.strip())
    path = parsed.path.rstrip("/") or "/"
    query = ""
    if parsed.query:
        params = sorted(parsed.query.split("&"))
        query = "?" + "&".join(params)
    return f"{parsed.scheme.lower()}://{parsed.netloc.lower()}{path}{query}"


def validate_targets(url1: str, url2: str) -> None:
    """Reject missing or identical page identifiers before any browser work."""
    if not url1 or not url2:
        raise ValueError("Both URLs are required")
    for url in (url1, url2):
        if urlparse(url).scheme not in ("http", "https", "file"):
            raise ValueError(f"Unsupported URL: {url}")
    if normalize_url(url1) == normalize_url(url2):
        raise IdenticalTargetsError(f"Both URLs point to the same page: {url1}")


def parse_interactions(raw: str | None) -> list[str]:
    """Split a comma-separated label list, dropping blanks and repeats."""
    labels: list[str] = []
    for part in (raw or "").split(","):
        label = part.strip()
        if label and label not in labels:
            labels.append(label)
    return labels


def slugify(text: str, max_length: int = 40) -> str:
    slug = re.sub(r"[^a-zA-Z0-9]+", "_", text).strip("_").lower()
    return slug[:max_length] or "page"
