"""Reference IDs and URL normalization for test cases."""

from __future__ import annotations

import hashlib
import json
from urllib.parse import urlparse

from csscritic.models.comparison import TestCase


def normalize_url(url: str) -> str:
    """Normalize a URL so equivalent spellings share one reference."""
    parsed = urlparse(url)
    if not parsed.scheme:
        # Relative file path, e.g. "pages/home.html"
        return url.strip()
    path = parsed.path.rstrip("/") or "/"
    query = ""
    if parsed.query:
        params = sorted(parsed.query.split("&"))
        query = "?" + "&".join(params)
    return f"{parsed.scheme}://{parsed.netloc}{path}{query}"


def reference_id_for(test_case: TestCase) -> str:
    """Generate a stable reference ID from the URL and the extra test case params."""
    key = normalize_url(test_case.url)
    if test_case.params:
        key += "|" + json.dumps(test_case.params, sort_keys=True, default=str)
    return hashlib.md5(key.encode()).hexdigest()[:12]
