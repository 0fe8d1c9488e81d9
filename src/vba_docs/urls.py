from __future__ import annotations

import re
from typing import Mapping
from urllib.parse import ParseResult, quote, urlencode, urlparse, urlunparse

_UNSAFE_QUERY_CHARS = re.compile(r"[<>\"'&]")
MAX_QUERY_LEN = 100

_VBA_PREFIX = re.compile(r"^/vba/")


def sanitize_query(query: str) -> str:
    """Make user search text safe to embed in a request URL.

    - Drops ``< > " ' &``.
    - Strips surrounding whitespace.
    - Caps the result at 100 characters.
    """

    return _UNSAFE_QUERY_CHARS.sub("", query).strip()[:MAX_QUERY_LEN]


def library_slug(library_id: str) -> str:
    return _VBA_PREFIX.sub("", library_id, count=1)


def normalize_url(raw_url: str) -> str:
    """Normalize a URL for cache fingerprints.

    - Lowercases scheme + hostname.
    - Strips fragments.
    """

    parsed: ParseResult = urlparse(raw_url)
    parsed = parsed._replace(
        scheme=(parsed.scheme or "").lower(),
        netloc=(parsed.netloc or "").lower(),
        fragment="",
    )
    return urlunparse(parsed)


def build_url(
    base_url: str,
    *segments: str,
    params: Mapping[str, object | None] | None = None,
) -> str:
    url = base_url.rstrip("/")
    for seg in segments:
        seg = seg.strip("/")
        if seg:
            # Each segment stays one path segment, slashes included.
            url = f"{url}/{quote(seg, safe='')}"

    # Optional filters are only sent when set.
    query = [
        (key, str(getattr(value, "value", value)))
        for key, value in (params or {}).items()
        if value is not None and value != ""
    ]
    if query:
        url = f"{url}?{urlencode(query)}"
    return url
