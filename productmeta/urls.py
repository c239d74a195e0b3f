from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlparse

_ORIGIN_RE = re.compile(r"^(https?://[^/]+)")
_DYNAMIC_IMAGE_RE = re.compile(r'"(https://[^"]+)"')
_ASIN_MARKERS = ("/dp/", "/gp/product/", "/gp/aw/d/")
_ASIN_MAX_LEN = 10


def make_absolute(ref: str, base_url: str) -> str:
    if ref.startswith(("http://", "https://")):
        return ref
    if ref.startswith("//"):
        return "https:" + ref
    if ref.startswith("/"):
        m = _ORIGIN_RE.match(base_url or "")
        if m:
            return m.group(1) + ref
    return ref


def first_srcset_url(srcset: str) -> str:
    first = srcset.split(",")[0]
    parts = first.split()
    return parts[0] if parts else ""


def is_data_url(value: Optional[str]) -> bool:
    return bool(value) and value.strip().lower().startswith("data:")


def dynamic_image_url(raw: Optional[str]) -> str:
    """First image URL out of Amazon's data-a-dynamic-image JSON ({url: [w, h]})."""
    if not raw:
        return ""
    m = _DYNAMIC_IMAGE_RE.search(raw)
    return m.group(1) if m else ""


def host_of(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def default_currency_for(url: str) -> str:
    host = host_of(url)
    if host.endswith(".mx"):
        return "MXN"
    if host.endswith(".com"):
        return "USD"
    return ""


def is_amazon_url(url: str) -> bool:
    return "amazon" in host_of(url)


def extract_asin(url: str) -> str:
    for marker in _ASIN_MARKERS:
        idx = url.find(marker)
        if idx == -1:
            continue
        start = idx + len(marker)
        end = start
        while end < len(url) and end - start < _ASIN_MAX_LEN:
            if url[end] in "/?&":
                break
            end += 1
        if end > start:
            return url[start:end]
    return ""
