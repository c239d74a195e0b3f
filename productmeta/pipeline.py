from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx
from bs4 import BeautifulSoup

from .cascade import run_steps
from .config import FetchSettings
from .errors import ExtractionError
from .fetcher import Fetcher
from .jsonld import extract_jsonld
from .models import ProductMetadata
from .parser import FALLBACK_STEPS, GENERIC_STEPS, clean_title
from .sites import steps_for_url
from .urls import extract_asin, is_amazon_url

logger = logging.getLogger(__name__)

# Currency shown when extraction fails outright
PLACEHOLDER_CURRENCY = "MXN"


def parse_document(soup: BeautifulSoup, url: str) -> ProductMetadata:
    """
    Runs every post-fetch strategy over an already parsed page.

    Order matters: generic meta tags, then JSON-LD, then the site adapter
    for the host (if any), then the generic price selectors and the TLD
    currency default. The title is cleaned once at the very end.
    """
    meta = ProductMetadata()
    run_steps(GENERIC_STEPS, soup, url, meta)
    extract_jsonld(soup, meta, url)
    run_steps(steps_for_url(url), soup, url, meta)
    run_steps(FALLBACK_STEPS, soup, url, meta)
    meta.title = clean_title(meta.title, meta.site_name)
    return meta


def parse_html(html: str, url: str) -> ProductMetadata:
    return parse_document(BeautifulSoup(html, "lxml"), url)


def _blank_preview(url: str, error: str) -> Dict[str, Any]:
    return {
        "url": url,
        "title": "",
        "description": "",
        "image_url": "",
        "price": None,
        "currency": PLACEHOLDER_CURRENCY,
        "site_name": "",
        "is_amazon": is_amazon_url(url),
        "amazon_asin": extract_asin(url),
        "error": error,
    }


class MetadataExtractor:
    def __init__(self, settings: Optional[FetchSettings] = None,
                 transport: Optional[httpx.BaseTransport] = None):
        self.fetcher = Fetcher(settings, transport=transport)

    def close(self) -> None:
        self.fetcher.close()

    def __enter__(self) -> "MetadataExtractor":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def extract(self, url: str) -> ProductMetadata:
        """Raises FetchError / DocumentParseError; missing fields stay blank."""
        soup = self.fetcher.fetch(url)
        meta = parse_document(soup, url)
        logger.info(f"Extracted {url}: title={meta.title!r} price={meta.price} {meta.currency}")
        return meta

    def preview(self, url: str) -> Dict[str, Any]:
        try:
            meta = self.extract(url)
        except ExtractionError as e:
            logger.warning(f"Metadata extraction failed for {url}: {e}")
            return _blank_preview(url, str(e))
        result = {"url": url}
        result.update(meta.to_dict())
        result.update({
            "is_amazon": is_amazon_url(url),
            "amazon_asin": extract_asin(url),
            "error": None,
        })
        return result


def extract(url: str, settings: Optional[FetchSettings] = None) -> ProductMetadata:
    with MetadataExtractor(settings) as extractor:
        return extractor.extract(url)


def preview(url: str, settings: Optional[FetchSettings] = None) -> Dict[str, Any]:
    with MetadataExtractor(settings) as extractor:
        return extractor.preview(url)


async def extract_many(urls: List[str],
                       concurrency: int = 4,
                       settings: Optional[FetchSettings] = None,
                       extractor: Optional[MetadataExtractor] = None) -> List[Dict[str, Any]]:
    """Previews many URLs, results in input order."""
    owned = extractor is None
    if owned:
        extractor = MetadataExtractor(settings)
    sem = asyncio.Semaphore(max(1, concurrency))

    async def handle(url: str) -> Dict[str, Any]:
        async with sem:
            return await asyncio.to_thread(extractor.preview, url)

    # Every worker finishes before the client is closed, even when one fails
    try:
        results = await asyncio.gather(*(handle(u) for u in urls), return_exceptions=True)
    finally:
        if owned:
            extractor.close()
    for r in results:
        if isinstance(r, BaseException):
            raise r
    return results
