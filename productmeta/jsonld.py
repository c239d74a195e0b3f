"""
schema.org Product / Offer extraction from <script type="application/ld+json">.

Structured data is usually the most trustworthy source on a page, so this
pass runs before the site adapters and the generic price selectors. Like every
other strategy it only fills fields that are still empty.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from bs4 import BeautifulSoup

from .models import ProductMetadata
from .prices import PriceParseError, parse_price
from .urls import is_data_url, make_absolute

logger = logging.getLogger(__name__)

PRODUCT_TYPES = ("Product", "IndividualProduct")
OFFER_TYPES = ("Offer", "AggregateOffer")


def _types(d: Dict[str, Any]) -> tuple:
    t = d.get("@type")
    if isinstance(t, str):
        return (t,)
    if isinstance(t, list):
        return tuple(x for x in t if isinstance(x, str))
    return ()


def offer_amount(value: Any) -> Optional[float]:
    """
    Maps the JSON shapes seen for `price` / `lowPrice` to a float.

    int and float are taken as-is, strings go through parse_price. Booleans,
    nulls, objects and lists are rejected rather than guessed at.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return float(value)
    if isinstance(value, float):
        return value
    if isinstance(value, str):
        try:
            return parse_price(value)
        except PriceParseError:
            return None
    return None


def _image_from(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, list) and value:
        first = value[0]
        if isinstance(first, str):
            return first
        if isinstance(first, dict) and isinstance(first.get("url"), str):
            return first["url"]
        return None
    if isinstance(value, dict) and isinstance(value.get("url"), str):
        return value["url"]
    return None


def _parse_offer(offer: Dict[str, Any], meta: ProductMetadata) -> None:
    if meta.is_set("price"):
        return
    amount = offer_amount(offer.get("price"))
    if amount is None or amount <= 0:
        amount = offer_amount(offer.get("lowPrice"))
    meta.fill("price", amount)

    currency = offer.get("priceCurrency")
    if isinstance(currency, str):
        meta.fill("currency", currency)


def _parse_product(d: Dict[str, Any], meta: ProductMetadata, base_url: str) -> None:
    if isinstance(d.get("name"), str):
        meta.fill("title", d["name"])
    if isinstance(d.get("description"), str):
        meta.fill("description", d["description"])

    if not meta.is_set("image_url"):
        img = _image_from(d.get("image"))
        if img and not is_data_url(img):
            meta.fill("image_url", make_absolute(img.strip(), base_url))

    if not meta.is_set("price"):
        offers = d.get("offers")
        if isinstance(offers, list):
            offers = offers[0] if offers else None
        if isinstance(offers, dict):
            _parse_offer(offers, meta)


def parse_jsonld_object(d: Dict[str, Any], meta: ProductMetadata, base_url: str = "") -> None:
    graph = d.get("@graph")
    if isinstance(graph, list):
        for item in graph:
            if isinstance(item, dict):
                parse_jsonld_object(item, meta, base_url)
        return

    types = _types(d)
    if any(t in PRODUCT_TYPES for t in types):
        _parse_product(d, meta, base_url)
    if any(t in OFFER_TYPES for t in types):
        _parse_offer(d, meta)


def extract_jsonld(soup: BeautifulSoup, meta: ProductMetadata, base_url: str = "") -> ProductMetadata:
    for s in soup.find_all("script", type="application/ld+json"):
        raw = (s.string or s.get_text() or "").strip()
        if not raw:
            continue
        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.debug(f"Skipping unparseable JSON-LD block: {e}")
            continue
        docs = data if isinstance(data, list) else [data]
        for d in docs:
            if isinstance(d, dict):
                parse_jsonld_object(d, meta, base_url)
    return meta
