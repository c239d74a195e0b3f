from __future__ import annotations
from bs4 import BeautifulSoup
from typing import Iterable, Optional
import logging
import re

from .cascade import FieldStep
from .config import GENERIC_IMAGE_ATTRS, GENERIC_IMAGE_SELECTOR, GENERIC_PRICE_SELECTOR, split_selectors
from .prices import PriceParseError, parse_price
from .urls import default_currency_for, dynamic_image_url, first_srcset_url, is_data_url, make_absolute

logger = logging.getLogger(__name__)

TITLE_SEPARATORS = (" - ", " | ", " – ", " — ")

def clean_text(s: Optional[str]) -> str:
    if not s: return ""
    return re.sub(r"\s+", " ", s).strip()

def positive_price(raw: Optional[str]) -> Optional[float]:
    if not raw or not raw.strip(): return None
    try:
        p = parse_price(raw)
    except PriceParseError as e:
        logger.debug(f"Unparseable price {raw!r}: {e}")
        return None
    return p if p > 0 else None

def select_text(soup: BeautifulSoup, selector: Optional[str]) -> str:
    """Text of the first element of the first selector that yields any."""
    for sel in split_selectors(selector):
        el = soup.select_one(sel)
        if el:
            txt = clean_text(el.get_text())
            if txt: return txt
    return ""

# --- Meta tags ---

def _meta_by(soup: BeautifulSoup, attr: str, key: str) -> str:
    for el in soup.find_all("meta", attrs={attr: key}):
        c = (el.get("content") or "").strip()
        if c: return c
    return ""

def meta_property(soup: BeautifulSoup, key: str) -> str:
    # Twitter and some OG emitters use name= instead of property=
    return _meta_by(soup, "property", key) or _meta_by(soup, "name", key)

def meta_name(soup: BeautifulSoup, key: str) -> str:
    return _meta_by(soup, "name", key)

def _meta_image(key: str):
    def step(soup: BeautifulSoup, url: str) -> Optional[str]:
        img = meta_property(soup, key)
        if not img or is_data_url(img): return None
        return make_absolute(img, url)
    return step

def _meta_text(key: str):
    return lambda soup, url: meta_property(soup, key)

def _meta_price(key: str):
    return lambda soup, url: positive_price(meta_property(soup, key))

def _title_tag(soup: BeautifulSoup, url: str) -> str:
    el = soup.find("title")
    return clean_text(el.get_text()) if el else ""

# --- Images ---

def image_from_element(el, attrs: Iterable[str], base_url: str) -> Optional[str]:
    for attr in attrs:
        src = el.get(attr)
        if not src or not isinstance(src, str): continue
        src = src.strip()
        if attr == "srcset":
            src = first_srcset_url(src)
        elif attr == "data-a-dynamic-image":
            src = dynamic_image_url(src)
        if src and not is_data_url(src):
            return make_absolute(src, base_url)
    return None

def find_first_significant_image(soup: BeautifulSoup, base_url: str) -> Optional[str]:
    for sel in split_selectors(GENERIC_IMAGE_SELECTOR):
        for el in soup.select(sel):
            img = image_from_element(el, GENERIC_IMAGE_ATTRS, base_url)
            if img: return img
    return None

# --- Price fallback ---

def generic_price(soup: BeautifulSoup, url: str = "") -> Optional[float]:
    for sel in split_selectors(GENERIC_PRICE_SELECTOR):
        for el in soup.select(sel):
            for raw in (el.get("content"), el.get("data-price"), el.get_text()):
                p = positive_price(raw)
                if p: return p
    return None

# --- Title ---

def clean_title(title: str, site_name: str) -> str:
    """Drops a trailing " - Site" style suffix that repeats the site name."""
    if not title or not site_name:
        return title
    idx, sep = max(((title.rfind(s), s) for s in TITLE_SEPARATORS), key=lambda t: t[0])
    if idx <= 0:
        return title
    suffix = title[idx + len(sep):].strip().lower()
    site = site_name.strip().lower()
    if site and (suffix == site or site in suffix):
        return title[:idx].strip()
    return title

# Open Graph -> Twitter Card -> <meta name> -> <title> -> first product image
GENERIC_STEPS = [
    FieldStep("title", "og:title", _meta_text("og:title")),
    FieldStep("description", "og:description", _meta_text("og:description")),
    FieldStep("image_url", "og:image", _meta_image("og:image")),
    FieldStep("site_name", "og:site_name", _meta_text("og:site_name")),
    FieldStep("price", "og:price:amount", _meta_price("og:price:amount")),
    FieldStep("currency", "og:price:currency", _meta_text("og:price:currency")),
    FieldStep("price", "product:price:amount", _meta_price("product:price:amount")),
    FieldStep("currency", "product:price:currency", _meta_text("product:price:currency")),
    FieldStep("title", "twitter:title", _meta_text("twitter:title")),
    FieldStep("description", "twitter:description", _meta_text("twitter:description")),
    FieldStep("image_url", "twitter:image", _meta_image("twitter:image")),
    FieldStep("title", "meta title", lambda soup, url: meta_name(soup, "title")),
    FieldStep("description", "meta description", lambda soup, url: meta_name(soup, "description")),
    FieldStep("title", "<title>", _title_tag),
    FieldStep("image_url", "first significant image", find_first_significant_image),
]

FALLBACK_STEPS = [
    FieldStep("price", "generic price selectors", generic_price),
    FieldStep("currency", "host TLD", lambda soup, url: default_currency_for(url)),
]
