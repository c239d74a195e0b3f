from __future__ import annotations

import logging
from typing import List, Optional

from bs4 import BeautifulSoup

from .cascade import FieldStep, constant
from .config import SITE_CONFIGS, SiteConfig, split_selectors
from .parser import image_from_element, positive_price, select_text
from .prices import PriceParseError, join_fraction_cents, join_whole_fraction
from .urls import host_of

logger = logging.getLogger(__name__)

AMAZON = SITE_CONFIGS["amazon"]
MERCADOLIBRE = SITE_CONFIGS["mercadolibre"]


def _first_text(container, selector: Optional[str]) -> str:
    for sel in split_selectors(selector):
        el = container.select_one(sel)
        if el:
            txt = el.get_text().strip()
            if txt:
                return txt
    return ""


def title_step(cfg: SiteConfig):
    return lambda soup, url: select_text(soup, cfg.title_selector)


def offscreen_price_step(cfg: SiteConfig):
    def step(soup: BeautifulSoup, url: str) -> Optional[float]:
        for sel in split_selectors(cfg.price_selector):
            el = soup.select_one(sel)
            if el:
                p = positive_price(el.get_text())
                if p:
                    return p
        return None
    return step


def whole_fraction_price(soup: BeautifulSoup, url: str = "") -> Optional[float]:
    """Amazon splits the visible price into .a-price-whole and .a-price-fraction."""
    for sel in split_selectors(AMAZON.price_container_selector):
        container = soup.select_one(sel)
        if container is None:
            continue
        whole = _first_text(container, AMAZON.price_whole_selector)
        if not whole:
            continue
        fraction = _first_text(container, AMAZON.price_cents_selector)
        try:
            p = join_whole_fraction(whole, fraction)
        except PriceParseError as e:
            logger.debug(f"Amazon split price {whole!r}/{fraction!r} rejected: {e}")
            continue
        if p > 0:
            return p
    return None


def fraction_cents_price(soup: BeautifulSoup, url: str = "") -> Optional[float]:
    """MercadoLibre renders the integer part and a superscript cents part."""
    for sel in split_selectors(MERCADOLIBRE.price_container_selector):
        container = soup.select_one(sel)
        if container is None:
            continue
        fraction = _first_text(container, MERCADOLIBRE.price_whole_selector)
        if not fraction:
            continue
        cents = _first_text(container, MERCADOLIBRE.price_cents_selector)
        try:
            p = join_fraction_cents(fraction, cents)
        except PriceParseError as e:
            logger.debug(f"MercadoLibre split price {fraction!r}/{cents!r} rejected: {e}")
            continue
        if p > 0:
            return p
    return None


def itemprop_price(soup: BeautifulSoup, url: str = "") -> Optional[float]:
    for sel in split_selectors(MERCADOLIBRE.price_fallback_selector):
        el = soup.select_one(sel)
        if el is None:
            continue
        p = positive_price(el.get("content")) or positive_price(el.get_text())
        if p:
            return p
    return None


def image_step(cfg: SiteConfig):
    def step(soup: BeautifulSoup, url: str) -> Optional[str]:
        for sel in split_selectors(cfg.image_selector):
            el = soup.select_one(sel)
            if el is None:
                continue
            img = image_from_element(el, cfg.image_attrs, url)
            if img:
                return img
        return None
    return step


AMAZON_STEPS = [
    FieldStep("title", "amazon title", title_step(AMAZON)),
    FieldStep("price", "amazon offscreen price", offscreen_price_step(AMAZON)),
    FieldStep("price", "amazon whole/fraction price", whole_fraction_price),
    FieldStep("image_url", "amazon image", image_step(AMAZON)),
    FieldStep("site_name", "amazon default", constant(AMAZON.site_name)),
    FieldStep("currency", "amazon default", constant(AMAZON.default_currency)),
]

MERCADOLIBRE_STEPS = [
    FieldStep("title", "mercadolibre title", title_step(MERCADOLIBRE)),
    FieldStep("price", "mercadolibre fraction/cents price", fraction_cents_price),
    FieldStep("price", "mercadolibre itemprop price", itemprop_price),
    FieldStep("image_url", "mercadolibre image", image_step(MERCADOLIBRE)),
    FieldStep("site_name", "mercadolibre default", constant(MERCADOLIBRE.site_name)),
    FieldStep("currency", "mercadolibre default", constant(MERCADOLIBRE.default_currency)),
]

_SITE_STEPS = (
    (AMAZON, AMAZON_STEPS),
    (MERCADOLIBRE, MERCADOLIBRE_STEPS),
)


def steps_for_url(url: str) -> List[FieldStep]:
    host = host_of(url)
    for cfg, steps in _SITE_STEPS:
        if cfg.matches(host):
            return steps
    return []
