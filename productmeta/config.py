
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import json
import os
import re

from dotenv import load_dotenv

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
)
DEFAULT_ACCEPT_LANGUAGE = "es-MX,es;q=0.9,en-US;q=0.8,en;q=0.7"

@dataclass
class SiteConfig:
    site_name: str
    host_markers: Tuple[str, ...]
    default_currency: Optional[str] = None
    title_selector: Optional[str] = None
    price_selector: Optional[str] = None
    price_container_selector: Optional[str] = None
    price_whole_selector: Optional[str] = None
    price_cents_selector: Optional[str] = None
    price_fallback_selector: Optional[str] = None
    image_selector: Optional[str] = None
    image_attrs: Tuple[str, ...] = ("src",)

    def matches(self, host: str) -> bool:
        host = (host or "").lower()
        return any(m in host for m in self.host_markers)


def split_selectors(selector: Optional[str]) -> List[str]:
    if not selector:
        return []
    return [s.strip() for s in selector.split(",") if s.strip()]


SITE_CONFIGS: Dict[str, SiteConfig] = {
    "amazon": SiteConfig(
        site_name="Amazon",
        host_markers=("amazon.com", "amazon.com.mx"),
        default_currency="MXN",
        title_selector=(
            "#productTitle, #title span, span#productTitle, "
            "h1#title span, h1.a-size-large"
        ),
        # Offscreen nodes carry the full decimal price as one string
        price_selector=(
            ".a-price .a-offscreen, #corePrice_feature_div .a-offscreen, "
            "#corePriceDisplay_desktop_feature_div .a-offscreen, "
            ".apexPriceToPay .a-offscreen, #apex_offerDisplay_desktop .a-offscreen, "
            ".reinventPricePriceToPayMargin .a-offscreen, span.a-price span.a-offscreen, "
            "#tp_price_block_total_price_ww .a-offscreen, .priceToPay .a-offscreen, "
            "#priceblock_ourprice, #priceblock_dealprice, #priceblock_saleprice, "
            "#price_inside_buybox"
        ),
        price_container_selector=(
            ".a-price, #corePrice_feature_div .a-price, "
            "#corePriceDisplay_desktop_feature_div .a-price, "
            ".apexPriceToPay, .priceToPay, #tp_price_block_total_price_ww"
        ),
        price_whole_selector=".a-price-whole",
        price_cents_selector=".a-price-fraction",
        image_selector=(
            "#landingImage, #imgBlkFront, #main-image, #ebooksImgBlkFront, "
            ".a-dynamic-image, #imgTagWrapperId img, #imageBlock img"
        ),
        image_attrs=("data-a-dynamic-image", "data-old-hires", "src"),
    ),
    "mercadolibre": SiteConfig(
        site_name="MercadoLibre",
        host_markers=("mercadolibre.com", "mercadolibre.com.mx"),
        default_currency="MXN",
        title_selector=(
            ".ui-pdp-title, h1.ui-pdp-title, .item-title__primary, h1[class*='title']"
        ),
        price_container_selector=(
            ".ui-pdp-price__second-line .andes-money-amount, "
            ".andes-money-amount--cents-superscript, .andes-money-amount, .price-tag"
        ),
        price_whole_selector=(
            ".andes-money-amount__fraction, .price-tag-fraction, span[class*='fraction']"
        ),
        price_cents_selector=(
            ".andes-money-amount__cents, .price-tag-cents, span[class*='cents'], sup"
        ),
        price_fallback_selector=(
            "[itemprop='price'], .ui-pdp-price__main-container .andes-money-amount, "
            "meta[itemprop='price']"
        ),
        image_selector=(
            ".ui-pdp-image, .ui-pdp-gallery__figure img, figure.ui-pdp-gallery__figure img, "
            "img[data-zoom], .gallery-image img"
        ),
        # data-zoom holds the high-resolution variant
        image_attrs=("data-zoom", "src"),
    ),
}

GENERIC_IMAGE_SELECTOR = (
    "#landingImage, #imgBlkFront, .product-image img, .gallery-image img, "
    "[data-main-image], .product img, article img, .main-image img, picture source"
)
GENERIC_IMAGE_ATTRS = ("src", "data-src", "srcset", "data-a-dynamic-image")

GENERIC_PRICE_SELECTOR = (
    # microdata / data attributes
    "[itemprop='price'], [data-price], [data-product-price], "
    # common class names
    ".price, .product-price, .current-price, .sale-price, .final-price, "
    ".regular-price, .offer-price, .price-current, .price-value, .product__price, "
    "#product-price, #price, "
    "span[class*='price'], div[class*='price'], p[class*='price'], "
    # WooCommerce, BigCommerce, Magento
    ".woocommerce-Price-amount, .price--main, .price-box .price, "
    "[class*='money'], [class*='amount']"
)


def parse_domain_list(raw: Optional[str]) -> List[str]:
    """Accepts a JSON array or a newline/comma separated list."""
    if not raw or not raw.strip():
        return []
    try:
        data = json.loads(raw)
    except ValueError:
        data = None
    if isinstance(data, list):
        items = [str(d) for d in data]
    else:
        items = re.split(r"[\n,]", raw)
    return [d.strip().lower() for d in items if d and d.strip()]


def _env_float(name: str, default: float) -> float:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    return float(v)


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    return int(v)


@dataclass
class FetchSettings:
    timeout: float = 15.0
    max_redirects: int = 5
    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = DEFAULT_ACCEPT_LANGUAGE
    allowed_domains: List[str] = field(default_factory=list)
    blocked_domains: List[str] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "FetchSettings":
        load_dotenv()
        return cls(
            timeout=_env_float("PRODUCTMETA_TIMEOUT", 15.0),
            max_redirects=_env_int("PRODUCTMETA_MAX_REDIRECTS", 5),
            user_agent=os.getenv("PRODUCTMETA_USER_AGENT") or DEFAULT_USER_AGENT,
            accept_language=os.getenv("PRODUCTMETA_ACCEPT_LANGUAGE") or DEFAULT_ACCEPT_LANGUAGE,
            allowed_domains=parse_domain_list(os.getenv("PRODUCTMETA_ALLOWED_DOMAINS")),
            blocked_domains=parse_domain_list(os.getenv("PRODUCTMETA_BLOCKED_DOMAINS")),
        )

    def is_domain_allowed(self, host: str) -> bool:
        domain = (host or "").lower()
        if domain.startswith("www."):
            domain = domain[4:]
        if domain in self.blocked_domains:
            return False
        if not self.allowed_domains:
            return True
        return domain in self.allowed_domains
