"""Tests for schema.org JSON-LD extraction."""

import json

import pytest
from bs4 import BeautifulSoup

from productmeta.jsonld import extract_jsonld, offer_amount, parse_jsonld_object
from productmeta.models import ProductMetadata

URL = "https://shop.example.com/products/widget"


def _page(*blocks) -> BeautifulSoup:
    scripts = "".join(
        f'<script type="application/ld+json">{b if isinstance(b, str) else json.dumps(b)}</script>'
        for b in blocks
    )
    return BeautifulSoup(f"<html><head>{scripts}</head><body></body></html>", "lxml")


def _extract(*blocks) -> ProductMetadata:
    return extract_jsonld(_page(*blocks), ProductMetadata(), URL)


class TestOfferAmount:
    """Tests for offer_amount."""

    @pytest.mark.parametrize("value,expected", [
        (19, 19.0),
        (19.99, 19.99),
        ("1,299.00", 1299.0),
        ("269,90", 269.9),
        (True, None),
        (False, None),
        (None, None),
        ({"value": 10}, None),
        ([10], None),
        ("gratis", None),
    ])
    def test_offer_amount(self, value, expected) -> None:
        """Test each JSON value shape."""
        assert offer_amount(value) == expected


class TestExtractJsonLd:
    """Tests for extract_jsonld."""

    def test_product_with_offer(self) -> None:
        """Test a plain Product with a single Offer."""
        meta = _extract({
            "@context": "https://schema.org",
            "@type": "Product",
            "name": "Widget 3000",
            "description": "A widget",
            "image": "https://cdn.example.com/w.jpg",
            "offers": {"@type": "Offer", "price": "49.99", "priceCurrency": "USD"},
        })
        assert meta.title == "Widget 3000"
        assert meta.description == "A widget"
        assert meta.image_url == "https://cdn.example.com/w.jpg"
        assert meta.price == 49.99
        assert meta.currency == "USD"

    def test_graph_container(self) -> None:
        """Test that @graph members are walked."""
        meta = _extract({
            "@context": "https://schema.org",
            "@graph": [
                {"@type": "WebSite", "name": "Example Shop"},
                {"@type": "Product", "name": "Graph Widget",
                 "offers": {"@type": "Offer", "price": 10, "priceCurrency": "EUR"}},
            ],
        })
        assert meta.title == "Graph Widget"
        assert meta.price == 10.0
        assert meta.currency == "EUR"

    def test_top_level_array(self) -> None:
        """Test a block holding a JSON array of objects."""
        meta = _extract([
            {"@type": "BreadcrumbList", "itemListElement": []},
            {"@type": "Product", "name": "Array Widget"},
        ])
        assert meta.title == "Array Widget"

    def test_first_offer_in_list(self) -> None:
        """Test that only the first offer of a list is consulted."""
        meta = _extract({
            "@type": "Product",
            "name": "Widget",
            "offers": [
                {"@type": "Offer", "price": "20.00", "priceCurrency": "MXN"},
                {"@type": "Offer", "price": "15.00", "priceCurrency": "USD"},
            ],
        })
        assert meta.price == 20.0
        assert meta.currency == "MXN"

    def test_aggregate_offer_low_price(self) -> None:
        """Test AggregateOffer with lowPrice only."""
        meta = _extract({
            "@type": "Product",
            "name": "Widget",
            "offers": {"@type": "AggregateOffer", "lowPrice": 12.5, "highPrice": 30, "priceCurrency": "USD"},
        })
        assert meta.price == 12.5

    def test_zero_price_falls_back_to_low_price(self) -> None:
        """Test that a zero price is treated as missing."""
        meta = _extract({
            "@type": "Product",
            "offers": {"@type": "AggregateOffer", "price": 0, "lowPrice": "99.00"},
        })
        assert meta.price == 99.0

    def test_boolean_price_rejected(self) -> None:
        """Test that "price": true is not read as 1.0."""
        meta = _extract({"@type": "Product", "offers": {"@type": "Offer", "price": True}})
        assert meta.price is None

    def test_type_list(self) -> None:
        """Test @type given as a list."""
        meta = _extract({"@type": ["Product", "Thing"], "name": "Multi-typed"})
        assert meta.title == "Multi-typed"

    def test_standalone_offer(self) -> None:
        """Test an Offer object outside a Product."""
        meta = _extract({"@type": "Offer", "price": "5.00", "priceCurrency": "GBP"})
        assert meta.price == 5.0
        assert meta.currency == "GBP"

    @pytest.mark.parametrize("image,expected", [
        ("/img/a.jpg", "https://shop.example.com/img/a.jpg"),
        (["https://cdn.example.com/1.jpg", "https://cdn.example.com/2.jpg"], "https://cdn.example.com/1.jpg"),
        ([{"@type": "ImageObject", "url": "//cdn.example.com/obj.jpg"}], "https://cdn.example.com/obj.jpg"),
        ({"@type": "ImageObject", "url": "https://cdn.example.com/obj.jpg"}, "https://cdn.example.com/obj.jpg"),
    ])
    def test_image_shapes(self, image, expected: str) -> None:
        """Test string, list and ImageObject image values."""
        meta = _extract({"@type": "Product", "image": image})
        assert meta.image_url == expected

    def test_data_url_image_skipped(self) -> None:
        """Test that inline data: images are ignored."""
        meta = _extract({"@type": "Product", "image": "data:image/png;base64,AAAA"})
        assert meta.image_url == ""

    def test_invalid_block_skipped(self) -> None:
        """Test that a broken block does not stop later blocks."""
        meta = _extract('{"@type": "Product", "name": ', {"@type": "Product", "name": "Valid"})
        assert meta.title == "Valid"

    def test_existing_fields_not_overwritten(self) -> None:
        """Test first-match-wins against values already found."""
        meta = ProductMetadata(title="OG Title", price=100.0, currency="USD")
        extract_jsonld(_page({
            "@type": "Product",
            "name": "LD Title",
            "offers": {"@type": "Offer", "price": "80.00", "priceCurrency": "MXN"},
        }), meta, URL)
        assert meta.title == "OG Title"
        assert meta.price == 100.0
        assert meta.currency == "USD"

    def test_non_product_ignored(self) -> None:
        """Test that unrelated types contribute nothing."""
        meta = _extract({"@type": "Organization", "name": "Example Inc", "image": "https://x/logo.png"})
        assert meta == ProductMetadata()

    def test_parse_jsonld_object_directly(self) -> None:
        """Test the object-level entry point."""
        meta = ProductMetadata()
        parse_jsonld_object({"@type": "IndividualProduct", "name": "Serial #42"}, meta)
        assert meta.title == "Serial #42"
