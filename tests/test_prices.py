"""Tests for locale-aware price parsing."""

import pytest

from productmeta.prices import (
    PriceParseError,
    join_fraction_cents,
    join_whole_fraction,
    parse_price,
)


class TestParsePrice:
    """Tests for the parse_price function."""

    @pytest.mark.parametrize("raw,expected", [
        ("1,234.56", 1234.56),
        ("1.234,56", 1234.56),
        ("269,99", 269.99),
        ("1,234,567", 1234567.0),
        ("$1,234.00 MXN", 1234.00),
        ("1,234", 1234.0),
        ("99.99", 99.99),
        ("USD 45", 45.0),
        ("€ 12,50", 12.5),
        ("£7", 7.0),
        ("1 234,56", 1234.56),
        ("  $ 15.00  ", 15.0),
        ("Precio: $1,299.00", 1299.0),
    ])
    def test_parse_price_formats(self, raw: str, expected: float) -> None:
        """Test the supported numeric formats."""
        assert parse_price(raw) == expected

    @pytest.mark.parametrize("raw", ["abc", "", "   ", "$", "MXN", "1.2.3", "."])
    def test_parse_price_rejects_non_numeric(self, raw: str) -> None:
        """Test that strings without a usable number raise."""
        with pytest.raises(PriceParseError):
            parse_price(raw)

    def test_parse_price_none(self) -> None:
        """Test that None raises instead of crashing."""
        with pytest.raises(PriceParseError):
            parse_price(None)

    def test_parse_price_error_is_value_error(self) -> None:
        """Test that callers can catch the failure as ValueError."""
        with pytest.raises(ValueError):
            parse_price("no price here")

    def test_parse_price_zero_is_not_an_error(self) -> None:
        """Test that zero parses; rejecting it is the caller's job."""
        assert parse_price("$0.00") == 0.0

    def test_parse_price_trailing_comma_is_decimal(self) -> None:
        """Test a single comma with nothing after it."""
        assert parse_price("15,") == 15.0


class TestJoinWholeFraction:
    """Tests for Amazon's split whole/fraction prices."""

    def test_pads_single_digit_fraction(self) -> None:
        """Test whole="1,234", fraction="5"."""
        assert join_whole_fraction("1,234", "5") == 1234.50

    def test_missing_fraction(self) -> None:
        """Test whole="99.", fraction=""."""
        assert join_whole_fraction("99.", "") == 99.00

    def test_strips_dot_thousands(self) -> None:
        """Test dot-grouped whole parts."""
        assert join_whole_fraction("1.299,", "00") == 1299.0

    def test_empty_whole_raises(self) -> None:
        """Test that an empty whole part is rejected."""
        with pytest.raises(PriceParseError):
            join_whole_fraction("", "5")

    def test_non_numeric_whole_raises(self) -> None:
        """Test that stray symbols in the whole part are rejected."""
        with pytest.raises(PriceParseError):
            join_whole_fraction("$12", "99")


class TestJoinFractionCents:
    """Tests for MercadoLibre's fraction/cents prices."""

    def test_pads_single_digit_cents(self) -> None:
        """Test fraction="269", cents="9"."""
        assert join_fraction_cents("269", "9") == 269.90

    def test_two_digit_cents(self) -> None:
        """Test fraction="269", cents="99"."""
        assert join_fraction_cents("269", "99") == 269.99

    def test_no_cents(self) -> None:
        """Test a price without a cents element."""
        assert join_fraction_cents("269", None) == 269.0
        assert join_fraction_cents("269", "") == 269.0

    def test_dot_grouped_fraction(self) -> None:
        """Test thousands grouped with dots, as on mercadolibre.com.mx."""
        assert join_fraction_cents("1.234", "50") == 1234.5
        assert join_fraction_cents("12.499", None) == 12499.0

    def test_long_cents_ignored(self) -> None:
        """Test that a cents part longer than two digits is dropped."""
        assert join_fraction_cents("269", "999") == 269.0
