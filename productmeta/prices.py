from __future__ import annotations

import re

_CURRENCY_TOKENS = ("$", "USD", "MXN", "€", "£", " ", "\u00a0")
_NUMBER_RE = re.compile(r"[\d.]+")


class PriceParseError(ValueError):
    pass


def _normalise_separators(s: str) -> str:
    dots = s.count(".")
    commas = s.count(",")

    if dots and commas:
        # whichever separator comes last is the decimal one
        if s.rfind(",") > s.rfind("."):
            return s.replace(".", "").replace(",", ".", 1)
        return s.replace(",", "")

    if commas == 1:
        _, tail = s.split(",")
        if len(tail) <= 2:
            return s.replace(",", ".")
        return s.replace(",", "")

    if commas > 1:
        return s.replace(",", "")

    return s


def parse_price(raw: str | None) -> float:
    """
    Converts a display price into a float.

    Handles US (1,234.56), Latin/European (1.234,56) and bare decimal-comma
    (269,99) formats. Raises PriceParseError when nothing numeric is left.
    """
    if raw is None:
        raise PriceParseError("no numeric value found in: None")
    s = raw.strip()
    for tok in _CURRENCY_TOKENS:
        s = s.replace(tok, "")

    s = _normalise_separators(s)

    m = _NUMBER_RE.search(s)
    if not m:
        raise PriceParseError(f"no numeric value found in: {s}")
    try:
        return float(m.group(0))
    except ValueError as e:
        raise PriceParseError(f"invalid number {m.group(0)!r}") from e


def join_whole_fraction(whole: str, fraction: str) -> float:
    # Amazon renders "1,234." and "5" in separate nodes; the parts are
    # unambiguous so they bypass parse_price.
    whole = whole.strip().rstrip(".,").replace(",", "").replace(".", "")
    fraction = fraction.strip()
    if not whole:
        raise PriceParseError("empty whole part")
    if fraction:
        if len(fraction) == 1:
            fraction += "0"
        joined = f"{whole}.{fraction}"
    else:
        joined = f"{whole}.00"
    try:
        return float(joined)
    except ValueError as e:
        raise PriceParseError(f"invalid number {joined!r}") from e


def join_fraction_cents(fraction: str, cents: str | None) -> float:
    # MercadoLibre: fraction is the integer part, thousands-grouped with dots
    # on .com.mx ("1.234"), cents is an optional superscript.
    fraction = fraction.strip().replace(".", "").replace(",", "")
    cents = (cents or "").strip()
    joined = fraction
    if cents and len(cents) <= 2:
        if len(cents) == 1:
            cents += "0"
        joined = f"{fraction}.{cents}"
    return parse_price(joined)
