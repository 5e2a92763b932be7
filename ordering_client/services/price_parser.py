"""
Price parsing for catalog price strings.

Catalog prices arrive as display text ("₹1,250", " 349.00 ", "INR 99").
parse_price turns them into floats or raises PriceFormatError.
"""

import logging
import math
import re

from ordering_client.core.exceptions import PriceFormatError

logger = logging.getLogger(__name__)

CURRENCY_GLYPHS = ("₹", "$", "€", "£")

_NON_NUMERIC = re.compile(r"[^0-9.]")


def _to_float(text: str):
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def parse_price(raw: str) -> float:
    """
    Parse a currency-formatted price.

    The currency glyph, thousands separators and spaces are stripped first.
    If that is still not a number, every character other than digits and
    the decimal point is dropped and parsing is retried.

    Raises:
        PriceFormatError: if neither attempt yields a number
    """
    if raw is None:
        raise PriceFormatError(raw)

    cleaned = raw
    for glyph in CURRENCY_GLYPHS:
        cleaned = cleaned.replace(glyph, "")
    cleaned = cleaned.replace(",", "").replace(" ", "").strip()

    value = _to_float(cleaned)
    if value is not None:
        return value

    fallback = _NON_NUMERIC.sub("", cleaned)
    value = _to_float(fallback)
    if value is not None:
        logger.debug(f"Parsed {raw!r} with fallback cleaning as {value}")
        return value

    logger.warning(f"Failed to parse price {raw!r} (cleaned attempt: {fallback!r})")
    raise PriceFormatError(raw)
