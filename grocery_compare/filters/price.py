# grocery_compare/filters/price.py

"""Tolerant price parsing, formatting and validation.

Prices feed display formatting that must never crash, so every helper
here resolves bad input to a safe default instead of raising.
"""

import logging
import math
import re

from grocery_compare.config.settings import Settings
from grocery_compare.models.records import PromotionRecord

logger = logging.getLogger("grocery_compare.filters")

# "Rs", "rs", "Rs." currency markers
_CURRENCY_RE = re.compile(r"rs\.?", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")
_PRICE_TEXT_RE = re.compile(r"^[\d,]+$")


def _strip_currency(text: str) -> str:
    return _WHITESPACE_RE.sub("", _CURRENCY_RE.sub("", text))


def parse_price(raw: str | float | int | None) -> float:
    """Convert a raw price to a float, returning 0.0 on any failure.

    A lone comma is read as a decimal separator (``"12,50"`` → 12.5);
    when both a comma and a point are present the commas are thousand
    separators (``"1,299.00"`` → 1299.0).
    """
    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        value = float(raw)
        return value if math.isfinite(value) else 0.0
    if not isinstance(raw, str):
        logger.debug("Unparseable price type %s", type(raw).__name__)
        return 0.0

    cleaned = _strip_currency(raw)
    if "," in cleaned and "." in cleaned:
        cleaned = cleaned.replace(",", "")
    elif cleaned.count(",") == 1:
        cleaned = cleaned.replace(",", ".")

    try:
        value = float(cleaned)
    except ValueError:
        logger.debug("Unparseable price text %r", raw)
        return 0.0
    return value if math.isfinite(value) else 0.0


def format_price(value: object) -> str:
    """Render a price with exactly two decimals.

    ``None`` renders as ``"0.00"``; values that cannot be coerced to a
    number are returned as their string form.
    """
    if value is None:
        return "0.00"
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return str(value)
    if not math.isfinite(number):
        return str(value)
    return f"{number:.2f}"


def is_valid_price_text(raw: str | None) -> bool:
    """Check user-entered price text such as ``"Rs 12,50"``.

    After dropping the currency marker, dots and whitespace the rest must
    be digits and commas only, and must not end in a comma (an
    unfinished decimal like ``"12,"``).
    """
    if not raw:
        return False
    cleaned = _strip_currency(raw).replace(".", "")
    return bool(_PRICE_TEXT_RE.match(cleaned)) and not cleaned.endswith(",")


def calculate_savings(promotion: PromotionRecord) -> float:
    """Discount of a promotion, ``max(0, previous - new)``."""
    return promotion.savings


def exceeds_price_limit(value: float) -> bool:
    """True when a price is high enough to warrant confirmation."""
    return value > Settings.MAX_PRICE
