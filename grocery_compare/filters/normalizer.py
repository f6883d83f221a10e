# grocery_compare/filters/normalizer.py

"""Canonical forms for store names, categories, product names and sizes."""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass

from grocery_compare.config.settings import Settings
from grocery_compare.models.records import Item, item_categories

logger = logging.getLogger("grocery_compare.filters")

_COUNT_RE = re.compile(r"^x?(\d+)\s*(pcs|pieces|pc|pack|eggs?)?$")
_MULTIPACK_RE = re.compile(r"^(\d+)\s*x\s*(\d+)?")
_WEIGHT_RE = re.compile(
    r"^(\d+(?:\.\d+)?)\s*(g|gm|gms|gram|grams|kg|kilogram|kilograms)$"
)
_VOLUME_RE = re.compile(
    r"^(\d+(?:\.\d+)?)\s*"
    r"(ml|milliliter|millilitre|l|liter|litre|litres|liters)$"
)


@dataclass(frozen=True)
class StoreMatch:
    """Outcome of resolving a free-text store name to a known store."""

    matched: bool
    store: str
    confidence: str  # "exact", "alias", "partial", "none"


def normalize_store_name(raw: str | None) -> str:
    """Reduce a store name to its canonical comparison token.

    Lower-cases and trims, then applies ``Settings.STORE_ALIAS_RULES`` by
    substring containment, first rule wins. Names matching no rule pass
    through lower-cased. This is a heuristic: a new retailer needs a new
    alias rule, and short needles such as ``"u"`` catch many names.
    """
    if not raw:
        return ""
    lowered = raw.lower().strip()
    for needles, canonical in Settings.STORE_ALIAS_RULES:
        if any(needle in lowered for needle in needles):
            return canonical
    return lowered


def match_store(raw: str | None) -> StoreMatch:
    """Resolve a store name against the known stores in three tiers.

    1. Exact (case-insensitive) store name.
    2. Exact alias.
    3. Partial: the input contains an alias or an alias contains it.
    """
    if not raw or not raw.strip():
        return StoreMatch(matched=False, store="", confidence="none")

    lowered = raw.strip().lower()

    for store in Settings.KNOWN_STORES:
        if lowered == store.lower():
            return StoreMatch(matched=True, store=store, confidence="exact")

    for store, aliases in Settings.STORE_ALIASES.items():
        if lowered in aliases:
            return StoreMatch(matched=True, store=store, confidence="alias")

    for store, aliases in Settings.STORE_ALIASES.items():
        for alias in aliases:
            if alias in lowered or lowered in alias:
                return StoreMatch(
                    matched=True, store=store, confidence="partial"
                )

    return StoreMatch(matched=False, store="", confidence="none")


def normalize_category(raw: str | None) -> str:
    """Capitalise the first character and lower-case the rest."""
    if not raw:
        return ""
    cleaned = raw.strip()
    if not cleaned:
        return ""
    return cleaned[0].upper() + cleaned[1:].lower()


def category_set(items: Iterable[Item]) -> list[str]:
    """Sorted distinct display categories; empty tags are skipped."""
    categories: set[str] = set()
    for item in items:
        for raw in item_categories(item):
            display = normalize_category(raw)
            if display:
                categories.add(display)
    return sorted(categories)


def normalize_product_name(raw: str | None) -> str:
    """Lower-case, trim and collapse internal whitespace."""
    if not raw:
        return ""
    return " ".join(raw.lower().split())


def normalize_size_key(raw: str | None) -> str:
    """Convert a size string to a key that is equal for equal quantities.

    Weights become grams, volumes millilitres and counts ``<n>x``:
    ``"1kg"`` and ``"1000 g"`` both map to ``"1000g"``. Unrecognised
    formats fall back to the lower-cased text without whitespace.
    """
    if not raw or not raw.strip():
        return "NO_SIZE"

    cleaned = raw.lower().strip()

    count = _COUNT_RE.match(cleaned) or _MULTIPACK_RE.match(cleaned)
    if count:
        return f"{int(count.group(1))}x"

    weight = _WEIGHT_RE.match(cleaned)
    if weight:
        value = float(weight.group(1))
        if weight.group(2).startswith("k"):
            value *= 1000
        return f"{value:g}g"

    volume = _VOLUME_RE.match(cleaned)
    if volume:
        value = float(volume.group(1))
        if not volume.group(2).startswith("m"):
            value *= 1000
        return f"{value:g}ml"

    logger.debug("Unrecognised size format %r", raw)
    return re.sub(r"\s+", "", cleaned)
