# grocery_compare/sources/rows.py

"""Tolerant conversion between raw backend rows and record models.

Rows come from more than one table generation, so column names vary
(``product``/``name``, ``store``/``store_name``, ``category``/
``categories``, ``timestamp``/``created_at``). Malformed values resolve
to safe defaults instead of failing the whole fetch.
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from grocery_compare.filters.price import parse_price
from grocery_compare.filters.record_validator import RecordValidator
from grocery_compare.models.records import ProductRecord, PromotionRecord

logger = logging.getLogger("grocery_compare.sources")


def _first(row: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = row.get(key)
        if value not in (None, ""):
            return value
    return None


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def parse_timestamp(raw: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp; ``None`` when absent or malformed."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return raw
    text = str(raw).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        logger.debug("Unparseable timestamp %r", raw)
        return None


def _categories(raw: Any) -> tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        parts = [raw]
    elif isinstance(raw, (list, tuple)):
        parts = [str(p) for p in raw if p is not None]
    else:
        parts = [str(raw)]
    return tuple(p.strip() for p in parts if p and p.strip())


def product_from_row(row: dict[str, Any]) -> ProductRecord:
    """Build a :class:`ProductRecord` from a backend row."""
    brand = _text(row.get("brand"))
    image = _text(_first(row, "image_url", "image"))
    return ProductRecord(
        id=_text(row.get("id")),
        name=_text(_first(row, "product", "name", "product_name")),
        price=parse_price(row.get("price")),
        store=_text(_first(row, "store", "store_name")),
        size=_text(row.get("size")),
        brand=brand or None,
        categories=_categories(_first(row, "categories", "category")),
        image_url=image or None,
        created_at=parse_timestamp(row.get("created_at")),
    )


def promotion_from_row(
    row: dict[str, Any], store: str | None = None,
) -> PromotionRecord:
    """Build a :class:`PromotionRecord` from a backend row.

    *store* overrides the row's store column; per-store promotion tables
    do not carry one.
    """
    previous = row.get("previous_price")
    categories = _categories(_first(row, "categories", "category"))
    return PromotionRecord(
        id=_text(row.get("id")),
        name=_text(_first(row, "product_name", "product", "name")),
        store=store or _text(_first(row, "store_name", "store")),
        new_price=parse_price(row.get("new_price")),
        previous_price=(
            parse_price(previous) if previous not in (None, "") else None
        ),
        size=_text(row.get("size")),
        category=categories[0] if categories else None,
        created_at=parse_timestamp(_first(row, "timestamp", "created_at")),
    )


def product_to_row(record: ProductRecord) -> dict[str, Any]:
    """Serialise a product for the backend ``products`` table."""
    row: dict[str, Any] = {
        "product": record.name,
        "price": record.price,
        "store": record.store,
        "size": record.size,
        "brand": record.brand,
        "categories": list(record.categories),
        "image_url": record.image_url,
        "created_at": (
            record.created_at.isoformat() if record.created_at else None
        ),
    }
    if record.id:
        row["id"] = record.id
    return row


def decode_products(rows: Iterable[dict[str, Any]]) -> list[ProductRecord]:
    """Convert and validate a batch of product rows."""
    records, _dropped = RecordValidator.validate(
        [product_from_row(row) for row in rows]
    )
    return records


def decode_promotions(
    rows: Iterable[dict[str, Any]], store: str | None = None,
) -> list[PromotionRecord]:
    """Convert and validate a batch of promotion rows."""
    records, _dropped = RecordValidator.validate(
        [promotion_from_row(row, store) for row in rows]
    )
    return records


def newest_first(
    promotions: list[PromotionRecord],
) -> list[PromotionRecord]:
    """Sort promotions by timestamp, newest first; undated ones last.

    Timestamps are compared as instants. A naive timestamp is taken
    to be UTC.
    """
    return sorted(promotions, key=_sort_instant, reverse=True)


def _sort_instant(promotion: PromotionRecord) -> float:
    created = promotion.created_at
    if created is None:
        return float("-inf")
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created.timestamp()
