# grocery_compare/filters/record_validator.py

"""Record validation: drop unusable rows before they reach the cache."""

import logging
from collections.abc import Sequence
from typing import TypeVar

from grocery_compare.filters.price import exceeds_price_limit
from grocery_compare.models.records import (
    ProductRecord,
    PromotionRecord,
    item_name,
    item_price,
    item_store,
)

logger = logging.getLogger("grocery_compare.filters")

RecordT = TypeVar("RecordT", ProductRecord, PromotionRecord)


class RecordValidator:
    """Validate records and drop those that cannot be compared."""

    @staticmethod
    def validate(
        records: Sequence[RecordT],
    ) -> tuple[list[RecordT], int]:
        """Drop records with blank names or repeated non-empty ids.

        Zero prices usually come from unparseable source values; they are
        kept (the record still identifies a product) but logged.

        Returns the valid records and the count of dropped items.
        """
        valid: list[RecordT] = []
        seen_ids: set[str] = set()
        dropped = 0

        for record in records:
            if not item_name(record).strip():
                logger.debug(
                    "Dropped record with empty name (id=%s, store=%s)",
                    record.id,
                    item_store(record),
                )
                dropped += 1
                continue
            if record.id and record.id in seen_ids:
                logger.debug(
                    "Dropped record with duplicate id %s", record.id
                )
                dropped += 1
                continue

            price = item_price(record)
            if price <= 0:
                logger.debug(
                    "Record with zero price kept (name=%s, store=%s)",
                    item_name(record),
                    item_store(record),
                )
            elif exceeds_price_limit(price):
                logger.warning(
                    "Record price %.2f above limit (name=%s, store=%s)",
                    price,
                    item_name(record),
                    item_store(record),
                )

            if record.id:
                seen_ids.add(record.id)
            valid.append(record)

        if dropped:
            logger.info("Validation dropped %d invalid records", dropped)

        return valid, dropped
