# grocery_compare/services/grouping_engine.py

"""Partition per-store product records into cross-store comparison groups."""

import hashlib
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from grocery_compare.config.settings import Settings
from grocery_compare.filters.matcher import (
    DEFAULT_MATCHER,
    NameMatcher,
    find_promotion_for_product,
)
from grocery_compare.filters.normalizer import (
    normalize_product_name,
    normalize_size_key,
)
from grocery_compare.models.combined_product import CombinedProduct
from grocery_compare.models.records import ProductRecord, PromotionRecord

logger = logging.getLogger("grocery_compare.grouping")


@dataclass
class _GroupBuilder:
    """A group under construction; ``members[0]`` is the representative."""

    key: str
    members: list[ProductRecord] = field(
        default_factory=lambda: list[ProductRecord]()
    )

    @property
    def representative(self) -> ProductRecord:
        return self.members[0]


class ProductGrouper:
    """Group equivalent products with a first-seen-wins policy.

    Name equivalence under substring matching is not transitive
    ("Milk" matches both "Milk 2L" and "Fresh Milk 1L", which do not
    match each other), so each record is compared
    only with the representative of every existing group, in creation
    order, and joins the first that matches. This is O(n·g) and depends
    only on the input order.
    """

    def __init__(
        self,
        matcher: NameMatcher = DEFAULT_MATCHER,
        strict_sizes: bool | None = None,
    ) -> None:
        self.matcher = matcher
        self.strict_sizes = (
            Settings.GROUP_BY_SIZE if strict_sizes is None else strict_sizes
        )

    # ── Private helpers ──────────────────────────────────

    def _grouping_key(self, product: ProductRecord) -> str:
        key = normalize_product_name(product.name)
        if self.strict_sizes:
            key = f"{key}|{normalize_size_key(product.size)}"
        return key

    def _joins(
        self, group: _GroupBuilder, product: ProductRecord,
    ) -> bool:
        representative = group.representative
        if not self.matcher.names_match(representative.name, product.name):
            return False
        if self.strict_sizes:
            return normalize_size_key(
                representative.size
            ) == normalize_size_key(product.size)
        return True

    @staticmethod
    def _synthetic_id(key: str) -> str:
        digest = hashlib.sha1(key.encode("utf-8")).hexdigest()
        return f"combined_{digest[:12]}"

    @staticmethod
    def _pick_primary(members: Sequence[ProductRecord]) -> ProductRecord:
        """Earliest member with an image, else the representative."""
        for member in members:
            if member.image_url:
                return member
        return members[0]

    def _build(
        self,
        group: _GroupBuilder,
        group_id: str,
        promotions: Sequence[PromotionRecord],
    ) -> CombinedProduct:
        matched: dict[str, PromotionRecord] = {}
        if promotions:
            for member in group.members:
                promo = find_promotion_for_product(
                    member, promotions, self.matcher
                )
                if promo is not None:
                    matched[member.id] = promo

        combined = CombinedProduct(
            id=group_id,
            name=group.representative.name,
            constituents=tuple(group.members),
            primary=self._pick_primary(group.members),
            promotions=matched,
        )
        if combined.savings > Settings.PRICE_SPREAD_WARNING:
            logger.warning(
                "Large price spread (%.2f) in group '%s', "
                "records may be mismatched",
                combined.savings,
                combined.name,
            )
        return combined

    # ── Public API ───────────────────────────────────────

    def group_products(
        self,
        products: Sequence[ProductRecord],
        promotions: Sequence[PromotionRecord] = (),
    ) -> list[CombinedProduct]:
        """Partition *products* into combined products.

        Every input record lands in exactly one group. Group ids are
        derived from the representative's normalised name, so grouping
        the same input twice yields the same ids.
        """
        if not products:
            return []

        groups: list[_GroupBuilder] = []
        for product in products:
            for group in groups:
                if self._joins(group, product):
                    group.members.append(product)
                    break
            else:
                groups.append(
                    _GroupBuilder(
                        key=self._grouping_key(product),
                        members=[product],
                    )
                )

        key_counts: dict[str, int] = {}
        combined: list[CombinedProduct] = []
        for group in groups:
            key_counts[group.key] = key_counts.get(group.key, 0) + 1
            group_id = self._synthetic_id(group.key)
            if key_counts[group.key] > 1:
                group_id = f"{group_id}-{key_counts[group.key]}"
            combined.append(self._build(group, group_id, promotions))

        multi = sum(1 for c in combined if len(c.constituents) > 1)
        logger.info(
            "Grouped %d products into %d combined products "
            "(%d multi-store)",
            len(products),
            len(combined),
            multi,
        )
        return combined

    @staticmethod
    def flatten(
        combined: Sequence[CombinedProduct],
    ) -> list[ProductRecord]:
        """Constituents of every group, in group then insertion order."""
        return [
            product
            for group in combined
            for product in group.constituents
        ]
