# grocery_compare/services/comparison_service.py

"""Consumer-facing read surface of the price-comparison engine."""

import asyncio
import logging
from collections.abc import Iterable
from typing import Any

from grocery_compare.config.catalog import MAIN_PRODUCT_LIST
from grocery_compare.filters.matcher import filter_promotions_by_catalog
from grocery_compare.filters.normalizer import (
    category_set,
    normalize_category,
    normalize_store_name,
)
from grocery_compare.filters.price import exceeds_price_limit
from grocery_compare.models.combined_product import CombinedProduct
from grocery_compare.models.records import (
    ProductRecord,
    PromotionRecord,
    item_categories,
)
from grocery_compare.services.grouping_engine import ProductGrouper
from grocery_compare.sources.base_source import DataSource, DataSourceError
from grocery_compare.storage.data_cache import DataCache, Resource

logger = logging.getLogger("grocery_compare.service")


def _has_category(categories: Iterable[str], wanted: str) -> bool:
    return any(normalize_category(c) == wanted for c in categories)


class ComparisonService:
    """Combine cached records into comparison results for consumers.

    Grouping and matching are recomputed from the cached snapshot on
    every read; only the raw records are cached.
    """

    def __init__(
        self,
        cache: DataCache,
        source: DataSource,
        grouper: ProductGrouper | None = None,
        catalog: Iterable[str] = MAIN_PRODUCT_LIST,
    ) -> None:
        self.cache = cache
        self.source = source
        self.grouper = grouper or ProductGrouper()
        self.catalog = list(catalog)

    # ── Reads ────────────────────────────────────────────

    async def get_combined_products(
        self,
        category: str | None = None,
        allow_stale: bool = False,
    ) -> list[CombinedProduct]:
        """Group the cached products, optionally keeping one category.

        Promotions only enrich the groups with savings, so a promotions
        failure falls back to the last known promotions instead of
        failing the comparison. A products failure is raised.
        """
        products_result, promotions_result = await asyncio.gather(
            self.cache.get(Resource.PRODUCTS, allow_stale),
            self.cache.get(Resource.PROMOTIONS, allow_stale),
            return_exceptions=True,
        )
        if isinstance(products_result, BaseException):
            raise products_result
        products: list[ProductRecord] = products_result

        if isinstance(promotions_result, BaseException):
            logger.warning(
                "Promotions unavailable, grouping without them: %s",
                promotions_result,
            )
            promotions: list[PromotionRecord] = (
                self.cache.peek(Resource.PROMOTIONS) or []
            )
        else:
            promotions = promotions_result

        combined = self.grouper.group_products(products, promotions)

        wanted = normalize_category(category)
        if not wanted:
            return combined
        return [c for c in combined if _has_category(c.categories, wanted)]

    async def get_promotions(
        self,
        store: str | None = None,
        category: str | None = None,
        catalog_only: bool = True,
        allow_stale: bool = False,
    ) -> list[PromotionRecord]:
        """Cached promotions filtered by store, category and the catalog."""
        promotions: list[PromotionRecord] = await self.cache.get(
            Resource.PROMOTIONS, allow_stale
        )
        if catalog_only:
            promotions = filter_promotions_by_catalog(
                promotions, self.catalog
            )

        wanted_store = normalize_store_name(store)
        if wanted_store:
            promotions = [
                p
                for p in promotions
                if normalize_store_name(p.store) == wanted_store
            ]

        wanted_category = normalize_category(category)
        if wanted_category:
            promotions = [
                p
                for p in promotions
                if _has_category(item_categories(p), wanted_category)
            ]
        return promotions

    async def categories(self) -> list[str]:
        """Display categories present in products and promotions."""
        products = await self.cache.get(Resource.PRODUCTS, allow_stale=True)
        promotions = await self.cache.get(
            Resource.PROMOTIONS, allow_stale=True
        )
        return category_set([*products, *promotions])

    async def stores(self) -> list[str]:
        """Canonical store tokens that carry at least one product."""
        products: list[ProductRecord] = await self.cache.get(
            Resource.PRODUCTS, allow_stale=True
        )
        return sorted(
            {normalize_store_name(p.store) for p in products if p.store}
        )

    # ── Refresh & writes ─────────────────────────────────

    async def refresh(self) -> None:
        """Refetch both resources concurrently.

        Cached values are replaced only by successful fetches. Raises the
        first :class:`DataSourceError` after both fetches have finished;
        a resource that failed keeps its last-known-good value.
        """
        results = await asyncio.gather(
            self.cache.force_fetch(Resource.PRODUCTS),
            self.cache.force_fetch(Resource.PROMOTIONS),
            return_exceptions=True,
        )
        errors = [r for r in results if isinstance(r, BaseException)]
        if errors:
            raise errors[0]
        logger.info("Refresh complete")

    async def add_product(self, record: ProductRecord) -> ProductRecord:
        """Store a new product, then invalidate the product cache."""
        if exceeds_price_limit(record.price):
            logger.warning(
                "Adding '%s' with unusually high price %.2f",
                record.name,
                record.price,
            )
        stored = await asyncio.to_thread(self.source.add_product, record)
        self.cache.invalidate(Resource.PRODUCTS)
        return stored

    async def update_product(
        self, product_id: str, changes: dict[str, Any],
    ) -> ProductRecord:
        """Update a stored product, then invalidate the product cache."""
        try:
            stored = await asyncio.to_thread(
                self.source.update_product, product_id, changes
            )
        except DataSourceError:
            logger.error(
                "Update of product %s failed", product_id, exc_info=True
            )
            raise
        self.cache.invalidate(Resource.PRODUCTS)
        return stored
