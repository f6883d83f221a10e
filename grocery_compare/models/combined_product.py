# grocery_compare/models/combined_product.py

"""Cross-store aggregation of equivalent product listings."""

from dataclasses import dataclass, field
from enum import Enum

from grocery_compare.models.records import ProductRecord, PromotionRecord


class PriceLevel(Enum):
    """Position of a constituent's price within its group."""

    LOWEST = "lowest"
    MIDDLE = "middle"
    HIGHEST = "highest"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class CombinedProduct:
    """A comparison unit built from equivalent per-store records.

    ``constituents`` keep insertion order with the group representative
    first; use :meth:`by_price` for a cheapest-first view.
    """

    id: str
    name: str
    constituents: tuple[ProductRecord, ...]
    primary: ProductRecord
    promotions: dict[str, PromotionRecord] = field(
        default_factory=lambda: dict[str, PromotionRecord](), hash=False
    )

    def __post_init__(self) -> None:
        if not self.constituents:
            msg = "CombinedProduct requires at least one constituent"
            raise ValueError(msg)
        if self.primary not in self.constituents:
            msg = "primary record must be one of the constituents"
            raise ValueError(msg)

    @property
    def lowest_price(self) -> float:
        return min(p.price for p in self.constituents)

    @property
    def highest_price(self) -> float:
        return max(p.price for p in self.constituents)

    @property
    def savings(self) -> float:
        """What a shopper saves by buying at the cheapest store."""
        return self.highest_price - self.lowest_price

    @property
    def promotion_savings(self) -> float:
        """Largest discount among the matched promotions."""
        return max(
            (promo.savings for promo in self.promotions.values()),
            default=0.0,
        )

    @property
    def stores(self) -> list[str]:
        return [p.store for p in self.constituents]

    @property
    def categories(self) -> list[str]:
        """Union of constituent categories, first-seen order."""
        seen: list[str] = []
        for product in self.constituents:
            for category in product.categories:
                if category and category not in seen:
                    seen.append(category)
        return seen

    @property
    def size(self) -> str:
        return self.primary.size

    @property
    def image_url(self) -> str | None:
        return self.primary.image_url

    def by_price(self) -> list[ProductRecord]:
        """Constituents ordered cheapest first (stable on ties)."""
        return sorted(self.constituents, key=lambda p: p.price)

    def promotion_for(
        self, product: ProductRecord,
    ) -> PromotionRecord | None:
        return self.promotions.get(product.id)

    def price_level(self, product: ProductRecord) -> PriceLevel:
        """Tag a constituent as lowest/middle/highest for display.

        Single-store groups and groups where every store charges the
        same are neutral.
        """
        if len(self.constituents) == 1:
            return PriceLevel.NEUTRAL
        if self.lowest_price == self.highest_price:
            return PriceLevel.NEUTRAL
        if product.price == self.lowest_price:
            return PriceLevel.LOWEST
        if product.price == self.highest_price:
            return PriceLevel.HIGHEST
        return PriceLevel.MIDDLE
