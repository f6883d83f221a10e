# grocery_compare/models/records.py

"""Raw per-store product and promotion records."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ProductRecord:
    """One store's listing of one item."""

    id: str
    name: str
    price: float
    store: str
    size: str = ""
    brand: str | None = None
    categories: tuple[str, ...] = ()
    image_url: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class PromotionRecord:
    """A time-bound discounted price at a specific store."""

    id: str
    name: str
    store: str
    new_price: float
    previous_price: float | None = None
    size: str = ""
    category: str | None = None
    created_at: datetime | None = None

    @property
    def savings(self) -> float:
        """Discount amount, never negative; 0 without a previous price."""
        if self.previous_price is None:
            return 0.0
        return max(0.0, self.previous_price - self.new_price)


Item = ProductRecord | PromotionRecord


def _unknown_item(item: object) -> TypeError:
    return TypeError(f"Unsupported item type: {type(item).__name__}")


def item_name(item: Item) -> str:
    """Product name of either record kind."""
    if isinstance(item, (ProductRecord, PromotionRecord)):
        return item.name
    raise _unknown_item(item)


def item_store(item: Item) -> str:
    """Store name of either record kind."""
    if isinstance(item, (ProductRecord, PromotionRecord)):
        return item.store
    raise _unknown_item(item)


def item_price(item: Item) -> float:
    """Current shelf price: ``price`` for products, ``new_price`` for promotions."""
    if isinstance(item, ProductRecord):
        return item.price
    if isinstance(item, PromotionRecord):
        return item.new_price
    raise _unknown_item(item)


def item_size(item: Item) -> str:
    """Size/unit string of either record kind."""
    if isinstance(item, (ProductRecord, PromotionRecord)):
        return item.size
    raise _unknown_item(item)


def item_categories(item: Item) -> tuple[str, ...]:
    """Category tags; promotions carry at most one."""
    if isinstance(item, ProductRecord):
        return item.categories
    if isinstance(item, PromotionRecord):
        return (item.category,) if item.category else ()
    raise _unknown_item(item)
