# grocery_compare/sources/base_source.py

"""Abstract interface of the external product/promotion store."""

from abc import ABC, abstractmethod
from typing import Any

from grocery_compare.models.records import ProductRecord, PromotionRecord


class DataSourceError(RuntimeError):
    """Transport or backend failure while talking to a data source."""


class DataSource(ABC):
    """Read/write access to raw product and promotion records.

    Methods are synchronous; the cache runs them in a worker thread.
    Failures are raised as :class:`DataSourceError`.
    """

    @abstractmethod
    def fetch_products(self) -> list[ProductRecord]:
        """Return every product record, newest first."""
        ...

    @abstractmethod
    def fetch_promotions(self) -> list[PromotionRecord]:
        """Return every promotion record, newest first."""
        ...

    @abstractmethod
    def add_product(self, record: ProductRecord) -> ProductRecord:
        """Persist a new product and return the stored record."""
        ...

    @abstractmethod
    def update_product(
        self, product_id: str, changes: dict[str, Any],
    ) -> ProductRecord:
        """Apply field changes to a stored product and return it."""
        ...
