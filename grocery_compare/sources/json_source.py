# grocery_compare/sources/json_source.py

"""Local JSON snapshot data source."""

import json
import logging
import threading
import uuid
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any

from grocery_compare.config.settings import Settings
from grocery_compare.models.records import ProductRecord, PromotionRecord
from grocery_compare.sources.base_source import DataSource, DataSourceError
from grocery_compare.sources.rows import (
    decode_products,
    decode_promotions,
    newest_first,
    product_to_row,
)

logger = logging.getLogger("grocery_compare.sources")


class JsonFileSource(DataSource):
    """Serve records from a ``{"products": [...], "promotions": [...]}`` file.

    Rows use the same column names as the backend tables.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path: Path = path or Settings.DATA_PATH
        self._lock = threading.Lock()
        logger.debug("JsonFileSource initialised, path=%s", self.path)

    def _load(self) -> dict[str, list[dict[str, Any]]]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as exc:
            msg = f"Snapshot not found: {self.path}"
            raise DataSourceError(msg) from exc
        except (OSError, json.JSONDecodeError) as exc:
            msg = f"Cannot read snapshot {self.path}: {exc}"
            raise DataSourceError(msg) from exc
        if not isinstance(data, dict):
            msg = f"Snapshot {self.path} must hold a JSON object"
            raise DataSourceError(msg)
        return data

    def _save(self, data: dict[str, list[dict[str, Any]]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def fetch_products(self) -> list[ProductRecord]:
        with self._lock:
            rows = self._load().get("products", [])
        products = decode_products(rows)
        logger.info("Loaded %d products from %s", len(products), self.path)
        return products

    def fetch_promotions(self) -> list[PromotionRecord]:
        with self._lock:
            rows = self._load().get("promotions", [])
        promotions = newest_first(decode_promotions(rows))
        logger.info(
            "Loaded %d promotions from %s", len(promotions), self.path
        )
        return promotions

    def add_product(self, record: ProductRecord) -> ProductRecord:
        stored = replace(
            record,
            id=record.id or uuid.uuid4().hex,
            created_at=record.created_at or datetime.now(),
        )
        with self._lock:
            try:
                data = self._load()
            except DataSourceError:
                if self.path.exists():
                    raise
                data = {"products": [], "promotions": []}
            data.setdefault("products", []).insert(0, product_to_row(stored))
            self._save(data)
        logger.info("Added product %s (%s)", stored.id, stored.name)
        return stored

    def update_product(
        self, product_id: str, changes: dict[str, Any],
    ) -> ProductRecord:
        with self._lock:
            data = self._load()
            for row in data.get("products", []):
                if str(row.get("id")) == product_id:
                    break
            else:
                msg = f"Product {product_id} not found"
                raise DataSourceError(msg)
            updated = decode_products([{**row, **changes}])
            if not updated:
                msg = f"Product {product_id} is invalid after update"
                raise DataSourceError(msg)
            row.update(changes)
            self._save(data)
        logger.info("Updated product %s", product_id)
        return updated[0]
