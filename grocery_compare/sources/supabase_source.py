# grocery_compare/sources/supabase_source.py

"""Supabase (PostgREST) backed data source."""

import logging
import time
from typing import Any

from curl_cffi import requests as curl_requests

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


class SupabaseSource(DataSource):
    """Read products and per-store promotions from a Supabase project."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
    ) -> None:
        self.settings = Settings()
        self.base_url = (base_url or self.settings.SUPABASE_URL).rstrip("/")
        self.api_key = api_key or self.settings.SUPABASE_ANON_KEY
        if not self.base_url or not self.api_key:
            msg = "SUPABASE_URL and SUPABASE_ANON_KEY must be configured"
            raise DataSourceError(msg)
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )

    # ── Private helpers ──────────────────────────────────

    def _headers(self, write: bool = False) -> dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }
        if write:
            headers["Content-Type"] = "application/json"
            headers["Prefer"] = "return=representation"
        return headers

    def _table_url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    def _request(
        self,
        method: str,
        url: str,
        params: dict[str, str] | None = None,
        payload: Any = None,
    ) -> list[dict[str, Any]]:
        """Send a request with retries and return the decoded JSON rows.

        Raises ``DataSourceError`` once every attempt has failed.
        """
        last_error = ""
        write = method != "GET"
        for attempt in range(self.settings.MAX_RETRIES):
            try:
                resp = self.session.request(
                    method,  # type: ignore[arg-type]
                    url,
                    headers=self._headers(write),
                    params=params,
                    json=payload,
                    timeout=self.settings.REQUEST_TIMEOUT,
                )
                if resp.status_code in (200, 201):
                    data = resp.json()
                    if isinstance(data, dict):
                        return [data]
                    return list(data or [])
                last_error = f"HTTP {resp.status_code}"
                logger.warning(
                    "%s %s returned HTTP %d on attempt %d",
                    method,
                    url,
                    resp.status_code,
                    attempt + 1,
                )
                # Client errors other than rate limiting will not recover
                if 400 <= resp.status_code < 500 and resp.status_code != 429:
                    break
            except Exception as exc:
                last_error = str(exc)
                logger.warning(
                    "%s %s failed on attempt %d: %s",
                    method,
                    url,
                    attempt + 1,
                    exc,
                    exc_info=True,
                )
            if attempt + 1 < self.settings.MAX_RETRIES:
                time.sleep(self.settings.REQUEST_DELAY * (attempt + 1))

        msg = f"{method} {url} failed: {last_error}"
        raise DataSourceError(msg)

    # ── DataSource API ───────────────────────────────────

    def fetch_products(self) -> list[ProductRecord]:
        rows = self._request(
            "GET",
            self._table_url(self.settings.PRODUCTS_TABLE),
            params={"select": "*", "order": "created_at.desc"},
        )
        products = decode_products(rows)
        logger.info("Fetched %d products", len(products))
        return products

    def fetch_promotions(self) -> list[PromotionRecord]:
        """Merge the per-store promotion tables, newest first.

        A failing store table is logged and skipped; the fetch only
        fails when every table does.
        """
        tables = self.settings.PROMOTION_TABLES
        promotions: list[PromotionRecord] = []
        failures: list[str] = []
        for entry in tables:
            try:
                rows = self._request(
                    "GET",
                    self._table_url(entry["table"]),
                    params={"select": "*", "order": "timestamp.desc"},
                )
            except DataSourceError as exc:
                failures.append(str(exc))
                logger.error(
                    "Promotion table %s unavailable: %s",
                    entry["table"],
                    exc,
                )
                continue
            promotions.extend(decode_promotions(rows, entry["store"]))

        if tables and len(failures) == len(tables):
            msg = "All promotion tables failed: " + "; ".join(failures)
            raise DataSourceError(msg)

        logger.info(
            "Fetched %d promotions from %d stores",
            len(promotions),
            len(tables) - len(failures),
        )
        return newest_first(promotions)

    def add_product(self, record: ProductRecord) -> ProductRecord:
        rows = self._request(
            "POST",
            self._table_url(self.settings.PRODUCTS_TABLE),
            payload=product_to_row(record),
        )
        stored = decode_products(rows)
        if not stored:
            msg = f"Insert of '{record.name}' returned no row"
            raise DataSourceError(msg)
        logger.info("Added product %s (%s)", stored[0].id, stored[0].name)
        return stored[0]

    def update_product(
        self, product_id: str, changes: dict[str, Any],
    ) -> ProductRecord:
        rows = self._request(
            "PATCH",
            self._table_url(self.settings.PRODUCTS_TABLE),
            params={"id": f"eq.{product_id}"},
            payload=changes,
        )
        stored = decode_products(rows)
        if not stored:
            msg = f"Product {product_id} not found"
            raise DataSourceError(msg)
        logger.info("Updated product %s", product_id)
        return stored[0]
