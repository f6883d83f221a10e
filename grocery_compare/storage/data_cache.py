# grocery_compare/storage/data_cache.py

"""Time-bounded cache of fetched products and promotions."""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from grocery_compare.config.settings import Settings
from grocery_compare.sources.base_source import DataSource, DataSourceError

logger = logging.getLogger("grocery_compare.cache")


class Resource(Enum):
    """Collections held by the cache."""

    PRODUCTS = "products"
    PROMOTIONS = "promotions"


class CacheState(Enum):
    """Lifecycle of one cached resource."""

    EMPTY = "empty"
    FETCHING = "fetching"
    VALID = "valid"
    STALE = "stale"


@dataclass
class CacheEntry:
    """The last fetched collection of a resource and when it arrived."""

    ttl: float
    value: list[Any] | None = None
    fetched_at: float = 0.0

    def is_valid(self, now: float) -> bool:
        return self.value is not None and now - self.fetched_at < self.ttl

    def clear(self) -> None:
        self.value = None
        self.fetched_at = 0.0


class DataCache:
    """Serve cached records and refresh them through the data source.

    A valid entry is returned without I/O. A stale or empty entry is
    fetched; concurrent callers for the same resource share one in-flight
    fetch, while products and promotions refresh independently. A failed
    fetch leaves the previous value in place and raises
    :class:`DataSourceError` to every caller awaiting it.

    Construct one instance per process and pass it to its consumers.
    """

    def __init__(
        self,
        source: DataSource,
        ttls: dict[Resource, float] | None = None,
    ) -> None:
        self._source = source
        ttl_map = {
            Resource.PRODUCTS: Settings.PRODUCTS_CACHE_TTL,
            Resource.PROMOTIONS: Settings.PROMOTIONS_CACHE_TTL,
        }
        ttl_map.update(ttls or {})
        self._entries: dict[Resource, CacheEntry] = {
            resource: CacheEntry(ttl=ttl_map[resource])
            for resource in Resource
        }
        self._in_flight: dict[Resource, asyncio.Task[list[Any]]] = {}
        # Bumped on invalidation and forced refresh so late results of
        # detached fetches are not stored.
        self._generation: dict[Resource, int] = {
            resource: 0 for resource in Resource
        }
        self._background: set[asyncio.Task[list[Any]]] = set()

    # ── Introspection ────────────────────────────────────

    def entry(self, resource: Resource) -> CacheEntry:
        return self._entries[resource]

    def state(self, resource: Resource) -> CacheState:
        """Current state; staleness is evaluated against the wall clock."""
        if resource in self._in_flight:
            return CacheState.FETCHING
        entry = self._entries[resource]
        if entry.value is None:
            return CacheState.EMPTY
        if entry.is_valid(time.time()):
            return CacheState.VALID
        return CacheState.STALE

    def peek(self, resource: Resource) -> list[Any] | None:
        """Last-known-good value, even if stale. Never fetches."""
        value = self._entries[resource].value
        return list(value) if value is not None else None

    # ── Reads ────────────────────────────────────────────

    async def get(
        self, resource: Resource, allow_stale: bool = False,
    ) -> list[Any]:
        """Return the cached collection, fetching it when needed.

        With ``allow_stale`` a stale value is returned immediately and a
        background refresh is started instead of waiting for it.
        """
        entry = self._entries[resource]
        if entry.is_valid(time.time()):
            logger.debug("Cache hit for %s", resource.value)
            return list(entry.value or [])

        if allow_stale and entry.value is not None:
            logger.info(
                "Serving stale %s while refreshing", resource.value
            )
            self._refresh_in_background(resource)
            return list(entry.value)

        return await self.fetch(resource)

    async def fetch(self, resource: Resource) -> list[Any]:
        """Fetch *resource*, joining an in-flight fetch if one exists."""
        task = self._in_flight.get(resource)
        if task is None:
            task = asyncio.ensure_future(
                self._run_fetch(resource, self._generation[resource])
            )
            self._in_flight[resource] = task
        else:
            logger.debug("Joining in-flight fetch of %s", resource.value)
        # A caller that stops waiting must not cancel the shared fetch
        value = await asyncio.shield(task)
        return list(value)

    async def force_fetch(self, resource: Resource) -> list[Any]:
        """Refetch *resource* even if the cached value is still valid.

        The cached value stays in place until the new fetch succeeds, so
        a failed forced refresh leaves the last-known-good data readable.
        An in-flight fetch is detached and its result is not stored.
        """
        self._generation[resource] += 1
        if self._in_flight.pop(resource, None) is not None:
            logger.info(
                "Detached in-flight fetch of %s for forced refresh",
                resource.value,
            )
        return await self.fetch(resource)

    # ── Invalidation ─────────────────────────────────────

    def invalidate(self, resource: Resource) -> None:
        """Drop the cached value so the next read fetches fresh data.

        An in-flight fetch is detached: it still runs to completion but
        its result is not stored.
        """
        self._entries[resource].clear()
        self._generation[resource] += 1
        detached = self._in_flight.pop(resource, None)
        logger.info(
            "Invalidated %s cache%s",
            resource.value,
            " (detached in-flight fetch)" if detached else "",
        )

    def invalidate_all(self) -> None:
        for resource in Resource:
            self.invalidate(resource)

    # ── Private helpers ──────────────────────────────────

    def _fetcher(self, resource: Resource) -> Callable[[], list[Any]]:
        if resource is Resource.PRODUCTS:
            return self._source.fetch_products
        return self._source.fetch_promotions

    async def _run_fetch(
        self, resource: Resource, generation: int,
    ) -> list[Any]:
        current = asyncio.current_task()
        logger.info("Fetching %s from data source", resource.value)
        try:
            value: list[Any] = await asyncio.to_thread(
                self._fetcher(resource)
            )
        except DataSourceError as exc:
            logger.error(
                "Fetching %s failed: %s", resource.value, exc, exc_info=True
            )
            raise
        except Exception as exc:
            logger.error(
                "Fetching %s failed: %s", resource.value, exc, exc_info=True
            )
            msg = f"Fetching {resource.value} failed: {exc}"
            raise DataSourceError(msg) from exc
        finally:
            if self._in_flight.get(resource) is current:
                del self._in_flight[resource]

        if generation != self._generation[resource]:
            logger.info(
                "Discarded %s fetched before invalidation", resource.value
            )
            return value

        entry = self._entries[resource]
        entry.value = list(value)
        entry.fetched_at = time.time()
        logger.info("Cached %d %s", len(value), resource.value)
        return value

    def _refresh_in_background(self, resource: Resource) -> None:
        if resource in self._in_flight:
            return
        task = asyncio.ensure_future(self.fetch(resource))
        self._background.add(task)

        def _done(finished: asyncio.Task[list[Any]]) -> None:
            self._background.discard(finished)
            if finished.cancelled():
                return
            exc = finished.exception()
            if exc is not None:
                logger.warning(
                    "Background refresh of %s failed: %s",
                    resource.value,
                    exc,
                )

        task.add_done_callback(_done)
