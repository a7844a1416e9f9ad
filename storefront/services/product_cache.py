"""
services/product_cache.py
-------------------------

Product-facing operations on top of the shared :class:`TemporalCache`.

The cache is split into typed regions, one per kind of resource the
storefront caches:

* ``product:<id>`` holds a single :class:`Product`
* ``products:<key>`` holds an arbitrary named product list
* ``search:<key>`` holds the results of a search query
* ``category:<name>`` holds a category listing

Invalidating a product is deliberately broad.  Besides the product's
own entry it drops every list, search and category entry currently
held, because any of them may contain the product.  That trades cache
hits for never serving a stale listing.

The read-through helpers (:func:`fetch_through` and
:func:`get_or_compute`) return a cached value when there is one and
otherwise run a producer, store its result and return it.  A failing
producer raises :class:`CacheFetchError` and leaves the cache as it was.
"""

from __future__ import annotations

import inspect
import json
import logging
from typing import Any, Awaitable, Callable, List, Optional, Protocol, TypeVar, Union

import orjson

from storefront.core.errors import CacheFetchError, ProductNotFoundError
from storefront.logging_config import log_call, logger
from storefront.schemas.cache import CacheStats
from storefront.schemas.products import Product, SearchFilters
from storefront.utils.cache import CacheRegion, TemporalCache

T = TypeVar("T")

PRODUCT_PREFIX = "product"
PRODUCTS_PREFIX = "products"
SEARCH_PREFIX = "search"
CATEGORY_PREFIX = "category"


class SupportsCache(Protocol):
    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None: ...


def _log_fetch_failure(key: str, exc: Exception) -> None:
    # a lookup of an unknown product is ordinary traffic, not a failure
    level = logging.INFO if isinstance(exc, ProductNotFoundError) else logging.ERROR
    logger.log(level, json.dumps({
        "event": "cache_fetch_failed",
        "key": key,
        "error": type(exc).__name__,
        "detail": str(exc),
    }))


async def fetch_through(
    cache: SupportsCache,
    key: str,
    producer: Callable[[], Union[T, Awaitable[T]]],
    ttl: Optional[float] = None,
    *,
    force_refresh: bool = False,
) -> T:
    """Read-through lookup with a possibly asynchronous producer.

    :param cache: a :class:`TemporalCache` or a :class:`CacheRegion`
    :param key: key looked up and written in ``cache``
    :param producer: called on a miss; may return a value or an awaitable
    :param ttl: lifetime of the stored value, cache default when ``None``
    :param force_refresh: skip the cache read but still store the result
    :raises CacheFetchError: if the producer fails; nothing is stored
    """
    if not force_refresh:
        cached = cache.get(key)
        if cached is not None:
            return cached
    try:
        value = producer()
        if inspect.isawaitable(value):
            value = await value
    except Exception as exc:
        _log_fetch_failure(key, exc)
        raise CacheFetchError(key) from exc
    # None cannot be told apart from a miss, so it is never stored.
    if value is not None:
        cache.set(key, value, ttl)
    return value


def get_or_compute(
    cache: SupportsCache,
    key: str,
    producer: Callable[[], T],
    ttl: Optional[float] = None,
    *,
    force_refresh: bool = False,
) -> T:
    """Synchronous counterpart of :func:`fetch_through`."""
    if not force_refresh:
        cached = cache.get(key)
        if cached is not None:
            return cached
    try:
        value = producer()
    except Exception as exc:
        _log_fetch_failure(key, exc)
        raise CacheFetchError(key) from exc
    if value is not None:
        cache.set(key, value, ttl)
    return value


def search_key(query: str, filters: Optional[SearchFilters] = None) -> str:
    """Deterministic cache key for a query and its filters."""
    normalized = " ".join(query.lower().split())
    if filters is None or filters.is_empty():
        return normalized
    encoded = orjson.dumps(filters.model_dump(exclude_none=True), option=orjson.OPT_SORT_KEYS)
    return f"{normalized}|{encoded.decode('utf-8')}"


class ProductCache:
    """Typed product operations over one shared cache instance."""

    def __init__(self, cache: TemporalCache) -> None:
        self.cache = cache
        self.products: CacheRegion[Product] = CacheRegion(cache, PRODUCT_PREFIX, Product)
        self.product_lists: CacheRegion[List[Product]] = CacheRegion(cache, PRODUCTS_PREFIX, List[Product])
        self.search_results: CacheRegion[List[Product]] = CacheRegion(cache, SEARCH_PREFIX, List[Product])
        self.category_products: CacheRegion[List[Product]] = CacheRegion(cache, CATEGORY_PREFIX, List[Product])

    def set_product(self, product_id: str, product: Product, ttl: Optional[float] = None) -> None:
        self.products.set(product_id, product, ttl)

    def get_product(self, product_id: str) -> Optional[Product]:
        return self.products.get(product_id)

    def set_products(self, key: str, products: List[Product], ttl: Optional[float] = None) -> None:
        self.product_lists.set(key, products, ttl)

    def get_products(self, key: str) -> Optional[List[Product]]:
        return self.product_lists.get(key)

    def set_search_results(self, query: str, results: List[Product], ttl: Optional[float] = None) -> None:
        self.search_results.set(query, results, ttl)

    def get_search_results(self, query: str) -> Optional[List[Product]]:
        return self.search_results.get(query)

    def set_category_products(self, category: str, products: List[Product], ttl: Optional[float] = None) -> None:
        self.category_products.set(category, products, ttl)

    def get_category_products(self, category: str) -> Optional[List[Product]]:
        return self.category_products.get(category)

    @log_call
    def invalidate_product(self, product_id: str) -> int:
        """Drop the product entry and every cached list, search and category.

        Returns the number of entries removed.
        """
        keys = [self.products.full_key(product_id)]
        for region in (self.product_lists, self.search_results, self.category_products):
            keys.extend(region.full_key(key) for key in region.keys())
        removed = self.cache.delete_many(keys)
        logger.info(json.dumps({"event": "product_invalidated", "product_id": product_id, "removed": removed}))
        return removed

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info(json.dumps({"event": "cache_cleared"}))

    def stats(self) -> CacheStats:
        return self.cache.get_stats()
