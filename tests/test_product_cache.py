"""Tests for typed cache regions, the product cache and read-through helpers."""

import asyncio
import logging
from typing import List

import pytest

from storefront.core.errors import CacheFetchError, ProductNotFoundError
from storefront.schemas.products import Product, SearchFilters
from storefront.services.product_cache import ProductCache, fetch_through, get_or_compute, search_key
from storefront.utils.cache import CacheRegion, TemporalCache


@pytest.fixture
def product_cache(cache):
    return ProductCache(cache)


class TestCacheRegion:
    def test_values_round_trip_as_models(self, cache, catalog):
        region = CacheRegion(cache, "product", Product)
        product = catalog.get_product("p-001")
        region.set("p-001", product)
        assert cache.get("product:p-001")["inStock"] is True
        assert region.get("p-001") == product

    def test_survives_persistence(self, store, clock, catalog):
        first = CacheRegion(TemporalCache(store=store, clock=clock), "search", List[Product])
        first.set("banana", list(catalog.products[:2]))
        second = CacheRegion(TemporalCache(store=store, clock=clock), "search", List[Product])
        assert [p.id for p in second.get("banana")] == ["p-001", "p-002"]

    def test_invalid_value_is_a_miss(self, cache):
        cache.set("product:broken", {"unexpected": True})
        region = CacheRegion(cache, "product", Product)
        assert region.get("broken") is None
        assert "product:broken" not in cache.keys()

    def test_keys_and_clear_are_scoped(self, cache):
        lists = CacheRegion(cache, "products", List[Product])
        lists.set("featured", [])
        lists.set("low-stock", [])
        cache.set("other:featured", 1)
        assert sorted(lists.keys()) == ["featured", "low-stock"]
        assert lists.clear() == 2
        assert cache.keys() == ["other:featured"]


class TestProductCache:
    def test_product_round_trip(self, product_cache, catalog):
        product = catalog.get_product("p-003")
        product_cache.set_product("p-003", product)
        assert product_cache.get_product("p-003") == product
        assert product_cache.get_product("missing") is None

    def test_list_regions_are_separate(self, product_cache, catalog):
        bakery = catalog.by_category("Bakery")
        product_cache.set_category_products("Bakery", bakery)
        product_cache.set_search_results("bread", bakery[:1])
        product_cache.set_products("featured", catalog.featured())
        assert [p.id for p in product_cache.get_category_products("Bakery")] == ["p-002", "p-005"]
        assert [p.id for p in product_cache.get_search_results("bread")] == ["p-002"]
        assert [p.id for p in product_cache.get_products("featured")] == ["p-001", "p-007"]
        assert product_cache.get_products("Bakery") is None

    def test_invalidate_product_is_broad(self, product_cache, catalog):
        product_cache.set_product("p-001", catalog.get_product("p-001"))
        product_cache.set_product("p-003", catalog.get_product("p-003"))
        product_cache.set_products("featured", catalog.featured())
        product_cache.set_search_results("rice", [catalog.get_product("p-003")])
        product_cache.set_category_products("Pantry", catalog.by_category("Pantry"))

        assert product_cache.invalidate_product("p-001") == 4
        assert product_cache.get_product("p-001") is None
        assert product_cache.get_search_results("rice") is None
        assert product_cache.get_category_products("Pantry") is None
        assert product_cache.get_product("p-003") is not None

    def test_clear_cache(self, product_cache, catalog):
        product_cache.set_product("p-001", catalog.get_product("p-001"))
        product_cache.clear_cache()
        assert product_cache.stats().size == 0

    def test_entries_expire(self, product_cache, catalog, clock):
        product_cache.set_product("p-001", catalog.get_product("p-001"), ttl=30)
        clock.advance(31)
        assert product_cache.get_product("p-001") is None


class TestReadThrough:
    def test_miss_calls_producer_and_stores(self, cache):
        calls = []

        def producer():
            calls.append(1)
            return {"fresh": True}

        assert get_or_compute(cache, "k", producer) == {"fresh": True}
        assert get_or_compute(cache, "k", producer) == {"fresh": True}
        assert len(calls) == 1

    def test_empty_list_counts_as_hit(self, cache):
        get_or_compute(cache, "k", lambda: [])
        assert get_or_compute(cache, "k", lambda: ["other"]) == []

    def test_custom_ttl(self, cache, clock):
        get_or_compute(cache, "k", lambda: 1, ttl=5)
        clock.advance(5)
        assert cache.get("k") is None

    def test_force_refresh_bypasses_read(self, cache):
        cache.set("k", "stale")
        assert get_or_compute(cache, "k", lambda: "fresh", force_refresh=True) == "fresh"
        assert cache.get("k") == "fresh"

    def test_producer_failure_is_surfaced(self, cache):
        def producer():
            raise RuntimeError("catalog offline")

        with pytest.raises(CacheFetchError) as info:
            get_or_compute(cache, "k", producer)
        assert info.value.key == "k"
        assert isinstance(info.value.__cause__, RuntimeError)
        assert cache.keys() == []

    def test_producer_failure_is_logged_as_error(self, cache, caplog):
        def producer():
            raise RuntimeError("catalog offline")

        with caplog.at_level(logging.INFO, logger="storefront"):
            with pytest.raises(CacheFetchError):
                get_or_compute(cache, "k", producer)
        assert [r.levelno for r in caplog.records if "cache_fetch_failed" in r.getMessage()] == [logging.ERROR]

    def test_unknown_product_is_logged_as_info(self, product_cache, catalog, caplog):
        with caplog.at_level(logging.INFO, logger="storefront"):
            with pytest.raises(CacheFetchError) as info:
                get_or_compute(product_cache.products, "nope", lambda: catalog.get_product_or_raise("nope"))
        assert isinstance(info.value.__cause__, ProductNotFoundError)
        assert [r.levelno for r in caplog.records if "cache_fetch_failed" in r.getMessage()] == [logging.INFO]

    def test_async_producer(self, cache):
        async def producer():
            await asyncio.sleep(0)
            return [1, 2]

        assert asyncio.run(fetch_through(cache, "k", producer)) == [1, 2]
        assert cache.get("k") == [1, 2]

    def test_async_hit_skips_producer(self, cache):
        cache.set("k", "cached")

        async def producer():
            raise AssertionError("should not be called")

        assert asyncio.run(fetch_through(cache, "k", producer)) == "cached"

    def test_async_failure_leaves_cache_untouched(self, cache):
        cache.set("k", "old", ttl=1)

        async def producer():
            raise ValueError("boom")

        with pytest.raises(CacheFetchError):
            asyncio.run(fetch_through(cache, "k", producer, force_refresh=True))
        assert cache.get("k") == "old"

    def test_works_with_regions(self, product_cache, catalog):
        product = get_or_compute(product_cache.products, "p-002", lambda: catalog.get_product("p-002"))
        assert isinstance(product, Product)
        assert product_cache.get_product("p-002") == product


class TestSearchKey:
    def test_normalizes_query(self):
        assert search_key("  Banana   Bread ") == "banana bread"

    def test_filters_are_part_of_the_key(self):
        plain = search_key("bread")
        filtered = search_key("bread", SearchFilters(category="Bakery"))
        assert plain != filtered
        assert filtered == search_key("bread", SearchFilters(category="Bakery"))

    def test_empty_filters_match_plain_key(self):
        assert search_key("bread", SearchFilters()) == search_key("bread")
