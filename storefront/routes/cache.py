"""
routes/cache.py
----------------

Operational endpoints for the product cache: statistics, an on-demand
expiry sweep, a full clear and per-product invalidation.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from storefront.routes.deps import get_product_cache
from storefront.schemas.cache import CacheStats, CleanupResult
from storefront.services.product_cache import ProductCache

router = APIRouter(prefix="/cache", tags=["cache"])


@router.get("/stats", response_model=CacheStats)
async def cache_stats(product_cache: ProductCache = Depends(get_product_cache)):
    return product_cache.stats()


@router.post("/cleanup", response_model=CleanupResult)
async def cache_cleanup(product_cache: ProductCache = Depends(get_product_cache)):
    removed = product_cache.cache.cleanup()
    return CleanupResult(removed=removed, stats=product_cache.stats())


@router.delete("", response_model=CacheStats)
async def clear_cache(product_cache: ProductCache = Depends(get_product_cache)):
    product_cache.clear_cache()
    return product_cache.stats()


@router.delete("/products/{product_id}")
async def invalidate_product(product_id: str, product_cache: ProductCache = Depends(get_product_cache)):
    removed = product_cache.invalidate_product(product_id)
    return {"product_id": product_id, "removed": removed}
