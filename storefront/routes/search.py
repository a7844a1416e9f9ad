"""
routes/search.py
-----------------

Search endpoints backed by the inverted index.  Full result sets are
cached under a key derived from the query and its filters; sorting
and pagination are applied to the cached set on every request.
"""

from __future__ import annotations

import json
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from storefront.core.config import Settings
from storefront.logging_config import logger
from storefront.routes.deps import get_app_settings, get_product_cache, get_search
from storefront.schemas.products import ProductPage, SearchFilters
from storefront.services.product_cache import ProductCache, fetch_through, search_key
from storefront.services.search_service import InvertedIndexSearch
from storefront.utils.pagination import SortOrder, paginate, sort_products

router = APIRouter(prefix="/search", tags=["search"])


@router.get("", response_model=ProductPage)
async def search_products(
    q: str = "",
    category: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    origin: Optional[str] = None,
    in_stock: Optional[bool] = None,
    min_rating: Optional[float] = None,
    brand: Optional[str] = None,
    sort_by: Optional[str] = None,
    order: SortOrder = "asc",
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    search: InvertedIndexSearch = Depends(get_search),
    product_cache: ProductCache = Depends(get_product_cache),
    settings: Settings = Depends(get_app_settings),
):
    filters = SearchFilters(
        category=category,
        min_price=min_price,
        max_price=max_price,
        origin=origin,
        in_stock=in_stock,
        min_rating=min_rating,
        brand=brand,
    )
    key = search_key(q, filters)
    results = await fetch_through(product_cache.search_results, key, lambda: search.search(q, filters))
    logger.info(json.dumps({"event": "search", "query": q, "key": key, "results": len(results)}))
    return paginate(sort_products(results, sort_by, order), page, page_size, settings)


@router.get("/autocomplete", response_model=List[str])
async def autocomplete(
    q: str = "",
    limit: Optional[int] = Query(None, ge=1, le=50),
    search: InvertedIndexSearch = Depends(get_search),
    settings: Settings = Depends(get_app_settings),
):
    return search.get_autocomplete_suggestions(q, limit or settings.autocomplete_limit)


@router.get("/popular", response_model=List[str])
async def popular_searches(
    search: InvertedIndexSearch = Depends(get_search),
    settings: Settings = Depends(get_app_settings),
):
    return search.get_popular_searches(settings.popular_products_count)
