"""
routes/products.py
-------------------

Product listing and detail endpoints.  Listings and single products
are served read-through from the product cache; the catalog snapshot
is only consulted on a miss.
"""

from __future__ import annotations

import json
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from storefront.core.config import Settings
from storefront.logging_config import logger
from storefront.routes.deps import get_app_settings, get_catalog, get_product_cache
from storefront.schemas.products import FilterOptions, Product, ProductPage
from storefront.services.catalog_service import Catalog
from storefront.services.product_cache import ProductCache, get_or_compute
from storefront.utils.pagination import SortOrder, paginate, sort_products

router = APIRouter(tags=["products"])


@router.get("/products", response_model=ProductPage)
async def list_products(
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    category: Optional[str] = None,
    sort_by: Optional[str] = None,
    order: SortOrder = "asc",
    catalog: Catalog = Depends(get_catalog),
    product_cache: ProductCache = Depends(get_product_cache),
    settings: Settings = Depends(get_app_settings),
):
    """
    Paginated catalog listing.  With ``category`` the listing comes from
    the ``category:`` cache region, filled from the catalog on a miss.
    """
    if category:
        products = get_or_compute(product_cache.category_products, category, lambda: catalog.by_category(category))
    else:
        products = list(catalog.products)
    return paginate(sort_products(products, sort_by, order), page, page_size, settings)


@router.get("/products/featured", response_model=List[Product])
async def featured_products(
    count: int = Query(8, ge=1, le=100),
    catalog: Catalog = Depends(get_catalog),
    product_cache: ProductCache = Depends(get_product_cache),
):
    return get_or_compute(product_cache.product_lists, f"featured:{count}", lambda: catalog.featured(count))


@router.get("/products/low-stock", response_model=List[Product])
async def low_stock_products(
    catalog: Catalog = Depends(get_catalog),
    product_cache: ProductCache = Depends(get_product_cache),
    settings: Settings = Depends(get_app_settings),
):
    threshold = settings.low_stock_threshold
    return get_or_compute(product_cache.product_lists, f"low-stock:{threshold}", lambda: catalog.low_stock(threshold))


@router.get("/products/{product_id}", response_model=Product)
async def get_product(
    product_id: str,
    catalog: Catalog = Depends(get_catalog),
    product_cache: ProductCache = Depends(get_product_cache),
):
    return get_or_compute(product_cache.products, product_id, lambda: catalog.get_product_or_raise(product_id))


@router.get("/products/{product_id}/similar", response_model=List[Product])
async def similar_products(
    product_id: str,
    count: int = Query(4, ge=1, le=50),
    catalog: Catalog = Depends(get_catalog),
):
    catalog.get_product_or_raise(product_id)
    return catalog.similar(product_id, count)


@router.get("/filters", response_model=FilterOptions)
async def filter_options(catalog: Catalog = Depends(get_catalog)):
    options = catalog.filter_options()
    logger.debug(json.dumps({
        "event": "filter_options",
        "categories": len(options.categories),
        "origins": len(options.origins),
    }))
    return options
