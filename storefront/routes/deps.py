"""
routes/deps.py
---------------

FastAPI dependencies exposing the objects created in the application
lifespan (catalog, search index, product cache, settings).  Routes
receive them through ``Depends`` so tests can build isolated apps with
their own instances.
"""

from __future__ import annotations

from fastapi import Request

from storefront.core.config import Settings
from storefront.services.catalog_service import Catalog
from storefront.services.product_cache import ProductCache
from storefront.services.search_service import InvertedIndexSearch


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_catalog(request: Request) -> Catalog:
    return request.app.state.catalog


def get_search(request: Request) -> InvertedIndexSearch:
    return request.app.state.search


def get_product_cache(request: Request) -> ProductCache:
    return request.app.state.product_cache
