"""
core/config.py
----------------

Application configuration module.

Defines strongly‑typed settings loaded from the environment using
``pydantic-settings``.  These settings control the product cache
(capacity, time to live, persistence, eviction), the periodic cleanup
timer, where the catalog snapshot is loaded from, and the limits used
when shaping search results.  The values provided here are sensible
defaults but can be overridden via environment variables at
deployment time.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    The settings structure is flat and uses environment variables
    prefixed with ``STOREFRONT_``.  For example, to shorten the default
    cache lifetime you can set ``STOREFRONT_CACHE_DEFAULT_TTL=60``.
    """

    # Product cache
    cache_max_entries: int = Field(2000, ge=1, description="Maximum number of entries held by the product cache.")
    cache_default_ttl: float = Field(600.0, gt=0, description="Default time to live of a cache entry in seconds.")
    cache_persistence_enabled: bool = Field(True, description="Persist the cache mapping to the durable store.")
    cache_storage_dir: str = Field(".cache", description="Directory used by the file-backed durable store.")
    cache_storage_key: str = Field("productCache", description="Record name the cache mapping is saved under.")
    cache_eviction_policy: Literal["fifo", "lru"] = Field("fifo", description="Entry evicted when the cache is full.")
    cache_cleanup_interval: float = Field(60.0, gt=0, description="Seconds between periodic expiry sweeps.")

    # Catalog
    catalog_path: str = Field("data/products.json", description="JSON file holding the product catalog snapshot.")

    # Search and listings
    autocomplete_limit: int = Field(5, ge=1, description="Default number of autocomplete suggestions.")
    popular_products_count: int = Field(5, ge=0, description="Best sellers appended to the popular searches.")
    low_stock_threshold: int = Field(10, ge=0, description="Stock level at or below which a product is low.")
    default_page_size: int = Field(20, ge=1, description="Page size used when the caller does not pass one.")
    max_page_size: int = Field(100, ge=1, description="Upper bound for a requested page size.")

    model_config = SettingsConfigDict(env_prefix="STOREFRONT_", env_file=None, case_sensitive=False)


@lru_cache()
def get_settings() -> Settings:
    """Return a cached instance of the application settings.

    Using a cache prevents expensive environment parsing on every call.
    """
    return Settings()
