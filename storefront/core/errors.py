"""
core/errors.py
---------------

Exception types raised by the storefront data layer.

Lookups that simply find nothing (missing or expired cache keys, empty
search results) never raise; they return ``None`` or an empty list.
The exceptions below cover the remaining cases: a producer failing
inside the read-through accessor, a catalog that cannot be loaded at
startup, and an explicit "must exist" product lookup.
"""

from __future__ import annotations


class StorefrontError(Exception):
    """Base class for all storefront errors."""


class CacheFetchError(StorefrontError):
    """The producing operation of a read-through lookup failed.

    Nothing is written to the cache when this is raised.  The original
    exception is available as ``__cause__``.
    """

    def __init__(self, key: str, message: str | None = None) -> None:
        self.key = key
        super().__init__(message or f"Failed to produce value for cache key {key!r}")


class CatalogLoadError(StorefrontError):
    """The catalog snapshot could not be read or validated."""


class ProductNotFoundError(StorefrontError):
    def __init__(self, product_id: str) -> None:
        self.product_id = product_id
        super().__init__(f"Product {product_id!r} not found")
