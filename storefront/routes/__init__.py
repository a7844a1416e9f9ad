"""
Route aggregation package for the storefront API.

Each functional area (product listings, search, cache administration)
is its own module defining an ``APIRouter``.  The application factory
in :mod:`storefront.main` includes them in the FastAPI instance.
"""

__all__ = [
    "products",
    "search",
    "cache",
]

from . import cache, products, search  # noqa: E402,F401
