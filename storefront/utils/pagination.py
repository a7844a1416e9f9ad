"""
utils/pagination.py
--------------------

Helpers for shaping product result lists before they are returned to
the storefront: ordering by a named attribute and slicing into pages.

Pages are 1-based.  ``paginate`` clamps the requested page size to the
configured ``max_page_size`` so a caller cannot ask for the whole
catalog in one page, and reports ``has_more`` when further pages
exist.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Literal, Optional, Sequence

from storefront.core.config import Settings, get_settings
from storefront.schemas.products import Product, ProductPage

SortOrder = Literal["asc", "desc"]

_SORT_KEYS: Dict[str, Callable[[Product], Any]] = {
    "name": lambda p: p.name.lower(),
    "price": lambda p: p.price,
    "rating": lambda p: p.average_rating,
    "popularity": lambda p: p.total_sold,
}


def sort_products(products: Sequence[Product], sort_by: Optional[str] = None, order: SortOrder = "asc") -> list[Product]:
    """Return ``products`` sorted by ``sort_by``.

    :param sort_by: ``name``, ``price``, ``rating`` or ``popularity``.
        Unknown values sort by name; ``None`` keeps the input order.
    :param order: ``asc`` or ``desc``.  Ties keep their input order.
    """
    if not sort_by:
        return list(products)
    key = _SORT_KEYS.get(sort_by, _SORT_KEYS["name"])
    return sorted(products, key=key, reverse=(order == "desc"))


def paginate(
    items: Sequence[Product],
    page: int = 1,
    page_size: Optional[int] = None,
    settings: Optional[Settings] = None,
) -> ProductPage:
    """Slice ``items`` into the requested 1-based page.

    :param page: page number, values below 1 are treated as 1
    :param page_size: items per page, defaults to ``default_page_size``
    :param settings: bounds for the page size, process settings when ``None``
    """
    settings = settings or get_settings()
    size = page_size or settings.default_page_size
    size = max(1, min(size, settings.max_page_size))
    page = max(1, page)
    start = (page - 1) * size
    end = start + size
    return ProductPage(
        products=list(items[start:end]),
        total=len(items),
        page=page,
        page_size=size,
        has_more=end < len(items),
    )
