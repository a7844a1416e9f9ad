"""
services/catalog_service.py
---------------------------

Read-only access to the product catalog snapshot.

The catalog is loaded once per process from a JSON file and kept as
an immutable, ordered tuple of :class:`Product` records.  Everything
in this module is a pure function of that snapshot: listings keep
catalog order and nothing here ever writes back to the source.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import orjson
from pydantic import TypeAdapter, ValidationError

from storefront.core.errors import CatalogLoadError, ProductNotFoundError
from storefront.logging_config import log_call, logger
from storefront.schemas.products import FilterOptions, PriceRange, Product

_PRODUCT_LIST = TypeAdapter(List[Product])


class Catalog:
    """Immutable ordered snapshot of the product catalog."""

    def __init__(self, products: Iterable[Product]) -> None:
        self._products: Tuple[Product, ...] = tuple(products)
        self._by_id: Dict[str, Product] = {}
        for product in self._products:
            self._by_id.setdefault(product.id, product)

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "Catalog":
        return cls(_PRODUCT_LIST.validate_python(list(records)))

    @property
    def products(self) -> Tuple[Product, ...]:
        return self._products

    def __len__(self) -> int:
        return len(self._products)

    def __iter__(self):
        return iter(self._products)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_product(self, product_id: str) -> Optional[Product]:
        return self._by_id.get(product_id)

    def get_product_or_raise(self, product_id: str) -> Product:
        product = self.get_product(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def by_category(self, category: str) -> List[Product]:
        """Products in ``category`` (case-insensitive).

        ``"all"`` returns the whole catalog and ``"gift-cards"`` returns
        every gift card regardless of its category.
        """
        if category == "all":
            return list(self._products)
        if category == "gift-cards":
            return [p for p in self._products if p.is_gift_card]
        wanted = category.lower()
        return [p for p in self._products if p.category.lower() == wanted]

    def by_origin(self, origin: str) -> List[Product]:
        return [p for p in self._products if p.origin == origin]

    def by_price_range(self, min_price: float, max_price: float) -> List[Product]:
        return [p for p in self._products if min_price <= p.price <= max_price]

    def in_stock(self) -> List[Product]:
        return [p for p in self._products if p.in_stock]

    def out_of_stock(self) -> List[Product]:
        return [p for p in self._products if not p.in_stock]

    def low_stock(self, threshold: Optional[int] = None) -> List[Product]:
        """In-stock products at or below their low-stock threshold.

        ``threshold`` overrides each product's own threshold.
        """
        return [
            p for p in self._products
            if p.in_stock and p.stock <= (p.low_stock_threshold if threshold is None else threshold)
        ]

    def featured(self, count: int = 8) -> List[Product]:
        return [p for p in self._products if p.featured][:count]

    def similar(self, product_id: str, count: int = 4) -> List[Product]:
        """Other products sharing the category or origin of ``product_id``."""
        product = self.get_product(product_id)
        if product is None:
            return []
        return [
            p for p in self._products
            if p.id != product_id and (p.category == product.category or p.origin == product.origin)
        ][:count]

    # ------------------------------------------------------------------
    # Facets
    # ------------------------------------------------------------------

    def categories(self) -> List[str]:
        return sorted({p.category for p in self._products})

    def origins(self) -> List[str]:
        return sorted({p.origin for p in self._products})

    def filter_options(self) -> FilterOptions:
        if not self._products:
            price_range = PriceRange(min=0, max=100)
        else:
            prices = [p.price for p in self._products]
            price_range = PriceRange(min=min(prices), max=max(prices))
        return FilterOptions(categories=self.categories(), origins=self.origins(), price_range=price_range)


@log_call
def load_catalog(path: str | Path) -> Catalog:
    """Load and validate the catalog snapshot stored at ``path``.

    The file must hold a JSON list of product records.  Any read, parse
    or validation problem raises :class:`CatalogLoadError`.
    """
    path = Path(path)
    try:
        records = orjson.loads(path.read_bytes())
    except (OSError, orjson.JSONDecodeError) as exc:
        raise CatalogLoadError(f"Cannot read catalog {path}: {exc}") from exc
    if not isinstance(records, list):
        raise CatalogLoadError(f"Catalog {path} must contain a JSON list of products")
    try:
        catalog = Catalog.from_records(records)
    except ValidationError as exc:
        raise CatalogLoadError(f"Invalid product data in {path}: {exc.error_count()} error(s)") from exc
    logger.info(json.dumps({"event": "catalog_loaded", "path": str(path), "products": len(catalog)}))
    return catalog
