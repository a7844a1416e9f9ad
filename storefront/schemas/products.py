"""
schemas/products.py
--------------------

Models representing catalog products and the shapes returned when
listing or searching them.  Field names are snake_case in Python and
camelCase on the wire, matching the JSON the catalog is stored in and
what the storefront UI consumes.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Product(CamelModel):
    """A catalog product as read by the data layer.

    The catalog provider owns these records; this package only reads
    them.  Unknown fields in the source data are ignored.  When
    ``inStock`` is missing it is derived from ``stock``, and when
    ``tags`` is missing the category and lower-cased origin are used.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True)

    id: str
    name: str
    description: str = ""
    category: str
    origin: str = "USA"
    tags: List[str] = Field(default_factory=list)
    brand: Optional[str] = None
    price: float
    currency: str = "USD"
    stock: int = 100
    low_stock_threshold: int = 10
    in_stock: bool = True
    featured: bool = False
    is_gift_card: bool = False
    average_rating: float = 4.5
    review_count: int = 0
    total_sold: int = 0

    @model_validator(mode="before")
    @classmethod
    def _fill_derived_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "inStock" not in data and "in_stock" not in data:
            stock = data.get("stock", 100)
            try:
                data["inStock"] = int(stock) > 0
            except (TypeError, ValueError):
                # left for field validation to report the bad stock value
                pass
        if "tags" not in data:
            origin = data.get("origin") or "USA"
            data["tags"] = [t for t in (data.get("category"), str(origin).lower()) if t]
        return data

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> str:
        return str(v)


class SearchFilters(BaseModel):
    """Conjunctive filters applied to search candidates.

    A field left as ``None`` is not applied.  ``in_stock`` only narrows
    the results when it is ``True``.
    """

    category: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    origin: Optional[str] = None
    in_stock: Optional[bool] = None
    min_rating: Optional[float] = None
    brand: Optional[str] = None

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


class ProductPage(CamelModel):
    products: List[Product]
    total: int
    page: int
    page_size: int
    has_more: bool


class PriceRange(CamelModel):
    min: float
    max: float


class FilterOptions(CamelModel):
    categories: List[str]
    origins: List[str]
    price_range: PriceRange
