"""
services/search_service.py
--------------------------

In-memory product search over a catalog snapshot.

An inverted index maps every lowercase token longer than two
characters to the products whose text contains it.  Indexed text is
the product name, description, category, origin, each tag and the
brand.  The index is built lazily on the first query and never
updated afterwards: it reflects the snapshot it was created from, and
a changed catalog needs a new :class:`InvertedIndexSearch`.

A product whose token appears in several fields is posted to the same
bucket several times.  Queries deduplicate by record identity, so each
catalog record appears at most once, even when two records share an id.

Results are a set, not a ranking.  Their order is the order in which
products were first matched: query token order, then index order
within a token.
"""

from __future__ import annotations

import json
import time
from typing import Dict, Iterable, List, Optional, Sequence

from storefront.logging_config import logger
from storefront.schemas.products import Product, SearchFilters

MIN_TOKEN_LENGTH = 3
MIN_AUTOCOMPLETE_LENGTH = 2


def tokenize(text: str) -> List[str]:
    """Lowercase ``text``, split on whitespace and keep tokens of 3+ chars."""
    return [word for word in text.lower().split() if len(word) >= MIN_TOKEN_LENGTH]


def searchable_fields(product: Product) -> List[str]:
    fields = [product.name, product.description, product.category, product.origin]
    fields.extend(product.tags)
    if product.brand:
        fields.append(product.brand)
    return [field for field in fields if field]


def matches_filters(product: Product, filters: SearchFilters) -> bool:
    if filters.category and product.category != filters.category:
        return False
    if filters.min_price is not None and product.price < filters.min_price:
        return False
    if filters.max_price is not None and product.price > filters.max_price:
        return False
    if filters.origin and product.origin != filters.origin:
        return False
    if filters.in_stock and not product.in_stock:
        return False
    if filters.min_rating is not None and product.average_rating < filters.min_rating:
        return False
    if filters.brand and product.brand != filters.brand:
        return False
    return True


def apply_filters(products: Iterable[Product], filters: Optional[SearchFilters] = None) -> List[Product]:
    """AND every set field of ``filters`` over ``products``, keeping order."""
    if filters is None:
        return list(products)
    return [product for product in products if matches_filters(product, filters)]


class InvertedIndexSearch:
    """Token index over a catalog snapshot.

    :param products: the catalog snapshot, in catalog order
    """

    def __init__(self, products: Iterable[Product]) -> None:
        self._products: Sequence[Product] = tuple(products)
        self._index: Optional[Dict[str, List[Product]]] = None

    @property
    def is_built(self) -> bool:
        return self._index is not None

    @property
    def index_size(self) -> int:
        """Number of distinct tokens in the index (builds it if needed)."""
        return len(self._ensure_index())

    def postings(self, token: str) -> List[Product]:
        """Products posted under ``token``, duplicates included."""
        return list(self._ensure_index().get(token, ()))

    def _ensure_index(self) -> Dict[str, List[Product]]:
        if self._index is None:
            self._index = self._build_index()
        return self._index

    def _build_index(self) -> Dict[str, List[Product]]:
        started = time.perf_counter()
        index: Dict[str, List[Product]] = {}
        for product in self._products:
            for field in searchable_fields(product):
                for token in tokenize(field):
                    index.setdefault(token, []).append(product)
        logger.info(json.dumps({
            "event": "search_index_built",
            "products": len(self._products),
            "tokens": len(index),
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        }))
        return index

    def search(self, query: str, filters: Optional[SearchFilters] = None) -> List[Product]:
        """Products matching any token of ``query``, narrowed by ``filters``.

        A query token matches a bucket when the tokens are equal or one
        contains the other.  A query with no usable token (empty, or
        only words of one or two characters) matches the whole catalog.
        """
        index = self._ensure_index()
        tokens = tokenize(query)
        if not tokens:
            return apply_filters(self._products, filters)

        matched: Dict[int, Product] = {}
        for token in tokens:
            for product in index.get(token, ()):
                matched.setdefault(id(product), product)
            for index_token, bucket in index.items():
                if token in index_token or index_token in token:
                    for product in bucket:
                        matched.setdefault(id(product), product)
        return apply_filters(matched.values(), filters)

    def get_autocomplete_suggestions(self, query: str, limit: int = 5) -> List[str]:
        """Distinct names, categories, brands and tags containing ``query``.

        Returned in catalog scan order, at most ``limit`` of them.
        Queries shorter than two characters yield nothing.
        """
        if not query or len(query) < MIN_AUTOCOMPLETE_LENGTH or limit <= 0:
            return []
        needle = query.lower()
        suggestions: Dict[str, None] = {}
        for product in self._products:
            candidates = [product.name, product.category]
            if product.brand:
                candidates.append(product.brand)
            candidates.extend(product.tags)
            for text in candidates:
                if needle in text.lower():
                    suggestions.setdefault(text, None)
                    if len(suggestions) >= limit:
                        return list(suggestions)
        return list(suggestions)

    def get_popular_searches(self, top_products: int = 5) -> List[str]:
        """Every category (first-seen order) followed by the best sellers.

        Best sellers are the names of the ``top_products`` products with
        the highest ``total_sold``; they are not deduplicated against the
        categories.
        """
        categories = list(dict.fromkeys(product.category for product in self._products))
        best_sellers = sorted(self._products, key=lambda product: product.total_sold, reverse=True)
        return categories + [product.name for product in best_sellers[:top_products]]
