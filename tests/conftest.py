"""Shared test fixtures: a controllable clock, a small catalog and an API client."""

import pytest
from fastapi.testclient import TestClient

from storefront.core.config import Settings
from storefront.main import create_app
from storefront.services.catalog_service import Catalog
from storefront.services.search_service import InvertedIndexSearch
from storefront.utils.cache import TemporalCache
from storefront.utils.storage import MemoryStore

PRODUCT_RECORDS = [
    {"id": "p-001", "name": "Organic Bananas", "description": "Sweet ripe bananas grown without pesticides",
     "category": "Produce", "origin": "Ecuador", "price": 2.49, "stock": 120, "averageRating": 4.7,
     "totalSold": 340, "tags": ["fruit", "organic"], "featured": True},
    {"id": "p-002", "name": "Banana Bread", "description": "Moist loaf baked with real bananas and walnuts",
     "category": "Bakery", "origin": "USA", "price": 5.99, "stock": 8, "averageRating": 4.4,
     "totalSold": 95, "tags": ["bread", "sweet"]},
    {"id": "p-003", "name": "Jasmine Rice", "description": "Fragrant long grain rice",
     "category": "Pantry", "origin": "Thailand", "price": 7.5, "stock": 60, "averageRating": 4.6,
     "totalSold": 210},
    {"id": "p-004", "name": "Haas Avocados", "description": "Creamy avocados ready to eat",
     "category": "Produce", "origin": "Mexico", "price": 4.25, "stock": 0, "averageRating": 4.2,
     "totalSold": 180, "tags": ["fruit"]},
    {"id": "p-005", "name": "Sourdough Loaf", "description": "Naturally leavened bread with a crisp crust",
     "category": "Bakery", "origin": "USA", "price": 6.75, "stock": 25, "averageRating": 4.8,
     "totalSold": 260, "tags": ["bread", "artisan"]},
    {"id": "p-006", "name": "Extra Virgin Olive Oil", "description": "Cold pressed olive oil",
     "category": "Pantry", "origin": "Italy", "price": 12.99, "stock": 40, "averageRating": 4.9,
     "totalSold": 150, "brand": "Colavita"},
    {"id": "p-007", "name": "Netflix Gift Card", "description": "Digital gift card for streaming",
     "category": "Gift Cards", "origin": "USA", "price": 25.0, "stock": 500, "averageRating": 4.5,
     "totalSold": 60, "brand": "Netflix", "isGiftCard": True, "featured": True},
]


class FakeClock:
    """Manually advanced replacement for ``time.time``."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def cache(clock):
    return TemporalCache(max_entries=100, default_ttl=600, clock=clock)


@pytest.fixture
def product_records():
    return PRODUCT_RECORDS


@pytest.fixture
def catalog():
    return Catalog.from_records(PRODUCT_RECORDS)


@pytest.fixture
def search(catalog):
    return InvertedIndexSearch(catalog)


@pytest.fixture
def client(catalog):
    settings = Settings(cache_persistence_enabled=False, cache_cleanup_interval=3600)
    app = create_app(settings=settings, catalog=catalog)
    with TestClient(app) as test_client:
        yield test_client
