"""Tests for the catalog snapshot, product model defaults and result shaping."""

import json

import pytest

from storefront.core.config import Settings
from storefront.core.errors import CatalogLoadError, ProductNotFoundError
from storefront.schemas.products import Product
from storefront.services.catalog_service import Catalog, load_catalog
from storefront.utils.pagination import paginate, sort_products


def ids(products):
    return [p.id for p in products]


class TestProductModel:
    def test_derives_in_stock_from_stock(self, catalog):
        assert catalog.get_product("p-004").in_stock is False
        assert catalog.get_product("p-001").in_stock is True

    def test_default_tags_use_category_and_origin(self, catalog):
        assert catalog.get_product("p-003").tags == ["Pantry", "thailand"]

    def test_explicit_in_stock_wins(self):
        product = Product.model_validate({"id": 1, "name": "X", "category": "C", "price": 1, "stock": 0, "inStock": True})
        assert product.id == "1"
        assert product.in_stock is True

    def test_serializes_camel_case(self, catalog):
        data = catalog.get_product("p-007").model_dump(by_alias=True)
        assert data["isGiftCard"] is True
        assert data["totalSold"] == 60


class TestCatalog:
    def test_lookup(self, catalog):
        assert catalog.get_product("p-002").name == "Banana Bread"
        assert catalog.get_product("nope") is None
        with pytest.raises(ProductNotFoundError):
            catalog.get_product_or_raise("nope")

    def test_by_category(self, catalog):
        assert ids(catalog.by_category("produce")) == ["p-001", "p-004"]
        assert len(catalog.by_category("all")) == len(catalog)
        assert ids(catalog.by_category("gift-cards")) == ["p-007"]

    def test_stock_views(self, catalog):
        assert ids(catalog.out_of_stock()) == ["p-004"]
        assert "p-004" not in ids(catalog.in_stock())
        assert ids(catalog.low_stock()) == ["p-002"]
        assert ids(catalog.low_stock(threshold=30)) == ["p-002", "p-005"]

    def test_origin_and_price(self, catalog):
        assert ids(catalog.by_origin("USA")) == ["p-002", "p-005", "p-007"]
        assert ids(catalog.by_price_range(4, 6)) == ["p-002", "p-004"]

    def test_featured_and_similar(self, catalog):
        assert ids(catalog.featured()) == ["p-001", "p-007"]
        assert ids(catalog.similar("p-002")) == ["p-005", "p-007"]
        assert catalog.similar("missing") == []

    def test_filter_options(self, catalog):
        options = catalog.filter_options()
        assert options.categories == ["Bakery", "Gift Cards", "Pantry", "Produce"]
        assert options.origins == ["Ecuador", "Italy", "Mexico", "Thailand", "USA"]
        assert (options.price_range.min, options.price_range.max) == (2.49, 25.0)

    def test_empty_filter_options(self):
        options = Catalog([]).filter_options()
        assert options.categories == []
        assert (options.price_range.min, options.price_range.max) == (0, 100)


class TestLoadCatalog:
    def test_loads_json_file(self, tmp_path, product_records):
        path = tmp_path / "products.json"
        path.write_text(json.dumps(product_records))
        catalog = load_catalog(path)
        assert len(catalog) == len(product_records)

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogLoadError):
            load_catalog(tmp_path / "missing.json")

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "products.json"
        path.write_text("[{")
        with pytest.raises(CatalogLoadError):
            load_catalog(path)

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "products.json"
        path.write_text('{"id": "p-1"}')
        with pytest.raises(CatalogLoadError):
            load_catalog(path)

    def test_invalid_record(self, tmp_path):
        path = tmp_path / "products.json"
        path.write_text('[{"id": "p-1"}]')
        with pytest.raises(CatalogLoadError):
            load_catalog(path)

    @pytest.mark.parametrize("stock", ["null", '"lots"', "[]"])
    def test_bad_stock_value(self, tmp_path, stock):
        path = tmp_path / "products.json"
        path.write_text('[{"id": "1", "name": "Apple Juice", "category": "Drinks", "price": 3, "stock": %s}]' % stock)
        with pytest.raises(CatalogLoadError):
            load_catalog(path)


class TestShaping:
    def test_sort_by_price_desc(self, catalog):
        assert ids(sort_products(catalog.products, "price", "desc"))[:2] == ["p-007", "p-006"]

    def test_sort_unknown_falls_back_to_name(self, catalog):
        names = [p.name for p in sort_products(catalog.products, "colour")]
        assert names == sorted(names, key=str.lower)

    def test_no_sort_keeps_order(self, catalog):
        assert ids(sort_products(catalog.products, None)) == ids(catalog)

    def test_paginate(self, catalog):
        first = paginate(list(catalog), page=1, page_size=3)
        last = paginate(list(catalog), page=3, page_size=3)
        assert ids(first.products) == ["p-001", "p-002", "p-003"]
        assert first.has_more is True
        assert ids(last.products) == ["p-007"]
        assert last.has_more is False
        assert last.total == 7

    def test_page_size_is_clamped(self, catalog):
        page = paginate(list(catalog), page=1, page_size=10_000)
        assert page.page_size == 100

    def test_paginate_uses_given_settings(self, catalog):
        settings = Settings(default_page_size=4, max_page_size=5)
        assert paginate(list(catalog), settings=settings).page_size == 4
        assert paginate(list(catalog), page_size=50, settings=settings).page_size == 5
