"""Tests for SQLiteCatalogStore."""

import pytest

from stockmaster.infrastructure.storage.sqlite.catalog_store import SQLiteCatalogStore


@pytest.fixture
def catalog(db):
    return SQLiteCatalogStore()


class TestLookups:
    async def test_get_warehouse(self, catalog):
        warehouse = await catalog.get_warehouse("wh-main")
        assert warehouse.short_code == "WH"
        assert warehouse.is_active is True
        assert await catalog.get_warehouse("missing") is None

    async def test_get_location(self, catalog):
        location = await catalog.get_location("loc-shelf")
        assert location.warehouse_id == "wh-main"
        assert location.name == "Shelf A"

    async def test_get_product(self, catalog):
        product = await catalog.get_product("prod-gear")
        assert product.sku == "GR-40"
        assert product.reorder_level == 5
        assert await catalog.get_product("missing") is None

    async def test_find_missing_products(self, catalog):
        assert await catalog.find_missing_products(["prod-bolt", "x", "prod-nut", "y"]) == [
            "x",
            "y",
        ]
        assert await catalog.find_missing_products([]) == []


class TestListings:
    async def test_active_warehouses_by_name(self, catalog):
        names = [w.name for w in await catalog.list_warehouses()]
        assert names == ["East Depot", "Main Warehouse"]

    async def test_all_warehouses(self, catalog):
        assert len(await catalog.list_warehouses(active_only=False)) == 3

    async def test_locations_for_warehouse(self, catalog):
        locations = await catalog.list_locations("wh-main")
        assert [loc.id for loc in locations] == ["loc-shelf", "loc-stock"]

    async def test_all_locations(self, catalog):
        assert len(await catalog.list_locations()) == 3

    async def test_reorder_products_skip_zero_level(self, catalog):
        products = await catalog.list_reorder_products()
        assert [p.id for p in products] == ["prod-bolt", "prod-gear"]

    async def test_categories_by_name(self, catalog):
        categories = await catalog.list_categories()
        assert [c.name for c in categories] == ["Drive Parts", "Fasteners", "Packaging"]

    async def test_products_in_category(self, catalog):
        products = await catalog.list_products(category_id="cat-fasteners")
        assert [p.id for p in products] == ["prod-bolt", "prod-nut"]
        assert {p.category_id for p in products} == {"cat-fasteners"}

    async def test_all_active_products(self, catalog):
        assert len(await catalog.list_products()) == 3
