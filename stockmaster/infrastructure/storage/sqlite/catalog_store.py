"""SQLite read access to the warehouse, location and product catalog."""

import aiosqlite

from stockmaster.core.entities.catalog import Location, Product, ProductCategory, Warehouse
from stockmaster.core.interfaces.catalog_store import ICatalogStore
from stockmaster.infrastructure.storage.sqlite.connection import get_connection
from stockmaster.infrastructure.storage.sqlite.stock_ledger import placeholders


class SQLiteCatalogStore(ICatalogStore):
    """Read-only view of the reference catalog tables."""

    async def get_warehouse(self, warehouse_id: str) -> Warehouse | None:
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM warehouses WHERE id = ?", (warehouse_id,))
            row = await cursor.fetchone()
            return self._row_to_warehouse(row) if row else None

    async def get_location(self, location_id: str) -> Location | None:
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM locations WHERE id = ?", (location_id,))
            row = await cursor.fetchone()
            return self._row_to_location(row) if row else None

    async def get_product(self, product_id: str) -> Product | None:
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM products WHERE id = ?", (product_id,))
            row = await cursor.fetchone()
            return self._row_to_product(row) if row else None

    async def find_missing_products(self, product_ids: list[str]) -> list[str]:
        """Return the IDs from product_ids with no catalog row, in input order."""
        if not product_ids:
            return []
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT id FROM products WHERE id IN ({placeholders(product_ids)})",
                product_ids,
            )
            found = {row[0] for row in await cursor.fetchall()}
        return [pid for pid in product_ids if pid not in found]

    async def list_warehouses(self, active_only: bool = True) -> list[Warehouse]:
        where = "WHERE is_active = 1" if active_only else ""
        async with get_connection() as conn:
            cursor = await conn.execute(f"SELECT * FROM warehouses {where} ORDER BY name")
            return [self._row_to_warehouse(row) for row in await cursor.fetchall()]

    async def list_locations(
        self, warehouse_id: str | None = None, active_only: bool = False
    ) -> list[Location]:
        conditions = []
        params: list[str] = []
        if warehouse_id is not None:
            conditions.append("warehouse_id = ?")
            params.append(warehouse_id)
        if active_only:
            conditions.append("is_active = 1")
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT * FROM locations {where} ORDER BY warehouse_id, short_code", params
            )
            return [self._row_to_location(row) for row in await cursor.fetchall()]

    async def list_categories(self) -> list[ProductCategory]:
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT id, name FROM product_categories ORDER BY name")
            return [
                ProductCategory(id=row["id"], name=row["name"]) for row in await cursor.fetchall()
            ]

    async def list_products(
        self, category_id: str | None = None, active_only: bool = True
    ) -> list[Product]:
        conditions = []
        params: list[str] = []
        if category_id is not None:
            conditions.append("category_id = ?")
            params.append(category_id)
        if active_only:
            conditions.append("is_active = 1")
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        async with get_connection() as conn:
            cursor = await conn.execute(f"SELECT * FROM products {where} ORDER BY name", params)
            return [self._row_to_product(row) for row in await cursor.fetchall()]

    async def list_reorder_products(self) -> list[Product]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM products
                WHERE is_active = 1 AND reorder_level > 0
                ORDER BY name
                """
            )
            return [self._row_to_product(row) for row in await cursor.fetchall()]

    @staticmethod
    def _row_to_warehouse(row: aiosqlite.Row) -> Warehouse:
        return Warehouse(
            id=row["id"],
            name=row["name"],
            short_code=row["short_code"],
            is_active=bool(row["is_active"]),
        )

    @staticmethod
    def _row_to_location(row: aiosqlite.Row) -> Location:
        return Location(
            id=row["id"],
            warehouse_id=row["warehouse_id"],
            name=row["name"],
            short_code=row["short_code"],
            is_active=bool(row["is_active"]),
        )

    @staticmethod
    def _row_to_product(row: aiosqlite.Row) -> Product:
        return Product(
            id=row["id"],
            name=row["name"],
            sku=row["sku"],
            unit_of_measure=row["unit_of_measure"],
            category_id=row["category_id"],
            reorder_level=row["reorder_level"],
            is_active=bool(row["is_active"]),
        )
