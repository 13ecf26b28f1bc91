"""SQLite implementation of the append-only stock ledger."""

from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any

import aiosqlite

from stockmaster.config import get_logger
from stockmaster.core.entities.movement import (
    MoveHistoryFilters,
    MovementDetail,
    MovementType,
    StockMovement,
)
from stockmaster.core.interfaces.stock_ledger import IStockLedger
from stockmaster.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)

DETAIL_SELECT = """
    SELECT
        m.id, m.product_id, m.movement_type, m.quantity_delta, m.created_at,
        m.location_from_id,
        lf.name AS location_from_name,
        lf.short_code AS location_from_code,
        lf.warehouse_id AS warehouse_from_id,
        wf.name AS warehouse_from_name,
        m.location_to_id,
        lt.name AS location_to_name,
        lt.short_code AS location_to_code,
        lt.warehouse_id AS warehouse_to_id,
        wt.name AS warehouse_to_name,
        m.operation_id,
        o.reference,
        o.status AS operation_status,
        o.schedule_date,
        o.contact_name
    FROM stock_movements m
    JOIN operations o ON o.id = m.operation_id
    LEFT JOIN locations lf ON lf.id = m.location_from_id
    LEFT JOIN warehouses wf ON wf.id = lf.warehouse_id
    LEFT JOIN locations lt ON lt.id = m.location_to_id
    LEFT JOIN warehouses wt ON wt.id = lt.warehouse_id
"""


def to_db_timestamp(value: datetime) -> str:
    """UTC ISO-8601 with fixed precision, so text order matches time order."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="microseconds")


def from_db_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def from_db_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def placeholders(values: list[Any]) -> str:
    return ", ".join("?" for _ in values)


def touches_locations(location_ids: list[str], alias: str = "") -> tuple[str, list[Any]]:
    """SQL predicate: movement enters or leaves any of location_ids."""
    marks = placeholders(location_ids)
    clause = f"({alias}location_from_id IN ({marks}) OR {alias}location_to_id IN ({marks}))"
    return clause, [*location_ids, *location_ids]


class SQLiteStockLedger(IStockLedger):
    """Stock movements table. Rows are inserted once and never updated."""

    async def append(
        self, conn: aiosqlite.Connection, movements: list[StockMovement]
    ) -> list[StockMovement]:
        """Insert movements on an open transaction owned by the caller."""
        for movement in movements:
            cursor = await conn.execute(
                """
                INSERT INTO stock_movements (
                    product_id, location_from_id, location_to_id,
                    quantity_delta, movement_type, operation_id, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    movement.product_id,
                    movement.location_from_id,
                    movement.location_to_id,
                    str(movement.quantity_delta),
                    movement.movement_type.value,
                    movement.operation_id,
                    to_db_timestamp(movement.created_at),
                ),
            )
            movement.id = cursor.lastrowid

        if movements:
            logger.info(
                "movements_appended",
                operation_id=movements[0].operation_id,
                count=len(movements),
            )
        return movements

    async def list_movements(
        self,
        product_id: str | None = None,
        location_ids: list[str] | None = None,
    ) -> list[StockMovement]:
        """Movements oldest first, optionally for one product and/or touching locations."""
        conditions = []
        params: list[Any] = []
        if product_id is not None:
            conditions.append("product_id = ?")
            params.append(product_id)
        if location_ids:
            clause, values = touches_locations(location_ids)
            conditions.append(clause)
            params.extend(values)

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT * FROM stock_movements {where} ORDER BY created_at, id",
                params,
            )
            rows = await cursor.fetchall()
            return [self._row_to_movement(row) for row in rows]

    async def list_for_operation(self, operation_id: str) -> list[StockMovement]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM stock_movements WHERE operation_id = ? ORDER BY id",
                (operation_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_movement(row) for row in rows]

    async def list_details(self, product_id: str) -> list[MovementDetail]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"{DETAIL_SELECT} WHERE m.product_id = ? ORDER BY m.created_at, m.id",
                (product_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_detail(row) for row in rows]

    async def query_history(
        self,
        filters: MoveHistoryFilters | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[MovementDetail], int]:
        """Filtered movement history newest first."""
        where, params = self._history_conditions(filters or MoveHistoryFilters())

        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT COUNT(*) FROM stock_movements m
                JOIN operations o ON o.id = m.operation_id
                {where}
                """,
                params,
            )
            total = (await cursor.fetchone())[0]

            cursor = await conn.execute(
                f"{DETAIL_SELECT} {where} ORDER BY m.created_at DESC, m.id DESC LIMIT ? OFFSET ?",
                [*params, limit, offset],
            )
            rows = await cursor.fetchall()
            return [self._row_to_detail(row) for row in rows], total

    async def distinct_product_ids(self, location_ids: list[str] | None = None) -> list[str]:
        where = ""
        params: list[Any] = []
        if location_ids:
            clause, params = touches_locations(location_ids)
            where = f"WHERE {clause}"
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT DISTINCT product_id FROM stock_movements {where} ORDER BY product_id",
                params,
            )
            return [row[0] for row in await cursor.fetchall()]

    async def delete_for_operation(self, operation_id: str) -> int:
        async with get_transaction() as conn:
            cursor = await conn.execute(
                "DELETE FROM stock_movements WHERE operation_id = ?", (operation_id,)
            )
            logger.warning(
                "movements_deleted", operation_id=operation_id, count=cursor.rowcount
            )
            return cursor.rowcount

    @staticmethod
    def _history_conditions(filters: MoveHistoryFilters) -> tuple[str, list[Any]]:
        conditions = []
        params: list[Any] = []

        if filters.movement_type is not None:
            conditions.append("m.movement_type = ?")
            params.append(filters.movement_type.value)
        if filters.status:
            conditions.append("o.status = ?")
            params.append(filters.status)
        if filters.reference:
            conditions.append("LOWER(o.reference) LIKE ?")
            params.append(f"%{filters.reference.lower()}%")
        if filters.warehouse_id:
            conditions.append("(o.warehouse_from_id = ? OR o.warehouse_to_id = ?)")
            params.extend([filters.warehouse_id, filters.warehouse_id])
        if filters.location_id:
            clause, values = touches_locations([filters.location_id], alias="m.")
            conditions.append(clause)
            params.extend(values)
        if filters.product_id:
            conditions.append("m.product_id = ?")
            params.append(filters.product_id)
        if filters.date_from is not None:
            conditions.append("m.created_at >= ?")
            params.append(to_db_timestamp(filters.date_from))
        if filters.date_to is not None:
            conditions.append("m.created_at <= ?")
            params.append(to_db_timestamp(filters.date_to))

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        return where, params

    @staticmethod
    def _row_to_movement(row: aiosqlite.Row) -> StockMovement:
        """Convert a database row to a StockMovement entity."""
        return StockMovement(
            id=row["id"],
            product_id=row["product_id"],
            location_from_id=row["location_from_id"],
            location_to_id=row["location_to_id"],
            quantity_delta=Decimal(row["quantity_delta"]),
            movement_type=MovementType(row["movement_type"]),
            operation_id=row["operation_id"],
            created_at=from_db_timestamp(row["created_at"]),
        )

    @staticmethod
    def _row_to_detail(row: aiosqlite.Row) -> MovementDetail:
        """Convert a joined history row to a MovementDetail."""
        return MovementDetail(
            id=row["id"],
            product_id=row["product_id"],
            movement_type=MovementType(row["movement_type"]),
            quantity_delta=Decimal(row["quantity_delta"]),
            created_at=from_db_timestamp(row["created_at"]),
            location_from_id=row["location_from_id"],
            location_from_name=row["location_from_name"],
            location_from_code=row["location_from_code"],
            warehouse_from_id=row["warehouse_from_id"],
            warehouse_from_name=row["warehouse_from_name"],
            location_to_id=row["location_to_id"],
            location_to_name=row["location_to_name"],
            location_to_code=row["location_to_code"],
            warehouse_to_id=row["warehouse_to_id"],
            warehouse_to_name=row["warehouse_to_name"],
            operation_id=row["operation_id"],
            reference=row["reference"],
            operation_status=row["operation_status"],
            schedule_date=from_db_date(row["schedule_date"]),
            contact_name=row["contact_name"],
        )
