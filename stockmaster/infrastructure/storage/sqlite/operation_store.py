"""SQLite implementation of operation storage."""

from collections.abc import Iterable
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

import aiosqlite

from stockmaster.config import get_logger
from stockmaster.core.entities.movement import StockMovement
from stockmaster.core.entities.operation import (
    EDITABLE_STATUSES,
    Operation,
    OperationFilters,
    OperationItem,
    OperationStatus,
    OperationType,
)
from stockmaster.core.exceptions import DatabaseError, DuplicateReferenceError
from stockmaster.core.interfaces.operation_store import IOperationStore, MovementBuilder
from stockmaster.core.interfaces.stock_ledger import IStockLedger
from stockmaster.core.services.reference_sequencer import next_reference
from stockmaster.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from stockmaster.infrastructure.storage.sqlite.stock_ledger import (
    SQLiteStockLedger,
    from_db_date,
    from_db_timestamp,
    placeholders,
    to_db_timestamp,
)

logger = get_logger(__name__)

LAST_REFERENCE_SQL = """
    SELECT reference FROM operations
    WHERE type = ?
    ORDER BY created_at DESC, rowid DESC
    LIMIT 1
"""


class SQLiteOperationStore(IOperationStore):
    """SQLite implementation of operation and operation item storage."""

    def __init__(self, ledger: IStockLedger | None = None):
        self._ledger = ledger or SQLiteStockLedger()

    async def create(self, operation: Operation) -> Operation:
        """
        Insert an operation and its items, allocating its reference.

        The write lock is held from reading the last reference until commit.
        """
        try:
            async with get_transaction(immediate=True) as conn:
                cursor = await conn.execute(LAST_REFERENCE_SQL, (operation.type.value,))
                row = await cursor.fetchone()
                operation.reference = next_reference(
                    operation.type, row["reference"] if row else None
                )

                now = datetime.now(UTC)
                operation.created_at = now
                operation.updated_at = now

                await conn.execute(
                    """
                    INSERT INTO operations (
                        id, type, status, reference,
                        warehouse_from_id, location_from_id,
                        warehouse_to_id, location_to_id,
                        schedule_date, notes, contact_name,
                        created_by_user_id, responsible_user_id,
                        created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        operation.id,
                        operation.type.value,
                        operation.status.value,
                        operation.reference,
                        operation.warehouse_from_id,
                        operation.location_from_id,
                        operation.warehouse_to_id,
                        operation.location_to_id,
                        operation.schedule_date.isoformat() if operation.schedule_date else None,
                        operation.notes,
                        operation.contact_name,
                        operation.created_by_user_id,
                        operation.responsible_user_id,
                        to_db_timestamp(operation.created_at),
                        to_db_timestamp(operation.updated_at),
                    ),
                )
                await self._insert_items(conn, operation)
        except aiosqlite.IntegrityError as e:
            if "operations.reference" in str(e):
                raise DuplicateReferenceError(operation.reference, operation.type.value) from e
            raise DatabaseError("create_operation", str(e)) from e

        logger.debug(
            "operation_inserted",
            operation_id=operation.id,
            reference=operation.reference,
        )
        return operation

    async def get(self, operation_id: str) -> Operation | None:
        """Get operation by ID, items included."""
        async with get_connection() as conn:
            return await self._fetch(conn, operation_id)

    async def list_operations(
        self,
        filters: OperationFilters | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Operation], int]:
        """List operations newest first with total matching count."""
        where, params = self._list_conditions(filters or OperationFilters())

        async with get_connection() as conn:
            cursor = await conn.execute(f"SELECT COUNT(*) FROM operations {where}", params)
            total = (await cursor.fetchone())[0]

            cursor = await conn.execute(
                f"""
                SELECT * FROM operations {where}
                ORDER BY created_at DESC, rowid DESC
                LIMIT ? OFFSET ?
                """,
                [*params, limit, offset],
            )
            rows = await cursor.fetchall()

            items_by_op = await self._load_items(conn, [row["id"] for row in rows])
            operations = [
                self._row_to_operation(row, items_by_op.get(row["id"], [])) for row in rows
            ]
            return operations, total

    async def update(
        self, operation: Operation, replace_items: bool = False
    ) -> Operation | None:
        """Save editable fields if the stored operation is still open."""
        operation.updated_at = datetime.now(UTC)
        open_statuses = sorted(s.value for s in EDITABLE_STATUSES)
        try:
            async with get_transaction(immediate=True) as conn:
                cursor = await conn.execute(
                    f"""
                    UPDATE operations SET
                        schedule_date = ?,
                        notes = ?,
                        contact_name = ?,
                        responsible_user_id = ?,
                        updated_at = ?
                    WHERE id = ? AND status IN ({placeholders(open_statuses)})
                    """,
                    (
                        operation.schedule_date.isoformat() if operation.schedule_date else None,
                        operation.notes,
                        operation.contact_name,
                        operation.responsible_user_id,
                        to_db_timestamp(operation.updated_at),
                        operation.id,
                        *open_statuses,
                    ),
                )
                if cursor.rowcount == 0:
                    return None

                if replace_items:
                    await conn.execute(
                        "DELETE FROM operation_items WHERE operation_id = ?", (operation.id,)
                    )
                    await self._insert_items(conn, operation)

                return await self._fetch(conn, operation.id)
        except aiosqlite.IntegrityError as e:
            raise DatabaseError("update_operation", str(e)) from e

    async def apply_transition(
        self,
        operation_id: str,
        expected_status: OperationStatus,
        new_status: OperationStatus,
        build_movements: MovementBuilder | None = None,
    ) -> tuple[Operation, list[StockMovement]] | None:
        """
        Compare-and-set the status and append movements in one transaction.

        The operation is re-read after BEGIN IMMEDIATE, so the movements are
        built from the items being committed and are stamped after the
        commit started.
        """
        async with get_transaction(immediate=True) as conn:
            locked = await self._fetch(conn, operation_id)
            if locked is None or locked.status != expected_status:
                logger.info(
                    "transition_precondition_failed",
                    operation_id=operation_id,
                    expected_status=expected_status.value,
                    stored_status=locked.status.value if locked else None,
                )
                return None

            movements = build_movements(locked) if build_movements else []
            await conn.execute(
                """
                UPDATE operations SET status = ?, updated_at = ?
                WHERE id = ? AND status = ?
                """,
                (
                    new_status.value,
                    to_db_timestamp(datetime.now(UTC)),
                    operation_id,
                    expected_status.value,
                ),
            )
            if movements:
                await self._ledger.append(conn, movements)

            return await self._fetch(conn, operation_id), movements

    async def get_last_reference(self, operation_type: OperationType) -> str | None:
        async with get_connection() as conn:
            cursor = await conn.execute(LAST_REFERENCE_SQL, (operation_type.value,))
            row = await cursor.fetchone()
            return row["reference"] if row else None

    async def count_operations(
        self,
        operation_type: OperationType,
        statuses: Iterable[OperationStatus] | None = None,
        location_ids: list[str] | None = None,
        exclude_statuses: Iterable[OperationStatus] | None = None,
    ) -> int:
        conditions = ["type = ?"]
        params: list[Any] = [operation_type.value]

        if statuses is not None:
            values = sorted(s.value for s in statuses)
            conditions.append(f"status IN ({placeholders(values)})")
            params.extend(values)
        if exclude_statuses is not None:
            values = sorted(s.value for s in exclude_statuses)
            conditions.append(f"status NOT IN ({placeholders(values)})")
            params.extend(values)
        if location_ids:
            marks = placeholders(location_ids)
            conditions.append(f"(location_from_id IN ({marks}) OR location_to_id IN ({marks}))")
            params.extend([*location_ids, *location_ids])

        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT COUNT(*) FROM operations WHERE {' AND '.join(conditions)}",
                params,
            )
            return (await cursor.fetchone())[0]

    async def _insert_items(self, conn: aiosqlite.Connection, operation: Operation) -> None:
        for item in operation.items:
            cursor = await conn.execute(
                """
                INSERT INTO operation_items (operation_id, product_id, quantity)
                VALUES (?, ?, ?)
                """,
                (operation.id, item.product_id, str(item.quantity)),
            )
            item.id = cursor.lastrowid
            item.operation_id = operation.id

    async def _fetch(self, conn: aiosqlite.Connection, operation_id: str) -> Operation | None:
        cursor = await conn.execute("SELECT * FROM operations WHERE id = ?", (operation_id,))
        row = await cursor.fetchone()
        if row is None:
            return None
        items = await self._load_items(conn, [operation_id])
        return self._row_to_operation(row, items.get(operation_id, []))

    async def _load_items(
        self, conn: aiosqlite.Connection, operation_ids: list[str]
    ) -> dict[str, list[OperationItem]]:
        if not operation_ids:
            return {}
        cursor = await conn.execute(
            f"""
            SELECT * FROM operation_items
            WHERE operation_id IN ({placeholders(operation_ids)})
            ORDER BY id
            """,
            operation_ids,
        )
        grouped: dict[str, list[OperationItem]] = {}
        for row in await cursor.fetchall():
            grouped.setdefault(row["operation_id"], []).append(
                OperationItem(
                    id=row["id"],
                    operation_id=row["operation_id"],
                    product_id=row["product_id"],
                    quantity=Decimal(row["quantity"]),
                )
            )
        return grouped

    @staticmethod
    def _list_conditions(filters: OperationFilters) -> tuple[str, list[Any]]:
        conditions = []
        params: list[Any] = []

        if filters.type is not None:
            conditions.append("type = ?")
            params.append(filters.type.value)
        if filters.status is not None:
            conditions.append("status = ?")
            params.append(filters.status.value)
        if filters.warehouse_id:
            conditions.append("(warehouse_from_id = ? OR warehouse_to_id = ?)")
            params.extend([filters.warehouse_id, filters.warehouse_id])
        if filters.location_id:
            conditions.append("(location_from_id = ? OR location_to_id = ?)")
            params.extend([filters.location_id, filters.location_id])
        if filters.reference:
            conditions.append("LOWER(reference) LIKE ?")
            params.append(f"%{filters.reference.lower()}%")
        if filters.contact_name:
            conditions.append("LOWER(contact_name) LIKE ?")
            params.append(f"%{filters.contact_name.lower()}%")
        if filters.date_from is not None:
            conditions.append("schedule_date >= ?")
            params.append(filters.date_from.isoformat())
        if filters.date_to is not None:
            conditions.append("schedule_date <= ?")
            params.append(filters.date_to.isoformat())

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        return where, params

    @staticmethod
    def _row_to_operation(row: aiosqlite.Row, items: list[OperationItem]) -> Operation:
        """Convert a database row to an Operation entity."""
        return Operation(
            id=row["id"],
            type=OperationType(row["type"]),
            status=OperationStatus(row["status"]),
            reference=row["reference"],
            warehouse_from_id=row["warehouse_from_id"],
            location_from_id=row["location_from_id"],
            warehouse_to_id=row["warehouse_to_id"],
            location_to_id=row["location_to_id"],
            schedule_date=from_db_date(row["schedule_date"]),
            notes=row["notes"],
            contact_name=row["contact_name"],
            created_by_user_id=row["created_by_user_id"],
            responsible_user_id=row["responsible_user_id"],
            items=items,
            created_at=from_db_timestamp(row["created_at"]),
            updated_at=from_db_timestamp(row["updated_at"]),
        )
