"""Tests for SQLiteStockLedger."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import aiosqlite
import pytest

from stockmaster.core.entities.movement import MoveHistoryFilters, MovementType, StockMovement
from stockmaster.core.entities.operation import (
    Operation,
    OperationItem,
    OperationStatus,
    OperationType,
)
from stockmaster.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from stockmaster.infrastructure.storage.sqlite.operation_store import SQLiteOperationStore
from stockmaster.infrastructure.storage.sqlite.stock_ledger import (
    SQLiteStockLedger,
    from_db_timestamp,
    to_db_timestamp,
)

T0 = datetime(2026, 2, 1, 9, 0, tzinfo=UTC)


@pytest.fixture
def ledger(db):
    return SQLiteStockLedger()


@pytest.fixture
def operations(ledger):
    return SQLiteOperationStore(ledger=ledger)


async def done_operation(operations, op_type, movement_fields):
    """Create an operation, mark it DONE and append its movements."""
    kwargs = {}
    if op_type == OperationType.RECEIPT:
        kwargs = {"warehouse_to_id": "wh-main", "location_to_id": "loc-stock"}
    elif op_type == OperationType.DELIVERY:
        kwargs = {"warehouse_from_id": "wh-main", "location_from_id": "loc-stock"}
    else:
        kwargs = {
            "warehouse_from_id": "wh-main",
            "location_from_id": "loc-stock",
            "warehouse_to_id": "wh-main",
            "location_to_id": "loc-shelf",
        }
    operation = await operations.create(
        Operation(
            type=op_type,
            items=[OperationItem(product_id="prod-bolt", quantity=Decimal("1"))],
            **kwargs,
        )
    )
    movements = [
        StockMovement(operation_id=operation.id, movement_type=MovementType(op_type.value), **fields)
        for fields in movement_fields
    ]
    await operations.apply_transition(
        operation.id, OperationStatus.DRAFT, OperationStatus.DONE, lambda locked: movements
    )
    return operation


@pytest.fixture
async def history(operations):
    """Receipt of 25, transfer of 5 to the shelf, delivery of 3 from stock."""
    receipt = await done_operation(
        operations,
        OperationType.RECEIPT,
        [
            {
                "product_id": "prod-bolt",
                "location_to_id": "loc-stock",
                "quantity_delta": Decimal("25"),
                "created_at": T0,
            }
        ],
    )
    transfer = await done_operation(
        operations,
        OperationType.TRANSFER,
        [
            {
                "product_id": "prod-bolt",
                "location_from_id": "loc-stock",
                "location_to_id": "loc-shelf",
                "quantity_delta": Decimal("5"),
                "created_at": T0 + timedelta(hours=1),
            }
        ],
    )
    delivery = await done_operation(
        operations,
        OperationType.DELIVERY,
        [
            {
                "product_id": "prod-nut",
                "location_from_id": "loc-stock",
                "quantity_delta": Decimal("3"),
                "created_at": T0 + timedelta(hours=2),
            }
        ],
    )
    return receipt, transfer, delivery


class TestTimestamps:
    def test_naive_values_are_utc(self):
        assert to_db_timestamp(datetime(2026, 1, 1)) == "2026-01-01T00:00:00.000000+00:00"

    def test_round_trip(self):
        assert from_db_timestamp(to_db_timestamp(T0)) == T0


class TestAppend:
    async def test_assigns_ids(self, history, ledger):
        receipt, _, _ = history
        [movement] = await ledger.list_for_operation(receipt.id)
        assert movement.id is not None
        assert movement.quantity_delta == Decimal("25")
        assert movement.created_at == T0

    async def test_rows_cannot_be_updated(self, history):
        async with get_connection() as conn:
            with pytest.raises(aiosqlite.IntegrityError, match="append-only"):
                await conn.execute("UPDATE stock_movements SET quantity_delta = '0'")
            await conn.rollback()

    async def test_append_rolls_back_with_caller_transaction(self, history, ledger):
        receipt, _, _ = history
        movement = StockMovement(
            product_id="prod-bolt",
            location_to_id="loc-stock",
            quantity_delta=Decimal("1"),
            movement_type=MovementType.RECEIPT,
            operation_id=receipt.id,
        )

        with pytest.raises(RuntimeError):
            async with get_transaction() as conn:
                await ledger.append(conn, [movement])
                raise RuntimeError("abort")

        assert len(await ledger.list_for_operation(receipt.id)) == 1


class TestQueries:
    async def test_list_movements_oldest_first(self, history, ledger):
        movements = await ledger.list_movements()
        assert [m.movement_type for m in movements] == [
            MovementType.RECEIPT,
            MovementType.TRANSFER,
            MovementType.DELIVERY,
        ]

    async def test_list_movements_by_product_and_location(self, history, ledger):
        bolts = await ledger.list_movements("prod-bolt")
        assert len(bolts) == 2

        shelf = await ledger.list_movements(location_ids=["loc-shelf"])
        assert [m.movement_type for m in shelf] == [MovementType.TRANSFER]

    async def test_distinct_product_ids(self, history, ledger):
        assert await ledger.distinct_product_ids() == ["prod-bolt", "prod-nut"]
        assert await ledger.distinct_product_ids(["loc-shelf"]) == ["prod-bolt"]
        assert await ledger.distinct_product_ids(["loc-east"]) == []

    async def test_list_details_joins_labels(self, history, ledger):
        details = await ledger.list_details("prod-bolt")

        receipt, transfer = details
        assert receipt.reference == "WH/IN/0001"
        assert receipt.location_to_name == "Stock"
        assert receipt.warehouse_to_name == "Main Warehouse"
        assert receipt.location_from_id is None
        assert transfer.location_from_code == "STK"
        assert transfer.location_to_code == "SHA"
        assert transfer.operation_status == "DONE"


class TestQueryHistory:
    async def test_newest_first(self, history, ledger):
        details, total = await ledger.query_history()
        assert total == 3
        assert [d.reference for d in details] == ["WH/OUT/0001", "WH/INT/0001", "WH/IN/0001"]

    async def test_paging(self, history, ledger):
        details, total = await ledger.query_history(limit=1, offset=1)
        assert total == 3
        assert [d.reference for d in details] == ["WH/INT/0001"]

    @pytest.mark.parametrize(
        "filters,expected",
        [
            (MoveHistoryFilters(movement_type=MovementType.RECEIPT), ["WH/IN/0001"]),
            (MoveHistoryFilters(reference="int/"), ["WH/INT/0001"]),
            (MoveHistoryFilters(product_id="prod-nut"), ["WH/OUT/0001"]),
            (MoveHistoryFilters(location_id="loc-shelf"), ["WH/INT/0001"]),
            (MoveHistoryFilters(status="DONE", warehouse_id="wh-east"), []),
            (
                MoveHistoryFilters(date_from=T0 + timedelta(minutes=30)),
                ["WH/OUT/0001", "WH/INT/0001"],
            ),
            (
                MoveHistoryFilters(date_to=T0 + timedelta(minutes=30)),
                ["WH/IN/0001"],
            ),
        ],
    )
    async def test_filters(self, history, ledger, filters, expected):
        details, total = await ledger.query_history(filters)
        assert [d.reference for d in details] == expected
        assert total == len(expected)


class TestDeleteForOperation:
    async def test_removes_operation_movements(self, history, ledger):
        receipt, _, _ = history
        assert await ledger.delete_for_operation(receipt.id) == 1
        assert await ledger.list_for_operation(receipt.id) == []
        assert len(await ledger.list_movements()) == 2
