"""Tests for OperationLifecycleService with mocked stores."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from stockmaster.core.entities import (
    CountedItem,
    Location,
    Operation,
    OperationFilters,
    OperationItem,
    OperationStatus,
    OperationType,
    OperationUpdate,
    TransitionAction,
)
from stockmaster.core.entities.events import EventType
from stockmaster.core.exceptions import (
    EmptyItemsError,
    InvalidQuantityError,
    InvalidTransitionError,
    LocationNotFoundError,
    OperationLockedError,
    OperationNotFoundError,
    ProductNotFoundError,
    SameLocationTransferError,
    ValidationError,
    WarehouseNotFoundError,
)
from stockmaster.core.services import OperationLifecycleService

LOCATIONS = {
    "loc-a": Location(id="loc-a", warehouse_id="wh-1", name="Stock", short_code="STK"),
    "loc-b": Location(id="loc-b", warehouse_id="wh-1", name="Shelf", short_code="SHA"),
}


def _assign_reference(operation: Operation) -> Operation:
    operation.reference = "WH/TEST/0001"
    return operation


@pytest.fixture
def operation_store():
    store = AsyncMock()
    store.create.side_effect = _assign_reference
    return store


@pytest.fixture
def catalog():
    store = AsyncMock()

    async def get_location(location_id):
        return LOCATIONS.get(location_id)

    store.get_location.side_effect = get_location
    store.find_missing_products.return_value = []
    return store


@pytest.fixture
def aggregator():
    agg = AsyncMock()
    agg.stock_at.return_value = Decimal("25")
    return agg


@pytest.fixture
def publisher():
    return MagicMock()


@pytest.fixture
def service(operation_store, catalog, aggregator, publisher):
    return OperationLifecycleService(
        operation_store, catalog, aggregator, publisher=publisher, max_limit=50
    )


def items(*pairs):
    return [OperationItem(product_id=p, quantity=Decimal(q)) for p, q in pairs]


def published_types(publisher) -> list[list[EventType]]:
    return [[e.type for e in call.args[0]] for call in publisher.publish.call_args_list]


class TestCreate:
    async def test_receipt_defaults(self, service, operation_store, publisher):
        op = await service.create_receipt(
            location_to_id="loc-a",
            items=items(("p-1", "25")),
            created_by_user_id="u-1",
            contact_name="Acme Supplies",
        )

        assert op.type == OperationType.RECEIPT
        assert op.status == OperationStatus.DRAFT
        assert op.reference == "WH/TEST/0001"
        assert op.warehouse_to_id == "wh-1"
        assert op.responsible_user_id == "u-1"
        assert op.created_by_user_id == "u-1"
        operation_store.create.assert_awaited_once()
        assert published_types(publisher) == [[EventType.OPERATION_CREATED]]

    async def test_receipt_unknown_destination(self, service, operation_store):
        with pytest.raises(LocationNotFoundError) as exc_info:
            await service.create_receipt(
                location_to_id="loc-x", items=items(("p-1", "1")), created_by_user_id="u-1"
            )
        assert exc_info.value.details["role"] == "destination"
        operation_store.create.assert_not_called()

    async def test_warehouse_override_must_exist(self, service, catalog):
        catalog.get_warehouse.return_value = None
        with pytest.raises(WarehouseNotFoundError):
            await service.create_delivery(
                location_from_id="loc-a",
                warehouse_from_id="wh-9",
                items=items(("p-1", "1")),
                created_by_user_id="u-1",
            )

    async def test_unknown_product(self, service, catalog, operation_store):
        catalog.find_missing_products.return_value = ["p-9"]
        with pytest.raises(ProductNotFoundError):
            await service.create_delivery(
                location_from_id="loc-a",
                items=items(("p-1", "1"), ("p-9", "1")),
                created_by_user_id="u-1",
            )
        operation_store.create.assert_not_called()

    async def test_empty_items(self, service):
        with pytest.raises(EmptyItemsError):
            await service.create_receipt(location_to_id="loc-a", items=[], created_by_user_id="u-1")

    async def test_non_positive_quantity(self, service):
        with pytest.raises(InvalidQuantityError):
            await service.create_receipt(
                location_to_id="loc-a", items=items(("p-1", "0")), created_by_user_id="u-1"
            )

    async def test_transfer_same_location(self, service, operation_store):
        with pytest.raises(SameLocationTransferError):
            await service.create_transfer(
                location_from_id="loc-a",
                location_to_id="loc-a",
                items=items(("p-1", "1")),
                created_by_user_id="u-1",
            )
        operation_store.create.assert_not_called()

    async def test_transfer_sets_both_sides(self, service):
        op = await service.create_transfer(
            location_from_id="loc-a",
            location_to_id="loc-b",
            items=items(("p-1", "5")),
            created_by_user_id="u-1",
            responsible_user_id="u-2",
        )
        assert (op.location_from_id, op.location_to_id) == ("loc-a", "loc-b")
        assert (op.warehouse_from_id, op.warehouse_to_id) == ("wh-1", "wh-1")
        assert op.responsible_user_id == "u-2"


class TestCreateAdjustment:
    @pytest.mark.parametrize("counted,expected", [("20", "5"), ("30", "5"), ("25", "0"), ("0", "25")])
    async def test_stores_absolute_difference(self, service, aggregator, counted, expected):
        op = await service.create_adjustment(
            location_id="loc-a",
            items=[CountedItem(product_id="p-1", counted_quantity=Decimal(counted))],
            created_by_user_id="u-1",
        )
        assert op.type == OperationType.ADJUSTMENT
        assert op.location_to_id == "loc-a"
        assert op.items[0].quantity == Decimal(expected)
        aggregator.stock_at.assert_awaited_with("p-1", location_id="loc-a")

    async def test_negative_count_rejected(self, service):
        with pytest.raises(InvalidQuantityError):
            await service.create_adjustment(
                location_id="loc-a",
                items=[CountedItem(product_id="p-1", counted_quantity=Decimal("-1"))],
                created_by_user_id="u-1",
            )

    async def test_unknown_count_site(self, service):
        with pytest.raises(LocationNotFoundError) as exc_info:
            await service.create_adjustment(
                location_id="loc-x",
                items=[CountedItem(product_id="p-1", counted_quantity=Decimal("1"))],
                created_by_user_id="u-1",
            )
        assert exc_info.value.details["role"] == "count"


def receipt(status=OperationStatus.DRAFT) -> Operation:
    return Operation(
        id="op-1",
        type=OperationType.RECEIPT,
        status=status,
        reference="WH/IN/0001",
        warehouse_to_id="wh-1",
        location_to_id="loc-a",
        items=items(("p-1", "10"), ("p-2", "4"), ("p-1", "1")),
    )


async def commit_with_builder(operation_id, expected, new_status, build_movements=None):
    """Stand-in store commit: builds from the stored operation, then moves it on."""
    stored = receipt() if operation_id == "op-1" else None
    if stored is None:
        stored = Operation(
            id=operation_id,
            type=OperationType.DELIVERY,
            location_from_id="loc-a",
            reference="WH/OUT/0001",
            items=items(("p-1", "3")),
        )
    movements = build_movements(stored) if build_movements else []
    return stored.model_copy(update={"status": new_status}), movements


class TestTransition:
    async def test_mark_done_commits_movements(self, service, operation_store, publisher):
        operation_store.get.return_value = receipt()
        operation_store.apply_transition.side_effect = commit_with_builder

        result = await service.transition("op-1", TransitionAction.MARK_DONE)

        assert result.status == OperationStatus.DONE
        op_id, expected, new, builder = operation_store.apply_transition.await_args.args
        assert (op_id, expected, new) == ("op-1", OperationStatus.DRAFT, OperationStatus.DONE)
        movements = builder(receipt())
        assert len(movements) == 3
        assert all(m.location_to_id == "loc-a" for m in movements)

        [batch] = publisher.publish.call_args_list
        events = batch.args[0]
        assert events[0].type == EventType.OPERATION_STATUS_CHANGED
        assert events[0].payload["oldStatus"] == "DRAFT"
        # one level change per distinct product at the destination
        level = [e.payload["productId"] for e in events if e.type == EventType.STOCK_LEVEL_CHANGED]
        assert level == ["p-1", "p-2"]

    async def test_mark_ready_writes_no_movements(self, service, operation_store, publisher):
        operation_store.get.return_value = receipt()
        operation_store.apply_transition.side_effect = commit_with_builder

        await service.transition("op-1", TransitionAction.MARK_READY)

        builder = operation_store.apply_transition.await_args.args[3]
        assert builder(receipt()) == []
        assert published_types(publisher) == [[EventType.OPERATION_STATUS_CHANGED]]

    async def test_delivery_done_has_no_level_events(self, service, operation_store, publisher):
        delivery = Operation(
            id="op-2",
            type=OperationType.DELIVERY,
            location_from_id="loc-a",
            reference="WH/OUT/0001",
            items=items(("p-1", "3")),
        )
        operation_store.get.return_value = delivery
        operation_store.apply_transition.side_effect = commit_with_builder

        await service.transition("op-2", TransitionAction.MARK_DONE)

        assert published_types(publisher) == [[EventType.OPERATION_STATUS_CHANGED]]

    async def test_invalid_transition_writes_nothing(self, service, operation_store, publisher):
        operation_store.get.return_value = receipt(OperationStatus.DONE)

        with pytest.raises(InvalidTransitionError):
            await service.transition("op-1", TransitionAction.CANCEL)

        operation_store.apply_transition.assert_not_called()
        publisher.publish.assert_not_called()

    async def test_lost_race_raises(self, service, operation_store, publisher):
        operation_store.get.side_effect = [receipt(), receipt(OperationStatus.DONE)]
        operation_store.apply_transition.return_value = None

        with pytest.raises(InvalidTransitionError) as exc_info:
            await service.transition("op-1", TransitionAction.MARK_DONE)

        assert exc_info.value.details["status"] == "DONE"
        publisher.publish.assert_not_called()

    async def test_lost_race_to_compatible_status(self, service, operation_store):
        # Another caller moved DRAFT -> READY; mark_done is still legal but this
        # attempt was based on a stale read and is refused
        operation_store.get.side_effect = [receipt(), receipt(OperationStatus.READY)]
        operation_store.apply_transition.return_value = None

        with pytest.raises(InvalidTransitionError, match="concurrently"):
            await service.transition("op-1", TransitionAction.MARK_DONE)

    async def test_unknown_operation(self, service, operation_store):
        operation_store.get.return_value = None
        with pytest.raises(OperationNotFoundError):
            await service.transition("nope", TransitionAction.CANCEL)


class TestUpdate:
    async def test_partial_update(self, service, operation_store, publisher):
        original = receipt()
        original.contact_name = "Acme"
        operation_store.get.return_value = original
        operation_store.update.side_effect = lambda op, replace_items=False: op

        saved = await service.update_operation("op-1", OperationUpdate(notes="Dock 3"))

        assert saved.notes == "Dock 3"
        assert saved.contact_name == "Acme"
        assert operation_store.update.await_args.kwargs == {"replace_items": False}
        assert published_types(publisher) == [[EventType.OPERATION_UPDATED]]

    async def test_replace_items(self, service, operation_store):
        operation_store.get.return_value = receipt()
        operation_store.update.side_effect = lambda op, replace_items=False: op

        saved = await service.update_operation(
            "op-1", OperationUpdate(items=items(("p-3", "7")))
        )

        assert [(i.product_id, i.quantity) for i in saved.items] == [("p-3", Decimal("7"))]
        assert operation_store.update.await_args.kwargs == {"replace_items": True}

    @pytest.mark.parametrize(
        "status", [OperationStatus.READY, OperationStatus.DONE, OperationStatus.CANCELED]
    )
    async def test_locked(self, service, operation_store, status):
        operation_store.get.return_value = receipt(status)
        with pytest.raises(OperationLockedError):
            await service.update_operation("op-1", OperationUpdate(notes="x"))
        operation_store.update.assert_not_called()

    async def test_locked_between_read_and_write(self, service, operation_store):
        operation_store.get.side_effect = [receipt(), receipt(OperationStatus.READY)]
        operation_store.update.return_value = None
        with pytest.raises(OperationLockedError):
            await service.update_operation("op-1", OperationUpdate(notes="x"))

    async def test_adjustment_items_are_counts(self, service, operation_store, aggregator):
        adjustment = Operation(
            id="op-3",
            type=OperationType.ADJUSTMENT,
            location_to_id="loc-a",
            items=items(("p-1", "5")),
        )
        operation_store.get.return_value = adjustment
        operation_store.update.side_effect = lambda op, replace_items=False: op

        with pytest.raises(ValidationError):
            await service.update_operation("op-3", OperationUpdate(items=items(("p-1", "1"))))

        aggregator.stock_at.return_value = Decimal("12")
        saved = await service.update_operation(
            "op-3",
            OperationUpdate(counted_items=[CountedItem(product_id="p-1", counted_quantity=Decimal("9"))]),
        )
        assert saved.items[0].quantity == Decimal("3")

    async def test_counts_rejected_for_other_types(self, service, operation_store):
        operation_store.get.return_value = receipt()
        with pytest.raises(ValidationError):
            await service.update_operation(
                "op-1",
                OperationUpdate(counted_items=[CountedItem(product_id="p-1", counted_quantity=Decimal("1"))]),
            )


class TestList:
    async def test_clamps_limit(self, service, operation_store):
        operation_store.list_operations.return_value = ([receipt()], 61)
        filters = OperationFilters(type=OperationType.RECEIPT)

        page = await service.list_operations(filters, page=2, limit=1000)

        operation_store.list_operations.assert_awaited_once_with(filters, limit=50, offset=50)
        assert page.total == 61
        assert page.has_more is True
