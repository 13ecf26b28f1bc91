"""
Operation lifecycle.

Creates operations in DRAFT, edits them while they are still open and
drives them through the state machine. Entering DONE writes the ledger
movements in the same transaction as the status change; nothing else in
the application writes movements.
"""

from datetime import date
from decimal import Decimal

from stockmaster.config import get_logger
from stockmaster.core.entities import events
from stockmaster.core.entities.catalog import Location
from stockmaster.core.entities.events import DomainEvent
from stockmaster.core.entities.movement import StockMovement
from stockmaster.core.entities.operation import (
    CountedItem,
    Operation,
    OperationFilters,
    OperationItem,
    OperationType,
    OperationUpdate,
    TransitionAction,
)
from stockmaster.core.entities.pagination import Page, normalize_page
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
from stockmaster.core.interfaces.catalog_store import ICatalogStore
from stockmaster.core.interfaces.events import IEventPublisher
from stockmaster.core.interfaces.operation_store import IOperationStore
from stockmaster.core.services.state_machine import (
    movements_for_transition,
    resolve_transition,
)
from stockmaster.core.services.stock_aggregator import StockAggregator

logger = get_logger(__name__)


class OperationLifecycleService:
    """Create, edit and transition inventory operations."""

    def __init__(
        self,
        operation_store: IOperationStore,
        catalog: ICatalogStore,
        aggregator: StockAggregator,
        publisher: IEventPublisher | None = None,
        default_limit: int = 20,
        max_limit: int = 100,
    ) -> None:
        self._operations = operation_store
        self._catalog = catalog
        self._aggregator = aggregator
        self._publisher = publisher
        self._default_limit = default_limit
        self._max_limit = max_limit

    # -- creation -----------------------------------------------------------

    async def create_receipt(
        self,
        location_to_id: str,
        items: list[OperationItem],
        created_by_user_id: str,
        warehouse_to_id: str | None = None,
        responsible_user_id: str | None = None,
        schedule_date: date | None = None,
        notes: str | None = None,
        contact_name: str | None = None,
    ) -> Operation:
        """Goods arriving from a supplier into a destination location."""
        _check_items(items)
        location = await self._require_location(location_to_id, "destination")
        warehouse_id = await self._resolve_warehouse(warehouse_to_id, location)
        await self._require_products([i.product_id for i in items])

        operation = Operation(
            type=OperationType.RECEIPT,
            warehouse_to_id=warehouse_id,
            location_to_id=location_to_id,
            schedule_date=schedule_date,
            notes=notes,
            contact_name=contact_name,
            created_by_user_id=created_by_user_id,
            responsible_user_id=responsible_user_id or created_by_user_id,
            items=_fresh_items(items),
        )
        return await self._persist_new(operation)

    async def create_delivery(
        self,
        location_from_id: str,
        items: list[OperationItem],
        created_by_user_id: str,
        warehouse_from_id: str | None = None,
        responsible_user_id: str | None = None,
        schedule_date: date | None = None,
        notes: str | None = None,
        contact_name: str | None = None,
    ) -> Operation:
        """Goods leaving a source location for a customer."""
        _check_items(items)
        location = await self._require_location(location_from_id, "source")
        warehouse_id = await self._resolve_warehouse(warehouse_from_id, location)
        await self._require_products([i.product_id for i in items])

        operation = Operation(
            type=OperationType.DELIVERY,
            warehouse_from_id=warehouse_id,
            location_from_id=location_from_id,
            schedule_date=schedule_date,
            notes=notes,
            contact_name=contact_name,
            created_by_user_id=created_by_user_id,
            responsible_user_id=responsible_user_id or created_by_user_id,
            items=_fresh_items(items),
        )
        return await self._persist_new(operation)

    async def create_transfer(
        self,
        location_from_id: str,
        location_to_id: str,
        items: list[OperationItem],
        created_by_user_id: str,
        warehouse_from_id: str | None = None,
        warehouse_to_id: str | None = None,
        responsible_user_id: str | None = None,
        schedule_date: date | None = None,
        notes: str | None = None,
    ) -> Operation:
        """Internal move between two locations."""
        _check_items(items)
        if location_from_id == location_to_id:
            raise SameLocationTransferError(location_from_id)

        source = await self._require_location(location_from_id, "source")
        destination = await self._require_location(location_to_id, "destination")
        from_warehouse = await self._resolve_warehouse(warehouse_from_id, source)
        to_warehouse = await self._resolve_warehouse(warehouse_to_id, destination)
        await self._require_products([i.product_id for i in items])

        operation = Operation(
            type=OperationType.TRANSFER,
            warehouse_from_id=from_warehouse,
            location_from_id=location_from_id,
            warehouse_to_id=to_warehouse,
            location_to_id=location_to_id,
            schedule_date=schedule_date,
            notes=notes,
            created_by_user_id=created_by_user_id,
            responsible_user_id=responsible_user_id or created_by_user_id,
            items=_fresh_items(items),
        )
        return await self._persist_new(operation)

    async def create_adjustment(
        self,
        location_id: str,
        items: list[CountedItem],
        created_by_user_id: str,
        warehouse_id: str | None = None,
        responsible_user_id: str | None = None,
        notes: str | None = None,
    ) -> Operation:
        """
        Record a physical count at a location.

        Each item stores |counted - current stock| as of now; committing the
        adjustment adds that magnitude to the count site.
        """
        _check_counted(items)
        location = await self._require_location(location_id, "count")
        resolved_warehouse = await self._resolve_warehouse(warehouse_id, location)
        await self._require_products([i.product_id for i in items])

        operation = Operation(
            type=OperationType.ADJUSTMENT,
            warehouse_to_id=resolved_warehouse,
            location_to_id=location_id,
            notes=notes,
            created_by_user_id=created_by_user_id,
            responsible_user_id=responsible_user_id or created_by_user_id,
            items=await self._adjustment_items(location_id, items),
        )
        return await self._persist_new(operation)

    # -- reads --------------------------------------------------------------

    async def get_operation(self, operation_id: str) -> Operation:
        operation = await self._operations.get(operation_id)
        if operation is None:
            raise OperationNotFoundError(operation_id)
        return operation

    async def list_operations(
        self,
        filters: OperationFilters | None = None,
        page: int | None = 1,
        limit: int | None = None,
    ) -> Page[Operation]:
        page, limit, offset = normalize_page(
            page, limit, self._default_limit, self._max_limit
        )
        items, total = await self._operations.list_operations(
            filters, limit=limit, offset=offset
        )
        return Page[Operation](items=items, page=page, limit=limit, total=total)

    # -- edits --------------------------------------------------------------

    async def update_operation(
        self, operation_id: str, changes: OperationUpdate
    ) -> Operation:
        """
        Apply the fields set on changes to an open operation.

        Raises:
            OperationLockedError: If the operation is READY, DONE or CANCELED.
        """
        operation = await self.get_operation(operation_id)
        if not operation.is_editable:
            raise OperationLockedError(operation_id, operation.status.value)

        provided = changes.model_fields_set
        for field in ("schedule_date", "notes", "contact_name", "responsible_user_id"):
            if field in provided:
                setattr(operation, field, getattr(changes, field))

        replace_items = False
        if operation.type == OperationType.ADJUSTMENT:
            if changes.items is not None:
                raise ValidationError(
                    "Adjustments are edited with counted quantities", field="items"
                )
            if changes.counted_items is not None:
                _check_counted(changes.counted_items)
                await self._require_products([i.product_id for i in changes.counted_items])
                operation.items = await self._adjustment_items(
                    operation.location_to_id, changes.counted_items
                )
                replace_items = True
        else:
            if changes.counted_items is not None:
                raise ValidationError(
                    "Counted quantities apply to adjustments only", field="counted_items"
                )
            if changes.items is not None:
                _check_items(changes.items)
                await self._require_products([i.product_id for i in changes.items])
                operation.items = _fresh_items(changes.items)
                replace_items = True

        saved = await self._operations.update(operation, replace_items=replace_items)
        if saved is None:
            current = await self.get_operation(operation_id)
            raise OperationLockedError(operation_id, current.status.value)

        logger.info(
            "operation_updated",
            operation_id=saved.id,
            reference=saved.reference,
            fields=sorted(provided),
        )
        self._publish([events.operation_updated(saved)])
        return saved

    async def transition(
        self, operation_id: str, action: TransitionAction
    ) -> Operation:
        """
        Apply a state machine action.

        Entering DONE appends one movement per item, built from the items
        stored when the commit takes the write lock, atomically with the
        status change. A concurrent caller that already moved the operation
        on makes this call fail without writing anything.
        """
        operation = await self.get_operation(operation_id)
        old_status = operation.status
        new_status = resolve_transition(operation, action)

        committed = await self._operations.apply_transition(
            operation_id,
            old_status,
            new_status,
            lambda locked: movements_for_transition(locked, new_status),
        )
        if committed is None:
            current = await self.get_operation(operation_id)
            # Raises with the precise reason when the new status forbids the action
            resolve_transition(current, action)
            raise InvalidTransitionError(
                operation_id,
                action.value,
                current.status.value,
                current.type.value,
                f"status changed from {old_status.value} concurrently",
            )
        updated, movements = committed

        logger.info(
            "operation_transitioned",
            operation_id=operation_id,
            reference=updated.reference,
            action=action.value,
            old_status=old_status.value,
            new_status=new_status.value,
            movements=len(movements),
        )

        batch = [events.operation_status_changed(operation_id, old_status, new_status)]
        batch.extend(_stock_events(movements))
        self._publish(batch)
        return updated

    # -- helpers ------------------------------------------------------------

    async def _persist_new(self, operation: Operation) -> Operation:
        created = await self._operations.create(operation)
        logger.info(
            "operation_created",
            operation_id=created.id,
            type=created.type.value,
            reference=created.reference,
            items=len(created.items),
        )
        self._publish([events.operation_created(created)])
        return created

    async def _require_location(self, location_id: str, role: str) -> Location:
        location = await self._catalog.get_location(location_id)
        if location is None:
            raise LocationNotFoundError(location_id, role=role)
        return location

    async def _resolve_warehouse(self, warehouse_id: str | None, location: Location) -> str:
        if warehouse_id is None or warehouse_id == location.warehouse_id:
            return location.warehouse_id
        if await self._catalog.get_warehouse(warehouse_id) is None:
            raise WarehouseNotFoundError(warehouse_id)
        return warehouse_id

    async def _require_products(self, product_ids: list[str]) -> None:
        missing = await self._catalog.find_missing_products(list(dict.fromkeys(product_ids)))
        if missing:
            raise ProductNotFoundError(missing[0])

    async def _adjustment_items(
        self, location_id: str, counted: list[CountedItem]
    ) -> list[OperationItem]:
        items = []
        for line in counted:
            current = await self._aggregator.stock_at(line.product_id, location_id=location_id)
            items.append(
                OperationItem(
                    product_id=line.product_id,
                    quantity=abs(line.counted_quantity - current),
                )
            )
        return items

    def _publish(self, batch: list[DomainEvent]) -> None:
        if self._publisher is not None:
            self._publisher.publish(batch)


def _check_items(items: list[OperationItem]) -> None:
    if not items:
        raise EmptyItemsError()
    for item in items:
        if item.quantity <= 0:
            raise InvalidQuantityError(item.product_id, item.quantity)


def _check_counted(items: list[CountedItem]) -> None:
    if not items:
        raise EmptyItemsError()
    for item in items:
        if item.counted_quantity < 0:
            raise InvalidQuantityError(item.product_id, item.counted_quantity, allow_zero=True)


def _fresh_items(items: list[OperationItem]) -> list[OperationItem]:
    return [OperationItem(product_id=i.product_id, quantity=Decimal(i.quantity)) for i in items]


def _stock_events(movements: list[StockMovement]) -> list[DomainEvent]:
    """One level change per distinct (product, destination) pair."""
    seen: set[tuple[str, str]] = set()
    result = []
    for movement in movements:
        if movement.location_to_id is None:
            continue
        key = (movement.product_id, movement.location_to_id)
        if key not in seen:
            seen.add(key)
            result.append(events.stock_level_changed(*key))
    return result
