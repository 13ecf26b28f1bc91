"""Update Operation Use Case - edit an open operation."""

from stockmaster.application.dto.requests import UpdateOperationRequest
from stockmaster.application.dto.responses import OperationResponse
from stockmaster.application.use_cases.create_operation import to_operation_response
from stockmaster.core.entities.operation import (
    CountedItem,
    Operation,
    OperationItem,
    OperationUpdate,
)
from stockmaster.core.services.lifecycle import OperationLifecycleService


class UpdateOperationUseCase:
    """Apply a partial update to a DRAFT or WAITING operation."""

    def __init__(self, lifecycle: OperationLifecycleService | None = None):
        self._lifecycle = lifecycle

    async def _get_lifecycle(self) -> OperationLifecycleService:
        if self._lifecycle is None:
            from stockmaster.application.services import get_lifecycle_service

            self._lifecycle = await get_lifecycle_service()
        return self._lifecycle

    async def execute(self, operation_id: str, request: UpdateOperationRequest) -> Operation:
        lifecycle = await self._get_lifecycle()

        # Carry over only what the caller sent so omitted fields stay untouched
        provided = request.model_dump(exclude_unset=True, exclude={"items", "counted_items"})
        if request.items is not None:
            provided["items"] = [
                OperationItem(product_id=i.product_id, quantity=i.quantity)
                for i in request.items
            ]
        if request.counted_items is not None:
            provided["counted_items"] = [
                CountedItem(product_id=i.product_id, counted_quantity=i.counted_quantity)
                for i in request.counted_items
            ]

        return await lifecycle.update_operation(operation_id, OperationUpdate(**provided))

    def to_response(self, operation: Operation) -> OperationResponse:
        return to_operation_response(operation)
