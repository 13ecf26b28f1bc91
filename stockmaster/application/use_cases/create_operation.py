"""Create Operation Use Case - receipts, deliveries, transfers and adjustments."""

from stockmaster.application.dto.requests import (
    CreateAdjustmentRequest,
    CreateDeliveryRequest,
    CreateReceiptRequest,
    CreateTransferRequest,
)
from stockmaster.application.dto.responses import OperationItemResponse, OperationResponse
from stockmaster.config import get_logger
from stockmaster.core.entities.operation import CountedItem, Operation, OperationItem
from stockmaster.core.services.lifecycle import OperationLifecycleService

logger = get_logger(__name__)

CreateOperationRequest = (
    CreateReceiptRequest | CreateDeliveryRequest | CreateTransferRequest | CreateAdjustmentRequest
)


def to_operation_response(operation: Operation) -> OperationResponse:
    """Map an Operation entity to its API representation."""
    return OperationResponse(
        id=operation.id,
        type=operation.type.value,
        status=operation.status.value,
        reference=operation.reference,
        warehouse_from_id=operation.warehouse_from_id,
        location_from_id=operation.location_from_id,
        warehouse_to_id=operation.warehouse_to_id,
        location_to_id=operation.location_to_id,
        schedule_date=operation.schedule_date,
        notes=operation.notes,
        contact_name=operation.contact_name,
        created_by_user_id=operation.created_by_user_id,
        responsible_user_id=operation.responsible_user_id,
        items=[
            OperationItemResponse(id=i.id, product_id=i.product_id, quantity=i.quantity)
            for i in operation.items
        ],
        created_at=operation.created_at,
        updated_at=operation.updated_at,
    )


class CreateOperationUseCase:
    """Create a DRAFT operation of the type implied by the request."""

    def __init__(self, lifecycle: OperationLifecycleService | None = None):
        self._lifecycle = lifecycle

    async def _get_lifecycle(self) -> OperationLifecycleService:
        if self._lifecycle is None:
            from stockmaster.application.services import get_lifecycle_service

            self._lifecycle = await get_lifecycle_service()
        return self._lifecycle

    async def execute(self, request: CreateOperationRequest, user_id: str) -> Operation:
        lifecycle = await self._get_lifecycle()

        if isinstance(request, CreateReceiptRequest):
            return await lifecycle.create_receipt(
                location_to_id=request.location_to_id,
                warehouse_to_id=request.warehouse_to_id,
                items=_items(request),
                created_by_user_id=user_id,
                responsible_user_id=request.responsible_user_id,
                schedule_date=request.schedule_date,
                notes=request.notes,
                contact_name=request.contact_name,
            )

        if isinstance(request, CreateDeliveryRequest):
            return await lifecycle.create_delivery(
                location_from_id=request.location_from_id,
                warehouse_from_id=request.warehouse_from_id,
                items=_items(request),
                created_by_user_id=user_id,
                responsible_user_id=request.responsible_user_id,
                schedule_date=request.schedule_date,
                notes=request.notes,
                contact_name=request.contact_name,
            )

        if isinstance(request, CreateTransferRequest):
            return await lifecycle.create_transfer(
                location_from_id=request.location_from_id,
                location_to_id=request.location_to_id,
                warehouse_from_id=request.warehouse_from_id,
                warehouse_to_id=request.warehouse_to_id,
                items=_items(request),
                created_by_user_id=user_id,
                responsible_user_id=request.responsible_user_id,
                schedule_date=request.schedule_date,
                notes=request.notes,
            )

        return await lifecycle.create_adjustment(
            location_id=request.location_id,
            warehouse_id=request.warehouse_id,
            items=[
                CountedItem(product_id=i.product_id, counted_quantity=i.counted_quantity)
                for i in request.items
            ],
            created_by_user_id=user_id,
            responsible_user_id=request.responsible_user_id,
            notes=request.notes,
        )

    def to_response(self, operation: Operation) -> OperationResponse:
        """Convert result to API response."""
        return to_operation_response(operation)


def _items(request: CreateReceiptRequest | CreateDeliveryRequest | CreateTransferRequest):
    return [OperationItem(product_id=i.product_id, quantity=i.quantity) for i in request.items]
