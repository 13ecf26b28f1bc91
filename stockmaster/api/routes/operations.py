"""Operation endpoints: create, list, edit and transition."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status

from stockmaster.api.dependencies import (
    get_create_operation_use_case,
    get_current_user_id,
    get_lifecycle,
    get_sequencer,
    get_transition_operation_use_case,
    get_update_operation_use_case,
)
from stockmaster.application.dto.requests import (
    CreateAdjustmentRequest,
    CreateDeliveryRequest,
    CreateReceiptRequest,
    CreateTransferRequest,
    TransitionRequest,
    UpdateOperationRequest,
)
from stockmaster.application.dto.responses import (
    ErrorResponse,
    NextReferenceResponse,
    OperationListResponse,
    OperationResponse,
)
from stockmaster.application.use_cases import (
    CreateOperationUseCase,
    TransitionOperationUseCase,
    UpdateOperationUseCase,
    to_operation_response,
)
from stockmaster.core.entities.operation import (
    OperationFilters,
    OperationStatus,
    OperationType,
)
from stockmaster.core.services import OperationLifecycleService, ReferenceSequencer

router = APIRouter(prefix="/api/operations", tags=["operations"])

CREATE_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


@router.post(
    "/receipts",
    response_model=OperationResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CREATE_RESPONSES,
)
async def create_receipt(
    request: CreateReceiptRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: CreateOperationUseCase = Depends(get_create_operation_use_case),
) -> OperationResponse:
    """Create a DRAFT receipt into a destination location."""
    operation = await use_case.execute(request, user_id)
    return use_case.to_response(operation)


@router.post(
    "/deliveries",
    response_model=OperationResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CREATE_RESPONSES,
)
async def create_delivery(
    request: CreateDeliveryRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: CreateOperationUseCase = Depends(get_create_operation_use_case),
) -> OperationResponse:
    """Create a DRAFT delivery from a source location."""
    operation = await use_case.execute(request, user_id)
    return use_case.to_response(operation)


@router.post(
    "/transfers",
    response_model=OperationResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CREATE_RESPONSES,
)
async def create_transfer(
    request: CreateTransferRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: CreateOperationUseCase = Depends(get_create_operation_use_case),
) -> OperationResponse:
    """Create a DRAFT internal transfer between two locations."""
    operation = await use_case.execute(request, user_id)
    return use_case.to_response(operation)


@router.post(
    "/adjustments",
    response_model=OperationResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CREATE_RESPONSES,
)
async def create_adjustment(
    request: CreateAdjustmentRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: CreateOperationUseCase = Depends(get_create_operation_use_case),
) -> OperationResponse:
    """Create a DRAFT stock count adjustment."""
    operation = await use_case.execute(request, user_id)
    return use_case.to_response(operation)


@router.get("", response_model=OperationListResponse)
async def list_operations(
    operation_type: OperationType | None = Query(default=None, alias="type"),
    status_filter: OperationStatus | None = Query(default=None, alias="status"),
    warehouse_id: str | None = None,
    location_id: str | None = None,
    reference: str | None = None,
    contact_name: str | None = None,
    date_from: date | None = Query(default=None, description="Schedule date lower bound"),
    date_to: date | None = Query(default=None, description="Schedule date upper bound"),
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    lifecycle: OperationLifecycleService = Depends(get_lifecycle),
) -> OperationListResponse:
    """List operations, newest first."""
    filters = OperationFilters(
        type=operation_type,
        status=status_filter,
        warehouse_id=warehouse_id,
        location_id=location_id,
        reference=reference,
        contact_name=contact_name,
        date_from=date_from,
        date_to=date_to,
    )
    result = await lifecycle.list_operations(filters, page=page, limit=limit)
    return OperationListResponse(
        operations=[to_operation_response(op) for op in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
        has_more=result.has_more,
    )


@router.get("/next-reference/{operation_type}", response_model=NextReferenceResponse)
async def preview_next_reference(
    operation_type: OperationType,
    sequencer: ReferenceSequencer = Depends(get_sequencer),
) -> NextReferenceResponse:
    """Reference the next operation of a type would receive right now."""
    reference = await sequencer.next_reference(operation_type)
    return NextReferenceResponse(type=operation_type.value, reference=reference)


@router.get(
    "/{operation_id}",
    response_model=OperationResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_operation(
    operation_id: str,
    lifecycle: OperationLifecycleService = Depends(get_lifecycle),
) -> OperationResponse:
    """Get an operation with its items."""
    return to_operation_response(await lifecycle.get_operation(operation_id))


@router.patch(
    "/{operation_id}",
    response_model=OperationResponse,
    responses=CREATE_RESPONSES,
)
async def update_operation(
    operation_id: str,
    request: UpdateOperationRequest,
    use_case: UpdateOperationUseCase = Depends(get_update_operation_use_case),
) -> OperationResponse:
    """Edit a DRAFT or WAITING operation."""
    operation = await use_case.execute(operation_id, request)
    return use_case.to_response(operation)


@router.post(
    "/{operation_id}/transition",
    response_model=OperationResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def transition_operation(
    operation_id: str,
    request: TransitionRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: TransitionOperationUseCase = Depends(get_transition_operation_use_case),
) -> OperationResponse:
    """Apply mark_ready, mark_done or cancel."""
    operation = await use_case.execute(operation_id, request, user_id)
    return use_case.to_response(operation)
