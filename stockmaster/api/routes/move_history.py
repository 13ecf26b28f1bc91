"""Move history endpoint."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from stockmaster.api.dependencies import get_aggregator
from stockmaster.application.dto.responses import MoveHistoryResponse, MovementResponse
from stockmaster.core.entities.movement import MoveHistoryFilters, MovementDetail, MovementType
from stockmaster.core.entities.operation import OperationStatus
from stockmaster.core.services import StockAggregator

router = APIRouter(prefix="/api/move-history", tags=["move-history"])


def _to_response(detail: MovementDetail) -> MovementResponse:
    return MovementResponse(
        id=detail.id,
        product_id=detail.product_id,
        movement_type=detail.movement_type.value,
        quantity=detail.quantity_delta,
        created_at=detail.created_at,
        location_from_id=detail.location_from_id,
        location_from_name=detail.location_from_name,
        location_from_code=detail.location_from_code,
        warehouse_from_id=detail.warehouse_from_id,
        warehouse_from_name=detail.warehouse_from_name,
        location_to_id=detail.location_to_id,
        location_to_name=detail.location_to_name,
        location_to_code=detail.location_to_code,
        warehouse_to_id=detail.warehouse_to_id,
        warehouse_to_name=detail.warehouse_to_name,
        operation_id=detail.operation_id,
        reference=detail.reference,
        operation_status=detail.operation_status,
        schedule_date=detail.schedule_date,
        contact_name=detail.contact_name,
    )


@router.get("", response_model=MoveHistoryResponse)
async def move_history(
    movement_type: MovementType | None = Query(default=None, alias="type"),
    status_filter: OperationStatus | None = Query(default=None, alias="status"),
    reference: str | None = None,
    warehouse_id: str | None = None,
    location_id: str | None = None,
    product_id: str | None = None,
    date_from: datetime | None = Query(default=None, description="Movement time lower bound"),
    date_to: datetime | None = Query(default=None, description="Movement time upper bound"),
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    aggregator: StockAggregator = Depends(get_aggregator),
) -> MoveHistoryResponse:
    """Filtered ledger history, newest first."""
    filters = MoveHistoryFilters(
        movement_type=movement_type,
        status=status_filter.value if status_filter else None,
        reference=reference,
        warehouse_id=warehouse_id,
        location_id=location_id,
        product_id=product_id,
        date_from=date_from,
        date_to=date_to,
    )
    result = await aggregator.move_history(filters, page=page, limit=limit)
    return MoveHistoryResponse(
        movements=[_to_response(d) for d in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
        has_more=result.has_more,
    )
