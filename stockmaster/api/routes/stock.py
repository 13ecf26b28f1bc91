"""Stock level endpoints, all folded from the ledger."""

from decimal import Decimal

from fastapi import APIRouter, Depends

from stockmaster.api.dependencies import get_aggregator
from stockmaster.application.dto.responses import (
    ErrorResponse,
    LedgerRowResponse,
    LocationStockResponse,
    LowStockItemResponse,
    LowStockResponse,
    ProductLedgerResponse,
    ProductStockResponse,
    StockLevelResponse,
)
from stockmaster.core.services import StockAggregator

router = APIRouter(prefix="/api/stock", tags=["stock"])


@router.get("/low", response_model=LowStockResponse)
async def low_stock(
    out_of_stock_only: bool = False,
    aggregator: StockAggregator = Depends(get_aggregator),
) -> LowStockResponse:
    """Active products at or below their reorder level."""
    products = await aggregator.low_stock(out_of_stock_only=out_of_stock_only)
    return LowStockResponse(
        products=[
            LowStockItemResponse(
                product_id=p.product_id,
                name=p.name,
                sku=p.sku,
                reorder_level=p.reorder_level,
                current_stock=p.current_stock,
                out_of_stock=p.is_out_of_stock,
            )
            for p in products
        ],
        total=len(products),
    )


@router.get(
    "/{product_id}",
    response_model=StockLevelResponse,
    responses={404: {"model": ErrorResponse}},
)
async def stock_level(
    product_id: str,
    location_id: str | None = None,
    warehouse_id: str | None = None,
    aggregator: StockAggregator = Depends(get_aggregator),
) -> StockLevelResponse:
    """Stock of a product at a location, in a warehouse, or system-wide."""
    quantity = await aggregator.stock_at(
        product_id, location_id=location_id, warehouse_id=warehouse_id
    )
    return StockLevelResponse(
        product_id=product_id,
        location_id=location_id,
        warehouse_id=None if location_id else warehouse_id,
        quantity=quantity,
    )


@router.get(
    "/{product_id}/locations",
    response_model=ProductStockResponse,
    responses={404: {"model": ErrorResponse}},
)
async def stock_by_location(
    product_id: str,
    aggregator: StockAggregator = Depends(get_aggregator),
) -> ProductStockResponse:
    """Balance of a product at every location it has touched."""
    balances = await aggregator.stock_by_location(product_id)
    return ProductStockResponse(
        product_id=product_id,
        total=sum((b.quantity for b in balances), Decimal("0")),
        locations=[
            LocationStockResponse(
                location_id=b.location_id,
                warehouse_id=b.warehouse_id,
                quantity=b.quantity,
            )
            for b in balances
        ],
    )


@router.get(
    "/{product_id}/ledger",
    response_model=ProductLedgerResponse,
    responses={404: {"model": ErrorResponse}},
)
async def product_ledger(
    product_id: str,
    aggregator: StockAggregator = Depends(get_aggregator),
) -> ProductLedgerResponse:
    """Running-balance history of a product, newest first."""
    ledger = await aggregator.product_ledger(product_id)
    return ProductLedgerResponse(
        product_id=product_id,
        balance=ledger.balance,
        rows=[
            LedgerRowResponse(
                movement_id=row.movement_id,
                date=row.date,
                reference=row.reference,
                movement_type=row.movement_type.value,
                operation_status=row.operation_status,
                from_label=row.from_label,
                to_label=row.to_label,
                quantity=row.quantity,
                balance_change=row.balance_change,
                running_balance=row.running_balance,
            )
            for row in ledger.rows
        ],
    )
