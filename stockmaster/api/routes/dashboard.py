"""Dashboard endpoints."""

from fastapi import APIRouter, Depends

from stockmaster.api.dependencies import get_dashboard
from stockmaster.application.dto.responses import (
    CategorySummaryResponse,
    KpisResponse,
    WarehouseSummaryResponse,
)
from stockmaster.core.services import DashboardService

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/kpis", response_model=KpisResponse)
async def get_kpis(
    dashboard: DashboardService = Depends(get_dashboard),
) -> KpisResponse:
    """Headline inventory figures (cached briefly)."""
    kpis = await dashboard.get_kpis()
    return KpisResponse(**kpis.model_dump())


@router.get("/warehouses", response_model=list[WarehouseSummaryResponse])
async def get_warehouse_summary(
    dashboard: DashboardService = Depends(get_dashboard),
) -> list[WarehouseSummaryResponse]:
    """Activity summary per active warehouse."""
    summaries = await dashboard.get_warehouse_summary()
    return [WarehouseSummaryResponse(**s.model_dump()) for s in summaries]


@router.get("/categories", response_model=list[CategorySummaryResponse])
async def get_category_summary(
    dashboard: DashboardService = Depends(get_dashboard),
) -> list[CategorySummaryResponse]:
    """Active product count and total stock per product category (cached briefly)."""
    summaries = await dashboard.get_category_summary()
    return [CategorySummaryResponse(**s.model_dump()) for s in summaries]
