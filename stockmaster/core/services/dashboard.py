"""
Dashboard KPIs, warehouse and category summaries.

KPIs and the category summary are cached for a short TTL and invalidated
whenever the notifier publishes a lifecycle change, so reads between
changes stay cheap.
"""

import time
from collections.abc import Awaitable, Callable
from typing import Any

from stockmaster.config import get_logger
from stockmaster.core.entities.dashboard import CategorySummary, DashboardKpis, WarehouseSummary
from stockmaster.core.entities.operation import (
    PENDING_STATUSES,
    OperationStatus,
    OperationType,
)
from stockmaster.core.interfaces.catalog_store import ICatalogStore
from stockmaster.core.interfaces.operation_store import IOperationStore
from stockmaster.core.interfaces.stock_ledger import IStockLedger
from stockmaster.core.services.stock_aggregator import (
    ZERO,
    StockAggregator,
    fold_totals_by_product,
)

logger = get_logger(__name__)

KPI_CACHE_KEY = "kpis"
CATEGORY_CACHE_KEY = "category-summary"


class DashboardService:
    """Aggregate figures for the dashboard."""

    def __init__(
        self,
        operation_store: IOperationStore,
        ledger: IStockLedger,
        catalog: ICatalogStore,
        aggregator: StockAggregator,
        cache_ttl: int = 60,
    ) -> None:
        self._operations = operation_store
        self._ledger = ledger
        self._catalog = catalog
        self._aggregator = aggregator
        self._cache_ttl = cache_ttl
        self._cache: dict[str, tuple[float, Any]] = {}
        self._generation = 0

    async def _cached(
        self, key: str, compute: Callable[[], Awaitable[Any]], use_cache: bool
    ) -> Any:
        entry = self._cache.get(key)
        if use_cache and entry is not None and (time.time() - entry[0]) < self._cache_ttl:
            logger.debug("dashboard_cache_hit", key=key)
            return entry[1]

        generation = self._generation
        value = await compute()
        # An invalidation during the computation means value may predate a commit
        if generation == self._generation:
            self._cache[key] = (time.time(), value)
        return value

    async def get_kpis(self, use_cache: bool = True) -> DashboardKpis:
        return await self._cached(KPI_CACHE_KEY, self._compute_kpis, use_cache)

    async def _compute_kpis(self) -> DashboardKpis:
        low = await self._aggregator.low_stock()
        products_with_movements = await self._ledger.distinct_product_ids()

        kpis = DashboardKpis(
            total_products=len(products_with_movements),
            low_stock=len(low),
            out_of_stock=sum(1 for p in low if p.is_out_of_stock),
            pending_receipts=await self._operations.count_operations(
                OperationType.RECEIPT, statuses=PENDING_STATUSES
            ),
            pending_deliveries=await self._operations.count_operations(
                OperationType.DELIVERY, statuses=PENDING_STATUSES
            ),
            pending_transfers=await self._operations.count_operations(
                OperationType.TRANSFER, statuses=PENDING_STATUSES
            ),
        )
        logger.debug("kpis_computed", **kpis.model_dump())
        return kpis

    async def get_warehouse_summary(self) -> list[WarehouseSummary]:
        """Activity counts for every active warehouse."""
        summaries = []
        for warehouse in await self._catalog.list_warehouses(active_only=True):
            locations = await self._catalog.list_locations(warehouse.id)
            location_ids = [loc.id for loc in locations]
            active = [loc for loc in locations if loc.is_active]

            if location_ids:
                products = await self._ledger.distinct_product_ids(location_ids)
                counts = {}
                for op_type in (
                    OperationType.RECEIPT,
                    OperationType.DELIVERY,
                    OperationType.TRANSFER,
                ):
                    counts[op_type] = await self._operations.count_operations(
                        op_type,
                        location_ids=location_ids,
                        exclude_statuses=[OperationStatus.CANCELED],
                    )
            else:
                products = []
                counts = {}

            summaries.append(
                WarehouseSummary(
                    warehouse_id=warehouse.id,
                    name=warehouse.name,
                    short_code=warehouse.short_code,
                    total_products=len(products),
                    total_locations=len(active),
                    receipts=counts.get(OperationType.RECEIPT, 0),
                    deliveries=counts.get(OperationType.DELIVERY, 0),
                    transfers=counts.get(OperationType.TRANSFER, 0),
                )
            )
        return summaries

    async def get_category_summary(self, use_cache: bool = True) -> list[CategorySummary]:
        """Active product count and system-wide stock per category."""
        return await self._cached(CATEGORY_CACHE_KEY, self._compute_category_summary, use_cache)

    async def _compute_category_summary(self) -> list[CategorySummary]:
        categories = await self._catalog.list_categories()
        products = await self._catalog.list_products(active_only=True)
        totals = fold_totals_by_product(await self._ledger.list_movements())

        members: dict[str, list[str]] = {}
        for product in products:
            if product.category_id is not None:
                members.setdefault(product.category_id, []).append(product.id)

        summaries = []
        for category in categories:
            product_ids = members.get(category.id, [])
            stock = sum((totals.get(pid, ZERO) for pid in product_ids), ZERO)
            summaries.append(
                CategorySummary(
                    category_id=category.id,
                    name=category.name,
                    total_products=len(product_ids),
                    total_stock=stock,
                )
            )
        return summaries

    def invalidate_cache(self) -> None:
        self._generation += 1
        self._cache.clear()
        logger.debug("dashboard_cache_invalidated")
