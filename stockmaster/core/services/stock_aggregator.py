"""
Stock aggregation over the movement ledger.

Stock is never stored. Every figure here is a fold of movement magnitudes:

    stock(P, L) = sum(delta where to == L) - sum(delta where from == L)

Quantities are Decimal throughout so fractional units (metres, kilograms)
sum without drift.
"""

from collections import defaultdict
from collections.abc import Iterable
from decimal import Decimal

from stockmaster.config import get_logger
from stockmaster.core.entities.movement import (
    LedgerRow,
    LocationStock,
    LowStockProduct,
    MoveHistoryFilters,
    MovementDetail,
    ProductLedger,
    StockMovement,
)
from stockmaster.core.entities.pagination import Page, normalize_page
from stockmaster.core.exceptions import (
    LocationNotFoundError,
    ProductNotFoundError,
    WarehouseNotFoundError,
)
from stockmaster.core.interfaces.catalog_store import ICatalogStore
from stockmaster.core.interfaces.stock_ledger import IStockLedger

logger = get_logger(__name__)

ZERO = Decimal("0")
EXTERNAL_LABEL = "External"


def fold_balances(movements: Iterable[StockMovement]) -> dict[str, Decimal]:
    """Balance per location for a set of movements."""
    balances: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for movement in movements:
        if movement.location_to_id is not None:
            balances[movement.location_to_id] += movement.quantity_delta
        if movement.location_from_id is not None:
            balances[movement.location_from_id] -= movement.quantity_delta
    return dict(balances)


def fold_location(movements: Iterable[StockMovement], location_id: str) -> Decimal:
    """Balance of a single location."""
    return sum((m.balance_change(location_id) for m in movements), ZERO)


def fold_total(movements: Iterable[StockMovement]) -> Decimal:
    """System-wide balance: entries into any location minus exits from any location."""
    return sum((m.balance_change() for m in movements), ZERO)


def fold_totals_by_product(movements: Iterable[StockMovement]) -> dict[str, Decimal]:
    """System-wide balance per product."""
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for movement in movements:
        totals[movement.product_id] += movement.balance_change()
    return dict(totals)


class StockAggregator:
    """
    Point-in-time stock figures derived from the ledger.

    Each query re-reads the movements it needs; the ledger stays the only
    source of truth.
    """

    def __init__(
        self,
        ledger: IStockLedger,
        catalog: ICatalogStore,
        default_limit: int = 20,
        max_limit: int = 100,
    ) -> None:
        self._ledger = ledger
        self._catalog = catalog
        self._default_limit = default_limit
        self._max_limit = max_limit

    async def stock_at(
        self,
        product_id: str,
        location_id: str | None = None,
        warehouse_id: str | None = None,
    ) -> Decimal:
        """
        Current stock of a product.

        Scope, in order of precedence: one location, all locations of a
        warehouse, or system-wide.
        """
        await self._require_product(product_id)

        if location_id is not None:
            if await self._catalog.get_location(location_id) is None:
                raise LocationNotFoundError(location_id)
            movements = await self._ledger.list_movements(product_id, [location_id])
            return fold_location(movements, location_id)

        if warehouse_id is not None:
            if await self._catalog.get_warehouse(warehouse_id) is None:
                raise WarehouseNotFoundError(warehouse_id)
            locations = await self._catalog.list_locations(warehouse_id)
            location_ids = [loc.id for loc in locations]
            if not location_ids:
                return ZERO
            movements = await self._ledger.list_movements(product_id, location_ids)
            balances = fold_balances(movements)
            return sum((balances.get(loc_id, ZERO) for loc_id in location_ids), ZERO)

        movements = await self._ledger.list_movements(product_id)
        return fold_total(movements)

    async def stock_by_location(self, product_id: str) -> list[LocationStock]:
        """Balance of a product at every location it has touched."""
        await self._require_product(product_id)
        movements = await self._ledger.list_movements(product_id)
        balances = fold_balances(movements)
        if not balances:
            return []

        warehouse_of = {
            loc.id: loc.warehouse_id for loc in await self._catalog.list_locations()
        }
        return [
            LocationStock(
                product_id=product_id,
                location_id=loc_id,
                warehouse_id=warehouse_of.get(loc_id),
                quantity=qty,
            )
            for loc_id, qty in sorted(balances.items())
        ]

    async def low_stock(self, out_of_stock_only: bool = False) -> list[LowStockProduct]:
        """
        Active products with a reorder level whose total stock is at or below it.

        With out_of_stock_only, the threshold becomes zero instead.
        """
        products = await self._catalog.list_reorder_products()
        if not products:
            return []

        totals = fold_totals_by_product(await self._ledger.list_movements())

        result = []
        for product in products:
            current = totals.get(product.id, ZERO)
            threshold = ZERO if out_of_stock_only else Decimal(product.reorder_level)
            if current <= threshold:
                result.append(
                    LowStockProduct(
                        product_id=product.id,
                        name=product.name,
                        sku=product.sku,
                        reorder_level=product.reorder_level,
                        current_stock=current,
                    )
                )

        logger.debug(
            "low_stock_computed",
            candidates=len(products),
            flagged=len(result),
            out_of_stock_only=out_of_stock_only,
        )
        return result

    async def product_ledger(self, product_id: str) -> ProductLedger:
        """
        Running-balance history of a product.

        Balances accumulate oldest to newest; rows come back newest first.
        A transfer enters one location and leaves another, so its net
        balance change is zero.
        """
        await self._require_product(product_id)
        details = await self._ledger.list_details(product_id)

        rows: list[LedgerRow] = []
        running = ZERO
        for detail in details:
            change = _balance_change(detail)
            running += change
            rows.append(
                LedgerRow(
                    movement_id=detail.id,
                    date=detail.created_at,
                    reference=detail.reference,
                    movement_type=detail.movement_type,
                    operation_status=detail.operation_status,
                    from_label=detail.location_from_name or EXTERNAL_LABEL,
                    to_label=detail.location_to_name or EXTERNAL_LABEL,
                    quantity=detail.quantity_delta,
                    balance_change=change,
                    running_balance=running,
                )
            )

        rows.reverse()
        return ProductLedger(product_id=product_id, rows=rows)

    async def move_history(
        self,
        filters: MoveHistoryFilters | None = None,
        page: int | None = 1,
        limit: int | None = None,
    ) -> Page[MovementDetail]:
        """Filtered, paginated movement history, newest first."""
        page, limit, offset = normalize_page(
            page, limit, self._default_limit, self._max_limit
        )
        items, total = await self._ledger.query_history(filters, limit=limit, offset=offset)
        return Page[MovementDetail](items=items, page=page, limit=limit, total=total)

    async def _require_product(self, product_id: str) -> None:
        if await self._catalog.get_product(product_id) is None:
            raise ProductNotFoundError(product_id)


def _balance_change(detail: MovementDetail) -> Decimal:
    change = ZERO
    if detail.location_to_id is not None:
        change += detail.quantity_delta
    if detail.location_from_id is not None:
        change -= detail.quantity_delta
    return change
