"""Core domain entities."""

from stockmaster.core.entities.catalog import Location, Product, ProductCategory, Warehouse
from stockmaster.core.entities.dashboard import CategorySummary, DashboardKpis, WarehouseSummary
from stockmaster.core.entities.events import DomainEvent, EventType
from stockmaster.core.entities.movement import (
    LedgerRow,
    LocationStock,
    LowStockProduct,
    MoveHistoryFilters,
    MovementDetail,
    MovementType,
    ProductLedger,
    StockMovement,
)
from stockmaster.core.entities.operation import (
    EDITABLE_STATUSES,
    LOCATION_SHAPES,
    PENDING_STATUSES,
    TERMINAL_STATUSES,
    CountedItem,
    Operation,
    OperationFilters,
    OperationItem,
    OperationStatus,
    OperationType,
    OperationUpdate,
    TransitionAction,
)
from stockmaster.core.entities.pagination import Page, normalize_page

__all__ = [
    # Operation entities
    "Operation",
    "OperationItem",
    "OperationFilters",
    "OperationUpdate",
    "CountedItem",
    "OperationType",
    "OperationStatus",
    "TransitionAction",
    "EDITABLE_STATUSES",
    "TERMINAL_STATUSES",
    "PENDING_STATUSES",
    "LOCATION_SHAPES",
    # Ledger entities
    "StockMovement",
    "MovementType",
    "MovementDetail",
    "LocationStock",
    "LowStockProduct",
    "LedgerRow",
    "ProductLedger",
    "MoveHistoryFilters",
    # Pagination
    "Page",
    "normalize_page",
    # Catalog entities
    "Warehouse",
    "Location",
    "Product",
    "ProductCategory",
    # Dashboard entities
    "CategorySummary",
    "DashboardKpis",
    "WarehouseSummary",
    # Events
    "DomainEvent",
    "EventType",
]
