"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.

Quantities are Decimal and serialize as strings, so fractional stock
survives the round trip exactly.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class PaginatedResponse(BaseModel):
    """Base for paginated responses."""

    total: int
    page: int
    limit: int
    has_more: bool


# --- Operations ---


class OperationItemResponse(BaseModel):
    """Product line of an operation."""

    id: int | None = None
    product_id: str
    quantity: Decimal


class OperationResponse(BaseModel):
    """Operation with its items."""

    id: str
    type: str
    status: str
    reference: str = Field(..., examples=["WH/IN/0001"])
    warehouse_from_id: str | None = None
    location_from_id: str | None = None
    warehouse_to_id: str | None = None
    location_to_id: str | None = None
    schedule_date: date | None = None
    notes: str | None = None
    contact_name: str | None = None
    created_by_user_id: str | None = None
    responsible_user_id: str | None = None
    items: list[OperationItemResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class OperationListResponse(PaginatedResponse):
    """Page of operations, newest first."""

    operations: list[OperationResponse]


class NextReferenceResponse(BaseModel):
    """Preview of the reference the next operation of a type would get."""

    type: str
    reference: str


# --- Stock ---


class StockLevelResponse(BaseModel):
    """Folded stock for one product in one scope."""

    product_id: str
    location_id: str | None = None
    warehouse_id: str | None = None
    quantity: Decimal


class LocationStockResponse(BaseModel):
    location_id: str
    warehouse_id: str | None = None
    quantity: Decimal


class ProductStockResponse(BaseModel):
    """Per-location balances of a product."""

    product_id: str
    total: Decimal
    locations: list[LocationStockResponse]


class LowStockItemResponse(BaseModel):
    product_id: str
    name: str
    sku: str
    reorder_level: int
    current_stock: Decimal
    out_of_stock: bool


class LowStockResponse(BaseModel):
    """Products at or below their reorder level."""

    products: list[LowStockItemResponse]
    total: int


class LedgerRowResponse(BaseModel):
    movement_id: int
    date: datetime
    reference: str
    movement_type: str
    operation_status: str
    from_label: str
    to_label: str
    quantity: Decimal
    balance_change: Decimal
    running_balance: Decimal


class ProductLedgerResponse(BaseModel):
    """Running-balance history of a product, newest first."""

    product_id: str
    balance: Decimal
    rows: list[LedgerRowResponse]


class MovementResponse(BaseModel):
    """One movement joined with its operation and location labels."""

    id: int
    product_id: str
    movement_type: str
    quantity: Decimal
    created_at: datetime
    location_from_id: str | None = None
    location_from_name: str | None = None
    location_from_code: str | None = None
    warehouse_from_id: str | None = None
    warehouse_from_name: str | None = None
    location_to_id: str | None = None
    location_to_name: str | None = None
    location_to_code: str | None = None
    warehouse_to_id: str | None = None
    warehouse_to_name: str | None = None
    operation_id: str
    reference: str
    operation_status: str
    schedule_date: date | None = None
    contact_name: str | None = None


class MoveHistoryResponse(PaginatedResponse):
    """Page of movements, newest first."""

    movements: list[MovementResponse]


# --- Dashboard ---


class KpisResponse(BaseModel):
    total_products: int
    low_stock: int
    out_of_stock: int
    pending_receipts: int
    pending_deliveries: int
    pending_transfers: int


class WarehouseSummaryResponse(BaseModel):
    warehouse_id: str
    name: str
    short_code: str
    total_products: int
    total_locations: int
    receipts: int
    deliveries: int
    transfers: int


class CategorySummaryResponse(BaseModel):
    """Active products and total stock in one product category."""

    category_id: str
    name: str
    total_products: int
    total_stock: Decimal


# --- System ---


class ComponentHealthResponse(BaseModel):
    """Health of a single dependency."""

    available: bool
    latency_ms: float | None = None
    error: str | None = None
    details: dict = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ComponentHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. OPERATION_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
