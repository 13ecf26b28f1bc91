"""Stock ledger entities and the read models folded from them."""

from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, model_validator


class MovementType(str, Enum):
    """Movement kind, mirroring the owning operation's type."""

    RECEIPT = "RECEIPT"
    DELIVERY = "DELIVERY"
    TRANSFER = "TRANSFER"
    ADJUSTMENT = "ADJUSTMENT"


class StockMovement(BaseModel):
    """
    One immutable ledger entry.

    quantity_delta is always a magnitude. Its sign is implied by which
    location field is populated: entering location_to adds, leaving
    location_from subtracts.
    """

    id: int | None = None
    product_id: str
    location_from_id: str | None = None
    location_to_id: str | None = None
    quantity_delta: Decimal = Field(..., ge=0)
    movement_type: MovementType
    operation_id: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def check_locations(self) -> "StockMovement":
        if self.location_from_id is None and self.location_to_id is None:
            raise ValueError("Movement needs location_from_id or location_to_id")
        both = self.location_from_id is not None and self.location_to_id is not None
        if both and self.movement_type != MovementType.TRANSFER:
            raise ValueError("Only transfers move stock between two locations")
        return self

    def balance_change(self, location_id: str | None = None) -> Decimal:
        """
        Signed effect of this movement.

        With a location, the effect on that location's balance. Without one,
        the effect on system-wide stock (zero for transfers).
        """
        change = Decimal("0")
        if self.location_to_id is not None and location_id in (None, self.location_to_id):
            change += self.quantity_delta
        if self.location_from_id is not None and location_id in (None, self.location_from_id):
            change -= self.quantity_delta
        return change


class MovementDetail(BaseModel):
    """A movement joined with its operation and location labels."""

    id: int
    product_id: str
    movement_type: MovementType
    quantity_delta: Decimal
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


class LocationStock(BaseModel):
    """Folded balance of one product at one location."""

    product_id: str
    location_id: str
    warehouse_id: str | None = None
    quantity: Decimal


class LowStockProduct(BaseModel):
    """Product whose system-wide stock is at or below its reorder level."""

    product_id: str
    name: str
    sku: str
    reorder_level: int
    current_stock: Decimal

    @property
    def is_out_of_stock(self) -> bool:
        return self.current_stock <= 0


class LedgerRow(BaseModel):
    """One row of a product's running-balance ledger."""

    movement_id: int
    date: datetime
    reference: str
    movement_type: MovementType
    operation_status: str
    from_label: str
    to_label: str
    quantity: Decimal
    balance_change: Decimal
    running_balance: Decimal


class ProductLedger(BaseModel):
    """Running-balance history for one product, newest first."""

    product_id: str
    rows: list[LedgerRow] = Field(default_factory=list)

    @property
    def balance(self) -> Decimal:
        return self.rows[0].running_balance if self.rows else Decimal("0")


class MoveHistoryFilters(BaseModel):
    """Filters accepted by the move history query."""

    movement_type: MovementType | None = None
    status: str | None = None
    reference: str | None = None
    warehouse_id: str | None = None
    location_id: str | None = None
    product_id: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
