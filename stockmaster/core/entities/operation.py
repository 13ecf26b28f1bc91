"""
Operation domain entities.

An Operation is a planned or completed inventory action. Which location
fields it carries is fixed by its type and checked at construction.
"""

from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator

from stockmaster.core.exceptions import InvalidLocationShapeError


class OperationType(str, Enum):
    """Kinds of inventory operations."""

    RECEIPT = "RECEIPT"
    DELIVERY = "DELIVERY"
    TRANSFER = "TRANSFER"
    ADJUSTMENT = "ADJUSTMENT"


class OperationStatus(str, Enum):
    """Lifecycle states of an operation."""

    DRAFT = "DRAFT"
    WAITING = "WAITING"
    READY = "READY"
    DONE = "DONE"
    CANCELED = "CANCELED"


class TransitionAction(str, Enum):
    """Actions that drive the operation state machine."""

    MARK_READY = "mark_ready"
    MARK_DONE = "mark_done"
    CANCEL = "cancel"


EDITABLE_STATUSES = frozenset({OperationStatus.DRAFT, OperationStatus.WAITING})
TERMINAL_STATUSES = frozenset({OperationStatus.DONE, OperationStatus.CANCELED})
PENDING_STATUSES = frozenset(
    {OperationStatus.DRAFT, OperationStatus.WAITING, OperationStatus.READY}
)

# (has source, has destination) per type; ADJUSTMENT stores its count site as destination
LOCATION_SHAPES: dict[OperationType, tuple[bool, bool]] = {
    OperationType.RECEIPT: (False, True),
    OperationType.DELIVERY: (True, False),
    OperationType.TRANSFER: (True, True),
    OperationType.ADJUSTMENT: (False, True),
}

_SHAPE_LABELS = {
    (False, True): "a destination location only",
    (True, False): "a source location only",
    (True, True): "both a source and a destination location",
}


def _utcnow() -> datetime:
    return datetime.now(UTC)


class OperationItem(BaseModel):
    """A product line within an operation."""

    id: int | None = None
    operation_id: str | None = None
    product_id: str
    quantity: Decimal


class Operation(BaseModel):
    """A receipt, delivery, transfer or count adjustment."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    type: OperationType
    status: OperationStatus = OperationStatus.DRAFT
    reference: str = ""

    warehouse_from_id: str | None = None
    location_from_id: str | None = None
    warehouse_to_id: str | None = None
    location_to_id: str | None = None

    schedule_date: date | None = None
    notes: str | None = None
    contact_name: str | None = None
    created_by_user_id: str | None = None
    responsible_user_id: str | None = None

    items: list[OperationItem] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def check_location_shape(self) -> "Operation":
        """Reject location fields that do not match the operation type."""
        expected = LOCATION_SHAPES[self.type]
        actual = (self.location_from_id is not None, self.location_to_id is not None)
        if actual != expected:
            raise InvalidLocationShapeError(self.type.value, _SHAPE_LABELS[expected])
        return self

    @property
    def is_editable(self) -> bool:
        return self.status in EDITABLE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class OperationFilters(BaseModel):
    """Filters accepted by the operation list query."""

    type: OperationType | None = None
    status: OperationStatus | None = None
    warehouse_id: str | None = None
    location_id: str | None = None
    reference: str | None = None
    contact_name: str | None = None
    date_from: date | None = None
    date_to: date | None = None


class CountedItem(BaseModel):
    """A physical count line for an adjustment."""

    product_id: str
    counted_quantity: Decimal


class OperationUpdate(BaseModel):
    """
    Editable fields of an operation.

    Only fields explicitly set are applied; items replace the whole list.
    Adjustments take counted_items instead of items.
    """

    schedule_date: date | None = None
    notes: str | None = None
    contact_name: str | None = None
    responsible_user_id: str | None = None
    items: list[OperationItem] | None = None
    counted_items: list[CountedItem] | None = None
