"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from stockmaster.core.entities.operation import TransitionAction


class OperationItemRequest(BaseModel):
    """Product line for receipts, deliveries and transfers."""

    product_id: str = Field(..., min_length=1, description="Product ID")
    quantity: Decimal = Field(..., gt=0, description="Quantity to move", examples=["25", "2.5"])


class CountedItemRequest(BaseModel):
    """Physical count line for an adjustment."""

    product_id: str = Field(..., min_length=1, description="Product ID")
    counted_quantity: Decimal = Field(..., ge=0, description="Quantity physically counted")


class _OperationDetailsRequest(BaseModel):
    schedule_date: date | None = Field(default=None, description="Planned date")
    notes: str | None = Field(default=None, max_length=2000)
    responsible_user_id: str | None = Field(
        default=None, description="Responsible user (defaults to the creator)"
    )


class CreateReceiptRequest(_OperationDetailsRequest):
    """Incoming goods into a destination location."""

    location_to_id: str = Field(..., description="Destination location ID")
    warehouse_to_id: str | None = Field(
        default=None, description="Destination warehouse (defaults to the location's)"
    )
    contact_name: str | None = Field(default=None, description="Supplier contact")
    items: list[OperationItemRequest] = Field(..., min_length=1)


class CreateDeliveryRequest(_OperationDetailsRequest):
    """Outgoing goods from a source location."""

    location_from_id: str = Field(..., description="Source location ID")
    warehouse_from_id: str | None = Field(
        default=None, description="Source warehouse (defaults to the location's)"
    )
    contact_name: str | None = Field(default=None, description="Customer contact")
    items: list[OperationItemRequest] = Field(..., min_length=1)


class CreateTransferRequest(_OperationDetailsRequest):
    """Internal move between two locations."""

    location_from_id: str = Field(..., description="Source location ID")
    location_to_id: str = Field(..., description="Destination location ID")
    warehouse_from_id: str | None = None
    warehouse_to_id: str | None = None
    items: list[OperationItemRequest] = Field(..., min_length=1)


class CreateAdjustmentRequest(BaseModel):
    """Stock count at a location."""

    location_id: str = Field(..., description="Counted location ID")
    warehouse_id: str | None = None
    responsible_user_id: str | None = None
    notes: str | None = Field(default=None, max_length=2000)
    items: list[CountedItemRequest] = Field(..., min_length=1)


class UpdateOperationRequest(BaseModel):
    """Partial update of an open operation.

    Only fields present in the request body are applied. For adjustments,
    send counted_items instead of items.
    """

    schedule_date: date | None = None
    notes: str | None = Field(default=None, max_length=2000)
    contact_name: str | None = None
    responsible_user_id: str | None = None
    items: list[OperationItemRequest] | None = Field(default=None, min_length=1)
    counted_items: list[CountedItemRequest] | None = Field(default=None, min_length=1)


class TransitionRequest(BaseModel):
    """State machine action to apply."""

    action: TransitionAction = Field(..., description="mark_ready, mark_done or cancel")
