"""Domain events published after lifecycle and ledger changes."""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from stockmaster.core.entities.operation import Operation, OperationStatus


class EventType(str, Enum):
    """Event names understood by the real-time transport."""

    OPERATION_CREATED = "operation.created"
    OPERATION_UPDATED = "operation.updated"
    OPERATION_STATUS_CHANGED = "operation.statusChanged"
    STOCK_LEVEL_CHANGED = "stock.levelChanged"
    DASHBOARD_KPIS_UPDATED = "dashboard.kpisUpdated"


class DomainEvent(BaseModel):
    """A {type, payload} pair."""

    type: EventType
    payload: dict[str, Any] = Field(default_factory=dict)
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def to_message(self) -> dict[str, Any]:
        """Wire form: only type and payload, JSON-safe."""
        return self.model_dump(mode="json", include={"type", "payload"})


def _operation_payload(operation: Operation) -> dict[str, Any]:
    return {
        "operationId": operation.id,
        "type": operation.type.value,
        "status": operation.status.value,
        "reference": operation.reference,
    }


def operation_created(operation: Operation) -> DomainEvent:
    return DomainEvent(
        type=EventType.OPERATION_CREATED, payload=_operation_payload(operation)
    )


def operation_updated(operation: Operation) -> DomainEvent:
    return DomainEvent(
        type=EventType.OPERATION_UPDATED, payload=_operation_payload(operation)
    )


def operation_status_changed(
    operation_id: str, old_status: OperationStatus, new_status: OperationStatus
) -> DomainEvent:
    return DomainEvent(
        type=EventType.OPERATION_STATUS_CHANGED,
        payload={
            "operationId": operation_id,
            "oldStatus": old_status.value,
            "newStatus": new_status.value,
        },
    )


def stock_level_changed(
    product_id: str, location_id: str, new_qty: Decimal | None = None
) -> DomainEvent:
    """newQty may be left empty and filled in by the notifier on delivery."""
    return DomainEvent(
        type=EventType.STOCK_LEVEL_CHANGED,
        payload={"productId": product_id, "locationId": location_id, "newQty": new_qty},
    )


def dashboard_kpis_updated(kpis: dict[str, Any]) -> DomainEvent:
    return DomainEvent(type=EventType.DASHBOARD_KPIS_UPDATED, payload=kpis)
