"""
Operation state machine.

Transition rules:

    mark_ready  DRAFT          RECEIPT, TRANSFER  -> READY
    mark_ready  WAITING        DELIVERY           -> READY
    mark_done   DRAFT, READY   any                -> DONE
    cancel      not DONE       any                -> CANCELED

Deliveries are created in DRAFT, so mark_ready never applies to them in
practice; they complete through mark_done straight from DRAFT.
"""

from stockmaster.core.entities.movement import MovementType, StockMovement
from stockmaster.core.entities.operation import (
    Operation,
    OperationStatus,
    OperationType,
    TransitionAction,
)
from stockmaster.core.exceptions import InvalidTransitionError

READY_FROM: dict[OperationType, OperationStatus] = {
    OperationType.RECEIPT: OperationStatus.DRAFT,
    OperationType.TRANSFER: OperationStatus.DRAFT,
    OperationType.DELIVERY: OperationStatus.WAITING,
}

DONE_FROM = frozenset({OperationStatus.DRAFT, OperationStatus.READY})


def resolve_transition(operation: Operation, action: TransitionAction) -> OperationStatus:
    """
    Target status for applying action to operation.

    Raises:
        InvalidTransitionError: If the (status, action, type) combination is not allowed.
    """
    status = operation.status

    def reject(reason: str) -> InvalidTransitionError:
        return InvalidTransitionError(
            operation.id, action.value, status.value, operation.type.value, reason
        )

    if action == TransitionAction.CANCEL:
        if status == OperationStatus.DONE:
            raise reject("completed operations cannot be canceled")
        return OperationStatus.CANCELED

    if action == TransitionAction.MARK_READY:
        if READY_FROM.get(operation.type) == status:
            return OperationStatus.READY
        raise reject(f"cannot transition from {status.value} to READY")

    if action == TransitionAction.MARK_DONE:
        if status in DONE_FROM:
            return OperationStatus.DONE
        raise reject(f"cannot transition from {status.value} to DONE")

    raise reject("unknown action")


def build_movements(operation: Operation) -> list[StockMovement]:
    """One ledger entry per item, shaped by the operation type."""
    movement_type = MovementType(operation.type.value)
    location_from = None
    location_to = None

    if operation.type == OperationType.RECEIPT:
        location_to = operation.location_to_id
    elif operation.type == OperationType.DELIVERY:
        location_from = operation.location_from_id
    elif operation.type == OperationType.TRANSFER:
        location_from = operation.location_from_id
        location_to = operation.location_to_id
    elif operation.type == OperationType.ADJUSTMENT:
        # Item quantity already holds |counted - stock| from creation time
        location_to = operation.location_to_id

    return [
        StockMovement(
            product_id=item.product_id,
            location_from_id=location_from,
            location_to_id=location_to,
            quantity_delta=item.quantity,
            movement_type=movement_type,
            operation_id=operation.id,
        )
        for item in operation.items
    ]


def movements_for_transition(
    operation: Operation, new_status: OperationStatus
) -> list[StockMovement]:
    """Movements to commit with a transition; only entering DONE produces any."""
    if new_status == OperationStatus.DONE and operation.status != OperationStatus.DONE:
        return build_movements(operation)
    return []
