"""Transition Operation Use Case - drive the operation state machine."""

from stockmaster.application.dto.requests import TransitionRequest
from stockmaster.application.dto.responses import OperationResponse
from stockmaster.application.use_cases.create_operation import to_operation_response
from stockmaster.config import get_logger
from stockmaster.core.entities.operation import Operation
from stockmaster.core.services.lifecycle import OperationLifecycleService

logger = get_logger(__name__)


class TransitionOperationUseCase:
    """Apply mark_ready, mark_done or cancel to an operation."""

    def __init__(self, lifecycle: OperationLifecycleService | None = None):
        self._lifecycle = lifecycle

    async def _get_lifecycle(self) -> OperationLifecycleService:
        if self._lifecycle is None:
            from stockmaster.application.services import get_lifecycle_service

            self._lifecycle = await get_lifecycle_service()
        return self._lifecycle

    async def execute(
        self, operation_id: str, request: TransitionRequest, user_id: str | None = None
    ) -> Operation:
        lifecycle = await self._get_lifecycle()
        logger.debug(
            "transition_requested",
            operation_id=operation_id,
            action=request.action.value,
            user_id=user_id,
        )
        return await lifecycle.transition(operation_id, request.action)

    def to_response(self, operation: Operation) -> OperationResponse:
        return to_operation_response(operation)
