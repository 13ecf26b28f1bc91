"""Application use cases."""

from stockmaster.application.use_cases.create_operation import (
    CreateOperationUseCase,
    to_operation_response,
)
from stockmaster.application.use_cases.transition_operation import TransitionOperationUseCase
from stockmaster.application.use_cases.update_operation import UpdateOperationUseCase

__all__ = [
    "CreateOperationUseCase",
    "UpdateOperationUseCase",
    "TransitionOperationUseCase",
    "to_operation_response",
]
