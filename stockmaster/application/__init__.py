"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services
3. Providing factory functions for dependency injection
"""

from stockmaster.application.services import (
    get_dashboard_service,
    get_event_notifier,
    get_lifecycle_service,
    get_reference_sequencer,
    get_stock_aggregator,
    reset_services,
)
from stockmaster.application.use_cases import (
    CreateOperationUseCase,
    TransitionOperationUseCase,
    UpdateOperationUseCase,
)

__all__ = [
    # Use Cases
    "CreateOperationUseCase",
    "UpdateOperationUseCase",
    "TransitionOperationUseCase",
    # Service factories
    "get_stock_aggregator",
    "get_dashboard_service",
    "get_event_notifier",
    "get_lifecycle_service",
    "get_reference_sequencer",
    "reset_services",
]
