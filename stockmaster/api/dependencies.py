"""
Dependency injection container for FastAPI.

Provides service instances to route handlers.
"""

from functools import lru_cache

from fastapi import Request

from stockmaster.application.services import (
    get_dashboard_service,
    get_lifecycle_service,
    get_reference_sequencer,
    get_stock_aggregator,
)
from stockmaster.application.use_cases import (
    CreateOperationUseCase,
    TransitionOperationUseCase,
    UpdateOperationUseCase,
)
from stockmaster.config import Settings, get_settings
from stockmaster.core.services import (
    DashboardService,
    OperationLifecycleService,
    ReferenceSequencer,
    StockAggregator,
)


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


def get_current_user_id(request: Request) -> str:
    """
    Acting user for the request.

    Authentication happens upstream; the gateway forwards the user id in a
    header. Requests without it are attributed to the default user.
    """
    settings = get_settings()
    return request.headers.get(settings.api.user_header) or settings.api.default_user_id


# Service dependencies
async def get_lifecycle() -> OperationLifecycleService:
    """Get operation lifecycle service."""
    return await get_lifecycle_service()


async def get_aggregator() -> StockAggregator:
    """Get stock aggregator."""
    return await get_stock_aggregator()


async def get_dashboard() -> DashboardService:
    """Get dashboard service."""
    return await get_dashboard_service()


async def get_sequencer() -> ReferenceSequencer:
    """Get reference sequencer."""
    return await get_reference_sequencer()


# Use case dependencies
def get_create_operation_use_case() -> CreateOperationUseCase:
    """Get create operation use case."""
    return CreateOperationUseCase()


def get_update_operation_use_case() -> UpdateOperationUseCase:
    """Get update operation use case."""
    return UpdateOperationUseCase()


def get_transition_operation_use_case() -> TransitionOperationUseCase:
    """Get transition operation use case."""
    return TransitionOperationUseCase()
