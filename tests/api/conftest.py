"""Fixtures for HTTP API tests."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from stockmaster.api.dependencies import (
    get_aggregator,
    get_create_operation_use_case,
    get_dashboard,
    get_lifecycle,
    get_sequencer,
    get_transition_operation_use_case,
    get_update_operation_use_case,
)
from stockmaster.api.main import app
from stockmaster.application.use_cases import (
    CreateOperationUseCase,
    TransitionOperationUseCase,
    UpdateOperationUseCase,
)
from stockmaster.core.services import ReferenceSequencer


@pytest.fixture
async def api_client(stack) -> AsyncGenerator[AsyncClient, None]:
    """Async client whose services run on the seeded test database."""
    app.dependency_overrides.update(
        {
            get_lifecycle: lambda: stack.lifecycle,
            get_aggregator: lambda: stack.aggregator,
            get_dashboard: lambda: stack.dashboard,
            get_sequencer: lambda: ReferenceSequencer(stack.operations),
            get_create_operation_use_case: lambda: CreateOperationUseCase(stack.lifecycle),
            get_update_operation_use_case: lambda: UpdateOperationUseCase(stack.lifecycle),
            get_transition_operation_use_case: lambda: TransitionOperationUseCase(
                stack.lifecycle
            ),
        }
    )
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def receipt_body() -> dict:
    return {
        "location_to_id": "loc-stock",
        "contact_name": "Acme Supply",
        "items": [{"product_id": "prod-bolt", "quantity": "25"}],
    }
