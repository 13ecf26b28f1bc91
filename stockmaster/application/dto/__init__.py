"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from stockmaster.application.dto.requests import (
    CountedItemRequest,
    CreateAdjustmentRequest,
    CreateDeliveryRequest,
    CreateReceiptRequest,
    CreateTransferRequest,
    OperationItemRequest,
    TransitionRequest,
    UpdateOperationRequest,
)
from stockmaster.application.dto.responses import (
    ComponentHealthResponse,
    ErrorResponse,
    HealthResponse,
    CategorySummaryResponse,
    KpisResponse,
    LedgerRowResponse,
    LocationStockResponse,
    LowStockItemResponse,
    LowStockResponse,
    MoveHistoryResponse,
    MovementResponse,
    NextReferenceResponse,
    OperationItemResponse,
    OperationListResponse,
    OperationResponse,
    PaginatedResponse,
    ProductLedgerResponse,
    ProductStockResponse,
    StockLevelResponse,
    WarehouseSummaryResponse,
)

__all__ = [
    # Requests
    "OperationItemRequest",
    "CountedItemRequest",
    "CreateReceiptRequest",
    "CreateDeliveryRequest",
    "CreateTransferRequest",
    "CreateAdjustmentRequest",
    "UpdateOperationRequest",
    "TransitionRequest",
    # Responses
    "PaginatedResponse",
    "OperationItemResponse",
    "OperationResponse",
    "OperationListResponse",
    "NextReferenceResponse",
    "StockLevelResponse",
    "LocationStockResponse",
    "ProductStockResponse",
    "LowStockItemResponse",
    "LowStockResponse",
    "LedgerRowResponse",
    "ProductLedgerResponse",
    "MovementResponse",
    "MoveHistoryResponse",
    "CategorySummaryResponse",
    "KpisResponse",
    "WarehouseSummaryResponse",
    "ComponentHealthResponse",
    "HealthResponse",
    "ErrorResponse",
]
