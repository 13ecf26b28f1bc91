"""
Domain exceptions for the StockMaster application.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class StockMasterError(Exception):
    """Base exception for all StockMaster errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Not Found Exceptions
class NotFoundError(StockMasterError):
    """Referenced entity does not exist."""

    def __init__(self, entity: str, entity_id: str, label: str | None = None):
        super().__init__(
            f"{label or entity} not found: {entity_id}",
            code=f"{entity.upper()}_NOT_FOUND",
            details={"entity": entity, "id": entity_id},
        )


class OperationNotFoundError(NotFoundError):
    """Operation not found in storage."""

    def __init__(self, operation_id: str):
        super().__init__("Operation", operation_id)


class LocationNotFoundError(NotFoundError):
    """Location not found in the catalog."""

    def __init__(self, location_id: str, role: str | None = None):
        label = f"{role.capitalize()} location" if role else None
        super().__init__("Location", location_id, label=label)
        if role:
            self.details["role"] = role


class WarehouseNotFoundError(NotFoundError):
    """Warehouse not found in the catalog."""

    def __init__(self, warehouse_id: str):
        super().__init__("Warehouse", warehouse_id)


class ProductNotFoundError(NotFoundError):
    """Product not found in the catalog."""

    def __init__(self, product_id: str):
        super().__init__("Product", product_id)


# Conflict Exceptions
class ConflictError(StockMasterError):
    """Request conflicts with the current state of a resource."""

    pass


class OperationLockedError(ConflictError):
    """Operation is no longer editable."""

    def __init__(self, operation_id: str, status: str):
        super().__init__(
            f"Operation {operation_id} is {status}; only DRAFT or WAITING operations can be edited",
            code="OPERATION_LOCKED",
            details={"operation_id": operation_id, "status": status},
        )


class DuplicateReferenceError(ConflictError):
    """Generated reference already exists for the operation type."""

    def __init__(self, reference: str, operation_type: str):
        super().__init__(
            f"Reference already exists: {reference}",
            code="DUPLICATE_REFERENCE",
            details={"reference": reference, "type": operation_type},
        )


class InvalidTransitionError(StockMasterError):
    """Action is not legal for the operation's status and type."""

    def __init__(
        self,
        operation_id: str,
        action: str,
        status: str,
        operation_type: str,
        reason: str | None = None,
    ):
        message = f"Cannot apply {action} to {operation_type} operation in status {status}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message,
            code="INVALID_TRANSITION",
            details={
                "operation_id": operation_id,
                "action": action,
                "status": status,
                "type": operation_type,
            },
        )


# Validation Exceptions
class ValidationError(StockMasterError):
    """Input validation failed."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(
            message,
            code="VALIDATION_ERROR",
            details={"field": field} if field else {},
        )


class EmptyItemsError(ValidationError):
    """Operation has no line items."""

    def __init__(self) -> None:
        super().__init__("Operation requires at least one item", field="items")


class InvalidQuantityError(ValidationError):
    """Quantity is outside the allowed range."""

    def __init__(self, product_id: str, quantity: Any, allow_zero: bool = False):
        bound = "non-negative" if allow_zero else "positive"
        super().__init__(
            f"Quantity for product {product_id} must be {bound}, got {quantity}",
            field="quantity",
        )
        self.details.update({"product_id": product_id, "quantity": str(quantity)})


class SameLocationTransferError(ValidationError):
    """Transfer source and destination are the same location."""

    def __init__(self, location_id: str):
        super().__init__(
            "Source and destination locations cannot be the same",
            field="location_to_id",
        )
        self.details["location_id"] = location_id


class InvalidLocationShapeError(ValidationError):
    """Operation locations do not match what its type requires."""

    def __init__(self, operation_type: str, expected: str):
        super().__init__(
            f"{operation_type} operation requires {expected}",
            field="locations",
        )
        self.details["type"] = operation_type


# Storage Exceptions
class StorageError(StockMasterError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )
