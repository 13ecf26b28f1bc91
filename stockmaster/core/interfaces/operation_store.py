"""Abstract interface for operation storage."""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable

from stockmaster.core.entities.movement import StockMovement
from stockmaster.core.entities.operation import (
    Operation,
    OperationFilters,
    OperationStatus,
    OperationType,
)

MovementBuilder = Callable[[Operation], list[StockMovement]]


class IOperationStore(ABC):
    """Interface for operation and operation item persistence."""

    @abstractmethod
    async def create(self, operation: Operation) -> Operation:
        """
        Persist a new operation with its items.

        The reference is allocated inside the same unit of work as the
        insert, so two concurrent creations never share a reference.
        """
        pass

    @abstractmethod
    async def get(self, operation_id: str) -> Operation | None:
        """Get operation by ID, items included."""
        pass

    @abstractmethod
    async def list_operations(
        self,
        filters: OperationFilters | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Operation], int]:
        """List operations newest first. Returns (page, total matching)."""
        pass

    @abstractmethod
    async def update(
        self, operation: Operation, replace_items: bool = False
    ) -> Operation | None:
        """
        Save editable fields (and optionally the whole item list).

        Returns None when the stored operation is no longer DRAFT or WAITING.
        """
        pass

    @abstractmethod
    async def apply_transition(
        self,
        operation_id: str,
        expected_status: OperationStatus,
        new_status: OperationStatus,
        build_movements: MovementBuilder | None = None,
    ) -> tuple[Operation, list[StockMovement]] | None:
        """
        Change status and append movements in one transaction.

        build_movements receives the operation as read under the write lock,
        items included, and returns the movements to append with it.
        Applies only if the stored status still equals expected_status;
        returns None (and writes nothing) otherwise.
        """
        pass

    @abstractmethod
    async def get_last_reference(self, operation_type: OperationType) -> str | None:
        """Reference of the most recently created operation of a type."""
        pass

    @abstractmethod
    async def count_operations(
        self,
        operation_type: OperationType,
        statuses: Iterable[OperationStatus] | None = None,
        location_ids: list[str] | None = None,
        exclude_statuses: Iterable[OperationStatus] | None = None,
    ) -> int:
        """Count operations of a type, optionally by status and touched locations."""
        pass
