"""Abstract interface for the append-only stock ledger."""

from abc import ABC, abstractmethod
from typing import Any

from stockmaster.core.entities.movement import (
    MoveHistoryFilters,
    MovementDetail,
    StockMovement,
)


class IStockLedger(ABC):
    """Interface for stock movement persistence and retrieval."""

    @abstractmethod
    async def append(self, conn: Any, movements: list[StockMovement]) -> list[StockMovement]:
        """
        Append movements on the caller's open transaction.

        Only the operation commit path calls this; there is no standalone
        movement write.
        """
        pass

    @abstractmethod
    async def list_movements(
        self,
        product_id: str | None = None,
        location_ids: list[str] | None = None,
    ) -> list[StockMovement]:
        """Movements oldest first, optionally for one product and/or touching locations."""
        pass

    @abstractmethod
    async def list_for_operation(self, operation_id: str) -> list[StockMovement]:
        """Movements produced by one operation."""
        pass

    @abstractmethod
    async def list_details(self, product_id: str) -> list[MovementDetail]:
        """Movements of a product joined with operation and locations, oldest first."""
        pass

    @abstractmethod
    async def query_history(
        self,
        filters: MoveHistoryFilters | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[MovementDetail], int]:
        """Filtered movement history newest first. Returns (page, total matching)."""
        pass

    @abstractmethod
    async def distinct_product_ids(self, location_ids: list[str] | None = None) -> list[str]:
        """Products that have any movement, optionally touching given locations."""
        pass

    @abstractmethod
    async def delete_for_operation(self, operation_id: str) -> int:
        """Remove an operation's movements. Test-data teardown only."""
        pass
