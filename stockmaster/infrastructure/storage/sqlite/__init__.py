"""SQLite storage implementations."""

from stockmaster.infrastructure.storage.sqlite.catalog_store import SQLiteCatalogStore
from stockmaster.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from stockmaster.infrastructure.storage.sqlite.operation_store import SQLiteOperationStore
from stockmaster.infrastructure.storage.sqlite.stock_ledger import SQLiteStockLedger

# Singleton instances
_stock_ledger: SQLiteStockLedger | None = None
_operation_store: SQLiteOperationStore | None = None
_catalog_store: SQLiteCatalogStore | None = None


async def get_stock_ledger() -> SQLiteStockLedger:
    """Get singleton stock ledger instance."""
    global _stock_ledger
    if _stock_ledger is None:
        _stock_ledger = SQLiteStockLedger()
    return _stock_ledger


async def get_operation_store() -> SQLiteOperationStore:
    """Get singleton operation store instance, sharing the ledger singleton."""
    global _operation_store
    if _operation_store is None:
        _operation_store = SQLiteOperationStore(ledger=await get_stock_ledger())
    return _operation_store


async def get_catalog_store() -> SQLiteCatalogStore:
    """Get singleton catalog store instance."""
    global _catalog_store
    if _catalog_store is None:
        _catalog_store = SQLiteCatalogStore()
    return _catalog_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Store classes
    "SQLiteOperationStore",
    "SQLiteStockLedger",
    "SQLiteCatalogStore",
    # Factory functions
    "get_operation_store",
    "get_stock_ledger",
    "get_catalog_store",
]
