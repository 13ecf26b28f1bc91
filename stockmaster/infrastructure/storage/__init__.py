"""Storage infrastructure implementations."""

from stockmaster.infrastructure.storage.sqlite import (
    SQLiteCatalogStore,
    SQLiteOperationStore,
    SQLiteStockLedger,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)

__all__ = [
    # SQLite stores
    "SQLiteOperationStore",
    "SQLiteStockLedger",
    "SQLiteCatalogStore",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
