"""Core interfaces (ports) for dependency injection."""

from stockmaster.core.interfaces.catalog_store import ICatalogStore
from stockmaster.core.interfaces.events import IEventPublisher, IEventSink
from stockmaster.core.interfaces.operation_store import IOperationStore
from stockmaster.core.interfaces.stock_ledger import IStockLedger

__all__ = [
    # Storage interfaces
    "IOperationStore",
    "IStockLedger",
    "ICatalogStore",
    # Event interfaces
    "IEventSink",
    "IEventPublisher",
]
