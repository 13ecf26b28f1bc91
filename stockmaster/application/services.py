"""
Service factory functions for dependency injection.

This module provides factory functions that wire infrastructure
implementations to core services. Use cases should import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from stockmaster.config import get_settings
from stockmaster.core.services import (
    DashboardService,
    OperationLifecycleService,
    ReferenceSequencer,
    StockAggregator,
)
from stockmaster.infrastructure.events import EventNotifier, LoggingEventSink
from stockmaster.infrastructure.storage.sqlite import (
    get_catalog_store,
    get_operation_store,
    get_stock_ledger,
)

# Singleton service instances
_stock_aggregator: StockAggregator | None = None
_dashboard_service: DashboardService | None = None
_event_notifier: EventNotifier | None = None
_lifecycle_service: OperationLifecycleService | None = None
_reference_sequencer: ReferenceSequencer | None = None


async def get_stock_aggregator() -> StockAggregator:
    """Get or create the StockAggregator over the SQLite ledger."""
    global _stock_aggregator
    if _stock_aggregator is None:
        settings = get_settings()
        _stock_aggregator = StockAggregator(
            ledger=await get_stock_ledger(),
            catalog=await get_catalog_store(),
            default_limit=settings.pagination.default_limit,
            max_limit=settings.pagination.max_limit,
        )
    return _stock_aggregator


async def get_dashboard_service() -> DashboardService:
    """Get or create the DashboardService with the configured KPI cache TTL."""
    global _dashboard_service
    if _dashboard_service is None:
        _dashboard_service = DashboardService(
            operation_store=await get_operation_store(),
            ledger=await get_stock_ledger(),
            catalog=await get_catalog_store(),
            aggregator=await get_stock_aggregator(),
            cache_ttl=get_settings().cache.kpi_ttl,
        )
    return _dashboard_service


async def get_event_notifier() -> EventNotifier:
    """
    Get or create the EventNotifier.

    The notifier is created stopped; the application lifespan starts it.
    """
    global _event_notifier
    if _event_notifier is None:
        events = get_settings().events
        _event_notifier = EventNotifier(
            sinks=[LoggingEventSink(channel=events.channel)],
            aggregator=await get_stock_aggregator(),
            dashboard=await get_dashboard_service(),
            queue_size=events.queue_size,
            max_retries=events.max_retries,
            retry_delay=events.retry_delay,
            retry_multiplier=events.retry_multiplier,
            enabled=events.enabled,
        )
    return _event_notifier


async def get_lifecycle_service() -> OperationLifecycleService:
    """Get or create the OperationLifecycleService."""
    global _lifecycle_service
    if _lifecycle_service is None:
        settings = get_settings()
        _lifecycle_service = OperationLifecycleService(
            operation_store=await get_operation_store(),
            catalog=await get_catalog_store(),
            aggregator=await get_stock_aggregator(),
            publisher=await get_event_notifier(),
            default_limit=settings.pagination.default_limit,
            max_limit=settings.pagination.max_limit,
        )
    return _lifecycle_service


async def get_reference_sequencer() -> ReferenceSequencer:
    """Get or create the ReferenceSequencer used for previews."""
    global _reference_sequencer
    if _reference_sequencer is None:
        _reference_sequencer = ReferenceSequencer(await get_operation_store())
    return _reference_sequencer


def reset_services() -> None:
    """Reset all singleton services (for testing)."""
    global _stock_aggregator, _dashboard_service, _event_notifier
    global _lifecycle_service, _reference_sequencer
    _stock_aggregator = None
    _dashboard_service = None
    _event_notifier = None
    _lifecycle_service = None
    _reference_sequencer = None
