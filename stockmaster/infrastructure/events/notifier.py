"""
Asynchronous event notifier.

Lifecycle calls hand over a batch of events and return immediately. A
background task drains the queue, fills in live stock figures, appends one
dashboard KPI snapshot per batch and delivers everything to the sinks.
Delivery is best effort: failures are retried, then logged and dropped.
"""

import asyncio
import contextlib
from typing import Any

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from stockmaster.config import get_logger
from stockmaster.core.entities.events import (
    DomainEvent,
    EventType,
    dashboard_kpis_updated,
)
from stockmaster.core.interfaces.events import IEventPublisher, IEventSink
from stockmaster.core.services.dashboard import DashboardService
from stockmaster.core.services.stock_aggregator import StockAggregator

logger = get_logger(__name__)


class EventNotifier(IEventPublisher):
    """Queue-backed publisher delivering event batches to sinks."""

    def __init__(
        self,
        sinks: list[IEventSink],
        aggregator: StockAggregator | None = None,
        dashboard: DashboardService | None = None,
        queue_size: int = 1000,
        max_retries: int = 3,
        retry_delay: float = 0.2,
        retry_multiplier: float = 2.0,
        enabled: bool = True,
    ):
        self._sinks = list(sinks)
        self._aggregator = aggregator
        self._dashboard = dashboard
        self._queue: asyncio.Queue[list[DomainEvent]] = asyncio.Queue(maxsize=queue_size)
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._retry_multiplier = retry_multiplier
        self.enabled = enabled
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def publish(self, events: list[DomainEvent]) -> None:
        """Enqueue one lifecycle call's events. Never blocks, never raises."""
        if self._dashboard is not None:
            self._dashboard.invalidate_cache()
        if not self.enabled or not events:
            return
        try:
            self._queue.put_nowait(list(events))
        except asyncio.QueueFull:
            logger.warning(
                "event_batch_dropped",
                reason="queue_full",
                events=[e.type.value for e in events],
            )

    async def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self._drain(), name="event-notifier")
        logger.info("event_notifier_started", sinks=len(self._sinks))

    async def join(self) -> None:
        """Wait until every queued batch has been handled."""
        await self._queue.join()

    async def stop(self, drain: bool = True) -> None:
        if self._task is None:
            return
        if drain and self.is_running:
            await self._queue.join()
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("event_notifier_stopped")

    async def _drain(self) -> None:
        while True:
            batch = await self._queue.get()
            try:
                await self._deliver_batch(batch)
            except Exception as e:
                logger.error(
                    "event_batch_failed",
                    error=str(e),
                    error_type=type(e).__name__,
                )
            finally:
                self._queue.task_done()

    async def _deliver_batch(self, batch: list[DomainEvent]) -> None:
        for event in batch:
            await self._deliver(await self._resolve(event))

        if self._dashboard is not None:
            self._dashboard.invalidate_cache()
            kpis = await self._dashboard.get_kpis(use_cache=False)
            await self._deliver(dashboard_kpis_updated(kpis.to_payload()))

    async def _resolve(self, event: DomainEvent) -> DomainEvent:
        """Fill in newQty on stock level events from the current ledger."""
        if (
            event.type != EventType.STOCK_LEVEL_CHANGED
            or event.payload.get("newQty") is not None
            or self._aggregator is None
        ):
            return event

        product_id = event.payload["productId"]
        location_id = event.payload["locationId"]
        new_qty = await self._aggregator.stock_at(product_id, location_id=location_id)
        return event.model_copy(update={"payload": {**event.payload, "newQty": new_qty}})

    async def _deliver(self, event: DomainEvent) -> None:
        for sink in self._sinks:
            try:
                await self._get_retry_decorator()(sink.publish)(event)
            except Exception as e:
                logger.error(
                    "event_delivery_failed",
                    sink=type(sink).__name__,
                    event_type=event.type.value,
                    error=str(e),
                )

    def _get_retry_decorator(self) -> Any:
        return retry(
            stop=stop_after_attempt(self._max_retries),
            wait=wait_exponential(
                multiplier=self._retry_delay,
                min=self._retry_delay,
                max=self._retry_delay * (self._retry_multiplier**3),
            ),
            retry=retry_if_exception_type((TimeoutError, ConnectionError)),
            before_sleep=self._log_retry,
            reraise=True,
        )

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        logger.warning(
            "event_delivery_retry",
            attempt=retry_state.attempt_number,
            error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
        )
