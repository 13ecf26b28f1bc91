"""Event sink implementations."""

from collections import deque
from typing import Any

from stockmaster.config import get_logger
from stockmaster.core.entities.events import DomainEvent
from stockmaster.core.interfaces.events import IEventSink

logger = get_logger(__name__)


class LoggingEventSink(IEventSink):
    """Writes each event to the structured log under a channel name."""

    def __init__(self, channel: str = "stockmaster:events"):
        self.channel = channel

    async def publish(self, event: DomainEvent) -> None:
        message = event.to_message()
        logger.info(
            "event_published",
            channel=self.channel,
            event_type=message["type"],
            payload=message["payload"],
        )


class InMemoryEventSink(IEventSink):
    """Keeps the most recent wire messages in memory."""

    def __init__(self, max_events: int = 500):
        self._messages: deque[dict[str, Any]] = deque(maxlen=max_events)

    async def publish(self, event: DomainEvent) -> None:
        self._messages.append(event.to_message())

    @property
    def messages(self) -> list[dict[str, Any]]:
        return list(self._messages)

    def of_type(self, event_type: str) -> list[dict[str, Any]]:
        return [m for m in self._messages if m["type"] == event_type]

    def clear(self) -> None:
        self._messages.clear()
