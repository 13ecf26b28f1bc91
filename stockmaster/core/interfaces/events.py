"""Abstract interfaces for domain event publication."""

from abc import ABC, abstractmethod

from stockmaster.core.entities.events import DomainEvent


class IEventSink(ABC):
    """Destination for published domain events (pub/sub, WebSocket hub, log)."""

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        """Deliver one event."""
        pass


class IEventPublisher(ABC):
    """Entry point lifecycle code hands its events to."""

    @abstractmethod
    def publish(self, events: list[DomainEvent]) -> None:
        """
        Queue the events produced by one lifecycle call.

        Must return promptly and must not raise; delivery happens later.
        """
        pass
