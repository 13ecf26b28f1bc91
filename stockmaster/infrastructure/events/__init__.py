"""Domain event delivery."""

from stockmaster.infrastructure.events.notifier import EventNotifier
from stockmaster.infrastructure.events.sinks import InMemoryEventSink, LoggingEventSink

__all__ = [
    "EventNotifier",
    "LoggingEventSink",
    "InMemoryEventSink",
]
