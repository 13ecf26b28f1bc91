"""Infrastructure layer implementations."""

from stockmaster.infrastructure import events, storage

__all__ = ["storage", "events"]
