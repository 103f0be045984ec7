"""Event bus implementations."""

from cachedquery.infrastructure.events.memory import InMemoryEventBus

__all__ = ["InMemoryEventBus"]
