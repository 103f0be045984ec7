"""Infrastructure layer implementations for cachedquery."""

from cachedquery.infrastructure.events import InMemoryEventBus
from cachedquery.infrastructure.stores import InMemoryCacheStore

__all__ = [
    "InMemoryCacheStore",
    "InMemoryEventBus",
]
