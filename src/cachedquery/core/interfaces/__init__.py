"""Core interfaces (Protocol classes) for cachedquery."""

from cachedquery.core.interfaces.cache_store import ICacheStore
from cachedquery.core.interfaces.event_bus import EventHandler, IEventBus

__all__ = [
    "ICacheStore",
    "IEventBus",
    "EventHandler",
]
