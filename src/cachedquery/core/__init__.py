"""Core domain layer for cachedquery."""

from cachedquery.core.entities import (
    CacheConfig,
    CacheEntry,
    QueryOptions,
    QueryState,
    TTLPolicy,
)
from cachedquery.core.interfaces import ICacheStore, IEventBus
from cachedquery.core.services import (
    CacheInvalidator,
    OptimisticLoadingController,
    QueryExecutor,
)

__all__ = [
    # Entities
    "CacheConfig",
    "CacheEntry",
    "QueryState",
    "QueryOptions",
    "TTLPolicy",
    # Interfaces
    "ICacheStore",
    "IEventBus",
    # Services
    "QueryExecutor",
    "OptimisticLoadingController",
    "CacheInvalidator",
]
