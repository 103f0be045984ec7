"""cachedquery - TTL query cache for asyncio clients.

A Python library for caching the results of async fetch functions
with cache-first reads, deduplication of concurrent fetches,
cancellation, pattern-based invalidation, and skeleton gating
that avoids flashing loading placeholders for fast responses.

Example:
    from cachedquery import (
        InMemoryCacheStore,
        OptimisticLoadingController,
        QueryExecutor,
        ResourceType,
        keys,
    )

    store = InMemoryCacheStore()
    executor = QueryExecutor(store)

    async def fetch_assets(ctx):
        return await api.get_assets(page=1)

    query = executor.subscribe(
        keys.assets_list(page=1),
        fetch_assets,
        resource=ResourceType.ASSETS_LIST,
    )
    skeleton = OptimisticLoadingController()
    stop_watching = skeleton.watch(query)

    await query.wait()
    print(query.data, query.is_cached)

    stop_watching()
    query.dispose()

Invalidation after a mutation:
    from cachedquery import CacheInvalidator, patterns

    invalidator = CacheInvalidator(store)
    invalidator.invalidate(patterns.user_profile("alice"))
"""

from cachedquery import keys, patterns
from cachedquery.core.entities import (
    DEFAULT_TTLS,
    CacheConfig,
    CacheEntry,
    CancellationSignal,
    FetchCancelledError,
    FetchContext,
    FetchSession,
    QueryOptions,
    QueryState,
    ResourceType,
    SkeletonTiming,
    TTLPolicy,
)
from cachedquery.core.interfaces import EventHandler, ICacheStore, IEventBus
from cachedquery.core.services import (
    CATEGORIES_UPDATED,
    CacheInvalidator,
    FetchFn,
    OptimisticLoadingController,
    QueryExecutor,
    QuerySubscription,
    SkeletonState,
    emit_categories_update,
    on_categories_update,
)
from cachedquery.decorators import configure, invalidates
from cachedquery.infrastructure import InMemoryCacheStore, InMemoryEventBus
from cachedquery.utils.matching import InvalidPatternError, KeyPattern

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Key and pattern helpers
    "keys",
    "patterns",
    "KeyPattern",
    "InvalidPatternError",
    # Core entities
    "CacheConfig",
    "CacheEntry",
    "QueryState",
    "QueryOptions",
    "FetchSession",
    "FetchContext",
    "CancellationSignal",
    "FetchCancelledError",
    "ResourceType",
    "TTLPolicy",
    "DEFAULT_TTLS",
    "SkeletonTiming",
    # Core interfaces
    "ICacheStore",
    "IEventBus",
    "EventHandler",
    # Core services
    "QueryExecutor",
    "QuerySubscription",
    "FetchFn",
    "OptimisticLoadingController",
    "SkeletonState",
    "CacheInvalidator",
    "CATEGORIES_UPDATED",
    "emit_categories_update",
    "on_categories_update",
    # Infrastructure implementations
    "InMemoryCacheStore",
    "InMemoryEventBus",
    # Decorators
    "invalidates",
    "configure",
]
