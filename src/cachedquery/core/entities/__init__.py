"""Domain entities for cachedquery."""

from cachedquery.core.entities.cache_config import CacheConfig
from cachedquery.core.entities.cache_entry import CacheEntry
from cachedquery.core.entities.fetch_session import (
    CancellationSignal,
    FetchCancelledError,
    FetchContext,
    FetchSession,
)
from cachedquery.core.entities.query_state import QueryOptions, QueryState
from cachedquery.core.entities.skeleton_timing import SkeletonTiming
from cachedquery.core.entities.ttl_policy import DEFAULT_TTLS, ResourceType, TTLPolicy

__all__ = [
    "CacheConfig",
    "CacheEntry",
    "QueryState",
    "QueryOptions",
    # Sessions
    "FetchSession",
    "FetchContext",
    "CancellationSignal",
    "FetchCancelledError",
    # TTL policy
    "ResourceType",
    "TTLPolicy",
    "DEFAULT_TTLS",
    "SkeletonTiming",
]
