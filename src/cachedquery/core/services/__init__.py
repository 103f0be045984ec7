"""Domain services for cachedquery."""

from cachedquery.core.services.invalidation import (
    CATEGORIES_UPDATED,
    DEFAULT_RULES,
    CacheInvalidator,
    emit_categories_update,
    on_categories_update,
)
from cachedquery.core.services.optimistic_loading import (
    OptimisticLoadingController,
    SkeletonState,
)
from cachedquery.core.services.query_executor import (
    FetchFn,
    QueryExecutor,
    QuerySubscription,
)

__all__ = [
    "QueryExecutor",
    "QuerySubscription",
    "FetchFn",
    # Optimistic loading
    "OptimisticLoadingController",
    "SkeletonState",
    # Invalidation
    "CacheInvalidator",
    "CATEGORIES_UPDATED",
    "DEFAULT_RULES",
    "emit_categories_update",
    "on_categories_update",
]
