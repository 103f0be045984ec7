"""Query state and options entities."""

from dataclasses import dataclass, replace
from datetime import timedelta
from typing import Any


@dataclass(frozen=True)
class QueryState:
    """Snapshot of one subscription's view of a query.

    Attributes:
        data: Last successfully loaded value, or None.
        loading: True while a foreground fetch is pending.
        error: Error raised by the last failed fetch, or None.
        is_cached: True when ``data`` was served from the cache store.
    """

    data: Any | None = None
    loading: bool = False
    error: BaseException | None = None
    is_cached: bool = False

    def evolve(self, **changes: Any) -> "QueryState":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    @classmethod
    def initial(cls, enabled: bool = True) -> "QueryState":
        """State of a freshly created (or reset) subscription."""
        return cls(loading=enabled)


@dataclass(frozen=True)
class QueryOptions:
    """Per-subscription options.

    Attributes:
        ttl: How long a fetched value stays in the store.
        enabled: When False the subscription neither reads the cache
            nor fetches.
        stale_while_revalidate: Serve a cache hit immediately and refresh
            it in the background.
    """

    ttl: timedelta
    enabled: bool = True
    stale_while_revalidate: bool = False
