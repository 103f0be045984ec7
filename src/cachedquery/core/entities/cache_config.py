"""Cache configuration entity."""

from dataclasses import dataclass
from datetime import timedelta


@dataclass
class CacheConfig:
    """Cache configuration.

    Provides configuration options for the query cache, including
    TTL defaults, size limits, and housekeeping of the in-memory store.

    When enabled=False the executor neither reads nor writes the store,
    and every activation goes straight to the fetch function.
    """

    enabled: bool = True
    default_ttl: timedelta = timedelta(minutes=5)
    max_size: int = 1000

    # Housekeeping for InMemoryCacheStore
    cleanup_interval: timedelta = timedelta(minutes=5)
    size_warning_threshold: int = 100
