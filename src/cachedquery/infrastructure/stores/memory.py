"""In-memory cache store implementation."""

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable
from datetime import timedelta
from typing import Any

from cachetools import TLRUCache  # type: ignore[import-untyped]

from cachedquery.core.entities.cache_config import CacheConfig
from cachedquery.core.entities.cache_entry import CacheEntry
from cachedquery.utils.matching import KeyPattern, compile_matcher, describe_pattern
from cachedquery.utils.serialization import approximate_size

logger = logging.getLogger(__name__)


class InMemoryCacheStore:
    """In-memory cache store using LRU eviction with per-entry TTL.

    Suitable for a single process. Uses cachetools' TLRUCache, whose
    time-to-use function gives every entry its own expiry, so a
    ``get`` past an entry's TTL is a miss.
    """

    def __init__(
        self,
        maxsize: int = 1000,
        default_ttl: timedelta = timedelta(minutes=5),
        timer: Callable[[], float] = time.monotonic,
        size_warning_threshold: int = 100,
        cleanup_interval: timedelta = timedelta(minutes=5),
    ) -> None:
        """Initialize the in-memory cache store.

        Args:
            maxsize: Maximum number of entries; least recently used go first.
            default_ttl: TTL for ``set`` calls that pass none.
            timer: Clock in seconds. Tests inject a fake one.
            size_warning_threshold: Entry count above which the periodic
                cleanup logs a warning.
            cleanup_interval: Default time between sweeps of the periodic
                cleanup.
        """
        self._maxsize = maxsize
        self._default_ttl = default_ttl
        self._size_warning_threshold = size_warning_threshold
        self._cleanup_interval = cleanup_interval
        self._cache: TLRUCache[str, CacheEntry] = TLRUCache(
            maxsize=maxsize,
            ttu=self._time_to_use,
            timer=timer,
        )
        self._cleanup_task: asyncio.Task[None] | None = None

    @classmethod
    def from_config(
        cls,
        config: CacheConfig,
        timer: Callable[[], float] = time.monotonic,
    ) -> "InMemoryCacheStore":
        """Create a store sized and timed from a CacheConfig."""
        return cls(
            maxsize=config.max_size,
            default_ttl=config.default_ttl,
            timer=timer,
            size_warning_threshold=config.size_warning_threshold,
            cleanup_interval=config.cleanup_interval,
        )

    @staticmethod
    def _time_to_use(key: str, entry: CacheEntry, now: float) -> float:
        return entry.expires_at

    def get(self, key: str) -> Any | None:
        """Retrieve a live value by key.

        Args:
            key: The cache key to retrieve.

        Returns:
            The cached value, or None if not found or expired.
        """
        entry = self._cache.get(key)
        return entry.value if entry is not None else None

    def get_entry(self, key: str) -> CacheEntry | None:
        """Retrieve the live entry (value plus timing) for key."""
        return self._cache.get(key)

    def set(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        """Insert or overwrite a value.

        A non-positive TTL removes any existing entry instead of storing.

        Args:
            key: The cache key.
            value: The value to store.
            ttl: Optional time-to-live. If None, uses the default.
        """
        effective_ttl = ttl if ttl is not None else self._default_ttl
        if effective_ttl <= timedelta(0):
            self.delete(key)
            return

        entry = CacheEntry.create(
            key=key,
            value=value,
            ttl=effective_ttl,
            now=self._cache.timer(),
        )
        self._cache[key] = entry

    def delete(self, key: str) -> bool:
        """Delete a value.

        Args:
            key: The cache key to delete.

        Returns:
            True if a live entry existed and was deleted, False otherwise.
        """
        if key not in self._cache:
            return False
        try:
            del self._cache[key]
            return True
        except KeyError:
            # Expired between the membership check and the delete
            return False

    def has(self, key: str) -> bool:
        """Check if a live entry exists for key."""
        return key in self._cache

    def invalidate(self, pattern: KeyPattern) -> int:
        """Delete every live key matching pattern.

        Args:
            pattern: Regex (compiled or source) or key predicate.

        Returns:
            Number of keys deleted.
        """
        matcher = compile_matcher(pattern)
        keys_to_delete = [key for key in list(self._cache) if matcher(key)]

        count = 0
        for key in keys_to_delete:
            if self.delete(key):
                count += 1

        logger.debug(
            "Invalidated %d items matching %s", count, describe_pattern(pattern)
        )
        return count

    def clear(self) -> None:
        """Remove every entry."""
        size = len(self._cache)
        self._cache.clear()
        logger.debug("Cleared %d items", size)

    def clean_expired(self) -> int:
        """Purge expired entries.

        Returns:
            Number of entries removed.
        """
        expired = self._cache.expire()
        count = len(expired)
        if count > 0:
            logger.debug("Cleaned %d expired items", count)
        return count

    def keys(self) -> list[str]:
        """Return the live keys."""
        return list(self._cache)

    @property
    def stats(self) -> dict[str, Any]:
        """Get store statistics.

        Returns:
            Dictionary with live item count, approximate payload size in
            KB, and the live keys.
        """
        total_size = 0
        keys: list[str] = []
        for key in list(self._cache):
            entry = self._cache.get(key)
            if entry is None:
                continue
            keys.append(key)
            total_size += approximate_size(entry.value)

        return {
            "total_items": len(keys),
            "approximate_size_kb": round(total_size / 1024),
            "keys": keys,
        }

    def start_auto_cleanup(self, interval: timedelta | None = None) -> None:
        """Start a background task purging expired entries periodically.

        Must be called from a running event loop. Calling it again while a
        task is running does nothing.

        Args:
            interval: Time between sweeps. Uses the store default if None.
        """
        if self._cleanup_task is not None and not self._cleanup_task.done():
            return
        self._cleanup_task = asyncio.get_running_loop().create_task(
            self._cleanup_loop((interval or self._cleanup_interval).total_seconds())
        )

    async def stop_auto_cleanup(self) -> None:
        """Stop the background cleanup task, if any."""
        task, self._cleanup_task = self._cleanup_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _cleanup_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            self.clean_expired()
            size = len(self._cache)
            if size > self._size_warning_threshold:
                logger.warning(
                    "Cache size is %d (threshold %d), consider clearing old items",
                    size,
                    self._size_warning_threshold,
                )

    def __len__(self) -> int:
        """Return the number of live items in the store."""
        return len(self._cache)

    @property
    def maxsize(self) -> int:
        """Return the maximum size of the store."""
        return self._maxsize
