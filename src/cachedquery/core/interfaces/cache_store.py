"""Cache store interface."""

from datetime import timedelta
from typing import Any, Protocol

from cachedquery.utils.matching import KeyPattern


class ICacheStore(Protocol):
    """Contract for key-value stores backing the query cache.

    QueryExecutor only relies on ``get`` and ``set``. The remaining
    methods are used by CacheInvalidator and by consumers managing the
    cache directly. Methods are synchronous: a cache hit must be served
    without suspending the caller.
    """

    def get(self, key: str) -> Any | None:
        """Retrieve a live value by key.

        Args:
            key: The cache key to retrieve.

        Returns:
            The cached value, or None if absent or expired.
        """
        ...

    def set(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        """Insert or overwrite a value.

        Args:
            key: The cache key.
            value: The value to store.
            ttl: Optional time-to-live. If None, uses the store default.
        """
        ...

    def delete(self, key: str) -> bool:
        """Delete a value.

        Args:
            key: The cache key to delete.

        Returns:
            True if a live entry existed and was deleted, False otherwise.
        """
        ...

    def has(self, key: str) -> bool:
        """Check if a live entry exists for key."""
        ...

    def invalidate(self, pattern: KeyPattern) -> int:
        """Delete every live key matching pattern.

        Args:
            pattern: Regex (compiled or source) or key predicate.

        Returns:
            Number of keys deleted.
        """
        ...

    def clear(self) -> None:
        """Remove every entry."""
        ...
