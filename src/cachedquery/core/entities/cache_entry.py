"""Cache entry entity."""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    """Immutable cache entry value object.

    Times are expressed in the owning store's timer units (seconds on a
    monotonic clock by default), not wall-clock datetimes.
    """

    key: str
    value: Any
    created_at: float
    ttl: timedelta

    @property
    def expires_at(self) -> float:
        """Timer value at which this entry stops being served."""
        return self.created_at + self.ttl.total_seconds()

    def is_expired(self, now: float) -> bool:
        """Check if entry has expired at the given timer value.

        Args:
            now: Current timer value.

        Returns:
            True if the entry has expired, False otherwise.
        """
        return now >= self.expires_at

    @classmethod
    def create(
        cls,
        key: str,
        value: Any,
        ttl: timedelta,
        now: float,
    ) -> "CacheEntry":
        """Factory method to create a new cache entry.

        Args:
            key: The cache key.
            value: The value to cache.
            ttl: Time-to-live for the entry.
            now: Current timer value of the store.

        Returns:
            A new CacheEntry instance.
        """
        return cls(key=key, value=value, created_at=now, ttl=ttl)
