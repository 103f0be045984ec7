"""Cache store implementations."""

from cachedquery.infrastructure.stores.memory import InMemoryCacheStore

__all__ = ["InMemoryCacheStore"]
