"""Cache invalidation service.

Sweeps the cache store of keys made stale by a mutation, either when
called directly or when a topic is published on the event bus.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from cachedquery.core.interfaces.cache_store import ICacheStore
from cachedquery.core.interfaces.event_bus import IEventBus
from cachedquery.patterns import ALL_CATEGORIES
from cachedquery.utils.matching import KeyPattern

logger = logging.getLogger(__name__)

CATEGORIES_UPDATED = "categories_updated"

DEFAULT_RULES: Mapping[str, Sequence[KeyPattern]] = {
    CATEGORIES_UPDATED: (ALL_CATEGORIES,),
}


class CacheInvalidator:
    """Applies invalidation patterns to a cache store.

    Example:
        invalidator = CacheInvalidator(store, event_bus=bus)
        invalidator.install_default_rules()

        # after a profile edit
        invalidator.invalidate(patterns.user_profile("alice"))

        # after a category edit, anywhere in the app
        emit_categories_update(bus)
    """

    def __init__(
        self,
        store: ICacheStore,
        event_bus: IEventBus | None = None,
    ) -> None:
        """Initialize the invalidator.

        Args:
            store: The cache store to sweep.
            event_bus: Optional bus for topic-driven invalidation.
        """
        self._store = store
        self._event_bus = event_bus
        self._unsubscribers: list[Callable[[], None]] = []

    @property
    def event_bus(self) -> IEventBus | None:
        return self._event_bus

    def invalidate(self, *key_patterns: KeyPattern) -> int:
        """Delete every key matching any of the patterns.

        Applying the same patterns twice leaves the store as applying
        them once; the second call returns 0.

        Args:
            *key_patterns: Compiled regexes, regex strings, or predicates.

        Returns:
            Number of keys deleted.
        """
        count = 0
        for pattern in key_patterns:
            count += self._store.invalidate(pattern)
        return count

    def invalidate_on(
        self,
        topic: str,
        *key_patterns: KeyPattern,
    ) -> Callable[[], None]:
        """Invalidate patterns whenever topic is published.

        Args:
            topic: The event bus topic.
            *key_patterns: Patterns to sweep on each publication.

        Returns:
            A callable removing the rule.

        Raises:
            RuntimeError: If the invalidator has no event bus.
        """
        bus = self._require_bus()

        def handler(event_topic: str, payload: Any) -> None:
            count = self.invalidate(*key_patterns)
            logger.debug("Topic %r invalidated %d keys", event_topic, count)

        unsubscribe = bus.subscribe(topic, handler)
        self._unsubscribers.append(unsubscribe)
        return unsubscribe

    def install_default_rules(self) -> None:
        """Register the built-in topic rules (see DEFAULT_RULES)."""
        for topic, key_patterns in DEFAULT_RULES.items():
            self.invalidate_on(topic, *key_patterns)

    def notify(self, topic: str, payload: Any = None) -> int:
        """Publish a topic on the event bus.

        Returns:
            Number of handlers invoked.
        """
        return self._require_bus().publish(topic, payload)

    def close(self) -> None:
        """Remove every rule registered through this invalidator."""
        unsubscribers, self._unsubscribers = self._unsubscribers, []
        for unsubscribe in unsubscribers:
            unsubscribe()

    def _require_bus(self) -> IEventBus:
        if self._event_bus is None:
            raise RuntimeError("CacheInvalidator was created without an event bus")
        return self._event_bus


def emit_categories_update(event_bus: IEventBus) -> int:
    """Announce that categories were created, updated, or deleted."""
    return event_bus.publish(CATEGORIES_UPDATED)


def on_categories_update(
    event_bus: IEventBus,
    callback: Callable[[], None],
) -> Callable[[], None]:
    """Call callback whenever categories change.

    Returns:
        A callable removing the listener.
    """
    return event_bus.subscribe(CATEGORIES_UPDATED, lambda topic, payload: callback())
