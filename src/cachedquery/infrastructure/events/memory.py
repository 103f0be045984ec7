"""In-memory event bus implementation."""

import logging
from collections.abc import Callable
from typing import Any

from cachedquery.core.interfaces.event_bus import EventHandler

logger = logging.getLogger(__name__)


class InMemoryEventBus:
    """Synchronous in-process publish/subscribe bus.

    Handlers run in subscription order during ``publish``. A failing
    handler is logged and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}

    def publish(self, topic: str, payload: Any = None) -> int:
        """Deliver an event to every handler subscribed to topic.

        Args:
            topic: The topic name.
            payload: Optional value passed to handlers.

        Returns:
            Number of handlers invoked.
        """
        handlers = list(self._handlers.get(topic, ()))
        for handler in handlers:
            try:
                handler(topic, payload)
            except Exception:
                logger.exception("Event handler for %r failed", topic)

        logger.debug("Published %r to %d handlers", topic, len(handlers))
        return len(handlers)

    def subscribe(self, topic: str, handler: EventHandler) -> Callable[[], None]:
        """Register a handler for topic.

        Args:
            topic: The topic name.
            handler: Called as ``handler(topic, payload)``.

        Returns:
            A callable that removes the subscription. Calling it twice
            is harmless.
        """
        self._handlers.setdefault(topic, []).append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers.get(topic)
            if handlers is None or handler not in handlers:
                return
            handlers.remove(handler)
            if not handlers:
                del self._handlers[topic]

        return unsubscribe

    def subscriber_count(self, topic: str) -> int:
        """Return the number of handlers subscribed to topic."""
        return len(self._handlers.get(topic, ()))
