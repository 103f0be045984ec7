"""Event bus interface."""

from collections.abc import Callable
from typing import Any, Protocol

EventHandler = Callable[[str, Any], None]


class IEventBus(Protocol):
    """Contract for publish/subscribe signaling between subsystems.

    Mutation flows publish topics such as "categories updated"; cache
    invalidators and views subscribe to them.
    """

    def publish(self, topic: str, payload: Any = None) -> int:
        """Deliver an event to every handler subscribed to topic.

        Args:
            topic: The topic name.
            payload: Optional value passed to handlers.

        Returns:
            Number of handlers invoked.
        """
        ...

    def subscribe(self, topic: str, handler: EventHandler) -> Callable[[], None]:
        """Register a handler for topic.

        Args:
            topic: The topic name.
            handler: Called as ``handler(topic, payload)``.

        Returns:
            A callable that removes the subscription.
        """
        ...
