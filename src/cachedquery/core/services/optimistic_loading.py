"""Optimistic loading controller.

Turns a stream of ``(loading, is_cached)`` signals into a single
"show the skeleton" flag, so fast responses never flash a loading
placeholder:

- cache hits never show it;
- network loads show it only after ``min_delay``;
- loads shorter than ``fast_threshold`` hide it at once, longer ones
  keep it up for ``hide_grace`` after finishing.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from enum import Enum

from cachedquery.core.entities.query_state import QueryState
from cachedquery.core.entities.skeleton_timing import SkeletonTiming
from cachedquery.core.services.query_executor import QuerySubscription

logger = logging.getLogger(__name__)

SkeletonListener = Callable[[bool], None]


class SkeletonState(Enum):
    """States of the skeleton gate."""

    IDLE = "idle"
    ARMED = "armed"  # loading, waiting for min_delay
    SHOWING = "showing"
    HIDING_GRACE = "hiding_grace"  # loading ended, still visible


_VISIBLE = frozenset({SkeletonState.SHOWING, SkeletonState.HIDING_GRACE})


class OptimisticLoadingController:
    """Stateful skeleton gate for one subscription.

    Each loading episode gets a new epoch; timers armed for an older
    episode are ignored when they fire. Arming a timer requires a
    running event loop.
    """

    def __init__(
        self,
        timing: SkeletonTiming | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            timing: Delays to apply. Uses defaults if not provided.
            clock: Monotonic clock in seconds used to time episodes.
        """
        self._timing = timing or SkeletonTiming()
        self._clock = clock or time.monotonic

        self._state = SkeletonState.IDLE
        self._loading = False
        self._episode = 0
        self._episode_cached = False
        self._started_at: float | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._listeners: list[SkeletonListener] = []

    @property
    def timing(self) -> SkeletonTiming:
        return self._timing

    @property
    def state(self) -> SkeletonState:
        return self._state

    @property
    def should_show_skeleton(self) -> bool:
        return self._state in _VISIBLE

    def compute(
        self,
        loading: bool,
        is_cached: bool,
        min_delay: float | None = None,
    ) -> bool:
        """Feed the latest loading signal and get the skeleton flag.

        Args:
            loading: Whether a load is pending.
            is_cached: Whether the pending load is served from cache.
            min_delay: Seconds to wait before showing the skeleton for a
                new episode. Uses ``timing.min_delay`` if None.

        Returns:
            True if the skeleton should be visible right now.
        """
        if loading:
            if not self._loading:
                self._begin(is_cached, min_delay)
            elif is_cached and not self._episode_cached:
                # Episode turned out to be a cache hit
                self._episode_cached = True
                self._cancel_timer()
                self._transition(SkeletonState.IDLE)
        elif self._loading:
            self._end()

        return self.should_show_skeleton

    def watch(self, subscription: QuerySubscription) -> Callable[[], None]:
        """Drive the controller from a subscription's state changes.

        Returns:
            A callable that stops watching.
        """

        def on_state(state: QueryState) -> None:
            self.compute(state.loading, state.is_cached)

        on_state(subscription.state)
        return subscription.on_change(on_state)

    def on_change(self, listener: SkeletonListener) -> Callable[[], None]:
        """Register a listener called whenever visibility flips.

        Returns:
            A callable removing the listener.
        """
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def reset(self) -> None:
        """Cancel pending timers and go back to idle."""
        self._cancel_timer()
        self._episode += 1
        self._loading = False
        self._started_at = None
        self._transition(SkeletonState.IDLE)

    def _begin(self, is_cached: bool, min_delay: float | None) -> None:
        self._loading = True
        self._episode += 1
        self._episode_cached = is_cached
        self._started_at = self._clock()
        self._cancel_timer()

        if is_cached:
            self._transition(SkeletonState.IDLE)
            return

        delay = self._timing.min_delay if min_delay is None else min_delay
        self._timer = asyncio.get_running_loop().call_later(
            delay, self._on_show_timer, self._episode
        )
        self._transition(SkeletonState.ARMED)

    def _end(self) -> None:
        self._loading = False
        self._cancel_timer()

        started_at = self._started_at
        self._started_at = None
        duration = self._clock() - started_at if started_at is not None else 0.0

        too_fast = duration < self._timing.fast_threshold
        if too_fast or self._state is not SkeletonState.SHOWING:
            self._transition(SkeletonState.IDLE)
            return

        self._timer = asyncio.get_running_loop().call_later(
            self._timing.hide_grace, self._on_hide_timer, self._episode
        )
        self._transition(SkeletonState.HIDING_GRACE)

    def _on_show_timer(self, episode: int) -> None:
        self._timer = None
        if episode != self._episode or not self._loading:
            return
        self._transition(SkeletonState.SHOWING)

    def _on_hide_timer(self, episode: int) -> None:
        self._timer = None
        if episode != self._episode:
            return
        self._transition(SkeletonState.IDLE)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _transition(self, state: SkeletonState) -> None:
        was_visible = self.should_show_skeleton
        self._state = state
        visible = self.should_show_skeleton
        if visible == was_visible:
            return

        for listener in list(self._listeners):
            try:
                listener(visible)
            except Exception:
                logger.exception("Skeleton listener failed")
