"""Query executor - main orchestrator for cached queries.

Implements "read cache, else fetch, then populate cache" for async
fetch functions, with deduplication of concurrent fetches per key,
cancellation on key change, refetch or teardown, and epoch-guarded
state updates so superseded sessions can never overwrite newer state.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace
from datetime import timedelta
from types import TracebackType
from typing import Any

from cachedquery.core.entities.cache_config import CacheConfig
from cachedquery.core.entities.fetch_session import (
    CancellationSignal,
    FetchCancelledError,
    FetchContext,
    FetchSession,
)
from cachedquery.core.entities.query_state import QueryOptions, QueryState
from cachedquery.core.entities.ttl_policy import ResourceType, TTLPolicy
from cachedquery.core.interfaces.cache_store import ICacheStore

logger = logging.getLogger(__name__)

FetchFn = Callable[[FetchContext], Awaitable[Any]]
StateListener = Callable[[QueryState], None]


class _InflightFetch:
    """One running call of a fetch function.

    Several subscriptions may be joined to it, each through its own
    FetchSession. The signal is triggered once nobody is left waiting.
    """

    def __init__(self, key: str, ttl: timedelta, seq: int) -> None:
        self.key = key
        self.ttl = ttl
        # Launch order across the executor; a higher seq is a newer fetch
        self.seq = seq
        self.signal = CancellationSignal()
        self.sessions: dict[QuerySubscription, FetchSession] = {}
        self.task: asyncio.Task[None] | None = None
        self.settled = False

    async def wait(self) -> None:
        if self.task is not None and not self.task.done():
            await asyncio.wait({self.task})


class QuerySubscription:
    """A consumer's live view of one cached query.

    Returned by :meth:`QueryExecutor.subscribe`. Exposes the current
    :class:`QueryState` and the operations a consumer can perform on it.
    Must be disposed when no longer needed, either explicitly or by
    using it as a context manager.
    """

    def __init__(
        self,
        executor: "QueryExecutor",
        key: str,
        fetch_fn: FetchFn,
        options: QueryOptions,
    ) -> None:
        self._executor = executor
        self._key = key
        self._fetch_fn = fetch_fn
        self._options = options
        self._state = QueryState.initial(options.enabled)
        self._epoch = 0
        self._session: FetchSession | None = None
        self._fetch: _InflightFetch | None = None
        self._listeners: list[StateListener] = []
        self._disposed = False

    @property
    def key(self) -> str:
        return self._key

    @property
    def fetch_fn(self) -> FetchFn:
        return self._fetch_fn

    @property
    def options(self) -> QueryOptions:
        return self._options

    @property
    def state(self) -> QueryState:
        """Current state snapshot."""
        return self._state

    @property
    def data(self) -> Any | None:
        return self._state.data

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def error(self) -> BaseException | None:
        return self._state.error

    @property
    def is_cached(self) -> bool:
        return self._state.is_cached

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def session(self) -> FetchSession | None:
        """The session currently allowed to update this subscription."""
        return self._session

    async def refetch(self) -> None:
        """Fetch again, bypassing the cache, and wait for the result.

        Fetch errors are reported through ``state.error``, not raised.
        Does nothing on a disposed or disabled subscription.
        """
        await self._executor._refetch(self)

    async def wait(self) -> QueryState:
        """Wait for the current session, if any, to settle.

        Returns:
            The state after settling.
        """
        fetch = self._fetch
        if fetch is not None:
            await fetch.wait()
        return self._state

    def change_key(self, key: str, fetch_fn: FetchFn | None = None) -> None:
        """Switch the subscription to another key.

        Cancels the previous key's session, resets the state and runs the
        cache-first read for the new key. Switching to the current key
        without a new fetch function does nothing.

        Args:
            key: The new cache key.
            fetch_fn: Fetch function for the new key. Keeps the current one
                if None.
        """
        self._ensure_not_disposed()
        if key == self._key and fetch_fn is None:
            return

        self._executor._detach(self, reason="key changed")
        self._advance_epoch()
        self._key = key
        if fetch_fn is not None:
            self._fetch_fn = fetch_fn
        self._replace_state(QueryState.initial(self._options.enabled))
        self._executor._activate(self)

    def set_enabled(self, enabled: bool) -> None:
        """Enable or disable the query.

        Disabling cancels any pending session and clears ``loading``.
        Enabling runs the cache-first read again, keeping current data.
        """
        self._ensure_not_disposed()
        if enabled == self._options.enabled:
            return

        self._options = replace(self._options, enabled=enabled)
        if enabled:
            self._executor._activate(self)
        else:
            self._executor._detach(self, reason="disabled")
            self._advance_epoch()
            self._set_state(loading=False)

    def dispose(self) -> None:
        """Tear the subscription down.

        Cancels the pending session and guarantees no further state
        change, even if a fetch settles later. Idempotent.
        """
        if self._disposed:
            return
        self._executor._detach(self, reason="disposed")
        self._advance_epoch()
        self._disposed = True
        self._listeners.clear()

    def on_change(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called with every new state.

        Returns:
            A callable removing the listener.
        """
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def __enter__(self) -> "QuerySubscription":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.dispose()

    def __repr__(self) -> str:
        return (
            f"<QuerySubscription key={self._key!r} loading={self._state.loading} "
            f"is_cached={self._state.is_cached} disposed={self._disposed}>"
        )

    # Internal hooks used by QueryExecutor

    def _ensure_not_disposed(self) -> None:
        if self._disposed:
            raise RuntimeError(f"Subscription for {self._key!r} is disposed")

    def _advance_epoch(self) -> int:
        self._epoch += 1
        return self._epoch

    def _is_current(self, session: FetchSession) -> bool:
        return not self._disposed and session.epoch == self._epoch

    def _bind(self, session: FetchSession, fetch: _InflightFetch) -> None:
        self._session = session
        self._fetch = fetch

    def _unbind(self) -> _InflightFetch | None:
        fetch = self._fetch
        self._session = None
        self._fetch = None
        return fetch

    def _resolve(self, session: FetchSession, data: Any) -> None:
        if not self._is_current(session):
            return
        self._unbind()
        self._set_state(data=data, loading=False, error=None, is_cached=False)

    def _reject(self, session: FetchSession, error: BaseException) -> None:
        if not self._is_current(session):
            return
        self._unbind()
        self._set_state(loading=False, error=error)

    def _abandon(self, session: FetchSession) -> None:
        if not self._is_current(session):
            return
        self._unbind()
        self._set_state(loading=False)

    def _set_state(self, **changes: Any) -> None:
        self._replace_state(self._state.evolve(**changes))

    def _replace_state(self, state: QueryState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("State listener for %r failed", self._key)


class QueryExecutor:
    """Service that runs cached queries against a cache store.

    Example:
        executor = QueryExecutor(store=InMemoryCacheStore())

        async def fetch_page(ctx: FetchContext) -> list[dict]:
            return await api.get_assets(page=1)

        query = executor.subscribe(
            keys.assets_list(page=1),
            fetch_page,
            resource=ResourceType.ASSETS_LIST,
        )
        await query.wait()
        query.data  # fetched, or served from cache on the next subscribe
        query.dispose()
    """

    def __init__(
        self,
        store: ICacheStore,
        config: CacheConfig | None = None,
        ttl_policy: TTLPolicy | None = None,
    ) -> None:
        """Initialize the query executor.

        Args:
            store: The cache store shared by all subscriptions.
            config: Optional cache configuration. Uses defaults if not provided.
            ttl_policy: TTL table used when subscribing with ``resource=``.
        """
        self._store = store
        self._config = config or CacheConfig()
        self._ttl_policy = ttl_policy or TTLPolicy()

        # Live fetches per key, oldest first
        self._inflight: dict[str, list[_InflightFetch]] = {}
        # seq of the last stored fetch, kept while the key has live fetches
        self._stored_seq: dict[str, int] = {}
        self._sequence = 0
        self._tasks: set[asyncio.Task[None]] = set()

        # Statistics
        self._hits = 0
        self._misses = 0
        self._fetches = 0

    @property
    def config(self) -> CacheConfig:
        """Get the cache configuration."""
        return self._config

    @property
    def store(self) -> ICacheStore:
        return self._store

    @property
    def ttl_policy(self) -> TTLPolicy:
        return self._ttl_policy

    @property
    def stats(self) -> dict[str, int]:
        """Get executor statistics.

        Returns:
            Dictionary with cache hits, misses, and fetch function calls.
        """
        return {
            "hits": self._hits,
            "misses": self._misses,
            "fetches": self._fetches,
        }

    def subscribe(
        self,
        key: str,
        fetch_fn: FetchFn,
        *,
        ttl: timedelta | None = None,
        resource: ResourceType | str | None = None,
        enabled: bool = True,
        stale_while_revalidate: bool = False,
    ) -> QuerySubscription:
        """Subscribe to a cached query.

        A cache hit is applied before this method returns, so the caller
        never sees a loading state for it. On a miss a fetch is started,
        or an in-flight fetch for the same key is joined. Starting a fetch
        requires a running event loop.

        Args:
            key: The cache key, usually built with :mod:`cachedquery.keys`.
            fetch_fn: Async function called as ``fetch_fn(FetchContext)``.
            ttl: Explicit TTL for stored results.
            resource: Resource type whose policy TTL applies when ``ttl``
                is not given.
            enabled: When False, nothing is read or fetched.
            stale_while_revalidate: On a hit, also refresh in the background.

        Returns:
            The subscription. Call ``dispose()`` when done.
        """
        options = QueryOptions(
            ttl=self._resolve_ttl(ttl, resource),
            enabled=enabled,
            stale_while_revalidate=stale_while_revalidate,
        )
        subscription = QuerySubscription(self, key, fetch_fn, options)
        self._activate(subscription)
        return subscription

    def is_fetching(self, key: str) -> bool:
        """Check if a live fetch is running for key."""
        return bool(self._inflight.get(key))

    async def aclose(self) -> None:
        """Cancel every in-flight fetch and wait for their tasks to end."""
        for fetches in list(self._inflight.values()):
            for fetch in fetches:
                fetch.signal.cancel("executor closed")
        self._inflight.clear()
        self._stored_seq.clear()

        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _resolve_ttl(
        self,
        ttl: timedelta | None,
        resource: ResourceType | str | None,
    ) -> timedelta:
        if ttl is not None:
            return ttl
        if resource is not None:
            return self._ttl_policy.ttl_for(resource)
        return self._config.default_ttl

    def _activate(self, subscription: QuerySubscription) -> None:
        """Cache-first read, falling back to a (possibly shared) fetch."""
        if not subscription.options.enabled:
            subscription._set_state(loading=False)
            return

        if self._config.enabled:
            cached = self._store.get(subscription.key)
            if cached is not None:
                self._hits += 1
                logger.debug("Cache hit: %s", subscription.key)
                subscription._set_state(
                    data=cached, loading=False, error=None, is_cached=True
                )
                if subscription.options.stale_while_revalidate:
                    self._start_session(subscription, force=False, background=True)
                return

            self._misses += 1
            logger.debug("Cache miss: %s", subscription.key)

        self._start_session(subscription, force=False)

    async def _refetch(self, subscription: QuerySubscription) -> None:
        if subscription.disposed or not subscription.options.enabled:
            return
        fetch = self._start_session(subscription, force=True)
        await fetch.wait()

    def _start_session(
        self,
        subscription: QuerySubscription,
        *,
        force: bool,
        background: bool = False,
    ) -> _InflightFetch:
        """Attach the subscription to a fetch under a new epoch.

        A forced session always launches a new fetch; otherwise the newest
        live fetch for the key is joined when there is one.
        """
        self._detach(subscription, reason="superseded")

        fetch = None if force else self._joinable(subscription.key)
        if fetch is None:
            fetch = self._launch(subscription)
        else:
            logger.debug("Joining in-flight fetch: %s", subscription.key)

        session = FetchSession(
            key=subscription.key,
            epoch=subscription._advance_epoch(),
            signal=fetch.signal,
            background=background,
        )
        fetch.sessions[subscription] = session
        subscription._bind(session, fetch)

        if not background:
            subscription._set_state(loading=True, error=None, is_cached=False)
        return fetch

    def _joinable(self, key: str) -> _InflightFetch | None:
        fetches = self._inflight.get(key)
        return fetches[-1] if fetches else None

    def _launch(self, subscription: QuerySubscription) -> _InflightFetch:
        # Fails outside a running loop, before anything is registered
        loop = asyncio.get_running_loop()

        self._sequence += 1
        fetch = _InflightFetch(
            subscription.key, subscription.options.ttl, self._sequence
        )
        task = loop.create_task(self._run(fetch, subscription.fetch_fn))
        fetch.task = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        self._inflight.setdefault(subscription.key, []).append(fetch)
        self._fetches += 1
        return fetch

    def _detach(self, subscription: QuerySubscription, reason: str) -> None:
        """Remove the subscription from its fetch.

        The fetch is cancelled once no session is left waiting on it.
        """
        fetch = subscription._unbind()
        if fetch is None:
            return

        fetch.sessions.pop(subscription, None)
        if not fetch.sessions and not fetch.settled:
            fetch.signal.cancel(reason)
            self._forget(fetch)
            logger.debug("Cancelled fetch for %s (%s)", fetch.key, reason)

    def _forget(self, fetch: _InflightFetch) -> None:
        fetches = self._inflight.get(fetch.key)
        if not fetches or fetch not in fetches:
            return
        fetches.remove(fetch)
        if not fetches:
            del self._inflight[fetch.key]
            self._stored_seq.pop(fetch.key, None)

    def _is_latest(self, fetch: _InflightFetch) -> bool:
        """Check that no newer fetch for the key is live or already stored."""
        if self._stored_seq.get(fetch.key, 0) > fetch.seq:
            return False
        return all(
            other.seq <= fetch.seq for other in self._inflight.get(fetch.key, ())
        )

    async def _run(self, fetch: _InflightFetch, fetch_fn: FetchFn) -> None:
        """Call the fetch function and deliver its outcome."""
        if fetch.signal.cancelled:
            fetch.settled = True
            self._abandon_sessions(fetch)
            return

        context = FetchContext(key=fetch.key, signal=fetch.signal)
        try:
            result = await fetch_fn(context)
        except FetchCancelledError:
            self._settle(fetch)
            logger.debug("Fetch cancelled: %s", fetch.key)
            self._abandon_sessions(fetch)
            return
        except asyncio.CancelledError:
            self._settle(fetch)
            fetch.signal.cancel("task cancelled")
            raise
        except Exception as e:
            self._settle(fetch)
            if fetch.signal.cancelled:
                logger.debug("Discarding error from cancelled fetch: %s", fetch.key)
                self._abandon_sessions(fetch)
                return

            sessions = self._drain_sessions(fetch)
            if sessions and all(session.background for _, session in sessions):
                logger.warning(
                    "Revalidation failed for %s, keeping cached data: %s",
                    fetch.key,
                    e,
                )
            else:
                logger.error("Query failed for %s: %s", fetch.key, e)
            for subscription, session in sessions:
                subscription._reject(session, e)
            return

        latest = self._is_latest(fetch)
        self._settle(fetch)
        if fetch.signal.cancelled:
            logger.debug("Discarding result from cancelled fetch: %s", fetch.key)
            self._abandon_sessions(fetch)
            return

        if self._config.enabled and latest:
            self._store.set(fetch.key, result, fetch.ttl)
            if fetch.key in self._inflight:
                self._stored_seq[fetch.key] = fetch.seq

        for subscription, session in self._drain_sessions(fetch):
            subscription._resolve(session, result)

    def _settle(self, fetch: _InflightFetch) -> None:
        fetch.settled = True
        self._forget(fetch)

    def _abandon_sessions(self, fetch: _InflightFetch) -> None:
        """Clear loading for sessions still joined to a cancelled fetch."""
        for subscription, session in self._drain_sessions(fetch):
            subscription._abandon(session)

    @staticmethod
    def _drain_sessions(
        fetch: _InflightFetch,
    ) -> list[tuple[QuerySubscription, FetchSession]]:
        sessions = list(fetch.sessions.items())
        fetch.sessions.clear()
        return sessions
