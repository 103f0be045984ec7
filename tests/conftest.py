"""Pytest configuration for cachedquery tests."""

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from cachedquery import FetchContext, InMemoryCacheStore, QueryExecutor


class FakeTimer:
    """Manually advanced clock in seconds."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ControlledFetch:
    """Fetch function whose completion is driven by the test.

    Every call records its context and waits until the test resolves
    or rejects it. It ignores the cancellation signal on purpose.
    """

    def __init__(self) -> None:
        self.calls: list[FetchContext] = []
        self.started = asyncio.Event()
        self._outcomes: list[asyncio.Future[Any]] = []

    async def __call__(self, ctx: FetchContext) -> Any:
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self.calls.append(ctx)
        self._outcomes.append(future)
        self.started.set()
        return await future

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def resolve(self, value: Any, call: int = -1) -> None:
        self._outcomes[call].set_result(value)

    def reject(self, error: BaseException, call: int = -1) -> None:
        self._outcomes[call].set_exception(error)


class CountingFetch:
    """Fetch function returning a fixed value and recording the keys it saw."""

    def __init__(self, value: Any) -> None:
        self.value = value
        self.keys: list[str] = []

    async def __call__(self, ctx: FetchContext) -> Any:
        self.keys.append(ctx.key)
        return self.value

    @property
    def call_count(self) -> int:
        return len(self.keys)


@pytest.fixture
def timer() -> FakeTimer:
    """Create a fake timer for the store."""
    return FakeTimer()


@pytest.fixture
def store(timer: FakeTimer) -> InMemoryCacheStore:
    """Create an in-memory store driven by the fake timer."""
    return InMemoryCacheStore(maxsize=100, timer=timer)


@pytest.fixture
def executor(store: InMemoryCacheStore) -> QueryExecutor:
    """Create a query executor over the test store."""
    return QueryExecutor(store=store)


@pytest.fixture
def controlled_fetch() -> ControlledFetch:
    """Create a fetch function completed by the test."""
    return ControlledFetch()


@pytest.fixture
def make_fetch() -> Callable[[Any], CountingFetch]:
    """Factory for counting fetch functions."""
    return CountingFetch


@pytest.fixture(autouse=True)
def reset_decorator_config():
    """Reset decorator configuration before each test."""
    import cachedquery.decorators

    original_invalidator = cachedquery.decorators._invalidator

    yield

    cachedquery.decorators._invalidator = original_invalidator
