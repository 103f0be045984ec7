"""Tests for core entities."""

import asyncio
from datetime import timedelta

import pytest

from cachedquery.core.entities import (
    CacheConfig,
    CacheEntry,
    CancellationSignal,
    FetchCancelledError,
    QueryOptions,
    QueryState,
    SkeletonTiming,
)


class TestCacheEntry:
    """Tests for CacheEntry entity."""

    def test_create_cache_entry(self) -> None:
        """Test creating a cache entry with factory method."""
        entry = CacheEntry.create(
            key="user_profile_alice",
            value={"name": "alice"},
            ttl=timedelta(minutes=3),
            now=100.0,
        )

        assert entry.key == "user_profile_alice"
        assert entry.value == {"name": "alice"}
        assert entry.ttl == timedelta(minutes=3)
        assert entry.created_at == 100.0

    def test_cache_entry_expires_at(self) -> None:
        """Test expires_at calculation."""
        entry = CacheEntry.create(key="k", value=1, ttl=timedelta(seconds=30), now=10.0)

        assert entry.expires_at == 40.0

    def test_cache_entry_is_expired(self) -> None:
        """Test expiry is reached exactly at created_at + ttl."""
        entry = CacheEntry.create(key="k", value=1, ttl=timedelta(seconds=30), now=10.0)

        assert entry.is_expired(39.9) is False
        assert entry.is_expired(40.0) is True
        assert entry.is_expired(100.0) is True

    def test_cache_entry_is_immutable(self) -> None:
        """Test that cache entries cannot be modified."""
        entry = CacheEntry.create(key="k", value=1, ttl=timedelta(seconds=1), now=0.0)

        with pytest.raises(AttributeError):
            entry.value = 2  # type: ignore[misc]


class TestCacheConfig:
    """Tests for CacheConfig entity."""

    def test_default_config(self) -> None:
        """Test default configuration values."""
        config = CacheConfig()

        assert config.enabled is True
        assert config.default_ttl == timedelta(minutes=5)
        assert config.max_size == 1000
        assert config.cleanup_interval == timedelta(minutes=5)
        assert config.size_warning_threshold == 100

    def test_custom_config(self) -> None:
        """Test custom configuration values."""
        config = CacheConfig(
            enabled=False,
            default_ttl=timedelta(seconds=30),
            max_size=10,
            cleanup_interval=timedelta(minutes=1),
        )

        assert config.enabled is False
        assert config.default_ttl == timedelta(seconds=30)
        assert config.max_size == 10
        assert config.cleanup_interval == timedelta(minutes=1)


class TestQueryState:
    """Tests for QueryState and QueryOptions."""

    def test_initial_state_enabled(self) -> None:
        """Test that an enabled query starts loading."""
        state = QueryState.initial()

        assert state == QueryState(data=None, loading=True, error=None, is_cached=False)

    def test_initial_state_disabled(self) -> None:
        """Test that a disabled query starts idle."""
        assert QueryState.initial(enabled=False).loading is False

    def test_evolve_returns_copy(self) -> None:
        """Test that evolve leaves the original untouched."""
        state = QueryState(data=[1], loading=True)

        updated = state.evolve(loading=False, is_cached=True)

        assert updated == QueryState(data=[1], loading=False, is_cached=True)
        assert state.loading is True

    def test_query_options_defaults(self) -> None:
        """Test default query options."""
        options = QueryOptions(ttl=timedelta(minutes=2))

        assert options.enabled is True
        assert options.stale_while_revalidate is False


class TestCancellationSignal:
    """Tests for CancellationSignal."""

    def test_cancel_keeps_first_reason(self) -> None:
        """Test that cancelling twice keeps the first reason."""
        signal = CancellationSignal()
        assert signal.cancelled is False
        assert signal.reason is None

        signal.cancel("key changed")
        signal.cancel("disposed")

        assert signal.cancelled is True
        assert signal.reason == "key changed"

    def test_raise_if_cancelled(self) -> None:
        """Test raise_if_cancelled raises only after cancellation."""
        signal = CancellationSignal()
        signal.raise_if_cancelled()

        signal.cancel("disposed")

        with pytest.raises(FetchCancelledError):
            signal.raise_if_cancelled()

    @pytest.mark.asyncio
    async def test_wait_returns_on_cancel(self) -> None:
        """Test that wait() unblocks once the signal fires."""
        signal = CancellationSignal()
        waiter = asyncio.ensure_future(signal.wait())
        await asyncio.sleep(0)
        assert waiter.done() is False

        signal.cancel()
        await asyncio.wait_for(waiter, timeout=1)

        assert waiter.done() is True

    def test_repr(self) -> None:
        """Test the repr shows the state."""
        signal = CancellationSignal()
        assert "active" in repr(signal)

        signal.cancel("disposed")
        assert "disposed" in repr(signal)


class TestSkeletonTiming:
    """Tests for SkeletonTiming."""

    def test_defaults(self) -> None:
        """Test default delays."""
        timing = SkeletonTiming()

        assert timing.min_delay == 0.150
        assert timing.fast_threshold == 0.100
        assert timing.hide_grace == 0.050

    def test_negative_delay_rejected(self) -> None:
        """Test that negative delays raise ValueError."""
        with pytest.raises(ValueError, match="hide_grace"):
            SkeletonTiming(hide_grace=-0.01)
