"""
Tests for login throttling.
"""

import asyncio
from datetime import timedelta

import pytest

from xauth.core.config import KeyspaceConfig, ThrottleConfig
from xauth.errors import ConfigurationError, StoreUnavailableError
from xauth.rate import LoginThrottle
from xauth.tokenstore import MemoryKeyValueStore


@pytest.fixture
def store(clock):
    return MemoryKeyValueStore(clock=clock)


@pytest.fixture
def throttle(store):
    return LoginThrottle(
        store,
        ThrottleConfig(
            max_attempts=3,
            attempt_window=timedelta(minutes=10),
            lock_duration=timedelta(minutes=30),
        ),
    )


class TestLoginThrottle:
    """Test failure counting and locking"""

    def test_requires_store(self):
        with pytest.raises(ConfigurationError):
            LoginThrottle(None)

    def test_defaults(self, store):
        throttle = LoginThrottle(store)
        assert throttle.max_attempts == 5
        assert throttle.config.lock_duration == timedelta(hours=1)

    @pytest.mark.asyncio
    async def test_record_failure_counts(self, throttle):
        assert await throttle.record_failure("alice") == 1
        assert await throttle.record_failure("alice") == 2
        assert await throttle.record_failure("bob") == 1
        assert await throttle.attempts("alice") == 2
        assert await throttle.attempts("carol") == 0

    @pytest.mark.asyncio
    async def test_counter_expires_after_window(self, throttle, clock):
        await throttle.record_failure("alice")
        clock.advance(timedelta(minutes=11).total_seconds())
        assert await throttle.record_failure("alice") == 1

    @pytest.mark.asyncio
    async def test_concurrent_failures_are_all_counted(self):
        throttle = LoginThrottle(MemoryKeyValueStore())
        counts = await asyncio.gather(*[throttle.record_failure("alice") for _ in range(20)])
        assert max(counts) == 20
        assert len(set(counts)) == 20

    @pytest.mark.asyncio
    async def test_five_failures_with_default_config(self, store):
        throttle = LoginThrottle(store)

        for _ in range(5):
            count = await throttle.record_failure("alice")
        assert count == throttle.max_attempts == 5

        await throttle.lock("alice")
        assert await throttle.is_locked("alice") is True

    @pytest.mark.asyncio
    async def test_lock(self, throttle, clock):
        assert await throttle.is_locked("alice") is False

        await throttle.lock("alice")
        assert await throttle.is_locked("alice") is True
        assert await throttle.is_locked("bob") is False

        clock.advance(timedelta(minutes=30).total_seconds())
        assert await throttle.is_locked("alice") is False

    @pytest.mark.asyncio
    async def test_lock_outlives_counter(self, throttle, clock):
        await throttle.record_failure("alice")
        await throttle.lock("alice")
        clock.advance(timedelta(minutes=15).total_seconds())

        assert await throttle.attempts("alice") == 0
        assert await throttle.is_locked("alice") is True

    @pytest.mark.asyncio
    async def test_reset_clears_counter_only(self, throttle):
        await throttle.record_failure("alice")
        await throttle.lock("alice")

        await throttle.reset("alice")
        assert await throttle.attempts("alice") == 0
        assert await throttle.is_locked("alice") is True

    @pytest.mark.asyncio
    async def test_unlock(self, throttle):
        await throttle.lock("alice")
        assert await throttle.unlock("alice") is True
        assert await throttle.is_locked("alice") is False
        assert await throttle.unlock("alice") is False

    @pytest.mark.asyncio
    async def test_key_layout(self, store):
        throttle = LoginThrottle(store)
        await throttle.record_failure("alice")
        await throttle.lock("alice")

        assert await store.get("login:attempts:alice") == "1"
        assert await store.get("login:lock:alice") == "locked"

    @pytest.mark.asyncio
    async def test_custom_keyspace(self, store):
        throttle = LoginThrottle(store, keyspace=KeyspaceConfig(attempts_prefix="fails:"))
        await throttle.record_failure("alice")
        assert await store.get("fails:alice") == "1"

    @pytest.mark.asyncio
    async def test_store_errors_surface(self, failing_store):
        throttle = LoginThrottle(failing_store)

        with pytest.raises(StoreUnavailableError):
            await throttle.record_failure("alice")
        with pytest.raises(StoreUnavailableError):
            await throttle.is_locked("alice")
