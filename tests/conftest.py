"""
Shared fixtures for xauth tests.
"""

import pytest

from xauth.errors import StoreUnavailableError
from xauth.keys.manager import KeyManager
from xauth.tokenstore.store import KeyValueStore


class FakeClock:
    """Manually advanced clock returning epoch seconds."""

    def __init__(self, start: float = 1_700_000_000):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FailingStore(KeyValueStore):
    """Store whose every call fails as if Redis were unreachable."""

    def __init__(self):
        self.calls = 0

    async def _fail(self):
        self.calls += 1
        raise StoreUnavailableError("Redis exists failed: connection refused")

    async def get(self, key):
        await self._fail()

    async def set(self, key, value, ttl, only_if_absent=False):
        await self._fail()

    async def incr(self, key, ttl):
        await self._fail()

    async def exists(self, key):
        await self._fail()

    async def delete(self, key):
        await self._fail()


@pytest.fixture
def clock():
    """Create a controllable clock"""
    return FakeClock()


@pytest.fixture(scope="session")
def key_pair():
    """Generate one key pair for the whole test session"""
    return KeyManager.generate()


@pytest.fixture
def failing_store():
    return FailingStore()
