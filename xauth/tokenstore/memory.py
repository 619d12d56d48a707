"""
In-memory key-value store for xauth.

Suitable for tests and single-process deployments. Entries expire lazily on
access and through :meth:`MemoryKeyValueStore.cleanup`.
"""

import asyncio
import logging
import time
from typing import Callable, Dict, Optional, Tuple

from .store import KeyValueStore, TTL, ttl_seconds


logger = logging.getLogger(__name__)


class MemoryKeyValueStore(KeyValueStore):
    """
    In-memory store implementation.

    Values live in a dictionary guarded by an asyncio lock, together with
    their absolute expiry time on the injected monotonic clock.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        """
        Initialize memory store.

        Args:
            clock: Monotonic clock returning seconds, defaults to time.monotonic
        """
        self._data: Dict[str, Tuple[str, float]] = {}
        self._lock = asyncio.Lock()
        self._clock = clock or time.monotonic

    def _live(self, key: str) -> Optional[Tuple[str, float]]:
        entry = self._data.get(key)
        if entry is None:
            return None
        if self._clock() >= entry[1]:
            del self._data[key]
            return None
        return entry

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            entry = self._live(key)
            return entry[0] if entry else None

    async def set(self, key: str, value: str, ttl: TTL,
                  only_if_absent: bool = False) -> bool:
        async with self._lock:
            if only_if_absent and self._live(key) is not None:
                return False
            self._data[key] = (value, self._clock() + ttl_seconds(ttl))
            logger.debug(f"Set {key}")
            return True

    async def incr(self, key: str, ttl: TTL) -> int:
        async with self._lock:
            entry = self._live(key)
            count = int(entry[0]) + 1 if entry else 1
            self._data[key] = (str(count), self._clock() + ttl_seconds(ttl))
            return count

    async def exists(self, key: str) -> bool:
        async with self._lock:
            return self._live(key) is not None

    async def delete(self, key: str) -> bool:
        async with self._lock:
            if self._live(key) is None:
                return False
            del self._data[key]
            return True

    async def ttl(self, key: str) -> Optional[float]:
        """Seconds until ``key`` expires, or None if it is absent."""
        async with self._lock:
            entry = self._live(key)
            return entry[1] - self._clock() if entry else None

    async def cleanup(self) -> int:
        """Remove expired entries from the store."""
        async with self._lock:
            now = self._clock()
            expired = [key for key, (_, expires_at) in self._data.items() if now >= expires_at]
            for key in expired:
                del self._data[key]

            if expired:
                logger.info(f"Cleaned up {len(expired)} expired entries")

            return len(expired)

    async def clear(self) -> int:
        """Remove every entry, returning how many were removed."""
        async with self._lock:
            count = len(self._data)
            self._data.clear()
            return count
