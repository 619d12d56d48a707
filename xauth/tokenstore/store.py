"""
Key-value store contract for xauth.

The revocation list and the login throttle only need a handful of
primitives from the shared store. Every primitive must be a single atomic
request against the backend.
"""

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Optional, Union

TTL = Union[timedelta, int]


def ttl_seconds(ttl: TTL) -> int:
    """Normalize a TTL to whole seconds, at least one."""
    if isinstance(ttl, timedelta):
        ttl = int(ttl.total_seconds())
    return max(1, int(ttl))


class KeyValueStore(ABC):
    """
    Abstract base class for the shared key-value store.

    Implementations must be safe for concurrent use and must raise
    ``StoreUnavailableError`` when the backend cannot answer in time.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Retrieve the value stored under ``key``.

        Returns:
            The value, or None if the key is absent or expired
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str, ttl: TTL,
                  only_if_absent: bool = False) -> bool:
        """
        Store ``value`` under ``key`` with a time-to-live.

        Args:
            key: Key
            value: Value
            ttl: Time-to-live
            only_if_absent: Only create the key if it does not exist

        Returns:
            True if the value was written
        """
        pass

    @abstractmethod
    async def incr(self, key: str, ttl: TTL) -> int:
        """
        Increment an integer counter and (re)set its expiry in one step.

        Returns:
            The counter value after the increment
        """
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check whether ``key`` exists."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Remove ``key``.

        Returns:
            True if the key existed
        """
        pass

    async def close(self) -> None:
        """Close the store and release resources"""
        pass
