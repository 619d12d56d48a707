"""
Token store package for xauth.

This package provides the key-value store contract consumed by the
revocation list and the login throttle, with in-memory and Redis-backed
implementations.
"""

from .store import (
    KeyValueStore,
    ttl_seconds,
)

from .memory import MemoryKeyValueStore

from .distributed import (
    DistributedConfig,
    RedisKeyValueStore,
    create_distributed_store,
)

from .revocation import RevocationStore

__all__ = [
    # Contract
    "KeyValueStore",
    "ttl_seconds",

    # Implementations
    "MemoryKeyValueStore",
    "DistributedConfig",
    "RedisKeyValueStore",
    "create_distributed_store",

    # Revocation list
    "RevocationStore",
]
