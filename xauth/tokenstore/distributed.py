"""
Distributed key-value store implementation for xauth.

This module provides a Redis-backed store suitable for production
deployments with multiple instances. Every call carries an explicit
timeout, and any Redis failure surfaces as ``StoreUnavailableError``.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Any, Awaitable, Dict, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from ..errors import ConfigurationError, StoreUnavailableError
from .store import KeyValueStore, TTL, ttl_seconds


logger = logging.getLogger(__name__)


class DistributedConfig:
    """Configuration for the Redis-backed store."""

    def __init__(self,
                 url: Optional[str] = None,
                 password: Optional[str] = None,
                 db: int = 0,
                 key_prefix: str = "",
                 operation_timeout: timedelta = timedelta(seconds=2),
                 connection_pool_kwargs: Dict[str, Any] = None):
        """
        Initialize distributed configuration.

        Args:
            url: Redis URL (redis://host:port/db or rediss:// for TLS)
            password: Redis password
            db: Redis database number
            key_prefix: Namespace prepended to every key
            operation_timeout: Upper bound for a single store call
            connection_pool_kwargs: Additional connection pool arguments
        """
        self.url = url
        self.password = password
        self.db = db
        self.key_prefix = key_prefix
        self.operation_timeout = operation_timeout
        self.connection_pool_kwargs = connection_pool_kwargs or {}

    @property
    def timeout_seconds(self) -> float:
        return self.operation_timeout.total_seconds()


class RedisKeyValueStore(KeyValueStore):
    """
    Redis-based key-value store.

    The increment-and-expire primitive is sent as one MULTI/EXEC pipeline so
    concurrent failures cannot slip past the lockout threshold.
    """

    def __init__(self, config: Optional[DistributedConfig] = None, redis_client: Any = None):
        """
        Initialize the Redis store.

        Args:
            config: Distributed configuration
            redis_client: Existing ``redis.asyncio`` client; takes precedence over ``config.url``

        Raises:
            ConfigurationError: If neither a client nor a URL is provided,
                or the timeout is not positive
        """
        self.config = config or DistributedConfig()

        if self.config.operation_timeout <= timedelta(0):
            raise ConfigurationError("operation_timeout must be positive")

        if redis_client is None:
            if not self.config.url:
                raise ConfigurationError("RedisKeyValueStore requires a redis client or a url")
            redis_client = redis.from_url(
                self.config.url,
                password=self.config.password,
                db=self.config.db,
                decode_responses=True,
                socket_timeout=self.config.timeout_seconds,
                socket_connect_timeout=self.config.timeout_seconds,
                **self.config.connection_pool_kwargs,
            )

        self._redis = redis_client

    def _key(self, key: str) -> str:
        return f"{self.config.key_prefix}{key}"

    async def _call(self, operation: str, awaitable: Awaitable) -> Any:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.config.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error(f"Redis {operation} timed out after {self.config.timeout_seconds}s")
            raise StoreUnavailableError(
                f"Redis {operation} timed out",
                {"operation": operation, "timeout": self.config.timeout_seconds},
            )
        except RedisError as e:
            logger.error(f"Redis {operation} failed: {e}")
            raise StoreUnavailableError(
                f"Redis {operation} failed: {e}",
                {"operation": operation},
            )

    async def ping(self) -> bool:
        """Check connectivity."""
        return bool(await self._call("ping", self._redis.ping()))

    async def get(self, key: str) -> Optional[str]:
        value = await self._call("get", self._redis.get(self._key(key)))
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    async def set(self, key: str, value: str, ttl: TTL,
                  only_if_absent: bool = False) -> bool:
        result = await self._call(
            "set",
            self._redis.set(self._key(key), value, ex=ttl_seconds(ttl), nx=only_if_absent),
        )
        logger.debug(f"Set {key} (nx={only_if_absent}): {bool(result)}")
        return bool(result)

    async def incr(self, key: str, ttl: TTL) -> int:
        return await self._call("incr", self._incr_with_expiry(self._key(key), ttl_seconds(ttl)))

    async def _incr_with_expiry(self, key: str, seconds: int) -> int:
        async with self._redis.pipeline(transaction=True) as pipe:
            count, _ = await pipe.incr(key).expire(key, seconds).execute()
        return int(count)

    async def exists(self, key: str) -> bool:
        return await self._call("exists", self._redis.exists(self._key(key))) > 0

    async def delete(self, key: str) -> bool:
        return await self._call("delete", self._redis.delete(self._key(key))) > 0

    async def close(self) -> None:
        """Close Redis connection."""
        await self._redis.aclose()
        logger.info("Closed Redis connection")


def create_distributed_store(url: str,
                             password: Optional[str] = None,
                             db: int = 0,
                             **kwargs) -> RedisKeyValueStore:
    """
    Create a Redis-backed store.

    Args:
        url: Redis URL
        password: Redis password
        db: Redis database number
        **kwargs: Additional configuration options

    Returns:
        RedisKeyValueStore instance
    """
    config = DistributedConfig(url=url, password=password, db=db, **kwargs)
    return RedisKeyValueStore(config)
