"""
Login throttling implementation for xauth.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.
"""

import logging
from typing import Optional

from ..core.config import KeyspaceConfig, ThrottleConfig
from ..errors import ConfigurationError
from ..tokenstore.store import KeyValueStore

logger = logging.getLogger(__name__)

LOCKED_MARKER = "locked"


class LoginThrottle:
    """
    Failed-attempt counters and lockouts per identifier.

    The counter and the lock are separate keys: a lock keeps its own fixed
    duration even when the counter expires sooner.
    """

    def __init__(
        self,
        store: KeyValueStore,
        config: Optional[ThrottleConfig] = None,
        keyspace: Optional[KeyspaceConfig] = None,
    ):
        if store is None:
            raise ConfigurationError("LoginThrottle requires a key-value store")
        self.store = store
        self.config = config or ThrottleConfig()
        self.keyspace = keyspace or KeyspaceConfig()

    @property
    def max_attempts(self) -> int:
        return self.config.max_attempts

    async def record_failure(self, identifier: str) -> int:
        """Count a failed attempt and return the number of failures in the window"""
        count = await self.store.incr(
            self.keyspace.attempts_key(identifier), self.config.attempt_window
        )
        logger.debug(f"Failed login attempt {count} for {identifier}")
        return count

    async def attempts(self, identifier: str) -> int:
        """Number of failures recorded in the current window"""
        value = await self.store.get(self.keyspace.attempts_key(identifier))
        return int(value) if value else 0

    async def is_locked(self, identifier: str) -> bool:
        return await self.store.exists(self.keyspace.lock_key(identifier))

    async def lock(self, identifier: str) -> None:
        await self.store.set(
            self.keyspace.lock_key(identifier), LOCKED_MARKER, self.config.lock_duration
        )
        logger.info(f"Locked login for {identifier} for {self.config.lock_duration}")

    async def unlock(self, identifier: str) -> bool:
        """Lift a lock before it expires"""
        removed = await self.store.delete(self.keyspace.lock_key(identifier))
        if removed:
            logger.info(f"Unlocked login for {identifier}")
        return removed

    async def reset(self, identifier: str) -> None:
        """Clear the failure counter after a successful login"""
        await self.store.delete(self.keyspace.attempts_key(identifier))
