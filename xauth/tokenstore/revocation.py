"""
Token revocation list backed by the shared key-value store.

Entries expire on their own once the token they refer to could no longer
be used anyway, which bounds the size of the list.
"""

import logging

from ..core.config import KeyspaceConfig
from ..errors import ConfigurationError
from .store import KeyValueStore, TTL


logger = logging.getLogger(__name__)

REVOKED_MARKER = "revoked"


class RevocationStore:
    """Marks token identifiers as revoked and answers revocation queries."""

    def __init__(self, store: KeyValueStore, keyspace: KeyspaceConfig = None):
        if store is None:
            raise ConfigurationError("RevocationStore requires a key-value store")
        self.store = store
        self.keyspace = keyspace or KeyspaceConfig()

    async def revoke(self, token_id: str, ttl: TTL) -> None:
        """
        Revoke ``token_id`` for ``ttl``. Revoking an already revoked id succeeds.

        Raises:
            StoreUnavailableError: If the store cannot be reached
        """
        await self.store.set(self.keyspace.blacklist_key(token_id), REVOKED_MARKER, ttl)
        logger.info(f"Revoked token {token_id}")

    async def revoke_once(self, token_id: str, ttl: TTL) -> bool:
        """
        Revoke ``token_id`` only if it is not revoked yet.

        Returns:
            True if this call created the entry, False if it already existed
        """
        created = await self.store.set(
            self.keyspace.blacklist_key(token_id), REVOKED_MARKER, ttl, only_if_absent=True
        )
        if created:
            logger.debug(f"Revoked token {token_id}")
        return created

    async def is_revoked(self, token_id: str) -> bool:
        """
        Check whether ``token_id`` is revoked.

        Raises:
            StoreUnavailableError: If the store cannot be reached; the caller
                decides whether that fails open or closed
        """
        return await self.store.exists(self.keyspace.blacklist_key(token_id))
