"""
Service layer for xauth.

TokenService combines the key pair, the token codec, the revocation list and
the login throttle into one contract:
  - issue, refresh, validate and revoke token pairs
  - check, fail and succeed logins against the throttle

Every denial is logged with its precise error code, while callers only see
the generic ``AuthError.public_dict()`` payload at the transport boundary.
"""

import logging
from typing import Optional

from ..auth.jwt import TokenCodec
from ..auth.types import Claims, TokenPair, TokenType
from ..common.utils import generate_id
from ..core.config import AuthConfig
from ..errors import (
    ConfigurationError,
    ExpiredError,
    InvalidTokenError,
    LockedError,
    RevokedError,
    StoreUnavailableError,
)
from ..keys.manager import KeyManager, KeyPair
from ..rate.throttle import LoginThrottle
from ..tokenstore.revocation import RevocationStore
from ..tokenstore.store import KeyValueStore

logger = logging.getLogger(__name__)


class TokenService:
    """
    Issues and checks access/refresh token pairs.

    Refresh tokens are rotated: each successful refresh returns a new pair
    under the original token id and consumes the presented refresh token,
    so replaying it fails with ``RevokedError``.
    """

    def __init__(
        self,
        config: AuthConfig,
        key_pair: KeyPair,
        store: KeyValueStore,
        codec: Optional[TokenCodec] = None,
    ):
        if config is None:
            raise ConfigurationError("TokenService requires a configuration")
        if key_pair is None:
            raise ConfigurationError("TokenService requires a key pair")
        if store is None:
            raise ConfigurationError("TokenService requires a key-value store")
        config.validate()

        self.config = config
        self.key_pair = key_pair
        self.store = store
        self.codec = codec or TokenCodec(issuer=config.issuer)
        self.revocations = RevocationStore(store, config.keyspace)
        self.throttle = LoginThrottle(store, config.throttle, config.keyspace)

    @classmethod
    def from_config(
        cls,
        config: AuthConfig,
        store: KeyValueStore,
        key_manager: Optional[KeyManager] = None,
    ) -> "TokenService":
        """Build a service, resolving the key pair from the configuration."""
        config.validate()
        key_pair = (key_manager or KeyManager()).from_config(config)
        return cls(config, key_pair, store)

    async def close(self) -> None:
        await self.store.close()

    # Tokens

    async def issue(self, user_id: str, username: str) -> TokenPair:
        """
        Issue a new access/refresh pair for a user.

        Args:
            user_id: Opaque user identifier
            username: Display name carried in the claims

        Returns:
            Token pair sharing a fresh token id
        """
        if not user_id:
            raise ValueError("user_id is required")

        token_id = generate_id()
        pair = self._sign_pair(user_id, username, token_id)
        logger.info(f"Issued token pair {token_id} for user {user_id}")
        return pair

    async def refresh(self, refresh_token: str) -> TokenPair:
        """
        Exchange a refresh token for a new pair under the same token id.

        Raises:
            ExpiredError: If the refresh token has expired
            InvalidTokenError: If it is not a valid refresh token
            RevokedError: If the token id is revoked or the refresh token
                was already used
            StoreUnavailableError: If the store is down and the policy is fail-closed
        """
        claims = self._verify(refresh_token, TokenType.REFRESH)
        await self._ensure_not_revoked(claims)

        remaining = claims.remaining_lifetime(self.codec.now())
        try:
            first_use = await self.revocations.revoke_once(claims.nonce, remaining)
        except StoreUnavailableError as e:
            self._on_store_failure("refresh token rotation", e)
            first_use = True

        if not first_use:
            logger.warning(
                f"Rejected refresh token {claims.token_id}: REVOKED_TOKEN (refresh token replayed)"
            )
            raise RevokedError(
                "Refresh token has already been used", {"token_id": claims.token_id}
            )

        pair = self._sign_pair(claims.user_id, claims.username, claims.token_id)
        logger.info(f"Rotated token pair {claims.token_id} for user {claims.user_id}")
        return pair

    async def validate(self, access_token: str) -> Claims:
        """
        Verify an access token and check it against the revocation list.

        Raises:
            ExpiredError, InvalidTokenError, RevokedError, StoreUnavailableError
        """
        claims = self._verify(access_token, TokenType.ACCESS)
        await self._ensure_not_revoked(claims)
        return claims

    async def revoke(self, token_id: str) -> None:
        """
        Revoke every token sharing ``token_id``.

        The entry lives as long as a refresh token could, since the original
        remaining lifetime is unknown here.
        """
        await self.revocations.revoke(token_id, self.config.refresh_token_expiry)

    def _sign_pair(self, user_id: str, username: str, token_id: str) -> TokenPair:
        access_token = self.codec.sign(
            Claims(user_id=user_id, username=username, token_id=token_id,
                   token_type=TokenType.ACCESS),
            self.key_pair,
            self.config.access_token_expiry,
        )
        refresh_token = self.codec.sign(
            Claims(user_id=user_id, username=username, token_id=token_id,
                   token_type=TokenType.REFRESH),
            self.key_pair,
            self.config.refresh_token_expiry,
        )
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    def _verify(self, token: str, expected_type: TokenType) -> Claims:
        try:
            claims = self.codec.verify(token, self.key_pair)
        except (ExpiredError, InvalidTokenError) as e:
            logger.warning(
                f"Rejected {expected_type.value} token: {e.error_code} ({e.message})"
            )
            raise

        if claims.token_type is not expected_type:
            logger.warning(
                f"Rejected {expected_type.value} token {claims.token_id}: INVALID_TOKEN "
                f"(got {claims.token_type.value} token)"
            )
            raise InvalidTokenError(
                f"Expected {expected_type.value} token",
                {"token_id": claims.token_id},
            )
        return claims

    async def _ensure_not_revoked(self, claims: Claims) -> None:
        try:
            revoked = await self.revocations.is_revoked(claims.token_id)
        except StoreUnavailableError as e:
            self._on_store_failure(f"revocation check for {claims.token_id}", e)
            return

        if revoked:
            logger.warning(f"Rejected {claims.token_type.value} token {claims.token_id}: REVOKED_TOKEN")
            raise RevokedError(details={"token_id": claims.token_id})

    # Login throttling

    async def check_login(self, identifier: str) -> None:
        """
        Refuse a login attempt for a locked identifier.

        Raises:
            LockedError: If the identifier is locked out
        """
        try:
            locked = await self.throttle.is_locked(identifier)
        except StoreUnavailableError as e:
            self._on_store_failure(f"lock check for {identifier}", e)
            return

        if locked:
            logger.warning(f"Rejected login for {identifier}: LOGIN_LOCKED")
            raise LockedError(identifier)

    async def login_failed(self, identifier: str) -> int:
        """
        Record a failed login and lock the identifier at the threshold.

        Returns:
            Number of failures in the current window (0 if the store was
            unavailable under the fail-open policy)
        """
        try:
            attempts = await self.throttle.record_failure(identifier)
            if attempts >= self.throttle.max_attempts:
                await self.throttle.lock(identifier)
        except StoreUnavailableError as e:
            self._on_store_failure(f"failed login bookkeeping for {identifier}", e)
            return 0
        return attempts

    async def login_succeeded(self, identifier: str) -> None:
        """Clear the failure counter after a successful login."""
        try:
            await self.throttle.reset(identifier)
        except StoreUnavailableError as e:
            self._on_store_failure(f"attempt reset for {identifier}", e)

    def _on_store_failure(self, operation: str, error: StoreUnavailableError) -> None:
        if self.config.fail_open:
            logger.warning(f"Store unavailable during {operation}, failing open: {error.message}")
            return
        logger.error(f"Store unavailable during {operation}, failing closed: {error.message}")
        raise error


__all__ = [
    "TokenService",
]
