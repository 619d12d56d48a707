"""
JWT token codec for xauth.

Tokens are compact JWS strings signed with Ed25519 (``alg: EdDSA``).
Validity-window checks are done here rather than by PyJWT so that the
clock can be injected and expiry is reported separately from every other
failure.
"""

import logging
from dataclasses import replace
from datetime import timedelta
from typing import Callable, Optional, Union

import jwt
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from ..common.utils import generate_nonce, get_current_timestamp
from ..keys.manager import KeyPair, PUBLIC_KEY_SIZE
from ..errors import ExpiredError, InvalidTokenError, KeyFormatError
from .types import Claims

logger = logging.getLogger(__name__)

ALGORITHM = "EdDSA"
REQUIRED_CLAIMS = ["iss", "sub", "jti", "iat", "nbf", "exp"]


class TokenCodec:
    """Signs claim sets into tokens and verifies tokens back into claims."""

    def __init__(self, issuer: str = "xauth", clock: Optional[Callable[[], float]] = None):
        self.issuer = issuer
        self._clock = clock or get_current_timestamp

    def now(self) -> int:
        return int(self._clock())

    def sign(self, claims: Claims, key_pair: KeyPair, expiry: Union[timedelta, int]) -> str:
        """
        Stamp the validity window on ``claims`` and sign them.

        Args:
            claims: Identity claims; time fields, issuer and nonce are overwritten
            key_pair: Signing key pair
            expiry: Token lifetime

        Returns:
            Compact token string
        """
        if isinstance(expiry, timedelta):
            expiry = int(expiry.total_seconds())

        now = self.now()
        stamped = replace(
            claims,
            issuer=self.issuer,
            issued_at=now,
            not_before=now,
            expires_at=now + expiry,
            nonce=generate_nonce(),
        )

        token = jwt.encode(
            stamped.to_payload(),
            key_pair.signing_key,
            algorithm=ALGORITHM,
            headers={"typ": "JWT"},
        )
        logger.debug(f"Signed {stamped.token_type.value} token {stamped.token_id}")
        return token

    def verify(self, token: str, public_key: Union[bytes, KeyPair]) -> Claims:
        """
        Verify a token and return its claims.

        Raises:
            ExpiredError: If the token is authentic but past its expiry
            InvalidTokenError: For any other failure
        """
        verifying_key = _verifying_key(public_key)

        if not token or not isinstance(token, str):
            raise InvalidTokenError("Token is empty")

        try:
            header = jwt.get_unverified_header(token)
        except jwt.PyJWTError as e:
            raise InvalidTokenError(f"Malformed token: {e}")

        algorithm = header.get("alg")
        if algorithm != ALGORITHM:
            raise InvalidTokenError(
                f"Unexpected signing algorithm: {algorithm}",
                {"expected": ALGORITHM, "actual": algorithm},
            )

        try:
            payload = jwt.decode(
                token,
                verifying_key,
                algorithms=[ALGORITHM],
                issuer=self.issuer,
                options={
                    "require": REQUIRED_CLAIMS,
                    "verify_exp": False,
                    "verify_nbf": False,
                    "verify_iat": False,
                },
            )
        except jwt.PyJWTError as e:
            raise InvalidTokenError(f"Invalid token: {e}")

        claims = Claims.from_payload(payload)

        now = self.now()
        if now < claims.not_before:
            raise InvalidTokenError("Token is not yet valid", {"token_id": claims.token_id})
        if now > claims.expires_at:
            raise ExpiredError(details={"token_id": claims.token_id})

        return claims


def _verifying_key(public_key: Union[bytes, KeyPair]) -> Ed25519PublicKey:
    if isinstance(public_key, KeyPair):
        return public_key.verifying_key
    if len(public_key) != PUBLIC_KEY_SIZE:
        raise KeyFormatError("invalid public key size")
    return Ed25519PublicKey.from_public_bytes(public_key)
