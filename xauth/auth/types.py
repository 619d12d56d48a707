"""
Token types for xauth.
"""

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict

from ..errors import InvalidTokenError


class TokenType(Enum):
    """Kind of token carried in the ``token_type`` claim."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class TokenPair:
    """Access and refresh token issued together under one token id."""
    access_token: str
    refresh_token: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class Claims:
    """
    Identity and validity window carried inside a signed token.

    Timestamps are integer seconds since the epoch. ``token_id`` is shared by
    the access and refresh token of one pair; ``nonce`` is unique per signed
    token.
    """
    user_id: str
    username: str
    token_id: str
    token_type: TokenType = TokenType.ACCESS
    issuer: str = ""
    issued_at: int = 0
    not_before: int = 0
    expires_at: int = 0
    nonce: str = ""

    @property
    def expires_at_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.expires_at, tz=timezone.utc)

    def remaining_lifetime(self, now: int) -> int:
        """Seconds until expiry, never negative."""
        return max(0, self.expires_at - now)

    def to_payload(self) -> Dict[str, Any]:
        """JWT payload with registered claim names."""
        return {
            "user_id": self.user_id,
            "username": self.username,
            "token_type": self.token_type.value,
            "nonce": self.nonce,
            "iss": self.issuer,
            "sub": self.user_id,
            "jti": self.token_id,
            "iat": self.issued_at,
            "nbf": self.not_before,
            "exp": self.expires_at,
        }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Claims":
        """
        Build claims from a verified JWT payload.

        Raises:
            InvalidTokenError: If a required claim is missing or malformed
        """
        try:
            claims = cls(
                user_id=str(payload["user_id"]),
                username=str(payload["username"]),
                token_id=str(payload["jti"]),
                token_type=TokenType(payload["token_type"]),
                issuer=str(payload["iss"]),
                issued_at=int(payload["iat"]),
                not_before=int(payload["nbf"]),
                expires_at=int(payload["exp"]),
                nonce=str(payload["nonce"]),
            )
        except KeyError as e:
            raise InvalidTokenError(f"Token is missing required claim {e.args[0]!r}")
        except (TypeError, ValueError) as e:
            raise InvalidTokenError(f"Token has malformed claims: {e}")

        if payload.get("sub") != claims.user_id:
            raise InvalidTokenError("Token subject does not match user_id")
        if not claims.issued_at <= claims.not_before <= claims.expires_at:
            raise InvalidTokenError("Token has an inconsistent validity window")
        return claims
