"""
Error classes for xauth.

Every "deny access" outcome (invalid, expired, revoked, locked) shares the
same public representation so that transport layers do not leak which
condition applied. The precise ``error_code`` stays available for logs.
"""

from typing import Any, Dict


UNAUTHORIZED = "unauthorized"


class AuthError(Exception):
    """Base authentication error."""

    retryable = False

    def __init__(self, message: str, error_code: str = None, details: dict = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "AUTH_ERROR"
        self.details = details or {}

    def public_dict(self) -> Dict[str, Any]:
        """Payload safe to return to an unauthenticated caller."""
        return {"error": UNAUTHORIZED}

    def to_dict(self) -> Dict[str, Any]:
        """Full error description for internal logs."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }


class ConfigurationError(AuthError, ValueError):
    """Invalid or incomplete configuration."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, "CONFIGURATION_ERROR", details)


class KeyFormatError(AuthError):
    """Malformed or wrong-size key material."""

    def __init__(self, message: str = "Invalid key material", details: dict = None):
        super().__init__(message, "KEY_FORMAT_ERROR", details)


class TokenError(AuthError):
    """Token-related error."""

    def __init__(self, message: str, error_code: str = None, details: dict = None):
        super().__init__(message, error_code or "TOKEN_ERROR", details)


class InvalidTokenError(TokenError):
    """Token is malformed, forged, or signed with an unexpected algorithm."""

    def __init__(self, message: str = "Token is invalid", details: dict = None):
        super().__init__(message, "INVALID_TOKEN", details)


class ExpiredError(TokenError):
    """Token is well-formed but outside its validity window."""

    def __init__(self, message: str = "Token has expired", details: dict = None):
        super().__init__(message, "EXPIRED_TOKEN", details)


class RevokedError(TokenError):
    """Token is well-formed and unexpired but explicitly revoked."""

    def __init__(self, message: str = "Token has been revoked", details: dict = None):
        super().__init__(message, "REVOKED_TOKEN", details)


class LockedError(AuthError):
    """Identifier is currently locked out after repeated failures."""

    def __init__(self, identifier: str, details: dict = None):
        super().__init__(f"Login locked for {identifier}", "LOGIN_LOCKED", details)
        self.identifier = identifier


class StoreUnavailableError(AuthError):
    """The key-value store is unreachable or timed out."""

    retryable = True

    def __init__(self, message: str = "Store unavailable", details: dict = None):
        super().__init__(message, "STORE_UNAVAILABLE", details)
