"""
xauth Python Package

Token-based authentication: Ed25519 key management, signed access/refresh
tokens, revocation and login throttling over a shared key-value store.
"""

__version__ = "0.1.0"

from .auth import Claims, TokenCodec, TokenPair, TokenType
from .core.config import AuthConfig, KeyspaceConfig, StoreFailurePolicy, ThrottleConfig
from .errors import (
    AuthError,
    ConfigurationError,
    ExpiredError,
    InvalidTokenError,
    KeyFormatError,
    LockedError,
    RevokedError,
    StoreUnavailableError,
    TokenError,
)
from .keys import KeyManager, KeyPair
from .rate import LoginThrottle
from .service import TokenService
from .tokenstore import (
    DistributedConfig,
    KeyValueStore,
    MemoryKeyValueStore,
    RedisKeyValueStore,
    RevocationStore,
)

__all__ = [
    "AuthConfig",
    "AuthError",
    "Claims",
    "ConfigurationError",
    "DistributedConfig",
    "ExpiredError",
    "InvalidTokenError",
    "KeyFormatError",
    "KeyManager",
    "KeyPair",
    "KeyValueStore",
    "KeyspaceConfig",
    "LockedError",
    "LoginThrottle",
    "MemoryKeyValueStore",
    "RedisKeyValueStore",
    "RevocationStore",
    "RevokedError",
    "StoreFailurePolicy",
    "StoreUnavailableError",
    "ThrottleConfig",
    "TokenCodec",
    "TokenError",
    "TokenPair",
    "TokenService",
    "TokenType",
]
