"""
Core configuration for xauth.
"""

from .config import (
    AuthConfig,
    KeyspaceConfig,
    StoreFailurePolicy,
    ThrottleConfig,
)

__all__ = [
    "AuthConfig",
    "KeyspaceConfig",
    "StoreFailurePolicy",
    "ThrottleConfig",
]
