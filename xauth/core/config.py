"""
Configuration module for xauth.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.
"""

from datetime import timedelta
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from ..errors import ConfigurationError
from ..util.config import load_config_file, load_config_from_env, to_timedelta


class StoreFailurePolicy(Enum):
    """
    What to do when the key-value store cannot answer a revocation or
    lockout query.

    FAIL_CLOSED denies the request (``StoreUnavailableError`` propagates).
    FAIL_OPEN logs a warning and lets the request through.
    """

    FAIL_CLOSED = "fail_closed"
    FAIL_OPEN = "fail_open"


@dataclass
class ThrottleConfig:
    """Login throttling configuration"""
    max_attempts: int = 5
    attempt_window: timedelta = field(default_factory=lambda: timedelta(hours=1))
    lock_duration: timedelta = field(default_factory=lambda: timedelta(hours=1))


@dataclass
class KeyspaceConfig:
    """Key prefixes used in the shared key-value store"""
    blacklist_prefix: str = "token:blacklist:"
    attempts_prefix: str = "login:attempts:"
    lock_prefix: str = "login:lock:"

    def blacklist_key(self, token_id: str) -> str:
        return f"{self.blacklist_prefix}{token_id}"

    def attempts_key(self, identifier: str) -> str:
        return f"{self.attempts_prefix}{identifier}"

    def lock_key(self, identifier: str) -> str:
        return f"{self.lock_prefix}{identifier}"


@dataclass
class AuthConfig:
    """Configuration for the token service.

    ``store_failure_policy`` deliberately has no default: the deployment has
    to pick between availability and security explicitly.
    """
    store_failure_policy: StoreFailurePolicy
    issuer: str = "xauth"
    access_token_expiry: timedelta = field(default_factory=lambda: timedelta(hours=1))
    refresh_token_expiry: timedelta = field(default_factory=lambda: timedelta(days=7))
    key_directory: Optional[str] = None
    private_key_pem: Optional[str] = None
    public_key_pem: Optional[str] = None
    throttle: ThrottleConfig = field(default_factory=ThrottleConfig)
    keyspace: KeyspaceConfig = field(default_factory=KeyspaceConfig)

    def __post_init__(self):
        if isinstance(self.store_failure_policy, str):
            try:
                self.store_failure_policy = StoreFailurePolicy(self.store_failure_policy.lower())
            except ValueError:
                raise ConfigurationError(
                    f"Unknown store_failure_policy: {self.store_failure_policy}"
                )

    @property
    def fail_open(self) -> bool:
        return self.store_failure_policy is StoreFailurePolicy.FAIL_OPEN

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuthConfig":
        """
        Build a configuration from a plain mapping.

        Durations may be timedeltas, seconds, or strings such as ``15m``.
        Throttle and keyspace settings may be nested under ``throttle`` and
        ``keyspace`` or given flat (``max_login_attempts``,
        ``login_lock_duration``, ``login_attempt_window``,
        ``blacklist_prefix``...).
        """
        policy = data.get("store_failure_policy")
        if not policy:
            raise ConfigurationError("store_failure_policy is required (fail_open or fail_closed)")

        throttle_data = dict(data.get("throttle") or {})
        for flat_key, key in (
            ("max_login_attempts", "max_attempts"),
            ("login_attempt_window", "attempt_window"),
            ("login_lock_duration", "lock_duration"),
        ):
            if flat_key in data:
                throttle_data[key] = data[flat_key]

        keyspace_data = dict(data.get("keyspace") or {})
        for key in ("blacklist_prefix", "attempts_prefix", "lock_prefix"):
            if key in data:
                keyspace_data[key] = data[key]

        try:
            throttle = ThrottleConfig()
            if "max_attempts" in throttle_data:
                throttle.max_attempts = int(throttle_data["max_attempts"])
            if "attempt_window" in throttle_data:
                throttle.attempt_window = to_timedelta(throttle_data["attempt_window"])
            if "lock_duration" in throttle_data:
                throttle.lock_duration = to_timedelta(throttle_data["lock_duration"])

            kwargs: Dict[str, Any] = {}
            for key in ("access_token_expiry", "refresh_token_expiry"):
                if key in data:
                    kwargs[key] = to_timedelta(data[key])

            keyspace = KeyspaceConfig(**keyspace_data)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration value: {e}")

        for key in ("issuer", "key_directory", "private_key_pem", "public_key_pem"):
            if data.get(key):
                kwargs[key] = data[key]

        config = cls(
            store_failure_policy=policy,
            throttle=throttle,
            keyspace=keyspace,
            **kwargs,
        )
        config.validate()
        return config

    @classmethod
    def from_env(cls, prefix: str = "XAUTH_") -> "AuthConfig":
        """Create configuration from environment variables"""
        return cls.from_dict(load_config_from_env(prefix))

    @classmethod
    def from_file(cls, file_path: str) -> "AuthConfig":
        """Create configuration from a JSON or YAML file"""
        return cls.from_dict(load_config_file(file_path))

    def validate(self) -> bool:
        """Validate the configuration"""
        if not isinstance(self.store_failure_policy, StoreFailurePolicy):
            raise ConfigurationError("store_failure_policy must be fail_open or fail_closed")
        if not self.issuer:
            raise ConfigurationError("issuer is required")
        if self.access_token_expiry <= timedelta(0):
            raise ConfigurationError("access_token_expiry must be positive")
        if self.refresh_token_expiry < self.access_token_expiry:
            raise ConfigurationError("refresh_token_expiry must not be shorter than access_token_expiry")
        if self.throttle.max_attempts < 1:
            raise ConfigurationError("max_attempts must be at least 1")
        if self.throttle.attempt_window <= timedelta(0):
            raise ConfigurationError("attempt_window must be positive")
        if self.throttle.lock_duration <= timedelta(0):
            raise ConfigurationError("lock_duration must be positive")
        if bool(self.private_key_pem) != bool(self.public_key_pem):
            raise ConfigurationError("private_key_pem and public_key_pem must be provided together")
        return True
