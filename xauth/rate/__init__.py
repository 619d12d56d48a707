"""
Login throttling for xauth.

Failed authentication attempts are counted per identifier (username, IP
address...) in the shared key-value store; callers lock the identifier once
the count reaches the configured threshold.
"""

from .throttle import LoginThrottle

__all__ = [
    'LoginThrottle',
]
