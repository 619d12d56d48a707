"""
Common utilities and helper functions for xauth.
"""

import secrets
import time
import uuid


def generate_id(prefix: str = "") -> str:
    """Generate a unique identifier with optional prefix."""
    unique_id = str(uuid.uuid4())
    return f"{prefix}{unique_id}" if prefix else unique_id


def generate_nonce(length: int = 16) -> str:
    """Generate a cryptographically secure random hex nonce."""
    return secrets.token_hex(length)


def get_current_timestamp() -> int:
    """Get current timestamp in seconds since epoch."""
    return int(time.time())
