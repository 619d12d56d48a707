"""
Common helpers shared across xauth packages.
"""

from .utils import generate_id, generate_nonce, get_current_timestamp

__all__ = [
    "generate_id",
    "generate_nonce",
    "get_current_timestamp",
]
