"""
Key management for xauth: Ed25519 key generation, PEM persistence and loading.
"""

from .manager import (
    KeyManager,
    KeyPair,
    PRIVATE_KEY_FILE_NAME,
    PUBLIC_KEY_FILE_NAME,
    decode_pem,
    encode_pem,
)

__all__ = [
    "KeyManager",
    "KeyPair",
    "PRIVATE_KEY_FILE_NAME",
    "PUBLIC_KEY_FILE_NAME",
    "decode_pem",
    "encode_pem",
]
