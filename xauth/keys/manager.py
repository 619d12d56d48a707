"""
Ed25519 key pair management for xauth.

Keys are stored as two PEM blocks holding the raw key bytes: the 64-byte
private key (32-byte seed followed by the 32-byte public key) under
``PRIVATE KEY`` and the 32-byte public key under ``PUBLIC KEY``.
"""

import base64
import binascii
import logging
import os
import re
import threading
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from ..errors import KeyFormatError

logger = logging.getLogger(__name__)

PRIVATE_KEY_PEM_TYPE = "PRIVATE KEY"
PUBLIC_KEY_PEM_TYPE = "PUBLIC KEY"
PRIVATE_KEY_FILE_NAME = "private.pem"
PUBLIC_KEY_FILE_NAME = "public.pem"

PRIVATE_KEY_SIZE = 64
PUBLIC_KEY_SIZE = 32
SEED_SIZE = 32

DIRECTORY_MODE = 0o700
PRIVATE_KEY_FILE_MODE = 0o600
PUBLIC_KEY_FILE_MODE = 0o644

_PEM_BLOCK = re.compile(
    r"-----BEGIN (?P<type>[A-Z0-9 ]+)-----\s*(?P<body>.*?)\s*-----END (?P=type)-----",
    re.DOTALL,
)


@dataclass(frozen=True)
class KeyPair:
    """Raw Ed25519 key material. Never serialized alongside claims."""
    private_key: bytes = field(repr=False)
    public_key: bytes

    def __post_init__(self):
        validate_key_size(self.private_key, self.public_key)

    @property
    def signing_key(self) -> Ed25519PrivateKey:
        return Ed25519PrivateKey.from_private_bytes(self.private_key[:SEED_SIZE])

    @property
    def verifying_key(self) -> Ed25519PublicKey:
        return Ed25519PublicKey.from_public_bytes(self.public_key)


def validate_key_size(private_key: bytes, public_key: bytes) -> None:
    """Raise KeyFormatError unless both keys have the exact Ed25519 sizes."""
    if len(private_key) != PRIVATE_KEY_SIZE:
        raise KeyFormatError(
            "invalid private key size",
            {"expected": PRIVATE_KEY_SIZE, "actual": len(private_key)},
        )
    if len(public_key) != PUBLIC_KEY_SIZE:
        raise KeyFormatError(
            "invalid public key size",
            {"expected": PUBLIC_KEY_SIZE, "actual": len(public_key)},
        )


def encode_pem(pem_type: str, data: bytes) -> bytes:
    """Wrap raw bytes into a PEM block."""
    body = base64.b64encode(data).decode("ascii")
    lines = [body[i:i + 64] for i in range(0, len(body), 64)]
    return (
        f"-----BEGIN {pem_type}-----\n"
        + "\n".join(lines)
        + f"\n-----END {pem_type}-----\n"
    ).encode("ascii")


def decode_pem(pem_data: Union[str, bytes], pem_type: str) -> bytes:
    """Extract the raw bytes of the first PEM block, which must be of ``pem_type``."""
    if isinstance(pem_data, bytes):
        try:
            pem_data = pem_data.decode("ascii")
        except UnicodeDecodeError:
            raise KeyFormatError(f"failed to decode {pem_type.lower()} PEM")

    match = _PEM_BLOCK.search(pem_data)
    if match is None:
        raise KeyFormatError(f"failed to decode {pem_type.lower()} PEM")
    if match.group("type") != pem_type:
        raise KeyFormatError(
            f"unexpected PEM block type {match.group('type')!r}, expected {pem_type!r}"
        )

    body = "".join(match.group("body").split())
    try:
        return base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError):
        raise KeyFormatError(f"malformed base64 in {pem_type.lower()} PEM")


class KeyManager:
    """
    Generates, persists and loads Ed25519 key pairs.

    A manager caches the pair it produced through :meth:`get_or_create`;
    the cached pair is read-only and may be shared between threads.
    """

    def __init__(self):
        self._key_pair: Optional[KeyPair] = None
        self._lock = threading.Lock()

    @property
    def key_pair(self) -> Optional[KeyPair]:
        return self._key_pair

    @staticmethod
    def generate() -> KeyPair:
        """Create a fresh key pair from the operating system CSPRNG."""
        signing_key = Ed25519PrivateKey.generate()
        seed = signing_key.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        )
        public_key = signing_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        logger.debug("Generated new Ed25519 key pair")
        return KeyPair(private_key=seed + public_key, public_key=public_key)

    @staticmethod
    def key_paths(directory: str) -> Tuple[str, str]:
        return (
            os.path.join(directory, PRIVATE_KEY_FILE_NAME),
            os.path.join(directory, PUBLIC_KEY_FILE_NAME),
        )

    @classmethod
    def persist(cls, key_pair: KeyPair, directory: str) -> Tuple[str, str]:
        """
        Write the key pair to ``directory`` as private.pem and public.pem.

        Args:
            key_pair: Key pair to save
            directory: Target directory, created with mode 0700 if missing

        Returns:
            Paths of the private and public key files

        Raises:
            OSError: If the directory or one of the files cannot be written
        """
        os.makedirs(directory, mode=DIRECTORY_MODE, exist_ok=True)
        private_path, public_path = cls.key_paths(directory)

        _write_file(
            private_path,
            encode_pem(PRIVATE_KEY_PEM_TYPE, key_pair.private_key),
            PRIVATE_KEY_FILE_MODE,
        )
        _write_file(
            public_path,
            encode_pem(PUBLIC_KEY_PEM_TYPE, key_pair.public_key),
            PUBLIC_KEY_FILE_MODE,
        )

        logger.info(f"Saved key pair to {directory}")
        return private_path, public_path

    @staticmethod
    def load(private_pem: Union[str, bytes], public_pem: Union[str, bytes]) -> KeyPair:
        """
        Decode a key pair from two PEM blocks.

        Raises:
            KeyFormatError: If either block is malformed, has the wrong size,
                or the public key does not belong to the private key
        """
        private_key = decode_pem(private_pem, PRIVATE_KEY_PEM_TYPE)
        public_key = decode_pem(public_pem, PUBLIC_KEY_PEM_TYPE)
        validate_key_size(private_key, public_key)

        derived = Ed25519PrivateKey.from_private_bytes(private_key[:SEED_SIZE]).public_key()
        derived_bytes = derived.public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        if derived_bytes != public_key or private_key[SEED_SIZE:] != public_key:
            raise KeyFormatError("public key does not match private key")

        return KeyPair(private_key=private_key, public_key=public_key)

    @classmethod
    def load_files(cls, directory: str) -> KeyPair:
        """Load private.pem and public.pem from ``directory``."""
        private_path, public_path = cls.key_paths(directory)
        with open(private_path, "rb") as f:
            private_pem = f.read()
        with open(public_path, "rb") as f:
            public_pem = f.read()
        return cls.load(private_pem, public_pem)

    def get_or_create(self, directory: Optional[str] = None) -> KeyPair:
        """
        Return the cached key pair, loading or generating it on first use.

        With a directory, existing key files are loaded, and a new pair is
        generated and persisted only when neither file exists. Without one,
        an ephemeral in-process pair is generated.

        Raises:
            KeyFormatError: If only one of the two key files exists
        """
        if self._key_pair is not None:
            return self._key_pair

        with self._lock:
            if self._key_pair is not None:
                return self._key_pair

            if directory is None:
                logger.warning("No key directory configured, using an ephemeral key pair")
                self._key_pair = self.generate()
                return self._key_pair

            paths = self.key_paths(directory)
            missing = [path for path in paths if not os.path.exists(path)]
            if not missing:
                self._key_pair = self.load_files(directory)
                logger.info(f"Loaded key pair from {directory}")
            elif len(missing) < len(paths):
                logger.error(f"Incomplete key pair in {directory}, missing {missing[0]}")
                raise KeyFormatError(
                    f"Incomplete key pair, missing {missing[0]}",
                    {"directory": directory, "missing": missing},
                )
            else:
                key_pair = self.generate()
                self.persist(key_pair, directory)
                self._key_pair = key_pair

            return self._key_pair

    def from_config(self, config) -> KeyPair:
        """Resolve the key pair from inline PEM strings or the key directory."""
        if config.private_key_pem and config.public_key_pem:
            with self._lock:
                if self._key_pair is None:
                    self._key_pair = self.load(config.private_key_pem, config.public_key_pem)
                return self._key_pair
        return self.get_or_create(config.key_directory)


def _write_file(path: str, data: bytes, mode: int) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    with os.fdopen(fd, "wb") as f:
        # os.open only applies the mode to new files and honours the umask
        os.fchmod(f.fileno(), mode)
        f.write(data)
