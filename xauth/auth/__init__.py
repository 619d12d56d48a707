# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Package auth provides signed token encoding and decoding for xauth.

This package implements:
- The canonical Claims schema and token pair type
- Ed25519 (EdDSA) JWT signing and verification
"""

from .types import (
    Claims,
    TokenPair,
    TokenType,
)

from .jwt import (
    ALGORITHM,
    TokenCodec,
)

__all__ = [
    # Types
    'Claims',
    'TokenPair',
    'TokenType',

    # Codec
    'ALGORITHM',
    'TokenCodec',
]
