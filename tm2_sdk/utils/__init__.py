"""
Utility helpers for the Python SDK.

Re-exports:
- bytes: base64 helpers and uvarint encode/decode
- hash: SHA-256 convenience wrappers
"""

from .bytes import (ensure_bytes, from_base64, string_to_base64, to_base64,
                    uvarint_decode, uvarint_encode)
from .hash import sha256, sha256_b64

__all__ = [
    # bytes
    "to_base64",
    "from_base64",
    "string_to_base64",
    "ensure_bytes",
    "uvarint_encode",
    "uvarint_decode",
    # hash
    "sha256",
    "sha256_b64",
]
