from __future__ import annotations

import hashlib

from .bytes import BytesLike, ensure_bytes, to_base64


# --- SHA-256 ------------------------------------------------------------------
# Tendermint2 identifies transactions by the SHA-256 of their encoded bytes.


def sha256(data: BytesLike) -> bytes:
    """Return the SHA-256 digest of *data*."""
    return hashlib.sha256(ensure_bytes(data)).digest()


def sha256_b64(data: BytesLike) -> str:
    """SHA-256 digest as base64, the canonical form of a tx hash."""
    return to_base64(sha256(data))


__all__ = [
    "sha256",
    "sha256_b64",
]
