from __future__ import annotations

import base64
import binascii
from typing import Tuple, Union

BytesLike = Union[bytes, bytearray, memoryview]


def ensure_bytes(data: Union[BytesLike, str]) -> bytes:
    """
    Ensure input is bytes.

    Accepts:
      - bytes / bytearray / memoryview  -> bytes(data)
      - str: treated as base64 (the node's canonical binary encoding)

    Raises:
      ValueError on invalid base64 strings.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, str):
        return from_base64(data)
    raise TypeError(f"Unsupported type for ensure_bytes: {type(data)!r}")


def to_base64(b: BytesLike) -> str:
    """Bytes -> standard (padded) base64 string."""
    return base64.b64encode(bytes(b)).decode("ascii")


def from_base64(s: str) -> bytes:
    """
    Standard base64 string -> bytes.

    Strict: characters outside the base64 alphabet are rejected rather than
    silently dropped.
    """
    if not isinstance(s, str):
        raise TypeError("from_base64 expects a string")
    try:
        return base64.b64decode(s, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"invalid base64 string: {e}") from e


def string_to_base64(s: str) -> str:
    """UTF-8 text -> base64 (how the node wraps JSON inside ABCI payloads)."""
    return to_base64(s.encode("utf-8"))


# --- Unsigned varint (LEB128) -------------------------------------------------


def uvarint_encode(n: int) -> bytes:
    """
    Encode an unsigned integer using LEB128 (base-128 varint), the integer
    encoding of the protobuf wire format.

    - Non-negative integers only.
    - Little-endian groups of 7 bits; MSB continuation bit.

    Example:
        0x00 -> b'\\x00'
        0x7f -> b'\\x7f'
        0x80 -> b'\\x80\\x01'
    """
    if n < 0:
        raise ValueError("uvarint_encode expects a non-negative integer")
    out = bytearray()
    while True:
        to_write = n & 0x7F
        n >>= 7
        if n:
            out.append(to_write | 0x80)  # set continuation bit
        else:
            out.append(to_write)
            break
    return bytes(out)


def uvarint_decode(b: BytesLike, *, offset: int = 0) -> Tuple[int, int]:
    """
    Decode an unsigned LEB128 varint from bytes starting at `offset`.

    Returns:
        (value, length_consumed)

    Raises:
        ValueError if the varint is malformed or overflows 64-bit (guardrail).
    """
    result = 0
    shift = 0
    view = memoryview(b)[offset:]

    for consumed, byte in enumerate(view, start=1):
        result |= (byte & 0x7F) << shift
        if (byte & 0x80) == 0:
            return result, consumed
        shift += 7
        if shift >= 64:  # guardrail to avoid unbounded growth
            raise ValueError("uvarint too large (exceeds 64 bits)")
    raise ValueError("truncated uvarint (input ended before termination byte)")


__all__ = [
    "BytesLike",
    "ensure_bytes",
    "to_base64",
    "from_base64",
    "string_to_base64",
    "uvarint_encode",
    "uvarint_decode",
]
