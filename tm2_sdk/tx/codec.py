"""
tm2_sdk.tx.codec
================

Protobuf wire codec for Tendermint2 transactions (`tm2.tx.Tx`).

Messages (field numbers from tm2/tx.proto):

    Tx          { repeated TxMessage messages = 1; TxFee fee = 2;
                  repeated TxSignature signatures = 3; string memo = 4; }
    TxMessage   { string type_url = 1; bytes value = 2; }
    TxFee       { sint64 gas_wanted = 1; string gas_fee = 2; }
    TxSignature { PublicKey pub_key = 1; bytes signature = 2; }
    PublicKey   { string type = 1; bytes value = 2; }

proto3 rules apply: default-valued scalars are not written, unknown fields are
skipped on decode. Encoding is deterministic (fields in ascending order), which
matters because a transaction is identified by the SHA-256 of these bytes.

The providers only need an object with `encode(tx) -> bytes` and
`decode(raw) -> tx` (see `TxCodec`); `DEFAULT_CODEC` wraps the functions here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Protocol, Tuple

from ..utils.bytes import (BytesLike, from_base64, to_base64, uvarint_decode,
                           uvarint_encode)
from ..utils.hash import sha256, sha256_b64

# Wire types
_VARINT = 0
_I64 = 1
_LEN = 2
_I32 = 5


# -----------------------------------------------------------------------------
# Models
# -----------------------------------------------------------------------------


@dataclass
class TxMessage:
    type_url: str = ""
    value: bytes = b""


@dataclass
class TxFee:
    gas_wanted: int = 0
    gas_fee: str = ""  # <value><denomination>, e.g. "1000000ugnot"


@dataclass
class PublicKey:
    type_url: str = ""
    value: bytes = b""


@dataclass
class TxSignature:
    pub_key: Optional[PublicKey] = None
    signature: bytes = b""


@dataclass
class Tx:
    messages: List[TxMessage] = field(default_factory=list)
    fee: Optional[TxFee] = None
    signatures: List[TxSignature] = field(default_factory=list)
    memo: str = ""


class TxCodec(Protocol):
    def encode(self, tx: Any) -> bytes: ...
    def decode(self, raw: bytes) -> Any: ...


# -----------------------------------------------------------------------------
# Wire primitives
# -----------------------------------------------------------------------------


def _key(field_no: int, wire_type: int) -> bytes:
    return uvarint_encode((field_no << 3) | wire_type)


def _len_field(field_no: int, payload: bytes) -> bytes:
    return _key(field_no, _LEN) + uvarint_encode(len(payload)) + payload


def _zigzag_encode(n: int) -> int:
    return ((n << 1) ^ (n >> 63)) & 0xFFFFFFFFFFFFFFFF


def _zigzag_decode(n: int) -> int:
    return (n >> 1) ^ -(n & 1)


def _iter_fields(buf: bytes) -> Iterator[Tuple[int, int, Any]]:
    """Yield (field_no, wire_type, value); LEN values are bytes, VARINT ints."""
    pos = 0
    end = len(buf)
    while pos < end:
        key, n = uvarint_decode(buf, offset=pos)
        pos += n
        field_no, wire_type = key >> 3, key & 0x07
        if field_no == 0:
            raise ValueError("invalid field number 0")
        if wire_type == _VARINT:
            value, n = uvarint_decode(buf, offset=pos)
            pos += n
        elif wire_type == _LEN:
            length, n = uvarint_decode(buf, offset=pos)
            pos += n
            if pos + length > end:
                raise ValueError("truncated length-delimited field")
            value = buf[pos:pos + length]
            pos += length
        elif wire_type == _I64:
            if pos + 8 > end:
                raise ValueError("truncated fixed64 field")
            value = buf[pos:pos + 8]
            pos += 8
        elif wire_type == _I32:
            if pos + 4 > end:
                raise ValueError("truncated fixed32 field")
            value = buf[pos:pos + 4]
            pos += 4
        else:
            raise ValueError(f"unsupported wire type {wire_type}")
        yield field_no, wire_type, value


def _utf8(b: bytes) -> str:
    try:
        return b.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ValueError(f"invalid UTF-8 in string field: {e}") from e


# -----------------------------------------------------------------------------
# Encoding
# -----------------------------------------------------------------------------


def _encode_message(m: TxMessage) -> bytes:
    out = b""
    if m.type_url:
        out += _len_field(1, m.type_url.encode("utf-8"))
    if m.value:
        out += _len_field(2, bytes(m.value))
    return out


def _encode_fee(f: TxFee) -> bytes:
    out = b""
    if f.gas_wanted:
        out += _key(1, _VARINT) + uvarint_encode(_zigzag_encode(int(f.gas_wanted)))
    if f.gas_fee:
        out += _len_field(2, f.gas_fee.encode("utf-8"))
    return out


def _encode_pub_key(k: PublicKey) -> bytes:
    out = b""
    if k.type_url:
        out += _len_field(1, k.type_url.encode("utf-8"))
    if k.value:
        out += _len_field(2, bytes(k.value))
    return out


def _encode_signature(s: TxSignature) -> bytes:
    out = b""
    if s.pub_key is not None:
        out += _len_field(1, _encode_pub_key(s.pub_key))
    if s.signature:
        out += _len_field(2, bytes(s.signature))
    return out


def encode_tx(tx: Tx) -> bytes:
    """Serialize a Tx to its protobuf bytes."""
    out = bytearray()
    for m in tx.messages:
        out += _len_field(1, _encode_message(m))
    if tx.fee is not None:
        out += _len_field(2, _encode_fee(tx.fee))
    for s in tx.signatures:
        out += _len_field(3, _encode_signature(s))
    if tx.memo:
        out += _len_field(4, tx.memo.encode("utf-8"))
    return bytes(out)


# -----------------------------------------------------------------------------
# Decoding
# -----------------------------------------------------------------------------


def _decode_message(buf: bytes) -> TxMessage:
    m = TxMessage()
    for no, wt, val in _iter_fields(buf):
        if no == 1 and wt == _LEN:
            m.type_url = _utf8(val)
        elif no == 2 and wt == _LEN:
            m.value = bytes(val)
    return m


def _decode_fee(buf: bytes) -> TxFee:
    f = TxFee()
    for no, wt, val in _iter_fields(buf):
        if no == 1 and wt == _VARINT:
            f.gas_wanted = _zigzag_decode(val)
        elif no == 2 and wt == _LEN:
            f.gas_fee = _utf8(val)
    return f


def _decode_pub_key(buf: bytes) -> PublicKey:
    k = PublicKey()
    for no, wt, val in _iter_fields(buf):
        if no == 1 and wt == _LEN:
            k.type_url = _utf8(val)
        elif no == 2 and wt == _LEN:
            k.value = bytes(val)
    return k


def _decode_signature(buf: bytes) -> TxSignature:
    s = TxSignature()
    for no, wt, val in _iter_fields(buf):
        if no == 1 and wt == _LEN:
            s.pub_key = _decode_pub_key(val)
        elif no == 2 and wt == _LEN:
            s.signature = bytes(val)
    return s


def decode_tx(raw: BytesLike) -> Tx:
    """Parse protobuf bytes into a Tx. Raises ValueError on malformed input."""
    buf = bytes(raw)
    tx = Tx()
    for no, wt, val in _iter_fields(buf):
        if wt != _LEN:
            continue
        if no == 1:
            tx.messages.append(_decode_message(val))
        elif no == 2:
            tx.fee = _decode_fee(val)
        elif no == 3:
            tx.signatures.append(_decode_signature(val))
        elif no == 4:
            tx.memo = _utf8(val)
    return tx


# -----------------------------------------------------------------------------
# Hash / transport helpers
# -----------------------------------------------------------------------------


def tx_hash(raw: BytesLike) -> bytes:
    """SHA-256 of the encoded transaction, the node's transaction id."""
    return sha256(raw)


def tx_hash_b64(raw: BytesLike) -> str:
    return sha256_b64(raw)


def encode_tx_b64(tx: Tx) -> str:
    """Base64 of the encoded tx, the form expected by broadcast and simulate."""
    return to_base64(encode_tx(tx))


def decode_tx_b64(data: str) -> Tx:
    return decode_tx(from_base64(data))


class ProtobufTxCodec:
    """Default TxCodec backed by `encode_tx` / `decode_tx`."""

    def encode(self, tx: Tx) -> bytes:
        return encode_tx(tx)

    def decode(self, raw: bytes) -> Tx:
        return decode_tx(raw)


DEFAULT_CODEC: TxCodec = ProtobufTxCodec()


__all__ = [
    "Tx",
    "TxMessage",
    "TxFee",
    "TxSignature",
    "PublicKey",
    "TxCodec",
    "ProtobufTxCodec",
    "DEFAULT_CODEC",
    "encode_tx",
    "decode_tx",
    "encode_tx_b64",
    "decode_tx_b64",
    "tx_hash",
    "tx_hash_b64",
]
