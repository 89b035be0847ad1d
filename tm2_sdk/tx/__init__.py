"""
tm2_sdk.tx
==========

Transaction model and wire codec for Tendermint2.

    from tm2_sdk.tx import Tx, TxFee, encode_tx, encode_tx_b64, tx_hash_b64

    tx = Tx(memo="hello", fee=TxFee(gas_wanted=100_000, gas_fee="1000ugnot"))
    encoded = encode_tx_b64(tx)     # what send_transaction expects
    digest = tx_hash_b64(encode_tx(tx))  # what wait_for_transaction matches

Signing is not part of this package; attach `TxSignature`s produced elsewhere.
"""

from __future__ import annotations

from .codec import (DEFAULT_CODEC, ProtobufTxCodec, PublicKey, Tx, TxCodec,
                    TxFee, TxMessage, TxSignature, decode_tx, decode_tx_b64,
                    encode_tx, encode_tx_b64, tx_hash, tx_hash_b64)

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
