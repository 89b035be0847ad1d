"""
tm2_sdk.provider.wait
=====================

Wait for a broadcast transaction to land in a block.

Tendermint2 nodes do not index transactions by hash, so confirmation is a
scan: starting from a known height, every new block body is fetched and the
SHA-256 of each transaction is compared with the target hash.

Primary entry point
-------------------
- wait_for_transaction(provider, tx_hash, from_height=None, timeout=15.0) -> Tx

Typical sequence (the starting height must predate the broadcast):

    height = await provider.get_block_number()
    await provider.send_transaction(encoded_tx)
    tx = await wait_for_transaction(provider, tx_hash_b64(raw), height)

Only `get_block_number()` and `get_block(height)` are used, so any Provider
implementation (HTTP, WebSocket or a test double) works.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Union

from ..errors import MalformedTransactionError, TransactionTimeoutError
from ..tx.codec import DEFAULT_CODEC, TxCodec
from ..utils.bytes import from_base64, to_base64
from ..utils.hash import sha256

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0
DEFAULT_INTERVAL = 1.0


class _BlockSource(Protocol):
    """The slice of the Provider interface this module depends on."""

    async def get_block_number(self) -> int: ...
    async def get_block(self, height: int) -> Any: ...


@dataclass
class ConfirmationWindow:
    """Polling state of one wait: the cursor only ever moves forward."""

    target_hash: bytes
    current_height: int
    latest_height: Optional[int] = None

    def advance(self, scanned_through: int) -> None:
        if scanned_through + 1 > self.current_height:
            self.current_height = scanned_through + 1


def _normalize_hash(tx_hash: Union[str, bytes, bytearray]) -> bytes:
    if isinstance(tx_hash, (bytes, bytearray)):
        return bytes(tx_hash)
    return from_base64(tx_hash)


def _block_txs(block: Any) -> list:
    try:
        txs = block["block"]["data"]["txs"]
    except (KeyError, TypeError):
        return []
    return txs or []


async def _scan(
    provider: _BlockSource,
    window: ConfirmationWindow,
    interval: float,
    codec: TxCodec,
) -> Any:
    while True:
        await asyncio.sleep(interval)

        latest = await provider.get_block_number()
        window.latest_height = latest
        if latest < window.current_height:
            # No new blocks yet (or a lagging node); never scan backwards
            continue

        log.debug("scanning blocks %d..%d for tx %s", window.current_height, latest, to_base64(window.target_hash))
        for height in range(window.current_height, latest + 1):
            block = await provider.get_block(height)
            for encoded in _block_txs(block):
                try:
                    raw = from_base64(encoded)
                except (TypeError, ValueError):
                    log.debug("skipping undecodable tx entry at height %d", height)
                    continue
                if sha256(raw) != window.target_hash:
                    continue
                try:
                    return codec.decode(raw)
                except ValueError as e:
                    raise MalformedTransactionError(
                        f"transaction at height {height} matches the hash but cannot be decoded: {e}"
                    ) from e

        window.advance(latest)


async def wait_for_transaction(
    provider: _BlockSource,
    tx_hash: Union[str, bytes],
    from_height: Optional[int] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    *,
    interval: float = DEFAULT_INTERVAL,
    codec: Optional[TxCodec] = None,
) -> Any:
    """
    Poll the chain until a block contains the transaction with `tx_hash`.

    Args:
        provider: anything with `get_block_number()` and `get_block(height)`.
        tx_hash: base64 SHA-256 of the encoded tx (or the raw 32-byte digest).
        from_height: first block to inspect; defaults to the current height.
        timeout: overall deadline in seconds (default 15).
        interval: seconds between polling ticks (default 1).
        codec: decodes the matched transaction bytes (default: protobuf Tx).

    Returns:
        The decoded transaction.

    Raises:
        TransactionTimeoutError when the deadline passes first.
        MalformedTransactionError when the matching bytes do not decode.
        Any transport or RPC error raised by the provider while polling; such
        failures end the wait immediately.
    """
    target = _normalize_hash(tx_hash)
    start = from_height if from_height else await provider.get_block_number()
    window = ConfirmationWindow(target_hash=target, current_height=int(start))

    if not timeout:
        timeout = DEFAULT_TIMEOUT
    # The scan runs as its own task so that a provider-side timeout raised
    # inside it is never mistaken for this deadline.
    scan = asyncio.ensure_future(_scan(provider, window, interval, codec or DEFAULT_CODEC))
    try:
        done, _ = await asyncio.wait({scan}, timeout=timeout)
        if scan in done:
            return scan.result()
    finally:
        if not scan.done():
            scan.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await scan

    log.debug(
        "tx %s not found before deadline (scanned up to height %d)",
        to_base64(target),
        window.current_height - 1,
    )
    raise TransactionTimeoutError(tx_hash=to_base64(target))


__all__ = [
    "DEFAULT_TIMEOUT",
    "DEFAULT_INTERVAL",
    "ConfirmationWindow",
    "wait_for_transaction",
]
