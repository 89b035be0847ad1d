import asyncio
import time

import pytest

from tm2_sdk.errors import (MalformedTransactionError, RequestTimeoutError,
                            TransactionTimeoutError, TransportError)
from tm2_sdk.provider.wait import ConfirmationWindow, wait_for_transaction
from tm2_sdk.tx.codec import Tx, encode_tx, tx_hash_b64
from tm2_sdk.utils.bytes import to_base64


def _block(*txs: bytes) -> dict:
    return {"block_meta": {}, "block": {"data": {"txs": [to_base64(t) for t in txs] or None}}}


class FakeChain:
    """
    In-memory node: `heights` is the sequence of values returned by successive
    get_block_number() calls (the last one repeats), `blocks` maps height to
    block info.
    """

    def __init__(self, heights, blocks=None, fail_at=None) -> None:
        self.heights = list(heights)
        self.blocks = dict(blocks or {})
        self.fail_at = fail_at
        self.calls = []

    async def get_block_number(self) -> int:
        self.calls.append(("height",))
        if len(self.heights) > 1:
            return self.heights.pop(0)
        return self.heights[0]

    async def get_block(self, height: int) -> dict:
        self.calls.append(("block", height))
        if self.fail_at is not None and height == self.fail_at:
            raise TransportError(message="network error", url="http://node")
        return self.blocks.get(height, _block())

    def fetched(self):
        return [c[1] for c in self.calls if c[0] == "block"]


TX = Tx(memo="tx memo")
RAW = encode_tx(TX)


@pytest.mark.asyncio
async def test_finds_tx_in_later_block():
    chain = FakeChain([5], {3: _block(), 4: _block(b"other"), 5: _block(RAW)})
    tx = await wait_for_transaction(chain, tx_hash_b64(RAW), 3, 2.0, interval=0.01)
    assert tx == TX
    assert chain.fetched() == [3, 4, 5]


@pytest.mark.asyncio
async def test_start_height_defaults_to_current_height():
    chain = FakeChain([7], {7: _block(RAW)})
    tx = await wait_for_transaction(chain, tx_hash_b64(RAW), interval=0.01)
    assert tx.memo == "tx memo"
    assert chain.calls[0] == ("height",)


@pytest.mark.asyncio
async def test_times_out_when_tx_never_appears():
    chain = FakeChain([1, 2, 3])
    with pytest.raises(TransactionTimeoutError) as ei:
        await wait_for_transaction(chain, tx_hash_b64(RAW), 1, 0.1, interval=0.01)
    assert isinstance(ei.value, TimeoutError)
    assert str(ei.value) == "transaction fetch timeout"


@pytest.mark.asyncio
async def test_cursor_never_moves_backwards():
    # Node reports 6, then lags to 4, then advances to 8
    chain = FakeChain([6, 4, 8], {8: _block(RAW)})
    await wait_for_transaction(chain, tx_hash_b64(RAW), 5, 2.0, interval=0.01)
    fetched = chain.fetched()
    assert fetched == [5, 6, 7, 8]
    assert fetched == sorted(set(fetched))


@pytest.mark.asyncio
async def test_transport_error_aborts_wait():
    chain = FakeChain([4], fail_at=4)
    with pytest.raises(TransportError):
        await wait_for_transaction(chain, tx_hash_b64(RAW), 3, 2.0, interval=0.01)


@pytest.mark.asyncio
async def test_request_timeout_is_not_reported_as_tx_timeout():
    class SlowNode(FakeChain):
        async def get_block(self, height: int) -> dict:
            raise RequestTimeoutError(message="request timed out", url="ws://node")

    with pytest.raises(RequestTimeoutError):
        await wait_for_transaction(SlowNode([2]), tx_hash_b64(RAW), 2, 2.0, interval=0.01)


@pytest.mark.asyncio
async def test_matching_bytes_that_do_not_decode():
    garbage = b"\x22\x09short"
    chain = FakeChain([2], {2: _block(garbage)})
    with pytest.raises(MalformedTransactionError):
        await wait_for_transaction(chain, tx_hash_b64(garbage), 2, 2.0, interval=0.01)


@pytest.mark.asyncio
async def test_scan_is_cancelled_after_timeout():
    chain = FakeChain([1])
    with pytest.raises(TransactionTimeoutError):
        await wait_for_transaction(chain, tx_hash_b64(RAW), 1, 0.05, interval=0.01)
    calls = len(chain.calls)
    await asyncio.sleep(0.05)
    assert len(chain.calls) == calls


def test_confirmation_window_only_advances():
    window = ConfirmationWindow(target_hash=b"\x00" * 32, current_height=10)
    window.advance(12)
    assert window.current_height == 13
    window.advance(4)
    assert window.current_height == 13


@pytest.mark.asyncio
async def test_undecodable_entry_in_earlier_block_is_skipped():
    chain = FakeChain([4], {3: {"block": {"data": {"txs": ["!!not-base64!!"]}}}, 4: _block(RAW)})
    tx = await wait_for_transaction(chain, tx_hash_b64(RAW), 3, 2.0, interval=0.01)
    assert tx == TX
    assert chain.fetched() == [3, 4]


@pytest.mark.asyncio
async def test_no_polling_after_match():
    chain = FakeChain([5], {5: _block(RAW)})
    await wait_for_transaction(chain, tx_hash_b64(RAW), 5, 2.0, interval=0.01)
    calls = len(chain.calls)
    await asyncio.sleep(0.05)
    assert len(chain.calls) == calls


@pytest.mark.asyncio
async def test_timeout_does_not_fire_early():
    chain = FakeChain([1])
    t0 = time.monotonic()
    with pytest.raises(TransactionTimeoutError):
        await wait_for_transaction(chain, tx_hash_b64(RAW), 1, 0.2, interval=0.01)
    assert time.monotonic() - t0 >= 0.2 - time.get_clock_info("monotonic").resolution
