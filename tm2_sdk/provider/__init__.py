"""
tm2_sdk.provider
----------------

Read and broadcast access to a Tendermint2 node.

- Provider:      the interface (typing.Protocol)
- RpcProvider:   implementation over any JSON-RPC transport
- HttpProvider:  RpcProvider bound to HttpTransport
- WsProvider:    RpcProvider bound to WsTransport
- wait_for_transaction: block-scanning confirmation helper

    from tm2_sdk.provider import HttpProvider

    async with HttpProvider("http://127.0.0.1:26657") as p:
        print(await p.get_block_number())
"""

from __future__ import annotations

from .base import DEFAULT_DENOMINATION, Provider, RpcProvider
from .endpoints import (BROADCAST_MODES, ABCIEndpoint, BlockEndpoint,
                        CommonEndpoint, ConsensusEndpoint,
                        TransactionEndpoint)
from .extract import (extract_account, extract_account_number,
                      extract_balance, extract_sequence,
                      extract_simulate_result)
from .http import HttpProvider
from .types import SimulateResult
from .wait import ConfirmationWindow, wait_for_transaction
from .ws import WsProvider

__all__ = [
    "Provider",
    "RpcProvider",
    "HttpProvider",
    "WsProvider",
    "DEFAULT_DENOMINATION",
    "CommonEndpoint",
    "ConsensusEndpoint",
    "BlockEndpoint",
    "TransactionEndpoint",
    "ABCIEndpoint",
    "BROADCAST_MODES",
    "extract_balance",
    "extract_sequence",
    "extract_account_number",
    "extract_account",
    "extract_simulate_result",
    "SimulateResult",
    "ConfirmationWindow",
    "wait_for_transaction",
]
