from __future__ import annotations

"""
JSON shapes returned by a Tendermint2 node.

These are `TypedDict`s mirroring the JSON-RPC payloads; providers hand the
decoded dicts back untouched, so the shapes double as documentation. Decimal
numbers arrive as strings (e.g. "latest_block_height": "42").
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, TypedDict

# Key of the error type URL inside error objects, e.g. {"@type": "/std.OutOfGasError"}
ABCI_ERROR_KEY = "@type"

# Key inside consensus_state.round_state holding "<height>/<round>/<step>"
CONSENSUS_STATE_KEY = "height/round/step"


# --- Status / network --------------------------------------------------------


class SyncInfo(TypedDict, total=False):
    latest_block_hash: str
    latest_app_hash: str
    latest_block_height: str  # decimal
    latest_block_time: str  # ISO 8601
    catching_up: bool


class Status(TypedDict, total=False):
    node_info: Dict[str, Any]
    sync_info: SyncInfo
    validator_info: Dict[str, Any]


class NetworkInfo(TypedDict, total=False):
    listening: bool
    listeners: List[str]
    n_peers: str  # decimal
    peers: List[Any]


class ConsensusParams(TypedDict, total=False):
    block_height: str
    consensus_params: Dict[str, Any]


class ConsensusState(TypedDict, total=False):
    round_state: Dict[str, Any]


# --- Blocks ------------------------------------------------------------------


class BlockData(TypedDict, total=False):
    txs: Optional[List[str]]  # base64-encoded transactions


class Block(TypedDict, total=False):
    header: Dict[str, Any]
    data: BlockData
    last_commit: Dict[str, Any]


class BlockInfo(TypedDict, total=False):
    block_meta: Dict[str, Any]
    block: Block


class ABCIResponseBase(TypedDict, total=False):
    Error: Optional[Dict[str, str]]
    Data: Optional[str]  # base64
    Events: Any
    Log: str
    Info: str


class DeliverTx(TypedDict, total=False):
    ResponseBase: ABCIResponseBase
    GasWanted: str
    GasUsed: str


class BlockResult(TypedDict, total=False):
    height: str
    results: Dict[str, Any]


# --- ABCI queries ------------------------------------------------------------


class ABCIQueryResponse(TypedDict, total=False):
    ResponseBase: ABCIResponseBase
    Key: Optional[str]
    Value: Optional[str]
    Proof: Any
    Height: str


class ABCIResponse(TypedDict, total=False):
    response: ABCIQueryResponse


class BaseAccount(TypedDict, total=False):
    address: str
    coins: str
    public_key: Optional[Dict[str, str]]
    account_number: str  # decimal
    sequence: str  # decimal


class ABCIAccount(TypedDict):
    BaseAccount: BaseAccount


# --- Broadcast ---------------------------------------------------------------


class BroadcastTxSyncResult(TypedDict, total=False):
    error: Optional[Dict[str, str]]
    data: Optional[str]
    Log: str
    hash: str


class BroadcastTxCommitResult(TypedDict, total=False):
    check_tx: DeliverTx
    deliver_tx: DeliverTx
    hash: str
    height: str  # decimal


@dataclass(frozen=True)
class SimulateResult:
    """Outcome of a simulated transaction (`.app/simulate` query)."""

    gas_used: int
    gas_wanted: int = 0
    error: Optional[Any] = None
    log: str = ""


__all__ = [
    "ABCI_ERROR_KEY",
    "CONSENSUS_STATE_KEY",
    "SyncInfo",
    "Status",
    "NetworkInfo",
    "ConsensusParams",
    "ConsensusState",
    "BlockData",
    "Block",
    "BlockInfo",
    "ABCIResponseBase",
    "DeliverTx",
    "BlockResult",
    "ABCIQueryResponse",
    "ABCIResponse",
    "BaseAccount",
    "ABCIAccount",
    "BroadcastTxSyncResult",
    "BroadcastTxCommitResult",
    "SimulateResult",
]
