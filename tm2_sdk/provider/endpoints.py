"""JSON-RPC method names served by a Tendermint2 node."""

from __future__ import annotations

from enum import Enum


class CommonEndpoint(str, Enum):
    HEALTH = "health"
    STATUS = "status"


class ConsensusEndpoint(str, Enum):
    NET_INFO = "net_info"
    GENESIS = "genesis"
    CONSENSUS_PARAMS = "consensus_params"
    CONSENSUS_STATE = "consensus_state"
    COMMIT = "commit"
    VALIDATORS = "validators"


class BlockEndpoint(str, Enum):
    BLOCK = "block"
    BLOCK_RESULTS = "block_results"
    BLOCKCHAIN = "blockchain"


class TransactionEndpoint(str, Enum):
    NUM_UNCONFIRMED_TXS = "num_unconfirmed_txs"
    UNCONFIRMED_TXS = "unconfirmed_txs"
    BROADCAST_TX_ASYNC = "broadcast_tx_async"
    BROADCAST_TX_SYNC = "broadcast_tx_sync"
    BROADCAST_TX_COMMIT = "broadcast_tx_commit"


class ABCIEndpoint(str, Enum):
    ABCI_INFO = "abci_info"
    ABCI_QUERY = "abci_query"


# Broadcast modes accepted by Provider.send_transaction
BROADCAST_MODES = (TransactionEndpoint.BROADCAST_TX_SYNC, TransactionEndpoint.BROADCAST_TX_COMMIT)

__all__ = [
    "CommonEndpoint",
    "ConsensusEndpoint",
    "BlockEndpoint",
    "TransactionEndpoint",
    "ABCIEndpoint",
    "BROADCAST_MODES",
]
