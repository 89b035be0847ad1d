"""
tm2_sdk.provider.base
=====================

The Provider interface and its single JSON-RPC implementation.

`RpcProvider` talks to a node through any transport exposing

    async send(request: RPCRequest) -> RPCResponse
    async aclose() -> None

so the HTTP and WebSocket providers (see .http / .ws) only differ in the
transport they construct. Every method is a coroutine and issues one or more
JSON-RPC calls; envelope errors surface as RpcError, transport failures as
TransportError, and broadcast/simulation failures reported by the chain as
TM2Error subclasses.

    async with HttpProvider("http://127.0.0.1:26657") as p:
        height = await p.get_block_number()
        balance = await p.get_balance("g1...", "ugnot")
"""

from __future__ import annotations

import logging
from typing import (Any, List, Optional, Protocol, Union,
                    runtime_checkable)

from ..errors import NotSupportedError, RpcError, construct_request_error
from ..rpc.envelope import RPCRequest, RPCResponse, new_request, parse_response
from ..tx.codec import DEFAULT_CODEC, TxCodec
from ..utils.bytes import to_base64
from . import extract
from .endpoints import (BROADCAST_MODES, ABCIEndpoint, BlockEndpoint, CommonEndpoint,
                        ConsensusEndpoint, TransactionEndpoint)
from .types import (ABCI_ERROR_KEY, CONSENSUS_STATE_KEY, ABCIAccount,
                    ABCIResponseBase, BlockInfo, BlockResult,
                    BroadcastTxCommitResult, BroadcastTxSyncResult,
                    ConsensusParams, ConsensusState, NetworkInfo, Status)
from .wait import DEFAULT_INTERVAL, DEFAULT_TIMEOUT, wait_for_transaction

log = logging.getLogger(__name__)

DEFAULT_DENOMINATION = "ugnot"
HEIGHT_SOURCES = ("status", "consensus_state")


class Transport(Protocol):
    async def send(self, request: RPCRequest) -> RPCResponse: ...
    async def aclose(self) -> None: ...


@runtime_checkable
class Provider(Protocol):
    """Read and broadcast access to a Tendermint2 node."""

    async def get_balance(self, address: str, denomination: Optional[str] = None, height: int = 0) -> int: ...
    async def get_account_sequence(self, address: str, height: int = 0) -> int: ...
    async def get_account_number(self, address: str, height: int = 0) -> int: ...
    async def get_account(self, address: str, height: int = 0) -> ABCIAccount: ...
    async def get_block(self, height: int) -> BlockInfo: ...
    async def get_block_result(self, height: int) -> BlockResult: ...
    async def get_block_number(self) -> int: ...
    async def get_consensus_params(self, height: int) -> ConsensusParams: ...
    async def get_consensus_state(self) -> ConsensusState: ...
    async def get_network(self) -> NetworkInfo: ...
    async def get_status(self) -> Status: ...
    async def get_gas_price(self) -> int: ...
    async def estimate_gas(self, tx: Any) -> int: ...
    async def send_transaction(
        self, encoded_tx: str, endpoint: Union[str, TransactionEndpoint] = TransactionEndpoint.BROADCAST_TX_SYNC
    ) -> Union[BroadcastTxSyncResult, BroadcastTxCommitResult]: ...
    async def wait_for_transaction(
        self, tx_hash: str, from_height: Optional[int] = None, timeout: Optional[float] = None
    ) -> Any: ...
    async def aclose(self) -> None: ...


def _error_type(error: Any) -> Optional[str]:
    if not error:
        return None
    if isinstance(error, dict):
        return error.get(ABCI_ERROR_KEY)
    return str(error)


def _response_base(entry: Any) -> ABCIResponseBase:
    if not isinstance(entry, dict):
        return {}
    return entry.get("ResponseBase") or {}


class RpcProvider:
    """Provider implemented once over a JSON-RPC transport."""

    def __init__(
        self,
        transport: Transport,
        *,
        codec: TxCodec = DEFAULT_CODEC,
        height_source: str = "status",
        poll_interval: float = DEFAULT_INTERVAL,
        tx_timeout: float = DEFAULT_TIMEOUT,
        denomination: str = DEFAULT_DENOMINATION,
    ) -> None:
        if height_source not in HEIGHT_SOURCES:
            raise ValueError(f"height_source must be one of {HEIGHT_SOURCES}, got {height_source!r}")
        self.transport = transport
        self.codec = codec
        self.height_source = height_source
        self.poll_interval = poll_interval
        self.tx_timeout = tx_timeout
        self.denomination = denomination

    async def __aenter__(self) -> "RpcProvider":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.aclose()

    async def aclose(self) -> None:
        await self.transport.aclose()

    # ------------- plumbing ---------------------

    async def _call(self, method: Union[str, Any], params: Optional[List[Any]] = None) -> Any:
        name = getattr(method, "value", method)
        response = await self.transport.send(new_request(name, params))
        return parse_response(response, method=name)

    async def _abci_query(self, path: str, data: str = "", height: int = 0) -> ABCIResponseBase:
        result = await self._call(ABCIEndpoint.ABCI_QUERY, [path, data, str(height), False])
        response = result.get("response") if isinstance(result, dict) else None
        return _response_base(response)

    # ------------- accounts ---------------------

    async def get_balance(self, address: str, denomination: Optional[str] = None, height: int = 0) -> int:
        base = await self._abci_query(f"bank/balances/{address}", "", height)
        return extract.extract_balance(base.get("Data"), denomination or self.denomination)

    async def get_account_sequence(self, address: str, height: int = 0) -> int:
        base = await self._abci_query(f"auth/accounts/{address}", "", height)
        return extract.extract_sequence(base.get("Data"))

    async def get_account_number(self, address: str, height: int = 0) -> int:
        base = await self._abci_query(f"auth/accounts/{address}", "", height)
        return extract.extract_account_number(base.get("Data"))

    async def get_account(self, address: str, height: int = 0) -> ABCIAccount:
        base = await self._abci_query(f"auth/accounts/{address}", "", height)
        return extract.extract_account(base.get("Data"))

    # ------------- blocks & node ----------------

    async def get_block(self, height: int) -> BlockInfo:
        return await self._call(BlockEndpoint.BLOCK, [str(height)])

    async def get_block_result(self, height: int) -> BlockResult:
        return await self._call(BlockEndpoint.BLOCK_RESULTS, [str(height)])

    async def get_block_number(self) -> int:
        """Latest committed height, read from `status` or `consensus_state`."""
        if self.height_source == "consensus_state":
            state = await self.get_consensus_state()
            try:
                step = state["round_state"][CONSENSUS_STATE_KEY]
                return int(str(step).split("/")[0])
            except (KeyError, TypeError, ValueError) as e:
                raise RpcError(
                    message="invalid response returned",
                    method=ConsensusEndpoint.CONSENSUS_STATE.value,
                    data=str(e),
                ) from e
        status = await self.get_status()
        return int(status["sync_info"]["latest_block_height"])

    async def get_consensus_params(self, height: int) -> ConsensusParams:
        return await self._call(ConsensusEndpoint.CONSENSUS_PARAMS, [str(height)])

    async def get_consensus_state(self) -> ConsensusState:
        return await self._call(ConsensusEndpoint.CONSENSUS_STATE, [])

    async def get_network(self) -> NetworkInfo:
        return await self._call(ConsensusEndpoint.NET_INFO, [])

    async def get_status(self) -> Status:
        return await self._call(CommonEndpoint.STATUS, [])

    async def get_gas_price(self) -> int:
        # Tendermint2 nodes expose no gas price endpoint
        raise NotSupportedError()

    # ------------- transactions -----------------

    async def estimate_gas(self, tx: Any) -> int:
        """Simulate `tx` (a Tx or its encoded bytes) and return the gas it used."""
        raw = tx if isinstance(tx, (bytes, bytearray)) else self.codec.encode(tx)
        base = await self._abci_query(".app/simulate", to_base64(raw), 0)

        query_error = _error_type(base.get("Error"))
        if query_error:
            raise construct_request_error(query_error, base.get("Log"))

        result = extract.extract_simulate_result(base.get("Data"))
        sim_error = _error_type(result.error)
        if sim_error:
            raise construct_request_error(sim_error, result.log)
        return result.gas_used

    async def send_transaction(
        self,
        encoded_tx: str,
        endpoint: Union[str, TransactionEndpoint] = TransactionEndpoint.BROADCAST_TX_SYNC,
    ) -> Union[BroadcastTxSyncResult, BroadcastTxCommitResult]:
        """
        Broadcast a base64-encoded transaction.

        broadcast_tx_sync returns once the tx passed CheckTx; broadcast_tx_commit
        waits for it to be committed. Errors reported by the chain in either
        phase are raised as the matching TM2Error subclass, carrying the node's
        log in `.log`.
        """
        mode = next((m for m in BROADCAST_MODES if m.value == getattr(endpoint, "value", endpoint)), None)
        if mode is None:
            raise ValueError(f"unsupported broadcast endpoint: {endpoint!r}")

        if mode is TransactionEndpoint.BROADCAST_TX_SYNC:
            sync: BroadcastTxSyncResult = await self._call(mode, [encoded_tx])
            error_type = _error_type(sync.get("error"))
            if error_type:
                raise construct_request_error(error_type, sync.get("Log"))
            log.debug("broadcast (sync) accepted hash=%s", sync.get("hash"))
            return sync

        commit: BroadcastTxCommitResult = await self._call(mode, [encoded_tx])
        for phase in ("check_tx", "deliver_tx"):
            base = _response_base(commit.get(phase))
            error_type = _error_type(base.get("Error"))
            if error_type:
                raise construct_request_error(error_type, base.get("Log"))
        log.debug("broadcast (commit) included hash=%s height=%s", commit.get("hash"), commit.get("height"))
        return commit

    async def wait_for_transaction(
        self,
        tx_hash: Union[str, bytes],
        from_height: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        return await wait_for_transaction(
            self,
            tx_hash,
            from_height,
            timeout or self.tx_timeout,
            interval=self.poll_interval,
            codec=self.codec,
        )


__all__ = [
    "DEFAULT_DENOMINATION",
    "HEIGHT_SOURCES",
    "Transport",
    "Provider",
    "RpcProvider",
]
