import json

import httpx
import pytest
import respx

from tm2_sdk.errors import (AccountNotInitializedError, NotSupportedError,
                            OutOfGasError, RequestTimeoutError, RpcError,
                            TransactionTimeoutError, TransportError,
                            UnauthorizedError)
from tm2_sdk.provider import (BROADCAST_MODES, HttpProvider, Provider,
                              TransactionEndpoint)
from tm2_sdk.tx.codec import Tx, encode_tx, encode_tx_b64, tx_hash_b64
from tm2_sdk.utils.bytes import string_to_base64, to_base64

RPC_URL = "http://localhost:26657"


class FakeNode:
    """
    Answers JSON-RPC POSTs from a table of results keyed by method name.

    A value may be a callable taking the params list. Every request is kept in
    `requests` for assertions.
    """

    def __init__(self, results) -> None:
        self.results = results
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        result = self.results[body["method"]]
        if callable(result):
            result = result(body["params"])
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    def methods(self):
        return [r["method"] for r in self.requests]


def _abci(data) -> dict:
    return {"response": {"ResponseBase": {"Error": None, "Data": data, "Events": None, "Log": "", "Info": ""}}}


def _status(height: int) -> dict:
    return {"node_info": {}, "sync_info": {"latest_block_height": str(height)}, "validator_info": {}}


def test_http_provider_satisfies_protocol():
    assert isinstance(HttpProvider(RPC_URL), Provider)


@pytest.mark.asyncio
@respx.mock
async def test_get_balance_queries_bank_path():
    node = FakeNode({"abci_query": _abci(string_to_base64('"5gnot,100ugnot"'))})
    respx.post(RPC_URL).mock(side_effect=node)

    async with HttpProvider(RPC_URL) as provider:
        assert await provider.get_balance("g1abc") == 100
        assert await provider.get_balance("g1abc", "gnot", 3) == 5

    assert node.requests[0]["params"] == ["bank/balances/g1abc", "", "0", False]
    assert node.requests[1]["params"] == ["bank/balances/g1abc", "", "3", False]


@pytest.mark.asyncio
@respx.mock
async def test_account_queries():
    account = {"BaseAccount": {"address": "g1abc", "account_number": "7", "sequence": "10"}}
    node = FakeNode({"abci_query": _abci(string_to_base64(json.dumps(account)))})
    respx.post(RPC_URL).mock(side_effect=node)

    async with HttpProvider(RPC_URL) as provider:
        assert await provider.get_account_sequence("g1abc") == 10
        assert await provider.get_account_number("g1abc") == 7
        assert (await provider.get_account("g1abc"))["BaseAccount"]["address"] == "g1abc"

    assert all(r["params"][0] == "auth/accounts/g1abc" for r in node.requests)


@pytest.mark.asyncio
@respx.mock
async def test_missing_account():
    node = FakeNode({"abci_query": _abci(None)})
    respx.post(RPC_URL).mock(side_effect=node)

    async with HttpProvider(RPC_URL) as provider:
        assert await provider.get_account_sequence("g1new") == 0
        with pytest.raises(AccountNotInitializedError):
            await provider.get_account_number("g1new")


@pytest.mark.asyncio
@respx.mock
async def test_block_and_node_queries():
    node = FakeNode(
        {
            "block": lambda params: {"block_meta": {}, "block": {"header": {"height": params[0]}}},
            "block_results": lambda params: {"height": params[0], "results": {}},
            "consensus_params": lambda params: {"block_height": params[0], "consensus_params": {}},
            "consensus_state": {"round_state": {"height/round/step": "12/0/1"}},
            "net_info": {"listening": True, "listeners": [], "n_peers": "0", "peers": []},
            "status": _status(12),
        }
    )
    respx.post(RPC_URL).mock(side_effect=node)

    async with HttpProvider(RPC_URL) as provider:
        assert (await provider.get_block(3))["block"]["header"]["height"] == "3"
        assert (await provider.get_block_result(4))["height"] == "4"
        assert (await provider.get_consensus_params(5))["block_height"] == "5"
        assert (await provider.get_network())["listening"] is True
        assert (await provider.get_status())["sync_info"]["latest_block_height"] == "12"
        assert await provider.get_block_number() == 12

    assert node.methods() == ["block", "block_results", "consensus_params", "net_info", "status", "status"]


@pytest.mark.asyncio
@respx.mock
async def test_block_number_from_incomplete_consensus_state():
    node = FakeNode({"consensus_state": {"round_state": {}}})
    respx.post(RPC_URL).mock(side_effect=node)

    async with HttpProvider(RPC_URL, height_source="consensus_state") as provider:
        with pytest.raises(RpcError) as ei:
            await provider.get_block_number()
    assert ei.value.message == "invalid response returned"
    assert ei.value.method == "consensus_state"


@pytest.mark.asyncio
@respx.mock
async def test_block_number_from_consensus_state():
    node = FakeNode({"consensus_state": {"round_state": {"height/round/step": "42/0/3"}}})
    respx.post(RPC_URL).mock(side_effect=node)

    async with HttpProvider(RPC_URL, height_source="consensus_state") as provider:
        assert await provider.get_block_number() == 42
    assert node.requests[0]["params"] == []


@pytest.mark.asyncio
async def test_gas_price_is_not_supported():
    async with HttpProvider(RPC_URL) as provider:
        with pytest.raises(NotSupportedError):
            await provider.get_gas_price()


@pytest.mark.asyncio
@respx.mock
async def test_estimate_gas():
    simulated = {"ResponseBase": {"Error": None, "Log": ""}, "GasWanted": "100000", "GasUsed": "42340"}
    node = FakeNode({"abci_query": _abci(string_to_base64(json.dumps(simulated)))})
    respx.post(RPC_URL).mock(side_effect=node)

    tx = Tx(memo="tx memo")
    async with HttpProvider(RPC_URL) as provider:
        assert await provider.estimate_gas(tx) == 42340

    assert node.requests[0]["params"] == [".app/simulate", encode_tx_b64(tx), "0", False]


@pytest.mark.asyncio
@respx.mock
async def test_estimate_gas_raises_simulation_error():
    simulated = {"ResponseBase": {"Error": {"@type": "/std.OutOfGasError"}, "Log": "out of gas"}, "GasUsed": "0"}
    node = FakeNode({"abci_query": _abci(string_to_base64(json.dumps(simulated)))})
    respx.post(RPC_URL).mock(side_effect=node)

    async with HttpProvider(RPC_URL) as provider:
        with pytest.raises(OutOfGasError) as ei:
            await provider.estimate_gas(Tx(memo="m"))
    assert ei.value.log == "out of gas"


@pytest.mark.asyncio
@respx.mock
async def test_send_transaction_sync():
    node = FakeNode({"broadcast_tx_sync": {"error": None, "data": None, "Log": "", "hash": "aGFzaA=="}})
    respx.post(RPC_URL).mock(side_effect=node)

    async with HttpProvider(RPC_URL) as provider:
        result = await provider.send_transaction("dHg=")

    assert result["hash"] == "aGFzaA=="
    assert node.requests[0]["method"] == "broadcast_tx_sync"
    assert node.requests[0]["params"] == ["dHg="]


@pytest.mark.asyncio
@respx.mock
async def test_send_transaction_sync_error_is_classified():
    node = FakeNode(
        {
            "broadcast_tx_sync": {
                "error": {"@type": "/std.UnauthorizedError"},
                "data": None,
                "Log": "random error message",
                "hash": "",
            }
        }
    )
    respx.post(RPC_URL).mock(side_effect=node)

    async with HttpProvider(RPC_URL) as provider:
        with pytest.raises(UnauthorizedError) as ei:
            await provider.send_transaction("dHg=")

    assert str(ei.value) == "signature is unauthorized"
    assert ei.value.log == "random error message"


@pytest.mark.asyncio
@respx.mock
async def test_send_transaction_commit():
    ok = {"ResponseBase": {"Error": None, "Log": ""}, "GasWanted": "1", "GasUsed": "1"}
    node = FakeNode({"broadcast_tx_commit": {"check_tx": ok, "deliver_tx": ok, "hash": "aGFzaA==", "height": "9"}})
    respx.post(RPC_URL).mock(side_effect=node)

    async with HttpProvider(RPC_URL) as provider:
        result = await provider.send_transaction("dHg=", TransactionEndpoint.BROADCAST_TX_COMMIT)
    assert result["height"] == "9"
    assert node.requests[0]["method"] == "broadcast_tx_commit"


@pytest.mark.asyncio
@respx.mock
async def test_send_transaction_commit_deliver_error():
    ok = {"ResponseBase": {"Error": None, "Log": ""}}
    failed = {"ResponseBase": {"Error": {"@type": "/std.OutOfGasError"}, "Log": "ran out"}}
    node = FakeNode({"broadcast_tx_commit": {"check_tx": ok, "deliver_tx": failed, "hash": "", "height": "0"}})
    respx.post(RPC_URL).mock(side_effect=node)

    async with HttpProvider(RPC_URL) as provider:
        with pytest.raises(OutOfGasError) as ei:
            await provider.send_transaction("dHg=", "broadcast_tx_commit")
    assert ei.value.log == "ran out"


def test_broadcast_modes():
    assert [m.value for m in BROADCAST_MODES] == ["broadcast_tx_sync", "broadcast_tx_commit"]


@pytest.mark.asyncio
@pytest.mark.parametrize("endpoint", ["broadcast_tx_async", "status", "nope"])
async def test_send_transaction_rejects_other_endpoints(endpoint):
    async with HttpProvider(RPC_URL) as provider:
        with pytest.raises(ValueError):
            await provider.send_transaction("dHg=", endpoint)


@pytest.mark.asyncio
@respx.mock
async def test_wait_for_transaction_scans_blocks():
    raw = encode_tx(Tx(memo="tx memo"))

    def block(params):
        txs = [to_base64(raw)] if params[0] == "5" else None
        return {"block_meta": {}, "block": {"data": {"txs": txs}}}

    node = FakeNode({"status": _status(5), "block": block})
    respx.post(RPC_URL).mock(side_effect=node)

    async with HttpProvider(RPC_URL, poll_interval=0.01) as provider:
        tx = await provider.wait_for_transaction(tx_hash_b64(raw), 3, 2.0)

    assert tx.memo == "tx memo"
    blocks = [r["params"][0] for r in node.requests if r["method"] == "block"]
    assert blocks == ["3", "4", "5"]


@pytest.mark.asyncio
@respx.mock
async def test_wait_for_transaction_timeout():
    node = FakeNode({"status": _status(5), "block": {"block_meta": {}, "block": {"data": {"txs": None}}}})
    respx.post(RPC_URL).mock(side_effect=node)

    async with HttpProvider(RPC_URL, poll_interval=0.01) as provider:
        with pytest.raises(TransactionTimeoutError):
            await provider.wait_for_transaction(tx_hash_b64(b"missing"), 5, 0.1)


@pytest.mark.asyncio
@respx.mock
async def test_rpc_error_envelope():
    respx.post(RPC_URL).mock(
        return_value=httpx.Response(
            200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32603, "message": "Internal error", "data": "height must be less"}}
        )
    )
    async with HttpProvider(RPC_URL) as provider:
        with pytest.raises(RpcError) as ei:
            await provider.get_block(10_000)
    assert ei.value.method == "block"
    assert ei.value.data == "height must be less"


@pytest.mark.asyncio
@respx.mock
async def test_http_status_and_network_failures():
    route = respx.post(RPC_URL)
    async with HttpProvider(RPC_URL) as provider:
        route.mock(return_value=httpx.Response(502, text="bad gateway"))
        with pytest.raises(TransportError) as ei:
            await provider.get_status()
        assert ei.value.message == "HTTP 502"

        route.mock(return_value=httpx.Response(200, text="not json"))
        with pytest.raises(TransportError):
            await provider.get_status()

        route.mock(side_effect=httpx.ConnectError("refused"))
        with pytest.raises(TransportError) as ei:
            await provider.get_status()
        assert ei.value.message == "network error"

        route.mock(side_effect=httpx.ReadTimeout("slow"))
        with pytest.raises(RequestTimeoutError):
            await provider.get_status()
