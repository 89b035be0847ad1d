"""
JSON-RPC 2.0 envelopes shared by the HTTP and WebSocket transports.

Nothing here performs I/O. Request ids come from a process-wide counter seeded
with the wall clock (milliseconds), so two requests that are open at the same
time never share an id.
"""

from __future__ import annotations

import json
import time
from itertools import count
from typing import Any, Dict, Optional, Sequence, TypedDict, Union

from ..errors import RpcError, from_jsonrpc_error

JSON = Union[dict, list, str, int, float, bool, None]
RequestId = Union[int, str]

JSONRPC_VERSION = "2.0"


class RPCErrorObject(TypedDict, total=False):
    code: int
    message: str
    data: Any


class RPCRequest(TypedDict):
    jsonrpc: str
    id: RequestId
    method: str
    params: list


class RPCResponse(TypedDict, total=False):
    jsonrpc: str
    id: RequestId
    result: Any
    error: RPCErrorObject


def _now_ms() -> int:
    return int(time.time() * 1000)


_id_counter = count(start=_now_ms())


def next_id() -> int:
    return next(_id_counter)


def new_request(method: str, params: Optional[Sequence[Any]] = None, *, id: Optional[RequestId] = None) -> RPCRequest:
    """
    Build a request envelope.

    `params` may be omitted (sent as `[]`) or hold positional values; a lone
    scalar is wrapped into a one-element list.
    """
    if id is None:
        id = next_id()
    if params is None:
        params = []
    elif isinstance(params, (str, bytes, bytearray)) or not isinstance(params, Sequence):
        # Coerce single param into positional list
        params = [params]
    return {"jsonrpc": JSONRPC_VERSION, "id": id, "method": method, "params": list(params)}


def new_response(
    result: Any = None,
    error: Optional[RPCErrorObject] = None,
    *,
    id: Optional[RequestId] = None,
) -> RPCResponse:
    """Build a response envelope; absent `result`/`error` keys are omitted."""
    resp: RPCResponse = {"jsonrpc": JSONRPC_VERSION, "id": next_id() if id is None else id}
    if result is not None:
        resp["result"] = result
    if error is not None:
        resp["error"] = error
    return resp


def parse_response(response: Optional[Dict[str, Any]], *, method: Optional[str] = None) -> Any:
    """
    Return the `result` of a response envelope or raise RpcError.

    An `error` object wins over any `result` sent alongside it.
    """
    if not response:
        raise RpcError(message="invalid response", method=method)
    if not isinstance(response, dict):
        raise RpcError(message="invalid response", method=method, data=type(response).__name__)

    err = response.get("error")
    if err:
        raise from_jsonrpc_error(err, method=method, request_id=response.get("id"))

    result = response.get("result")
    if result is None:
        raise RpcError(message="invalid response returned", method=method, request_id=response.get("id"))
    return result


def encode(envelope: Dict[str, Any]) -> str:
    return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False)


def decode(text: Union[str, bytes]) -> JSON:
    return json.loads(text)


__all__ = [
    "JSON",
    "JSONRPC_VERSION",
    "RequestId",
    "RPCErrorObject",
    "RPCRequest",
    "RPCResponse",
    "next_id",
    "new_request",
    "new_response",
    "parse_response",
    "encode",
    "decode",
]
