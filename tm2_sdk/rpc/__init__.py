"""
tm2_sdk.rpc
-----------

JSON-RPC plumbing shared by the providers.

This package exposes:
- envelope helpers (new_request / new_response / parse_response)
- HttpTransport: request/response JSON-RPC over HTTP (see .http)
- WsTransport:   multiplexed JSON-RPC over one WebSocket (see .ws)

Import style:

    from tm2_sdk.rpc import HttpTransport, WsTransport, new_request
    http = HttpTransport("http://127.0.0.1:26657")
    ws   = WsTransport("ws://127.0.0.1:26657/websocket")
"""

from __future__ import annotations

from .envelope import (RPCRequest, RPCResponse, new_request, new_response,
                       parse_response)
from .http import HttpTransport
from .ws import PendingRequest, WsTransport

__all__ = [
    "RPCRequest",
    "RPCResponse",
    "new_request",
    "new_response",
    "parse_response",
    "HttpTransport",
    "WsTransport",
    "PendingRequest",
]
