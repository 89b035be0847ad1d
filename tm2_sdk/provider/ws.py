"""
Provider over a single persistent WebSocket.

Requests are multiplexed on one connection and matched to responses by id
(see tm2_sdk.rpc.ws.WsTransport). The socket is opened lazily by the first
call, or eagerly with `connect()` / `async with`.

    async with WsProvider("ws://127.0.0.1:26657/websocket") as p:
        status = await p.get_status()
"""

from __future__ import annotations

from typing import Mapping, Optional

from ..rpc.ws import WsTransport
from ..tx.codec import DEFAULT_CODEC, TxCodec
from .base import DEFAULT_DENOMINATION, RpcProvider
from .wait import DEFAULT_INTERVAL, DEFAULT_TIMEOUT


class WsProvider(RpcProvider):
    transport: WsTransport

    def __init__(
        self,
        url: str,
        *,
        request_timeout: float = 15.0,
        open_poll_interval: float = 0.2,
        open_max_attempts: int = 10,
        connect_timeout: float = 10.0,
        headers: Optional[Mapping[str, str]] = None,
        codec: TxCodec = DEFAULT_CODEC,
        height_source: str = "status",
        poll_interval: float = DEFAULT_INTERVAL,
        tx_timeout: float = DEFAULT_TIMEOUT,
        denomination: str = DEFAULT_DENOMINATION,
    ) -> None:
        super().__init__(
            WsTransport(
                url,
                request_timeout=request_timeout,
                open_poll_interval=open_poll_interval,
                open_max_attempts=open_max_attempts,
                connect_timeout=connect_timeout,
                headers=headers,
            ),
            codec=codec,
            height_source=height_source,
            poll_interval=poll_interval,
            tx_timeout=tx_timeout,
            denomination=denomination,
        )
        self.url = url

    async def __aenter__(self) -> "WsProvider":
        await self.connect()
        return self

    async def connect(self) -> None:
        await self.transport.connect()

    @property
    def is_open(self) -> bool:
        return self.transport.is_open


__all__ = ["WsProvider"]
