"""Provider over request/response JSON-RPC (HTTP POST)."""

from __future__ import annotations

from typing import Mapping, Optional

import httpx

from ..rpc.http import HttpTransport
from ..tx.codec import DEFAULT_CODEC, TxCodec
from .base import DEFAULT_DENOMINATION, RpcProvider
from .wait import DEFAULT_INTERVAL, DEFAULT_TIMEOUT


class HttpProvider(RpcProvider):
    """
    One HTTP POST per call against `url` (e.g. "http://127.0.0.1:26657").

    Pass `client` to share an httpx.AsyncClient; it is then left open by
    `aclose()`.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 15.0,
        headers: Optional[Mapping[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
        codec: TxCodec = DEFAULT_CODEC,
        height_source: str = "status",
        poll_interval: float = DEFAULT_INTERVAL,
        tx_timeout: float = DEFAULT_TIMEOUT,
        denomination: str = DEFAULT_DENOMINATION,
    ) -> None:
        super().__init__(
            HttpTransport(url, timeout=timeout, headers=headers, client=client),
            codec=codec,
            height_source=height_source,
            poll_interval=poll_interval,
            tx_timeout=tx_timeout,
            denomination=denomination,
        )
        self.url = url

    async def __aenter__(self) -> "HttpProvider":
        return self


__all__ = ["HttpProvider"]
