from __future__ import annotations

"""
HTTP JSON-RPC transport (async).

- One POST per call to a single base URL, body = JSON-RPC envelope.
- Returns the decoded response envelope as-is; inspecting `error` vs `result`
  is left to the provider (see rpc.envelope.parse_response).
- Never retries. Network failures, timeouts and non-2xx statuses raise
  TransportError; retry policy belongs to the caller.

Example:
    from tm2_sdk.rpc.http import HttpTransport
    from tm2_sdk.rpc.envelope import new_request

    async with HttpTransport("http://127.0.0.1:26657") as t:
        resp = await t.post(new_request("status"))
        print(resp["result"]["sync_info"]["latest_block_height"])
"""

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from ..errors import RequestTimeoutError, TransportError
from ..version import user_agent
from .envelope import RPCRequest, RPCResponse, encode

log = logging.getLogger(__name__)


class HttpTransport:
    """Request/response JSON-RPC 2.0 transport over HTTP."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 15.0,
        headers: Optional[Mapping[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        merged_headers: Dict[str, str] = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": user_agent(),
        }
        if headers:
            merged_headers.update(dict(headers))
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, headers=merged_headers)

    # --- context manager -------------------------------------------------

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()

    # --- public API ------------------------------------------------------

    async def post(self, request: RPCRequest) -> RPCResponse:
        """Perform one round trip and return the response envelope."""
        body = encode(dict(request))
        log.debug("POST %s method=%s id=%s", self.url, request.get("method"), request.get("id"))
        try:
            r = await self._client.post(self.url, content=body)
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(message="request timed out", url=self.url, data=str(e)) from e
        except httpx.HTTPError as e:
            raise TransportError(message="network error", url=self.url, data=str(e)) from e

        if not r.is_success:
            # Keep the body visible; nodes often explain the failure there
            raise TransportError(
                message=f"HTTP {r.status_code}",
                url=self.url,
                data=r.text[:256],
            )
        try:
            resp: Any = r.json()
        except ValueError as e:
            raise TransportError(
                message="non-JSON response from RPC",
                url=self.url,
                data=f"HTTP {r.status_code}: {r.text[:256]}",
            ) from e

        if not isinstance(resp, dict):
            raise TransportError(message="invalid JSON-RPC response type", url=self.url, data=type(resp).__name__)
        return resp  # type: ignore[return-value]

    # Both transports expose `send`; providers only depend on this name.
    send = post


__all__ = ["HttpTransport"]
