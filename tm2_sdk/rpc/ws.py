from __future__ import annotations

"""
WebSocket JSON-RPC transport (async) multiplexing many requests over one socket.

- Uses the `websockets` package.
- Correlates responses to requests by `id` through a per-instance table of
  PendingRequest entries; responses may arrive in any order.
- Each entry is removed exactly once: by its response, by its timeout, or by
  the connection going away. Late or unknown responses are dropped.
- A send on a socket that is not open yet waits for the handshake by polling
  the connection state a bounded number of times.

Example:
    import asyncio
    from tm2_sdk.rpc.envelope import new_request
    from tm2_sdk.rpc.ws import WsTransport

    async def main():
        async with WsTransport("ws://127.0.0.1:26657/websocket") as ws:
            resp = await ws.send(new_request("status"))
            print(resp["result"]["sync_info"]["latest_block_height"])

    asyncio.run(main())
"""

import asyncio
import contextlib
import logging
import random
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Union

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import (ConnectionClosed, ConnectionClosedError,
                                   WebSocketException)
from websockets.protocol import State

from ..errors import (ConnectionNotEstablishedError, RequestTimeoutError,
                      TransportError)
from ..version import user_agent
from .envelope import RequestId, RPCRequest, RPCResponse, decode, encode

log = logging.getLogger(__name__)


def _jitter_backoff(base: float, factor: float, attempt: int, jitter: float) -> float:
    return base * (factor ** max(attempt - 1, 0)) + random.random() * jitter


@dataclass
class PendingRequest:
    """One in-flight request: the caller's future plus its timeout timer."""

    id: RequestId
    future: asyncio.Future
    timer: asyncio.TimerHandle


class WsTransport:
    def __init__(
        self,
        url: str,
        *,
        request_timeout: float = 15.0,
        open_poll_interval: float = 0.2,
        open_max_attempts: int = 10,
        connect_timeout: float = 10.0,
        ping_interval: Optional[float] = 20.0,
        max_retries: int = 3,
        backoff_base: float = 0.25,
        backoff_factor: float = 1.8,
        backoff_jitter: float = 0.25,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.url = url
        self.request_timeout = request_timeout
        self.open_poll_interval = open_poll_interval
        self.open_max_attempts = open_max_attempts
        self.connect_timeout = connect_timeout
        self.ping_interval = ping_interval
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.backoff_factor = backoff_factor
        self.backoff_jitter = backoff_jitter
        self.headers = dict(headers) if headers else {}
        self.user_agent = self.headers.pop("User-Agent", None) or user_agent()

        self._ws: Optional[ClientConnection] = None
        self._reader_task: Optional[asyncio.Task] = None
        self._connect_task: Optional[asyncio.Task] = None
        self._pending: Dict[RequestId, PendingRequest] = {}
        self._closing = False
        self._last_connect_error: Optional[BaseException] = None

    # ------------- context manager -------------

    async def __aenter__(self) -> "WsTransport":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.aclose()

    # ------------- state -----------------------

    @property
    def is_open(self) -> bool:
        return self._ws is not None and self._ws.state is State.OPEN

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    # ------------- lifecycle -------------------

    async def connect(self) -> None:
        """Open the socket if needed and wait for the handshake to finish."""
        self._closing = False
        task = self._start_connecting()
        if task is not None:
            await asyncio.shield(task)

    async def wait_for_open(self) -> None:
        """
        Poll the connection state every `open_poll_interval` seconds, at most
        `open_max_attempts` times.
        """
        if self.is_open:
            return
        self._start_connecting()
        for _ in range(self.open_max_attempts):
            await asyncio.sleep(self.open_poll_interval)
            if self._closing:
                raise TransportError(message="connection closed", url=self.url)
            if self.is_open:
                return
        last = self._last_connect_error
        raise ConnectionNotEstablishedError(
            message="maximum number of attempts exceeded",
            url=self.url,
            data=str(last) if last is not None else None,
        )

    async def aclose(self) -> None:
        """Close the socket and reject every request still waiting for a response."""
        self._closing = True
        for task in (self._connect_task, self._reader_task):
            if task is not None and not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError, TransportError):
                    await task
        self._connect_task = None
        self._reader_task = None

        ws, self._ws = self._ws, None
        if ws is not None:
            await ws.close()
        self._fail_pending("connection closed")

    # ------------- RPC primitive ---------------

    async def send(self, request: RPCRequest) -> RPCResponse:
        """Send one request and await the response envelope carrying its id."""
        if self._closing:
            raise TransportError(message="transport is closed", url=self.url)
        if not self.is_open:
            await self.wait_for_open()

        ws = self._ws
        assert ws is not None
        req_id = request["id"]
        if req_id in self._pending:
            raise ValueError(f"request id {req_id!r} is already in flight")

        loop = asyncio.get_running_loop()
        fut: asyncio.Future = loop.create_future()
        timer = loop.call_later(self.request_timeout, self._expire, req_id)
        entry = PendingRequest(id=req_id, future=fut, timer=timer)
        self._pending[req_id] = entry

        try:
            await ws.send(encode(dict(request)))
        except (ConnectionClosed, OSError) as e:
            self._discard(entry)
            raise TransportError(message="WS send failed", url=self.url, data=str(e)) from e
        log.debug("ws sent method=%s id=%s", request.get("method"), req_id)

        try:
            return await fut
        finally:
            # No-op when the response or the timer already removed the entry
            self._discard(entry)

    # ------------- internals --------------------

    def _discard(self, entry: PendingRequest) -> None:
        if self._pending.get(entry.id) is entry:
            del self._pending[entry.id]
        entry.timer.cancel()

    def _expire(self, req_id: RequestId) -> None:
        entry = self._pending.pop(req_id, None)
        if entry is None:
            return
        if not entry.future.done():
            log.debug("ws request id=%s timed out after %.1fs", req_id, self.request_timeout)
            entry.future.set_exception(
                RequestTimeoutError(message="request timed out", url=self.url, data={"id": req_id})
            )

    def _dispatch(self, raw: Union[str, bytes]) -> None:
        try:
            data = decode(raw)
        except ValueError:
            log.debug("ignoring undecodable frame from %s", self.url)
            return

        if not isinstance(data, dict):
            log.debug("ignoring non-object frame from %s", self.url)
            return
        rid = data.get("id")
        if isinstance(rid, bool) or not isinstance(rid, (int, str)):
            log.debug("ignoring frame without usable id from %s", self.url)
            return

        entry = self._pending.pop(rid, None)
        if entry is None:
            # Stale (timed out), duplicate or unknown
            log.debug("discarding response for unknown id %r", rid)
            return
        entry.timer.cancel()
        if not entry.future.done():
            entry.future.set_result(data)

    def _fail_pending(self, message: str, data: Optional[str] = None) -> None:
        pending, self._pending = self._pending, {}
        for entry in pending.values():
            entry.timer.cancel()
            if not entry.future.done():
                entry.future.set_exception(TransportError(message=message, url=self.url, data=data))

    def _start_connecting(self) -> Optional[asyncio.Task]:
        if self.is_open:
            return None
        if self._connect_task is None or self._connect_task.done():
            self._connect_task = asyncio.create_task(self._connect_loop(), name="WsTransport.connect")
            self._connect_task.add_done_callback(self._on_connect_done)
        return self._connect_task

    def _on_connect_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.warning("giving up connecting to %s: %s", self.url, exc)

    async def _connect_loop(self) -> None:
        attempt = 0
        while True:
            attempt += 1
            try:
                ws = await connect(
                    self.url,
                    additional_headers=self.headers or None,
                    user_agent_header=self.user_agent,
                    open_timeout=self.connect_timeout,
                    ping_interval=self.ping_interval,
                )
            except (OSError, WebSocketException) as e:
                self._last_connect_error = e
                if self._closing or attempt > self.max_retries:
                    raise TransportError(message="WS connect failed", url=self.url, data=str(e)) from e
                delay = _jitter_backoff(self.backoff_base, self.backoff_factor, attempt, self.backoff_jitter)
                log.warning("connecting to %s failed (attempt %d): %s; retrying in %.2fs", self.url, attempt, e, delay)
                await asyncio.sleep(delay)
                continue

            if self._closing:
                await ws.close()
                return
            self._last_connect_error = None
            self._ws = ws
            self._reader_task = asyncio.create_task(self._reader_loop(ws), name="WsTransport.reader")
            log.debug("connected to %s", self.url)
            return

    async def _reader_loop(self, ws: ClientConnection) -> None:
        """Read frames until the socket goes away, resolving pending requests."""
        error: Optional[ConnectionClosedError] = None
        try:
            async for message in ws:
                self._dispatch(message)
        except ConnectionClosedError as e:
            error = e

        if self._ws is ws:
            self._ws = None
        if self._closing:
            return
        log.warning("connection to %s lost: %s", self.url, error or "closed by peer")
        self._fail_pending("connection lost", str(error) if error else None)
        self._start_connecting()


__all__ = ["WsTransport", "PendingRequest"]
