"""
SDK configuration: node endpoints, timeouts and polling.

- Loads sane defaults and supports overrides via environment variables (TM2_*).
- Provides helpers for building HTTP headers, validating endpoints and
  constructing a provider from a config.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

from .version import user_agent as _default_user_agent

if TYPE_CHECKING:
    from .provider import HttpProvider, WsProvider

_DEFAULT_RPC = "http://127.0.0.1:26657"
_DEFAULT_WS = "ws://127.0.0.1:26657/websocket"


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if v is not None else default


def _ensure_scheme(url: Optional[str], allowed: tuple[str, ...]) -> Optional[str]:
    if not url:
        return url
    lower = url.lower()
    if not any(lower.startswith(f"{sch}://") for sch in allowed):
        raise ValueError(f"URL must start with {allowed}, got: {url!r}")
    return url


def _ensure_height_source(value: str) -> str:
    if value not in ("status", "consensus_state"):
        raise ValueError(f"height source must be 'status' or 'consensus_state', got: {value!r}")
    return value


@dataclass(slots=True)
class ProviderConfig:
    # Endpoints
    rpc_url: str = field(default_factory=lambda: _DEFAULT_RPC)
    ws_url: Optional[str] = field(default=None)
    # Per-request and confirmation timeouts (seconds)
    request_timeout: float = 15.0
    tx_timeout: float = 15.0
    poll_interval: float = 1.0
    # Waiting for the WS handshake before a send
    ws_open_attempts: int = 10
    ws_open_interval: float = 0.2
    # Chain
    denomination: str = "ugnot"
    height_source: str = "status"
    # Headers / identity
    user_agent: str = field(default_factory=_default_user_agent)

    @classmethod
    def from_env(cls, prefix: str = "TM2_") -> "ProviderConfig":
        """
        Create config from environment variables:

        TM2_RPC_URL             (http/https)
        TM2_WS_URL              (ws/wss) optional
        TM2_TIMEOUT             (float seconds, per request)
        TM2_TX_TIMEOUT          (float seconds, wait_for_transaction)
        TM2_POLL_INTERVAL       (float seconds, wait_for_transaction)
        TM2_WS_OPEN_ATTEMPTS    (int)
        TM2_WS_OPEN_INTERVAL    (float seconds)
        TM2_DENOM               (str)
        TM2_HEIGHT_SOURCE       (status | consensus_state)
        TM2_USER_AGENT          (str)
        """
        rpc = _env(f"{prefix}RPC_URL", _DEFAULT_RPC)
        ws = _env(f"{prefix}WS_URL", None)
        timeout = float(_env(f"{prefix}TIMEOUT", "15.0"))
        tx_timeout = float(_env(f"{prefix}TX_TIMEOUT", "15.0"))
        poll = float(_env(f"{prefix}POLL_INTERVAL", "1.0"))
        open_attempts = int(_env(f"{prefix}WS_OPEN_ATTEMPTS", "10"))
        open_interval = float(_env(f"{prefix}WS_OPEN_INTERVAL", "0.2"))
        denom = _env(f"{prefix}DENOM", "ugnot")
        height_source = _ensure_height_source(_env(f"{prefix}HEIGHT_SOURCE", "status") or "status")
        ua = _env(f"{prefix}USER_AGENT", None)

        _ensure_scheme(rpc, ("http", "https"))
        _ensure_scheme(ws, ("ws", "wss"))

        return cls(
            rpc_url=rpc or _DEFAULT_RPC,
            ws_url=ws,
            request_timeout=timeout,
            tx_timeout=tx_timeout,
            poll_interval=poll,
            ws_open_attempts=open_attempts,
            ws_open_interval=open_interval,
            denomination=denom or "ugnot",
            height_source=height_source,
            user_agent=ua or _default_user_agent(),
        )

    @classmethod
    def with_overrides(
        cls, base: Optional["ProviderConfig"] = None, **overrides: Any
    ) -> "ProviderConfig":
        """
        Build from an existing config plus keyword overrides.
        Unknown keys are ignored.
        """
        base = base or cls.from_env()
        data = base.to_dict()
        data.update({k: v for k, v in overrides.items() if k in data})
        if "rpc_url" in overrides:
            _ensure_scheme(data["rpc_url"], ("http", "https"))
        if "ws_url" in overrides:
            _ensure_scheme(data["ws_url"], ("ws", "wss"))
        if "height_source" in overrides:
            _ensure_height_source(data["height_source"])
        return cls(**data)

    def http_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rpc_url": self.rpc_url,
            "ws_url": self.ws_url,
            "request_timeout": float(self.request_timeout),
            "tx_timeout": float(self.tx_timeout),
            "poll_interval": float(self.poll_interval),
            "ws_open_attempts": int(self.ws_open_attempts),
            "ws_open_interval": float(self.ws_open_interval),
            "denomination": self.denomination,
            "height_source": self.height_source,
            "user_agent": self.user_agent,
        }


def provider_from_config(
    config: Optional[ProviderConfig] = None, *, prefer_ws: bool = False
) -> Union["HttpProvider", "WsProvider"]:
    """
    Build a provider from `config` (default: ProviderConfig.from_env()).

    With `prefer_ws=True` a WsProvider is returned, using `ws_url` or the
    node's default /websocket endpoint; otherwise an HttpProvider on `rpc_url`.
    """
    from .provider import HttpProvider, WsProvider

    cfg = config or ProviderConfig.from_env()
    common: Dict[str, Any] = dict(
        height_source=cfg.height_source,
        poll_interval=cfg.poll_interval,
        tx_timeout=cfg.tx_timeout,
        denomination=cfg.denomination,
    )
    headers = {"User-Agent": cfg.user_agent}
    if prefer_ws:
        return WsProvider(
            cfg.ws_url or _DEFAULT_WS,
            request_timeout=cfg.request_timeout,
            open_poll_interval=cfg.ws_open_interval,
            open_max_attempts=cfg.ws_open_attempts,
            headers=headers,
            **common,
        )
    return HttpProvider(
        cfg.rpc_url,
        timeout=cfg.request_timeout,
        headers=cfg.http_headers(),
        **common,
    )


__all__ = ["ProviderConfig", "provider_from_config"]
