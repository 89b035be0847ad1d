"""
Typed error classes for the Python SDK.

Three families, all rooted at `Tm2SdkError`:

- transport failures (`TransportError` and friends) raised by rpc/http and
  rpc/ws when a call cannot complete;
- protocol failures (`RpcError`) raised when a node answers with a JSON-RPC
  `error` object;
- chain-level failures (`TM2Error` subclasses) raised by the providers after a
  broadcast, built from the node's error type URL via
  `construct_request_error`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional, Type

__all__ = [
    "Tm2SdkError",
    "RpcError",
    "JsonRpcCode",
    "TransportError",
    "ConnectionNotEstablishedError",
    "RequestTimeoutError",
    "TransactionTimeoutError",
    "MalformedTransactionError",
    "AccountNotInitializedError",
    "NotSupportedError",
    "TM2Error",
    "InternalError",
    "TxDecodeError",
    "InvalidSequenceError",
    "UnauthorizedError",
    "InsufficientFundsError",
    "UnknownRequestError",
    "InvalidAddressError",
    "UnknownAddressError",
    "InvalidPubKeyError",
    "InsufficientCoinsError",
    "InvalidCoinsError",
    "InvalidGasWantedError",
    "OutOfGasError",
    "MemoTooLargeError",
    "InsufficientFeeError",
    "TooManySignaturesError",
    "NoSignaturesError",
    "GasOverflowError",
    "ERROR_TYPES",
    "construct_request_error",
    "from_jsonrpc_error",
]


class Tm2SdkError(Exception):
    """Base class for all SDK errors."""


class JsonRpcCode(IntEnum):
    # JSON-RPC 2.0 reserved codes
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Server errors (implementation-defined range: -32099 to -32000)
    SERVER_ERROR = -32000


# -----------------------------------------------------------------------------
# Protocol / transport
# -----------------------------------------------------------------------------


@dataclass(eq=False)
class RpcError(Tm2SdkError):
    """Raised when a JSON-RPC call returns an error object (or no result)."""

    message: str
    code: int = JsonRpcCode.INTERNAL_ERROR
    data: Optional[Any] = None
    method: Optional[str] = None
    request_id: Optional[Any] = None

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.method:
            parts.append(f"method={self.method}")
        if self.code is not None:
            parts.append(f"code={int(self.code)}")
        if self.request_id is not None:
            parts.append(f"id={self.request_id}")
        if self.data not in (None, ""):
            parts.append(f"data={self.data!r}")
        return " ".join(parts)

    @property
    def code_enum(self) -> Optional[JsonRpcCode]:
        try:
            return JsonRpcCode(self.code)
        except ValueError:
            return None


@dataclass(eq=False)
class TransportError(Tm2SdkError):
    """
    The request never produced a response envelope: connection refused, socket
    closed, non-success HTTP status, undecodable body, and so on.
    Terminal for the call; transports never retry on their own.
    """

    message: str
    url: Optional[str] = None
    data: Optional[Any] = None

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        bits = [self.message]
        if self.url:
            bits.append(f"url={self.url}")
        if self.data not in (None, ""):
            bits.append(f"data={self.data!r}")
        return " ".join(bits)


class ConnectionNotEstablishedError(TransportError):
    """The WebSocket did not reach the open state within the allowed attempts."""


class RequestTimeoutError(TransportError, TimeoutError):
    """No response arrived for a request before its deadline."""


# -----------------------------------------------------------------------------
# Provider-level
# -----------------------------------------------------------------------------


class TransactionTimeoutError(Tm2SdkError, TimeoutError):
    """`wait_for_transaction` reached its deadline without finding the tx."""

    def __init__(self, message: str = "transaction fetch timeout", *, tx_hash: Optional[str] = None) -> None:
        super().__init__(message)
        self.tx_hash = tx_hash


class MalformedTransactionError(Tm2SdkError):
    """A block carried bytes matching the target hash that do not decode as a Tx."""


class AccountNotInitializedError(Tm2SdkError):
    def __init__(self, message: str = "account is not initialized") -> None:
        super().__init__(message)


class NotSupportedError(Tm2SdkError, NotImplementedError):
    def __init__(self, message: str = "not supported") -> None:
        super().__init__(message)


# -----------------------------------------------------------------------------
# Tendermint2 std errors
# -----------------------------------------------------------------------------


class TM2Error(Tm2SdkError):
    """
    A chain-level error reported by the node.

    `message` is fixed per error kind; `log` carries whatever diagnostic text
    the node attached (may be None).
    """

    type_url: Optional[str] = None
    message: str = "unknown error"

    def __init__(self, message: Optional[str] = None, log: Optional[str] = None, *, error_id: Optional[str] = None) -> None:
        if message is not None:
            self.message = message
        self.log = log
        self.error_id = error_id or self.type_url
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class _StdError(TM2Error):
    def __init__(self, log: Optional[str] = None) -> None:
        super().__init__(None, log)


class InternalError(_StdError):
    type_url = "/std.InternalError"
    message = "internal error encountered"


class TxDecodeError(_StdError):
    type_url = "/std.TxDecodeError"
    message = "unable to decode tx"


class InvalidSequenceError(_StdError):
    type_url = "/std.InvalidSequenceError"
    message = "invalid sequence"


class UnauthorizedError(_StdError):
    type_url = "/std.UnauthorizedError"
    message = "signature is unauthorized"


class InsufficientFundsError(_StdError):
    type_url = "/std.InsufficientFundsError"
    message = "insufficient funds"


class UnknownRequestError(_StdError):
    type_url = "/std.UnknownRequestError"
    message = "unknown request"


class InvalidAddressError(_StdError):
    type_url = "/std.InvalidAddressError"
    message = "invalid address"


class UnknownAddressError(_StdError):
    type_url = "/std.UnknownAddressError"
    message = "unknown address"


class InvalidPubKeyError(_StdError):
    type_url = "/std.InvalidPubKeyError"
    message = "invalid pubkey"


class InsufficientCoinsError(_StdError):
    type_url = "/std.InsufficientCoinsError"
    message = "insufficient coins"


class InvalidCoinsError(_StdError):
    type_url = "/std.InvalidCoinsError"
    message = "invalid coins"


class InvalidGasWantedError(_StdError):
    type_url = "/std.InvalidGasWantedError"
    message = "invalid gas wanted"


class OutOfGasError(_StdError):
    type_url = "/std.OutOfGasError"
    message = "out of gas"


class MemoTooLargeError(_StdError):
    type_url = "/std.MemoTooLargeError"
    message = "memo too large"


class InsufficientFeeError(_StdError):
    type_url = "/std.InsufficientFeeError"
    message = "insufficient fee"


class TooManySignaturesError(_StdError):
    type_url = "/std.TooManySignaturesError"
    message = "too many signatures"


class NoSignaturesError(_StdError):
    type_url = "/std.NoSignaturesError"
    message = "no signatures"


class GasOverflowError(_StdError):
    type_url = "/std.GasOverflowError"
    message = "gas overflow"


# Error IDs as registered by tm2/pkg/std
ERROR_TYPES: Dict[str, Type[_StdError]] = {
    cls.type_url: cls  # type: ignore[misc]
    for cls in (
        InternalError,
        TxDecodeError,
        InvalidSequenceError,
        UnauthorizedError,
        InsufficientFundsError,
        UnknownRequestError,
        InvalidAddressError,
        UnknownAddressError,
        InvalidPubKeyError,
        InsufficientCoinsError,
        InvalidCoinsError,
        InvalidGasWantedError,
        OutOfGasError,
        MemoTooLargeError,
        InsufficientFeeError,
        TooManySignaturesError,
        NoSignaturesError,
        GasOverflowError,
    )
}


def construct_request_error(error_id: Optional[str], log: Optional[str] = None) -> TM2Error:
    """
    Build the typed error for a node error type URL (e.g. "/std.OutOfGasError").

    Unrecognized IDs map to a plain `TM2Error("unknown error")` that still
    carries the original ID and log.
    """
    cls = ERROR_TYPES.get(error_id or "")
    if cls is None:
        return TM2Error("unknown error", log, error_id=error_id)
    return cls(log)


def from_jsonrpc_error(
    err_obj: Any,
    *,
    method: Optional[str] = None,
    request_id: Optional[Any] = None,
) -> RpcError:
    """
    Convert a JSON-RPC error object into RpcError.

    `err_obj` should resemble: {"code": int, "message": str, "data": any?}
    """
    if not isinstance(err_obj, dict):
        return RpcError(message=str(err_obj), method=method, request_id=request_id)
    code = err_obj.get("code", JsonRpcCode.SERVER_ERROR)
    try:
        code = int(code)
    except (TypeError, ValueError):
        code = int(JsonRpcCode.SERVER_ERROR)
    return RpcError(
        message=str(err_obj.get("message") or "Unknown JSON-RPC error"),
        code=code,
        data=err_obj.get("data"),
        method=method,
        request_id=request_id,
    )
