"""
Tendermint2 SDK for Python
Convenience exports for the most common client APIs.
"""

from .version import __version__  # noqa: F401

# Core config & errors
from .config import ProviderConfig, provider_from_config  # noqa: F401
from .errors import (  # noqa: F401
    Tm2SdkError,
    RpcError,
    TransportError,
    ConnectionNotEstablishedError,
    RequestTimeoutError,
    TransactionTimeoutError,
    MalformedTransactionError,
    AccountNotInitializedError,
    NotSupportedError,
    TM2Error,
    construct_request_error,
)

# RPC
from .rpc.http import HttpTransport  # noqa: F401
from .rpc.ws import WsTransport  # noqa: F401

# Providers
from .provider import (  # noqa: F401
    Provider,
    RpcProvider,
    HttpProvider,
    WsProvider,
    TransactionEndpoint,
    wait_for_transaction,
)

# Tx helpers
from .tx.codec import (  # noqa: F401
    Tx,
    TxFee,
    TxMessage,
    TxSignature,
    PublicKey,
    encode_tx,
    decode_tx,
    encode_tx_b64,
    tx_hash_b64,
)

# Utilities
from .utils.bytes import to_base64, from_base64  # noqa: F401

__all__ = [
    "__version__",
    # Core
    "ProviderConfig", "provider_from_config",
    "Tm2SdkError", "RpcError", "TransportError", "ConnectionNotEstablishedError",
    "RequestTimeoutError", "TransactionTimeoutError", "MalformedTransactionError",
    "AccountNotInitializedError", "NotSupportedError", "TM2Error",
    "construct_request_error",
    # RPC
    "HttpTransport", "WsTransport",
    # Providers
    "Provider", "RpcProvider", "HttpProvider", "WsProvider",
    "TransactionEndpoint", "wait_for_transaction",
    # Tx
    "Tx", "TxFee", "TxMessage", "TxSignature", "PublicKey",
    "encode_tx", "decode_tx", "encode_tx_b64", "tx_hash_b64",
    # Utils
    "to_base64", "from_base64",
]
