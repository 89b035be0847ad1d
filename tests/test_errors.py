import pytest

from tm2_sdk.errors import (ERROR_TYPES, InsufficientFundsError,
                            OutOfGasError, RequestTimeoutError, RpcError,
                            TM2Error, TransactionTimeoutError,
                            TransportError, UnauthorizedError,
                            construct_request_error, from_jsonrpc_error)


@pytest.mark.parametrize(
    "error_id,cls,message",
    [
        ("/std.UnauthorizedError", UnauthorizedError, "signature is unauthorized"),
        ("/std.InsufficientFundsError", InsufficientFundsError, "insufficient funds"),
        ("/std.OutOfGasError", OutOfGasError, "out of gas"),
    ],
)
def test_construct_request_error_maps_known_ids(error_id, cls, message):
    err = construct_request_error(error_id, "node log")
    assert isinstance(err, cls)
    assert isinstance(err, TM2Error)
    assert str(err) == message
    assert err.log == "node log"
    assert err.error_id == error_id


def test_construct_request_error_unknown_id_keeps_details():
    err = construct_request_error("/std.SomethingNew", "details")
    assert type(err) is TM2Error
    assert str(err) == "unknown error"
    assert err.log == "details"
    assert err.error_id == "/std.SomethingNew"


def test_error_table_covers_every_std_error():
    assert len(ERROR_TYPES) == 18
    for type_url, cls in ERROR_TYPES.items():
        assert type_url.startswith("/std.")
        assert cls.type_url == type_url
        assert str(cls()) == cls.message


def test_from_jsonrpc_error_normalizes_code():
    err = from_jsonrpc_error({"code": "-32602", "message": "bad params", "data": [1]}, method="block", request_id=9)
    assert isinstance(err, RpcError)
    assert err.code == -32602
    assert err.data == [1]
    assert "method=block" in str(err)


def test_from_jsonrpc_error_accepts_plain_string():
    err = from_jsonrpc_error("kaboom")
    assert err.message == "kaboom"


def test_timeouts_are_builtin_timeouts():
    assert isinstance(RequestTimeoutError(message="request timed out"), TimeoutError)
    assert isinstance(RequestTimeoutError(message="request timed out"), TransportError)
    err = TransactionTimeoutError(tx_hash="abc=")
    assert isinstance(err, TimeoutError)
    assert str(err) == "transaction fetch timeout"
    assert err.tx_hash == "abc="
