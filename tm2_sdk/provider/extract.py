"""
Pure helpers turning `abci_query` payloads into Python values.

Every function takes the `ResponseBase.Data` field of an ABCI response: a
base64 string (or None when the node has nothing stored under the path).

Sequence and account-number extraction deliberately disagree on a missing
account: an unknown account simply has sequence 0, but asking for its account
number is an error, which wallets use to detect an uninitialized account
before signing.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional

from ..errors import AccountNotInitializedError
from ..utils.bytes import from_base64
from .types import ABCIAccount, SimulateResult

_PARSE_ERRORS = (ValueError, TypeError, KeyError, AttributeError)


def parse_abci(data: str) -> Any:
    """Decode base64-wrapped JSON; a `null` document is an error."""
    parsed = json.loads(from_base64(data).decode("utf-8"))
    if parsed is None:
        raise ValueError("unable to parse JSON response")
    return parsed


def extract_balance(data: Optional[str], denomination: str) -> int:
    """
    Amount of `denomination` in a coins payload like "5gnot,100atom".

    Returns 0 when the payload is empty or the denomination is absent. The
    match is anchored, so "atom" never picks up "100uatom".
    """
    if not data:
        return 0

    raw = from_base64(data).decode("utf-8").replace('"', "")
    pattern = re.compile(rf"^(\d+){re.escape(denomination)}$")
    for balance in raw.split(","):
        match = pattern.match(balance.strip())
        if match:
            return int(match.group(1))
    return 0


def extract_sequence(data: Optional[str]) -> int:
    """Account sequence; 0 for missing or unreadable accounts."""
    if not data:
        return 0
    try:
        account: ABCIAccount = parse_abci(data)
        return int(account["BaseAccount"]["sequence"])
    except _PARSE_ERRORS:
        # Account not initialized
        return 0


def extract_account_number(data: Optional[str]) -> int:
    if not data:
        raise AccountNotInitializedError()
    try:
        account: ABCIAccount = parse_abci(data)
        return int(account["BaseAccount"]["account_number"])
    except _PARSE_ERRORS as e:
        raise AccountNotInitializedError() from e


def extract_account(data: Optional[str]) -> ABCIAccount:
    """Whole account record; raises AccountNotInitializedError when missing."""
    if not data:
        raise AccountNotInitializedError()
    try:
        account = parse_abci(data)
    except _PARSE_ERRORS as e:
        raise AccountNotInitializedError() from e
    if not isinstance(account, dict) or not isinstance(account.get("BaseAccount"), dict):
        raise AccountNotInitializedError()
    return account  # type: ignore[return-value]


def extract_simulate_result(data: Optional[str]) -> SimulateResult:
    """
    Gas figures of a simulated tx. The payload is a DeliverTx record; the
    error and log may sit at the top level or under `ResponseBase`.
    """
    if not data:
        raise ValueError("abci data is not initialized")
    try:
        parsed = parse_abci(data)
        base = parsed.get("ResponseBase") or {}
        return SimulateResult(
            gas_used=int(parsed.get("GasUsed") or 0),
            gas_wanted=int(parsed.get("GasWanted") or 0),
            error=parsed.get("Error") or base.get("Error"),
            log=str(parsed.get("Log") or base.get("Log") or ""),
        )
    except _PARSE_ERRORS as e:
        raise ValueError(f"unable to parse simulate response: {e}") from e


__all__ = [
    "parse_abci",
    "extract_balance",
    "extract_sequence",
    "extract_account_number",
    "extract_account",
    "extract_simulate_result",
]
