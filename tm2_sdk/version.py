"""
Version of the Tendermint2 Python SDK.

Sent as part of the User-Agent header by both transports.
"""

from __future__ import annotations

# Bump this when publishing
__version__ = "0.1.0"


def user_agent() -> str:
    return f"tm2-sdk-python/{__version__}"


__all__ = ["__version__", "user_agent"]
