"""
MycoKV: Python Client

An asyncio client for the MycoKV key-value store, speaking its
line-based text protocol over a persistent TCP connection.
"""

from .client import MycoKV, connect
from .config.options import ConnectionOptions, merge_default_connection_options
from .errors import (
    KeyFormatError,
    MycoKVConnectionError,
    MycoKVError,
    ProtocolUsageError,
    ResponseTimeoutError,
    ServerError,
    ValueTypeError,
)
from .protocol.classifier import ERROR_CODES
from .protocol.codec import NestedResult

__version__ = "1.0.0"

__all__ = [
    "ConnectionOptions",
    "ERROR_CODES",
    "KeyFormatError",
    "MycoKV",
    "MycoKVConnectionError",
    "MycoKVError",
    "NestedResult",
    "ProtocolUsageError",
    "ResponseTimeoutError",
    "ServerError",
    "ValueTypeError",
    "connect",
    "merge_default_connection_options",
]
