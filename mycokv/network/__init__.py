"""Network module for the MycoKV client."""

from .connection import Connection, ConnectionState

__all__ = ["Connection", "ConnectionState"]
