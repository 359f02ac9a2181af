"""
Protocol Command Definitions

This module defines the commands understood by a MycoKV server and how each
one is written on the wire.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class CommandType(Enum):
    """Enumeration of supported command types."""
    GET = auto()
    PUT = auto()
    DELETE = auto()
    EXPIRE = auto()
    PURGE = auto()


@dataclass
class Command:
    """
    Represents a single protocol command.

    Attributes:
        type: The type of command (GET, PUT, DELETE, EXPIRE, PURGE)
        key: The key for the operation (empty for PURGE)
        value: The already encoded value for PUT
        ttl: Time-to-live in milliseconds for EXPIRE
    """
    type: CommandType
    key: str = ""
    value: Optional[str] = None
    ttl: Optional[int] = None

    @property
    def args(self) -> list:
        """Arguments following the command name, in wire order."""
        if self.type == CommandType.PURGE:
            return []
        if self.type == CommandType.PUT:
            return [self.key, self.value]
        if self.type == CommandType.EXPIRE:
            return [self.key, str(self.ttl)]
        return [self.key]

    def encode(self) -> str:
        """
        Format the command as a wire line.

        Examples:
            >>> Command.put("foo", '"bar"').encode()
            'PUT foo "bar"\\n'
            >>> Command.purge().encode()
            'PURGE\\n'
        """
        return " ".join([self.type.name] + self.args) + "\n"

    @classmethod
    def get(cls, key: str) -> "Command":
        return cls(type=CommandType.GET, key=key)

    @classmethod
    def put(cls, key: str, value: str) -> "Command":
        return cls(type=CommandType.PUT, key=key, value=value)

    @classmethod
    def delete(cls, key: str) -> "Command":
        return cls(type=CommandType.DELETE, key=key)

    @classmethod
    def expire(cls, key: str, ttl: int) -> "Command":
        return cls(type=CommandType.EXPIRE, key=key, ttl=ttl)

    @classmethod
    def purge(cls) -> "Command":
        return cls(type=CommandType.PURGE)
