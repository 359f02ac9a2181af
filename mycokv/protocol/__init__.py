"""Protocol module for the MycoKV client."""

from .classifier import ERROR_CODES, ErrorClassifier
from .codec import NestedResult, Value, ValueCodec
from .commands import Command, CommandType
from .keys import KeyValidator, is_wildcard, validate_key

__all__ = [
    "Command",
    "CommandType",
    "ERROR_CODES",
    "ErrorClassifier",
    "KeyValidator",
    "NestedResult",
    "Value",
    "ValueCodec",
    "is_wildcard",
    "validate_key",
]
