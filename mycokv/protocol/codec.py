"""
Value Codec

Converts between typed Python values and their textual form on the wire.

Wire format:
    str   -> "value"      (double quoted, embedded quotes are NOT escaped)
    int   -> 123, -7
    float -> 1.5, -0.25   (plain decimal, never exponent notation)
    bool  -> true / false
    None  -> null

Wildcard GET responses are JSON trees and are decoded with parse_nested().
"""

import json
import math
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Union

from ..errors import ValueTypeError

Value = Union[str, int, float, bool, None]
NestedTree = Dict[str, Any]

INTEGER_PATTERN = re.compile(r"^-?[0-9]+$")
DECIMAL_PATTERN = re.compile(r"^-?[0-9]+\.[0-9]+$")

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

# Child key holding the value of a node that also has children
NODE_VALUE_KEY = "_"


@dataclass(frozen=True)
class NestedResult:
    """
    Outcome of decoding a wildcard GET response.

    Attributes:
        value: The decoded tree when structured, otherwise the raw text
        structured: True if the response parsed as a JSON object
    """
    value: Union[NestedTree, str]
    structured: bool

    @classmethod
    def tree(cls, tree: NestedTree) -> "NestedResult":
        return cls(value=tree, structured=True)

    @classmethod
    def raw_text(cls, raw: str) -> "NestedResult":
        return cls(value=raw, structured=False)


class ValueCodec:
    """Encoder/decoder for MycoKV values."""

    def stringify(self, value: Value) -> str:
        """
        Encode a value for the wire.

        Args:
            value: A str, int, float, bool or None

        Returns:
            The textual wire form of the value.

        Raises:
            ValueTypeError: For any other type, for integers outside the
                signed 64-bit range, for NaN or infinite floats, and for strings
                containing line breaks.

        Examples:
            >>> codec = ValueCodec()
            >>> codec.stringify("bar")
            '"bar"'
            >>> codec.stringify(True)
            'true'
            >>> codec.stringify(1e20)
            '100000000000000000000.0'
        """
        # bool must be checked before int, it is a subclass
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, int):
            if not INT64_MIN <= value <= INT64_MAX:
                raise ValueTypeError(value, "Integers must fit in a signed 64-bit range.")
            return str(value)
        if isinstance(value, float):
            if not math.isfinite(value):
                raise ValueTypeError(value, "NaN and infinite numbers cannot be stored.")
            text = format(Decimal(repr(value)), "f")
            # Keep a fractional part so the value reads back as a float
            if "." not in text:
                text += ".0"
            return text
        if isinstance(value, str):
            if "\n" in value or "\r" in value:
                raise ValueTypeError(value, "Strings may not contain line breaks.")
            return f'"{value}"'
        raise ValueTypeError(value)

    def parse(self, raw: str) -> Value:
        """
        Decode a single value response line.

        The order of checks matters: null, booleans, integers, decimals,
        and only then quoted strings.

        Args:
            raw: Response line, with or without the trailing newline

        Returns:
            The decoded value.

        Examples:
            >>> codec = ValueCodec()
            >>> codec.parse('"bar"\\n')
            'bar'
            >>> codec.parse("-12")
            -12
            >>> codec.parse("0.5")
            0.5
        """
        text = raw.rstrip("\r\n")

        if text == "null":
            return None
        if text == "true":
            return True
        if text == "false":
            return False
        if INTEGER_PATTERN.match(text):
            return int(text)
        if DECIMAL_PATTERN.match(text):
            return float(text)
        if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
            return text[1:-1]
        return text

    def parse_nested(self, raw: str) -> NestedResult:
        """
        Decode a wildcard GET response.

        Never raises: text that is not a JSON object comes back unchanged
        as an unstructured result.
        """
        text = raw.rstrip("\r\n")
        try:
            tree = json.loads(text)
        except ValueError:
            return NestedResult.raw_text(text)

        if not isinstance(tree, dict):
            return NestedResult.raw_text(text)
        return NestedResult.tree(tree)
