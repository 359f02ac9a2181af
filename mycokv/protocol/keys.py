"""
Key Validation

Lexical rules every key must pass before a command is sent:

    1. No whitespace anywhere in the key.
    2. Wildcards: in read context the key may end with ".*" optionally
       followed by a depth limit ("kitchen.*", "kitchen.*2"). No asterisk
       is allowed anywhere else, and none at all in write context.
    3. Nesting: no leading dot, no trailing dot, no consecutive dots.

Violations raise KeyFormatError. Keys are never sanitized or corrected.
"""

import re

from ..errors import KeyFormatError

# \s does not cover the zero width no-break space, so it is listed explicitly
WHITESPACE_PATTERN = re.compile(r"[\s\ufeff]")
READ_KEY_PATTERN = re.compile(r"^[^*\s\ufeff]+(\.\*[0-9]*)?$")
WILDCARD_SUFFIX_PATTERN = re.compile(r"\.\*[0-9]*$")
INVALID_NESTING_PATTERN = re.compile(r"^\.|\.$|\.\.")


class KeyValidator:
    """
    Validator for MycoKV keys.

    Examples:
        >>> validator = KeyValidator()
        >>> validator.validate("kitchen.*2")
        >>> validator.validate("kitchen.*", write=True)
        Traceback (most recent call last):
            ...
        mycokv.errors.KeyFormatError: Wildcards are not allowed in keys for write operations: 'kitchen.*'
    """

    def validate(self, key: str, write: bool = False) -> None:
        """
        Validate a key.

        Args:
            key: The key to check
            write: True for PUT/EXPIRE/DELETE, False for GET

        Raises:
            KeyFormatError: If any rule is broken
        """
        if not isinstance(key, str) or not key:
            raise KeyFormatError(f"Keys must be non-empty strings: {key!r}")

        if WHITESPACE_PATTERN.search(key):
            raise KeyFormatError(f"Keys may not contain whitespace: {key!r}")

        if write:
            if "*" in key:
                raise KeyFormatError(
                    f"Wildcards are not allowed in keys for write operations: {key!r}"
                )
        elif not READ_KEY_PATTERN.match(key):
            raise KeyFormatError(
                f"Wildcards may only appear as the final segment, after a '.': {key!r}"
            )

        if INVALID_NESTING_PATTERN.search(key):
            raise KeyFormatError(
                f"Keys may not start or end with '.' or contain consecutive dots: {key!r}"
            )

    @staticmethod
    def is_wildcard(key: str) -> bool:
        """Check if a key ends in a wildcard segment."""
        return bool(WILDCARD_SUFFIX_PATTERN.search(key))


_validator = KeyValidator()


def validate_key(key: str, write: bool = False) -> None:
    """Validate ``key`` with the shared KeyValidator."""
    _validator.validate(key, write=write)


def is_wildcard(key: str) -> bool:
    return KeyValidator.is_wildcard(key)
