"""
MycoKV Client Errors

All exceptions raised by the client derive from MycoKVError so callers can
catch the whole family at once. Client-side errors (KeyFormatError,
ValueTypeError, ProtocolUsageError) are always raised before anything is
written to the connection.
"""


class MycoKVError(Exception):
    """Base class for every error raised by the MycoKV client."""


class MycoKVConnectionError(MycoKVError, ConnectionError):
    """Transport-level failure: connect refused, connection lost or closed."""

    DEFAULT_MESSAGE = (
        "Connection to MycoKV failed. Please verify that MycoKV is running "
        "and that the host and port are correct."
    )

    def __init__(self, message: str = DEFAULT_MESSAGE):
        super().__init__(message)


class KeyFormatError(MycoKVError, ValueError):
    """A key broke one of the lexical key rules and was never sent."""


class ValueTypeError(MycoKVError, TypeError):
    """A value cannot be represented on the wire."""

    def __init__(self, value, message: str = None):
        self.value = value
        super().__init__(
            f"Invalid MycoKV value: {value!r}\n"
            f"{message or 'MycoKV can only store strings, numbers, booleans, and null.'}"
        )


class ServerError(MycoKVError):
    """
    An error line returned by the server.

    Attributes:
        code: Three character error code, e.g. "E09"
        description: Human readable meaning of the code
        raw: The response line exactly as received
    """

    def __init__(self, code: str, description: str, raw: str):
        self.code = code
        self.description = description
        self.raw = raw
        super().__init__(f"MycoKV returned error code {code}: {description}.\n{raw}")


class ProtocolUsageError(MycoKVError, RuntimeError):
    """A command was issued while another one was still awaiting its response."""


class ResponseTimeoutError(MycoKVError, TimeoutError):
    """No response line arrived within the configured response timeout."""
