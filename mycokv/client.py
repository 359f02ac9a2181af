"""
MycoKV Client

The command protocol engine: validates keys, encodes values, sends exactly
one command line per operation and decodes exactly one response line.

Usage:
    client = await connect(host='localhost', port=6922)
    await client.put('kitchen.toaster', 'KitchenAid')
    await client.get('kitchen.*')
    await client.disconnect()
"""

import logging
from typing import Any, Mapping, Optional, Union

from .config.options import ConnectionOptions, merge_default_connection_options
from .errors import KeyFormatError, ServerError
from .network.connection import Connection
from .protocol.classifier import KEY_NOT_FOUND, ErrorClassifier
from .protocol.codec import NestedResult, NestedTree, Value, ValueCodec
from .protocol.commands import Command
from .protocol.keys import is_wildcard, validate_key

logger = logging.getLogger(__name__)


class MycoKV:
    """
    Asynchronous client for a MycoKV server.

    Only one operation may be in flight at a time. Callers must await each
    operation before issuing the next one; overlapping calls raise
    ProtocolUsageError instead of being queued.

    Attributes:
        options: The ConnectionOptions in use
        codec: ValueCodec used for values on the wire
        classifier: ErrorClassifier used for server error lines
    """

    def __init__(self, options: ConnectionOptions = None):
        self.options = options if options is not None else ConnectionOptions()
        self.codec = ValueCodec()
        self.classifier = ErrorClassifier()
        self._connection = Connection(
            host=self.options.host,
            port=self.options.port,
            settle_delay=self.options.settle_delay,
            response_timeout=self.options.response_timeout,
            read_limit=self.options.read_limit,
        )

    @classmethod
    async def connect(
            cls,
            options: Union[ConnectionOptions, Mapping[str, Any], None] = None,
            **overrides: Any,
    ) -> "MycoKV":
        """
        Create a client and connect it.

        Args:
            options: ConnectionOptions or a mapping of option names
            **overrides: Individual options (host, port, settle_delay, ...)

        Raises:
            MycoKVConnectionError: If the server cannot be reached
        """
        client = cls(merge_default_connection_options(options, **overrides))
        await client._connection.open()
        return client

    @property
    def connected(self) -> bool:
        return self._connection.is_connected

    async def get(self, key: str) -> Union[Value, NestedTree, str]:
        """
        Retrieve a value.

        For a wildcard key ("kitchen.*", "kitchen.*2") the result is the
        nested tree under the key, or the raw response text if it could not
        be parsed as a tree.

        Raises:
            KeyFormatError: If the key is invalid for reading
            ServerError: If the server returned an error line
        """
        validate_key(key)
        raw = await self._execute(Command.get(key))
        if is_wildcard(key):
            return self._decode_nested(key, raw).value
        return self.codec.parse(raw)

    async def get_nested(self, key: str) -> NestedResult:
        """Retrieve a wildcard key and report whether the response was structured."""
        validate_key(key)
        if not is_wildcard(key):
            raise KeyFormatError(f"get_nested() needs a wildcard key such as 'kitchen.*': {key!r}")
        raw = await self._execute(Command.get(key))
        return self._decode_nested(key, raw)

    def _decode_nested(self, key: str, raw: str) -> NestedResult:
        result = self.codec.parse_nested(raw)
        if not result.structured:
            logger.debug(f"Wildcard response for {key!r} is not a tree, returning raw text")
        return result

    async def put(self, key: str, value: Value, ttl: Optional[int] = None) -> Value:
        """
        Store a value.

        Args:
            key: Key to store under (no wildcards)
            value: str, int, float, bool or None
            ttl: Optional time-to-live in milliseconds, applied with a
                following EXPIRE command

        Returns:
            The value echoed back by the server.

        Raises:
            KeyFormatError: If the key is invalid for writing
            ValueTypeError: If the value cannot be encoded
            ServerError: If either the PUT or the EXPIRE failed
        """
        validate_key(key, write=True)
        encoded = self.codec.stringify(value)
        if ttl is not None:
            _check_ttl(ttl)

        raw = await self._execute(Command.put(key, encoded))
        stored = self.codec.parse(raw)

        if ttl is not None:
            await self.expire(key, ttl)
        return stored

    async def expire(self, key: str, ttl: int) -> None:
        """Set a key to expire ``ttl`` milliseconds from now."""
        validate_key(key, write=True)
        _check_ttl(ttl)
        await self._execute(Command.expire(key, ttl))

    async def delete(self, key: str) -> None:
        """
        Delete a key.

        Deleting a key that does not exist is not an error.
        """
        validate_key(key, write=True)
        try:
            await self._execute(Command.delete(key))
        except ServerError as exc:
            if exc.code != KEY_NOT_FOUND:
                raise
            logger.debug(f"DELETE {key}: key not found, treating as deleted")

    async def purge(self) -> None:
        """Remove every key and clear the server's durability log."""
        await self._execute(Command.purge())

    async def disconnect(self) -> None:
        """Close the connection without waiting for in-flight responses."""
        await self._connection.close()

    async def _execute(self, command: Command) -> str:
        """Send a command and return its response line, raising server errors."""
        raw = await self._connection.send(command.encode())
        if self.classifier.has_error(raw):
            error = self.classifier.classify(raw)
            logger.debug(f"{command.type.name} {command.key} failed with {error.code}: {raw}")
            raise error
        return raw

    async def __aenter__(self) -> "MycoKV":
        if not self.connected:
            await self._connection.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()


def _check_ttl(ttl: Any) -> None:
    if isinstance(ttl, bool) or not isinstance(ttl, int):
        raise TypeError(f"TTL must be an integer number of milliseconds, got {ttl!r}")


async def connect(
        host: str = None,
        port: int = None,
        **options: Any,
) -> MycoKV:
    """
    Connect to a MycoKV server.

    Args:
        host: Server host (default from settings, "localhost")
        port: Server port (default from settings, 6922)
        **options: settle_delay, response_timeout, read_limit

    Returns:
        A connected MycoKV client.
    """
    return await MycoKV.connect(None, host=host, port=port, **options)
