"""
Async TCP Connection Module

Owns the stream to a MycoKV server and the single pending-response slot.

The wire format carries no request identifiers, so at most one command may
be in flight at any time. The next full line from the server answers it.

Key asyncio concepts used:
- asyncio.open_connection(): Connect to the server
- StreamReader.readline(): Read response lines in a background task
- StreamWriter.write() / drain(): Send commands
- Futures: Hand the response line back to the waiting caller
"""

import asyncio
import logging
from asyncio import StreamReader, StreamWriter
from enum import Enum
from typing import Optional

from ..config.settings import settings
from ..errors import MycoKVConnectionError, ProtocolUsageError, ResponseTimeoutError

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Lifecycle states of a Connection."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTING = "disconnecting"


class Connection:
    """
    A persistent, half-duplex connection to a MycoKV server.

    Usage:
        conn = Connection('localhost', 6922)
        await conn.open()
        line = await conn.send('GET foo\\n')
        await conn.close()

    Attributes:
        host: Server host
        port: Server port
        settle_delay: Seconds to wait after connecting before use
        response_timeout: Seconds to wait for a response (None = forever)
        state: Current ConnectionState
    """

    def __init__(
            self,
            host: str = None,
            port: int = None,
            settle_delay: float = None,
            response_timeout: Optional[float] = None,
            read_limit: int = None,
    ):
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        self.settle_delay = settle_delay if settle_delay is not None else settings.SETTLE_DELAY
        self.response_timeout = response_timeout
        self.read_limit = read_limit if read_limit is not None else settings.READ_LIMIT

        self.state = ConnectionState.DISCONNECTED
        self._reader: Optional[StreamReader] = None
        self._writer: Optional[StreamWriter] = None
        self._reader_task: Optional[asyncio.Task] = None
        self._pending: Optional[asyncio.Future] = None

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def is_connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    @property
    def awaiting_response(self) -> bool:
        """True while a command is waiting for its response line."""
        return self._pending is not None

    async def open(self) -> None:
        """
        Connect to the server.

        Waits ``settle_delay`` seconds after the socket connects before the
        connection is declared usable.

        Raises:
            MycoKVConnectionError: If the connection cannot be established
        """
        if self.state != ConnectionState.DISCONNECTED:
            raise MycoKVConnectionError(f"Connection to {self.address} is already {self.state.value}")

        self.state = ConnectionState.CONNECTING
        try:
            self._reader, self._writer = await asyncio.open_connection(
                self.host, self.port, limit=self.read_limit
            )
        except OSError as exc:
            self.state = ConnectionState.DISCONNECTED
            logger.error(f"Failed to connect to MycoKV at {self.address}: {exc}")
            raise MycoKVConnectionError() from exc

        logger.info(f"Successfully connected to MycoKV at {self.address}")

        # Anything the server sends while settling is unsolicited and dropped
        self._reader_task = asyncio.create_task(self._read_responses())
        if self.settle_delay > 0:
            await asyncio.sleep(self.settle_delay)

        if self.state != ConnectionState.CONNECTING:
            raise MycoKVConnectionError(f"Connection to {self.address} closed before it was ready")
        self.state = ConnectionState.CONNECTED

    async def send(self, line: str) -> str:
        """
        Write one command line and wait for its response line.

        Args:
            line: Encoded command including the trailing newline

        Returns:
            The response line with its terminator stripped.

        Raises:
            ProtocolUsageError: If another command is still awaiting a response
            MycoKVConnectionError: If not connected or the connection drops
            ResponseTimeoutError: If response_timeout elapses first

        Cancelling the caller closes the connection.
        """
        if self._pending is not None:
            raise ProtocolUsageError("Already awaiting response")
        if self.state != ConnectionState.CONNECTED:
            raise MycoKVConnectionError(f"Not connected to MycoKV at {self.address}")

        pending = asyncio.get_running_loop().create_future()
        self._pending = pending

        try:
            logger.debug(f"Sending {line.rstrip()!r} to {self.address}")
            self._writer.write(line.encode())
            await self._writer.drain()
            return await asyncio.wait_for(pending, self.response_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                f"No response from {self.address} within {self.response_timeout}s, closing connection"
            )
            await self.close()
            raise ResponseTimeoutError(
                f"No response from MycoKV within {self.response_timeout} seconds"
            ) from None
        except asyncio.CancelledError:
            # The reply to a cancelled command may still arrive; it must
            # never be read as the answer to the next one.
            logger.warning(f"Command to {self.address} cancelled while awaiting response, closing connection")
            await self.close()
            raise
        except (ConnectionResetError, BrokenPipeError) as exc:
            raise MycoKVConnectionError(f"Connection to {self.address} lost: {exc}") from exc
        finally:
            if self._pending is pending:
                self._pending = None

    async def close(self) -> None:
        """
        Force-close the connection.

        In-flight responses are not waited for; a caller still waiting gets
        MycoKVConnectionError.
        """
        if self.state in (ConnectionState.DISCONNECTED, ConnectionState.DISCONNECTING):
            return

        self.state = ConnectionState.DISCONNECTING
        self._fail_pending(MycoKVConnectionError("Connection closed while awaiting response"))

        if self._reader_task is not None:
            self._reader_task.cancel()
            try:
                await self._reader_task
            except asyncio.CancelledError:
                pass
            self._reader_task = None

        if self._writer is not None:
            self._writer.close()
            try:
                await self._writer.wait_closed()
            except OSError as exc:
                logger.debug(f"Error while closing connection to {self.address}: {exc}")

        self._reader = None
        self._writer = None
        self.state = ConnectionState.DISCONNECTED
        logger.info(f"Disconnected from MycoKV at {self.address}")

    async def _read_responses(self) -> None:
        """Background task: hand each response line to the pending caller."""
        try:
            while True:
                data = await self._reader.readline()
                if not data:
                    logger.info("MycoKV connection terminated.")
                    break
                if not data.endswith(b"\n"):
                    # EOF in the middle of a line
                    logger.warning(f"Incomplete response from {self.address}: {data!r}")
                    break

                line = data.decode().rstrip("\r\n")
                pending = self._pending
                if pending is None or pending.done():
                    logger.debug(f"Dropping unsolicited data from {self.address}: {line!r}")
                    continue

                self._pending = None
                pending.set_result(line)

        except (OSError, ValueError) as exc:
            logger.error(f"Error reading from MycoKV at {self.address}: {exc}")

        if self.state in (ConnectionState.CONNECTING, ConnectionState.CONNECTED):
            self.state = ConnectionState.DISCONNECTED
            self._fail_pending(MycoKVConnectionError(f"Connection to {self.address} was closed"))
            if self._writer is not None:
                self._writer.close()

    def _fail_pending(self, exc: Exception) -> None:
        pending = self._pending
        self._pending = None
        if pending is not None and not pending.done():
            pending.set_exception(exc)
