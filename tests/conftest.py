"""
Pytest Configuration and Fixtures

This module provides shared fixtures for all tests, including an in-process
mock MycoKV server that speaks the line protocol over real TCP sockets.
"""

import asyncio
import json
import re
import socket
import time
import pytest
import pytest_asyncio
from contextlib import closing
from typing import AsyncGenerator, Dict, List, Optional, Tuple

from mycokv.client import MycoKV
from mycokv.protocol.classifier import ErrorClassifier
from mycokv.protocol.codec import ValueCodec
from mycokv.protocol.keys import KeyValidator


def find_free_port() -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


# ============================================================================
# Mock Server
# ============================================================================

WILDCARD_KEY = re.compile(r"^(.+)\.\*([0-9]*)$")
_MISSING = object()


class _Node:
    """One segment of the nested key tree."""

    def __init__(self):
        self.value = _MISSING
        self.children: Dict[str, "_Node"] = {}


class MockStore:
    """
    In-memory store with millisecond TTLs.

    Values are kept exactly as they arrived on the wire.
    Format: key -> (encoded_value, expiration_timestamp), 0 = no expiration
    """

    def __init__(self):
        self._store: Dict[str, Tuple[str, float]] = {}

    def put(self, key: str, value: str) -> None:
        self._store[key] = (value, 0)

    def get(self, key: str) -> Optional[str]:
        if key not in self._store:
            return None
        value, expires_at = self._store[key]
        if expires_at and expires_at <= time.monotonic():
            # Lazy expiration
            self._store.pop(key, None)
            return None
        return value

    def expire(self, key: str, ttl_ms: int) -> bool:
        value = self.get(key)
        if value is None:
            return False
        self._store[key] = (value, time.monotonic() + ttl_ms / 1000)
        return True

    def delete(self, key: str) -> bool:
        if self.get(key) is None:
            return False
        self._store.pop(key, None)
        return True

    def clear(self) -> None:
        self._store.clear()

    def subtree(self, prefix: str, depth: Optional[int]) -> dict:
        """Build the nested tree of every live key below ``prefix``."""
        root = _Node()
        for key in list(self._store):
            if not key.startswith(prefix + "."):
                continue
            value = self.get(key)
            if value is None:
                continue
            node = root
            for segment in key[len(prefix) + 1:].split("."):
                node = node.children.setdefault(segment, _Node())
            node.value = json.loads(value)

        tree = {}
        for name, child in root.children.items():
            rendered = self._render(child, depth)
            if rendered is not _MISSING:
                tree[name] = rendered
        return tree

    def _render(self, node: _Node, depth: Optional[int]):
        children = {}
        if depth is None or depth > 1:
            for name, child in node.children.items():
                rendered = self._render(child, None if depth is None else depth - 1)
                if rendered is not _MISSING:
                    children[name] = rendered
        if not children:
            return node.value
        if node.value is not _MISSING:
            children["_"] = node.value
        return children


class MockMycoKVServer:
    """
    Asynchronous TCP server imitating a MycoKV server.

    Attributes:
        received: Every command line received, in order
        silent: If True, commands are recorded but never answered
        greeting: Optional line sent to each client as soon as it connects
        reply_delay: Seconds to wait before answering each command
        truncate: If True, the first reply is sent without its newline and
            the connection is closed
    """

    def __init__(
            self,
            host: str,
            port: int,
            silent: bool = False,
            greeting: str = None,
            reply_delay: float = 0,
            truncate: bool = False,
    ):
        self.host = host
        self.port = port
        self.silent = silent
        self.greeting = greeting
        self.reply_delay = reply_delay
        self.truncate = truncate
        self.store = MockStore()
        self.received: List[str] = []
        self._server: Optional[asyncio.Server] = None
        self._writers = set()

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._writers.add(writer)
        try:
            if self.greeting is not None:
                writer.write(f"{self.greeting}\n".encode())
                await writer.drain()

            while True:
                data = await reader.readline()
                if not data:
                    break

                raw = data.decode().rstrip('\r\n')
                self.received.append(raw)
                if self.silent:
                    continue

                if self.reply_delay:
                    await asyncio.sleep(self.reply_delay)
                if self.truncate:
                    writer.write(self.execute(raw).encode())
                    await writer.drain()
                    break

                writer.write(f"{self.execute(raw)}\n".encode())
                await writer.drain()

        except (ConnectionResetError, BrokenPipeError):
            pass
        finally:
            self._writers.discard(writer)
            writer.close()
            try:
                await writer.wait_closed()
            except Exception:
                pass

    def execute(self, raw: str) -> str:
        """Execute one command line and return the response line."""
        parts = raw.split(" ", 2)
        name = parts[0]

        if not name:
            return "E14 Missing command"
        if name not in ("GET", "PUT", "EXPIRE", "DELETE", "PURGE"):
            return f"E01 Unknown command: {name}"
        if name == "PURGE":
            self.store.clear()
            return "OK"
        if len(parts) < 2:
            return "E02 Missing key"

        key = parts[1]

        if name == "GET":
            match = WILDCARD_KEY.match(key)
            if match:
                depth = int(match.group(2)) if match.group(2) else None
                tree = self.store.subtree(match.group(1), depth)
                return json.dumps(tree) if tree else f"E09 Key not found: {key}"
            value = self.store.get(key)
            return value if value is not None else f"E09 Key not found: {key}"

        if name == "PUT":
            if len(parts) < 3:
                return "E04 Missing value"
            try:
                json.loads(parts[2])
            except ValueError:
                return f"E05 Invalid value: {parts[2]}"
            self.store.put(key, parts[2])
            return parts[2]

        if name == "EXPIRE":
            if len(parts) < 3 or not parts[2].isdigit():
                return "E15 Invalid expiration"
            if not self.store.expire(key, int(parts[2])):
                return f"E09 Key not found: {key}"
            return "OK"

        if not self.store.delete(key):
            return f"E09 Key not found: {key}"
        return "OK"

    async def start(self) -> None:
        self._server = await asyncio.start_server(self.handle_client, self.host, self.port)

    async def stop(self) -> None:
        for writer in list(self._writers):
            writer.close()
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None


# ============================================================================
# Protocol Fixtures
# ============================================================================

@pytest.fixture
def codec() -> ValueCodec:
    """Create a ValueCodec instance."""
    return ValueCodec()


@pytest.fixture
def classifier() -> ErrorClassifier:
    """Create an ErrorClassifier instance."""
    return ErrorClassifier()


@pytest.fixture
def validator() -> KeyValidator:
    """Create a KeyValidator instance."""
    return KeyValidator()


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def server_port() -> int:
    """Get a free port for server testing."""
    return find_free_port()


@pytest_asyncio.fixture
async def server_factory(server_port: int):
    """
    Factory fixture to start customised mock servers on the test port.

    Usage:
        async def test_something(server_factory):
            server = await server_factory(silent=True)
    """
    servers = []

    async def factory(**kwargs) -> MockMycoKVServer:
        srv = MockMycoKVServer('127.0.0.1', server_port, **kwargs)
        await srv.start()
        servers.append(srv)
        return srv

    yield factory

    for srv in servers:
        await srv.stop()


@pytest_asyncio.fixture
async def server(server_port: int) -> AsyncGenerator[MockMycoKVServer, None]:
    """Start a well-behaved mock server for the duration of a test."""
    srv = MockMycoKVServer('127.0.0.1', server_port)
    await srv.start()

    yield srv

    await srv.stop()


# ============================================================================
# Client Fixtures
# ============================================================================

@pytest.fixture
def client_factory(server_port: int):
    """
    Factory fixture to connect clients to the test server.

    Usage:
        async def test_something(server, client_factory):
            async with await client_factory() as client:
                await client.get("key")
    """
    async def factory(**options) -> MycoKV:
        options.setdefault("settle_delay", 0)
        return await MycoKV.connect(host='127.0.0.1', port=server_port, **options)
    return factory


@pytest_asyncio.fixture
async def client(server: MockMycoKVServer, client_factory) -> AsyncGenerator[MycoKV, None]:
    """A client connected to the mock server."""
    myco = await client_factory()

    yield myco

    await myco.disconnect()


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


# Configure asyncio mode for pytest-asyncio
pytest_plugins = ['pytest_asyncio']
