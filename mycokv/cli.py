#!/usr/bin/env python3
"""
Interactive Client for MycoKV

A simple command-line client for talking to a MycoKV server by hand.

Usage:
    mycokv                          # Connect to localhost:6922
    mycokv --host 1.2.3.4           # Connect to specific host
    mycokv --port 8080              # Connect to specific port
    mycokv --debug                  # Enable debug logging

Commands:
    GET <key>                 - Retrieve a value (wildcards allowed)
    PUT <key> <value> [ttl]   - Store a value (ttl in milliseconds)
    EXPIRE <key> <ttl>        - Expire a key after ttl milliseconds
    DELETE <key>              - Delete a key
    PURGE                     - Delete every key
    help                      - Show this help
    status                    - Show connection status
    exit                      - Exit client
"""

import argparse
import asyncio
import json
import logging
import sys

from .client import MycoKV
from .config.options import merge_default_connection_options
from .config.settings import settings
from .errors import MycoKVConnectionError, MycoKVError

# Enable command history with arrow keys (works on Unix systems)
try:
    import readline  # noqa: F401
except ImportError:
    pass  # readline not available on Windows by default

HELP_TEXT = """
MycoKV Commands:
----------------
  GET <key>                 Retrieve the value for a key
  PUT <key> <value> [ttl]   Store a value (optional TTL in milliseconds)
  EXPIRE <key> <ttl>        Expire a key after ttl milliseconds
  DELETE <key>              Delete a key
  PURGE                     Delete every key

Client Commands:
----------------
  help                      Show this help message
  status                    Show connection status
  exit                      Exit the client

Values use the wire syntax:
---------------------------
  PUT name "alice"          Store the string "alice"
  PUT count 12              Store the number 12
  PUT enabled true          Store a boolean
  PUT nothing null          Store null
  GET kitchen.*             Get every key nested under "kitchen"
  GET kitchen.*1            Same, one level deep
"""


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Interactive client for MycoKV",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--host",
        type=str,
        default=settings.HOST,
        help="Server host",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help="Server port",
    )

    parser.add_argument(
        "--settle-delay",
        type=float,
        default=settings.SETTLE_DELAY,
        help="Seconds to wait after connecting before sending commands",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.RESPONSE_TIMEOUT,
        help="Seconds to wait for a response (default: wait forever)",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr),
        ]
    )


def format_value(value) -> str:
    """Render a result the way it would appear on the wire."""
    if isinstance(value, dict):
        return json.dumps(value, indent=2)
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return f'"{value}"'
    return str(value)


async def execute_line(client: MycoKV, line: str) -> str:
    """
    Run one protocol command typed by the user.

    Args:
        client: A connected MycoKV client
        line: e.g. 'PUT foo "bar" 1000'

    Returns:
        Text to print. Client and server errors are reported, not raised.
    """
    parts = line.split()
    if not parts:
        return ""

    name, args = parts[0].upper(), parts[1:]

    try:
        if name == "GET" and len(args) == 1:
            return format_value(await client.get(args[0]))

        if name == "PUT" and len(args) in (2, 3):
            value = client.codec.parse(args[1])
            ttl = int(args[2]) if len(args) == 3 else None
            return format_value(await client.put(args[0], value, ttl=ttl))

        if name == "EXPIRE" and len(args) == 2:
            await client.expire(args[0], int(args[1]))
            return "OK"

        if name == "DELETE" and len(args) == 1:
            await client.delete(args[0])
            return "OK"

        if name == "PURGE" and not args:
            await client.purge()
            return "OK"

    except (ValueError, MycoKVError) as exc:
        return f"ERROR: {exc}"

    return f"ERROR: invalid command {line.strip()!r}, type 'help' for usage"


async def run(args: argparse.Namespace) -> int:
    """Connect and run the interactive prompt until exit."""
    options = merge_default_connection_options(
        host=args.host,
        port=args.port,
        settle_delay=args.settle_delay,
        response_timeout=args.timeout,
    )

    print(f"MycoKV Client")
    print(f"=============")
    print(f"Connecting to {options.address}...")

    try:
        client = await MycoKV.connect(options)
    except MycoKVConnectionError as exc:
        print(exc)
        return 1

    print("Connected! Type 'help' for commands.\n")

    loop = asyncio.get_running_loop()
    try:
        while True:
            try:
                command = (await loop.run_in_executor(None, input, ">>> ")).strip()
            except EOFError:
                print("\nGoodbye!")
                break

            if not command:
                continue

            lower_cmd = command.lower()

            if lower_cmd == "help":
                print(HELP_TEXT)
                continue

            if lower_cmd in ("exit", "quit"):
                print("Goodbye!")
                break

            if lower_cmd == "status":
                status = "Connected" if client.connected else "Disconnected"
                print(f"Status: {status}")
                print(f"Server: {options.address}")
                continue

            print(await execute_line(client, command))

            if not client.connected:
                print("Connection lost. Goodbye!")
                return 1
    finally:
        await client.disconnect()

    return 0


def main(argv=None) -> None:
    """Main entry point for the interactive client."""
    args = parse_args(argv)
    setup_logging(debug=args.debug)

    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        print("\n\nInterrupted. Goodbye!")


if __name__ == "__main__":
    main()
