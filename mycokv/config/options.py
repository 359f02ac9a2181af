"""
Connection Options

Per-connection options, filled from the global settings and overridden by
whatever the caller passes to connect().
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping, Optional, Union

from .settings import settings


@dataclass
class ConnectionOptions:
    """
    Options for a single MycoKV connection.

    Attributes:
        host: Host of the MycoKV server (default "localhost")
        port: Port of the MycoKV server (default 6922)
        settle_delay: Seconds to wait after connecting before use
        response_timeout: Seconds to wait for a response (None = forever)
        read_limit: Maximum length of one response line in bytes
    """
    host: str = field(default_factory=lambda: settings.HOST)
    port: int = field(default_factory=lambda: settings.PORT)
    settle_delay: float = field(default_factory=lambda: settings.SETTLE_DELAY)
    response_timeout: Optional[float] = field(default_factory=lambda: settings.RESPONSE_TIMEOUT)
    read_limit: int = field(default_factory=lambda: settings.READ_LIMIT)

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


def merge_default_connection_options(
        options: Union[ConnectionOptions, Mapping[str, Any], None] = None,
        **overrides: Any,
) -> ConnectionOptions:
    """
    Merge caller supplied options over the defaults.

    Args:
        options: A ConnectionOptions, a mapping of option names, or None
        **overrides: Individual options; these win over ``options``

    Returns:
        A new ConnectionOptions instance.

    Raises:
        TypeError: If an unknown option name is given.

    Examples:
        >>> merge_default_connection_options({"port": 7000}).port
        7000
        >>> merge_default_connection_options(host="db").host
        'db'
    """
    if isinstance(options, ConnectionOptions):
        merged = dict((f.name, getattr(options, f.name)) for f in fields(options))
    else:
        merged = dict(options or {})

    # None means "use the default" except for response_timeout, where it is meaningful
    merged.update({k: v for k, v in overrides.items() if v is not None or k == "response_timeout"})

    known = {f.name for f in fields(ConnectionOptions)}
    unknown = set(merged) - known
    if unknown:
        raise TypeError(f"Unknown connection option(s): {', '.join(sorted(unknown))}")

    return replace(ConnectionOptions(), **merged)
