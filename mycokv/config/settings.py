"""
MycoKV Client Configuration Settings

This module contains the configuration defaults for the MycoKV client.
Every value can be overridden through a MYCOKV_* environment variable.
"""

import os
from dataclasses import dataclass
from typing import Optional


def _optional_float(name: str) -> Optional[float]:
    raw = os.environ.get(name, "").strip()
    return float(raw) if raw else None


@dataclass
class Settings:
    """Client configuration settings."""

    # Network settings
    HOST: str = os.environ.get("MYCOKV_HOST", "localhost")
    PORT: int = int(os.environ.get("MYCOKV_PORT", "6922"))

    # Seconds to wait after the socket connects before sending commands.
    # Some servers accept the socket before they are ready to read.
    SETTLE_DELAY: float = float(os.environ.get("MYCOKV_SETTLE_DELAY", "1.0"))

    # Seconds to wait for a response line (None = wait indefinitely)
    RESPONSE_TIMEOUT: Optional[float] = _optional_float("MYCOKV_RESPONSE_TIMEOUT")

    # Maximum length of a single response line (wildcard trees can be large)
    READ_LIMIT: int = int(os.environ.get("MYCOKV_READ_LIMIT", str(1024 * 1024)))

    # Logging settings
    DEBUG: bool = os.environ.get("MYCOKV_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("MYCOKV_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
