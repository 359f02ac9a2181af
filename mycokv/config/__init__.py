"""Configuration module for the MycoKV client."""

from .options import ConnectionOptions, merge_default_connection_options
from .settings import Settings, settings

__all__ = [
    "ConnectionOptions",
    "Settings",
    "merge_default_connection_options",
    "settings",
]
