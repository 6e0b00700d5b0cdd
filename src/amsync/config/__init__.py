"""
amsync configuration.

Pydantic-based settings loaded from AMSYNC_* environment variables or a
.env file.
"""

from amsync.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
