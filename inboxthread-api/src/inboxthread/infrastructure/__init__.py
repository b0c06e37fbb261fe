# src/inboxthread/infrastructure/__init__.py
"""Infrastructure layer - parsing, stores, HTTP and configuration."""

from inboxthread.infrastructure.logging import configure_logging
from inboxthread.infrastructure.settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Logging
    "configure_logging",
]
