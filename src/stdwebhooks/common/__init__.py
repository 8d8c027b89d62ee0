"""Common utilities for stdwebhooks."""

from stdwebhooks.common.logging import get_logger, setup_logging
from stdwebhooks.common.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "get_logger",
    "setup_logging",
]
