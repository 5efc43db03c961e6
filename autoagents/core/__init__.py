"""Process-level plumbing shared by the engine: settings and logging."""

from .config import Settings, get_settings, settings
from .logging_config import get_logger, setup_logging

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "get_logger",
    "setup_logging",
]
