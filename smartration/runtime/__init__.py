"""Runtime infrastructure for SmartRation.

This package provides process/runtime services including:
- Logging setup via get_logger()
- Environment settings via get_settings(), Settings

The OCR client, pipeline and upload server live in submodules and are
imported explicitly (they pull in httpx/Pillow/FastAPI).

Usage:
    from smartration.runtime import get_logger, get_settings

    logger = get_logger(__name__)
    settings = get_settings()
"""

from smartration.runtime.logging import (
    DEFAULT_LOG_LEVEL,
    LOG_FORMAT,
    LOG_FORMAT_DEBUG,
    configure_logging,
    get_logger,
    parse_log_level,
    set_log_level,
)
from smartration.runtime.settings import Settings, get_settings, load_settings, reset_settings

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "set_log_level",
    "parse_log_level",
    "DEFAULT_LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FORMAT_DEBUG",
    # Settings
    "Settings",
    "get_settings",
    "load_settings",
    "reset_settings",
]
