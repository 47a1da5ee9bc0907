"""Logging setup for SmartRation.

Every module logs through ``get_logger(__name__)``; all loggers hang off the
``smartration`` namespace, which gets a single stderr handler on first use.

Receipt parsing logs each skipped annotation and skipped line (with the name
of the rule that rejected it) at DEBUG, so ``SMARTRATION_LOG_LEVEL=DEBUG``
or ``smartration --log-level debug ...`` explains a surprising parse.

Environment variables:
    SMARTRATION_LOG_LEVEL: DEBUG, INFO, WARNING or ERROR. Default: INFO
"""

import logging
import os
import sys

DEFAULT_LOG_LEVEL = logging.INFO

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
LOG_FORMAT_DEBUG = "%(levelname)s [%(name)s:%(lineno)d] %(message)s"

LOGGER_NAMESPACE = "smartration"
LOG_LEVEL_ENV_VAR = "SMARTRATION_LOG_LEVEL"

LOG_LEVEL_NAMES = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}

_logging_configured = False


def parse_log_level(value: str | None, default: int = DEFAULT_LOG_LEVEL) -> int:
    """Map a level name such as ``"debug"`` to its logging constant.

    Unknown or empty names give `default`.
    """
    if not value:
        return default
    return LOG_LEVEL_NAMES.get(value.strip().upper(), default)


def _formatter_for(level: int) -> logging.Formatter:
    return logging.Formatter(LOG_FORMAT_DEBUG if level == logging.DEBUG else LOG_FORMAT)


def configure_logging(level: int | None = None) -> None:
    """Attach the stderr handler to the ``smartration`` logger once.

    Args:
        level: Log level to use. If None, it comes from SMARTRATION_LOG_LEVEL.
    """
    global _logging_configured

    if _logging_configured:
        return

    if level is None:
        level = parse_log_level(os.environ.get(LOG_LEVEL_ENV_VAR))

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_formatter_for(level))

    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    package_logger.setLevel(level)
    package_logger.addHandler(handler)
    package_logger.propagate = False

    _logging_configured = True


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module.

    Module names already inside the package (``smartration.receipt...``) are
    used as-is; anything else is nested under the ``smartration`` namespace.
    """
    configure_logging()

    if name == LOGGER_NAMESPACE or name.startswith(f"{LOGGER_NAMESPACE}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


def set_log_level(level: int) -> None:
    """Change the package log level at runtime (used by ``--log-level``)."""
    configure_logging(level)
    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    package_logger.setLevel(level)
    for handler in package_logger.handlers:
        handler.setFormatter(_formatter_for(level))
