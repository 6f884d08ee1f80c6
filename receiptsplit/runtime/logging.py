"""Logging for receiptsplit.

Every module logs through ``get_logger(__name__)``; records go to stderr
under the ``receiptsplit`` logger. The level comes from
RECEIPTSPLIT_LOG_LEVEL (DEBUG, INFO, WARNING, ERROR; default INFO) and the
CLI's ``--verbose`` switches to DEBUG at runtime.
"""

import logging
import os
import sys

LOGGER_NAMESPACE = "receiptsplit"

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
LOG_FORMAT_DEBUG = "%(levelname)s [%(name)s:%(lineno)d] %(message)s"

_handler: logging.Handler | None = None


def _env_level() -> int:
    # getLevelName maps a known name to its number, anything else to a str
    level = logging.getLevelName(os.environ.get("RECEIPTSPLIT_LOG_LEVEL", "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def _apply_level(level: int) -> None:
    assert _handler is not None
    logging.getLogger(LOGGER_NAMESPACE).setLevel(level)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT_DEBUG if level == logging.DEBUG else LOG_FORMAT))


def configure_logging() -> None:
    """Attach the stderr handler once, at the environment's level."""
    global _handler
    if _handler is not None:
        return

    _handler = logging.StreamHandler(sys.stderr)
    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    package_logger.addHandler(_handler)
    package_logger.propagate = False
    _apply_level(_env_level())


def enable_debug_logging() -> None:
    configure_logging()
    _apply_level(logging.DEBUG)


def get_logger(name: str) -> logging.Logger:
    """Logger for a module; names outside the package get the namespace prefix."""
    configure_logging()
    if name == LOGGER_NAMESPACE or name.startswith(f"{LOGGER_NAMESPACE}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")
