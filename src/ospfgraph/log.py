"""
Logging setup for OSPFGraph.

Every module logger hangs off the ``ospfgraph`` package logger, which owns
the single stderr handler. Stdout stays reserved for CLI results.
"""

import logging
import sys
from typing import Optional, Union

PACKAGE_LOGGER = "ospfgraph"
DEFAULT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

_handler: Optional[logging.Handler] = None


def setup_root_logger(
    level: int = logging.WARNING,
    format_string: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
) -> logging.Logger:
    """Attach the package handler once and return the package logger.

    Later calls return the logger unchanged until :func:`reset_logging`.
    """
    global _handler

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is not None:
        return package_logger

    _handler = handler or logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    package_logger.addHandler(_handler)
    package_logger.setLevel(level)
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name``, placed under the package logger if it is not already."""
    setup_root_logger()
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def set_global_log_level(level: Union[int, str]) -> None:
    """Set the package log level from a number or a name such as ``"debug"``.

    Raises:
        ValueError: unknown level name.
    """
    if isinstance(level, str):
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level: {level}")
        level = numeric
    setup_root_logger().setLevel(level)


def reset_logging() -> None:
    """Detach the package handler (tests)."""
    global _handler

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is not None:
        package_logger.removeHandler(_handler)
        _handler = None
    package_logger.setLevel(logging.NOTSET)
