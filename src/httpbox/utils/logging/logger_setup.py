"""Logger setup for the httpbox logger tree.

All httpbox loggers (access, errors, response) are children of the
"httpbox" logger, so a single handler attached there collects them.
"""

from __future__ import annotations

__all__ = ["configure_logging", "create_formatter"]

import logging
import sys
from typing import TextIO

from httpbox.config import LogFormat, LoggingConfig
from httpbox.constants import APP_NAME
from httpbox.utils.logging.iso_formatter import ConsoleFormatter, ISO8601Formatter


def create_formatter(log_format: LogFormat) -> logging.Formatter:
    """Return the formatter for a configured log format."""
    if log_format == "console":
        return ConsoleFormatter()
    return ISO8601Formatter()


def configure_logging(config: LoggingConfig, stream: TextIO | None = None) -> logging.Logger:
    """Attach a single stream handler to the "httpbox" logger.

    Calling it again replaces (and closes) the previous handlers, so it is
    safe to call once per server start.

    Args:
        config: Logging settings.
        stream: Destination stream (default: stderr).

    Returns:
        logging.Logger: The configured "httpbox" logger.
    """
    logger = logging.getLogger(APP_NAME)
    logger.setLevel(config.level_number)
    logger.propagate = False

    # Clear existing handlers to avoid duplicates
    for existing in logger.handlers[:]:
        logger.removeHandler(existing)
        existing.close()

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(create_formatter(config.format))
    logger.addHandler(handler)
    return logger
