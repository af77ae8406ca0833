"""Application-wide constants for httpbox.

Constants that define pipeline behavior (wire messages, logger names, log levels).
For user-configurable settings, see config.py.
"""

import logging

__all__ = [
    # Application identity
    "APP_NAME",
    # Logger names
    "ACCESS_LOGGER_NAME",
    "ERROR_LOGGER_NAME",
    "RESPONSE_LOGGER_NAME",
    "ERROR_LOGGER_SCOPE_KEY",
    # Log levels
    "LEVEL_ACCESS",
    "LOG_LEVELS",
    # Access log record
    "ACCESS_LOG_MESSAGE",
    # Error responses
    "UNKNOWN_ERROR_CODE",
    "UNKNOWN_ERROR_MESSAGE",
    "SERIALIZATION_FAILED_MESSAGE",
    # Request decoding
    "INVALID_JSON_MESSAGE",
    "INVALID_XML_MESSAGE",
    "UNREADABLE_BODY_MESSAGE",
    # Server defaults
    "DEFAULT_HOST",
    "DEFAULT_PORT",
]

APP_NAME = "httpbox"

# =============================================================================
# Logging
# =============================================================================

ACCESS_LOGGER_NAME = f"{APP_NAME}.access"
ERROR_LOGGER_NAME = f"{APP_NAME}.errors"
RESPONSE_LOGGER_NAME = f"{APP_NAME}.response"

# ASGI scope entry carrying the serving app's error logger to dispatch layers
ERROR_LOGGER_SCOPE_KEY = f"{APP_NAME}.error_logger"

# Access logs sit between INFO and WARNING so they can be filtered on their own
LEVEL_ACCESS = 25
logging.addLevelName(LEVEL_ACCESS, "ACCESS")

LOG_LEVELS: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "ACCESS": LEVEL_ACCESS,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

ACCESS_LOG_MESSAGE = "Access"

# =============================================================================
# Error responses
# =============================================================================

UNKNOWN_ERROR_CODE = 500
UNKNOWN_ERROR_MESSAGE = "Unknown error occurred"
SERIALIZATION_FAILED_MESSAGE = "failed to serialize error details"

INVALID_JSON_MESSAGE = "invalid JSON body"
INVALID_XML_MESSAGE = "invalid XML body"
UNREADABLE_BODY_MESSAGE = "unable to read body"

# =============================================================================
# Server defaults (example program)
# =============================================================================

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080
