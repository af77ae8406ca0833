"""Log formatting utilities.

Provides two formatters that keep structured data attached via ``extra``
(for example the access log's ``req`` and ``res`` groups):
- ISO8601Formatter: one JSON object per line with an ISO 8601 timestamp
- ConsoleFormatter: human-readable ``LEVEL: message key=value`` lines
"""

from __future__ import annotations

__all__ = ["ConsoleFormatter", "ISO8601Formatter", "record_extras"]

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord carries; anything else came from ``extra``
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def record_extras(record: logging.LogRecord) -> dict[str, Any]:
    """Return the attributes attached to record through ``extra``."""
    return {key: value for key, value in vars(record).items() if key not in _RESERVED_ATTRS}


def _flatten(prefix: str, value: Any) -> list[tuple[str, Any]]:
    if isinstance(value, dict):
        items: list[tuple[str, Any]] = []
        for key, nested in value.items():
            items.extend(_flatten(f"{prefix}.{key}" if prefix else str(key), nested))
        return items
    return [(prefix, value)]


class ISO8601Formatter(logging.Formatter):
    """Formatter with ISO 8601 timestamps (UTC) for JSONL output.

    Format: YYYY-MM-DDTHH:MM:SS.sssZ
    Example: 2025-12-04T10:48:37.123Z
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSONL with ISO 8601 timestamp.

        Args:
            record: The log record to format

        Returns:
            str: JSON-formatted log entry with timestamp
        """
        timestamp = (
            datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z")
        )

        # Handle dict messages (structured logging)
        if isinstance(record.msg, dict):
            log_data = dict(record.msg)
        else:
            log_data = {"message": record.getMessage()}

        log_entry: dict[str, Any] = {
            "time": timestamp,
            "level": record.levelname,
            "logger": record.name,
            **log_data,
            **record_extras(record),
        }
        if record.exc_info:
            log_entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for console output.

    Extracts 'message' or 'event' field from dict messages and appends
    extras as dotted ``key=value`` pairs (``req.method=GET``).
    """

    def format(self, record: logging.LogRecord) -> str:
        if isinstance(record.msg, dict):
            msg = record.msg.get("message") or record.msg.get("event", "")
        else:
            msg = record.getMessage()

        pairs = " ".join(f"{key}={value}" for key, value in _flatten("", record_extras(record)))
        line = f"{record.levelname}: {msg}"
        if pairs:
            line = f"{line} {pairs}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line
