"""Shared fixtures for httpbox tests."""

from __future__ import annotations

import logging
import uuid
from typing import Generator

import pytest

from httpbox.testing import ResponseRecorder


class RecordingHandler(logging.Handler):
    """Logging handler that keeps every record it receives."""

    def __init__(self) -> None:
        super().__init__(logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


class CapturedLogger:
    """A private logger plus the records it has emitted."""

    def __init__(self, logger: logging.Logger, handler: RecordingHandler) -> None:
        self.logger = logger
        self.handler = handler

    @property
    def records(self) -> list[logging.LogRecord]:
        return self.handler.records


@pytest.fixture
def recorder() -> ResponseRecorder:
    """Create an empty in-memory response writer."""
    return ResponseRecorder()


@pytest.fixture
def captured_logger() -> Generator[CapturedLogger, None, None]:
    """Create an isolated DEBUG logger that records everything."""
    logger = logging.getLogger(f"httpbox-tests.{uuid.uuid4().hex}")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    handler = RecordingHandler()
    logger.addHandler(handler)

    yield CapturedLogger(logger, handler)

    logger.removeHandler(handler)
