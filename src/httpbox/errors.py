"""Structured HTTP errors returned by handlers.

This module provides:
- HTTPError: the recognized error carrying a status code and client message
- Error options (with_details, with_internal_error, without_log)
- RecognizedFailure / OpaqueFailure: the tagged failure variant the
  dispatcher branches on
- CompositionError: raised when a middleware chain is ordered incorrectly

Usage:
    from httpbox.errors import HTTPError, with_details, with_internal_error

    return HTTPError(
        404,
        "user not found",
        with_details({"user_id": user_id}),
        with_internal_error(exc),
    )

Response format:
    {"code": 404, "message": "user not found", "details": {"user_id": "abc123"}}
"""

from __future__ import annotations

__all__ = [
    "CompositionError",
    "ErrorOption",
    "Failure",
    "HTTPError",
    "OpaqueFailure",
    "RecognizedFailure",
    "classify_failure",
    "with_details",
    "with_internal_error",
    "without_log",
]

from dataclasses import dataclass
from typing import Any, Callable, TypeAlias


class HTTPError(Exception):
    """Error with response-shaping metadata.

    Handlers return (or raise) an HTTPError to fail with a status code and a
    message that is safe to show the client. Anything that is not an
    HTTPError is collapsed to a generic 500 by the dispatcher.

    Attributes:
        code: HTTP status code, also used as the response status.
        message: Human-readable message serialized to the client.
        details: Optional JSON-serializable payload serialized to the client.
        should_log: Whether the dispatcher emits a diagnostic log line.
    """

    def __init__(self, code: int, message: str, *options: ErrorOption) -> None:
        """Initialize the error and apply options in the order given.

        Args:
            code: HTTP status code.
            message: Client-facing message.
            *options: Error options (see with_details, with_internal_error, without_log).
        """
        super().__init__(message)
        self.code = int(code)
        self.message = message
        self.details: Any = None
        self.should_log = True
        self._cause: BaseException | None = None

        for option in options:
            option(self)

    @property
    def cause(self) -> BaseException | None:
        """Internal error kept for diagnostics, never serialized to the client."""
        return self._cause

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"HTTPError(code={self.code}, message={self.message!r})"

    def to_dict(self) -> dict[str, Any]:
        """Build the wire body: code and message, plus details when set."""
        body: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


ErrorOption: TypeAlias = Callable[[HTTPError], None]


def with_details(details: Any) -> ErrorOption:
    """Attach a client-visible payload, replacing any previous details."""

    def apply(err: HTTPError) -> None:
        err.details = details

    return apply


def with_internal_error(internal_err: BaseException) -> ErrorOption:
    """Attach the underlying error for diagnostic logging only."""

    def apply(err: HTTPError) -> None:
        err._cause = internal_err

    return apply


def without_log() -> ErrorOption:
    """Suppress the dispatcher's diagnostic log line for this error."""

    def apply(err: HTTPError) -> None:
        err.should_log = False

    return apply


# =============================================================================
# Failure taxonomy
# =============================================================================


@dataclass(frozen=True, slots=True)
class RecognizedFailure:
    """A failure the handler shaped deliberately; serialized faithfully."""

    error: HTTPError


@dataclass(frozen=True, slots=True)
class OpaqueFailure:
    """Any other failure; its content never reaches the client."""

    cause: BaseException


Failure: TypeAlias = RecognizedFailure | OpaqueFailure


def classify_failure(err: BaseException) -> Failure:
    """Sort a returned failure into the recognized or opaque variant.

    Follows the explicit exception chain (``raise X from http_error``), so a
    middleware that annotates an HTTPError by chaining keeps it recognized.

    Args:
        err: Failure returned by a handler chain.

    Returns:
        RecognizedFailure if err (or an error it was raised from) is an
        HTTPError, otherwise OpaqueFailure wrapping err.
    """
    current: BaseException | None = err
    seen: set[int] = set()
    while current is not None and id(current) not in seen:
        if isinstance(current, HTTPError):
            return RecognizedFailure(current)
        seen.add(id(current))
        current = current.__cause__
    return OpaqueFailure(err)


class CompositionError(ValueError):
    """Raised when middleware layers are composed in an unsupported order."""
