"""Centralized error dispatch.

Converts whatever failure a handler chain returns into exactly one JSON
error response:

1. HTTPError failures are serialized as-is.
2. Any other failure becomes a generic 500 ("Unknown error occurred") with
   the original kept as the internal cause, so backend details never reach
   the client.
3. If the details cannot be serialized, they are replaced with a fixed
   diagnostic string and the write is retried once.
4. Errors with should_log set produce one diagnostic log line.
"""

from __future__ import annotations

__all__ = ["dispatch_error", "resolve_http_error"]

import logging

from httpbox.constants import (
    ERROR_LOGGER_NAME,
    SERIALIZATION_FAILED_MESSAGE,
    UNKNOWN_ERROR_CODE,
    UNKNOWN_ERROR_MESSAGE,
)
from httpbox.errors import (
    HTTPError,
    OpaqueFailure,
    RecognizedFailure,
    classify_failure,
    with_details,
    with_internal_error,
    without_log,
)
from httpbox.response import ResponseWriter, encode_json, write_bytes


def resolve_http_error(err: BaseException) -> HTTPError:
    """Return the HTTPError to render for a failure.

    Args:
        err: Failure returned by a handler chain.

    Returns:
        The recognized HTTPError, or a generic 500 HTTPError whose cause is err.
    """
    match classify_failure(err):
        case RecognizedFailure(error=http_err):
            return http_err
        case OpaqueFailure(cause=cause):
            return HTTPError(
                UNKNOWN_ERROR_CODE,
                UNKNOWN_ERROR_MESSAGE,
                with_internal_error(cause),
            )


def _with_fallback_details(http_err: HTTPError) -> HTTPError:
    # A fresh instance keeps shared module-level errors untouched
    options = [with_details(SERIALIZATION_FAILED_MESSAGE)]
    if http_err.cause is not None:
        options.append(with_internal_error(http_err.cause))
    if not http_err.should_log:
        options.append(without_log())
    return HTTPError(http_err.code, http_err.message, *options)


async def dispatch_error(
    w: ResponseWriter,
    err: BaseException,
    logger: logging.Logger | None = None,
) -> None:
    """Render a failure as a JSON error response.

    Args:
        w: Writer for the current request.
        err: Failure returned by the handler chain.
        logger: Destination for diagnostic events (default: "httpbox.errors").
    """
    logger = logger or logging.getLogger(ERROR_LOGGER_NAME)
    http_err = resolve_http_error(err)

    try:
        body = encode_json(http_err.to_dict())
    except (TypeError, ValueError) as exc:
        original = http_err
        http_err = _with_fallback_details(original)
        logger.error(
            SERIALIZATION_FAILED_MESSAGE,
            extra={"error": exc, "original_error": original.cause},
        )
        # Fallback details are a plain string, so this encode cannot fail
        body = encode_json(http_err.to_dict())

    await write_bytes(w, http_err.code, "application/json", body)

    if http_err.should_log:
        logger.error(
            http_err.message,
            extra={"code": http_err.code, "details": http_err.details, "error": http_err.cause},
        )
