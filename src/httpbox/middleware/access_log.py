"""Access-log middleware.

Emits one structured record per request, after the inner chain returns
(on success and on failure alike):

    message: "Access"
    req:     method, url, remote_addr, plus request_attrs(request)
    res:     status, body_size, plus response_attrs(observer)

The record is logged with ``extra={"req": {...}, "res": {...}}`` at the
configured level (default: ACCESS, between INFO and WARNING).

Placement:
    Only writes made inside the middleware's span are observed. Error
    responses are included when error dispatch runs inside the access log,
    which apply_middlewares guarantees (see middleware.base).
"""

from __future__ import annotations

__all__ = [
    "AccessLogConfig",
    "AccessLogMiddleware",
    "AccessRequestAttrsFunc",
    "AccessResponseAttrsFunc",
    "AccessSkipFunc",
    "access_log_middleware",
]

import logging
from typing import Any, Callable, Mapping, TypeAlias

from pydantic import BaseModel, ConfigDict, Field
from starlette.requests import Request

from httpbox.constants import ACCESS_LOG_MESSAGE, ACCESS_LOGGER_NAME, LEVEL_ACCESS
from httpbox.handler import Handler
from httpbox.middleware.base import LayerKind, Middleware
from httpbox.observer import ResponseObserver
from httpbox.response import ResponseWriter

AccessSkipFunc: TypeAlias = Callable[[Request], bool]
AccessRequestAttrsFunc: TypeAlias = Callable[[Request], Mapping[str, Any]]
AccessResponseAttrsFunc: TypeAlias = Callable[[ResponseObserver], Mapping[str, Any]]


def _default_access_logger() -> logging.Logger:
    return logging.getLogger(ACCESS_LOGGER_NAME)


class AccessLogConfig(BaseModel):
    """Access-log settings, fixed when the middleware is built.

    Attributes:
        logger: Destination logger (default: "httpbox.access").
        level: Level records are emitted at (default: ACCESS).
        skip: Requests for which it returns True are not instrumented.
        request_attrs: Extra attributes for the "req" group.
        response_attrs: Extra attributes for the "res" group.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    logger: logging.Logger = Field(default_factory=_default_access_logger)
    level: int = LEVEL_ACCESS
    skip: AccessSkipFunc | None = None
    request_attrs: AccessRequestAttrsFunc | None = None
    response_attrs: AccessResponseAttrsFunc | None = None


def _request_target(request: Request) -> str:
    url = request.url
    return f"{url.path}?{url.query}" if url.query else url.path


def _remote_addr(request: Request) -> str:
    client = request.client
    if client is None:
        return ""
    return f"{client.host}:{client.port}"


class AccessLogMiddleware(Middleware):
    """Log method, URL, status and body size of every request."""

    kind = LayerKind.ACCESS_LOG

    def __init__(self, config: AccessLogConfig | None = None) -> None:
        self.config = config or AccessLogConfig()

    def __repr__(self) -> str:
        return f"AccessLogMiddleware(logger={self.config.logger.name!r})"

    def wrap(self, next_handler: Handler) -> Handler:
        config = self.config

        async def logging_handler(w: ResponseWriter, r: Request) -> Exception | None:
            if config.skip is not None and config.skip(r):
                return await next_handler(w, r)

            observer = ResponseObserver(w)
            err = await next_handler(observer, r)

            if config.logger.isEnabledFor(config.level):
                config.logger.log(
                    config.level,
                    ACCESS_LOG_MESSAGE,
                    extra={
                        "req": self._request_group(r),
                        "res": self._response_group(observer),
                    },
                )
            return err

        return Handler(logging_handler)

    def _request_group(self, request: Request) -> dict[str, Any]:
        group: dict[str, Any] = {
            "method": request.method,
            "url": _request_target(request),
            "remote_addr": _remote_addr(request),
        }
        if self.config.request_attrs is not None:
            group.update(self.config.request_attrs(request))
        return group

    def _response_group(self, observer: ResponseObserver) -> dict[str, Any]:
        group: dict[str, Any] = {
            "status": observer.status_code,
            "body_size": observer.bytes_written,
        }
        if self.config.response_attrs is not None:
            group.update(self.config.response_attrs(observer))
        return group


def access_log_middleware(
    *,
    logger: logging.Logger | None = None,
    level: int = LEVEL_ACCESS,
    skip: AccessSkipFunc | None = None,
    request_attrs: AccessRequestAttrsFunc | None = None,
    response_attrs: AccessResponseAttrsFunc | None = None,
) -> AccessLogMiddleware:
    """Build an AccessLogMiddleware from keyword settings.

    Args:
        logger: Destination logger (default: "httpbox.access").
        level: Record level (default: ACCESS).
        skip: Predicate selecting requests that are not logged.
        request_attrs: Producer of extra "req" attributes.
        response_attrs: Producer of extra "res" attributes.

    Returns:
        Configured middleware.
    """
    config = AccessLogConfig(
        logger=logger or _default_access_logger(),
        level=level,
        skip=skip,
        request_attrs=request_attrs,
        response_attrs=response_attrs,
    )
    return AccessLogMiddleware(config)
