"""Middleware composition.

A middleware transforms a Handler into a new Handler that wraps it. The
wrapping handler decides on every request whether to call the next layer,
and may inspect or replace the failure it returns.

Composition order: ``apply_middlewares(h, m0, m1, m2)`` builds
``m0(m1(m2(h)))``, so the first middleware listed sees the request first and
the response last.

Placement rule for error dispatch and access logging:
    The access log only sees error responses written inside its span. An
    access-log layer may therefore never sit inside an error-dispatch layer
    (CompositionError), and when a chain has an access-log layer but no
    error-dispatch layer, one is inserted directly inside the innermost
    access-log layer.
"""

from __future__ import annotations

__all__ = [
    "ErrorDispatchMiddleware",
    "FuncMiddleware",
    "LayerKind",
    "Middleware",
    "MiddlewareLike",
    "apply_middlewares",
    "middleware",
]

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, ClassVar, TypeAlias

from starlette.requests import Request

from httpbox.constants import ERROR_LOGGER_NAME, ERROR_LOGGER_SCOPE_KEY
from httpbox.dispatch import dispatch_error
from httpbox.errors import CompositionError
from httpbox.handler import Handler, HandlerFunc
from httpbox.response import ResponseWriter


class LayerKind(str, Enum):
    """Role of a middleware layer, used to check composition order."""

    GENERIC = "generic"
    ACCESS_LOG = "access_log"
    ERROR_DISPATCH = "error_dispatch"


class Middleware(ABC):
    """Transform wrapping a handler with cross-cutting behavior."""

    kind: ClassVar[LayerKind] = LayerKind.GENERIC

    @abstractmethod
    def wrap(self, next_handler: Handler) -> Handler:
        """Return a handler that wraps next_handler."""

    def __call__(self, next_handler: Handler) -> Handler:
        return self.wrap(next_handler)


class FuncMiddleware(Middleware):
    """Middleware backed by a plain ``def mw(next_handler) -> handler`` function."""

    def __init__(self, func: Callable[[Handler], Handler | HandlerFunc]) -> None:
        self.func = func

    def wrap(self, next_handler: Handler) -> Handler:
        return Handler(self.func(next_handler))

    def __repr__(self) -> str:
        return f"FuncMiddleware({getattr(self.func, '__qualname__', self.func)!r})"


MiddlewareLike: TypeAlias = Middleware | Callable[[Handler], Handler | HandlerFunc]


def middleware(func: Callable[[Handler], Handler | HandlerFunc]) -> Middleware:
    """Decorator turning a wrapping function into a Middleware.

    Example:
        @middleware
        def require_json(next_handler: Handler) -> HandlerFunc:
            async def wrapped(w: ResponseWriter, r: Request) -> Exception | None:
                if r.headers.get("content-type") != "application/json":
                    return HTTPError(415, "expected a JSON body")
                return await next_handler(w, r)

            return wrapped
    """
    return FuncMiddleware(func)


class ErrorDispatchMiddleware(Middleware):
    """Render failures from the wrapped chain as JSON error responses.

    The wrapping handler always reports success to outer layers: the failure
    has already been written to the client.

    Without a logger, diagnostics go to the error logger of the HandlerApp
    serving the request, or to "httpbox.errors" outside of one.
    """

    kind = LayerKind.ERROR_DISPATCH

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger

    def _logger_for(self, request: Request) -> logging.Logger:
        if self.logger is not None:
            return self.logger
        return request.scope.get(ERROR_LOGGER_SCOPE_KEY) or logging.getLogger(ERROR_LOGGER_NAME)

    def wrap(self, next_handler: Handler) -> Handler:
        async def dispatching(w: ResponseWriter, r: Request) -> Exception | None:
            err = await next_handler(w, r)
            if err is not None:
                await dispatch_error(w, err, self._logger_for(r))
            return None

        return Handler(dispatching)


def _as_middleware(candidate: MiddlewareLike) -> Middleware:
    if isinstance(candidate, Middleware):
        return candidate
    if callable(candidate):
        return FuncMiddleware(candidate)
    raise TypeError(f"Expected a middleware, got {type(candidate).__name__}")


def _arrange(layers: list[Middleware], error_logger: logging.Logger | None = None) -> list[Middleware]:
    """Check the access-log/error-dispatch order, inserting a dispatcher if missing."""
    access_positions = [i for i, layer in enumerate(layers) if layer.kind is LayerKind.ACCESS_LOG]
    dispatch_positions = [i for i, layer in enumerate(layers) if layer.kind is LayerKind.ERROR_DISPATCH]
    if not access_positions:
        return layers

    if dispatch_positions:
        if access_positions[-1] > dispatch_positions[0]:
            raise CompositionError(
                "Access-log middleware must wrap error-dispatch middleware: "
                f"{layers[access_positions[-1]]!r} is listed after {layers[dispatch_positions[0]]!r}"
            )
        return layers

    innermost_access = access_positions[-1]
    return [
        *layers[: innermost_access + 1],
        ErrorDispatchMiddleware(error_logger),
        *layers[innermost_access + 1 :],
    ]


def apply_middlewares(
    handler: Handler | HandlerFunc,
    *middlewares: MiddlewareLike,
    error_logger: logging.Logger | None = None,
) -> Handler:
    """Compose middlewares around handler, first listed outermost.

    Composition only allocates wrappers: applying a different list to the
    same handler yields an independent chain.

    Args:
        handler: Innermost handler.
        *middlewares: Middlewares, outermost first.
        error_logger: Logger for an error-dispatch layer inserted by the
            placement rule (default: the serving HandlerApp's error logger).

    Returns:
        Handler equivalent to ``middlewares[0](middlewares[1](...(handler)))``.

    Raises:
        CompositionError: If an access-log layer is listed inside an
            error-dispatch layer.
    """
    layers = _arrange([_as_middleware(m) for m in middlewares], error_logger)

    wrapped = handler if isinstance(handler, Handler) else Handler(handler)
    for layer in reversed(layers):
        wrapped = Handler(layer.wrap(wrapped))
    return wrapped
