"""Handlers: units of request processing that may fail.

A handler is an ``async def handler(w, r)`` that writes a response through
``w`` and returns ``None`` on success or an exception on failure. Wrapping it
in Handler makes raising equivalent to returning, so every layer of a
middleware chain sees failures as return values.

Usage:
    @Handler
    async def hello(w: ResponseWriter, r: Request) -> Exception | None:
        name = path_param(r, "name").string()
        if name == "bob":
            return HTTPError(400, "Bob is banned")
        await write_text(w, 200, f"Hello, {name}!")
        return None

    app = hello.with_middlewares(access_log_middleware()).asgi()
"""

from __future__ import annotations

__all__ = ["Handler", "HandlerFunc", "adapt_handler"]

import functools
from typing import TYPE_CHECKING, Awaitable, Callable, TypeAlias

from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.types import ASGIApp, Message

from httpbox.errors import HTTPError, with_internal_error
from httpbox.response import ResponseWriter

if TYPE_CHECKING:
    import logging

    from httpbox.middleware.base import MiddlewareLike
    from httpbox.server import HandlerApp

HandlerFunc: TypeAlias = Callable[[ResponseWriter, Request], Awaitable[Exception | None]]


class Handler:
    """Callable wrapper around a handler function.

    Calling a Handler never raises an ``Exception``: anything the wrapped
    function raises is returned as the failure instead. ``BaseException``
    subclasses such as task cancellation still propagate.
    """

    def __init__(self, func: HandlerFunc | Handler) -> None:
        if isinstance(func, Handler):
            func = func.func
        self.func: HandlerFunc = func
        functools.update_wrapper(self, func, updated=())

    async def __call__(self, w: ResponseWriter, r: Request) -> Exception | None:
        try:
            return await self.func(w, r)
        except Exception as exc:
            return exc

    def __repr__(self) -> str:
        name = getattr(self.func, "__qualname__", repr(self.func))
        return f"Handler({name})"

    def with_middlewares(
        self,
        *middlewares: MiddlewareLike,
        error_logger: logging.Logger | None = None,
    ) -> Handler:
        """Wrap this handler so the first middleware listed runs outermost."""
        from httpbox.middleware.base import apply_middlewares

        return apply_middlewares(self, *middlewares, error_logger=error_logger)

    def asgi(self, *, error_logger: logging.Logger | None = None) -> HandlerApp:
        """Expose this handler as an ASGI application."""
        from httpbox.server import HandlerApp

        return HandlerApp(self, error_logger=error_logger)


def adapt_handler(app: ASGIApp) -> Handler:
    """Wrap an ASGI application as a Handler.

    The application's send messages are replayed onto the handler's writer,
    so status and body writes still pass through any observing writer.
    A Starlette HTTPException raised by the application is returned as an
    HTTPError with the same status and detail; other exceptions
    become opaque failures.

    Args:
        app: ASGI application, such as a Starlette Router.

    Returns:
        Handler that runs the application for its side effects.
    """

    async def adapted(w: ResponseWriter, r: Request) -> Exception | None:
        async def send(message: Message) -> None:
            if message["type"] == "http.response.start":
                for key, value in message.get("headers", []):
                    w.headers.append(key.decode("latin-1"), value.decode("latin-1"))
                await w.write_header(message["status"])
            elif message["type"] == "http.response.body":
                body = message.get("body", b"")
                if body:
                    await w.write(body)

        try:
            await app(r.scope, r.receive, send)
        except StarletteHTTPException as exc:
            for key, value in (exc.headers or {}).items():
                w.headers[key] = value
            return HTTPError(exc.status_code, exc.detail, with_internal_error(exc))
        return None

    return Handler(adapted)
