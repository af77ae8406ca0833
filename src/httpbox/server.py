"""ASGI bridge for handlers.

HandlerApp turns a Handler into an ASGI application: it builds the request
and writer for each HTTP connection, runs the handler chain, renders any
failure that escapes the chain through the centralized dispatcher, and
closes the response.

Usage:
    app = HandlerApp(handler)
    uvicorn.run(app, host="127.0.0.1", port=8080)
"""

from __future__ import annotations

__all__ = ["HandlerApp"]

import logging

from starlette.requests import Request
from starlette.types import Receive, Scope, Send

from httpbox.constants import ERROR_LOGGER_NAME, ERROR_LOGGER_SCOPE_KEY
from httpbox.dispatch import dispatch_error
from httpbox.handler import Handler, HandlerFunc
from httpbox.response import ASGIResponseWriter


class HandlerApp:
    """ASGI application serving a single handler chain.

    The chain is immutable once built, so one HandlerApp can serve any
    number of concurrent requests.
    """

    def __init__(
        self,
        handler: Handler | HandlerFunc,
        *,
        error_logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the application.

        Args:
            handler: Outermost handler of the chain.
            error_logger: Destination for dispatcher diagnostics (default: "httpbox.errors").
                Also used by error-dispatch layers in the chain that were
                built without a logger.
        """
        self.handler = handler if isinstance(handler, Handler) else Handler(handler)
        self.error_logger = error_logger or logging.getLogger(ERROR_LOGGER_NAME)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return
        if scope["type"] != "http":
            raise RuntimeError(f"Unsupported ASGI scope type: {scope['type']}")

        # Dispatch layers without their own logger report to this app's logger
        scope = {**scope, ERROR_LOGGER_SCOPE_KEY: self.error_logger}
        request = Request(scope, receive)
        writer = ASGIResponseWriter(send)

        err = await self.handler(writer, request)
        if err is not None:
            await dispatch_error(writer, err, self.error_logger)

        await writer.finish()

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return
