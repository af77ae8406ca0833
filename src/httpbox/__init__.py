"""httpbox: error-returning HTTP handlers, middleware composition and access logging.

Handlers are ``async def (w, r)`` functions that return ``None`` or an
exception. Failures are rendered by a centralized dispatcher as
``{"code", "message", "details"}`` JSON; anything that is not an HTTPError
becomes a generic 500 so internal details never leak.

Example:
    from httpbox import Handler, HTTPError, access_log_middleware, path_param, write_text

    @Handler
    async def hello(w, r):
        name = path_param(r, "name").string()
        if name == "bob":
            return HTTPError(400, "Bob is banned")
        await write_text(w, 200, f"Hello, {name}!")
        return None

    app = hello.with_middlewares(access_log_middleware()).asgi()
"""

__version__ = "1.0.0"

from httpbox.constants import LEVEL_ACCESS
from httpbox.dispatch import dispatch_error
from httpbox.errors import (
    CompositionError,
    HTTPError,
    OpaqueFailure,
    RecognizedFailure,
    classify_failure,
    with_details,
    with_internal_error,
    without_log,
)
from httpbox.handler import Handler, HandlerFunc, adapt_handler
from httpbox.middleware import (
    AccessLogConfig,
    AccessLogMiddleware,
    ErrorDispatchMiddleware,
    FuncMiddleware,
    LayerKind,
    Middleware,
    access_log_middleware,
    apply_middlewares,
    middleware,
)
from httpbox.observer import ResponseObserver
from httpbox.request import Param, path_param, query_param, read_bytes, read_json, read_xml
from httpbox.response import (
    ASGIResponseWriter,
    ResponseWriter,
    write_bytes,
    write_json,
    write_text,
    write_xml,
)
from httpbox.server import HandlerApp

__all__ = [
    "__version__",
    "ASGIResponseWriter",
    "AccessLogConfig",
    "AccessLogMiddleware",
    "CompositionError",
    "ErrorDispatchMiddleware",
    "FuncMiddleware",
    "HTTPError",
    "Handler",
    "HandlerApp",
    "HandlerFunc",
    "LEVEL_ACCESS",
    "LayerKind",
    "Middleware",
    "OpaqueFailure",
    "Param",
    "RecognizedFailure",
    "ResponseObserver",
    "ResponseWriter",
    "access_log_middleware",
    "adapt_handler",
    "apply_middlewares",
    "classify_failure",
    "dispatch_error",
    "middleware",
    "path_param",
    "query_param",
    "read_bytes",
    "read_json",
    "read_xml",
    "with_details",
    "with_internal_error",
    "without_log",
    "write_bytes",
    "write_json",
    "write_text",
    "write_xml",
]
