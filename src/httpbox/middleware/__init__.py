"""Middleware composition and built-in middlewares.

- base: Middleware abstraction, composition order and placement rules
- access_log: per-request structured access logging
"""

from httpbox.middleware.access_log import (
    AccessLogConfig,
    AccessLogMiddleware,
    AccessRequestAttrsFunc,
    AccessResponseAttrsFunc,
    AccessSkipFunc,
    access_log_middleware,
)
from httpbox.middleware.base import (
    ErrorDispatchMiddleware,
    FuncMiddleware,
    LayerKind,
    Middleware,
    MiddlewareLike,
    apply_middlewares,
    middleware,
)

__all__ = [
    "AccessLogConfig",
    "AccessLogMiddleware",
    "AccessRequestAttrsFunc",
    "AccessResponseAttrsFunc",
    "AccessSkipFunc",
    "ErrorDispatchMiddleware",
    "FuncMiddleware",
    "LayerKind",
    "Middleware",
    "MiddlewareLike",
    "access_log_middleware",
    "apply_middlewares",
    "middleware",
]
