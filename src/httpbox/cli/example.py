"""Example application served by ``httpbox serve``.

Routes:
    GET /hello/{name}  "Hello, <name>!" as text/plain; "bob" is refused
                       with a 400 error carrying details
    GET /health        "ok"; not access-logged
"""

from __future__ import annotations

__all__ = ["create_example_app", "hello", "health"]

from starlette.requests import Request
from starlette.routing import Route, Router

from httpbox.config import ServerConfig
from httpbox.errors import HTTPError, with_details
from httpbox.handler import Handler, adapt_handler
from httpbox.middleware.access_log import access_log_middleware
from httpbox.request import path_param
from httpbox.response import ResponseWriter, write_text
from httpbox.server import HandlerApp

HEALTH_PATH = "/health"


@Handler
async def hello(w: ResponseWriter, r: Request) -> Exception | None:
    name = path_param(r, "name").string()

    if name == "bob":
        return HTTPError(400, "Bob is banned", with_details("Please contact the HR"))

    await write_text(w, 200, f"Hello, {name}!")
    return None


@Handler
async def health(w: ResponseWriter, r: Request) -> Exception | None:
    await write_text(w, 200, "ok")
    return None


def _skip_health(request: Request) -> bool:
    return request.url.path == HEALTH_PATH


def create_example_app(config: ServerConfig | None = None) -> HandlerApp:
    """Build the example ASGI application.

    Each route is a Handler exposed as ASGI (so it renders its own failures);
    the router is adapted back into a Handler and wrapped with access logging.

    Args:
        config: Server settings; only the logging section is used here.

    Returns:
        ASGI application ready for uvicorn.
    """
    config = config or ServerConfig()

    router = Router(
        routes=[
            Route("/hello/{name}", hello.asgi(), methods=["GET"]),
            Route(HEALTH_PATH, health.asgi(), methods=["GET"]),
        ]
    )

    handler = adapt_handler(router).with_middlewares(
        access_log_middleware(level=config.logging.access_level_number, skip=_skip_health),
    )
    return handler.asgi()
