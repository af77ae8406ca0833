"""Helpers for unit testing handlers and middlewares without a server.

Usage:
    recorder = ResponseRecorder()
    request = new_request("GET", "/hello/alice", path_params={"name": "alice"})

    err = await hello(recorder, request)

    assert err is None
    assert recorder.status_code == 200
    assert recorder.text == "Hello, alice!"
"""

from __future__ import annotations

__all__ = ["ResponseRecorder", "new_request"]

import json
from http import HTTPStatus
from typing import Any, Mapping
from urllib.parse import urlsplit

from starlette.datastructures import MutableHeaders
from starlette.requests import Request
from starlette.types import Message


class ResponseRecorder:
    """In-memory ResponseWriter that records what a handler writes.

    Attributes:
        status_code: Committed status (200 until something else is committed).
        body: Every byte written, in order.
        header_writes: Number of write_header calls, including ignored ones.
    """

    def __init__(self) -> None:
        self._headers = MutableHeaders()
        self.status_code = int(HTTPStatus.OK)
        self.body = bytearray()
        self.committed = False
        self.header_writes = 0

    @property
    def headers(self) -> MutableHeaders:
        return self._headers

    async def write_header(self, status_code: int) -> None:
        self.header_writes += 1
        if self.committed:
            return
        self.status_code = int(status_code)
        self.committed = True

    async def write(self, data: bytes) -> int:
        if not self.committed:
            await self.write_header(HTTPStatus.OK)
        self.body.extend(data)
        return len(data)

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    def json(self) -> Any:
        return json.loads(self.body)


def new_request(
    method: str = "GET",
    target: str = "/",
    *,
    body: bytes = b"",
    headers: Mapping[str, str] | None = None,
    remote_addr: str | None = "192.0.2.1:1234",
    path_params: Mapping[str, Any] | None = None,
) -> Request:
    """Build a Starlette Request from a synthetic HTTP scope.

    Args:
        method: HTTP method.
        target: Request target, path plus optional query string ("/a?b=c").
        body: Request body, delivered in a single chunk.
        headers: Request headers.
        remote_addr: Client address as "host:port", or None for no client.
        path_params: Values a router would have captured from the path.

    Returns:
        Request whose body can be read once.
    """
    parts = urlsplit(target)
    client = None
    if remote_addr is not None:
        host, _, port = remote_addr.rpartition(":")
        client = (host, int(port))

    raw_headers = [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in (headers or {}).items()]
    scope: dict[str, Any] = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method.upper(),
        "scheme": "http",
        "server": ("testserver", 80),
        "client": client,
        "root_path": "",
        "path": parts.path or "/",
        "raw_path": (parts.path or "/").encode("latin-1"),
        "query_string": parts.query.encode("latin-1"),
        "headers": raw_headers,
        "path_params": dict(path_params or {}),
    }

    delivered = False

    async def receive() -> Message:
        nonlocal delivered
        if delivered:
            return {"type": "http.disconnect"}
        delivered = True
        return {"type": "http.request", "body": body, "more_body": False}

    return Request(scope, receive)
