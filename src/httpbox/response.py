"""Response sink abstraction and response-writing helpers.

The ResponseWriter protocol is the mutable sink handlers write to:
set headers, commit a status once, then write body bytes any number of times.
ASGIResponseWriter implements it over an ASGI ``send`` callable.

Writing helpers encode the payload before committing headers, so an
encoding failure leaves the response untouched and can be retried.
"""

from __future__ import annotations

__all__ = [
    "ASGIResponseWriter",
    "ResponseWriter",
    "encode_json",
    "write_bytes",
    "write_json",
    "write_text",
    "write_xml",
]

import logging
import xml.etree.ElementTree as ET
from http import HTTPStatus
from typing import Any, Protocol, runtime_checkable

from pydantic import TypeAdapter
from starlette.datastructures import MutableHeaders
from starlette.types import Send

from httpbox.constants import RESPONSE_LOGGER_NAME

logger = logging.getLogger(RESPONSE_LOGGER_NAME)

_JSON_ADAPTER: TypeAdapter[Any] = TypeAdapter(Any)


@runtime_checkable
class ResponseWriter(Protocol):
    """Mutable response sink passed to every handler."""

    @property
    def headers(self) -> MutableHeaders:
        """Response headers; only effective before the status is committed."""
        ...

    async def write_header(self, status_code: int) -> None:
        """Commit the status code and headers."""
        ...

    async def write(self, data: bytes) -> int:
        """Write body bytes, committing a 200 status first if needed."""
        ...


class ASGIResponseWriter:
    """ResponseWriter backed by an ASGI ``send`` callable.

    The first write_header (or the first write) sends
    ``http.response.start``; body writes are streamed as
    ``http.response.body`` chunks until finish() closes the stream.
    """

    def __init__(self, send: Send) -> None:
        self._send = send
        self._headers = MutableHeaders()
        self._status_code: int | None = None
        self._finished = False

    @property
    def headers(self) -> MutableHeaders:
        return self._headers

    @property
    def committed(self) -> bool:
        """True once the status line and headers have been sent."""
        return self._status_code is not None

    @property
    def status_code(self) -> int | None:
        """Status sent to the client, or None before the commit."""
        return self._status_code

    async def write_header(self, status_code: int) -> None:
        if self._status_code is not None:
            logger.warning(
                {
                    "event": "superfluous_write_header",
                    "message": f"Ignoring status {status_code}, status {self._status_code} already sent",
                }
            )
            return
        self._status_code = int(status_code)
        await self._send(
            {
                "type": "http.response.start",
                "status": self._status_code,
                "headers": self._headers.raw,
            }
        )

    async def write(self, data: bytes) -> int:
        if self._finished:
            raise RuntimeError("response already finished")
        if self._status_code is None:
            await self.write_header(HTTPStatus.OK)
        if data:
            await self._send({"type": "http.response.body", "body": bytes(data), "more_body": True})
        return len(data)

    async def finish(self) -> None:
        """Close the body stream, committing a 200 status if nothing was written."""
        if self._finished:
            return
        if self._status_code is None:
            await self.write_header(HTTPStatus.OK)
        self._finished = True
        await self._send({"type": "http.response.body", "body": b"", "more_body": False})


# =============================================================================
# Writing helpers
# =============================================================================


def encode_json(value: Any) -> bytes:
    """Encode value as compact JSON.

    Uses pydantic's serializer so models, dataclasses and datetimes encode
    without custom hooks.

    Raises:
        ValueError: If value (or something nested in it) cannot be serialized.
    """
    return _JSON_ADAPTER.dump_json(value)


async def write_bytes(w: ResponseWriter, status_code: int, content_type: str, data: bytes) -> None:
    """Write a complete response with the given status and content type."""
    w.headers["content-type"] = content_type
    await w.write_header(status_code)
    await w.write(data)


async def write_text(w: ResponseWriter, status_code: int, text: str) -> None:
    await write_bytes(w, status_code, "text/plain; charset=utf-8", text.encode("utf-8"))


async def write_json(w: ResponseWriter, status_code: int, value: Any) -> None:
    """Serialize value to JSON and write it as the response.

    Encoding happens before anything is sent, so a failure here leaves the
    response uncommitted.

    Args:
        w: Response writer.
        status_code: HTTP status to commit.
        value: JSON-serializable value.

    Raises:
        ValueError: If value cannot be serialized.
    """
    data = encode_json(value)
    await write_bytes(w, status_code, "application/json", data)


async def write_xml(w: ResponseWriter, status_code: int, document: ET.Element | str | bytes) -> None:
    """Write an XML document (an Element or pre-rendered text) as the response."""
    if isinstance(document, ET.Element):
        data = ET.tostring(document, encoding="utf-8", xml_declaration=True)
    elif isinstance(document, str):
        data = document.encode("utf-8")
    else:
        data = document
    await write_bytes(w, status_code, "application/xml; charset=utf-8", data)
