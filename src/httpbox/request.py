"""Request body decoding and parameter helpers.

Every helper fails with an HTTPError carrying status 400, so handlers can
let the error propagate (raise or return it) without translating it.

Body sources accepted by the readers:
- starlette Request (body is streamed)
- async iterable of bytes chunks
- bytes / bytearray
- sync file-like object with read()
"""

from __future__ import annotations

__all__ = [
    "BodySource",
    "Param",
    "path_param",
    "query_param",
    "read_bytes",
    "read_json",
    "read_xml",
]

import json
import xml.etree.ElementTree as ET
from typing import IO, Any, AsyncIterable, TypeAlias, TypeVar, overload

from pydantic import TypeAdapter, ValidationError
from starlette.requests import ClientDisconnect, Request

from httpbox.constants import (
    INVALID_JSON_MESSAGE,
    INVALID_XML_MESSAGE,
    UNREADABLE_BODY_MESSAGE,
)
from httpbox.errors import HTTPError, with_details, with_internal_error

T = TypeVar("T")

BodySource: TypeAlias = Request | AsyncIterable[bytes] | bytes | bytearray | IO[bytes]

_TRUE_VALUES = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSE_VALUES = frozenset({"0", "false", "f", "no", "n", "off"})


# =============================================================================
# Body readers
# =============================================================================


async def _collect(source: BodySource) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if isinstance(source, Request):
        return await source.body()
    if hasattr(source, "__aiter__"):
        chunks = [chunk async for chunk in source]
        return b"".join(chunks)
    return source.read()


def _bad_request(message: str, details: Any, cause: BaseException) -> HTTPError:
    return HTTPError(400, message, with_details(details), with_internal_error(cause))


async def read_bytes(source: BodySource) -> bytes:
    """Read the whole body.

    Raises:
        HTTPError: 400 "unable to read body" if the stream fails.
    """
    try:
        return await _collect(source)
    except (OSError, RuntimeError, ClientDisconnect) as exc:
        raise _bad_request(UNREADABLE_BODY_MESSAGE, str(exc) or type(exc).__name__, exc) from exc


@overload
async def read_json(source: BodySource) -> Any: ...
@overload
async def read_json(source: BodySource, type_: type[T]) -> T: ...


async def read_json(source: BodySource, type_: Any = Any) -> Any:
    """Decode a JSON body, optionally validating it as type_.

    Args:
        source: Body source.
        type_: Target type (pydantic model, dataclass, TypedDict, builtin...).

    Returns:
        The decoded value.

    Raises:
        HTTPError: 400 "invalid JSON body" with the validation errors as
            details, or 400 "unable to read body".
    """
    data = await read_bytes(source)
    try:
        return TypeAdapter(type_).validate_json(data)
    except ValidationError as exc:
        raise _bad_request(INVALID_JSON_MESSAGE, json.loads(exc.json(include_url=False)), exc) from exc


async def read_xml(source: BodySource, type_: Any = None) -> Any:
    """Decode an XML body.

    Without type_, the parsed root Element is returned. With type_, the
    root's child elements are collected into a ``{tag: text}`` mapping and
    validated as type_.

    Raises:
        HTTPError: 400 "invalid XML body" or 400 "unable to read body".
    """
    data = await read_bytes(source)
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise _bad_request(INVALID_XML_MESSAGE, str(exc), exc) from exc

    if type_ is None:
        return root

    fields = {child.tag: child.text for child in root}
    try:
        return TypeAdapter(type_).validate_python(fields)
    except ValidationError as exc:
        raise _bad_request(INVALID_XML_MESSAGE, json.loads(exc.json(include_url=False)), exc) from exc


# =============================================================================
# Path and query parameters
# =============================================================================


class Param:
    """A named request parameter with typed accessors.

    Accessors return the default when the parameter is absent; without a
    default, a missing or unparsable value raises HTTPError(400).
    """

    def __init__(self, name: str, value: str | None, source: str) -> None:
        self.name = name
        self.value = value
        self.source = source

    def __repr__(self) -> str:
        return f"Param({self.source}:{self.name}={self.value!r})"

    @property
    def present(self) -> bool:
        return self.value is not None

    def _missing(self) -> HTTPError:
        return HTTPError(400, f"missing {self.source} parameter '{self.name}'")

    def _invalid(self, expected: str) -> HTTPError:
        return HTTPError(
            400,
            f"invalid {self.source} parameter '{self.name}'",
            with_details(f"expected {expected}, got {self.value!r}"),
        )

    def string(self, default: str | None = None) -> str:
        if self.value is None:
            if default is None:
                raise self._missing()
            return default
        return self.value

    def integer(self, default: int | None = None) -> int:
        if self.value is None:
            if default is None:
                raise self._missing()
            return default
        try:
            return int(self.value)
        except ValueError:
            raise self._invalid("an integer") from None

    def number(self, default: float | None = None) -> float:
        if self.value is None:
            if default is None:
                raise self._missing()
            return default
        try:
            return float(self.value)
        except ValueError:
            raise self._invalid("a number") from None

    def boolean(self, default: bool | None = None) -> bool:
        if self.value is None:
            if default is None:
                raise self._missing()
            return default
        lowered = self.value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise self._invalid("a boolean")


def path_param(request: Request, name: str) -> Param:
    """Return the URL path parameter captured by the router."""
    value = request.path_params.get(name)
    return Param(name, None if value is None else str(value), "path")


def query_param(request: Request, name: str) -> Param:
    """Return the first query-string value for name."""
    return Param(name, request.query_params.get(name), "query")
