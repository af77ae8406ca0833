"""Response-observing writer used by the access-log middleware.

ResponseObserver decorates a ResponseWriter and records the committed status
code and the cumulative number of body bytes, forwarding every operation to
the wrapped writer unchanged.
"""

from __future__ import annotations

__all__ = ["ResponseObserver"]

from http import HTTPStatus

from starlette.datastructures import MutableHeaders

from httpbox.response import ResponseWriter


class ResponseObserver:
    """ResponseWriter decorator that tracks status code and body size.

    The status is fixed at the first commit: an explicit write_header, or the
    implicit 200 of a first body write. Later write_header calls are still
    forwarded but do not change the observed status. If the wrapped writer
    was already committed (it exposes ``committed`` and ``status_code``), the
    status it sent is recorded instead.

    Attributes:
        status_code: Committed status (200 until something else is committed).
        bytes_written: Sum of the sizes reported by every write.
    """

    def __init__(self, writer: ResponseWriter) -> None:
        self._writer = writer
        self._status_code = int(HTTPStatus.OK)
        self._committed = False
        self._bytes_written = 0

    @property
    def headers(self) -> MutableHeaders:
        return self._writer.headers

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def bytes_written(self) -> int:
        return self._bytes_written

    @property
    def committed(self) -> bool:
        return self._committed

    def _record_commit(self, status_code: int) -> None:
        if self._committed:
            return
        self._committed = True
        # An outer layer may already have sent the status line
        if getattr(self._writer, "committed", False):
            sent = getattr(self._writer, "status_code", None)
            if sent is not None:
                status_code = sent
        self._status_code = int(status_code)

    async def write_header(self, status_code: int) -> None:
        self._record_commit(status_code)
        await self._writer.write_header(status_code)

    async def write(self, data: bytes) -> int:
        self._record_commit(HTTPStatus.OK)
        size = await self._writer.write(data)
        self._bytes_written += size
        return size

    def unwrap(self) -> ResponseWriter:
        """Return the wrapped writer."""
        return self._writer
