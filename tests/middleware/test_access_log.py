"""Unit tests for the access-log middleware.

Tests the default record fields, options (level, skip, extra attributes)
and that failures pass through unchanged.
"""

import logging

import pytest
from pydantic import ValidationError
from starlette.requests import Request

from httpbox.constants import LEVEL_ACCESS
from httpbox.errors import HTTPError
from httpbox.handler import Handler
from httpbox.middleware import AccessLogConfig, AccessLogMiddleware, access_log_middleware
from httpbox.observer import ResponseObserver
from httpbox.response import ResponseWriter, write_text
from httpbox.testing import ResponseRecorder, new_request


def text_handler(status: int, text: str) -> Handler:
    async def handler(w: ResponseWriter, r: Request) -> Exception | None:
        await write_text(w, status, text)
        return None

    return Handler(handler)


def access_records(captured_logger) -> list[logging.LogRecord]:
    return [r for r in captured_logger.records if r.getMessage() == "Access"]


class TestDefaultRecord:
    """Tests for the fields of a default access record."""

    @pytest.mark.asyncio
    async def test_default_fields(self, recorder: ResponseRecorder, captured_logger) -> None:
        """Record carries method, URL, remote address, status and body size."""
        chain = access_log_middleware(logger=captured_logger.logger).wrap(text_handler(200, "Hello, World!"))
        request = new_request("GET", "/test?foo=bar", remote_addr="192.168.1.1:1234")

        err = await chain(recorder, request)

        assert err is None
        [record] = access_records(captured_logger)
        assert record.levelno == LEVEL_ACCESS
        assert record.levelname == "ACCESS"
        assert record.req == {"method": "GET", "url": "/test?foo=bar", "remote_addr": "192.168.1.1:1234"}
        assert record.res == {"status": 200, "body_size": 13}

    @pytest.mark.asyncio
    async def test_url_without_query(self, recorder: ResponseRecorder, captured_logger) -> None:
        """URL is just the path when there is no query string."""
        chain = access_log_middleware(logger=captured_logger.logger).wrap(text_handler(200, "ok"))

        await chain(recorder, new_request("GET", "/plain"))

        assert access_records(captured_logger)[0].req["url"] == "/plain"

    @pytest.mark.asyncio
    async def test_error_status(self, recorder: ResponseRecorder, captured_logger) -> None:
        """Non-200 statuses and their body size are recorded."""
        chain = access_log_middleware(logger=captured_logger.logger).wrap(text_handler(404, "Not Found"))

        await chain(recorder, new_request("GET", "/missing"))

        assert access_records(captured_logger)[0].res == {"status": 404, "body_size": 9}

    @pytest.mark.asyncio
    async def test_implicit_200(self, recorder: ResponseRecorder, captured_logger) -> None:
        """A handler that only writes is logged as 200."""

        async def handler(w: ResponseWriter, r: Request) -> Exception | None:
            await w.write(b"no header")
            return None

        await access_log_middleware(logger=captured_logger.logger).wrap(Handler(handler))(
            recorder, new_request()
        )

        assert access_records(captured_logger)[0].res["status"] == 200

    @pytest.mark.asyncio
    async def test_multiple_writes(self, recorder: ResponseRecorder, captured_logger) -> None:
        """Body size is the sum of every write."""

        async def handler(w: ResponseWriter, r: Request) -> Exception | None:
            await w.write_header(200)
            await w.write(b"Hello")
            await w.write(b", ")
            await w.write(b"World!")
            return None

        await access_log_middleware(logger=captured_logger.logger).wrap(Handler(handler))(
            recorder, new_request()
        )

        assert access_records(captured_logger)[0].res["body_size"] == 13

    @pytest.mark.asyncio
    async def test_no_content(self, recorder: ResponseRecorder, captured_logger) -> None:
        """204 without a body logs size 0."""

        async def handler(w: ResponseWriter, r: Request) -> Exception | None:
            await w.write_header(204)
            return None

        await access_log_middleware(logger=captured_logger.logger).wrap(Handler(handler))(
            recorder, new_request("DELETE", "/items/1")
        )

        assert access_records(captured_logger)[0].res == {"status": 204, "body_size": 0}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"])
    async def test_methods(self, method: str, recorder: ResponseRecorder, captured_logger) -> None:
        """Every HTTP method is recorded as sent."""
        chain = access_log_middleware(logger=captured_logger.logger).wrap(text_handler(200, "ok"))

        await chain(recorder, new_request(method, "/"))

        assert access_records(captured_logger)[0].req["method"] == method

    @pytest.mark.asyncio
    async def test_missing_client(self, recorder: ResponseRecorder, captured_logger) -> None:
        """Remote address is empty when the server reports no client."""
        chain = access_log_middleware(logger=captured_logger.logger).wrap(text_handler(200, "ok"))

        await chain(recorder, new_request(remote_addr=None))

        assert access_records(captured_logger)[0].req["remote_addr"] == ""


class TestFailures:
    """Tests for failures passing through the access log."""

    @pytest.mark.asyncio
    async def test_failure_returned_unchanged_and_logged(
        self, recorder: ResponseRecorder, captured_logger
    ) -> None:
        """The wrapped handler's failure is returned as-is, and the request is still logged."""
        failure = HTTPError(500, "handler error")

        async def handler(w: ResponseWriter, r: Request) -> Exception | None:
            await write_text(w, 500, "Internal Server Error")
            return failure

        err = await access_log_middleware(logger=captured_logger.logger).wrap(Handler(handler))(
            recorder, new_request()
        )

        assert err is failure
        assert access_records(captured_logger)[0].res["status"] == 500

    @pytest.mark.asyncio
    async def test_undispatched_failure_logged_as_200(
        self, recorder: ResponseRecorder, captured_logger
    ) -> None:
        """With a direct wrap, an unwritten failure is observed with the default status."""

        async def handler(w: ResponseWriter, r: Request) -> Exception | None:
            return HTTPError(400, "bad")

        await access_log_middleware(logger=captured_logger.logger).wrap(Handler(handler))(
            recorder, new_request()
        )

        assert access_records(captured_logger)[0].res == {"status": 200, "body_size": 0}


class TestOptions:
    """Tests for access-log options."""

    @pytest.mark.asyncio
    async def test_custom_level(self, recorder: ResponseRecorder, captured_logger) -> None:
        """Records use the configured level."""
        chain = access_log_middleware(logger=captured_logger.logger, level=logging.INFO).wrap(
            text_handler(200, "ok")
        )

        await chain(recorder, new_request())

        assert access_records(captured_logger)[0].levelno == logging.INFO

    @pytest.mark.asyncio
    async def test_disabled_level_skips_record(self, recorder: ResponseRecorder, captured_logger) -> None:
        """Nothing is logged when the level is disabled, but the handler still runs."""
        captured_logger.logger.setLevel(logging.WARNING)
        chain = access_log_middleware(logger=captured_logger.logger, level=logging.INFO).wrap(
            text_handler(200, "ok")
        )

        await chain(recorder, new_request())

        assert access_records(captured_logger) == []
        assert recorder.text == "ok"

    @pytest.mark.asyncio
    async def test_skip(self, captured_logger) -> None:
        """Requests selected by skip are not logged."""
        chain = access_log_middleware(
            logger=captured_logger.logger,
            skip=lambda r: r.url.path == "/health",
        ).wrap(text_handler(200, "ok"))

        await chain(ResponseRecorder(), new_request("GET", "/health"))
        await chain(ResponseRecorder(), new_request("GET", "/api"))

        records = access_records(captured_logger)
        assert [r.req["url"] for r in records] == ["/api"]

    @pytest.mark.asyncio
    async def test_skipped_request_sees_raw_writer(self, recorder: ResponseRecorder, captured_logger) -> None:
        """Skipped requests are passed the writer unwrapped."""
        seen: list[ResponseWriter] = []

        async def handler(w: ResponseWriter, r: Request) -> Exception | None:
            seen.append(w)
            return None

        chain = access_log_middleware(logger=captured_logger.logger, skip=lambda r: True).wrap(Handler(handler))
        await chain(recorder, new_request())

        assert seen == [recorder]

    @pytest.mark.asyncio
    async def test_extra_attributes(self, recorder: ResponseRecorder, captured_logger) -> None:
        """request_attrs and response_attrs extend the groups."""

        def request_attrs(r: Request) -> dict:
            return {"user_agent": r.headers.get("user-agent", "")}

        def response_attrs(observer: ResponseObserver) -> dict:
            return {"content_type": observer.headers.get("content-type")}

        chain = access_log_middleware(
            logger=captured_logger.logger,
            request_attrs=request_attrs,
            response_attrs=response_attrs,
        ).wrap(text_handler(200, "ok"))

        await chain(recorder, new_request(headers={"User-Agent": "test-agent"}))

        [record] = access_records(captured_logger)
        assert record.req["user_agent"] == "test-agent"
        assert record.res["content_type"] == "text/plain; charset=utf-8"

    @pytest.mark.asyncio
    async def test_combined_options(self, captured_logger) -> None:
        """Level, skip and attributes work together."""
        chain = access_log_middleware(
            logger=captured_logger.logger,
            level=logging.WARNING,
            skip=lambda r: r.method == "OPTIONS",
            request_attrs=lambda r: {"trace_id": "t-1"},
        ).wrap(text_handler(201, "made"))

        await chain(ResponseRecorder(), new_request("OPTIONS", "/"))
        await chain(ResponseRecorder(), new_request("POST", "/items"))

        [record] = access_records(captured_logger)
        assert record.levelno == logging.WARNING
        assert record.req["trace_id"] == "t-1"
        assert record.res["status"] == 201


class TestAccessLogConfig:
    """Tests for AccessLogConfig."""

    def test_defaults(self) -> None:
        """Default config logs to httpbox.access at ACCESS level."""
        config = AccessLogConfig()

        assert config.logger.name == "httpbox.access"
        assert config.level == LEVEL_ACCESS
        assert config.skip is None

    def test_frozen(self) -> None:
        """Config cannot change after the middleware is built."""
        config = AccessLogConfig()

        with pytest.raises(ValidationError):
            config.level = logging.DEBUG  # type: ignore[misc]

    def test_middleware_from_config(self) -> None:
        """AccessLogMiddleware accepts a config object."""
        config = AccessLogConfig(level=logging.INFO)

        assert AccessLogMiddleware(config).config is config
