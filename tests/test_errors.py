"""Tests for remote-call failure handling."""

import asyncio

import httpx
import pytest

from jinoca.communication.errors import call_or_fallback, describe_error
from jinoca.llm.provider import CompletionError, ImageGenError


def _make_http_error(status_code: int) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "https://api.example.com/v1/chat")
    response = httpx.Response(status_code, request=request)
    return httpx.HTTPStatusError(f"{status_code} error", request=request, response=response)


class TestDescribeError:

    def test_typed_error(self):
        assert describe_error(CompletionError("API error (500): boom")) == "API error (500): boom"

    def test_typed_error_names_cause(self):
        try:
            try:
                raise httpx.ConnectError("refused")
            except httpx.ConnectError as e:
                raise ImageGenError("ConnectError: refused") from e
        except ImageGenError as err:
            assert describe_error(err).endswith("[ConnectError]")

    def test_http_status(self):
        assert describe_error(_make_http_error(503)) == "HTTP 503 from api.example.com"

    def test_connect_error(self):
        assert "connect" in describe_error(httpx.ConnectError("refused")).lower()

    def test_timeouts(self):
        assert describe_error(httpx.ReadTimeout("slow")) == "Request timed out"
        assert describe_error(asyncio.TimeoutError()) == "Request timed out"

    def test_payload_shape(self):
        assert "Unexpected response format" in describe_error(KeyError("choices"))

    def test_fallback_includes_type(self):
        assert describe_error(ValueError("bad")) == "ValueError: bad"


class TestCallOrFallback:

    @pytest.mark.asyncio
    async def test_success(self):
        async def ok():
            return "resposta"

        assert await call_or_fallback(ok, "fallback", "test") == "resposta"

    @pytest.mark.asyncio
    async def test_failure_returns_fallback(self, caplog):
        calls = []

        async def boom():
            calls.append(1)
            raise CompletionError("API error (500)")

        result = await call_or_fallback(boom, "fallback", "Completion API")
        assert result == "fallback"
        assert calls == [1]
        assert "Completion API failed" in caplog.text

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        async def cancelled():
            raise asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await call_or_fallback(cancelled, "fallback", "test")
