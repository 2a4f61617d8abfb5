"""Tests for error classification and retry policy."""

import httpx
import openai
import pytest

from cardgen.errors.exceptions import UpstreamError
from cardgen.errors.retry import (
    classify_http_error,
    classify_openai_error,
    is_transient,
    upstream_retrying,
)


def _mock_response(status_code: int, url: str = "https://api.openai.com/v1/chat/completions"):
    """Create a minimal httpx.Response for constructing exceptions."""
    request = httpx.Request("POST", url)
    return httpx.Response(status_code=status_code, request=request)


def _status_error(status_code: int) -> httpx.HTTPStatusError:
    response = _mock_response(status_code, "https://api.opensea.io/api/v2/x")
    return httpx.HTTPStatusError("err", request=response.request, response=response)


class TestClassifyOpenAIError:
    def test_rate_limit(self):
        err = classify_openai_error(
            openai.RateLimitError(message="rate limit", response=_mock_response(429), body=None)
        )
        assert err.transient
        assert err.http_status == 429
        assert err.service == "openai"

    def test_internal_server(self):
        err = classify_openai_error(
            openai.InternalServerError(
                message="server err", response=_mock_response(500), body=None,
            )
        )
        assert err.transient

    def test_connection_error(self):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        err = classify_openai_error(openai.APIConnectionError(request=request))
        assert err.transient

    def test_auth_error(self):
        err = classify_openai_error(
            openai.AuthenticationError(message="bad key", response=_mock_response(401), body=None)
        )
        assert not err.transient
        assert err.http_status == 401

    def test_bad_request(self):
        err = classify_openai_error(
            openai.BadRequestError(message="bad", response=_mock_response(400), body=None)
        )
        assert not err.transient
        assert err.http_status == 400


class TestClassifyHTTPError:
    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    def test_transient_statuses(self, status):
        err = classify_http_error(_status_error(status), "opensea")
        assert err.transient
        assert err.http_status == status

    @pytest.mark.parametrize("status", [400, 401, 403, 404])
    def test_terminal_statuses(self, status):
        assert not classify_http_error(_status_error(status), "opensea").transient

    def test_transport_error_is_transient(self):
        err = classify_http_error(httpx.ConnectError("refused"), "opensea")
        assert err.transient
        assert err.service == "opensea"


class TestIsTransient:
    def test_upstream_error_flag(self):
        assert is_transient(UpstreamError("x", transient=True))
        assert not is_transient(UpstreamError("x"))

    def test_unrelated_exception(self):
        assert not is_transient(ValueError("x"))

    def test_httpx_errors(self):
        assert is_transient(httpx.ReadTimeout("slow"))
        assert not is_transient(_status_error(404))


class TestUpstreamRetrying:
    async def test_retries_transient_then_succeeds(self):
        calls = 0
        retrying = upstream_retrying(max_attempts=3)
        retrying.sleep = _no_sleep

        async for attempt in retrying:
            with attempt:
                calls += 1
                if calls < 3:
                    raise UpstreamError("busy", transient=True)

        assert calls == 3

    async def test_terminal_error_not_retried(self):
        calls = 0
        retrying = upstream_retrying(max_attempts=3)
        retrying.sleep = _no_sleep

        with pytest.raises(UpstreamError):
            async for attempt in retrying:
                with attempt:
                    calls += 1
                    raise UpstreamError("bad key", http_status=401)

        assert calls == 1

    async def test_reraises_after_last_attempt(self):
        retrying = upstream_retrying(max_attempts=2)
        retrying.sleep = _no_sleep

        with pytest.raises(UpstreamError):
            async for attempt in retrying:
                with attempt:
                    raise UpstreamError("busy", transient=True)


async def _no_sleep(seconds):
    return None
