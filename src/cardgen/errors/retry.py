"""Error classification and retry policy for upstream API calls."""

from __future__ import annotations

import logging

import httpx
import openai
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from cardgen.errors.exceptions import UpstreamError

logger = logging.getLogger(__name__)

_TRANSIENT_STATUS = {408, 425, 429, 500, 502, 503, 504}


def classify_openai_error(exc: Exception) -> UpstreamError:
    """Convert an openai exception to our exception hierarchy."""
    if isinstance(exc, openai.RateLimitError):
        return UpstreamError(str(exc), service="openai", http_status=429, transient=True)
    if isinstance(exc, openai.InternalServerError):
        status = getattr(exc, "status_code", 500)
        return UpstreamError(str(exc), service="openai", http_status=status, transient=True)
    if isinstance(exc, (openai.APIConnectionError, openai.APITimeoutError)):
        return UpstreamError(str(exc), service="openai", transient=True)
    if isinstance(exc, openai.AuthenticationError):
        return UpstreamError(str(exc), service="openai", http_status=401)
    if isinstance(exc, openai.NotFoundError):
        return UpstreamError(str(exc), service="openai", http_status=404)
    if isinstance(exc, openai.BadRequestError):
        return UpstreamError(str(exc), service="openai", http_status=400)
    return UpstreamError(str(exc), service="openai")


def classify_http_error(exc: Exception, service: str) -> UpstreamError:
    """Convert an httpx exception to our exception hierarchy."""
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return UpstreamError(
            f"{service} returned {status}: {exc.response.text[:200]}",
            service=service,
            http_status=status,
            transient=status in _TRANSIENT_STATUS,
        )
    if isinstance(exc, httpx.TransportError):
        return UpstreamError(str(exc) or type(exc).__name__, service=service, transient=True)
    return UpstreamError(str(exc), service=service)


def is_transient(exc: BaseException) -> bool:
    """Whether an exception is worth retrying."""
    if isinstance(exc, UpstreamError):
        return exc.transient
    if isinstance(exc, openai.OpenAIError):
        return classify_openai_error(exc).transient
    if isinstance(exc, httpx.HTTPError):
        return classify_http_error(exc, "http").transient
    return False


def _log_retry(retry_state) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Transient upstream error (attempt %d): %s",
        retry_state.attempt_number,
        exc,
    )


def upstream_retrying(max_attempts: int = 3, max_wait: float = 30.0) -> AsyncRetrying:
    """Build the tenacity policy used around OpenSea/OpenAI requests."""
    return AsyncRetrying(
        retry=retry_if_exception(is_transient),
        wait=wait_exponential(multiplier=1, min=1, max=max_wait),
        stop=stop_after_attempt(max_attempts),
        before_sleep=_log_retry,
        reraise=True,
    )
