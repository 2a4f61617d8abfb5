"""Custom exception hierarchy for cardgen."""

from __future__ import annotations

from pathlib import Path
from typing import Any


class CardGenError(Exception):
    """Base exception for all cardgen errors."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message


class SubmissionError(CardGenError):
    """The generation service rejected the request or could not be reached."""

    def __init__(
        self,
        message: str = "",
        http_status: int | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.http_status = http_status
        self.original = original


class PollTransientError(CardGenError):
    """A single status check failed. The poll loop absorbs these."""

    def __init__(
        self,
        message: str = "",
        task_id: str = "",
        http_status: int | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.task_id = task_id
        self.http_status = http_status
        self.original = original


class GenerationError(CardGenError):
    """The external job finished in a failed state."""

    def __init__(
        self,
        message: str = "",
        task_id: str = "",
        reason: str = "",
    ) -> None:
        super().__init__(message)
        self.task_id = task_id
        self.reason = reason


class PollTimeoutError(CardGenError, TimeoutError):
    """The job was still pending when the attempt ceiling was reached."""

    def __init__(
        self,
        message: str = "",
        task_id: str = "",
        attempts: int = 0,
    ) -> None:
        super().__init__(message)
        self.task_id = task_id
        self.attempts = attempts


class CacheReadError(CardGenError):
    """Cache file could not be read or parsed. Callers see an empty cache."""

    def __init__(
        self,
        message: str = "",
        path: Path | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.original = original


class CacheWriteError(CardGenError):
    """Cache file could not be persisted."""

    def __init__(
        self,
        message: str = "",
        path: Path | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.original = original


class UpstreamError(CardGenError):
    """OpenSea or OpenAI returned an error response.

    ``transient`` marks failures worth retrying (429, 5xx, connection).
    """

    def __init__(
        self,
        message: str = "",
        service: str = "",
        http_status: int | None = None,
        transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.service = service
        self.http_status = http_status
        self.transient = transient


class AnalysisMissingError(CardGenError):
    """Regeneration was requested for a token that was never analyzed."""

    def __init__(self, message: str = "", token_id: str = "") -> None:
        super().__init__(message)
        self.token_id = token_id
