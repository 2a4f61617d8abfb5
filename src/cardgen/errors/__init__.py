"""Error handling — exceptions and upstream retry policy."""

from cardgen.errors.exceptions import (
    AnalysisMissingError,
    CacheReadError,
    CacheWriteError,
    CardGenError,
    GenerationError,
    PollTimeoutError,
    PollTransientError,
    SubmissionError,
    UpstreamError,
)

__all__ = [
    "CardGenError",
    "SubmissionError",
    "PollTransientError",
    "GenerationError",
    "PollTimeoutError",
    "CacheReadError",
    "CacheWriteError",
    "UpstreamError",
    "AnalysisMissingError",
]
