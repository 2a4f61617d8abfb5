"""Job poller — drives an asynchronous generation job to a terminal state.

The poller submits a request, then checks the job's status on a fixed
interval until it succeeds, fails, or the attempt ceiling is reached::

    pending ──> running ──> succeeded
       │           │──────> failed
       └───────────┴──────> timed_out

``sleep`` and ``clock`` are injectable so tests can run the full loop
without real delays.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

import httpx

from cardgen.config.defaults import DEFAULT_MAX_POLL_ATTEMPTS, DEFAULT_POLL_INTERVAL
from cardgen.errors.exceptions import (
    GenerationError,
    PollTimeoutError,
    PollTransientError,
    SubmissionError,
)
from cardgen.types import JobStatus, PollJob, TaskSnapshot, utc_now

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]
ClockFn = Callable[[], float]
UpdateFn = Callable[[PollJob], None]


class JobBackend(Protocol):
    """An external service that accepts jobs and reports their status."""

    async def submit(self, payload: dict[str, Any]) -> str: ...

    async def fetch_status(self, task_id: str) -> TaskSnapshot: ...


class JobPoller:
    """Submit a job and poll it until it reaches a terminal status."""

    def __init__(
        self,
        backend: JobBackend,
        interval: float = DEFAULT_POLL_INTERVAL,
        max_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS,
        sleep: SleepFn = asyncio.sleep,
        clock: ClockFn = time.monotonic,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if interval < 0:
            raise ValueError("interval must be non-negative")
        self._backend = backend
        self._interval = interval
        self._max_attempts = max_attempts
        self._sleep = sleep
        self._clock = clock

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    async def run(
        self,
        payload: dict[str, Any],
        on_update: UpdateFn | None = None,
    ) -> dict[str, Any]:
        """Submit ``payload`` and return the result payload once succeeded."""
        task_id = await self.submit(payload)
        return await self.poll(task_id, on_update=on_update)

    async def submit(self, payload: dict[str, Any]) -> str:
        """Send the request and return the job handle.

        Raises SubmissionError if the service rejects the request or
        cannot be reached.
        """
        try:
            task_id = await self._backend.submit(payload)
        except SubmissionError:
            raise
        except httpx.HTTPError as e:
            raise SubmissionError(f"Submission failed: {e}", original=e) from e

        if not task_id:
            raise SubmissionError("Submission returned no task id")
        logger.info("Job submitted with task id %s", task_id)
        return task_id

    async def poll(
        self,
        task_id: str,
        on_update: UpdateFn | None = None,
    ) -> dict[str, Any]:
        """Poll ``task_id`` until a terminal status.

        Returns the result payload unchanged on success. Raises
        GenerationError if the job failed and PollTimeoutError if it was
        still pending after ``max_attempts`` status checks.
        """
        job = PollJob(task_id=task_id, max_attempts=self._max_attempts)
        started = self._clock()
        _notify(on_update, job)

        for attempt in range(1, self._max_attempts + 1):
            job.attempts = attempt
            try:
                snapshot = await self._backend.fetch_status(task_id)
            except (PollTransientError, httpx.HTTPError) as e:
                logger.warning(
                    "Poll attempt %d/%d for task %s failed: %s",
                    attempt,
                    self._max_attempts,
                    task_id,
                    e,
                )
            except Exception as e:
                # A malformed status reply counts as a failed attempt
                logger.warning(
                    "Poll attempt %d/%d for task %s raised %s: %s",
                    attempt,
                    self._max_attempts,
                    task_id,
                    type(e).__name__,
                    e,
                )
            else:
                self._apply(job, snapshot, started)
                _notify(on_update, job)

                if job.status == JobStatus.SUCCEEDED:
                    logger.info(
                        "Task %s succeeded after %d attempt(s), %.1fs",
                        task_id,
                        attempt,
                        job.elapsed_s,
                    )
                    return job.result or {}

                if job.status == JobStatus.FAILED:
                    reason = job.error or "Unknown error"
                    logger.error("Task %s failed: %s", task_id, reason)
                    raise GenerationError(
                        f"Generation task {task_id} failed: {reason}",
                        task_id=task_id,
                        reason=reason,
                    )

                logger.debug(
                    "Task %s %s, progress %d%% (attempt %d/%d)",
                    task_id,
                    job.status.value,
                    job.progress,
                    attempt,
                    self._max_attempts,
                )

            if attempt < self._max_attempts:
                await self._sleep(self._interval)

        job.status = JobStatus.TIMED_OUT
        job.error = f"timed out after {self._max_attempts} attempts"
        job.elapsed_s = self._clock() - started
        job.updated_at = utc_now()
        _notify(on_update, job)
        logger.error("Task %s %s", task_id, job.error)
        raise PollTimeoutError(
            f"Polling task {task_id} timed out after {self._max_attempts} attempts",
            task_id=task_id,
            attempts=self._max_attempts,
        )

    def _apply(self, job: PollJob, snapshot: TaskSnapshot, started: float) -> None:
        status = snapshot.status
        # A running job never moves back to pending.
        if status == JobStatus.PENDING and job.status == JobStatus.RUNNING:
            status = JobStatus.RUNNING
        if status == JobStatus.TIMED_OUT:
            status = JobStatus.RUNNING

        job.status = status
        job.progress = max(job.progress, snapshot.progress)
        job.elapsed_s = self._clock() - started
        job.updated_at = utc_now()
        if status == JobStatus.SUCCEEDED:
            job.progress = 100
            job.result = snapshot.result
        elif status == JobStatus.FAILED:
            job.error = snapshot.error


def _notify(on_update: UpdateFn | None, job: PollJob) -> None:
    if on_update is None:
        return
    on_update(job.model_copy())
