"""In-memory view of art generation jobs per token, for status endpoints."""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from cardgen.types import JobStatus, PollJob, utc_now

logger = logging.getLogger(__name__)


class TrackedJob(BaseModel):
    token_id: str
    status: JobStatus = JobStatus.PENDING
    task_id: str | None = None
    progress: int = 0
    error: str | None = None
    started_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)

    @property
    def active(self) -> bool:
        return not self.status.is_terminal


class JobTracker:
    """Latest job state per token id.

    Nothing here is persisted; failed and timed-out jobs are remembered only
    so status requests can report them until the next attempt starts.
    """

    def __init__(self) -> None:
        self._jobs: dict[str, TrackedJob] = {}

    def start(self, token_id: str) -> TrackedJob:
        job = TrackedJob(token_id=token_id)
        self._jobs[token_id] = job
        return job

    def observe(self, token_id: str, poll_job: PollJob) -> None:
        """Record a poller state transition for ``token_id``."""
        job = self._jobs.get(token_id) or self.start(token_id)
        job.task_id = poll_job.task_id
        job.status = poll_job.status
        job.progress = poll_job.progress
        job.error = poll_job.error
        job.updated_at = utc_now()

    def finish(self, token_id: str) -> None:
        self._jobs.pop(token_id, None)

    def fail(self, token_id: str, error: str) -> None:
        job = self._jobs.get(token_id) or self.start(token_id)
        if job.status != JobStatus.TIMED_OUT:
            job.status = JobStatus.FAILED
        job.error = error
        job.updated_at = utc_now()
        logger.info("Art job for token %s ended: %s", token_id, error)

    def get(self, token_id: str) -> TrackedJob | None:
        return self._jobs.get(token_id)

    def is_active(self, token_id: str) -> bool:
        job = self._jobs.get(token_id)
        return job is not None and job.active

    def active_jobs(self) -> list[TrackedJob]:
        return [j for j in self._jobs.values() if j.active]
