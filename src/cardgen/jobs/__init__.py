"""Asynchronous job polling and cache-then-generate orchestration."""

from cardgen.jobs.orchestrator import cache_then_generate
from cardgen.jobs.poller import JobBackend, JobPoller
from cardgen.jobs.tracker import JobTracker

__all__ = ["JobBackend", "JobPoller", "JobTracker", "cache_then_generate"]
