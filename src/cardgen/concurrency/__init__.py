"""Concurrency — per-key locking for in-process request deduplication."""

from cardgen.concurrency.locks import KeyedLock

__all__ = ["KeyedLock"]
