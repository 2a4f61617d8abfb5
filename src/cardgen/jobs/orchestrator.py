"""Cache-then-generate: serve from a file cache, generate and store on miss."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from cardgen.concurrency.locks import KeyedLock
from cardgen.errors.exceptions import CacheWriteError

logger = logging.getLogger(__name__)


class ArtifactCache(Protocol):
    def get(self, key: str) -> Any | None: ...

    def put(self, key: str, artifact: Any) -> None: ...


async def cache_then_generate(
    cache: ArtifactCache,
    key: str,
    generate: Callable[[], Awaitable[Any]],
    locks: KeyedLock | None = None,
    force: bool = False,
) -> Any:
    """Return the cached artifact for ``key``, generating it on a miss.

    On a miss ``generate()`` is awaited and its result written to the cache
    before it is returned. A failed generation propagates and leaves the
    cache untouched, so the next call retries. A cache write failure is
    logged and the artifact is still returned.

    With ``locks`` set, concurrent calls for the same key run one at a time
    and later callers are served from the cache once the first finishes.
    ``force`` skips the lookup and always regenerates.
    """
    if not force:
        cached = cache.get(key)
        if cached is not None:
            logger.info("Cache hit for key %s", key)
            return cached

    guard = locks.hold(key) if locks is not None else contextlib.nullcontext()
    async with guard:
        if not force and locks is not None:
            cached = cache.get(key)
            if cached is not None:
                logger.info("Cache filled by concurrent request for key %s", key)
                return cached

        logger.info("Cache miss for key %s, generating", key)
        artifact = await generate()

        try:
            cache.put(key, artifact)
        except CacheWriteError as e:
            logger.error("Generated artifact for key %s not persisted: %s", key, e.message)

        return artifact
