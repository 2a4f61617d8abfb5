"""Cache manager — one JSON file cache per artifact category."""

from __future__ import annotations

import logging
from pathlib import Path

from cardgen.cache.stats import CacheStats, CategoryStats
from cardgen.cache.store import FileCache

logger = logging.getLogger(__name__)

ART = "art"
ANALYSIS = "analysis"
CARD_DETAILS = "card_details"

_FILENAMES = {
    ART: "art_cache.json",
    ANALYSIS: "analysis_cache.json",
    CARD_DETAILS: "card_details_cache.json",
}

_DEFAULT_CACHE_DIR = Path("cache")


class CacheManager:
    """Owns the art, analysis and card-details caches under one directory."""

    def __init__(self, cache_dir: Path | str | None = None) -> None:
        self._cache_dir = Path(cache_dir) if cache_dir else _DEFAULT_CACHE_DIR
        self._caches = {
            category: FileCache(self._cache_dir / filename, name=category)
            for category, filename in _FILENAMES.items()
        }

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    @property
    def art(self) -> FileCache:
        return self._caches[ART]

    @property
    def analysis(self) -> FileCache:
        return self._caches[ANALYSIS]

    @property
    def card_details(self) -> FileCache:
        return self._caches[CARD_DETAILS]

    def category(self, name: str) -> FileCache:
        try:
            return self._caches[name]
        except KeyError:
            raise KeyError(f"Unknown cache category: {name}") from None

    def load(self) -> None:
        """Load every category from disk."""
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        for cache in self._caches.values():
            cache.load()
        logger.info(
            "Cache loaded from %s (%s)",
            self._cache_dir,
            ", ".join(f"{name}={len(c)}" for name, c in self._caches.items()),
        )

    def clear(self) -> None:
        """Empty every category and persist the empty documents."""
        for cache in self._caches.values():
            cache.clear()

    def stats(self) -> CacheStats:
        return CacheStats(
            categories={
                name: CategoryStats(entries=len(c), hits=c.hits, misses=c.misses)
                for name, c in self._caches.items()
            }
        )
