"""Cache subsystem — JSON file caches keyed by token id."""

from cardgen.cache.keys import analysis_cache_key, art_cache_key, card_details_cache_key
from cardgen.cache.manager import CacheManager
from cardgen.cache.stats import CacheStats, CategoryStats
from cardgen.cache.store import FileCache

__all__ = [
    "CacheManager",
    "CacheStats",
    "CategoryStats",
    "FileCache",
    "analysis_cache_key",
    "art_cache_key",
    "card_details_cache_key",
]
