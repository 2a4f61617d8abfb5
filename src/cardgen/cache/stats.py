"""Cache statistics models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class CategoryStats(BaseModel):
    entries: int = 0
    hits: int = 0
    misses: int = 0


class CacheStats(BaseModel):
    """Aggregate cache statistics."""

    categories: dict[str, CategoryStats] = Field(default_factory=dict)

    @property
    def entries(self) -> int:
        return sum(c.entries for c in self.categories.values())

    @property
    def hits(self) -> int:
        return sum(c.hits for c in self.categories.values())

    @property
    def misses(self) -> int:
        return sum(c.misses for c in self.categories.values())

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0
