"""Shared Pydantic models for cardgen.

Field names on cached and HTTP-facing models follow the JSON the frontend
consumes (camelCase), so ``model_dump()`` output can be written to the cache
files and returned from the API unchanged.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

# ── Enums ──


class JobStatus(StrEnum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.SUCCEEDED, JobStatus.FAILED, JobStatus.TIMED_OUT)


class ArtState(StrEnum):
    IDLE = "idle"
    PROCESSING = "processing"
    COMPLETE = "complete"
    FAILED = "failed"


class GalleryFilter(StrEnum):
    ALL = "all"
    RECENT = "recent"
    POPULAR = "popular"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ── NFT models ──


class NFTTrait(BaseModel):
    trait_type: str
    value: str


class NFTData(BaseModel):
    identifier: str
    image_url: str
    traits: list[NFTTrait] = Field(default_factory=list)
    name: str | None = None
    collection: str | None = None

    def traits_string(self) -> str:
        return format_traits(self.traits)


def format_traits(traits: list[NFTTrait]) -> str:
    """Render traits as ``"Type: Human, Hair: Green Spiky"``."""
    return ", ".join(f"{t.trait_type}: {t.value}" for t in traits)


# ── Card models ──


class CardMove(BaseModel):
    model_config = {"coerce_numbers_to_str": True}

    name: str
    atk: str


class CardDetails(BaseModel):
    model_config = {"coerce_numbers_to_str": True}

    cardName: str
    typeIcon: str
    hp: str
    move: CardMove
    moveDescription: str | None = None
    weakness: str
    resistance: str
    retreatCost: str
    rarity: str


# ── Job models ──


class TaskSnapshot(BaseModel):
    """One status report from the generation backend."""

    status: JobStatus
    progress: int = 0
    result: dict[str, Any] | None = None
    error: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict)


class PollJob(BaseModel):
    """Live state of an asynchronous generation job."""

    task_id: str
    status: JobStatus = JobStatus.PENDING
    attempts: int = 0
    max_attempts: int = 60
    progress: int = 0
    result: dict[str, Any] | None = None
    error: str | None = None
    elapsed_s: float = 0.0
    started_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)


class ArtResult(BaseModel):
    url: str
    all_image_urls: list[str] = Field(default_factory=list)
    temporary_image_urls: list[str] | None = None
    task_id: str = ""


# ── Cache entry models ──


class AnalysisEntry(BaseModel):
    description: str
    timestamp: str = Field(default_factory=utc_now)
    traits: str = ""


class CardDetailsEntry(BaseModel):
    cardDetails: CardDetails
    timestamp: str = Field(default_factory=utc_now)
    description: str = ""
    traitCount: int = 0


class ArtEntry(BaseModel):
    tokenId: str
    url: str
    allImageUrls: list[str] = Field(default_factory=list)
    temporary_image_urls: list[str] | None = None
    task_id: str = ""
    description: str = ""
    version: int = 1
    created: str = Field(default_factory=utc_now)


# ── Response models ──


class CardResponse(BaseModel):
    success: bool = True
    tokenId: str
    nftImage: str
    nftTraits: list[NFTTrait] = Field(default_factory=list)
    identifier: str
    cardDetails: CardDetails
    description: str
    cardColor: str
    fullArtUrl: str | None = None
    allImageUrls: list[str] | None = None
    temporary_image_urls: list[str] | None = None
    fullArtProcessing: bool = False
    generator: str = "midjourney"
    debugEndpoint: str = ""


class ArtStatus(BaseModel):
    success: bool = True
    tokenId: str
    imageStatus: ArtState
    fullArtUrl: str | None = None
    allImageUrls: list[str] | None = None
    progress: int = 0
    processing: bool = False
    completed: bool = False
    taskId: str | None = None
    error: str | None = None
    version: int | None = None
    timestamp: str = Field(default_factory=utc_now)


class GalleryItem(BaseModel):
    tokenId: str
    url: str
    allImageUrls: list[str] = Field(default_factory=list)
    timestamp: str
    version: int = 1
    popularity: int = 0


class Pagination(BaseModel):
    page: int
    limit: int
    totalItems: int
    totalPages: int


class GalleryPage(BaseModel):
    success: bool = True
    data: list[GalleryItem] = Field(default_factory=list)
    pagination: Pagination
