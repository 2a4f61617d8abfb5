"""CardService — builds cards and drives art generation with file caching."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from cardgen import __version__
from cardgen.cache.keys import analysis_cache_key, art_cache_key, card_details_cache_key
from cardgen.cache.manager import CacheManager
from cardgen.cards import (
    DEFAULT_CARD_DETAILS,
    FALLBACK_DESCRIPTION,
    card_color,
    display_traits,
)
from cardgen.clients.goapi import GoAPIClient, build_imagine_payload
from cardgen.clients.openai_client import CardAIClient
from cardgen.clients.opensea import OpenSeaClient
from cardgen.concurrency.locks import KeyedLock
from cardgen.config.schema import Settings
from cardgen.errors.exceptions import AnalysisMissingError, CardGenError, UpstreamError
from cardgen.gallery import DEFAULT_PAGE_SIZE, build_gallery
from cardgen.jobs.orchestrator import cache_then_generate
from cardgen.jobs.poller import JobPoller, SleepFn
from cardgen.jobs.tracker import JobTracker, TrackedJob
from cardgen.prompts import full_body_art_prompt
from cardgen.types import (
    AnalysisEntry,
    ArtEntry,
    ArtResult,
    ArtState,
    ArtStatus,
    CardDetails,
    CardDetailsEntry,
    CardResponse,
    GalleryFilter,
    GalleryPage,
    JobStatus,
    NFTData,
    utc_now,
)

logger = logging.getLogger(__name__)

_RECENT_TASKS = 10


class CardService:
    """Main service class wiring clients, caches and the job poller."""

    def __init__(
        self,
        settings: Settings | None = None,
        caches: CacheManager | None = None,
        opensea: OpenSeaClient | None = None,
        ai: CardAIClient | None = None,
        goapi: GoAPIClient | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._settings = settings or Settings()
        s = self._settings
        self._caches = caches or CacheManager(s.cache_dir)
        self._opensea = opensea or OpenSeaClient(
            api_key=s.opensea_api_key,
            base_url=s.opensea_base_url,
            chain=s.chain,
            contract=s.contract,
            timeout=s.http_timeout,
            max_retries=s.max_retries,
        )
        self._ai = ai or CardAIClient(
            api_key=s.openai_api_key,
            base_url=s.openai_base_url,
            model=s.openai_model,
            timeout=s.http_timeout,
            max_retries=s.max_retries,
        )
        self._goapi = goapi or GoAPIClient(
            api_key=s.goapi_api_key,
            base_url=s.goapi_base_url,
            timeout=s.http_timeout,
        )
        self._poller = JobPoller(
            self._goapi,
            interval=s.poll_interval,
            max_attempts=s.max_poll_attempts,
            sleep=sleep,
        )
        self._locks = KeyedLock() if s.dedupe else None
        self._tracker = JobTracker()

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def caches(self) -> CacheManager:
        return self._caches

    @property
    def tracker(self) -> JobTracker:
        return self._tracker

    def load(self) -> None:
        """Load all caches from disk."""
        self._caches.load()

    async def close(self) -> None:
        await self._opensea.close()
        await self._ai.close()
        await self._goapi.close()

    # ── Card ──

    async def get_card(self, token_id: str) -> CardResponse:
        """Build the card for ``token_id`` from cache or upstream services."""
        nft = await self._opensea.fetch_nft_or_placeholder(token_id)
        description = await self.describe(nft)
        details = await self.design_card(nft, description)

        response = CardResponse(
            tokenId=token_id,
            nftImage=nft.image_url,
            nftTraits=display_traits(nft.traits),
            identifier=nft.identifier,
            cardDetails=details,
            description=description,
            cardColor=card_color(nft.traits),
            debugEndpoint=f"/api/debug/image/{token_id}",
        )

        art = self.cached_art(token_id)
        if art is not None:
            logger.info("Using cached full art for token %s", token_id)
            response.fullArtUrl = art.url
            response.allImageUrls = art.allImageUrls or None
            response.temporary_image_urls = art.temporary_image_urls
        else:
            response.fullArtProcessing = True
        return response

    async def describe(self, nft: NFTData) -> str:
        """Character description, from the analysis cache or a vision request.

        Falls back to a generic description when analysis fails; the
        fallback is not cached.
        """
        token_id = nft.identifier

        async def _analyze() -> dict[str, Any]:
            description = await self._ai.analyze_image(nft.image_url, nft.traits)
            return AnalysisEntry(
                description=description, traits=nft.traits_string()
            ).model_dump()

        try:
            entry = await cache_then_generate(
                self._caches.analysis,
                analysis_cache_key(token_id),
                _analyze,
                locks=self._locks,
            )
        except UpstreamError as e:
            logger.warning("Image analysis for token %s failed: %s", token_id, e.message)
            return FALLBACK_DESCRIPTION
        return entry.get("description") or FALLBACK_DESCRIPTION

    async def design_card(self, nft: NFTData, description: str) -> CardDetails:
        """Card details, from the card-details cache or a text request.

        Falls back to the default card on failure; the fallback is not cached.
        """
        traits = [t.model_dump() for t in nft.traits]
        key = card_details_cache_key(nft.identifier, traits, description)

        async def _design() -> dict[str, Any]:
            details = await self._ai.generate_card_details(nft.traits, description)
            return CardDetailsEntry(
                cardDetails=details,
                description=_preview(description),
                traitCount=len(traits),
            ).model_dump()

        try:
            entry = await cache_then_generate(
                self._caches.card_details, key, _design, locks=self._locks
            )
        except UpstreamError as e:
            logger.warning("Card design for token %s failed: %s", nft.identifier, e.message)
            return DEFAULT_CARD_DETAILS.model_copy(deep=True)
        return CardDetails.model_validate(entry["cardDetails"])

    # ── Art ──

    def cached_art(self, token_id: str) -> ArtEntry | None:
        entry = self._caches.art.get(art_cache_key(token_id))
        if not isinstance(entry, dict) or not entry.get("url"):
            return None
        return ArtEntry.model_validate(entry)

    def begin_art_job(self, token_id: str) -> TrackedJob:
        """Mark art generation for ``token_id`` as pending before it is scheduled."""
        return self._tracker.start(token_id)

    async def generate_art(
        self,
        token_id: str,
        description: str,
        reference_image_url: str | None = None,
        force: bool = False,
    ) -> ArtEntry:
        """Return full-body art for ``token_id``, generating it on a cache miss.

        ``force`` regenerates even when art is cached and bumps the version.
        Raises SubmissionError, GenerationError or PollTimeoutError when
        generation does not succeed; nothing is cached in that case.
        """
        previous = self.cached_art(token_id)
        version = previous.version + 1 if force and previous else 1

        async def _generate() -> dict[str, Any]:
            self._tracker.start(token_id)
            payload = build_imagine_payload(
                full_body_art_prompt(description), reference_image_url
            )
            try:
                result = await self._poller.run(
                    payload, on_update=lambda job: self._tracker.observe(token_id, job)
                )
                art = ArtResult.model_validate(result)
            except Exception as e:
                self._tracker.fail(token_id, _failure_reason(e))
                raise

            self._tracker.finish(token_id)
            logger.info("Full art version %d generated for token %s", version, token_id)
            return ArtEntry(
                tokenId=token_id,
                url=art.url,
                allImageUrls=art.all_image_urls or [art.url],
                temporary_image_urls=art.temporary_image_urls,
                task_id=art.task_id,
                description=_preview(description),
                version=version,
            ).model_dump()

        entry = await cache_then_generate(
            self._caches.art,
            art_cache_key(token_id),
            _generate,
            locks=self._locks,
            force=force,
        )
        return ArtEntry.model_validate(entry)

    async def generate_art_in_background(
        self,
        token_id: str,
        description: str,
        reference_image_url: str | None = None,
        force: bool = False,
    ) -> None:
        """Run generate_art for a background task; failures are logged and tracked."""
        try:
            await self.generate_art(token_id, description, reference_image_url, force=force)
        except CardGenError as e:
            self._tracker.fail(token_id, _failure_reason(e))
            logger.error("Background art generation for token %s failed: %s", token_id, e)
        except Exception as e:
            self._tracker.fail(token_id, _failure_reason(e))
            logger.exception("Unexpected error generating art for token %s", token_id)
        else:
            # cache hits never reach the poller
            self._tracker.finish(token_id)

    async def prepare_art(self, token_id: str) -> tuple[NFTData, str]:
        """NFT data and description needed to start art generation."""
        nft = await self._opensea.fetch_nft_or_placeholder(token_id)
        description = await self.describe(nft)
        return nft, description

    async def regenerate_art(self, token_id: str) -> tuple[ArtEntry, NFTData, str]:
        """Force new art for a token that already has an analysis."""
        analysis = self._caches.analysis.get(analysis_cache_key(token_id))
        if not isinstance(analysis, dict) or not analysis.get("description"):
            raise AnalysisMissingError(
                "No analysis found for this token ID. Please generate a card first.",
                token_id=token_id,
            )
        description = analysis["description"]
        nft = await self._opensea.fetch_nft_or_placeholder(token_id)
        art = await self.generate_art(
            token_id, description, reference_image_url=nft.image_url, force=True
        )
        return art, nft, description

    def art_status(self, token_id: str) -> ArtStatus:
        """Where art generation for ``token_id`` stands, for frontend polling."""
        job = self._tracker.get(token_id)
        if job is not None and job.active:
            return ArtStatus(
                tokenId=token_id,
                imageStatus=ArtState.PROCESSING,
                progress=job.progress,
                processing=True,
                taskId=job.task_id,
            )

        art = self.cached_art(token_id)
        if art is not None:
            return ArtStatus(
                tokenId=token_id,
                imageStatus=ArtState.COMPLETE,
                fullArtUrl=art.url,
                allImageUrls=art.allImageUrls or None,
                progress=100,
                completed=True,
                taskId=art.task_id or None,
                version=art.version,
            )

        if job is not None and job.status in (JobStatus.FAILED, JobStatus.TIMED_OUT):
            return ArtStatus(
                tokenId=token_id,
                imageStatus=ArtState.FAILED,
                progress=job.progress,
                taskId=job.task_id,
                error=job.error,
            )

        return ArtStatus(tokenId=token_id, imageStatus=ArtState.IDLE)

    # ── Listings and diagnostics ──

    def gallery(
        self,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        filter: GalleryFilter = GalleryFilter.ALL,
        search: str = "",
    ) -> GalleryPage:
        return build_gallery(
            self._caches.art.items(), page=page, limit=limit, filter=filter, search=search
        )

    async def check_task(self, task_id: str) -> dict[str, Any]:
        return await self._goapi.check_task(task_id)

    def goapi_status(self) -> dict[str, Any]:
        seen: set[str] = set()
        tasks = []
        for entry in self._caches.art.items():
            value = entry[1]
            if not isinstance(value, dict):
                continue
            task_id = value.get("task_id")
            if not task_id or task_id in seen:
                continue
            seen.add(task_id)
            tasks.append({
                "id": task_id,
                "timestamp": value.get("created") or value.get("timestamp") or "",
                "tokenId": value.get("tokenId"),
                "imageCount": len(value.get("allImageUrls") or []) or 1,
            })
        tasks.sort(key=lambda t: t["timestamp"], reverse=True)

        return {
            "success": True,
            "recentTasks": tasks[:_RECENT_TASKS],
            "apiKeyExists": self._goapi.has_api_key,
            "activeJobs": [j.model_dump() for j in self._tracker.active_jobs()],
            "stats": {"totalImages": len(self._caches.art)},
        }

    def health(self) -> dict[str, Any]:
        keys = self._settings.api_keys_status()
        return {
            "status": "ok" if all(keys.values()) else "missing_api_keys",
            "timestamp": utc_now(),
            "environment": self._settings.environment,
            "version": __version__,
            "apiKeys": keys,
            "cache": {
                "analysisCount": len(self._caches.analysis),
                "cardDetailsCount": len(self._caches.card_details),
                "artCount": len(self._caches.art),
            },
            "services": {
                "nftData": keys["opensea"],
                "imageGeneration": keys["goapi"] and keys["gpt"],
                "imageAnalysis": keys["gpt"],
            },
        }


def _failure_reason(exc: Exception) -> str:
    if isinstance(exc, CardGenError) and exc.message:
        return exc.message
    return str(exc) or type(exc).__name__


def _preview(description: str, length: int = 100) -> str:
    if len(description) <= length:
        return description
    return description[:length] + "..."
