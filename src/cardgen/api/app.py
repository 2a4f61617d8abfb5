"""FastAPI application exposing the card, art and diagnostic routes."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import BackgroundTasks, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cardgen import __version__
from cardgen.config.schema import Settings, load_settings
from cardgen.errors.exceptions import (
    AnalysisMissingError,
    CardGenError,
    SubmissionError,
    UpstreamError,
)
from cardgen.gallery import DEFAULT_PAGE_SIZE
from cardgen.service import CardService
from cardgen.types import GalleryFilter, utc_now

logger = logging.getLogger(__name__)


def create_app(
    service: CardService | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Build the application around ``service`` (or one built from settings)."""
    if service is None:
        if settings is None:
            load_dotenv()
            settings = load_settings()
        service = CardService(settings)
    settings = service.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        service.load()
        keys = settings.api_keys_status()
        missing = [name for name, present in keys.items() if not present]
        if missing:
            logger.warning("Missing API keys: %s", ", ".join(missing))
        yield
        await service.close()

    app = FastAPI(title="cardgen", version=__version__, lifespan=lifespan)
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    @app.get("/api/health")
    async def health():
        return service.health()

    @app.get("/api/test")
    async def test(request: Request):
        return {
            "success": True,
            "message": "API is working",
            "timestamp": utc_now(),
            "environment": settings.environment,
            "path": request.url.path,
        }

    @app.get("/api/card/{token_id}")
    async def get_card(token_id: str, background_tasks: BackgroundTasks):
        logger.info("Processing card for token %s", token_id)
        card = await service.get_card(token_id)
        if card.fullArtProcessing and not service.tracker.is_active(token_id):
            service.begin_art_job(token_id)
            background_tasks.add_task(
                service.generate_art_in_background,
                token_id,
                card.description,
                card.nftImage,
            )
        return card.model_dump()

    @app.post("/api/v2/generate-art/{token_id}")
    async def generate_art(token_id: str, background_tasks: BackgroundTasks):
        job = service.tracker.get(token_id)
        if job is not None and job.active:
            return {
                "success": True,
                "tokenId": token_id,
                "message": "Art generation already in progress",
                "taskId": job.task_id,
                "progress": job.progress,
                "statusEndpoint": f"/api/debug/image/{token_id}",
                "startedAt": job.started_at,
            }

        nft, description = await service.prepare_art(token_id)
        pending = service.begin_art_job(token_id)
        background_tasks.add_task(
            service.generate_art_in_background,
            token_id,
            description,
            nft.image_url,
            True,
        )
        return {
            "success": True,
            "tokenId": token_id,
            "message": "Art generation initiated in the background",
            "statusEndpoint": f"/api/debug/image/{token_id}",
            "processingStarted": True,
            "startedAt": pending.started_at,
            "progress": 0,
        }

    @app.post("/api/regenerate-art/{token_id}")
    async def regenerate_art(token_id: str):
        art, nft, description = await service.regenerate_art(token_id)
        details = await service.design_card(nft, description)
        return {
            "success": True,
            "tokenId": token_id,
            "artUrl": art.url,
            "fullArtUrl": art.url,
            "allImageUrls": art.allImageUrls,
            "nftImage": nft.image_url,
            "identifier": nft.identifier,
            "cardDetails": details.model_dump(),
            "description": description,
            "version": art.version,
        }

    @app.get("/api/debug/image/{token_id}")
    async def art_status(token_id: str):
        return service.art_status(token_id).model_dump()

    @app.get("/api/check-task/{task_id}")
    async def check_task(task_id: str):
        return {"success": True, **await service.check_task(task_id)}

    @app.get("/api/gallery")
    async def gallery(
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        filter: str = GalleryFilter.ALL.value,
        search: str = "",
    ):
        try:
            mode = GalleryFilter(filter)
        except ValueError:
            mode = GalleryFilter.ALL
        return service.gallery(page=page, limit=limit, filter=mode, search=search).model_dump()

    @app.get("/api/goapi-status")
    async def goapi_status():
        return service.goapi_status()

    # Registered last so it only sees paths no other route matched.
    @app.api_route(
        "/{path:path}", methods=["GET", "POST", "PUT", "DELETE", "PATCH"]
    )
    async def echo(request: Request, path: str):
        return {
            "success": True,
            "info": "cardgen API endpoint is working",
            "path": request.url.path,
            "method": request.method,
            "timestamp": utc_now(),
            "message": "No route matched; echoing the request for diagnostics",
        }

    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(CardGenError)
    async def handle_cardgen_error(request: Request, exc: CardGenError) -> JSONResponse:
        status = _status_for(exc)
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status,
            content={"success": False, "error": exc.message or str(exc)},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(exc) or type(exc).__name__},
        )


def _status_for(exc: CardGenError) -> int:
    if isinstance(exc, AnalysisMissingError):
        return 404
    if isinstance(exc, (UpstreamError, SubmissionError)):
        return 502
    return 500
