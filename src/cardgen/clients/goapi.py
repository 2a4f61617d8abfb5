"""GoAPI Midjourney client — submits imagine tasks and reports their status."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from cardgen.config.defaults import DEFAULT_GOAPI_BASE_URL, DEFAULT_HTTP_TIMEOUT
from cardgen.errors.exceptions import PollTransientError, SubmissionError
from cardgen.types import JobStatus, TaskSnapshot

logger = logging.getLogger(__name__)

_IMAGINE_PATH = "/mj/v2/imagine"
_TASK_PATH = "/api/v1/task/{task_id}"

_STATUS_MAP: dict[str, JobStatus] = {
    "pending": JobStatus.PENDING,
    "staged": JobStatus.PENDING,
    "processing": JobStatus.RUNNING,
    "running": JobStatus.RUNNING,
    "completed": JobStatus.SUCCEEDED,
    "finished": JobStatus.SUCCEEDED,
    "success": JobStatus.SUCCEEDED,
    "failed": JobStatus.FAILED,
}


def build_imagine_payload(
    prompt: str, reference_image_url: str | None = None
) -> dict[str, Any]:
    """Request body for an imagine task."""
    payload: dict[str, Any] = {
        "prompt": prompt,
        "process_mode": "fast",
        "aspect_ratio": "5:8",
        "skip_prompt_check": True,
        "webhook_endpoint": "",
        "webhook_secret": "",
    }
    if reference_image_url:
        payload["reference_image_url"] = reference_image_url
    return payload


def extract_image_urls(output: dict[str, Any]) -> list[str]:
    """Result URLs, preferring temporary URLs over permanent ones."""
    for key in ("temporary_image_urls", "image_urls", "image_url"):
        urls = _url_list(output.get(key))
        if urls:
            return urls
    return []


def _url_list(value: Any) -> list[str]:
    """A bare URL string becomes a one-item list; non-string items are dropped."""
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, list):
        return [u for u in value if isinstance(u, str) and u]
    return []


class GoAPIClient:
    """Job backend for GoAPI's Midjourney endpoints."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = DEFAULT_GOAPI_BASE_URL,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        headers = {"x-api-key": api_key} if api_key else {}
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @property
    def has_api_key(self) -> bool:
        return bool(self._api_key)

    async def submit(self, payload: dict[str, Any]) -> str:
        if not self._api_key:
            raise SubmissionError("GOAPI_API_KEY is missing")
        try:
            response = await self._client.post(_IMAGINE_PATH, json=payload)
        except httpx.HTTPError as e:
            raise SubmissionError(f"GoAPI unreachable: {e}", original=e) from e

        if response.is_error:
            raise SubmissionError(
                f"GoAPI imagine request failed: {response.status_code} - {response.text[:200]}",
                http_status=response.status_code,
            )
        try:
            body = response.json()
        except ValueError as e:
            raise SubmissionError("GoAPI returned a non-JSON response", original=e) from e

        if not isinstance(body, dict):
            raise SubmissionError("GoAPI returned an unexpected response body")
        task_id = body.get("task_id") or (body.get("data") or {}).get("task_id")
        return str(task_id) if task_id else ""

    async def fetch_status(self, task_id: str) -> TaskSnapshot:
        data = await self._get_task(task_id)

        raw_status = str(data.get("status") or "").lower()
        status = _STATUS_MAP.get(raw_status, JobStatus.RUNNING)
        output = data.get("output") or {}
        if not isinstance(output, dict):
            if status != JobStatus.FAILED:
                raise PollTransientError(
                    f"GoAPI task output has unexpected type {type(output).__name__}",
                    task_id=task_id,
                )
            output = {}

        if status == JobStatus.FAILED:
            return TaskSnapshot(
                status=status,
                progress=_progress(output.get("progress")),
                error=_error_reason(data),
                raw=data,
            )

        if not output:
            # Output appears once the task is picked up
            return TaskSnapshot(status=JobStatus.PENDING, raw=data)

        progress = _progress(output.get("progress"))

        if status == JobStatus.SUCCEEDED:
            urls = extract_image_urls(output)
            if not urls:
                return TaskSnapshot(
                    status=JobStatus.FAILED,
                    progress=progress,
                    error="No image URLs found in completed task response",
                    raw=data,
                )
            result = {
                "url": urls[0],
                "all_image_urls": urls,
                "temporary_image_urls": _url_list(output.get("temporary_image_urls")) or None,
                "task_id": task_id,
            }
            return TaskSnapshot(status=status, progress=100, result=result, raw=data)

        return TaskSnapshot(status=status, progress=progress, raw=data)

    async def check_task(self, task_id: str) -> dict[str, Any]:
        """Summarize a task's raw upstream state for diagnostics."""
        data = await self._get_task(task_id)
        output = data.get("output")
        if not isinstance(output, dict):
            output = {}
        meta = data.get("meta")
        if not isinstance(meta, dict):
            meta = {}
        urls = extract_image_urls(output)
        return {
            "taskId": task_id,
            "status": data.get("status") or "unknown",
            "progress": _progress(output.get("progress")),
            "imageUrl": urls[0] if urls else None,
            "imageUrls": urls or None,
            "createdAt": meta.get("created_at"),
            "startedAt": meta.get("started_at"),
            "endedAt": meta.get("ended_at"),
            "error": _error_reason(data) if data.get("error") else None,
        }

    async def close(self) -> None:
        await self._client.aclose()

    async def _get_task(self, task_id: str) -> dict[str, Any]:
        try:
            response = await self._client.get(_TASK_PATH.format(task_id=task_id))
        except httpx.HTTPError as e:
            raise PollTransientError(
                f"GoAPI status request failed: {e}", task_id=task_id, original=e
            ) from e

        if response.is_error:
            raise PollTransientError(
                f"GoAPI status request failed: {response.status_code} - {response.text[:200]}",
                task_id=task_id,
                http_status=response.status_code,
            )
        try:
            body = response.json()
        except ValueError as e:
            raise PollTransientError(
                "GoAPI returned a non-JSON status response", task_id=task_id, original=e
            ) from e

        data = body.get("data") if isinstance(body, dict) else None
        return data if isinstance(data, dict) else {}


def _progress(value: Any) -> int:
    try:
        return max(0, min(100, int(float(value))))
    except (TypeError, ValueError):
        return 0


def _error_reason(data: dict[str, Any]) -> str:
    error = data.get("error") or {}
    if isinstance(error, dict):
        reason = error.get("message") or error.get("raw_message")
    else:
        reason = str(error)
    return reason or "Unknown error"
