"""OpenAI client for character analysis and card design."""

from __future__ import annotations

import base64
import logging

import httpx
import openai

from cardgen.cards import parse_card_details
from cardgen.config.defaults import (
    DEFAULT_ANALYSIS_MAX_TOKENS,
    DEFAULT_CARD_MAX_TOKENS,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_OPENAI_MODEL,
)
from cardgen.errors.exceptions import UpstreamError
from cardgen.errors.retry import classify_http_error, classify_openai_error, upstream_retrying
from cardgen.prompts import card_details_prompt, image_analysis_prompt
from cardgen.types import CardDetails, NFTTrait, format_traits

logger = logging.getLogger(__name__)


class CardAIClient:
    """Sends vision and text requests to an OpenAI chat model.

    Both operations raise UpstreamError on failure; substituting the
    fallback description or default card is left to the caller so that
    fallbacks never end up in a cache.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str = DEFAULT_OPENAI_MODEL,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._max_retries = max_retries
        # openai's own retries are off; upstream_retrying owns the policy
        self._client = openai.AsyncOpenAI(
            api_key=api_key or "missing",
            base_url=base_url,
            max_retries=0,
            timeout=timeout,
        )
        self._http = httpx.AsyncClient(
            timeout=timeout, follow_redirects=True, transport=transport
        )

    @property
    def has_api_key(self) -> bool:
        return bool(self._api_key)

    @property
    def model(self) -> str:
        return self._model

    async def analyze_image(self, image_url: str, traits: list[NFTTrait]) -> str:
        """Describe the character shown at ``image_url``."""
        self._require_key()
        data_url = await self._fetch_data_url(image_url)
        prompt = image_analysis_prompt(format_traits(traits))
        messages = self._build_messages(prompt, data_url)

        content = await self._complete(messages, DEFAULT_ANALYSIS_MAX_TOKENS)
        description = content.strip()
        if not description:
            raise UpstreamError("Image analysis returned an empty description", service="openai")
        logger.info("Image analysis complete: %s", description[:80])
        return description

    async def generate_card_details(
        self, traits: list[NFTTrait], description: str
    ) -> CardDetails:
        """Design card details from the NFT traits and character description."""
        self._require_key()
        prompt = card_details_prompt(format_traits(traits), description)
        messages = self._build_messages(prompt)

        content = await self._complete(messages, DEFAULT_CARD_MAX_TOKENS)
        try:
            return parse_card_details(content)
        except ValueError as e:
            logger.warning("Unparseable card details: %s", content[:200])
            raise UpstreamError(str(e), service="openai") from e

    async def close(self) -> None:
        await self._client.close()
        await self._http.aclose()

    def _require_key(self) -> None:
        if not self._api_key:
            raise UpstreamError("OpenAI API key is missing", service="openai")

    async def _complete(self, messages: list[dict], max_tokens: int) -> str:
        try:
            async for attempt in upstream_retrying(max_attempts=self._max_retries):
                with attempt:
                    response = await self._client.chat.completions.create(
                        model=self._model,
                        messages=messages,
                        max_tokens=max_tokens,
                    )
        except openai.OpenAIError as e:
            raise classify_openai_error(e) from e

        if not response.choices:
            raise UpstreamError("OpenAI returned no choices", service="openai")
        return response.choices[0].message.content or ""

    async def _fetch_data_url(self, image_url: str) -> str:
        """Download an image and inline it as a base64 data URL."""
        try:
            response = await self._http.get(image_url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise classify_http_error(e, "image") from e

        mime = response.headers.get("content-type", "image/png").split(";")[0].strip()
        encoded = base64.b64encode(response.content).decode("ascii")
        return f"data:{mime or 'image/png'};base64,{encoded}"

    @staticmethod
    def _build_messages(prompt: str, image_url: str | None = None) -> list[dict]:
        if image_url:
            return [{
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": image_url}},
                ],
            }]
        return [{"role": "user", "content": prompt}]
