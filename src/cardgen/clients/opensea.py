"""OpenSea client for NFT metadata lookups."""

from __future__ import annotations

import logging

import httpx

from cardgen.cards import placeholder_nft
from cardgen.config.defaults import (
    DEFAULT_CHAIN,
    DEFAULT_CONTRACT,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_OPENSEA_BASE_URL,
)
from cardgen.errors.exceptions import UpstreamError
from cardgen.errors.retry import classify_http_error, upstream_retrying
from cardgen.types import NFTData, NFTTrait

logger = logging.getLogger(__name__)


class OpenSeaClient:
    """Reads a single NFT from the OpenSea v2 API."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = DEFAULT_OPENSEA_BASE_URL,
        chain: str = DEFAULT_CHAIN,
        contract: str = DEFAULT_CONTRACT,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._chain = chain
        self._contract = contract
        self._max_retries = max_retries
        headers = {"X-API-KEY": api_key} if api_key else {}
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @property
    def has_api_key(self) -> bool:
        return bool(self._api_key)

    async def fetch_nft(self, token_id: str) -> NFTData:
        """Fetch NFT metadata. Raises UpstreamError on failure."""
        if not self._api_key:
            raise UpstreamError("OPENSEA_API_KEY is missing", service="opensea")

        path = f"/chain/{self._chain}/contract/{self._contract}/nfts/{token_id}"
        async for attempt in upstream_retrying(max_attempts=self._max_retries):
            with attempt:
                try:
                    response = await self._client.get(path)
                    response.raise_for_status()
                except httpx.HTTPError as e:
                    raise classify_http_error(e, "opensea") from e

        try:
            nft = response.json()["nft"]
        except (ValueError, KeyError, TypeError) as e:
            raise UpstreamError(
                f"Unexpected OpenSea response for token {token_id}", service="opensea"
            ) from e

        return _parse_nft(token_id, nft)

    async def fetch_nft_or_placeholder(self, token_id: str) -> NFTData:
        """Fetch NFT metadata, falling back to placeholder data on any failure."""
        try:
            nft = await self.fetch_nft(token_id)
        except UpstreamError as e:
            logger.warning("OpenSea lookup for token %s failed (%s), using placeholder", token_id, e)
            return placeholder_nft(token_id)
        logger.info("NFT data fetched for token %s: %s", token_id, nft.image_url)
        return nft

    async def close(self) -> None:
        await self._client.aclose()


def _parse_nft(token_id: str, nft: dict) -> NFTData:
    traits = [
        NFTTrait(trait_type=str(t.get("trait_type", "")), value=str(t.get("value", "")))
        for t in nft.get("traits") or []
    ]
    image_url = nft.get("image_url") or placeholder_nft(token_id).image_url
    return NFTData(
        identifier=str(nft.get("identifier") or token_id),
        image_url=image_url,
        traits=traits,
        name=nft.get("name"),
        collection=nft.get("collection"),
    )
