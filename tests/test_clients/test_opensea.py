"""Tests for the OpenSea client."""

import httpx
import pytest

from cardgen.clients.opensea import OpenSeaClient
from cardgen.errors.exceptions import UpstreamError


def _client(handler, api_key="os-key"):
    return OpenSeaClient(api_key=api_key, max_retries=1, transport=httpx.MockTransport(handler))


_NFT = {
    "nft": {
        "identifier": "1234",
        "name": "Azuki #1234",
        "collection": "azuki",
        "image_url": "https://img.example/1234.png",
        "traits": [
            {"trait_type": "Type", "value": "Human"},
            {"trait_type": "Hair", "value": "Pink Hairband"},
        ],
    }
}


class TestFetchNFT:
    async def test_parses_nft(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["key"] = request.headers.get("X-API-KEY")
            return httpx.Response(200, json=_NFT)

        nft = await _client(handler).fetch_nft("1234")

        assert seen["path"] == (
            "/api/v2/chain/ethereum/contract/"
            "0xed5af388653567af2f388e6224dc7c4b3241c544/nfts/1234"
        )
        assert seen["key"] == "os-key"
        assert nft.identifier == "1234"
        assert nft.image_url == "https://img.example/1234.png"
        assert [t.value for t in nft.traits] == ["Human", "Pink Hairband"]

    async def test_error_status_raises(self):
        with pytest.raises(UpstreamError) as exc_info:
            await _client(lambda r: httpx.Response(404, text="not found")).fetch_nft("1")
        assert exc_info.value.http_status == 404
        assert exc_info.value.service == "opensea"

    async def test_missing_key_raises(self):
        with pytest.raises(UpstreamError):
            await _client(lambda r: httpx.Response(200, json=_NFT), api_key=None).fetch_nft("1")

    async def test_unexpected_body_raises(self):
        with pytest.raises(UpstreamError):
            await _client(lambda r: httpx.Response(200, json={"other": 1})).fetch_nft("1")

    async def test_numeric_trait_values_become_strings(self):
        body = {"nft": {"identifier": "1", "image_url": "u",
                        "traits": [{"trait_type": "Level", "value": 3}]}}
        nft = await _client(lambda r: httpx.Response(200, json=body)).fetch_nft("1")
        assert nft.traits[0].value == "3"


class TestPlaceholder:
    async def test_failure_returns_placeholder(self):
        nft = await _client(lambda r: httpx.Response(500, text="down")).fetch_nft_or_placeholder("77")
        assert nft.identifier == "77"
        assert nft.image_url == "https://placehold.co/600x600/f8f3e6/222222/png?text=Azuki+%2377"
        assert [t.trait_type for t in nft.traits] == [
            "Type", "Hair", "Clothing", "Eyes", "Mouth", "Background",
        ]

    async def test_missing_key_returns_placeholder(self):
        client = _client(lambda r: httpx.Response(200, json=_NFT), api_key=None)
        nft = await client.fetch_nft_or_placeholder("5")
        assert "placehold.co" in nft.image_url
        assert not client.has_api_key

    async def test_success_passes_through(self):
        nft = await _client(lambda r: httpx.Response(200, json=_NFT)).fetch_nft_or_placeholder("1234")
        assert nft.name == "Azuki #1234"
