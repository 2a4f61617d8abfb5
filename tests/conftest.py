from unittest.mock import AsyncMock

import pytest

from cardgen.cache.manager import CacheManager
from cardgen.cards import parse_card_details
from cardgen.config.schema import Settings
from cardgen.service import CardService
from cardgen.types import JobStatus, NFTData, NFTTrait, TaskSnapshot


class FakeBackend:
    """Job backend that replays a fixed sequence of status snapshots.

    Entries may be TaskSnapshot instances or exceptions to raise. The last
    entry repeats once the sequence is exhausted.
    """

    def __init__(self, snapshots=None, task_id="task-1", submit_error=None):
        self.snapshots = list(snapshots or [])
        self.task_id = task_id
        self.submit_error = submit_error
        self.submitted = []
        self.status_calls = 0
        self.has_api_key = True

    async def submit(self, payload):
        self.submitted.append(payload)
        if self.submit_error is not None:
            raise self.submit_error
        return self.task_id

    async def fetch_status(self, task_id):
        index = min(self.status_calls, len(self.snapshots) - 1)
        self.status_calls += 1
        item = self.snapshots[index]
        if isinstance(item, Exception):
            raise item
        return item

    async def check_task(self, task_id):
        return {"taskId": task_id, "status": "processing"}

    async def close(self):
        pass


class RecordingSleep:
    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


class Snapshots:
    @staticmethod
    def pending(progress=0):
        return TaskSnapshot(status=JobStatus.PENDING, progress=progress)

    @staticmethod
    def running(progress=0):
        return TaskSnapshot(status=JobStatus.RUNNING, progress=progress)

    @staticmethod
    def succeeded(url="https://x/a.png", **extra):
        return TaskSnapshot(
            status=JobStatus.SUCCEEDED, progress=100, result={"url": url, **extra}
        )

    @staticmethod
    def failed(reason="banned prompt"):
        return TaskSnapshot(status=JobStatus.FAILED, error=reason)


@pytest.fixture
def snap():
    return Snapshots


@pytest.fixture
def make_backend():
    return FakeBackend


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def caches(tmp_path):
    mgr = CacheManager(tmp_path / "cache")
    mgr.load()
    return mgr


@pytest.fixture
def sample_nft():
    return NFTData(
        identifier="1234",
        image_url="https://img.example/1234.png",
        traits=[
            NFTTrait(trait_type="Type", value="Human"),
            NFTTrait(trait_type="Hair", value="Blue Spiky"),
            NFTTrait(trait_type="Background", value="Off White A"),
        ],
    )


@pytest.fixture
def card_json():
    return (
        '{"cardName":"Kael Emberstrike","typeIcon":"🔥","hp":"120 HP",'
        '"move":{"name":"Inferno Slash","atk":"50"},'
        '"moveDescription":"Ignites the battlefield.",'
        '"weakness":"💧 x2","resistance":"🪨 -20","retreatCost":"🌟","rarity":"★★★"}'
    )


@pytest.fixture
def settings(tmp_path):
    return Settings(
        opensea_api_key="os-key",
        openai_api_key="sk-key",
        goapi_api_key="goapi-key",
        cache_dir=tmp_path / "cache",
        max_poll_attempts=5,
    )


@pytest.fixture
def opensea(sample_nft):
    client = AsyncMock()
    client.fetch_nft_or_placeholder.return_value = sample_nft
    return client


@pytest.fixture
def ai(card_json):
    client = AsyncMock()
    client.analyze_image.return_value = "female, blue spiky hair, calm eyes"
    client.generate_card_details.return_value = parse_card_details(card_json)
    return client


@pytest.fixture
def make_service(settings, caches, opensea, ai, recording_sleep, snap):
    """Build a CardService over fake clients; returns (service, backend)."""

    def _make(snapshots=None, **settings_overrides):
        backend = FakeBackend(snapshots or [snap.running(40), snap.succeeded()])
        service = CardService(
            settings=settings.model_copy(update=settings_overrides),
            caches=caches,
            opensea=opensea,
            ai=ai,
            goapi=backend,
            sleep=recording_sleep,
        )
        return service, backend

    return _make
