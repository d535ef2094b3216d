"""Pytest configuration and shared fixtures for Snapie tests."""

from typing import Any, Dict, List, Optional, Tuple

import pytest
from httpx import ASGITransport, AsyncClient

from snapie.models.video import CollectionKind, StatusCategory, VideoRecord
from snapie.services.resolver.status_resolver import StatusResolver
from snapie.services.watch.watch_service import WatchService

GATEWAYS = [
    "https://cdn.example/ipfs",
    "https://gw2.example/ipfs",
    "https://gw3.example/ipfs",
    "https://gw4.example/ipfs",
]

PLACEHOLDERS = {
    StatusCategory.PROCESSING: "QmProcessingPlaceholder",
    StatusCategory.FAILED: "ipfs://QmFailedPlaceholder",
    StatusCategory.DELETED: "https://static.example/deleted.mp4",
}


class InMemoryVideoStore:
    """Stands in for VideoDatabase; keeps raw documents per collection."""

    def __init__(self):
        self.docs: Dict[Tuple[CollectionKind, str, str], Dict[str, Any]] = {}
        self.increment_calls: List[Tuple[CollectionKind, str, str]] = []

    def add(self, kind: CollectionKind, **doc) -> Dict[str, Any]:
        self.docs[(kind, doc["owner"], doc["permlink"])] = doc
        return doc

    def views(self, kind: CollectionKind, owner: str, permlink: str) -> Optional[int]:
        doc = self.docs.get((kind, owner, permlink))
        return None if doc is None else doc.get("views", 0)

    async def find_video(self, kind, owner, permlink):
        doc = self.docs.get((kind, owner, permlink))
        if doc is None:
            return None
        return VideoRecord.from_document(kind, doc)

    async def increment_views(self, kind, owner, permlink):
        self.increment_calls.append((kind, owner, permlink))
        doc = self.docs.get((kind, owner, permlink))
        if doc is None:
            return False
        doc["views"] = doc.get("views", 0) + 1
        return True


class FakePipeline:
    """Records every call the controller makes on the media pipeline."""

    def __init__(self):
        self.current_time = 0.0
        self.duration = 120.0
        self.paused = True
        self.muted = False
        self.volume = 1.0
        self.fullscreen = False
        self.loads: List[Tuple[str, float]] = []
        self.qualities: List[int] = []
        self.seeks: List[float] = []
        self.play_calls = 0
        self.pause_calls = 0

    def load(self, url, start_time=0.0):
        self.loads.append((url, start_time))

    def play(self):
        self.play_calls += 1
        self.paused = False

    def pause(self):
        self.pause_calls += 1
        self.paused = True

    def seek(self, position):
        self.seeks.append(position)
        self.current_time = position

    def set_quality(self, tier):
        self.qualities.append(tier)

    def set_muted(self, muted):
        self.muted = muted

    def set_volume(self, volume):
        self.volume = volume

    def set_fullscreen(self, fullscreen):
        self.fullscreen = fullscreen


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def resolver():
    return StatusResolver(gateways=GATEWAYS, chain_length=4, placeholders=PLACEHOLDERS)


@pytest.fixture
def store():
    return InMemoryVideoStore()


@pytest.fixture
def pipeline():
    return FakePipeline()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
async def client(store, resolver):
    from snapie.api.routes.videos import get_watch_service
    from snapie.core.database import get_video_store
    from snapie.main import app

    app.dependency_overrides[get_video_store] = lambda: store
    app.dependency_overrides[get_watch_service] = lambda: WatchService(resolver)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
