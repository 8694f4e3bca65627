import httpx
import pytest
from whenever import Instant

from tubemeta.oembed_client import OEmbedTitleSource
from tubemeta.preferences import AudioTrackPreferences
from tubemeta.title_cache import TitleCache
from tubemeta.track_store import TrackSelectionStore


class FakeClock:
    """Mutable time source for cache expiry tests."""

    def __init__(self, start: Instant):
        self.now = start

    def __call__(self) -> Instant:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now = self.now.add(seconds=seconds)


class RecordingHandler:
    """httpx.MockTransport handler that counts requests and replays a response."""

    def __init__(self, responder):
        self.responder = responder
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)


class FakeBridge:
    """Host bridge stub returning a fixed response."""

    def __init__(self, response=None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.calls: list[str] = []

    async def fetch_oembed(self, video_id: str):
        self.calls.append(video_id)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def fixed_time():
    """Provide a fixed time for testing."""
    return Instant.from_utc(2025, 1, 1, 12, 0, 0)


@pytest.fixture
def clock(fixed_time):
    return FakeClock(fixed_time)


@pytest.fixture
def title_cache(clock):
    """Fresh, isolated title cache per test."""
    return TitleCache(max_size=200, negative_ttl_seconds=600, now_func=clock)


@pytest.fixture
def make_source(title_cache):
    """Build an OEmbedTitleSource backed by a mock HTTP transport."""

    def _make(responder, bridge=None):
        handler = RecordingHandler(responder)
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        source = OEmbedTitleSource(client, title_cache, bridge=bridge)
        return source, handler

    return _make


@pytest.fixture
def temp_preferences(fixed_time):
    """In-memory preference store."""
    return AudioTrackPreferences(":memory:", now_func=lambda: fixed_time)


@pytest.fixture
def notices():
    return []


@pytest.fixture
def track_store(temp_preferences, notices):
    return TrackSelectionStore(preferences=temp_preferences, notify=notices.append)
