import copy
import json

import httpx
import pytest

from toksave.config.settings import UpstreamConfig
from toksave.core.state import state
from toksave.infra.storage import MemoryStorage
from toksave.services.history import HistoryStore
from toksave.services.retriever import VideoRetriever
from toksave.services.upstream import UpstreamClient

WRAPPED_PAYLOAD = {
    "code": 0,
    "msg": "success",
    "processed_time": 0.21,
    "data": {
        "id": "7301234567890",
        "title": "dance challenge #fyp",
        "cover": "https://cdn.example.com/cover.jpg",
        "play": "https://cdn.example.com/play.mp4",
        "wmplay": "https://cdn.example.com/wmplay.mp4",
        "duration": 15,
        "music": "https://cdn.example.com/music.mp3",
        "music_info": {"title": "original sound - nick", "author": "nick"},
        "author": {
            "nickname": "Nick",
            "unique_id": "nick.dances",
            "avatar": "https://cdn.example.com/avatar.jpg",
        },
    },
}


@pytest.fixture
def wrapped_payload():
    return copy.deepcopy(WRAPPED_PAYLOAD)


class RecordingHandler:
    """Mock upstream answering every request with one fixed response"""

    def __init__(self, status_code: int = 200, json_body=None, text=None, exc=None):
        self.status_code = status_code
        self.json_body = json_body
        self.text = text
        self.exc = exc
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc(f"{self.exc.__name__} while contacting upstream", request=request)
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, content=json.dumps(self.json_body).encode())


@pytest.fixture
def upstream_config():
    return UpstreamConfig(api_key="test-key")


@pytest.fixture
def make_retriever(upstream_config):
    """Build a retriever whose upstream is the given handler"""
    def _make(handler: RecordingHandler) -> VideoRetriever:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return VideoRetriever(UpstreamClient(upstream_config, client=client))
    return _make


@pytest.fixture
def app_state(make_retriever):
    """Wire the app state the way the lifespan does, with mocked collaborators"""
    previous = (state.retriever, state.history, state.history_backend)

    def _wire(handler: RecordingHandler) -> HistoryStore:
        state.retriever = make_retriever(handler)
        state.history = HistoryStore(MemoryStorage(), max_size=15)
        state.history_backend = "memory"
        return state.history

    yield _wire

    state.retriever, state.history, state.history_backend = previous


@pytest.fixture
def upstream():
    """Factory for mock upstream handlers"""
    return RecordingHandler
