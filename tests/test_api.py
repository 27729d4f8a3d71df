"""HTTP API tests, the upstream is mocked and the app runs in-process."""

import httpx
import pytest
from fastapi import HTTPException
from starlette.requests import Request

import toksave.main as main
from toksave.core.state import state
from toksave.infra.concurrency import SingleFlightGuard, single_flight
from toksave.infra.storage import MemoryStorage
from toksave.main import app

VIDEO_URL = "https://vm.tiktok.com/ZMabc123/"


@pytest.fixture
def client():
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


def make_request(host: str = "10.0.0.1") -> Request:
    return Request({
        "type": "http",
        "method": "POST",
        "path": "/retrieve",
        "headers": [],
        "client": (host, 50000),
    })


@pytest.mark.asyncio
async def test_validate(client, app_state, upstream):
    handler = upstream(json_body={})
    app_state(handler)

    async with client:
        ok = await client.get("/validate", params={"url": VIDEO_URL})
        bad = await client.get("/validate", params={"url": "https://youtube.com/watch?v=1"})

    assert ok.json() == {"url": VIDEO_URL, "supported": True}
    assert bad.json()["supported"] is False
    assert handler.requests == []


@pytest.mark.asyncio
async def test_retrieve_success(client, app_state, upstream, wrapped_payload):
    history = app_state(upstream(json_body=wrapped_payload))

    async with client:
        resp = await client.post("/retrieve", json={"url": f"  {VIDEO_URL}  "})

    assert resp.status_code == 200
    assert resp.headers["X-Request-ID"]

    body = resp.json()
    assert body["video"]["id"] == "7301234567890"
    assert body["video"]["play_url"] == "https://cdn.example.com/play.mp4"
    assert [d["kind"] for d in body["downloads"]] == ["no_watermark", "watermarked", "audio"]
    assert body["downloads"][0]["filename"] == "tiktok_7301234567890_no_wm.mp4"

    assert [e.id for e in history.entries] == ["7301234567890"]
    assert history.entries[0].source_url == VIDEO_URL


@pytest.mark.asyncio
async def test_retrieve_invalid_url(client, app_state, upstream):
    handler = upstream(json_body={})
    history = app_state(handler)

    async with client:
        resp = await client.post("/retrieve", json={"url": "https://www.youtube.com/watch?v=1"})

    assert resp.status_code == 400
    assert resp.headers["X-Error-Code"] == "invalid_url"
    assert resp.headers["X-Retryable"] == "false"
    assert "Invalid link" in resp.json()["detail"]
    assert handler.requests == []
    assert history.entries == []


@pytest.mark.asyncio
async def test_retrieve_upstream_status(client, app_state, upstream):
    history = app_state(upstream(status_code=503, text="Service Unavailable"))

    async with client:
        resp = await client.post("/retrieve", json={"url": VIDEO_URL})

    assert resp.status_code == 502
    assert resp.headers["X-Error-Code"] == "transport_error"
    assert resp.headers["X-Retryable"] == "true"
    assert "503" in resp.json()["detail"]
    assert history.entries == []


@pytest.mark.asyncio
async def test_retrieve_network_failure(client, app_state, upstream):
    app_state(upstream(exc=httpx.ConnectError))

    async with client:
        resp = await client.post("/retrieve", json={"url": VIDEO_URL})

    assert resp.status_code == 503
    assert resp.headers["X-Error-Code"] == "network_error"


@pytest.mark.asyncio
async def test_retrieve_upstream_message(client, app_state, upstream):
    app_state(upstream(json_body={"msg": "private video"}))

    async with client:
        resp = await client.post("/retrieve", json={"url": VIDEO_URL})

    assert resp.status_code == 422
    assert resp.headers["X-Error-Code"] == "upstream_reported_error"
    assert resp.json()["detail"] == "private video"


@pytest.mark.asyncio
async def test_retrieve_missing_play_url_localized(client, app_state, upstream):
    app_state(upstream(json_body={"data": {"id": "1"}}))

    async with client:
        resp = await client.post(
            "/retrieve",
            json={"url": VIDEO_URL},
            headers={"Accept-Language": "ja-JP,ja;q=0.9"},
        )

    assert resp.status_code == 422
    assert resp.headers["X-Error-Code"] == "missing_play_url"
    assert resp.json()["detail"].startswith("動画を取得できませんでした")


@pytest.mark.asyncio
async def test_retrieve_unexpected_error(client, app_state, upstream, monkeypatch):
    app_state(upstream(json_body={}))

    async def explode(url):
        raise RuntimeError("boom")

    monkeypatch.setattr(state.retriever, "retrieve", explode)

    async with client:
        resp = await client.post("/retrieve", json={"url": VIDEO_URL})

    assert resp.status_code == 500
    assert "boom" not in resp.json()["detail"]


@pytest.mark.asyncio
async def test_rejected_body_releases_client_slot(client, app_state, upstream, wrapped_payload):
    app_state(upstream(json_body=wrapped_payload))

    async with client:
        rejected = await client.post("/retrieve", json={})
        accepted = await client.post("/retrieve", json={"url": VIDEO_URL})

    assert rejected.status_code == 422
    assert accepted.status_code == 200
    assert single_flight.active == set()


@pytest.mark.asyncio
async def test_history_endpoints(client, app_state, upstream, wrapped_payload):
    app_state(upstream(json_body=wrapped_payload))

    async with client:
        await client.post("/retrieve", json={"url": VIDEO_URL})
        listed = await client.get("/history")
        cleared = await client.delete("/history")
        after = await client.get("/history")

    assert [e["id"] for e in listed.json()["items"]] == ["7301234567890"]
    assert listed.json()["items"][0]["author_handle"] == "nick.dances"
    assert cleared.json() == {"items": []}
    assert after.json() == {"items": []}


@pytest.mark.asyncio
async def test_health(client, app_state, upstream):
    app_state(upstream(json_body={}))

    async with client:
        root = await client.get("/")
        health = await client.get("/health")

    assert root.json()["history_backend"] == "memory"
    assert root.json()["redis_enabled"] is False
    assert health.json() == {
        "status": "ok",
        "redis": "disabled",
        "history_backend": "memory",
        "history_size": 0,
    }


class TestSingleFlightGuard:
    @pytest.mark.asyncio
    async def test_second_request_from_same_client_is_rejected(self):
        guard = SingleFlightGuard()
        first = guard(make_request())
        await first.__anext__()

        with pytest.raises(HTTPException) as exc_info:
            await guard(make_request()).__anext__()
        assert exc_info.value.status_code == 409

        await first.aclose()
        assert guard.active == set()

        again = guard(make_request())
        await again.__anext__()
        await again.aclose()

    @pytest.mark.asyncio
    async def test_clients_are_independent(self):
        guard = SingleFlightGuard()
        first = guard(make_request("10.0.0.1"))
        second = guard(make_request("10.0.0.2"))
        await first.__anext__()
        await second.__anext__()

        assert guard.active == {"10.0.0.1", "10.0.0.2"}

        await first.aclose()
        await second.aclose()
        assert guard.active == set()


class TestLifespan:
    @pytest.fixture
    def wiring(self, monkeypatch):
        closed = []

        async def fake_close_redis():
            closed.append("redis")

        monkeypatch.setattr(main, "setup_logging", lambda config: None)
        monkeypatch.setattr(main, "close_redis", fake_close_redis)
        previous = (state.retriever, state.history, state.history_backend)
        yield main, closed
        state.retriever, state.history, state.history_backend = previous

    @pytest.mark.asyncio
    async def test_startup_and_shutdown(self, wiring, monkeypatch):
        main, closed = wiring
        monkeypatch.setattr(main, "build_storage", lambda config, redis: (MemoryStorage(), "memory"))

        async with main.lifespan(app):
            assert state.history_backend == "memory"
            assert state.retriever is not None
            assert closed == []

        assert closed == ["redis"]
        assert state.retriever.client.client.is_closed

    @pytest.mark.asyncio
    async def test_failed_startup_still_closes_redis(self, wiring, monkeypatch):
        main, closed = wiring

        def broken_storage(config, redis):
            raise RuntimeError("storage misconfigured")

        monkeypatch.setattr(main, "build_storage", broken_storage)

        with pytest.raises(RuntimeError):
            async with main.lifespan(app):
                pass

        assert closed == ["redis"]
