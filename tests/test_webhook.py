import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from api.webhook import SECRET_HEADER, create_app
from config.settings import settings


class FakeCache:
    def __init__(self, healthy=True):
        self.healthy = healthy

    async def ping(self):
        return self.healthy


class BrokenStore:
    async def ping(self):
        return False


class FakeQueue:
    def __init__(self):
        self.items = []

    async def put(self, item):
        self.items.append(item)


class FakeApplication:
    bot = None

    def __init__(self):
        self.update_queue = FakeQueue()


@pytest_asyncio.fixture()
async def client(store):
    app = create_app(store, application=FakeApplication(), cache=FakeCache(healthy=False))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac, app


@pytest.mark.asyncio
async def test_health(client):
    ac, _ = client
    resp = await ac.get("/health")
    assert resp.status_code == 200
    assert resp.json()["ok"] is True
    assert resp.headers.get("X-Request-ID")


@pytest.mark.asyncio
async def test_ready_reports_redis_without_failing(client):
    ac, _ = client
    resp = await ac.get("/ready")
    assert resp.status_code == 200
    assert resp.json()["data"] == {"ready": True, "database": True, "redis": False}


@pytest.mark.asyncio
async def test_ready_fails_without_database():
    app = create_app(BrokenStore(), cache=FakeCache())
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        resp = await ac.get("/ready")
    assert resp.status_code == 503
    assert resp.json()["error"]["code"] == "db_unreachable"


@pytest.mark.asyncio
async def test_webhook_enqueues_update(client, monkeypatch):
    monkeypatch.setattr(settings, "BOT_WEBHOOK_SECRET", "s3cret")
    ac, app = client
    update = {"update_id": 1, "message": {"message_id": 5, "date": 0, "chat": {"id": 9, "type": "private"}, "text": "hi"}}

    denied = await ac.post(settings.BOT_WEBHOOK_PATH, json=update)
    assert denied.status_code == 403
    assert app.state.application.update_queue.items == []

    resp = await ac.post(settings.BOT_WEBHOOK_PATH, json=update, headers={SECRET_HEADER: "s3cret"})
    assert resp.status_code == 200
    queued = app.state.application.update_queue.items
    assert len(queued) == 1
    assert queued[0].update_id == 1
