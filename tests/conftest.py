import pytest
import pytest_asyncio
import httpx
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient

from chatroom.client import ChatClient
from chatroom.core.config import Settings
from chatroom.main import create_app
from chatroom.store import MemoryStore, SQLStore


class SteppingClock:
    """Deterministic clock for stores; time only moves when told to"""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)
        return self.now

    def rewind(self, **kwargs):
        self.now -= timedelta(**kwargs)
        return self.now


def make_store(backend, clock=None):
    if backend == "sql":
        return SQLStore("sqlite://", clock=clock)
    return MemoryStore(clock=clock)


@pytest.fixture
def clock():
    return SteppingClock()


@pytest.fixture(params=["memory", "sql"])
def store(request, clock):
    """Fresh store per test, on every backend, driven by the stepping clock"""
    s = make_store(request.param, clock)
    yield s
    s.close()


@pytest.fixture
def settings():
    return Settings(LOG_JSON=False, LOG_LEVEL="WARNING", STORE_BACKEND="memory")


@pytest.fixture
def app(settings):
    return create_app(settings, store=MemoryStore())


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest_asyncio.fixture
async def chat_client(app):
    """Polling client talking to the app in-process"""
    transport = httpx.ASGITransport(app=app)
    async with ChatClient("http://testserver", transport=transport) as c:
        yield c
