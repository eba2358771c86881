import os
import tempfile
from pathlib import Path

_DB_DIR = Path(tempfile.mkdtemp(prefix="notesync-tests-"))
_DB_PATH = _DB_DIR / "test.db"

os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_DB_PATH}")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("RUN_MIGRATIONS", "false")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402

from notesync.client import AuthService, NotesApiClient, SyncEngine, create_sync_engine  # noqa: E402
from notesync.database import Base  # noqa: E402
from notesync.main import app  # noqa: E402
import notesync.models  # noqa: E402,F401

BASE_URL = "http://testserver"


@pytest.fixture(autouse=True)
def db_schema():
    sync_engine = create_engine(f"sqlite:///{_DB_PATH}")
    Base.metadata.create_all(sync_engine)
    try:
        yield
    finally:
        Base.metadata.drop_all(sync_engine)
        sync_engine.dispose()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def register(client: TestClient, username: str, password: str = "secret") -> dict[str, str]:
    resp = client.post("/auth/register", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def alice(client) -> dict[str, str]:
    return register(client, "alice")


@pytest.fixture
def bob(client) -> dict[str, str]:
    return register(client, "bob")


@pytest.fixture
async def http():
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=BASE_URL) as c:
        yield c


@pytest.fixture
async def auth(http) -> AuthService:
    service = AuthService(client=http)
    await service.register("alice", "secret")
    return service


@pytest.fixture
async def engine(auth, http) -> SyncEngine:
    return create_sync_engine(auth, client=http)


class FakeNotesServer:
    """Stand-in for the notes API behind httpx.MockTransport.

    ``fail`` maps "METHOD /path" to either an exception instance to raise or
    a status code to answer with.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.fail: dict[str, object] = {}
        self.next_id = 100
        self.on_request = None

    def _key(self, request: httpx.Request) -> str:
        return f"{request.method} {request.url.path}"

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.on_request is not None:
            self.on_request(request)
        failure = self.fail.get(self._key(request))
        if isinstance(failure, Exception):
            raise failure
        if isinstance(failure, int):
            return httpx.Response(failure, json={"success": False, "error": f"status {failure}"})
        if request.method == "POST" and request.url.path == "/notes/subitems":
            self.next_id += 1
            return httpx.Response(200, json={"success": True, "subitemId": self.next_id})
        if request.method == "POST" and request.url.path == "/notes":
            self.next_id += 1
            return httpx.Response(200, json={"success": True, "noteId": self.next_id, "subitemIds": []})
        if request.method == "GET" and request.url.path == "/notes":
            return httpx.Response(200, json={"success": True, "notes": []})
        return httpx.Response(200, json={"success": True})

    def paths(self) -> list[str]:
        return [self._key(r) for r in self.requests]


@pytest.fixture
def fake_server() -> FakeNotesServer:
    return FakeNotesServer()


@pytest.fixture
async def fake_engine(fake_server):
    logouts: list[int] = []
    transport = httpx.MockTransport(fake_server.handler)
    async with httpx.AsyncClient(transport=transport, base_url=BASE_URL) as c:
        api = NotesApiClient(
            token=lambda: "token",
            on_unauthorized=lambda: logouts.append(1),
            client=c,
        )
        engine = SyncEngine(api)
        engine.logouts = logouts
        yield engine
