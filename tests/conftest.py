"""
Shared fixtures: a fresh sqlite file per test, an ASGI client with the
broadcast publisher swapped for a recording one, and user factories.
"""
import os
import tempfile

# Point the app at a throwaway database before any chatroom module is imported
os.environ.setdefault("DATABASE_PATH", os.path.join(tempfile.mkdtemp(prefix="chatroom-tests-"), "default.db"))
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from chatroom import database
from chatroom.main import app
from chatroom.security import create_access_token
from chatroom.services import auth_service
from chatroom.services.broadcast import build_event, get_publisher


class RecordingPublisher:
    """Stands in for the broadcast publisher and keeps every event it is handed."""

    def __init__(self, channel: str = "chat"):
        self.channel = channel
        self.events = []

    async def publish(self, author, message) -> None:
        self.events.append(build_event(self.channel, author, message))


@pytest.fixture(autouse=True)
async def chat_db(tmp_path, monkeypatch):
    engine = database.build_engine(f"sqlite+aiosqlite:///{tmp_path / 'chat.db'}", poolclass=NullPool)
    session_factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    monkeypatch.setattr(database, "engine", engine)
    monkeypatch.setattr(database, "AsyncSessionLocal", session_factory)
    await database.create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(chat_db):
    async with database.AsyncSessionLocal() as session:
        yield session


@pytest.fixture
def recorder():
    return RecordingPublisher()


@pytest.fixture
async def client(recorder):
    app.dependency_overrides[get_publisher] = lambda: recorder
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    async def _make_user(name: str = "Alice", email: str | None = None, password: str = "secret123"):
        email = email or f"{name.lower()}@example.com"
        return await auth_service.register(db_session, name=name, email=email, password=password)
    return _make_user


@pytest.fixture
def auth_headers():
    def _auth_headers(user) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}
    return _auth_headers
