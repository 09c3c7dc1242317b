from __future__ import annotations

import os
from collections.abc import AsyncGenerator

# Settings are cached on first import; configure the environment before that.
os.environ["DEBUG"] = "true"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_dummy"
os.environ["RESEND_API_KEY"] = ""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from poesis.app import app
from poesis.constants import COOKIE_NAME
from poesis.db.redis import get_redis
from poesis.db.session import get_db
from poesis.models import Base, Poem, User, UserRole
from poesis.services.session_store import SessionStore


class FakeRedis:
    """Just the commands SessionStore uses."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def get(self, key: str) -> str | None:
        return self.store.get(key)

    async def delete(self, *keys: str) -> int:
        return sum(self.store.pop(key, None) is not None for key in keys)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def sessions(fake_redis) -> SessionStore:
    return SessionStore(fake_redis, ttl_seconds=3600)


@pytest_asyncio.fixture
async def client(session_factory, fake_redis) -> AsyncGenerator[AsyncClient, None]:
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_redis] = lambda: fake_redis
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def user_factory(db):
    counter = {"n": 0}

    async def _create(username: str | None = None, role: UserRole = UserRole.USER, **fields) -> User:
        counter["n"] += 1
        username = username or f"reader{counter['n']}"
        fields.setdefault("email", f"{username.lower()}@example.com")
        fields.setdefault("is_subscribed", False)
        user = User(username=username, role=role, **fields)
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user

    return _create


@pytest.fixture
def poem_factory(db):
    counter = {"n": 0}

    async def _create(title: str | None = None, **fields) -> Poem:
        counter["n"] += 1
        fields.setdefault("author", "Robert Frost")
        fields.setdefault("content", "Line one\nLine two\nLine three\nLine four")
        fields.setdefault("image_url", "https://example.com/poem.jpg")
        fields.setdefault("is_premium", False)
        poem = Poem(title=title or f"Poem {counter['n']}", **fields)
        db.add(poem)
        await db.commit()
        await db.refresh(poem)
        return poem

    return _create


@pytest.fixture
def login_as(client, sessions):
    """Open a session for ``user`` and attach its cookie to the test client."""

    async def _login(user: User) -> str:
        session_id = await sessions.create(user.id)
        client.cookies.set(COOKIE_NAME, session_id)
        return session_id

    return _login
