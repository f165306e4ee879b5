"""Shared test fixtures.

Every test gets a fresh SQLite database file (via aiosqlite) with the schema
created from the ORM metadata. Redis is left uninitialised, so rate limiting
and announcement pushes are skipped unless a test injects a fake client.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable, Iterator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from playhub.auth.jwt import create_access_token, reset_keys
from playhub.auth.service import get_or_create_user
from playhub.config import get_settings
from playhub.database import close_db, get_engine, init_db
from playhub.db.base import Base
from playhub.db.models import User
from playhub.main import create_app
from playhub.rewards.seed import seed_tasks


@pytest.fixture(autouse=True)
def _test_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Point settings at a throwaway SQLite file and an HS256 test secret."""
    monkeypatch.setenv("PLAYHUB_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'playhub_test.db'}")
    monkeypatch.setenv("PLAYHUB_REDIS_URL", "")
    monkeypatch.setenv("PLAYHUB_JWT_SECRET", "test-secret-key-with-enough-length-for-hs256")
    monkeypatch.setenv("PLAYHUB_JWT_ALGORITHM", "HS256")
    monkeypatch.setenv("PLAYHUB_LOG_FORMAT", "console")
    monkeypatch.setenv("PLAYHUB_ADMIN_GAMERTAGS", '["admin_user"]')
    get_settings.cache_clear()
    reset_keys()
    yield
    get_settings.cache_clear()
    reset_keys()


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[None, None]:
    """Initialise the engine and create all tables."""
    await init_db(get_settings().database_url)
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await close_db()


@pytest_asyncio.fixture
async def db_session(database: None) -> AsyncGenerator[AsyncSession, None]:
    """A direct database session for service-level tests and assertions."""
    async with AsyncSession(get_engine(), expire_on_commit=False) as session:
        yield session


@pytest_asyncio.fixture
async def seeded(db_session: AsyncSession) -> AsyncSession:
    """Session over a database with task definitions seeded."""
    await seed_tasks(db_session)
    return db_session


@pytest_asyncio.fixture
async def client(database: None) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against a fresh app. Lifespan is not run; the fixtures own setup."""
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


UserFactory = Callable[..., Awaitable[tuple[User, dict[str, str]]]]


@pytest_asyncio.fixture
async def make_user(database: None) -> UserFactory:
    """Factory creating a committed user; returns (user, auth headers)."""

    async def _make(gamertag: str = "player_one", coins: int | None = None, **fields: object) -> tuple[User, dict[str, str]]:
        async with AsyncSession(get_engine(), expire_on_commit=False) as session:
            user, _ = await get_or_create_user(session, gamertag)
            if coins is not None:
                user.coins = coins
            for name, value in fields.items():
                setattr(user, name, value)
            await session.commit()
        token = create_access_token(user.id, user.gamertag)
        return user, {"Authorization": f"Bearer {token}"}

    return _make
