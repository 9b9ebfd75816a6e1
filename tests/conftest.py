"""Shared test fixtures."""

from __future__ import annotations

import os

os.environ.setdefault("QL_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("QL_REDIS_URL", "")
os.environ.setdefault("QL_JWT_SECRET", "test-secret-with-enough-bytes-for-hs256")
os.environ.setdefault("QL_LOG_FORMAT", "console")

from collections.abc import AsyncGenerator  # noqa: E402
from datetime import datetime, timezone  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from questlog.achievements.catalog import seed_achievements  # noqa: E402
from questlog.auth.jwt import create_access_token  # noqa: E402
from questlog.auth.service import create_profile  # noqa: E402
from questlog.config import get_settings  # noqa: E402
from questlog.database import close_db, create_schema, get_session, init_db  # noqa: E402
from questlog.db.models import Task, UserProfile  # noqa: E402
from questlog.main import create_app  # noqa: E402

TEST_USER_ID = "7b0c9a52-5d1e-4c8e-9a1f-2f6f1b0d4e11"
OTHER_USER_ID = "e3a1d0f4-8b2c-4a77-b6f5-0c9d2e7a3b55"


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database with the achievement catalog seeded."""
    get_settings.cache_clear()
    await init_db(get_settings().database_url)
    await create_schema()
    async for session in get_session():
        await seed_achievements(session)
        yield session
    await close_db()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP test client sharing the test database."""
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def auth_headers(user_id: str = TEST_USER_ID, email: str | None = "hero@example.com") -> dict[str, str]:
    token = create_access_token(user_id, email=email, username=None)
    return {"Authorization": f"Bearer {token}"}


async def make_profile(
    db: AsyncSession,
    user_id: str = TEST_USER_ID,
    username: str = "hero",
) -> UserProfile:
    profile, _ = await create_profile(db, user_id=user_id, username=username, email=f"{username}@example.com")
    await db.commit()
    return profile


async def make_task(
    db: AsyncSession,
    user_id: str = TEST_USER_ID,
    title: str = "Write report",
    priority: str = "Medium",
) -> Task:
    """Insert a task directly, bypassing creation achievements."""
    task = Task(
        user_id=user_id,
        title=title,
        priority=priority,
        is_complete=False,
        created_at=datetime.now(timezone.utc),
        task_labels=[],
    )
    db.add(task)
    await db.commit()
    return task


@pytest_asyncio.fixture
async def profile(db_session: AsyncSession) -> UserProfile:
    return await make_profile(db_session)


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient, profile: UserProfile) -> AsyncClient:
    """Client with a bearer token for a user whose profile exists."""
    client.headers.update(auth_headers(profile.id))
    return client
