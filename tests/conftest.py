import os
import tempfile
from typing import AsyncGenerator

# Settings are read at import time, so the environment must be ready first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="anonchat-uploads-"))

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.rate_limit import rate_limiter
from app.database import Base, get_db
from app.main import app

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_maker(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    rate_limiter.reset()
    yield
    rate_limiter.reset()


async def create_guest(client: AsyncClient) -> tuple[dict, str]:
    """Helper to create a guest identity. Returns (auth headers, user_id)."""
    response = await client.post("/api/v1/auth/guest")
    assert response.status_code == 201
    data = response.json()
    return {"Authorization": f"Bearer {data['access_token']}"}, data["user_id"]


async def create_session(
    client: AsyncClient,
    interests: list[str] | None = None,
    language: str = "en",
) -> tuple[dict, str, dict, str, str]:
    """
    Helper to pair two fresh guests.

    Returns (headers1, user1_id, headers2, user2_id, session_id) where user1
    is the one that waited.
    """
    body = {
        "interests": interests or ["music"],
        "language": language,
        "age_group": "18-24",
    }
    headers1, user1_id = await create_guest(client)
    headers2, user2_id = await create_guest(client)

    waiting = await client.post("/api/v1/matching/", json=body, headers=headers1)
    assert waiting.json()["status"] == "waiting"

    matched = await client.post("/api/v1/matching/", json=body, headers=headers2)
    assert matched.json()["status"] == "matched"

    return headers1, user1_id, headers2, user2_id, matched.json()["session_id"]


@pytest_asyncio.fixture
async def guest(client: AsyncClient) -> tuple[dict, str]:
    return await create_guest(client)


@pytest_asyncio.fixture
async def chat_session(client: AsyncClient) -> tuple[dict, str, dict, str, str]:
    return await create_session(client)
