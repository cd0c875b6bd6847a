import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from uuid import uuid4

# Use a test database (override in CI with a real PG URL)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ["LLM_PROVIDER"] = "mock"
os.environ["ENVIRONMENT"] = "test"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from bookrecommender.database import engine  # noqa: E402
from bookrecommender.domain.models import Base  # noqa: E402
from bookrecommender.main import app  # noqa: E402

BASE = "http://test"
PASSWORD = "securepass123"


@pytest.fixture
async def db() -> AsyncGenerator[None, None]:
    """Fresh tables for every test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db: None) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url=BASE) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def register_user(client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    """Factory: register a user and return the auth response plus bearer headers."""

    async def _register(email: str | None = None) -> dict:
        email = email or f"user_{uuid4().hex[:8]}@example.com"
        resp = await client.post(
            "/api/auth/register",
            json={"email": email, "password": PASSWORD, "confirm_password": PASSWORD},
        )
        assert resp.status_code == 200, resp.text
        data = resp.json()
        data["headers"] = {"Authorization": f"Bearer {data['token']}"}
        return data

    return _register


@pytest.fixture
async def auth_client(client: AsyncClient, register_user) -> AsyncClient:
    """Register a user and return a client with auth headers."""
    user = await register_user()
    client.headers.update(user["headers"])
    return client


@pytest.fixture
def create_book(client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    """Factory: add a catalog book as the given user."""

    async def _create(headers: dict, title: str = "Dune", author: str = "Frank Herbert", **extra) -> dict:
        resp = await client.post(
            "/api/books",
            json={"title": title, "author": author, **extra},
            headers=headers,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create
