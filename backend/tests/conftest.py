"""Shared test fixtures for the wellness sessions backend."""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from wellness.config import Settings, get_settings
from wellness.db.store import Database
from wellness.dependencies import get_database
from wellness.main import create_app

PASSWORD = "secret1"


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the developer's environment and .env file."""
    return Settings(
        _env_file=None,
        environment="test",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        rate_limit_max=10_000,
        mongodb_database="wellness_test",
    )


@pytest_asyncio.fixture
async def database(test_settings: Settings) -> AsyncGenerator[Database, None]:
    """In-memory MongoDB stand-in with indexes created."""
    db = Database(test_settings, client=AsyncMongoMockClient())
    await db.initialize()
    yield db
    await db.close()


def build_app(settings: Settings, database: Database) -> FastAPI:
    app = create_app(settings)
    app.dependency_overrides[get_database] = lambda: database
    app.dependency_overrides[get_settings] = lambda: settings
    return app


@pytest.fixture
def app(test_settings: Settings, database: Database) -> FastAPI:
    return build_app(test_settings, database)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def register(
    client: AsyncClient, email: str, password: str = PASSWORD
) -> dict[str, Any]:
    """Register a user and return the response body."""
    response = await client.post(
        "/api/auth/register", json={"email": email, "password": password}
    )
    assert response.status_code == 201, response.text
    return response.json()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def auth_headers(client: AsyncClient) -> dict[str, str]:
    """Headers for a freshly registered owner."""
    body = await register(client, "owner@example.com")
    return bearer(body["token"])


@pytest_asyncio.fixture
async def other_headers(client: AsyncClient) -> dict[str, str]:
    """Headers for a second, unrelated user."""
    body = await register(client, "intruder@example.com")
    return bearer(body["token"])


async def create_session(
    client: AsyncClient,
    headers: dict[str, str],
    *,
    publish: bool = False,
    **fields: Any,
) -> dict[str, Any]:
    """Create a draft (or published) session through the API."""
    payload = {
        "title": "Morning Flow",
        "tags": ["yoga"],
        "json_file_url": "https://cdn.example.com/morning.json",
        **fields,
    }
    path = "/api/my-sessions/publish" if publish else "/api/my-sessions/save-draft"
    response = await client.post(path, json=payload, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["session"]
