import os
import tempfile

# Settings are read at import time, so point them at a throwaway database first
_DB_DIR = tempfile.mkdtemp(prefix="savings-jar-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ENVIRONMENT"] = "test"

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.main import app
from app.core.database import Base, engine


@pytest_asyncio.fixture
async def database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    # Pooled connections belong to this test's event loop
    await engine.dispose()


@pytest_asyncio.fixture
async def client(database):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def register_and_login(client, email="saver@example.com", password="s3cret-pass"):
    response = await client.post("/api/v1/auth/register", json={"email": email, "password": password})
    assert response.status_code == 201, response.text
    response = await client.post("/api/v1/auth/jwt/login", data={"username": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest_asyncio.fixture
async def auth_headers(client):
    return await register_and_login(client)


@pytest_asyncio.fixture
async def login(client):
    """Register and log in another user; returns their auth headers."""
    async def _login(email, password="s3cret-pass"):
        return await register_and_login(client, email, password)
    return _login
