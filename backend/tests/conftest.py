from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from accounts.core.config import Settings
from accounts.db.session import Database
from accounts.main import create_app
from accounts.services.bootstrap import ensure_admin
from accounts.services.users import SqlUserRepository

ADMIN_USERNAME = "root"
ADMIN_PASSWORD = "r00t-password"


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'accounts.sqlite3'}",
        secret_key="tests-secret-key",
        log_level="WARNING",
        must_authenticate_requests=True,
    )


@pytest_asyncio.fixture()
async def database(settings: Settings):
    db = Database(settings.database_url)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture()
async def repository(database: Database) -> SqlUserRepository:
    return SqlUserRepository(database)


def _seed_admin(settings: Settings) -> None:
    async def seed() -> None:
        db = Database(settings.database_url)
        try:
            await db.create_all()
            await ensure_admin(SqlUserRepository(db), ADMIN_USERNAME, ADMIN_PASSWORD, "root@example.com")
        finally:
            await db.dispose()

    asyncio.run(seed())


@pytest.fixture()
def client(settings: Settings):
    _seed_admin(settings)
    app = create_app(settings=settings)
    with TestClient(app) as test_client:
        yield test_client


def login(client: TestClient, username: str, password: str) -> dict[str, str]:
    response = client.post("/users/authenticate", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture()
def admin_headers(client: TestClient) -> dict[str, str]:
    return login(client, ADMIN_USERNAME, ADMIN_PASSWORD)
