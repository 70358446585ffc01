"""Shared fixtures: isolated settings, a temp SQLite database per test."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from svyasa.core.settings import Settings
from svyasa.db.session import create_schema, make_engine, make_sessionmaker
from svyasa.main import create_app
from svyasa.services.changefeed import ChangeFeed
from svyasa.services.forum import ForumService

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "correct horse battery staple"

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        "jwt_secret": "test-secret",
        "admin_email": ADMIN_EMAIL,
        "admin_password": ADMIN_PASSWORD,
        "poll_interval_seconds": 60.0,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def feed() -> ChangeFeed:
    return ChangeFeed()


@pytest_asyncio.fixture
async def sessionmaker(settings):
    engine = make_engine(settings.database_url)
    await create_schema(engine)
    yield make_sessionmaker(engine)
    await engine.dispose()


@pytest_asyncio.fixture
async def db(sessionmaker):
    async with sessionmaker() as session:
        yield session


@pytest.fixture
def forum(db, feed, settings) -> ForumService:
    return ForumService(db, feed, settings)


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_headers(client) -> dict[str, str]:
    res = client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert res.status_code == 200
    return {"Authorization": f"Bearer {res.json()['access_token']}"}
