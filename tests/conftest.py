"""
Shared fixtures: in-memory SQLite database, services and an HTTP client.
"""

import os

# Settings are read at import time; configure before any app module loads.
os.environ["JWT_SECRET"] = "test-access-secret"
os.environ["REFRESH_SECRET"] = "test-refresh-secret"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from auth.jwt import TokenService  # noqa: E402
from config.settings import config  # noqa: E402
from database.session import async_session_factory, engine, init_models  # noqa: E402
from tests.helpers import FakeClock  # noqa: E402


@pytest.fixture
async def db():
    await init_models()
    yield
    # Disposing the in-memory pool drops the database.
    await engine.dispose()


@pytest.fixture
async def session(db):
    async with async_session_factory() as s:
        yield s


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def tokens(clock) -> TokenService:
    return TokenService(config, clock=clock)


@pytest.fixture
async def app(db):
    from main import create_app

    return create_app()


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
