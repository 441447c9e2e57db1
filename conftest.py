import os
from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Load .env.test for tests when present so local overrides don't leak in
from dotenv import load_dotenv

env_test_path = os.path.join(os.path.dirname(__file__), ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path, override=True)

from libs.common.config import get_settings
from libs.db.base import Base

# Import all models so metadata includes every table
from services.admission_service import models as _admission_models  # noqa: F401

# Clear cached settings to reload with new env vars
get_settings.cache_clear()
settings = get_settings()

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL")

# Mid-afternoon in the facility timezone for the default America/New_York
FIXED_NOW = datetime(2026, 3, 10, 17, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """
    Create a fresh database for each test. Defaults to a SQLite file in the
    test's temp directory, so every session gets its own connection and
    transactions stay isolated; set TEST_DATABASE_URL to run against
    PostgreSQL.
    """
    url = TEST_DATABASE_URL or f"sqlite+aiosqlite:///{tmp_path / 'admission.db'}"
    engine = create_async_engine(url, future=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=test_engine, class_=AsyncSession, expire_on_commit=False
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a session for seeding and inspecting rows. Code under test opens
    its own sessions from the same factory.
    """
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient with the app wired to the test database.
    """
    from libs.db.session import get_async_db, get_session_factory
    from services.admission_service.app.main import app

    async def _override_get_async_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_db] = _override_get_async_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def clock():
    """Frozen clock at ``FIXED_NOW``; tests advance it explicitly."""
    from tests.stubs import FrozenClock

    return FrozenClock(FIXED_NOW)
