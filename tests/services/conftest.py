"""Service test fixtures — async audit DB + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB session
    - db_manager patched so the readiness check sees the test engine
    - app.state.dispatcher is the FakeExecutor-backed dispatcher, never real prlctl
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

import parallels_bridge.infrastructure.database as db_module
import parallels_bridge.models  # noqa: F401  registers tables on Base.metadata
from parallels_bridge.config import Settings, get_settings
from parallels_bridge.db.base import Base
from parallels_bridge.infrastructure.database import DatabaseSessionManager, get_db
from parallels_bridge.main import app


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def audit_enabled():
    """Settings seen by routes; tests flip audit_tool_calls here."""
    return {"audit_tool_calls": True}


@pytest.fixture
async def client(test_engine, test_session_factory, dispatcher, audit_enabled):
    """FastAPI test client with DB, settings and dispatcher overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: Settings(**audit_enabled)

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    app.state.dispatcher = dispatcher

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
    del app.state.dispatcher
