"""Service test fixtures — in-memory collaborators, SQLite DB, and a wired gateway.

Invariants:
    - Every test gets fresh fakes and a fresh in-memory SQLite database
    - The assistant never really sleeps (no_sleep injected)
    - app.state.gateway is restored after route tests
"""

from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from tunechat.config import Settings
from tunechat.db.base import Base
from tunechat.infrastructure.database import DatabaseSessionManager
from tunechat.services.connection_registry import ConnectionRegistry
from tunechat.services.gateway import build_gateway
import tunechat.models  # noqa: F401

from tests.services.fakes import (
    FakeCatalog, InMemoryMessageStore, InMemoryUserDirectory, TEST_SECRET, no_sleep,
)


@pytest.fixture
def alice_id():
    return uuid4()


@pytest.fixture
def users(alice_id):
    return InMemoryUserDirectory({alice_id: "Alice"})


@pytest.fixture
def store():
    return InMemoryMessageStore()


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        jwt_secret=TEST_SECRET,
        cors_origins="http://localhost:5173",
        handshake_timeout_seconds=2.0,
    )


@pytest.fixture
def gateway(test_settings, users, store, catalog):
    return build_gateway(
        test_settings, users=users, store=store, catalog=catalog, sleep=no_sleep,
    )


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
async def db_manager(test_engine, test_session_factory):
    """DatabaseSessionManager bound to the in-memory test engine."""
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = test_session_factory
    return manager


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def app(gateway):
    """The FastAPI app with a fake-backed gateway; lifespan is not run."""
    from tunechat.main import app as gateway_app

    previous = getattr(gateway_app.state, "gateway", None)
    gateway_app.state.gateway = gateway
    yield gateway_app
    gateway_app.state.gateway = previous
