"""
Credit API - Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment is pointed at a throwaway SQLite file BEFORE any
       credit_api import, so the module-level engine and settings never see
       a real database.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock session for pure service unit tests
    ├── db_engine:       fresh SQLite file with all tables created
    ├── db_session:      AsyncSession on db_engine for service tests
    ├── test_client:     httpx AsyncClient on an app whose session
    │                    dependency is bound to db_engine
    └── make_user:       helper posting a user through the API
"""

import os
import tempfile

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = (
    f"sqlite+aiosqlite:///{tempfile.mkdtemp(prefix='credit_api_test_')}/health.db"
)
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["BCRYPT_ROUNDS"] = "4"  # Minimum cost; hashing speed is irrelevant here
os.environ["RATE_LIMIT_REQUESTS"] = "100000"

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from credit_api.database import Base, build_engine, get_db_session
import credit_api.models  # noqa: F401


# ══════════════════════════════════════════════════════════════════════════
# Mocked session (no database)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        mock_db_session.execute.return_value = result
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Real SQLite database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """A new SQLite file per test, schema created from the ORM metadata."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'credit.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    Provides an async HTTP test client for endpoint testing.

    Each request gets its own session on the test database, committed on
    success exactly like credit_api.database.get_db_session.
    """
    from credit_api.main import create_app

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app = create_app()
    app.dependency_overrides[get_db_session] = override_get_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_user(test_client):
    """
    Create a user through POST /Users and return the response JSON.

    Usage:
        user = await make_user("alice", credit=100.0, contacts=[...])
    """
    async def _make_user(username="alice", credit=100.0, password=None, contacts=None):
        body = {"username": username, "credit": credit, "contacts": contacts or []}
        if password is not None:
            body["password"] = password
        response = await test_client.post("/Users", json=body)
        assert response.status_code == 201, response.text
        return response.json()

    return _make_user
