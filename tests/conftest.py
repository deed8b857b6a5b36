"""Pytest fixtures for the marketplace API tests."""

import os
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from marketplace.app import app
from marketplace.database.base import Base
from marketplace.database.session import get_db
from marketplace.modules.auth.auth import get_current_user, get_optional_user

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL")


@pytest.fixture
def mock_db() -> AsyncMock:
    session = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def async_client(mock_db: AsyncMock) -> AsyncGenerator[AsyncClient, None]:
    """Yield an httpx AsyncClient wired to the app with a mocked DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield mock_db

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def login_as():
    """Authenticate subsequent requests as the given user."""

    def _login(user) -> None:
        async def _current_user():
            return user

        app.dependency_overrides[get_current_user] = _current_user
        app.dependency_overrides[get_optional_user] = _current_user

    return _login


@pytest_asyncio.fixture
async def async_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session on a real database that rolls back after each test."""
    test_engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        await connection.run_sync(Base.metadata.create_all)

        session_factory = async_sessionmaker(
            bind=connection,
            class_=AsyncSession,
            expire_on_commit=False,
            join_transaction_mode="create_savepoint",
        )
        async with session_factory() as session:
            yield session

        await transaction.rollback()

    await test_engine.dispose()


@pytest_asyncio.fixture
async def db_client(async_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Yield an httpx AsyncClient backed by the rolled-back test session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield async_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
