"""
Pytest configuration and fixtures for testing.

This module provides shared fixtures for the cursor overflow cache, the
paginator cursor and an in-memory database holding the test tables.
"""

from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from cursorpage.pagination.cursor import PaginatorCursor
from cursorpage.storage.cursor_cache import RedisCursorCache
from tests.mocks.redis_mocks import create_mock_redis_connection
from tests.models import Author, BlogPost  # noqa: F401  (registers tables)


@pytest.fixture
def mock_redis():
    """
    Provides a dict-backed mock Redis connection.

    Returns:
        AsyncMock: Mocked Redis instance
    """
    return create_mock_redis_connection()


@pytest.fixture
def cursor_cache(mock_redis):
    """
    Provides the Redis cursor cache wired to the mock connection.

    Returns:
        RedisCursorCache: Cache instance
    """
    return RedisCursorCache(redis=mock_redis)


@pytest.fixture
def paginator_cursor(cursor_cache):
    """
    Provides a PaginatorCursor that overflows into the mock cache.

    Returns:
        PaginatorCursor: Cursor codec instance
    """
    return PaginatorCursor(cursor_cache)


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    Create async engine on an in-memory SQLite database with the test tables.

    Yields:
        AsyncEngine: Engine shared by every session of the test
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Provides a session on the test database.

    Yields:
        AsyncSession: Session that keeps attributes loaded after commit
    """
    async with AsyncSession(db_engine, expire_on_commit=False) as session:
        yield session
