"""Fixtures for database-backed query tests."""

from datetime import date, timedelta

import pytest

from cursorpage.querying.collection_query import CollectionQuery
from tests.models import BlogPost

TODAY = date(2024, 5, 1)


@pytest.fixture
def make_post(db_session):
    """
    Provides a factory that persists BlogPost rows.

    Returns:
        Callable: Async factory accepting BlogPost fields
    """

    async def factory(**fields):
        post = BlogPost(**fields)
        db_session.add(post)
        await db_session.commit()
        return post

    return factory


@pytest.fixture
async def record_one(make_post):
    return await make_post(id=1, earnings=1, title="test1", drafted_on=TODAY)


@pytest.fixture
async def record_two(make_post):
    return await make_post(
        id=2, earnings=2, title="test2", drafted_on=TODAY + timedelta(days=1)
    )


@pytest.fixture
def collection_query(db_session, paginator_cursor):
    """
    Provides a CollectionQuery over blog posts using the mock overflow cache.

    Returns:
        CollectionQuery: Query instance
    """
    return CollectionQuery(db_session, BlogPost, cursor=paginator_cursor)
