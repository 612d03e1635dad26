"""Tests for SnapshotPaginator that do not need a database."""

from types import SimpleNamespace

import pytest

from cursorpage.exceptions import SnapshotStateError
from cursorpage.pagination.paginator import Paginator
from cursorpage.pagination.snapshot import SnapshotPaginator
from cursorpage.pagination.sort import RawSort


@pytest.fixture
def rows():
    return [SimpleNamespace(id=key) for key in (7, 3, 5)]


class TestSnapshotPaginatorInit:
    """Tests for SnapshotPaginator construction."""

    def test_requires_metadata(self):
        with pytest.raises(SnapshotStateError):
            SnapshotPaginator(Paginator(total_items=3, per_page=3))

    def test_empty_metadata_rejected(self):
        with pytest.raises(SnapshotStateError):
            SnapshotPaginator(Paginator(total_items=3, per_page=3, metadata={}))

    def test_accepts_snapshot_metadata(self):
        paginator = Paginator(
            total_items=1,
            per_page=1,
            metadata={"snapshot": True, "offsets": {"1": "0"}, "collection_key": "id"},
        )

        assert SnapshotPaginator(paginator).paginator is paginator

    @pytest.mark.parametrize(
        "metadata",
        [
            {"snapshot": True, "offsets": {"1": "0"}},
            {"snapshot": True, "offsets": {"1": "0"}, "collection_key": ""},
            {"snapshot": True, "collection_key": "id"},
            {"snapshot": True, "offsets": ["1"], "collection_key": "id"},
            {"snapshot": True, "offsets": {"1": "first"}, "collection_key": "id"},
        ],
    )
    def test_incomplete_snapshot_metadata_rejected(self, metadata):
        with pytest.raises(SnapshotStateError):
            SnapshotPaginator(Paginator(total_items=1, per_page=1, metadata=metadata))


class TestGenerated:
    """Tests for SnapshotPaginator.generated."""

    def test_snapshot_metadata(self):
        paginator = Paginator(metadata={"snapshot": True, "kind": "next_page"})

        assert SnapshotPaginator.generated(paginator) is True

    @pytest.mark.parametrize("metadata", [None, {}, {"kind": "current_page"}])
    def test_other_metadata(self, metadata):
        assert SnapshotPaginator.generated(Paginator(metadata=metadata)) is False


class TestCursorForResults:
    """Tests for SnapshotPaginator.cursor_for_results."""

    @pytest.mark.asyncio
    async def test_snapshot_state(self, rows, paginator_cursor):
        token = await SnapshotPaginator.cursor_for_results(
            rows, table_name="blog_posts", collection_key="id", cursor=paginator_cursor
        )

        state = await paginator_cursor.parse(token)

        assert state.query == {"filters": {"id": [7, 3, 5]}}
        assert state.total_items == 3
        assert state.per_page == 3
        assert state.offset == 0
        assert state.metadata == {
            "snapshot": True,
            "offsets": {"7": "0", "3": "1", "5": "2"},
            "collection_key": "id",
            "kind": "current_page",
        }

    @pytest.mark.asyncio
    async def test_sort_ranks_rows_by_position(self, rows, paginator_cursor):
        token = await SnapshotPaginator.cursor_for_results(
            rows, table_name="blog_posts", collection_key="id", cursor=paginator_cursor
        )

        state = await paginator_cursor.parse(token)

        assert isinstance(state.sort, RawSort)
        assert state.sort.sql == (
            "CASE "
            "WHEN CAST(\"blog_posts\".\"id\" AS VARCHAR) = '7' THEN 0 "
            "WHEN CAST(\"blog_posts\".\"id\" AS VARCHAR) = '3' THEN 1 "
            "WHEN CAST(\"blog_posts\".\"id\" AS VARCHAR) = '5' THEN 2 "
            "END"
        )

    @pytest.mark.asyncio
    async def test_key_values_quoted(self, paginator_cursor):
        rows = [SimpleNamespace(slug="o'brien")]

        token = await SnapshotPaginator.cursor_for_results(
            rows, table_name="authors", collection_key="slug", cursor=paginator_cursor
        )

        state = await paginator_cursor.parse(token)
        assert "= 'o''brien' THEN 0" in state.sort.sql

    @pytest.mark.asyncio
    async def test_empty_results(self, paginator_cursor):
        token = await SnapshotPaginator.cursor_for_results(
            [], table_name="blog_posts", collection_key="id", cursor=paginator_cursor
        )

        assert token is None
