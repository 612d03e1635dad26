"""Tests for Paginator projections and cursor methods."""

import pytest
from pydantic import ValidationError

from cursorpage.pagination.paginator import ItemRange, Paginator


@pytest.fixture
def make_paginator(paginator_cursor):
    """
    Provides a factory for paginators bound to the test cursor.

    Returns:
        Callable: Factory accepting Paginator fields
    """

    def factory(**kwargs):
        return Paginator(**kwargs).using(paginator_cursor)

    return factory


class TestItemRange:
    """Tests for Paginator.item_range."""

    def test_middle_page(self, make_paginator):
        paginator = make_paginator(total_items=10, per_page=2, offset=2)

        assert paginator.item_range == ItemRange(3, 4)

    def test_partial_last_page(self, make_paginator):
        paginator = make_paginator(total_items=7, per_page=5, offset=5)

        assert paginator.item_range == ItemRange(6, 7)

    def test_all_items(self, make_paginator):
        paginator = make_paginator(total_items=12, per_page="all")

        assert paginator.item_range == ItemRange(1, 12)

    def test_empty_page(self, make_paginator):
        paginator = make_paginator(total_items=12, per_page=0)

        assert paginator.item_range == ItemRange(0, 0)

    @pytest.mark.parametrize(
        "total_items,per_page,offset",
        [(10, 3, 0), (10, 3, 3), (10, 3, 9), (5, 10, 0), (1, 1, 0)],
    )
    def test_range_size(self, make_paginator, total_items, per_page, offset):
        paginator = make_paginator(
            total_items=total_items, per_page=per_page, offset=offset
        )
        first, last = paginator.item_range

        assert last - first + 1 == min(per_page, total_items - offset)


class TestLimit:
    """Tests for Paginator.limit."""

    def test_numeric(self, make_paginator):
        assert make_paginator(per_page=25).limit == 25

    def test_all(self, make_paginator):
        assert make_paginator(per_page="all").limit is None


class TestPaginatorCursors:
    """Tests for the six cursor projections."""

    @pytest.mark.asyncio
    async def test_next_and_previous_from_middle_page(
        self, make_paginator, paginator_cursor
    ):
        paginator = make_paginator(
            query={"filters": {"status": "draft"}},
            sort={"title": "asc"},
            total_items=10,
            per_page=2,
            offset=2,
        )

        next_state = await paginator_cursor.parse(await paginator.next_page_cursor())
        previous_state = await paginator_cursor.parse(
            await paginator.previous_page_cursor()
        )

        assert next_state.offset == 4
        assert next_state.metadata == {"kind": "next_page"}
        assert next_state.query == {"filters": {"status": "draft"}}
        assert previous_state.offset == 0
        assert previous_state.metadata == {"kind": "previous_page"}

    @pytest.mark.asyncio
    async def test_first_and_last(self, make_paginator, paginator_cursor):
        paginator = make_paginator(total_items=10, per_page=3, offset=3)

        first_state = await paginator_cursor.parse(await paginator.first_page_cursor())
        last_state = await paginator_cursor.parse(await paginator.last_page_cursor())

        assert first_state.offset == 0
        assert last_state.offset == 9
        assert last_state.metadata == {"kind": "last_page"}

    @pytest.mark.asyncio
    async def test_recordset(self, make_paginator, paginator_cursor):
        paginator = make_paginator(total_items=10, per_page=3, offset=6)

        state = await paginator_cursor.parse(await paginator.recordset_cursor())

        assert state.offset == 0
        assert state.per_page == "all"
        assert state.metadata == {"kind": "recordset"}

    @pytest.mark.asyncio
    async def test_current_page(self, make_paginator, paginator_cursor):
        paginator = make_paginator(
            total_items=10, per_page=3, offset=6, metadata={"source": "search"}
        )

        state = await paginator_cursor.parse(await paginator.current_page_cursor())

        assert state.offset == 6
        assert state.per_page == 3
        assert state.metadata == {"source": "search", "kind": "current_page"}

    @pytest.mark.asyncio
    async def test_first_page_has_no_backward_cursors(self, make_paginator):
        paginator = make_paginator(total_items=10, per_page=2, offset=0)

        assert await paginator.previous_page_cursor() is None
        assert await paginator.first_page_cursor() is None

    @pytest.mark.asyncio
    async def test_last_page_has_no_forward_cursors(self, make_paginator):
        paginator = make_paginator(total_items=10, per_page=2, offset=8)

        assert await paginator.next_page_cursor() is None
        assert await paginator.last_page_cursor() is None
        assert await paginator.previous_page_cursor() is not None

    @pytest.mark.asyncio
    async def test_per_page_all(self, make_paginator):
        paginator = make_paginator(total_items=10, per_page="all", offset=0)

        assert await paginator.next_page_cursor() is None
        assert await paginator.previous_page_cursor() is None
        assert await paginator.first_page_cursor() is None
        assert await paginator.last_page_cursor() is None
        assert await paginator.current_page_cursor() is not None

    @pytest.mark.asyncio
    async def test_empty_page(self, make_paginator):
        paginator = make_paginator(total_items=10, per_page=0)

        assert await paginator.current_page_cursor() is None
        assert await paginator.next_page_cursor() is None

    @pytest.mark.asyncio
    async def test_cursor_methods_leave_paginator_unchanged(self, make_paginator):
        paginator = make_paginator(total_items=10, per_page=2, offset=2)

        await paginator.next_page_cursor()
        await paginator.first_page_cursor()

        assert paginator.offset == 2
        assert paginator.metadata is None


class TestPaginatorImmutability:
    """Tests for the copy-on-write discipline."""

    def test_fields_frozen(self, make_paginator):
        paginator = make_paginator(total_items=10, per_page=2)

        with pytest.raises(ValidationError):
            paginator.offset = 4

    def test_model_copy_keeps_cursor(self, make_paginator, paginator_cursor):
        paginator = make_paginator(total_items=10, per_page=2)

        moved = paginator.model_copy(update={"offset": 4})

        assert moved._cursor is paginator_cursor
        assert paginator.offset == 0


class TestPaginatorFields:
    """Tests for field validation."""

    @pytest.mark.parametrize(
        "fields",
        [
            {"per_page": -1},
            {"per_page": "some"},
            {"offset": -2},
            {"total_items": -1},
        ],
    )
    def test_out_of_range_rejected(self, fields):
        with pytest.raises(ValidationError):
            Paginator(**fields)

    @pytest.mark.parametrize("per_page", [0, 5, "all"])
    def test_valid_per_page(self, per_page):
        assert Paginator(per_page=per_page).per_page == per_page
