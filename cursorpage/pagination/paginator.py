"""
Paged access to large record sets.

For a given query and sort, a Paginator limits the returned item count and
provides cursors for adjacent pages of the same record set:

- the whole record set
- the current page
- the next, previous, first and last pages

Each cursor acts like a bookmark into the record set. The strategy is plain
limit/offset. Build paginators with PaginatorBuilder and parse their cursors
with PaginatorCursor.
"""

from typing import Annotated, Any, Literal, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from cursorpage.constants import ALL
from cursorpage.pagination.cursor import PaginatorCursor, get_default_cursor
from cursorpage.utils.mapping import deep_merge


class ItemRange(NamedTuple):
    """One-based, inclusive positions of the first and last item on a page."""

    first: int
    last: int


class Paginator(BaseModel):  # type: ignore[misc]
    """
    Position of one page within a record set.

    Attributes:
        query: Filter/search parameters defining the record set.
        sort: Normalized sort mapping, or a RawSort.
        per_page: Items per page, ``"all"`` for a single page holding every
            row, or 0 for an empty page.
        offset: Zero-based index of the first row of the page.
        total_items: Count of matching rows when the query was last executed.
        metadata: Extra data carried through cursors.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    query: dict[str, Any] = {}
    sort: Any = None
    per_page: Annotated[int, Field(ge=0)] | Literal["all"] = 0
    offset: Annotated[int, Field(ge=0)] = 0
    total_items: Annotated[int, Field(ge=0)] = 0
    metadata: dict[str, Any] | None = None

    _cursor: PaginatorCursor | None = PrivateAttr(default=None)

    def using(self, cursor: PaginatorCursor | None) -> "Paginator":
        """Copy of this paginator that creates its cursors with ``cursor``."""
        paginator = self.model_copy()
        paginator._cursor = cursor
        return paginator

    @property
    def item_range(self) -> ItemRange:
        """The range of items included in the results."""
        if self.per_page != ALL and self.per_page == 0:
            return ItemRange(0, 0)

        first = self.offset + 1
        if self.per_page == ALL:
            last = self.total_items
        else:
            last = min(self.offset + self.per_page, self.total_items)
        return ItemRange(first, last)

    @property
    def limit(self) -> int | None:
        if self.per_page == ALL:
            return None
        return self.per_page

    @property
    def has_more_pages(self) -> bool:
        if self.per_page == ALL or self.per_page == 0:
            return False
        return self.offset + self.per_page < self.total_items

    async def recordset_cursor(self) -> str:
        """Represent the whole record set: the current filters, sort, etc."""
        return await self._make_cursor(self._recordset_cursor_params())

    async def current_page_cursor(self) -> str | None:
        """Represents the current page of results."""
        return await self._make_cursor(self._current_page_cursor_params())

    async def next_page_cursor(self) -> str | None:
        """Represents the "next" N results."""
        return await self._make_cursor(self._next_page_params())

    async def previous_page_cursor(self) -> str | None:
        """Represents the "previous" N results."""
        return await self._make_cursor(self._previous_page_params())

    async def first_page_cursor(self) -> str | None:
        """Represents the "first" N results."""
        return await self._make_cursor(self._first_page_params())

    async def last_page_cursor(self) -> str | None:
        """Represents the "last" N results."""
        return await self._make_cursor(self._last_page_params())

    def _recordset_cursor_params(self) -> dict[str, Any]:
        return self._cursor_params(offset=0, per_page=ALL, kind="recordset")

    def _current_page_cursor_params(self) -> dict[str, Any] | None:
        if self.per_page != ALL and self.per_page == 0:
            return None
        return self._cursor_params(offset=self.offset, kind="current_page")

    def _next_page_params(self) -> dict[str, Any] | None:
        if not self.has_more_pages:
            return None
        return self._cursor_params(
            offset=self.offset + self.per_page, kind="next_page"
        )

    def _previous_page_params(self) -> dict[str, Any] | None:
        if self.offset == 0 or self.per_page == ALL:
            return None
        return self._cursor_params(
            offset=max(self.offset - self.per_page, 0), kind="previous_page"
        )

    def _first_page_params(self) -> dict[str, Any] | None:
        if self.offset == 0:
            return None
        return self._cursor_params(offset=0, kind="first_page")

    def _last_page_params(self) -> dict[str, Any] | None:
        if not self.has_more_pages:
            return None
        last_item_offset = self.total_items - 1
        last_page_offset = (last_item_offset // self.per_page) * self.per_page
        return self._cursor_params(offset=last_page_offset, kind="last_page")

    def _cursor_params(
        self, *, offset: int, kind: str, per_page: int | str | None = None
    ) -> dict[str, Any]:
        return {
            "query": self.query,
            "sort": self.sort,
            "total_items": self.total_items,
            "offset": offset,
            "per_page": self.per_page if per_page is None else per_page,
            "metadata": deep_merge(self.metadata or {}, {"kind": kind}),
        }

    async def _make_cursor(self, params: dict[str, Any] | None) -> str | None:
        if params is None:
            return None
        cursor = self._cursor or get_default_cursor()
        return await cursor.create(**params)
