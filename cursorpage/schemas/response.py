from typing import Annotated, Any

from pydantic import BaseModel, Field

from cursorpage.pagination.paginator import Paginator
from cursorpage.pagination.sort import visible_sort


class CollectionResultMetadata(BaseModel):  # type: ignore[misc]
    """
    Paging metadata returned alongside a page of results.

    ``current_page_snapshot_cursor`` represents a separate query that will
    always yield what ``current_page_cursor`` yields now, even after the
    record set changes.
    """

    first_item: Annotated[int, Field(ge=0)]
    last_item: Annotated[int, Field(ge=0)]
    total_items: Annotated[int, Field(ge=0)]

    next_page_cursor: str | None = None
    previous_page_cursor: str | None = None
    first_page_cursor: str | None = None
    last_page_cursor: str | None = None
    current_page_cursor: str | None = None
    recordset_cursor: str | None = None

    current_page_snapshot_cursor: str | None = None

    sort: dict[str, Any] | None = None

    @classmethod
    async def from_paginator(
        cls,
        paginator: Paginator,
        sort: Any = None,
        current_page_snapshot_cursor: str | None = None,
    ) -> "CollectionResultMetadata":
        item_range = paginator.item_range
        return cls(
            first_item=item_range.first,
            last_item=item_range.last,
            total_items=paginator.total_items,
            next_page_cursor=await paginator.next_page_cursor(),
            previous_page_cursor=await paginator.previous_page_cursor(),
            current_page_cursor=await paginator.current_page_cursor(),
            first_page_cursor=await paginator.first_page_cursor(),
            last_page_cursor=await paginator.last_page_cursor(),
            recordset_cursor=await paginator.recordset_cursor(),
            sort=visible_sort(sort if sort is not None else paginator.sort),
            current_page_snapshot_cursor=current_page_snapshot_cursor,
        )
