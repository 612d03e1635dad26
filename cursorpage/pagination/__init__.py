"""
Cursor pagination over mutable record sets.

Example:
    ```python
    from cursorpage.pagination import PaginatorBuilder

    builder = PaginatorBuilder(default_per_page=20)
    paginator = builder.set_params(sort={"title": "asc"}, total_items=95)
    next_token = await paginator.next_page_cursor()
    ```
"""

from cursorpage.pagination.builder import PaginatorBuilder
from cursorpage.pagination.cursor import CursorState, PaginatorCursor
from cursorpage.pagination.paginator import ItemRange, Paginator
from cursorpage.pagination.snapshot import SnapshotPaginator
from cursorpage.pagination.sort import RawSort, normalize_sort, visible_sort
from cursorpage.pagination.token import OpaqueToken

__all__ = [
    "CursorState",
    "ItemRange",
    "OpaqueToken",
    "Paginator",
    "PaginatorBuilder",
    "PaginatorCursor",
    "RawSort",
    "SnapshotPaginator",
    "normalize_sort",
    "visible_sort",
]
