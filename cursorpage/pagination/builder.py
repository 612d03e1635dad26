"""
Builder for Paginator objects.

Two scenarios exist for constructing a Paginator:

1. Starting a new query, from explicit parameters:
   query, sort, per_page, offset and (if known) total_items.

2. Continuing an existing query, from a cursor plus optional overrides:
   a different sort starts a new record set (offset 0), a different
   per_page changes the page size from the cursor's position.

Both can be layered in one build: callers typically resume from a cursor and
then call set_params several times to add filters, search terms or a sort.
Only the net change relative to the state the build started from resets the
offset.

Example:
    ```python
    builder = PaginatorBuilder(default_sort={"id": "asc"}, default_per_page=20)
    await builder.set_cursor(token)
    builder.set_params(query={"search": {"title": "draft"}})
    paginator = builder.build()
    ```
"""

from collections.abc import Callable, Mapping
from typing import Any

from cursorpage.constants import ALL
from cursorpage.logging import logger
from cursorpage.pagination.cursor import PaginatorCursor, get_default_cursor
from cursorpage.pagination.paginator import Paginator
from cursorpage.pagination.sort import is_sort_present, serialize_sort
from cursorpage.settings import app_settings
from cursorpage.utils.mapping import deep_merge, fingerprint, stringify_keys

QueryParams = Mapping[str, Any] | Callable[[], Mapping[str, Any]]


def coerce_per_page(per_page: int | str) -> int | str:
    """
    Page size as an int, or the ALL sentinel.

    Raises:
        ValueError: If per_page is neither a non-negative integer nor "all".
    """
    if str(per_page) == ALL:
        return ALL
    try:
        value = int(per_page)
    except (TypeError, ValueError) as ex:
        raise ValueError(
            f"per_page must be a non-negative integer or {ALL!r}, got {per_page!r}"
        ) from ex
    if value < 0:
        raise ValueError(
            f"per_page must be a non-negative integer or {ALL!r}, got {per_page!r}"
        )
    return value


def _sort_fingerprint(sort: Any) -> str:
    return fingerprint(serialize_sort(sort))


class PaginatorBuilder:
    """
    Reconciles request parameters and cursor state into one Paginator.

    Each step produces a fresh state value; previously returned paginators
    are never modified.
    """

    def __init__(
        self,
        *,
        default_sort: Any = None,
        default_per_page: int | str | None = None,
        cursor: PaginatorCursor | None = None,
    ):
        """
        Args:
            default_sort: Sort used when neither a cursor nor a parameter
                provides one. Defaults to DEFAULT_SORT from settings.
            default_per_page: Page size used when neither a cursor nor a
                parameter provides one. Defaults to DEFAULT_PAGE_SIZE.
            cursor: PaginatorCursor used to parse tokens and bound to the
                built paginator.
        """
        self.default_sort = (
            app_settings.DEFAULT_SORT if default_sort is None else default_sort
        )
        self.default_per_page = (
            app_settings.DEFAULT_PAGE_SIZE
            if default_per_page is None
            else default_per_page
        )
        self.cursor = cursor or get_default_cursor()
        self._state: dict[str, Any] = {}
        self._baseline: tuple[str, str] | None = None
        self._recordset_changed = False

    @property
    def paginator(self) -> Paginator:
        return self.build()

    def build(self) -> Paginator:
        """Paginator for the accumulated state, with defaults filled in."""
        state = self._with_defaults(self._state)
        return Paginator(**state).using(self.cursor)

    async def set_cursor(
        self,
        cursor: str,
        per_page: int | str | None = None,
        sort: Any = None,
    ) -> Paginator:
        """
        Continue the query captured by a cursor.

        Args:
            cursor: Token produced by one of the Paginator cursor methods.
            per_page: Page size override.
            sort: Sort override; if it differs from the cursor's sort, the
                record set is considered new and the offset resets to 0.

        Raises:
            CursorParseError: If the token cannot be parsed.
        """
        cursor_state = await self.cursor.parse(cursor)

        effective_per_page = per_page if per_page is not None else cursor_state.per_page
        if effective_per_page is None:
            effective_per_page = self.default_per_page

        sort_override = is_sort_present(sort) and _sort_fingerprint(
            sort
        ) != _sort_fingerprint(cursor_state.sort)

        self._state = {
            "query": cursor_state.query,
            "total_items": cursor_state.total_items,
            "per_page": coerce_per_page(effective_per_page),
            "sort": sort if is_sort_present(sort) else cursor_state.sort,
            "offset": 0 if sort_override else cursor_state.offset,
            "metadata": cursor_state.metadata,
        }
        self._baseline = self._fingerprints(self._state)
        self._recordset_changed = False
        logger.debug(
            f"Resumed paginator at offset {self._state['offset']} "
            f"(per_page={self._state['per_page']}, sort override: {sort_override})"
        )
        return self.build()

    def set_params(
        self,
        query: QueryParams | None = None,
        sort: Any = None,
        total_items: int | None = None,
        per_page: int | str | None = None,
        offset: int | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Paginator:
        """
        Layer explicit parameters onto the accumulated state.

        Args:
            query: Parameters deep-merged into the current query. May be a
                zero-argument callable returning them.
            sort: Replacement sort.
            total_items: Count of items in the record set, if known.
            per_page: Page size; ``"all"`` also forces offset 0.
            offset: Explicit offset; always wins over the reset rule.
            metadata: Extra data, kept only if no metadata is set yet.

        Raises:
            ValueError: If per_page or offset is negative or not a number.
        """
        state = self._with_defaults(self._state)
        if self._baseline is None:
            self._baseline = self._fingerprints(state)

        if query:
            resolved = query() if callable(query) else query
            state["query"] = deep_merge(state["query"], stringify_keys(resolved))

        if is_sort_present(sort):
            state["sort"] = sort

        self._recordset_changed = self._fingerprints(state) != self._baseline

        if total_items is not None:
            state["total_items"] = total_items

        if offset is not None:
            if offset < 0:
                raise ValueError(f"offset must be non-negative, got {offset}")
            state["offset"] = offset
        elif self._recordset_changed:
            state["offset"] = 0

        if per_page is not None:
            state["per_page"] = coerce_per_page(per_page)
            if state["per_page"] == ALL:
                state["offset"] = 0

        if state["metadata"] is None:
            state["metadata"] = metadata

        self._state = state
        return self.build()

    @property
    def recordset_changed(self) -> bool:
        return self._recordset_changed

    def _with_defaults(self, state: dict[str, Any]) -> dict[str, Any]:
        return {
            "query": state.get("query") or {},
            "sort": state["sort"] if "sort" in state else self.default_sort,
            "total_items": state.get("total_items") or 0,
            "offset": state.get("offset") or 0,
            "per_page": (
                state["per_page"]
                if state.get("per_page") is not None
                else coerce_per_page(self.default_per_page)
            ),
            "metadata": state.get("metadata"),
        }

    @staticmethod
    def _fingerprints(state: dict[str, Any]) -> tuple[str, str]:
        return fingerprint(state["query"]), _sort_fingerprint(state["sort"])
