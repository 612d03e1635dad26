"""
Generic paginated query over a SQLModel collection.

Supports two modes:

- Paginated queries: filters, search and sort define a record set, and the
  paginator cursors move through its pages.
- Record iteration: calling with a snapshot cursor *and* a filter on the
  collection key focuses on that one record of the snapshot, and the
  paginator cursors then step through the snapshot record by record.

Example:
    ```python
    query = CollectionQuery(session, BlogPost, default_sort="drafted_on desc")
    posts = await query.call(per_page=20, search={"title": "release"})
    meta = await query.result_metadata()

    query.reset()
    posts = await query.call(cursor=meta.next_page_cursor)
    ```
"""

from collections.abc import Mapping
from typing import Any

from sqlalchemy import Select, inspect, literal_column, or_
from sqlalchemy.exc import NoInspectionAvailable
from sqlmodel import func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from cursorpage.constants import ALL, MAX_PAGE_SIZE
from cursorpage.exceptions import InvalidFilterError, InvalidSortError
from cursorpage.logging import logger
from cursorpage.pagination.builder import PaginatorBuilder, coerce_per_page
from cursorpage.pagination.cursor import PaginatorCursor, get_default_cursor
from cursorpage.pagination.paginator import Paginator
from cursorpage.pagination.snapshot import SnapshotPaginator
from cursorpage.pagination.sort import RawSort, normalize_sort
from cursorpage.querying.composable import ComposableQuery
from cursorpage.querying.factory import FilterFactory
from cursorpage.schemas.response import CollectionResultMetadata
from cursorpage.settings import app_settings


def _cap_per_page(per_page: int | str) -> int | str:
    per_page = coerce_per_page(per_page)
    if per_page == ALL:
        return ALL
    return min(per_page, MAX_PAGE_SIZE)


class CollectionQuery:
    """
    Paginated query over one model.

    Attributes:
        results: Rows returned by the last ``call``.
        paginator: Paginator describing the last ``call``.
        sort: Sort applied by the last ``call``.
    """

    def __init__(
        self,
        session: AsyncSession,
        model: type[Any],
        *,
        collection_key: str | None = None,
        default_sort: Any = None,
        default_per_page: int | str | None = None,
        filter_factory: FilterFactory | None = None,
        cursor: PaginatorCursor | None = None,
    ):
        """
        Args:
            session: Session used to count and fetch rows.
            model: SQLModel table class to query.
            collection_key: Unique, indexed column. Used as the tie-breaker
                sort and to select a record in record iteration mode.
                Defaults to the primary key.
            default_sort: Sort used when the caller gives none. Defaults to
                DEFAULT_SORT from settings.
            default_per_page: Page size used when the caller gives none.
            filter_factory: Filter registry. Defaults to one that treats
                unknown names as column equality filters.
            cursor: PaginatorCursor for parsing and creating tokens.
        """
        self.session = session
        self.model = model
        self.collection_key = collection_key or inspect(model).primary_key[0].name
        self.default_sort = (
            app_settings.DEFAULT_SORT if default_sort is None else default_sort
        )
        self.default_per_page = default_per_page
        self.filter_factory = filter_factory or FilterFactory(use_default_filter=True)
        self.cursor = cursor or get_default_cursor()
        self.reset()

    def reset(self) -> None:
        self.results: list[Any] | None = None
        self.paginator: Paginator | None = None
        self.sort: Any = None
        self._query: Select | None = None
        self._current_page_snapshot_cursor: str | None = None

    async def call(
        self,
        cursor: str | None = None,
        per_page: int | str | None = None,
        sort: Any = None,
        search: Mapping[str, str] | None = None,
        filters: Mapping[str, Any] | None = None,
    ) -> list[Any]:
        """
        Perform the query.

        Args:
            cursor: Pagination cursor referencing a page of a record set.
            per_page: Items per page, or ``"all"`` to skip pagination.
            sort: Column name, ``"name dir"`` string, mapping or RawSort.
            search: Column/value pairs matched case-insensitively as
                substrings; a row matching any pair is included.
            filters: Filter names mapped to filter arguments.

        Returns:
            The rows of the requested page.

        Raises:
            CursorParseError: If the cursor cannot be parsed.
            InvalidFilterError: If a filter or search column is unknown.
            InvalidSortError: If the sort cannot be applied.
            SnapshotStateError: If a snapshot cursor lacks its offsets or
                collection key.
            ValueError: If per_page is negative or not a number.
        """
        self.reset()
        filters = dict(filters or {})
        record_key = None
        if cursor and filters.get(self.collection_key) is not None:
            record_key = filters.pop(self.collection_key)

        await self._build_paginator(cursor, filters, per_page, search, sort)
        return await self._execute(record_key)

    async def current_page_snapshot_cursor(self) -> str | None:
        """Cursor for a query that will always yield the current results."""
        if self._current_page_snapshot_cursor is None and self.results:
            self._current_page_snapshot_cursor = (
                await SnapshotPaginator.cursor_for_results(
                    self.results,
                    table_name=self.model.__tablename__,
                    collection_key=self.collection_key,
                    cursor=self.cursor,
                )
            )
        return self._current_page_snapshot_cursor

    async def result_metadata(self) -> CollectionResultMetadata:
        if self.paginator is None:
            raise RuntimeError("CollectionQuery.call() has not been run")
        return await CollectionResultMetadata.from_paginator(
            self.paginator,
            self.sort,
            await self.current_page_snapshot_cursor(),
        )

    def to_sql(self) -> str:
        if self._query is None:
            return ""
        return str(self._query.compile(compile_kwargs={"literal_binds": True}))

    async def _build_paginator(
        self,
        cursor: str | None,
        filters: dict[str, Any],
        per_page: int | str | None,
        search: Mapping[str, str] | None,
        sort: Any,
    ) -> None:
        builder = PaginatorBuilder(
            default_sort=self._stable_sort(self.default_sort),
            default_per_page=self.default_per_page,
            cursor=self.cursor,
        )
        if cursor:
            await builder.set_cursor(cursor)
        else:
            # a new query starts from the default sort
            builder.set_params(sort=self._stable_sort(self.default_sort))

        if sort:
            builder.set_params(sort=self._stable_sort(sort))
        if filters:
            builder.set_params(query={"filters": filters})
        if search:
            builder.set_params(query={"search": dict(search)})
        if per_page is not None:
            builder.set_params(per_page=_cap_per_page(per_page))
        self.paginator = builder.build()

    async def _execute(self, record_key: Any) -> list[Any]:
        paginator = self.paginator
        query = select(self.model)
        if paginator.query.get("search"):
            query = self._apply_search(query, paginator.query["search"])
        if paginator.query.get("filters"):
            query = self._apply_filters(query, paginator.query["filters"])

        self.sort = paginator.sort
        total_items = await self._count(query)
        paginator = paginator.model_copy(update={"total_items": total_items})
        query = (
            self._apply_sort(query, paginator.sort)
            .offset(paginator.offset)
            .limit(paginator.limit)
        )

        if SnapshotPaginator.generated(paginator):
            snapshot_paginator = SnapshotPaginator(paginator)
            query = await snapshot_paginator.apply_to(
                self.session, query, record_key=record_key
            )
            paginator = snapshot_paginator.paginator
            self.results = snapshot_paginator.results
            self._current_page_snapshot_cursor = snapshot_paginator.cursor

        self.paginator = paginator
        self._query = query
        if self.results is None:
            self.results = list((await self.session.exec(query)).all())
        logger.debug(
            f"{self.model.__name__} page {paginator.item_range} of "
            f"{paginator.total_items} ({len(self.results)} rows)"
        )
        return self.results

    async def _count(self, query: Select) -> int:
        count_query = select(func.count()).select_from(query.subquery())
        result = await self.session.exec(count_query)
        return result.one()

    def _apply_search(self, query: Select, search: Mapping[str, Any]) -> Select:
        conditions = []
        for column, value in search.items():
            attr = getattr(self.model, column, None)
            if attr is None or not hasattr(attr, "ilike"):
                raise InvalidFilterError(
                    f"Invalid search: {column} is not an attribute of {self.model.__name__}"
                )
            conditions.append(attr.ilike(f"%{value}%"))
        return query.where(or_(*conditions))

    def _apply_filters(self, query: Select, filters: Mapping[str, Any]) -> Select:
        filtered_query = ComposableQuery(self.model, query)
        for query_filter in self.filter_factory.create_filters(filters):
            query_filter.apply_to(filtered_query)
        return filtered_query.build()

    def _apply_sort(self, query: Select, sort: Any) -> Select:
        if isinstance(sort, RawSort):
            return query.order_by(literal_column(sort.sql))

        query, clauses = self._order_clauses(query, self.model, normalize_sort(sort))
        return query.order_by(*clauses)

    def _order_clauses(
        self, query: Select, model: type[Any], sort: Mapping[Any, Any]
    ) -> tuple[Select, list[Any]]:
        clauses = []
        for key, direction in sort.items():
            if isinstance(direction, Mapping):
                related_model = self._related_model(model, key)
                query = query.join(getattr(model, key))
                query, related = self._order_clauses(query, related_model, direction)
                clauses.extend(related)
                continue

            if direction not in ("asc", "desc"):
                raise InvalidSortError(f"Unsupported sort direction {direction!r} for {key}")
            if isinstance(key, RawSort):
                expression = literal_column(key.sql)
            else:
                expression = getattr(model, key, None)
                if expression is None or not hasattr(expression, "asc"):
                    raise InvalidSortError(
                        f"Invalid sort: {key} is not an attribute of {model.__name__}"
                    )
            clauses.append(expression.asc() if direction == "asc" else expression.desc())
        return query, clauses

    @staticmethod
    def _related_model(model: type[Any], name: str) -> type[Any]:
        try:
            relationships = inspect(model).relationships
        except NoInspectionAvailable as ex:
            raise InvalidSortError(f"{model!r} is not a mapped class") from ex
        if name not in relationships:
            raise InvalidSortError(
                f"Invalid sort: {name} is not a relationship of {model.__name__}"
            )
        return relationships[name].mapper.class_

    def _stable_sort(self, sort: Any) -> Any:
        """Append the collection key as a tie-breaker so page boundaries are deterministic."""
        if isinstance(sort, RawSort):
            return sort

        sort_hash = normalize_sort(sort)
        if self.collection_key not in sort_hash:
            sort_hash[self.collection_key] = "asc"
        return sort_hash
