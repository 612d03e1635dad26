"""
Snapshot pagination.

A current page snapshot query targets the records of one page of a record set
regardless of how those records change afterwards. While the contents of the
nth page of a live record set may shift, the snapshot of that page keeps the
same members in the same order, so a caller can step through them one record
at a time.

The snapshot is an ordinary paginator whose query restricts the collection to
the captured keys, whose sort is a literal CASE expression ranking rows by
their captured position, and whose metadata records each key's position:

    {"snapshot": True, "offsets": {"<key>": "<position>"}, "collection_key": "id"}
"""

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import Select
from sqlmodel.ext.asyncio.session import AsyncSession

from cursorpage.constants import SNAPSHOT_METADATA_KEY
from cursorpage.exceptions import SnapshotStateError
from cursorpage.logging import logger
from cursorpage.pagination.builder import PaginatorBuilder
from cursorpage.pagination.cursor import PaginatorCursor
from cursorpage.pagination.paginator import Paginator
from cursorpage.pagination.sort import RawSort


def _quote_literal(value: Any) -> str:
    return "'" + str(value).replace("'", "''") + "'"


class SnapshotPaginator:
    """
    Paginator over a results snapshot, able to focus on a single record.

    Attributes:
        paginator: Current paginator state (replaced, never mutated).
        results: Rows selected by the last ``apply_to`` call, when it executed
            the query itself; None otherwise.
        cursor: Current page cursor after ``apply_to`` focused on a record.
    """

    METADATA_KEY = SNAPSHOT_METADATA_KEY

    def __init__(self, paginator: Paginator):
        metadata = paginator.metadata
        if not metadata:
            raise SnapshotStateError(
                "Paginator does not represent a current page snapshot query"
            )
        collection_key = metadata.get("collection_key")
        if not isinstance(collection_key, str) or not collection_key:
            raise SnapshotStateError(
                "Snapshot metadata does not name its collection_key",
                details={"collection_key": collection_key},
            )
        offsets = metadata.get("offsets")
        if not isinstance(offsets, Mapping) or not all(
            str(offset).isdigit() for offset in offsets.values()
        ):
            raise SnapshotStateError(
                "Snapshot metadata offsets must map record keys to positions"
            )
        self.paginator = paginator
        self.results: list[Any] | None = None
        self.cursor: str | None = None

    @classmethod
    async def cursor_for_results(
        cls,
        results: Sequence[Any],
        *,
        table_name: str,
        collection_key: str,
        cursor: PaginatorCursor | None = None,
    ) -> str | None:
        """
        Create a snapshot cursor from the current page results of a record set.

        Args:
            results: Rows of the current page, in display order.
            table_name: Table the rows come from.
            collection_key: Name of the unique key column.
            cursor: PaginatorCursor used to create the token.

        Returns:
            Current page cursor of the snapshot; None for an empty page.
        """
        offsets = {}
        when_clauses = []
        keys = []
        for index, record in enumerate(results):
            record_key = getattr(record, collection_key)
            keys.append(record_key)
            offsets[str(record_key)] = str(index)
            when_clauses.append(
                f'WHEN CAST("{table_name}"."{collection_key}" AS VARCHAR) = '
                f"{_quote_literal(record_key)} THEN {index}"
            )
        sort_sql = "CASE " + " ".join(when_clauses) + " END"

        builder = PaginatorBuilder(cursor=cursor)
        paginator = builder.set_params(
            query={"filters": {collection_key: keys}},
            metadata={
                cls.METADATA_KEY: True,
                "offsets": offsets,
                "collection_key": collection_key,
            },
            sort=RawSort(sql=sort_sql),
            total_items=len(results),
            per_page=len(results),
        )
        return await paginator.current_page_cursor()

    @classmethod
    def generated(cls, paginator: Paginator) -> bool:
        """Is the paginator one produced by this class?"""
        return bool((paginator.metadata or {}).get(cls.METADATA_KEY))

    async def apply_to(
        self,
        session: AsyncSession,
        query: Select,
        record_key: Any = None,
    ) -> Select:
        """
        Focus the query onto one record of the snapshot.

        If no record_key is given, the record is guessed from the current
        offset. The query must already carry the snapshot's filters, sort,
        offset and limit, and paginator.total_items must reflect its count.

        Args:
            session: Session used to execute the query.
            query: Snapshot query.
            record_key: Key of the record to focus on.

        A record_key that was never part of the intact snapshot matches no
        row: results is empty and the paginator stays on offset 0. Once the
        snapshot has drifted, a key missing from the live rows keeps its
        recorded offset and likewise yields no row.

        Returns:
            The query limited to the targeted record, or the query unchanged
            when no focusing is needed.
        """
        if self._has_valid_offsets():
            # the snapshot is intact; only focus when asked to
            if record_key is None:
                return query

            self._target(record_key)
            updated_query = query.offset(self.paginator.offset).limit(
                self.paginator.limit
            )
            if str(record_key) in self._offsets():
                self.results = list((await session.exec(updated_query)).all())
            else:
                self.results = []
            self.cursor = await self.paginator.current_page_cursor()
            return updated_query

        if self.paginator.offset is None and record_key is None:
            return query

        # Step 1: without a record_key, guess which record the caller was on
        if record_key is None:
            record_key = self._guess_record_key()

        # Step 2: fetch every remaining record of the snapshot
        snapshot_results = list(
            (await session.exec(query.offset(None).limit(None))).all()
        )

        # Step 3: recompute the offsets from the live order
        previous_offsets = self._offsets()
        self._update_offsets(snapshot_results)

        # Step 4: position onto the record
        self._target(record_key, fallback_offsets=previous_offsets)

        # Step 5: keep only the targeted record
        collection_key = self.paginator.metadata["collection_key"]
        self.results = [
            record
            for record in snapshot_results
            if record_key is not None
            and str(getattr(record, collection_key)) == str(record_key)
        ]
        self.cursor = await self.paginator.current_page_cursor()
        return query.offset(self.paginator.offset).limit(self.paginator.limit)

    def _offsets(self) -> dict[str, str]:
        return self.paginator.metadata.get("offsets") or {}

    def _has_valid_offsets(self) -> bool:
        return len(self._offsets()) == self.paginator.total_items

    def _update_offsets(self, results: Sequence[Any]) -> None:
        collection_key = self.paginator.metadata["collection_key"]
        offsets = {
            str(getattr(record, collection_key)): str(index)
            for index, record in enumerate(results)
        }
        logger.debug(
            f"Snapshot drifted: {len(self._offsets())} recorded offsets, "
            f"{len(offsets)} records remain"
        )
        self.paginator = self.paginator.model_copy(
            update={"metadata": {**self.paginator.metadata, "offsets": offsets}}
        )

    def _guess_record_key(self) -> str | None:
        position = str(self.paginator.offset)
        for record_key, offset in self._offsets().items():
            if offset == position:
                return record_key
        return None

    def _target(
        self, record_key: Any, fallback_offsets: dict[str, str] | None = None
    ) -> None:
        offset = self._lookup_offset(record_key, fallback_offsets)
        self.paginator = self.paginator.model_copy(
            update={"offset": offset, "per_page": 1}
        )

    def _lookup_offset(
        self, record_key: Any, fallback_offsets: dict[str, str] | None
    ) -> int:
        if record_key is None:
            return 0
        offset = self._offsets().get(str(record_key))
        if offset is None and fallback_offsets:
            offset = fallback_offsets.get(str(record_key))
        return int(offset) if offset is not None else 0
