from collections.abc import AsyncIterator
from typing import Any

from cursorpage.logging import logger
from cursorpage.querying.collection_query import CollectionQuery


class ValuesInBatches:
    """
    Iterate over every row of a record set, one page at a time.

    Each batch is fetched with the previous page's next_page_cursor, so the
    record set is walked exactly as a client following cursors would.

    Example:
        ```python
        query = CollectionQuery(session, BlogPost)
        async for post in ValuesInBatches(query, 100, filters={"status": "draft"}):
            ...
        ```
    """

    def __init__(self, query: CollectionQuery, batch_size: int, **call_kwargs: Any):
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self.query = query
        self.batch_size = batch_size
        self.call_kwargs = call_kwargs
        self.batch: list[Any] = []

    def __aiter__(self) -> AsyncIterator[Any]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[Any]:
        next_cursor = await self._fetch_batch(cursor=None)
        batch_number = 1
        while self.batch:
            for item in self.batch:
                yield item
            if next_cursor is None:
                break

            batch_number += 1
            logger.debug(f"Fetching batch {batch_number} of {self.batch_size}")
            next_cursor = await self._fetch_batch(cursor=next_cursor)

    async def _fetch_batch(self, cursor: str | None) -> str | None:
        if cursor is None:
            self.batch = await self.query.call(
                per_page=self.batch_size, **self.call_kwargs
            )
        else:
            # the cursor carries the filters, search and sort of the first call
            self.batch = await self.query.call(cursor=cursor)
        return await self.query.paginator.next_page_cursor()
