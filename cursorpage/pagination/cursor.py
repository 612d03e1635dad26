"""
Paginator cursors.

A cursor is the full paginator state (query, sort, total item count, offset,
page size and metadata) packed into an opaque token. When the token would be
longer than CURSOR_MAX_LENGTH, the payload is written to the overflow cache
under a generated key and the token wraps only that key.
"""

from typing import Annotated, Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cursorpage.constants import (
    CURSOR_CACHE_KEY_PREFIX,
    CURSOR_CACHE_TTL_SECONDS,
    CURSOR_MAX_LENGTH,
)
from cursorpage.exceptions import CursorParseError, MalformedTokenError
from cursorpage.logging import logger
from cursorpage.pagination.sort import deserialize_sort, serialize_sort
from cursorpage.pagination.token import OpaqueToken
from cursorpage.protocols import CursorCache
from cursorpage.utils.cache_keys import CacheKeyFactory


class CursorState(BaseModel):  # type: ignore[misc]
    """Paginator state recovered from a cursor."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    query: dict[str, Any] = {}
    sort: Any = None
    total_items: Annotated[int, Field(ge=0)] = 0
    offset: Annotated[int, Field(ge=0)] = 0
    per_page: Annotated[int, Field(ge=0)] | Literal["all"] | None = None
    metadata: dict[str, Any] | None = None


class PaginatorCursor:
    """
    Creates and parses paginator cursors.

    Example:
        ```python
        cursor = PaginatorCursor(RedisCursorCache())
        token = await cursor.create(
            query={"filters": {"status": "active"}},
            sort={"title": "asc", "id": "asc"},
            total_items=120,
            offset=20,
            per_page=20,
        )
        state = await cursor.parse(token)
        assert state.offset == 20
        ```
    """

    def __init__(
        self,
        cache: CursorCache | None = None,
        *,
        max_length: int = CURSOR_MAX_LENGTH,
        expires_in: int = CURSOR_CACHE_TTL_SECONDS,
        key_prefix: str = CURSOR_CACHE_KEY_PREFIX,
    ):
        """
        Args:
            cache: Overflow store. Defaults to the Redis-backed cache, created
                on first use.
            max_length: Longest token returned inline.
            expires_in: Lifetime (seconds) of overflowed payloads.
            key_prefix: Namespace for overflow cache keys.
        """
        self._cache = cache
        self.max_length = max_length
        self.expires_in = expires_in
        self.key_prefix = key_prefix

    @property
    def cache(self) -> CursorCache:
        if self._cache is None:
            from cursorpage.storage.cursor_cache import RedisCursorCache

            self._cache = RedisCursorCache()
        return self._cache

    async def create(
        self,
        *,
        query: dict[str, Any],
        sort: Any,
        total_items: int,
        offset: int,
        per_page: int | str,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """
        Serialize paginator state into a token.

        Returns:
            The inline token, or a token wrapping an overflow cache key when
            the inline form is longer than ``max_length``.
        """
        cursor_params = {
            "query": query,
            "sort": serialize_sort(sort),
            "total_items": total_items,
            "offset": offset,
            "per_page": per_page,
            "metadata": metadata,
        }
        token = OpaqueToken.create(cursor_params)
        if len(token) <= self.max_length:
            return token

        cache_key = self._generate_cache_key()
        await self.cache.write(cache_key, cursor_params, ttl=self.expires_in)
        logger.debug(
            f"Cursor of {len(token)} characters stored out of band as {cache_key}"
        )
        return OpaqueToken.create(cache_key)

    async def parse(self, encoded: str | None) -> CursorState:
        """
        Recover paginator state from a token.

        Raises:
            CursorParseError: If the token is malformed, the overflow payload
                has expired, or the tagged sort is invalid.
        """
        try:
            decoded = OpaqueToken.parse(encoded)
        except MalformedTokenError as ex:
            raise CursorParseError(
                f"un-parsable paginator cursor: {ex}", details={"stage": ex.stage}
            ) from ex

        if isinstance(decoded, str):
            decoded = await self._read_cache_key(decoded)
        if not isinstance(decoded, dict):
            raise CursorParseError(
                "un-parsable paginator cursor: unexpected payload type "
                f"{type(decoded).__name__}"
            )

        try:
            return CursorState(
                query=decoded.get("query") or {},
                sort=deserialize_sort(decoded.get("sort")),
                total_items=decoded.get("total_items") or 0,
                offset=decoded.get("offset") or 0,
                per_page=decoded.get("per_page"),
                metadata=decoded.get("metadata"),
            )
        except ValidationError as ex:
            raise CursorParseError(
                f"un-parsable paginator cursor: {ex.error_count()} invalid field(s)"
            ) from ex

    async def discard(self, encoded: str) -> None:
        """
        Drop the overflow payload behind an indirection token.

        Inline tokens hold no cache entry, so nothing happens for them.
        """
        try:
            decoded = OpaqueToken.parse(encoded)
        except MalformedTokenError as ex:
            raise CursorParseError(f"un-parsable paginator cursor: {ex}") from ex
        if isinstance(decoded, str):
            await self.cache.delete(decoded)

    async def _read_cache_key(self, cache_key: str) -> dict[str, Any]:
        data = await self.cache.read(cache_key)
        if data is None:
            logger.warning(f"No cursor payload found in cache for {cache_key}")
            raise CursorParseError(f"no data found in cache for key {cache_key}")
        return data

    def _generate_cache_key(self) -> str:
        return CacheKeyFactory.generate(self.key_prefix, uuid4().hex)


_default_cursor: PaginatorCursor | None = None


def get_default_cursor() -> PaginatorCursor:
    """Shared PaginatorCursor backed by the Redis overflow cache."""
    global _default_cursor
    if _default_cursor is None:
        _default_cursor = PaginatorCursor()
    return _default_cursor
