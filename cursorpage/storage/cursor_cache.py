"""
Redis-backed overflow store for paginator cursors.

Payloads are written as JSON strings with an expiry. Redis failures are not
caught here: a cursor that cannot be stored or read is a failed request.
"""

import json
from typing import Any

from redis.asyncio import Redis

from cursorpage.logging import logger
from cursorpage.settings import app_settings
from cursorpage.storage.redis import RedisPool


class RedisCursorCache:
    """
    CursorCache implementation on top of ``redis.asyncio``.

    Example:
        >>> cache = RedisCursorCache()
        >>> await cache.write("paginator_cursor:ab12", {"offset": 0}, ttl=60)
        >>> await cache.read("paginator_cursor:ab12")
        {'offset': 0}
    """

    def __init__(
        self,
        redis: Redis | None = None,
        db: int = app_settings.CURSOR_REDIS_DB,
    ):
        """
        Args:
            redis: Connection to use. When omitted, the shared pool instance
                for ``db`` is used.
            db: Redis database index.
        """
        self._redis = redis
        self.db = db

    async def _get_redis(self) -> Redis:
        if self._redis is None:
            self._redis = await RedisPool.get_instance(self.db)
        return self._redis

    async def write(self, key: str, payload: dict[str, Any], ttl: int) -> None:
        redis = await self._get_redis()
        await redis.setex(key, ttl, json.dumps(payload, default=str))
        logger.debug(f"Stored cursor payload under {key} (TTL: {ttl}s)")

    async def read(self, key: str) -> dict[str, Any] | None:
        redis = await self._get_redis()
        raw = await redis.get(key)
        if raw is None:
            logger.debug(f"Cursor cache miss for {key}")
            return None
        return json.loads(raw)

    async def delete(self, key: str) -> None:
        redis = await self._get_redis()
        await redis.delete(key)
        logger.debug(f"Deleted cursor payload {key}")
