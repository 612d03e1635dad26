from redis.asyncio import ConnectionPool, Redis

from cursorpage.logging import logger
from cursorpage.settings import app_settings


class RedisPool:
    """
    Redis connection pool manager.

    Manages Redis connection instances per database index with connection pooling.
    Each database gets its own connection pool with configurable settings.
    """

    __instances = {}
    __pools = {}

    @classmethod
    async def get_instance(cls, db=app_settings.CURSOR_REDIS_DB):
        """
        Get or create a Redis instance for the specified database.

        Args:
            db: Redis database index (default: CURSOR_REDIS_DB)

        Returns:
            Redis: Redis instance connected to the specified database
        """
        if db not in cls.__instances:
            cls.__instances[db] = await cls._create_instance(db)
        return cls.__instances[db]

    @classmethod
    async def _create_instance(cls, db):
        pool = ConnectionPool.from_url(
            f"redis://{app_settings.REDIS_IP}:{app_settings.REDIS_PORT}",
            db=db,
            encoding="utf-8",
            decode_responses=True,
            max_connections=app_settings.REDIS_MAX_CONNECTIONS,
            socket_timeout=app_settings.REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=app_settings.REDIS_CONNECT_TIMEOUT,
        )
        cls.__pools[db] = pool
        logger.debug(f"Created Redis pool for database {db}")
        return Redis.from_pool(pool)

    @classmethod
    async def close_all(cls):
        """
        Close all Redis connection pools gracefully.

        This should be called during application shutdown to ensure
        all connections are properly closed.
        """
        logger.info("Closing all Redis connection pools...")
        for db, pool in cls.__pools.items():
            try:
                await pool.disconnect()
                logger.info(f"Closed Redis pool for database {db}")
            except (ConnectionError, OSError) as ex:
                logger.error(f"Error closing Redis pool for database {db}: {ex}")

        cls.__pools.clear()
        cls.__instances.clear()
        logger.info("All Redis connection pools closed")
