from typing import Optional

import redis.asyncio as redis
from redis.asyncio.lock import Lock

from studylib.configs.settings import settings
from studylib.utils import get_logger

logger = get_logger(__name__)


class RedisService:
    """Shared Redis client; only the owner lock backend uses it"""

    def __init__(self, max_connections: int = 20):
        self.max_connections = max_connections
        self._pool: Optional[redis.ConnectionPool] = None
        self._client: Optional[redis.Redis] = None

    async def get_client(self) -> redis.Redis:
        if self._client is None:
            self._client = await self._open()
        return self._client

    async def _open(self) -> redis.Redis:
        self._pool = redis.ConnectionPool(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            password=settings.REDIS_PWD,
            max_connections=self.max_connections,
        )
        client = redis.Redis(connection_pool=self._pool)
        try:
            await client.ping()
        except Exception as e:
            logger.error(f"[REDIS] Cannot reach {settings.REDIS_HOST}:{settings.REDIS_PORT}: {e}")
            await self._pool.disconnect()
            self._pool = None
            raise
        logger.info(f"[REDIS] Connected to {settings.REDIS_HOST}:{settings.REDIS_PORT}")
        return client

    async def lock(self, name: str, timeout: float, blocking_timeout: float) -> Lock:
        """A redis-py lock that expires after ``timeout`` seconds if never released"""
        client = await self.get_client()
        return client.lock(name, timeout=timeout, blocking_timeout=blocking_timeout)

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        if self._pool is not None:
            await self._pool.disconnect()
            self._pool = None


redis_service = RedisService()
