"""Per-owner serialization of structural mutations.

Rename, move and delete on overlapping subtrees would otherwise race while a
path propagation is walking the tree. Every structural change for an owner
runs inside ``OwnerLockManager.hold(owner_id)``.
"""
import asyncio
from contextlib import asynccontextmanager, suppress
from typing import AsyncIterator, Dict, Optional

from redis.exceptions import LockError

from studylib.configs.settings import settings
from studylib.core.exceptions import LockTimeoutError
from studylib.services.redis_service import RedisService, redis_service
from studylib.utils import get_logger

logger = get_logger(__name__)

LOCK_KEY_PREFIX = "studylib:lock:owner:"


class OwnerLockManager:
    def __init__(
        self,
        backend: Optional[str] = None,
        timeout: Optional[int] = None,
        blocking_timeout: Optional[float] = None,
        redis: Optional[RedisService] = None,
    ):
        self.backend = backend or settings.NAMESPACE_LOCK_BACKEND
        self.timeout = timeout if timeout is not None else settings.NAMESPACE_LOCK_TIMEOUT
        self.blocking_timeout = (
            blocking_timeout if blocking_timeout is not None else settings.NAMESPACE_LOCK_BLOCKING_TIMEOUT
        )
        self._redis = redis or redis_service
        self._local_locks: Dict[str, asyncio.Lock] = {}
        # Holders plus waiters per owner; the lock is dropped when this reaches 0
        self._local_users: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, owner_id: str) -> AsyncIterator[None]:
        if self.backend == "redis":
            async with self._hold_redis(owner_id):
                yield
        else:
            async with self._hold_local(owner_id):
                yield

    @asynccontextmanager
    async def _hold_local(self, owner_id: str) -> AsyncIterator[None]:
        lock = self._local_locks.setdefault(owner_id, asyncio.Lock())
        self._local_users[owner_id] = self._local_users.get(owner_id, 0) + 1
        try:
            try:
                await asyncio.wait_for(lock.acquire(), timeout=self.blocking_timeout)
            except asyncio.TimeoutError:
                logger.warning(f"[OWNER_LOCK] Timed out waiting for local lock - owner: {owner_id}")
                raise LockTimeoutError()
            try:
                yield
            finally:
                lock.release()
        finally:
            self._local_users[owner_id] -= 1
            if not self._local_users[owner_id]:
                del self._local_users[owner_id]
                del self._local_locks[owner_id]

    async def _keep_alive(self, lock, owner_id: str) -> None:
        """Reset the redis lock TTL every third of ``timeout`` while it is held"""
        while True:
            await asyncio.sleep(self.timeout / 3)
            try:
                await lock.reacquire()
            except LockError as e:
                logger.error(f"[OWNER_LOCK] Could not renew lock - owner: {owner_id}: {e}")
                return

    @asynccontextmanager
    async def _hold_redis(self, owner_id: str) -> AsyncIterator[None]:
        lock = await self._redis.lock(
            f"{LOCK_KEY_PREFIX}{owner_id}",
            timeout=self.timeout,
            blocking_timeout=self.blocking_timeout,
        )
        if not await lock.acquire():
            logger.warning(f"[OWNER_LOCK] Timed out waiting for redis lock - owner: {owner_id}")
            raise LockTimeoutError()
        renewal = asyncio.create_task(self._keep_alive(lock, owner_id))
        try:
            yield
        finally:
            renewal.cancel()
            with suppress(asyncio.CancelledError):
                await renewal
            try:
                await lock.release()
            except LockError as e:
                # Lock expired while held; another worker may already own it
                logger.warning(f"[OWNER_LOCK] Lock lost before release - owner: {owner_id}: {e}")


owner_locks = OwnerLockManager()
