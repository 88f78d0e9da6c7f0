"""Redis-backed key/value cache with per-key TTL.

Values are opaque text (callers serialize). A miss is ``None``; a
connectivity failure raises CacheUnavailableError so callers can tell the
two apart and decide how to degrade.
"""

import logging
import re
from collections.abc import Awaitable, Callable
from typing import Protocol

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from src.cs_common.errors import CacheUnavailableError
from src.cs_common.redis_client import get_redis

logger = logging.getLogger(__name__)

_GLOB_SPECIAL = re.compile(r"([\\*?\[\]])")

# Keys per SCAN round-trip and per UNLINK call
_SCAN_BATCH = 500


def glob_escape(prefix: str) -> str:
    """Escape Redis glob metacharacters so a prefix matches literally."""
    return _GLOB_SPECIAL.sub(r"\\\1", prefix)


class CacheProtocol(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def delete_by_prefix(self, prefix: str) -> int: ...


class RedisCache:
    """Cache adapter over a shared redis.asyncio pool."""

    def __init__(
        self,
        client_factory: Callable[[], Awaitable[aioredis.Redis]] = get_redis,
    ) -> None:
        self._client_factory = client_factory

    async def get(self, key: str) -> str | None:
        try:
            client = await self._client_factory()
            return await client.get(key)
        except (RedisError, OSError) as exc:
            raise CacheUnavailableError() from exc

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        # Plain SET EX: concurrent writers of one key are last-write-wins
        try:
            client = await self._client_factory()
            await client.set(key, value, ex=ttl_seconds)
        except (RedisError, OSError) as exc:
            raise CacheUnavailableError() from exc

    async def delete(self, key: str) -> None:
        try:
            client = await self._client_factory()
            await client.delete(key)
        except (RedisError, OSError) as exc:
            raise CacheUnavailableError() from exc

    async def delete_by_prefix(self, prefix: str) -> int:
        """Remove every key starting with ``prefix``. Returns the count removed.

        Uses SCAN (non-blocking, cursor based) rather than KEYS, and UNLINK so
        large batches are reclaimed off the Redis main thread.
        """
        if not prefix:
            raise ValueError("refusing to delete with an empty prefix")
        pattern = glob_escape(prefix) + "*"
        removed = 0
        try:
            client = await self._client_factory()
            batch: list[str] = []
            async for key in client.scan_iter(match=pattern, count=_SCAN_BATCH):
                batch.append(key)
                if len(batch) >= _SCAN_BATCH:
                    removed += await client.unlink(*batch)
                    batch = []
            if batch:
                removed += await client.unlink(*batch)
        except (RedisError, OSError) as exc:
            raise CacheUnavailableError() from exc
        logger.debug("Cache prefix delete: prefix=%s removed=%d", prefix, removed)
        return removed
