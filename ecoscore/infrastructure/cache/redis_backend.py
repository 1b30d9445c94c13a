"""Redis cache backend - Implements ICacheBackend port.

Key Features:
- redis.asyncio client with decoded (text) responses
- Circuit breaker (5 failures -> 30s open) so a dead Redis is skipped fast
- Pipeline (MULTI/EXEC) for batch writes
- SCAN-based key listing, never KEYS
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional, Sequence

import redis.asyncio as redis
import structlog
from circuitbreaker import CircuitBreaker, CircuitBreakerError
from redis.exceptions import RedisError

from ecoscore.domain.shared.errors import CacheUnavailableError

logger = structlog.get_logger(__name__)


class RedisCacheBackend:
    """
    Redis implementation of ICacheBackend.

    Every call goes through one circuit breaker per backend instance.
    Connection errors and an open circuit both surface as
    CacheUnavailableError.

    Example:
        >>> backend = RedisCacheBackend.from_url("redis://localhost:6379/0")
        >>> await backend.set("k", '"v"', ttl_seconds=60)
        >>> await backend.get("k")
        '"v"'
    """

    def __init__(
        self,
        client: redis.Redis,
        failure_threshold: int = 5,
        recovery_timeout: int = 30,
    ) -> None:
        self._client = client
        self._breaker = CircuitBreaker(
            failure_threshold=failure_threshold,
            recovery_timeout=recovery_timeout,
            name=f"redis_cache_{id(self)}",
        )
        self._guarded = self._breaker(self._execute)

    @classmethod
    def from_url(cls, url: str, password: Optional[str] = None, **kwargs: Any) -> RedisCacheBackend:
        """Create a backend from a Redis URL (``redis://`` or ``rediss://``)."""
        client = redis.from_url(
            url,
            password=password if password else None,
            decode_responses=True,
        )
        logger.info("Redis cache backend configured", url=url.split("@")[-1])
        return cls(client, **kwargs)

    async def _execute(self, operation: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any) -> Any:
        return await operation(*args, **kwargs)

    async def _call(self, operation: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any) -> Any:
        try:
            return await self._guarded(operation, *args, **kwargs)
        except CircuitBreakerError as e:
            raise CacheUnavailableError(f"Redis circuit open: {e}") from e
        except (RedisError, ConnectionError, OSError) as e:
            raise CacheUnavailableError(f"Redis error: {e}") from e

    async def get(self, key: str) -> Optional[str]:
        return await self._call(self._client.get, key)

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        ex = ttl_seconds if ttl_seconds and ttl_seconds > 0 else None
        await self._call(self._client.set, key, value, ex=ex)

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(await self._call(self._client.delete, *keys))

    async def exists(self, key: str) -> bool:
        return bool(await self._call(self._client.exists, key))

    async def ttl(self, key: str) -> int:
        return int(await self._call(self._client.ttl, key))

    async def expire(self, key: str, ttl_seconds: int) -> bool:
        return bool(await self._call(self._client.expire, key, ttl_seconds))

    async def incr_by(self, key: str, amount: int) -> int:
        return int(await self._call(self._client.incrby, key, amount))

    async def mget(self, keys: Sequence[str]) -> list[Optional[str]]:
        if not keys:
            return []
        return list(await self._call(self._client.mget, list(keys)))

    async def mset(self, entries: Sequence[tuple[str, str, Optional[int]]]) -> None:
        if not entries:
            return

        async def write_batch() -> None:
            async with self._client.pipeline(transaction=True) as pipe:
                for key, value, ttl_seconds in entries:
                    pipe.set(key, value, ex=ttl_seconds if ttl_seconds and ttl_seconds > 0 else None)
                await pipe.execute()

        await self._call(write_batch)

    async def keys(self, pattern: str) -> list[str]:
        async def scan() -> list[str]:
            return [key async for key in self._client.scan_iter(match=pattern, count=500)]

        return await self._call(scan)

    async def close(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()
