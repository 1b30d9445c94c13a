"""
Fail-soft cache store.

JSON value layer over an ICacheBackend. Every backend exception is logged
and converted into a sentinel (None, False, -1, 0, []), so callers treat a
broken cache exactly like an empty one.
"""

from __future__ import annotations

import asyncio
import inspect
import json
from typing import Any, Awaitable, Callable, Optional, Sequence, Union

import structlog
from pydantic import BaseModel

from ecoscore.domain.shared.ports import ICacheBackend

logger = structlog.get_logger(__name__)

DEFAULT_TTL_SECONDS = 3600

Factory = Callable[[], Union[Any, Awaitable[Any]]]


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return value


def serialize(value: Any) -> str:
    """JSON text for a value; pydantic models are dumped in JSON mode."""
    if isinstance(value, BaseModel):
        return value.model_dump_json()
    if isinstance(value, (list, tuple)):
        return json.dumps([_to_jsonable(v) for v in value])
    return json.dumps(value)


def deserialize(raw: Optional[str]) -> Any:
    if raw is None:
        return None
    return json.loads(raw)


class CacheStore:
    """
    Generic async cache with JSON values and fail-soft semantics.

    Features:
    - get/set/delete/exists/ttl/expire
    - Atomic increment/decrement at the backend
    - Batch mget/mset
    - Glob invalidation (``analysis:*``)
    - ``get_or_set`` cache-aside helper with optional per-key single-flight

    Example:
        >>> store = CacheStore(InMemoryCacheBackend())
        >>> await store.set("user:1", {"name": "Ada"}, ttl_seconds=60)
        True
        >>> await store.get("user:1")
        {'name': 'Ada'}
    """

    def __init__(
        self,
        backend: ICacheBackend,
        default_ttl_seconds: int = DEFAULT_TTL_SECONDS,
        single_flight: bool = False,
    ) -> None:
        self.backend = backend
        self.default_ttl = default_ttl_seconds
        self.single_flight = single_flight
        self._flight_locks: dict[str, asyncio.Lock] = {}
        self._flight_users: dict[str, int] = {}

    def _resolve_ttl(self, ttl_seconds: Optional[int]) -> Optional[int]:
        if ttl_seconds is None:
            return self.default_ttl
        if ttl_seconds <= 0:
            return None
        return ttl_seconds

    async def get(self, key: str) -> Any:
        """Deserialized value, or None on miss or error."""
        try:
            raw = await self.backend.get(key)
        except Exception as e:
            logger.warning("Cache get failed", key=key, error=str(e))
            return None
        if raw is None:
            logger.debug("Cache miss", key=key)
            return None
        try:
            value = deserialize(raw)
        except ValueError as e:
            logger.warning("Cache value is not valid JSON", key=key, error=str(e))
            return None
        logger.debug("Cache hit", key=key)
        return value

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> bool:
        """Store a value. ``None`` ttl uses the default, ``<= 0`` means no expiry."""
        try:
            payload = serialize(value)
        except (TypeError, ValueError) as e:
            logger.warning("Cache value not serializable", key=key, error=str(e))
            return False
        try:
            await self.backend.set(key, payload, self._resolve_ttl(ttl_seconds))
        except Exception as e:
            logger.warning("Cache set failed", key=key, error=str(e))
            return False
        logger.debug("Cache set", key=key, ttl=self._resolve_ttl(ttl_seconds))
        return True

    async def delete(self, key: str) -> bool:
        try:
            return await self.backend.delete(key) > 0
        except Exception as e:
            logger.warning("Cache delete failed", key=key, error=str(e))
            return False

    async def exists(self, key: str) -> bool:
        try:
            return await self.backend.exists(key)
        except Exception as e:
            logger.warning("Cache exists failed", key=key, error=str(e))
            return False

    async def ttl(self, key: str) -> int:
        """Remaining seconds; -1 when missing, without expiry or on error."""
        try:
            remaining = await self.backend.ttl(key)
        except Exception as e:
            logger.warning("Cache ttl failed", key=key, error=str(e))
            return -1
        return remaining if remaining >= 0 else -1

    async def expire(self, key: str, ttl_seconds: int) -> bool:
        try:
            return await self.backend.expire(key, ttl_seconds)
        except Exception as e:
            logger.warning("Cache expire failed", key=key, error=str(e))
            return False

    async def increment(self, key: str, amount: int = 1) -> Optional[int]:
        """Atomic add. Returns the new value, or None on error."""
        try:
            return await self.backend.incr_by(key, amount)
        except Exception as e:
            logger.warning("Cache increment failed", key=key, error=str(e))
            return None

    async def decrement(self, key: str, amount: int = 1) -> Optional[int]:
        return await self.increment(key, -amount)

    async def mget(self, keys: Sequence[str]) -> list[Any]:
        """Values aligned with keys; misses and errors are None."""
        if not keys:
            return []
        try:
            raws = await self.backend.mget(list(keys))
        except Exception as e:
            logger.warning("Cache mget failed", count=len(keys), error=str(e))
            return [None] * len(keys)

        values: list[Any] = []
        for key, raw in zip(keys, raws):
            try:
                values.append(deserialize(raw))
            except ValueError:
                logger.warning("Cache value is not valid JSON", key=key)
                values.append(None)
        return values

    async def mset(self, entries: Sequence[tuple[str, Any, Optional[int]]]) -> bool:
        """Write (key, value, ttl) entries as one batch."""
        if not entries:
            return True
        try:
            batch = [(key, serialize(value), self._resolve_ttl(ttl)) for key, value, ttl in entries]
        except (TypeError, ValueError) as e:
            logger.warning("Cache batch not serializable", error=str(e))
            return False
        try:
            await self.backend.mset(batch)
        except Exception as e:
            logger.warning("Cache mset failed", count=len(entries), error=str(e))
            return False
        return True

    async def invalidate(self, pattern: str) -> int:
        """Delete every key matching a glob pattern. Returns the count deleted."""
        try:
            keys = await self.backend.keys(pattern)
            if not keys:
                return 0
            deleted = await self.backend.delete(*keys)
        except Exception as e:
            logger.warning("Cache invalidate failed", pattern=pattern, error=str(e))
            return 0
        logger.info("Cache invalidated", pattern=pattern, count=deleted)
        return deleted

    async def get_or_set(self, key: str, factory: Factory, ttl_seconds: Optional[int] = None) -> Any:
        """
        Cache-aside: return the cached value or compute, store and return it.

        The factory may be sync or async. A cached ``None`` counts as a miss.
        Hits return the decoded JSON, misses return the factory value as is.
        Without single-flight, concurrent misses may all invoke the factory.
        Factory exceptions propagate; nothing is cached in that case.
        """
        cached = await self.get(key)
        if cached is not None:
            return cached

        if not self.single_flight:
            return await self._compute_and_store(key, factory, ttl_seconds)

        lock = self._flight_locks.setdefault(key, asyncio.Lock())
        self._flight_users[key] = self._flight_users.get(key, 0) + 1
        try:
            async with lock:
                cached = await self.get(key)
                if cached is not None:
                    return cached
                return await self._compute_and_store(key, factory, ttl_seconds)
        finally:
            self._flight_users[key] -= 1
            if not self._flight_users[key]:
                del self._flight_users[key]
                del self._flight_locks[key]

    async def _compute_and_store(self, key: str, factory: Factory, ttl_seconds: Optional[int]) -> Any:
        value = factory()
        if inspect.isawaitable(value):
            value = await value
        if value is not None:
            await self.set(key, value, ttl_seconds)
        return value
