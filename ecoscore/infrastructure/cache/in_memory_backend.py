"""
In-memory cache backend with per-key TTL.

Single-process implementation of ICacheBackend for tests and development.
Production should use RedisCacheBackend.
"""

from __future__ import annotations

import asyncio
import fnmatch
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

import structlog

from ecoscore.domain.shared.errors import CacheError

logger = structlog.get_logger(__name__)


@dataclass
class CacheEntry:
    """Stored text value with optional absolute expiry (clock seconds)."""

    key: str
    value: str
    expires_at: Optional[float] = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class InMemoryCacheBackend:
    """In-memory implementation of ICacheBackend.

    Expired entries are evicted lazily on access and by ``remove_expired``.
    NOT suitable for production with multiple instances.

    Args:
        clock: Returns the current time in seconds (injectable for tests)

    Example:
        >>> backend = InMemoryCacheBackend()
        >>> await backend.set("k", '"v"', ttl_seconds=60)
        >>> await backend.get("k")
        '"v"'
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = asyncio.Lock()
        logger.debug("InMemoryCacheBackend initialized")

    def _live(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return None
        return entry

    def _expiry(self, ttl_seconds: Optional[int]) -> Optional[float]:
        if ttl_seconds is None or ttl_seconds <= 0:
            return None
        return self._clock() + ttl_seconds

    async def get(self, key: str) -> Optional[str]:
        entry = self._live(key)
        return entry.value if entry else None

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        self._entries[key] = CacheEntry(key=key, value=value, expires_at=self._expiry(ttl_seconds))

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._live(key) is not None:
                del self._entries[key]
                removed += 1
        return removed

    async def exists(self, key: str) -> bool:
        return self._live(key) is not None

    async def ttl(self, key: str) -> int:
        entry = self._live(key)
        if entry is None:
            return -2
        if entry.expires_at is None:
            return -1
        return max(0, int(round(entry.expires_at - self._clock())))

    async def expire(self, key: str, ttl_seconds: int) -> bool:
        entry = self._live(key)
        if entry is None:
            return False
        if ttl_seconds <= 0:
            del self._entries[key]
            return True
        entry.expires_at = self._clock() + ttl_seconds
        return True

    async def incr_by(self, key: str, amount: int) -> int:
        async with self._lock:
            entry = self._live(key)
            if entry is None:
                current = 0
                expires_at = None
            else:
                try:
                    current = int(entry.value)
                except ValueError as e:
                    raise CacheError(f"Value at {key} is not an integer") from e
                expires_at = entry.expires_at
            new_value = current + amount
            # Counters keep their existing expiry
            self._entries[key] = CacheEntry(key=key, value=str(new_value), expires_at=expires_at)
            return new_value

    async def mget(self, keys: Sequence[str]) -> list[Optional[str]]:
        return [await self.get(key) for key in keys]

    async def mset(self, entries: Sequence[tuple[str, str, Optional[int]]]) -> None:
        async with self._lock:
            for key, value, ttl_seconds in entries:
                self._entries[key] = CacheEntry(
                    key=key, value=value, expires_at=self._expiry(ttl_seconds)
                )

    async def keys(self, pattern: str) -> list[str]:
        return [key for key in list(self._entries) if fnmatch.fnmatchcase(key, pattern) and self._live(key)]

    def clear(self) -> None:
        """Clear all entries (for testing)."""
        self._entries.clear()
        logger.debug("Cache cleared")

    def remove_expired(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info("Removed expired entries", count=len(expired))
        return len(expired)

    def size(self) -> int:
        return len(self._entries)
