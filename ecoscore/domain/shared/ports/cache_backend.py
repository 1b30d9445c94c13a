"""
Cache backend port.

This port defines the raw key/value contract consumed by the cache layer.
Implementations store already-serialized text values and MAY raise on
failure; the fail-soft behaviour lives one level up, in CacheStore.
"""

from typing import Optional, Protocol, Sequence, runtime_checkable


@runtime_checkable
class ICacheBackend(Protocol):
    """Port for a key/value store with per-key expiry.

    Implementations:
    - InMemoryCacheBackend (tests, single process)
    - RedisCacheBackend (production)

    Individual operations must be atomic at the store level.
    """

    async def get(self, key: str) -> Optional[str]:
        """Return the stored text, or None when missing or expired."""
        ...

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        """Store text under key. ``ttl_seconds=None`` means no expiry."""
        ...

    async def delete(self, *keys: str) -> int:
        """Delete keys and return how many existed."""
        ...

    async def exists(self, key: str) -> bool:
        """Check if a live key exists."""
        ...

    async def ttl(self, key: str) -> int:
        """Remaining seconds; -1 without expiry, -2 when missing."""
        ...

    async def expire(self, key: str, ttl_seconds: int) -> bool:
        """Set a new expiry on an existing key."""
        ...

    async def incr_by(self, key: str, amount: int) -> int:
        """Atomically add ``amount`` (may be negative) and return the new value."""
        ...

    async def mget(self, keys: Sequence[str]) -> list[Optional[str]]:
        """Return values aligned with ``keys`` (None for misses)."""
        ...

    async def mset(self, entries: Sequence[tuple[str, str, Optional[int]]]) -> None:
        """Apply (key, value, ttl) writes as a single batch."""
        ...

    async def keys(self, pattern: str) -> list[str]:
        """List live keys matching a glob pattern."""
        ...
