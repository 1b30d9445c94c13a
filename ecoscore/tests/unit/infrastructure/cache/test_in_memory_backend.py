"""
Tests for the in-memory cache backend.
"""

import pytest

from ecoscore.domain.shared.errors import CacheError
from ecoscore.infrastructure.cache.in_memory_backend import InMemoryCacheBackend
from ecoscore.tests.conftest import FakeClock


class TestInMemoryCacheBackend:
    """Tests for InMemoryCacheBackend."""

    @pytest.mark.asyncio
    async def test_set_and_get(self, backend: InMemoryCacheBackend) -> None:
        """Test basic set and get operations."""
        await backend.set("k", '"v"', ttl_seconds=60)
        assert await backend.get("k") == '"v"'

    @pytest.mark.asyncio
    async def test_get_nonexistent_key(self, backend: InMemoryCacheBackend) -> None:
        """Test getting a key that doesn't exist."""
        assert await backend.get("missing") is None

    @pytest.mark.asyncio
    async def test_ttl_expiration(self, backend: InMemoryCacheBackend, clock: FakeClock) -> None:
        """Test that entries expire after TTL."""
        await backend.set("k", "1", ttl_seconds=10)
        clock.advance(9)
        assert await backend.exists("k") is True
        clock.advance(1)
        assert await backend.exists("k") is False
        assert await backend.get("k") is None

    @pytest.mark.asyncio
    async def test_ttl_values(self, backend: InMemoryCacheBackend, clock: FakeClock) -> None:
        """Test ttl for missing, persistent and expiring keys."""
        await backend.set("persistent", "1")
        await backend.set("expiring", "1", ttl_seconds=100)
        clock.advance(40)
        assert await backend.ttl("missing") == -2
        assert await backend.ttl("persistent") == -1
        assert await backend.ttl("expiring") == 60

    @pytest.mark.asyncio
    async def test_delete_counts_live_keys(self, backend: InMemoryCacheBackend) -> None:
        await backend.set("a", "1")
        await backend.set("b", "2")
        assert await backend.delete("a", "b", "c") == 2
        assert await backend.get("a") is None

    @pytest.mark.asyncio
    async def test_expire(self, backend: InMemoryCacheBackend, clock: FakeClock) -> None:
        """Test setting and removing expiry."""
        await backend.set("k", "1")
        assert await backend.expire("k", 5) is True
        assert await backend.expire("missing", 5) is False
        clock.advance(5)
        assert await backend.get("k") is None

    @pytest.mark.asyncio
    async def test_expire_non_positive_deletes(self, backend: InMemoryCacheBackend) -> None:
        await backend.set("k", "1")
        assert await backend.expire("k", 0) is True
        assert await backend.exists("k") is False

    @pytest.mark.asyncio
    async def test_incr_by(self, backend: InMemoryCacheBackend) -> None:
        """Test counters start at zero."""
        assert await backend.incr_by("counter", 1) == 1
        assert await backend.incr_by("counter", 5) == 6
        assert await backend.incr_by("counter", -2) == 4
        assert await backend.get("counter") == "4"

    @pytest.mark.asyncio
    async def test_incr_keeps_expiry(self, backend: InMemoryCacheBackend, clock: FakeClock) -> None:
        await backend.incr_by("counter", 1)
        await backend.expire("counter", 60)
        clock.advance(30)
        await backend.incr_by("counter", 1)
        assert await backend.ttl("counter") == 30

    @pytest.mark.asyncio
    async def test_incr_non_integer(self, backend: InMemoryCacheBackend) -> None:
        await backend.set("k", '"text"')
        with pytest.raises(CacheError):
            await backend.incr_by("k", 1)

    @pytest.mark.asyncio
    async def test_mget_mset(self, backend: InMemoryCacheBackend, clock: FakeClock) -> None:
        await backend.mset([("a", "1", None), ("b", "2", 10)])
        assert await backend.mget(["a", "b", "c"]) == ["1", "2", None]
        clock.advance(10)
        assert await backend.mget(["a", "b"]) == ["1", None]

    @pytest.mark.asyncio
    async def test_keys_pattern(self, backend: InMemoryCacheBackend, clock: FakeClock) -> None:
        """Test glob matching skips expired keys."""
        await backend.set("analysis:1", "1")
        await backend.set("analysis:2", "2", ttl_seconds=1)
        await backend.set("session:1", "3")
        clock.advance(1)
        assert await backend.keys("analysis:*") == ["analysis:1"]

    @pytest.mark.asyncio
    async def test_remove_expired_and_clear(self, backend: InMemoryCacheBackend, clock: FakeClock) -> None:
        await backend.set("a", "1", ttl_seconds=1)
        await backend.set("b", "2")
        clock.advance(2)
        assert backend.remove_expired() == 1
        assert backend.size() == 1
        backend.clear()
        assert backend.size() == 0
