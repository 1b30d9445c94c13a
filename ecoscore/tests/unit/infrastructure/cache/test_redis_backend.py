"""
Tests for RedisCacheBackend against a mocked redis.asyncio client.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from ecoscore.domain.shared.errors import CacheUnavailableError
from ecoscore.infrastructure.cache.redis_backend import RedisCacheBackend


@pytest.fixture
def client() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def redis_backend(client: AsyncMock) -> RedisCacheBackend:
    return RedisCacheBackend(client, failure_threshold=3, recovery_timeout=30)


class TestRedisCommands:
    """Each port method maps to one Redis command."""

    @pytest.mark.asyncio
    async def test_get(self, redis_backend: RedisCacheBackend, client: AsyncMock) -> None:
        client.get.return_value = '"v"'
        assert await redis_backend.get("k") == '"v"'
        client.get.assert_awaited_once_with("k")

    @pytest.mark.asyncio
    async def test_set_with_ttl(self, redis_backend: RedisCacheBackend, client: AsyncMock) -> None:
        await redis_backend.set("k", "1", ttl_seconds=60)
        client.set.assert_awaited_once_with("k", "1", ex=60)

    @pytest.mark.asyncio
    async def test_set_without_ttl(self, redis_backend: RedisCacheBackend, client: AsyncMock) -> None:
        await redis_backend.set("k", "1", ttl_seconds=0)
        client.set.assert_awaited_once_with("k", "1", ex=None)

    @pytest.mark.asyncio
    async def test_delete(self, redis_backend: RedisCacheBackend, client: AsyncMock) -> None:
        client.delete.return_value = 2
        assert await redis_backend.delete("a", "b") == 2
        client.delete.assert_awaited_once_with("a", "b")
        assert await redis_backend.delete() == 0

    @pytest.mark.asyncio
    async def test_exists_ttl_expire(self, redis_backend: RedisCacheBackend, client: AsyncMock) -> None:
        client.exists.return_value = 1
        client.ttl.return_value = 42
        client.expire.return_value = True
        assert await redis_backend.exists("k") is True
        assert await redis_backend.ttl("k") == 42
        assert await redis_backend.expire("k", 10) is True
        client.expire.assert_awaited_once_with("k", 10)

    @pytest.mark.asyncio
    async def test_incr_by(self, redis_backend: RedisCacheBackend, client: AsyncMock) -> None:
        client.incrby.return_value = 7
        assert await redis_backend.incr_by("n", 2) == 7
        client.incrby.assert_awaited_once_with("n", 2)

    @pytest.mark.asyncio
    async def test_mget(self, redis_backend: RedisCacheBackend, client: AsyncMock) -> None:
        client.mget.return_value = ["1", None]
        assert await redis_backend.mget(["a", "b"]) == ["1", None]
        assert await redis_backend.mget([]) == []
        client.mget.assert_awaited_once_with(["a", "b"])

    @pytest.mark.asyncio
    async def test_mset_uses_transaction_pipeline(self, redis_backend: RedisCacheBackend, client: AsyncMock) -> None:
        """Batch writes go through one MULTI/EXEC pipeline."""
        pipe = MagicMock()
        pipe.__aenter__ = AsyncMock(return_value=pipe)
        pipe.__aexit__ = AsyncMock(return_value=False)
        pipe.execute = AsyncMock(return_value=[True, True])
        client.pipeline = MagicMock(return_value=pipe)

        await redis_backend.mset([("a", "1", 60), ("b", "2", None)])

        client.pipeline.assert_called_once_with(transaction=True)
        pipe.set.assert_any_call("a", "1", ex=60)
        pipe.set.assert_any_call("b", "2", ex=None)
        pipe.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_keys_uses_scan(self, redis_backend: RedisCacheBackend, client: AsyncMock) -> None:
        async def scan_iter(match, count):
            for key in ("analysis:1", "analysis:2"):
                yield key

        client.scan_iter = MagicMock(side_effect=scan_iter)
        assert await redis_backend.keys("analysis:*") == ["analysis:1", "analysis:2"]
        client.scan_iter.assert_called_once_with(match="analysis:*", count=500)
        client.keys.assert_not_called()

    @pytest.mark.asyncio
    async def test_close(self, redis_backend: RedisCacheBackend, client: AsyncMock) -> None:
        await redis_backend.close()
        client.aclose.assert_awaited_once()


class TestFailures:
    """Redis errors and the circuit breaker."""

    @pytest.mark.asyncio
    async def test_redis_error_becomes_unavailable(self, redis_backend: RedisCacheBackend, client: AsyncMock) -> None:
        client.get.side_effect = RedisConnectionError("connection refused")
        with pytest.raises(CacheUnavailableError):
            await redis_backend.get("k")

    @pytest.mark.asyncio
    async def test_os_error_becomes_unavailable(self, redis_backend: RedisCacheBackend, client: AsyncMock) -> None:
        client.set.side_effect = OSError("network unreachable")
        with pytest.raises(CacheUnavailableError):
            await redis_backend.set("k", "1")

    @pytest.mark.asyncio
    async def test_circuit_opens_after_threshold(self, redis_backend: RedisCacheBackend, client: AsyncMock) -> None:
        """Once open, calls fail fast without touching Redis."""
        client.get.side_effect = RedisConnectionError("connection refused")
        for _ in range(3):
            with pytest.raises(CacheUnavailableError):
                await redis_backend.get("k")
        assert client.get.await_count == 3

        with pytest.raises(CacheUnavailableError, match="circuit open"):
            await redis_backend.get("k")
        assert client.get.await_count == 3

    @pytest.mark.asyncio
    async def test_breakers_are_per_instance(self, client: AsyncMock) -> None:
        failing = RedisCacheBackend(client, failure_threshold=1)
        client.get.side_effect = RedisConnectionError("down")
        with pytest.raises(CacheUnavailableError):
            await failing.get("k")

        healthy_client = AsyncMock()
        healthy_client.get.return_value = "1"
        healthy = RedisCacheBackend(healthy_client, failure_threshold=1)
        assert await healthy.get("k") == "1"


class TestFromUrl:
    def test_from_url_builds_client_without_connecting(self) -> None:
        backend = RedisCacheBackend.from_url("redis://localhost:6379/0", password="secret")
        assert isinstance(backend, RedisCacheBackend)
