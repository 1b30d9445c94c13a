"""
Shared fixtures for ecoscore tests.

Cache fixtures run on InMemoryCacheBackend with a fake clock, so TTL
tests advance time instead of sleeping.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Sequence

import pytest

from ecoscore.domain.cache.models import AnalysisRecord, CachedUser, UserQuotas
from ecoscore.domain.product.models import ProductDescriptor
from ecoscore.domain.scoring.reference import ReferenceTables, load_reference_tables
from ecoscore.domain.shared.errors import CacheUnavailableError
from ecoscore.infrastructure.cache.cache_store import CacheStore
from ecoscore.infrastructure.cache.in_memory_backend import InMemoryCacheBackend


# ═══════════════════════════════════════════════════════════
# CLOCK AND CACHE FIXTURES
# ═══════════════════════════════════════════════════════════


class FakeClock:
    """Manually advanced clock exposing both epoch seconds and datetimes."""

    def __init__(self, start: datetime = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)):
        self.current = start

    def time(self) -> float:
        return self.current.timestamp()

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


class FailingCacheBackend:
    """ICacheBackend whose every call fails like an unreachable Redis."""

    def __init__(self) -> None:
        self.calls = 0

    def _fail(self) -> None:
        self.calls += 1
        raise CacheUnavailableError("Redis circuit open")

    async def get(self, key: str) -> Optional[str]:
        self._fail()

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        self._fail()

    async def delete(self, *keys: str) -> int:
        self._fail()
        return 0

    async def exists(self, key: str) -> bool:
        self._fail()
        return False

    async def ttl(self, key: str) -> int:
        self._fail()
        return -2

    async def expire(self, key: str, ttl_seconds: int) -> bool:
        self._fail()
        return False

    async def incr_by(self, key: str, amount: int) -> int:
        self._fail()
        return 0

    async def mget(self, keys: Sequence[str]) -> list[Optional[str]]:
        self._fail()
        return []

    async def mset(self, entries: Sequence[tuple[str, str, Optional[int]]]) -> None:
        self._fail()

    async def keys(self, pattern: str) -> list[str]:
        self._fail()
        return []


@pytest.fixture
def clock() -> FakeClock:
    """Fake clock starting at 2024-05-15 12:00 UTC."""
    return FakeClock()


@pytest.fixture
def backend(clock: FakeClock) -> InMemoryCacheBackend:
    """In-memory backend driven by the fake clock."""
    return InMemoryCacheBackend(clock=clock.time)


@pytest.fixture
def store(backend: InMemoryCacheBackend) -> CacheStore:
    """Fail-soft store over the in-memory backend."""
    return CacheStore(backend, default_ttl_seconds=3600)


@pytest.fixture
def failing_backend() -> FailingCacheBackend:
    return FailingCacheBackend()


@pytest.fixture
def failing_store(failing_backend: FailingCacheBackend) -> CacheStore:
    """Store whose backend raises on every call."""
    return CacheStore(failing_backend)


# ═══════════════════════════════════════════════════════════
# DOMAIN FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def tables() -> ReferenceTables:
    return load_reference_tables()


@pytest.fixture
def nutella() -> ProductDescriptor:
    """Ultra-processed spread with complete nutrition facts."""
    return ProductDescriptor.from_raw(
        name="Nutella",
        ingredients="sucre, huile de palme, noisettes 13%, cacao maigre, lait écrémé en poudre, "
        "lactosérum en poudre, émulsifiant: lécithines (soja), vanilline",
        nutrition={
            "energy_kj": 2252,
            "energy_kcal": 539,
            "fat": 30.9,
            "saturated_fat": 10.6,
            "carbohydrates": 57.5,
            "sugars": 56.3,
            "fiber": 0,
            "proteins": 6.3,
            "salt": 0.107,
        },
        barcode="3017620422003",
    )


@pytest.fixture
def apple_compote() -> ProductDescriptor:
    """Minimally processed food."""
    return ProductDescriptor.from_raw(
        name="Compote de pommes",
        ingredients=["pommes"],
        nutrition={
            "energy_kj": 250,
            "saturated_fat": 0,
            "sugars": 12,
            "sodium": 5,
            "fiber": 2,
            "proteins": 0.3,
            "carbohydrates": 14,
            "fruits_vegetables": 100,
        },
    )


@pytest.fixture
def eco_detergent() -> ProductDescriptor:
    return ProductDescriptor.from_raw(
        name="Lessive ECOCERT",
        ingredients="Aqua, Coco Glucoside, Citric Acid, Sodium Bicarbonate, Protease",
        category="detergent",
        certifications=["EU Ecolabel"],
    )


@pytest.fixture
def harsh_detergent() -> ProductDescriptor:
    return ProductDescriptor.from_raw(
        name="Lessive Ultra Blanc",
        ingredients="Aqua, Sodium Lauryl Sulfate, Methylisothiazolinone, Limonene",
        category="detergent",
    )


@pytest.fixture
def sample_user() -> CachedUser:
    return CachedUser(
        id="user_123",
        email="ada@example.com",
        name="Ada",
        email_verified=True,
        tier="free",
        quotas=UserQuotas(scans_per_month=30, ai_questions_per_day=5, exports_per_month=2),
    )


def make_record(
    analysis_id: str = "analysis_0123456789ab",
    barcode: Optional[str] = "3017620422003",
    product_name: str = "Nutella",
    **overrides: Any,
) -> AnalysisRecord:
    """AnalysisRecord with sensible defaults."""
    data: dict[str, Any] = {
        "id": analysis_id,
        "product_name": product_name,
        "barcode": barcode,
        "category": "food",
        "health_score": 22,
        "analysis": {"score": 22},
        "analyzed_at": datetime(2024, 5, 15, 11, 0, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return AnalysisRecord(**data)
