"""Cache wiring from CacheSettings."""

from __future__ import annotations

from typing import Optional

import structlog

from ecoscore.config import CacheSettings
from ecoscore.domain.shared.ports import ICacheBackend
from ecoscore.infrastructure.cache.analysis_index import AnalysisIndex
from ecoscore.infrastructure.cache.cache_store import CacheStore
from ecoscore.infrastructure.cache.in_memory_backend import InMemoryCacheBackend
from ecoscore.infrastructure.cache.redis_backend import RedisCacheBackend
from ecoscore.infrastructure.cache.session_index import SessionIndex

logger = structlog.get_logger(__name__)


def build_cache_backend(settings: CacheSettings) -> ICacheBackend:
    if settings.backend == "redis":
        if settings.redis_url:
            return RedisCacheBackend.from_url(settings.redis_url, password=settings.redis_password)
        logger.warning("Redis backend selected without REDIS_URL, using in-memory cache")
    return InMemoryCacheBackend()


def build_cache_store(settings: Optional[CacheSettings] = None) -> CacheStore:
    """
    Build the configured CacheStore.

    Args:
        settings: Cache settings, read from the environment when omitted
    """
    settings = settings or CacheSettings.from_env()
    backend = build_cache_backend(settings)
    logger.info(
        "Cache store configured",
        backend=type(backend).__name__,
        default_ttl=settings.default_ttl_seconds,
        single_flight=settings.single_flight,
    )
    return CacheStore(
        backend,
        default_ttl_seconds=settings.default_ttl_seconds,
        single_flight=settings.single_flight,
    )


def build_analysis_index(store: CacheStore, settings: Optional[CacheSettings] = None) -> AnalysisIndex:
    """AnalysisIndex over ``store`` with the configured analysis TTL."""
    settings = settings or CacheSettings.from_env()
    return AnalysisIndex(store, ttl_seconds=settings.analysis_ttl_seconds)


def build_session_index(store: CacheStore, settings: Optional[CacheSettings] = None) -> SessionIndex:
    """SessionIndex over ``store`` with the configured session TTL."""
    settings = settings or CacheSettings.from_env()
    return SessionIndex(store, ttl_seconds=settings.session_ttl_seconds)
