"""Cache infrastructure: backends, fail-soft store and indices."""

from ecoscore.infrastructure.cache.analysis_index import AnalysisIndex, product_hash
from ecoscore.infrastructure.cache.cache_store import CacheStore
from ecoscore.infrastructure.cache.factory import (
    build_analysis_index,
    build_cache_store,
    build_session_index,
)
from ecoscore.infrastructure.cache.in_memory_backend import InMemoryCacheBackend
from ecoscore.infrastructure.cache.quota_tracker import QuotaTracker
from ecoscore.infrastructure.cache.redis_backend import RedisCacheBackend
from ecoscore.infrastructure.cache.session_index import SessionIndex

__all__ = [
    "AnalysisIndex",
    "CacheStore",
    "InMemoryCacheBackend",
    "QuotaTracker",
    "RedisCacheBackend",
    "SessionIndex",
    "build_analysis_index",
    "build_cache_store",
    "build_session_index",
    "product_hash",
]
