"""Configuration utilities read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)

CACHE_BACKENDS = ("memory", "redis")


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid integer setting, using default", name=name, value=raw, default=default)
        return default


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def get_cache_backend() -> str:
    """
    Get cache backend name.

    Returns:
        ``memory`` or ``redis`` from ECOSCORE_CACHE_BACKEND, defaults to ``memory``
    """
    backend = os.getenv("ECOSCORE_CACHE_BACKEND", "memory").strip().lower()
    if backend not in CACHE_BACKENDS:
        logger.warning("Unknown cache backend, using memory", backend=backend)
        return "memory"
    return backend


def get_redis_url() -> Optional[str]:
    return os.getenv("REDIS_URL") or None


def get_redis_password() -> Optional[str]:
    return os.getenv("REDIS_PASSWORD") or None


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


@dataclass(frozen=True)
class CacheSettings:
    """
    Snapshot of cache settings.

    Example:
        >>> settings = CacheSettings.from_env()
        >>> settings.backend
        'memory'
    """

    backend: str = "memory"
    redis_url: Optional[str] = None
    redis_password: Optional[str] = None
    default_ttl_seconds: int = 3600
    analysis_ttl_seconds: int = 86400
    session_ttl_seconds: int = 86400
    single_flight: bool = False

    @classmethod
    def from_env(cls) -> CacheSettings:
        return cls(
            backend=get_cache_backend(),
            redis_url=get_redis_url(),
            redis_password=get_redis_password(),
            default_ttl_seconds=_get_int("ECOSCORE_CACHE_DEFAULT_TTL_S", 3600),
            analysis_ttl_seconds=_get_int("ECOSCORE_ANALYSIS_TTL_S", 86400),
            session_ttl_seconds=_get_int("ECOSCORE_SESSION_TTL_S", 86400),
            single_flight=_get_bool("ECOSCORE_CACHE_SINGLE_FLIGHT", False),
        )
