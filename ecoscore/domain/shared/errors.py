"""
Domain exceptions.

Typed exceptions for explicit error handling.
Backends raise the cache errors; CacheStore converts them into misses.
ConfigurationError is raised while loading reference tables or weights,
at startup, never per request.
"""

from __future__ import annotations


# ═══════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════


class DomainError(Exception):
    """
    Base exception for all domain errors.

    All domain-specific exceptions inherit from this.
    Allows catching all domain errors with single except clause.
    """

    pass


# ═══════════════════════════════════════════════════════════
# CONFIGURATION EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ConfigurationError(DomainError):
    """
    Reference tables or weights are inconsistent.

    Raised at construction time, never per request.

    Example:
        >>> raise ConfigurationError("Food weights sum to 0.95, expected 1.0")
    """

    pass


# ═══════════════════════════════════════════════════════════
# INFRASTRUCTURE EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class InfrastructureError(DomainError):
    """
    Infrastructure layer error.

    Base class for cache errors.
    """

    pass


class CacheError(InfrastructureError):
    """
    Cache operation failed.

    Raised when:
    - Cache write failed
    - Serialization error

    Example:
        >>> raise CacheError("Value for key 'analysis:x' is not JSON serializable")
    """

    pass


class CacheUnavailableError(CacheError):
    """
    Cache backend unreachable.

    Raised when:
    - Redis unavailable
    - Circuit breaker open

    Example:
        >>> raise CacheUnavailableError("Redis connection refused")
    """

    pass
