"""Domain ports (Protocols) implemented by the infrastructure layer."""

from ecoscore.domain.shared.ports.cache_backend import ICacheBackend

__all__ = ["ICacheBackend"]
