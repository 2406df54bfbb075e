"""Configuration dataclasses for the caches."""

from .config import CacheConfig, ExpiringCacheConfig, RecencyCacheConfig, RedisCacheConfig

__all__ = [
    "CacheConfig",
    "ExpiringCacheConfig",
    "RecencyCacheConfig",
    "RedisCacheConfig",
]
