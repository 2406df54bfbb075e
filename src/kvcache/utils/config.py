from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class ExpiringCacheConfig:
    sweep_interval_ms: int = 0  # <= 0 disables the background sweep
    name: Optional[str] = None


@dataclass
class RecencyCacheConfig:
    capacity: int = 100
    name: Optional[str] = None


@dataclass
class RedisCacheConfig:
    url: str = "redis://localhost:6379/0"
    identifier: str = "cache"


@dataclass
class CacheConfig:
    ttl: ExpiringCacheConfig = dataclasses.field(default_factory=ExpiringCacheConfig)
    lru: RecencyCacheConfig = dataclasses.field(default_factory=RecencyCacheConfig)
    redis: RedisCacheConfig = dataclasses.field(default_factory=RedisCacheConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CacheConfig":
        def build(dc_cls, key):
            values = data.get(key, {})
            return dc_cls(**values)

        return cls(
            ttl=build(ExpiringCacheConfig, "ttl"),
            lru=build(RecencyCacheConfig, "lru"),
            redis=build(RedisCacheConfig, "redis"),
        )
