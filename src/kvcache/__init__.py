"""kvcache

In-process caching containers with time-based expiry (ExpiringCache) and
capacity-based LRU eviction (BoundedRecencyCache), plus a thin JSON cache
over Redis (RedisCache).

The in-memory containers use only the standard library; RedisCache needs redis-py.
"""

from .cache import BoundedRecencyCache, CacheMapping, ExpiringCache
from .storage import RedisCache
from .utils import CacheConfig, ExpiringCacheConfig, RecencyCacheConfig, RedisCacheConfig

__all__ = [
    "CacheMapping",
    "ExpiringCache",
    "BoundedRecencyCache",
    "RedisCache",
    "CacheConfig",
    "ExpiringCacheConfig",
    "RecencyCacheConfig",
    "RedisCacheConfig",
]

__version__ = "0.1.0"
