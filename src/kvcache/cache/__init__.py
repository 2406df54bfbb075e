from .base import CacheMapping
from .lru_cache import BoundedRecencyCache
from .ttl_cache import ExpiringCache

__all__ = ["CacheMapping", "ExpiringCache", "BoundedRecencyCache"]
