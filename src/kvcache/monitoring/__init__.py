from .metrics import (
    Counter,
    Histogram,
    kvcache_cache_evictions_total,
    kvcache_cache_expirations_total,
    kvcache_cache_hits_total,
    kvcache_cache_misses_total,
    kvcache_redis_latency_seconds,
    timed,
)

__all__ = [
    "Counter",
    "Histogram",
    "timed",
    "kvcache_cache_hits_total",
    "kvcache_cache_misses_total",
    "kvcache_cache_evictions_total",
    "kvcache_cache_expirations_total",
    "kvcache_redis_latency_seconds",
]
