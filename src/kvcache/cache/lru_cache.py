from __future__ import annotations

import logging
import typing as t

from kvcache.monitoring.metrics import (
    kvcache_cache_evictions_total,
    kvcache_cache_hits_total,
    kvcache_cache_misses_total,
)

from .base import _MISSING, CacheMapping, K, V

if t.TYPE_CHECKING:
    from kvcache.utils.config import RecencyCacheConfig

_logger = logging.getLogger(__name__)


class BoundedRecencyCache(CacheMapping[K, V]):
    """LRU mapping holding at most `capacity` entries.

    Recency is the store's iteration order: the first key is the eviction
    candidate, `get` moves a key to the end. Capacity is not validated; with a
    capacity of zero or less every `set` evicts whatever is there first, so the
    cache holds a single entry.
    """

    def __init__(self, capacity: int = 100, *, name: t.Optional[str] = None) -> None:
        super().__init__(name=name)
        self._capacity = capacity

    @classmethod
    def from_config(cls, config: "RecencyCacheConfig") -> "BoundedRecencyCache[t.Any, t.Any]":
        return cls(config.capacity, name=config.name)

    @property
    def capacity(self) -> int:
        return self._capacity

    def get(self, key: K, default: t.Optional[V] = None) -> t.Optional[V]:
        with self._lock:
            value = self._store.get(key, _MISSING)
            if value is _MISSING:
                kvcache_cache_misses_total.inc(cache=self.name)
                return default
            # mark as recently used
            self._store.move_to_end(key)
            kvcache_cache_hits_total.inc(cache=self.name)
            return value  # type: ignore[return-value]

    def set(self, key: K, value: V) -> "BoundedRecencyCache[K, V]":
        with self._lock:
            # Overwrites are checked too, so a full cache may evict an unrelated
            # entry; an overwritten key keeps its position.
            if len(self._store) >= self._capacity and self._store:
                evicted, _ = self._store.popitem(last=False)
                kvcache_cache_evictions_total.inc(cache=self.name)
                _logger.debug("%s: evicted %r (capacity=%d)", self.name, evicted, self._capacity)
            self._store[key] = value
        return self
