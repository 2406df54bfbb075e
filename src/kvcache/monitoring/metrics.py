from __future__ import annotations

import threading
import time
import typing as t
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


@dataclass
class Counter:
    name: str
    help: str
    values: Dict[Tuple, float] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def inc(self, value: float = 1.0, **labels: Any) -> None:
        key = tuple(sorted(labels.items()))
        with self._lock:
            self.values[key] = self.values.get(key, 0.0) + value

    def get(self, **labels: Any) -> float:
        return self.values.get(tuple(sorted(labels.items())), 0.0)


@dataclass
class Histogram:
    name: str
    help: str
    buckets: List[float]
    counts: Dict[Tuple, List[int]] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def observe(self, val: float, **labels: Any) -> None:
        key = tuple(sorted(labels.items()))
        with self._lock:
            if key not in self.counts:
                self.counts[key] = [0 for _ in self.buckets]
            for i, b in enumerate(self.buckets):
                if val <= b:
                    self.counts[key][i] += 1
                    break

    def total(self, **labels: Any) -> int:
        return sum(self.counts.get(tuple(sorted(labels.items())), []))


# Predefined metrics
kvcache_cache_hits_total = Counter("kvcache_cache_hits_total", "In-memory cache hits")
kvcache_cache_misses_total = Counter("kvcache_cache_misses_total", "In-memory cache misses")
kvcache_cache_evictions_total = Counter("kvcache_cache_evictions_total", "Entries evicted for capacity")
kvcache_cache_expirations_total = Counter(
    "kvcache_cache_expirations_total", "Entries removed after their TTL, by reason (lazy|sweep)"
)
kvcache_redis_latency_seconds = Histogram(
    "kvcache_redis_latency_seconds",
    "Redis cache operation latency",
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, float("inf")],
)


class timed:
    """Context manager recording elapsed wall time into a histogram."""

    def __init__(self, hist: Histogram, **labels: Any) -> None:
        self.hist = hist
        self.labels = labels
        self.start = 0.0

    def __enter__(self) -> "timed":
        self.start = time.perf_counter()
        return self

    def __exit__(self, exc_type: t.Any, exc: t.Any, tb: t.Any) -> None:
        self.hist.observe(time.perf_counter() - self.start, **self.labels)
