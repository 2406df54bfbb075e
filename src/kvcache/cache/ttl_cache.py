from __future__ import annotations

import logging
import threading
import time
import typing as t

from kvcache.monitoring.metrics import (
    kvcache_cache_expirations_total,
    kvcache_cache_hits_total,
    kvcache_cache_misses_total,
)

from .base import _MISSING, CacheMapping, K, V

if t.TYPE_CHECKING:
    from kvcache.utils.config import ExpiringCacheConfig

_logger = logging.getLogger(__name__)


def _now_ms() -> float:
    return time.time() * 1000.0


class ExpiringCache(CacheMapping[K, V]):
    """Mapping whose entries expire a fixed number of milliseconds after `set`.

    Expiry is enforced twice:

    - lazily: `get` drops an entry whose deadline has passed and reports it absent;
    - eagerly: while at least one entry is tracked and `sweep_interval_ms` is
      positive, a daemon timer purges expired entries every interval.

    The sweep stops itself as soon as nothing is tracked and is restarted by the
    next `set`. With `sweep_interval_ms <= 0` only the lazy checks apply:
    `get`, iteration and `popitem` drop expired entries, while `len` and `in`
    keep counting them until one of those runs.
    """

    def __init__(
        self,
        sweep_interval_ms: float = 0,
        *,
        clock: t.Optional[t.Callable[[], float]] = None,
        name: t.Optional[str] = None,
    ) -> None:
        super().__init__(name=name)
        self._interval_ms = sweep_interval_ms
        self._clock = clock or _now_ms
        self._expires_at: t.Dict[K, float] = {}
        self._sweep_timer: t.Optional[threading.Timer] = None

    @classmethod
    def from_config(cls, config: "ExpiringCacheConfig") -> "ExpiringCache[t.Any, t.Any]":
        return cls(config.sweep_interval_ms, name=config.name)

    @property
    def sweep_interval_ms(self) -> float:
        return self._interval_ms

    def set(self, key: K, value: V, ttl_ms: t.Optional[float] = None) -> "ExpiringCache[K, V]":
        ttl = self._interval_ms if ttl_ms is None else ttl_ms
        with self._lock:
            self._store[key] = value
            self._expires_at[key] = self._clock() + ttl
            self._start_sweep()
        return self

    def get(self, key: K, default: t.Optional[V] = None) -> t.Optional[V]:
        with self._lock:
            expires_at = self._expires_at.get(key)
            if expires_at is not None and self._clock() > expires_at:
                self._remove(key)
                kvcache_cache_expirations_total.inc(cache=self.name, reason="lazy")
                kvcache_cache_misses_total.inc(cache=self.name)
                self._stop_sweep_if_idle()
                return default
            value = self._store.get(key, _MISSING)
            if value is _MISSING:
                kvcache_cache_misses_total.inc(cache=self.name)
                return default
            kvcache_cache_hits_total.inc(cache=self.name)
            return value  # type: ignore[return-value]

    def delete(self, key: K) -> bool:
        with self._lock:
            present = self._remove(key)
            self._stop_sweep_if_idle()
            return present

    def clear(self) -> None:
        with self._lock:
            self._expires_at.clear()
            self._store.clear()
            self._cancel_sweep()

    def popitem(self) -> t.Tuple[K, V]:
        with self._lock:
            self._drop_expired()
            key, value = super().popitem()
            self._expires_at.pop(key, None)
            self._stop_sweep_if_idle()
            return key, value

    # Iteration hides expired entries so it agrees with `cache[key]`;
    # `len` and `in` still count them until they are read or swept.

    def __iter__(self) -> t.Iterator[K]:
        with self._lock:
            self._drop_expired()
            return super().__iter__()

    def keys(self) -> t.List[K]:  # type: ignore[override]
        with self._lock:
            self._drop_expired()
            return super().keys()

    def values(self) -> t.List[V]:  # type: ignore[override]
        with self._lock:
            self._drop_expired()
            return super().values()

    def items(self) -> t.List[t.Tuple[K, V]]:  # type: ignore[override]
        with self._lock:
            self._drop_expired()
            return super().items()

    def ttl_remaining_ms(self, key: K) -> t.Optional[float]:
        """Milliseconds until `key` expires, or None if it is not tracked.

        Negative once the deadline has passed but the entry has not been purged yet.
        """
        with self._lock:
            expires_at = self._expires_at.get(key)
            if expires_at is None:
                return None
            return expires_at - self._clock()

    def purge_expired(self) -> int:
        """Remove every expired entry now; returns how many were dropped."""
        with self._lock:
            removed = self._purge(reason="purge")
            self._stop_sweep_if_idle()
            return removed

    def _drop_expired(self) -> None:
        if self._purge(reason="lazy"):
            self._stop_sweep_if_idle()

    def _purge(self, reason: str) -> int:
        now = self._clock()
        expired = [key for key, expires_at in self._expires_at.items() if now > expires_at]
        for key in expired:
            self._remove(key)
        if expired:
            kvcache_cache_expirations_total.inc(len(expired), cache=self.name, reason=reason)
        return len(expired)

    def _remove(self, key: K) -> bool:
        self._expires_at.pop(key, None)
        return self._store.pop(key, _MISSING) is not _MISSING

    # Sweep lifecycle: exactly one timer while entries are tracked and the interval is positive.

    def _start_sweep(self) -> None:
        if self._sweep_timer is None and self._expires_at and self._interval_ms > 0:
            _logger.debug("%s: starting sweep every %sms", self.name, self._interval_ms)
            self._schedule_sweep()

    def _schedule_sweep(self) -> None:
        timer = threading.Timer(self._interval_ms / 1000.0, self._sweep)
        timer.daemon = True
        self._sweep_timer = timer
        timer.start()

    def _sweep(self) -> None:
        with self._lock:
            # cancelled (or replaced) while waiting on the lock
            if self._sweep_timer is not threading.current_thread():
                return
            removed = self._purge(reason="sweep")
            if removed:
                _logger.debug("%s: sweep removed %d expired entries", self.name, removed)
            if self._expires_at:
                self._schedule_sweep()
            else:
                _logger.debug("%s: nothing tracked, sweep stopped", self.name)
                self._sweep_timer = None

    def _stop_sweep_if_idle(self) -> None:
        if not self._expires_at:
            self._cancel_sweep()

    def _cancel_sweep(self) -> None:
        timer = self._sweep_timer
        if timer is None:
            return
        self._sweep_timer = None
        timer.cancel()
        _logger.debug("%s: sweep cancelled", self.name)
