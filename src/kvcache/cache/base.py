from __future__ import annotations

import threading
import typing as t
from abc import abstractmethod
from collections import OrderedDict
from collections.abc import MutableMapping

K = t.TypeVar("K", bound=t.Hashable)
V = t.TypeVar("V")

_MISSING = object()


class CacheMapping(MutableMapping, t.Generic[K, V]):
    """Mapping surface shared by the in-memory caches.

    Entries live in an insertion-ordered store owned by the instance. Subclasses
    provide the policy in `get`, `set` and `delete`; the dunders route through
    them so `cache[key]` behaves like `cache.get(key)`.

    Iteration, `len`, `in` and the key/value/item snapshots read the store
    without promoting entries. `popitem` removes the first (oldest) entry.
    """

    def __init__(self, name: t.Optional[str] = None) -> None:
        self._store: "OrderedDict[K, V]" = OrderedDict()
        self._lock = threading.RLock()
        self.name = name or type(self).__name__

    @abstractmethod
    def get(self, key: K, default: t.Optional[V] = None) -> t.Optional[V]:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    def set(self, key: K, value: V) -> "CacheMapping[K, V]":  # pragma: no cover - interface
        raise NotImplementedError

    def delete(self, key: K) -> bool:
        with self._lock:
            return self._store.pop(key, _MISSING) is not _MISSING

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def popitem(self) -> t.Tuple[K, V]:
        with self._lock:
            if not self._store:
                raise KeyError("popitem(): cache is empty")
            return self._store.popitem(last=False)

    def __getitem__(self, key: K) -> V:
        value = self.get(key, _MISSING)  # type: ignore[arg-type]
        if value is _MISSING:
            raise KeyError(key)
        return value  # type: ignore[return-value]

    def __setitem__(self, key: K, value: V) -> None:
        self.set(key, value)

    def __delitem__(self, key: K) -> None:
        if not self.delete(key):
            raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store

    def __iter__(self) -> t.Iterator[K]:
        with self._lock:
            return iter(list(self._store))

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def keys(self) -> t.List[K]:  # type: ignore[override]
        with self._lock:
            return list(self._store.keys())

    def values(self) -> t.List[V]:  # type: ignore[override]
        with self._lock:
            return list(self._store.values())

    def items(self) -> t.List[t.Tuple[K, V]]:  # type: ignore[override]
        with self._lock:
            return list(self._store.items())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"
