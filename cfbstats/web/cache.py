from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Hashable, Optional

_MISSING = object()


class TTLCache:
    """Thread-safe in-memory cache with per-entry time-to-live and a size bound."""

    def __init__(
        self,
        ttl_seconds: float = 3600,
        *,
        maxsize: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._maxsize = max(1, maxsize)
        self._clock = clock
        # key -> (expires_at, value), oldest insertion first
        self._store: "OrderedDict[Hashable, tuple[float, Any]]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            entry = self._store.get(key, _MISSING)
            if entry is _MISSING:
                return default
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._store[key]
                return default
            return value

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def set(self, key: Hashable, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self._ttl if ttl_seconds is None else ttl_seconds
        with self._lock:
            self._store.pop(key, None)
            self._store[key] = (self._clock() + ttl, value)
            self._evict()

    def invalidate(self, key: Hashable) -> bool:
        with self._lock:
            return self._store.pop(key, _MISSING) is not _MISSING

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def _evict(self) -> None:
        now = self._clock()
        for k in [k for k, (exp, _) in self._store.items() if now >= exp]:
            del self._store[k]
        while len(self._store) > self._maxsize:
            self._store.popitem(last=False)
