"""Small caches used by outbound lookups.

``TTLCache`` is an in-process bounded map whose entries expire after a fixed
time to live. ``DjangoCacheAdapter`` exposes the configured Django cache
through the same ``get``/``set`` interface so callers can share entries
across worker processes.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from threading import Lock
from typing import Any, Callable, Hashable, Optional

from django.core.cache import cache as django_cache

_MISSING = object()


class TTLCache:
    """Bounded TTL cache.

    Inserting into a full cache first drops expired entries, then the oldest
    insertions, until there is room.
    """

    def __init__(self, max_size: int = 100, ttl: float = 900, clock: Callable[[], float] = time.monotonic):
        if max_size < 1:
            raise ValueError("max_size must be positive")
        self.max_size = max_size
        self.ttl = ttl
        self._clock = clock
        self._entries: "OrderedDict[Hashable, tuple[float, Any]]" = OrderedDict()
        self._lock = Lock()

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key, _MISSING)
            if entry is _MISSING:
                return default
            expires_at, value = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return default
            return value

    def set(self, key: Hashable, value: Any) -> None:
        with self._lock:
            now = self._clock()
            self._entries.pop(key, None)
            if len(self._entries) >= self.max_size:
                self._purge_expired(now)
            while len(self._entries) >= self.max_size:
                self._entries.popitem(last=False)
            self._entries[key] = (now + self.ttl, value)

    def delete(self, key: Hashable) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key, _MISSING) is not _MISSING


class DjangoCacheAdapter:
    """Same interface as TTLCache, backed by ``django.core.cache``."""

    def __init__(self, prefix: str, ttl: float = 900, backend: Optional[Any] = None):
        self.prefix = prefix
        self.ttl = ttl
        self._cache = backend or django_cache

    def _key(self, key: Hashable) -> str:
        return f"{self.prefix}:{key}"

    def get(self, key: Hashable, default: Any = None) -> Any:
        return self._cache.get(self._key(key), default)

    def set(self, key: Hashable, value: Any) -> None:
        self._cache.set(self._key(key), value, self.ttl)

    def delete(self, key: Hashable) -> None:
        self._cache.delete(self._key(key))
