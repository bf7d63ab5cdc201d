"""
Short-lived result cache.

Live stats are memoised per session for a few seconds so that rapid
repeated reads do not recompute them.  Entries expire by TTL only;
writes do not invalidate them, so a write can take up to one TTL to
show up in live stats.

Expiry is carried by an explicit :class:`CachedValue` rather than by a
timer, which keeps expiry testable with an injected clock.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Generic, Hashable, Optional, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass(frozen=True)
class CachedValue(Generic[V]):
    """A value together with its absolute expiry time (clock seconds)."""

    value: V
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def remaining(self, now: float) -> float:
        return max(0.0, self.expires_at - now)


class TTLCache(Generic[K, V]):
    """Thread-safe mapping of keys to :class:`CachedValue` entries."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[K, CachedValue[V]] = {}
        self._lock = threading.Lock()

    def get_entry(self, key: K) -> Optional[CachedValue[V]]:
        """Return the live entry for *key*, evicting it if expired."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(now):
                del self._entries[key]
                return None
            return entry

    def get(self, key: K) -> Optional[V]:
        entry = self.get_entry(key)
        return entry.value if entry is not None else None

    def put(self, key: K, value: V) -> CachedValue[V]:
        entry = CachedValue(value=value, expires_at=self._clock() + self.ttl_seconds)
        with self._lock:
            self._entries[key] = entry
        return entry

    def get_or_compute(self, key: K, compute: Callable[[], V]) -> V:
        """Return the cached value for *key* or compute, store and return it."""
        entry = self.get_entry(key)
        if entry is not None:
            logger.debug("Cache hit for %s (%.1fs left)", key, entry.remaining(self._clock()))
            return entry.value
        logger.debug("Cache miss for %s", key)
        value = compute()
        self.put(key, value)
        return value

    def invalidate(self, key: K) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def purge_expired(self) -> int:
        """Drop every expired entry.  Returns the number removed."""
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._entries.items() if e.is_expired(now)]
            for k in expired:
                del self._entries[k]
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
