"""
Time-bounded cache store.

Holds resolved catalog data keyed by a composite scope tuple
(e.g. ``(account, region, architecture)``). Each entry carries its own
time-to-live and is never returned once it has expired.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Hashable


class TTLCache:
    """Thread-safe, in-process cache with a per-entry time-to-live.

    Args:
        clock: Monotonic time source in seconds. Injectable for tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._cache: dict[Hashable, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Any | None:
        """Return the live value stored under *key*, or None.

        Expired entries are evicted on access.
        """
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._cache[key]
                return None
            return value

    def put(self, key: Hashable, value: Any, ttl: float) -> None:
        """Store *value* under *key* for *ttl* seconds. Last writer wins."""
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        with self._lock:
            self._cache[key] = (self._clock() + ttl, value)

    def get_or_create(self, key: Hashable, ttl: float, factory: Callable[[], Any]) -> Any:
        """Return the live value for *key* or build, store and return a new one.

        *factory* runs outside the lock, so concurrent misses on the same
        key may each build a value; the last one stored wins.
        """
        value = self.get(key)
        if value is None:
            value = factory()
            self.put(key, value, ttl)
        return value

    def invalidate(self, key: Hashable) -> None:
        """Drop the entry for *key*, if any."""
        with self._lock:
            self._cache.pop(key, None)

    def clear(self) -> None:
        """Flush all cached entries."""
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
