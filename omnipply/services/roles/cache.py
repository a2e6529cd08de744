import time
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Tuple

Clock = Callable[[], float]


class TTLCache:
    """In-memory mapping whose entries expire a fixed time after being stored.

    Entries are only dropped when read after expiry or when explicitly
    deleted; the cache is unbounded. Values are returned as stored, so a
    hit inside the TTL window yields the very same object.

    Usage::

        cache = TTLCache(ttl_seconds=30)
        cache.set("user-1", roles)
        cache.get("user-1")  # roles, or None once 30 seconds have passed
    """

    def __init__(self, ttl_seconds: float, clock: Clock = time.monotonic) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        # key -> (value, stored_at)
        self._store: Dict[Hashable, Tuple[Any, float]] = {}
        self._hits = 0
        self._misses = 0

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def now(self) -> float:
        return self._clock()

    def _fresh(self, stored_at: float, now: float) -> bool:
        return now - stored_at < self._ttl

    def get(self, key: Hashable, now: Optional[float] = None) -> Optional[Any]:
        """Cached value for ``key``, or None when absent or expired."""
        entry = self._store.get(key)
        now = self._clock() if now is None else now
        if entry is None:
            self._misses += 1
            return None
        value, stored_at = entry
        if not self._fresh(stored_at, now):
            # another worker may have dropped it already
            self._store.pop(key, None)
            self._misses += 1
            return None
        self._hits += 1
        return value

    def set(self, key: Hashable, value: Any, now: Optional[float] = None) -> None:
        self._store[key] = (value, self._clock() if now is None else now)

    def delete(self, key: Hashable) -> None:
        self._store.pop(key, None)

    def clear(self) -> None:
        self._store.clear()
        self._hits = 0
        self._misses = 0

    def partition(self, keys: Iterable[Hashable], now: Optional[float] = None) -> Tuple[Dict[Hashable, Any], List[Hashable]]:
        """
        Split ``keys`` into cached values and keys still to fetch.

        Duplicate keys are reported once, in first-seen order.
        """
        now = self._clock() if now is None else now
        cached: Dict[Hashable, Any] = {}
        missing: List[Hashable] = []
        for key in keys:
            if key in cached or key in missing:
                continue
            value = self.get(key, now)
            if value is None:
                missing.append(key)
            else:
                cached[key] = value
        return cached, missing

    def stats(self) -> Dict[str, int]:
        return {"hits": self._hits, "misses": self._misses, "size": len(self._store)}

    def __contains__(self, key: Hashable) -> bool:
        entry = self._store.get(key)
        return entry is not None and self._fresh(entry[1], self._clock())

    def __len__(self) -> int:
        return len(self._store)
