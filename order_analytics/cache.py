"""
Caller-side result cache.

The analytics functions are pure, so a result can be reused whenever the same
order snapshot and parameters come back. Nothing in the core caches
implicitly; hosts that want reuse own a ``ResultCache`` and key it with
``content_key``.
"""

import hashlib
import json
import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Iterable, Mapping
from typing import Any, Generic, TypeVar

from .domain import OrderRecord, coerce_orders

T = TypeVar("T")


def content_key(orders: Iterable[OrderRecord | Mapping[str, Any]], **params: Any) -> str:
    """
    SHA-256 digest of an order snapshot plus call parameters.

    Order sequence is part of the key: batch planning keeps input order for
    ties, so a reordered snapshot can give a different plan.
    """
    payload = {
        "orders": [o.model_dump(mode="json") for o in coerce_orders(orders)],
        "params": params,
    }
    encoded = json.dumps(payload, sort_keys=True, default=str).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


class ResultCache(Generic[T]):
    """
    Bounded LRU cache with optional time-to-live.

    Usage:
        cache = ResultCache(max_size=50, ttl_seconds=600)
        key = content_key(orders, horizon=6)
        result = cache.get_or_compute(key, lambda: build_forecast(orders, horizon=6))
    """

    def __init__(
        self,
        max_size: int = 100,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, T]] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        """Membership test; does not refresh the entry's recency."""
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not self._expired(entry[0])

    def _expired(self, stored_at: float) -> bool:
        if self.ttl_seconds is None:
            return False
        return self._clock() - stored_at > self.ttl_seconds

    def _lookup(self, key: str) -> tuple[bool, T | None]:
        # Caller holds self._lock
        entry = self._entries.get(key)
        if entry is None:
            return False, None
        stored_at, value = entry
        if self._expired(stored_at):
            del self._entries[key]
            return False, None
        self._entries.move_to_end(key)
        return True, value

    def get(self, key: str) -> T | None:
        with self._lock:
            return self._lookup(key)[1]

    def set(self, key: str, value: T) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), value)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_size:
                self._entries.popitem(last=False)

    def get_or_compute(self, key: str, compute: Callable[[], T]) -> T:
        """
        Return the cached value for ``key``, computing and storing it on a miss.

        ``compute`` runs outside the lock; concurrent misses on one key may
        each compute, and the last result stored wins.
        """
        with self._lock:
            found, value = self._lookup(key)
            if found:
                self.hits += 1
                return value
            self.misses += 1
        value = compute()
        self.set(key, value)
        return value

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
