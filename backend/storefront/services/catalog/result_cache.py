from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from storefront.core.config import settings

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry:
    payload: Any
    inserted_at: float


class ResultCache:
    """Process-wide TTL memoization for catalog pages and facet stats.

    There is no stampede lock: concurrent misses for one key may both compute
    and both store, last write wins. Entries are never invalidated, only
    expired by age.
    """

    def __init__(self, *, maxsize: int, clock: Callable[[], float] = time.monotonic):
        self.maxsize = max(0, int(maxsize))
        self._clock = clock
        self._items: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, key: str, ttl_seconds: float) -> Optional[CacheEntry]:
        entry = self._items.get(key)
        if entry is None:
            return None
        if self._clock() - entry.inserted_at >= float(ttl_seconds):
            return None
        return entry

    def set(self, key: str, payload: Any) -> None:
        if not key or self.maxsize <= 0:
            return
        self._items[key] = CacheEntry(payload=payload, inserted_at=self._clock())
        self._items.move_to_end(key)
        while len(self._items) > self.maxsize:
            self._items.popitem(last=False)

    async def get_or_compute(
        self,
        key: str,
        ttl_seconds: float,
        compute_fn: Callable[[], Awaitable[T]],
    ) -> T:
        entry = self.get(key, ttl_seconds)
        if entry is not None:
            self.hits += 1
            return entry.payload
        self.misses += 1
        value = await compute_fn()
        self.set(key, value)
        return value

    def clear(self) -> None:
        self._items.clear()

    def stats(self) -> Dict[str, Any]:
        total = int(self.hits + self.misses)
        hit_rate = float(self.hits / total) if total > 0 else 0.0
        return {
            "size": len(self._items),
            "hits": int(self.hits),
            "misses": int(self.misses),
            "hit_rate": round(hit_rate, 4),
        }


class NullResultCache(ResultCache):
    """Always recomputes; used when caching is disabled and in tests."""

    def __init__(self) -> None:
        super().__init__(maxsize=0)

    def get(self, key: str, ttl_seconds: float) -> Optional[CacheEntry]:
        return None


def build_result_cache() -> ResultCache:
    if not bool(getattr(settings, "CATALOG_CACHE_ENABLED", True)):
        return NullResultCache()
    return ResultCache(maxsize=int(getattr(settings, "CATALOG_CACHE_MAX_ITEMS", 2000)))
