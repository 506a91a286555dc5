import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

V = TypeVar("V")

Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    key: str
    value: V
    created_at: float


class TTLCache(Generic[V]):
    """Time-bounded, optionally size-bounded cache with an injectable clock.

    An entry is live while ``clock() - created_at < ttl_seconds``; expired
    entries read as absent. When ``maxsize`` is reached the oldest inserted
    entry is evicted first. ``ttl_seconds=None`` disables expiry and
    ``maxsize=None`` disables the size bound.
    """

    def __init__(
        self,
        ttl_seconds: float | None = None,
        maxsize: int | None = None,
        clock: Clock = time.monotonic,
    ):
        if ttl_seconds is not None and ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if maxsize is not None and maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.maxsize = maxsize
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry[V]] = OrderedDict()
        self.requests = 0
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def _is_live(self, entry: CacheEntry[V]) -> bool:
        if self.ttl_seconds is None:
            return True
        return self._clock() - entry.created_at < self.ttl_seconds

    def get(self, key: str) -> V | None:
        self.requests += 1
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None
        if not self._is_live(entry):
            del self._entries[key]
            self.misses += 1
            return None
        self.hits += 1
        return entry.value

    def set(self, key: str, value: V) -> None:
        # Re-inserting moves the key to the newest position.
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(key=key, value=value, created_at=self._clock())

        if self.maxsize is not None:
            while len(self._entries) > self.maxsize:
                self._entries.popitem(last=False)
                self.evictions += 1

    def evict(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()
        self.requests = 0
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        entry = self._entries.get(key)
        return entry is not None and self._is_live(entry)

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> dict[str, float | int]:
        hit_rate = self.hits / self.requests if self.requests > 0 else 0.0
        return {
            "requests": self.requests,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": hit_rate,
            "evictions": self.evictions,
            "cache_size": len(self._entries),
        }
