from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """
    A stored value with its insertion time and time-to-live.

    Attributes
    ----------
    value:
        The cached value.
    inserted_at:
        Clock reading (seconds) when the value was set.
    ttl:
        Lifetime in seconds. The entry is live iff now - inserted_at < ttl.
    """

    value: V
    inserted_at: float
    ttl: float

    def is_live(self, now: float) -> bool:
        return now - self.inserted_at < self.ttl

    def expires_at(self) -> float:
        return self.inserted_at + self.ttl


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time counters for one cache instance."""

    name: str
    entries: int
    live_entries: int
    hits: int
    misses: int

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "entries": self.entries,
            "live_entries": self.live_entries,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": round(self.hit_rate, 4),
        }


class TTLCache(Generic[V]):
    """
    Thread-safe key -> value store with per-entry expiration.

    Expired entries are logically absent but stay in the map until
    `invalidate_expired()` sweeps them. A single lock serializes every
    read and write of the map; nothing else (in particular no upstream
    I/O) ever runs while it is held.

    Usage:
        schedules: TTLCache[list[Game]] = TTLCache(default_ttl=6 * 3600, name="schedules")
        schedules.set("KC:2023", games)
        schedules.get("KC:2023")
    """

    def __init__(
        self,
        default_ttl: float,
        clock: Callable[[], float] = time.monotonic,
        name: str = "cache",
    ) -> None:
        if default_ttl < 0:
            raise ValueError(f"default_ttl must be >= 0, got {default_ttl}")
        self.default_ttl = float(default_ttl)
        self.name = name
        self._clock = clock
        self._entries: Dict[str, CacheEntry[V]] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str, default: Any = None) -> Optional[V]:
        """
        Return the value if present and live, else `default`.

        Never evicts an expired entry and never refreshes a live one.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or not entry.is_live(self._clock()):
                self._misses += 1
                return default
            self._hits += 1
            return entry.value

    def peek_entry(self, key: str) -> Optional[CacheEntry[V]]:
        """Return the raw entry (live or expired) without touching counters."""
        with self._lock:
            return self._entries.get(key)

    def peek(self, key: str, default: Any = None) -> Optional[V]:
        """Like get(), but leaves the hit/miss counters alone."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or not entry.is_live(self._clock()):
                return default
            return entry.value

    def set(self, key: str, value: V, ttl: Optional[float] = None) -> None:
        """
        Insert or replace `key`, resetting its insertion time.

        A ttl <= 0 means the value must never be cached; nothing is stored
        and any previous entry for the key is dropped.
        """
        effective_ttl = self.default_ttl if ttl is None else float(ttl)
        with self._lock:
            if effective_ttl <= 0:
                self._entries.pop(key, None)
                return
            self._entries[key] = CacheEntry(value=value, inserted_at=self._clock(), ttl=effective_ttl)

    def remove(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def invalidate_expired(self) -> int:
        """Physically remove expired entries. Returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if not e.is_live(now)]
            for k in expired:
                del self._entries[k]
        if expired:
            logger.debug("cache %s: swept %d expired entries", self.name, len(expired))
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.info("cache %s cleared", self.name)

    def stats(self) -> CacheStats:
        with self._lock:
            now = self._clock()
            live = sum(1 for e in self._entries.values() if e.is_live(now))
            return CacheStats(
                name=self.name,
                entries=len(self._entries),
                live_entries=live,
                hits=self._hits,
                misses=self._misses,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            entry = self._entries.get(key)  # type: ignore[arg-type]
            return entry is not None and entry.is_live(self._clock())
