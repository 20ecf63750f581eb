"""Small in-memory TTL cache with hit/miss accounting.

Entries carry their own TTL and are checked lazily on read. A background
sweeper thread periodically drops stale entries, and capacity is enforced
by evicting the earliest inserted entry (FIFO, not access-order LRU).
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import asdict, dataclass
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 300.0
DEFAULT_MAXSIZE = 100
DEFAULT_SWEEP_INTERVAL_SECONDS = 60.0

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CacheEntry(Generic[T]):
    # Stores value + monotonic insertion time + per-entry lifetime
    value: T
    inserted_at: float  # time.monotonic()
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.inserted_at > self.ttl


@dataclass(frozen=True, slots=True)
class CacheStats:
    size: int
    maxsize: int
    hits: int
    misses: int
    hit_rate: Optional[float]  # None until the first lookup

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


class TTLCache(Generic[T]):
    """Bounded TTL cache keyed by string fingerprints.

    Key behavior:
      - Lookups (get() and has()) are the only calls that count hits/misses.
      - A full cache evicts exactly one entry, the oldest insertion, before
        storing a new key. Overwriting an existing key never evicts.
      - destroy() stops the sweeper and turns every later call into a no-op.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        maxsize: int = DEFAULT_MAXSIZE,
        sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
    ) -> None:
        self._ttl = float(ttl_seconds)
        self._maxsize = max(0, int(maxsize))
        self._store: "OrderedDict[str, CacheEntry[T]]" = OrderedDict()
        self._hits = 0
        self._misses = 0
        self._destroyed = False

        # RLock so the sweeper and callers serialize on the same guard
        self._lock = threading.RLock()
        self._stop = threading.Event()
        self._sweeper: Optional[threading.Thread] = None

        interval = float(sweep_interval_seconds)
        if interval > 0:
            self._sweeper = threading.Thread(
                target=self._sweep_loop,
                args=(interval,),
                name="ttl-cache-sweeper",
                daemon=True,
            )
            self._sweeper.start()

    @property
    def maxsize(self) -> int:
        return self._maxsize

    @property
    def default_ttl(self) -> float:
        return self._ttl

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def set(self, key: str, value: T, ttl_seconds: Optional[float] = None) -> None:
        ttl = float(ttl_seconds) if ttl_seconds else self._ttl

        with self._lock:
            if self._destroyed or self._maxsize == 0:
                return

            if key in self._store:
                # Overwrite: re-insert as the newest entry, no capacity pressure
                del self._store[key]
            elif len(self._store) >= self._maxsize:
                self._store.popitem(last=False)

            self._store[key] = CacheEntry(value=value, inserted_at=time.monotonic(), ttl=ttl)

    def get(self, key: str) -> Optional[T]:
        _, value = self._lookup(key)
        return value

    def has(self, key: str) -> bool:
        # Counts as a lookup: a hit or miss is recorded just like get()
        found, _ = self._lookup(key)
        return found

    def _lookup(self, key: str) -> Tuple[bool, Optional[T]]:
        with self._lock:
            if self._destroyed:
                return False, None

            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return False, None

            if entry.is_expired(time.monotonic()):
                del self._store[key]
                self._misses += 1
                return False, None

            self._hits += 1
            return True, entry.value

    def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0

    def cleanup(self) -> int:
        """Remove every stale entry and return how many were dropped."""
        with self._lock:
            if self._destroyed:
                return 0

            now = time.monotonic()
            stale = [key for key, entry in self._store.items() if entry.is_expired(now)]
            for key in stale:
                del self._store[key]

        if stale:
            logger.debug("Cache sweep removed %d expired entries", len(stale))
        return len(stale)

    def destroy(self) -> None:
        self._stop.set()

        sweeper = self._sweeper
        if sweeper is not None and sweeper is not threading.current_thread():
            # Wait out an in-flight sweep so nothing runs after we return
            sweeper.join()
        self._sweeper = None

        with self._lock:
            self._destroyed = True
            self._store.clear()
            self._hits = 0
            self._misses = 0

    def get_stats(self) -> CacheStats:
        with self._lock:
            total = self._hits + self._misses
            return CacheStats(
                size=len(self._store),
                maxsize=self._maxsize,
                hits=self._hits,
                misses=self._misses,
                hit_rate=(self._hits / total) if total > 0 else None,
            )

    def _sweep_loop(self, interval: float) -> None:
        # Event.wait returns True once destroy() signals; otherwise sweep and loop
        while not self._stop.wait(interval):
            self.cleanup()
