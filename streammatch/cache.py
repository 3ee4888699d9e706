"""Cache module for memoizing successful stream matches."""
import logging
import threading
import time
from typing import Callable, Iterator, Protocol

from .models import CacheEntry, MatchResult

log = logging.getLogger(__name__)

CACHE_TTL = 15 * 24 * 60 * 60  # 15 days, in seconds
SWEEP_INTERVAL = 6 * 60 * 60  # 6 hours, in seconds


def make_cache_key(external_id: str | None = None, slug: str | None = None) -> str:
    """Build the cache key for a match request.

    Id-based and slug-based lookups get distinct keys; repeating the same
    request maps to the same key.
    """
    return f"match-{external_id or 'none'}-{slug or 'none'}"


class CacheStore(Protocol):
    """Key to entry storage behind ``MatchCache``."""

    def get(self, key: str) -> CacheEntry | None: ...

    def set(self, entry: CacheEntry) -> None: ...

    def delete(self, key: str) -> None: ...

    def entries(self) -> Iterator[CacheEntry]: ...

    def __len__(self) -> int: ...


class InMemoryStore:
    """Plain dict store; contents are lost when the process exits."""

    def __init__(self):
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    def set(self, entry: CacheEntry) -> None:
        self._entries[entry.key] = entry

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def entries(self) -> Iterator[CacheEntry]:
        # Copy so the sweep can delete while iterating.
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)


class MatchCache:
    """TTL cache of successful match results.

    Expired entries are treated as absent on read but only deleted by
    ``sweep()``.
    """

    def __init__(
        self,
        store: CacheStore | None = None,
        ttl: float = CACHE_TTL,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the cache.

        Args:
            store: Backing store. Defaults to an in-memory dict.
            ttl: Entry lifetime in seconds.
            clock: Returns the current time in seconds.
        """
        self.store = store if store is not None else InMemoryStore()
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.timestamp >= self.ttl

    def get(self, key: str) -> MatchResult | None:
        with self._lock:
            entry = self.store.get(key)
            if entry is None or self._expired(entry, self._clock()):
                return None
            return entry.data

    def put(self, key: str, data: MatchResult) -> None:
        with self._lock:
            self.store.set(CacheEntry(key=key, data=data, timestamp=self._clock()))

    def get_or_compute(
        self, key: str, compute: Callable[[], MatchResult]
    ) -> MatchResult:
        """Return the cached result for *key* or compute it.

        Only successful results are stored.
        """
        cached = self.get(key)
        if cached is not None:
            log.info(f"Serving match for {key} from cache")
            return cached
        result = compute()
        if result.success:
            self.put(key, result)
        return result

    def sweep(self) -> int:
        """Delete every expired entry. Returns the number removed."""
        with self._lock:
            now = self._clock()
            expired = [e.key for e in self.store.entries() if self._expired(e, now)]
            for key in expired:
                self.store.delete(key)
        if expired:
            log.info(f"Cache cleanup: removed {len(expired)} expired entries")
        return len(expired)

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            for entry in self.store.entries():
                self.store.delete(entry.key)

    def __len__(self) -> int:
        with self._lock:
            return len(self.store)


class CacheSweeper:
    """Runs ``MatchCache.sweep`` on a fixed interval in a daemon thread."""

    def __init__(self, cache: MatchCache, interval: float = SWEEP_INTERVAL):
        self.cache = cache
        self.interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="cache-sweeper", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.cache.sweep()
