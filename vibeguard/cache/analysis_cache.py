"""In-memory analysis cache with TTL expiry and LRU eviction."""

import hashlib
import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from vibeguard.rules.base import Finding
from vibeguard.utils.constants import (
    DEFAULT_CACHE_CAPACITY,
    DEFAULT_CACHE_SWEEP_SECONDS,
    DEFAULT_CACHE_TTL_SECONDS,
)
from vibeguard.utils.logging import logger

log = logger.bind(component="cache")


@dataclass(frozen=True)
class Fingerprint:
    """Identity of an analyzable document version: content hash plus language."""

    content_hash: str
    language_id: str

    @classmethod
    def of(cls, text: str, language_id: str) -> "Fingerprint":
        digest = hashlib.sha256(text.encode("utf-8", errors="surrogatepass")).hexdigest()
        return cls(content_hash=digest, language_id=language_id)


@dataclass(frozen=True)
class AnalysisResult:
    """Findings computed for one fingerprint.

    ``created_at`` is read from the owning cache's clock; results built
    outside ``AnalysisCache.create`` leave it unset.
    """

    fingerprint: Fingerprint
    findings: tuple[Finding, ...]
    created_at: float | None = None


CacheKey = tuple[str, Fingerprint]


class AnalysisCache:
    """Bounded store of analysis results keyed by (document id, fingerprint).

    Entries expire ``ttl`` seconds after insertion regardless of access. When
    ``capacity`` is exceeded the least recently used entry is evicted. A daemon
    thread removes expired entries every ``sweep_interval`` seconds until
    ``dispose()`` is called.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_CACHE_TTL_SECONDS,
        capacity: int = DEFAULT_CACHE_CAPACITY,
        sweep_interval: float | None = DEFAULT_CACHE_SWEEP_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.ttl = ttl
        self.capacity = capacity
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: OrderedDict[CacheKey, tuple[float, AnalysisResult]] = OrderedDict()
        self._stats = {"hits": 0, "misses": 0, "writes": 0, "evictions": 0, "expirations": 0}
        self._stop = threading.Event()
        self._sweeper: threading.Thread | None = None
        self._disposed = False

        if sweep_interval:
            self._sweeper = threading.Thread(
                target=self._sweep_loop, name="vibeguard-cache-sweep", daemon=True
            )
            self._sweeper.start()

    def create(self, fingerprint: Fingerprint, findings: Iterable[Finding]) -> AnalysisResult:
        """Build a result stamped with this cache's clock."""
        return AnalysisResult(fingerprint, tuple(findings), created_at=self._clock())

    def get(self, document_id: str, fingerprint: Fingerprint) -> AnalysisResult | None:
        """Return a live entry and mark it most recently used."""
        key = (document_id, fingerprint)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._stats["misses"] += 1
                return None

            inserted_at, result = entry
            if self._expired(inserted_at):
                del self._entries[key]
                self._stats["expirations"] += 1
                self._stats["misses"] += 1
                return None

            self._entries.move_to_end(key)
            self._stats["hits"] += 1
            return result

    def put(self, document_id: str, result: AnalysisResult) -> None:
        """Store a result, evicting the least recently used entry if full."""
        key = (document_id, result.fingerprint)
        with self._lock:
            if self._disposed:
                return
            self._entries[key] = (self._clock(), result)
            self._entries.move_to_end(key)
            self._stats["writes"] += 1

            while len(self._entries) > self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                self._stats["evictions"] += 1
                log.debug(f"Evicted {evicted[0]} from analysis cache")

    def invalidate(self, document_id: str) -> int:
        """Drop every entry for a document, returning how many were removed."""
        with self._lock:
            keys = [key for key in self._entries if key[0] == document_id]
            for key in keys:
                del self._entries[key]
            return len(keys)

    def sweep(self) -> int:
        """Remove expired entries now, returning how many were removed."""
        with self._lock:
            expired = [
                key
                for key, (inserted_at, _) in self._entries.items()
                if self._expired(inserted_at)
            ]
            for key in expired:
                del self._entries[key]
            self._stats["expirations"] += len(expired)
        if expired:
            log.debug(f"Swept {len(expired)} expired cache entries")
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def get_stats(self) -> dict[str, int | float]:
        """Get cache statistics."""
        with self._lock:
            stats = dict(self._stats)
            stats["size"] = len(self._entries)
            stats["capacity"] = self.capacity
        lookups = stats["hits"] + stats["misses"]
        stats["hit_rate"] = round(stats["hits"] / lookups, 3) if lookups else 0.0
        return stats

    def dispose(self) -> None:
        """Stop the sweeper thread and release every entry."""
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            self._entries.clear()
        self._stop.set()
        if self._sweeper is not None and self._sweeper is not threading.current_thread():
            self._sweeper.join(timeout=5)
        self._sweeper = None

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _expired(self, inserted_at: float) -> bool:
        return self._clock() - inserted_at >= self.ttl

    def _sweep_loop(self) -> None:
        while not self._stop.wait(self.sweep_interval):
            try:
                self.sweep()
            except Exception:
                log.opt(exception=True).error("Cache sweep failed")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __enter__(self) -> "AnalysisCache":
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()
