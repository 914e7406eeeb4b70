"""In-process TTL cache for generated artifacts."""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, NamedTuple, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60 * 60
DEFAULT_SWEEP_INTERVAL = 10 * 60


class CacheKey(NamedTuple):
    resource_id: str
    operation: str


@dataclass
class CacheEntry:
    """Stored artifact with its lifetime bounds (clock seconds)."""

    data: Any
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


@dataclass
class CacheStats:
    count: int
    keys: List[CacheKey] = field(default_factory=list)


class ResultCache:
    """Time-to-live store keyed by (resource_id, operation).

    Expired entries are dropped lazily on read and proactively by a
    background sweep thread started with ``start()`` and stopped with
    ``shutdown()``. Writes to the same key are last-write-wins.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        if sweep_interval <= 0:
            raise ValueError("sweep_interval must be positive")

        self.default_ttl = default_ttl
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._entries: Dict[CacheKey, CacheEntry] = {}
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._sweeper: Optional[threading.Thread] = None

    def __enter__(self) -> "ResultCache":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()

    @property
    def is_running(self) -> bool:
        return self._sweeper is not None and self._sweeper.is_alive()

    def start(self) -> None:
        """Start the background sweep thread (idempotent)."""
        with self._lock:
            if self._sweeper and self._sweeper.is_alive():
                logger.debug("Cache sweeper already running; skipping start")
                return
            # one stop event per sweeper thread
            self._stop = threading.Event()
            self._sweeper = threading.Thread(
                target=self._run,
                args=(self._stop,),
                name="result-cache-sweeper",
                daemon=True,
            )
            self._sweeper.start()
        logger.info("Started cache sweeper", extra={"sweep_interval": self.sweep_interval})

    def shutdown(self, timeout: Optional[float] = 5.0) -> None:
        """Stop the sweep thread. Stored entries are kept."""
        with self._lock:
            self._stop.set()
            sweeper, self._sweeper = self._sweeper, None
        if sweeper is not None:
            sweeper.join(timeout)
            logger.info("Stopped cache sweeper")

    def get(self, resource_id: str, operation: str) -> Optional[Any]:
        """Return the live artifact for the key, or None."""
        key = CacheKey(resource_id, operation)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                logger.debug("Cache entry expired on read", extra={"operation": operation})
                return None
            return entry.data

    def set(
        self,
        resource_id: str,
        operation: str,
        data: Any,
        ttl: Optional[float] = None,
    ) -> None:
        """Store ``data`` for the key, replacing any existing entry."""
        ttl = self.default_ttl if ttl is None else ttl
        now = self._clock()
        entry = CacheEntry(data=data, created_at=now, expires_at=now + ttl)
        with self._lock:
            self._entries[CacheKey(resource_id, operation)] = entry

    def invalidate(self, resource_id: str, operation: str) -> bool:
        """Drop one entry. Returns True if it existed."""
        with self._lock:
            return self._entries.pop(CacheKey(resource_id, operation), None) is not None

    def invalidate_all(self) -> int:
        """Drop every entry. Returns how many were stored."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        return count

    def stats(self) -> CacheStats:
        """Snapshot of live keys. Expired entries are left out even before a sweep."""
        now = self._clock()
        with self._lock:
            keys = [key for key, entry in self._entries.items() if not entry.is_expired(now)]
        return CacheStats(count=len(keys), keys=keys)

    def sweep(self) -> int:
        """Delete every expired entry. Returns the number removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("Swept expired cache entries", extra={"removed": len(expired)})
        return len(expired)

    def _run(self, stop: threading.Event) -> None:
        while not stop.wait(self.sweep_interval):
            try:
                self.sweep()
            except Exception:
                logger.error("Cache sweep failed", exc_info=True)
