"""In-memory TTL cache for decision query pages.

Keys are the canonical JSON of the normalized query parameters, so two
requests that differ only in parameter order or spelling share an entry.

Behaviour:
- get() returns an entry only while it is younger than the TTL
- every set() sweeps entries older than the staleness horizon
- one cache per engine; nothing is shared at module level

Thread-safe: every operation holds a single lock.
"""

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from agentlens.models import QueryParameters

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30.0
DEFAULT_STALE_SECONDS = 300.0


@dataclass
class CacheEntry:
    """A cached value and when it was written (clock seconds)."""

    value: Any
    written_at: float

    def age(self, now: float) -> float:
        return now - self.written_at


class DecisionCache:
    """TTL cache keyed by query parameters.

    Args:
        ttl_seconds: How long an entry is served
        stale_after_seconds: Age at which a sweep removes an entry
        clock: Monotonic seconds source (injectable for tests)
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        stale_after_seconds: float = DEFAULT_STALE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.stale_after_seconds = max(stale_after_seconds, ttl_seconds)
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @staticmethod
    def make_key(params: QueryParameters) -> str:
        """Canonical JSON of every parameter that shapes the cached page."""
        payload = params.model_dump(mode="json")
        payload["tags"] = sorted(params.tags)
        return json.dumps(payload, sort_keys=True, separators=(",", ":"))

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when missing or older than the TTL."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug("Cache miss")
                return None
            if entry.age(self._clock()) >= self.ttl_seconds:
                logger.debug("Cache entry expired")
                return None
            logger.debug("Cache hit")
            return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` and sweep stale entries."""
        with self._lock:
            now = self._clock()
            self._entries[key] = CacheEntry(value=value, written_at=now)
            self._sweep_locked(now)

    def sweep(self) -> int:
        """Remove entries older than the staleness horizon; return how many."""
        with self._lock:
            return self._sweep_locked(self._clock())

    def _sweep_locked(self, now: float) -> int:
        stale = [key for key, entry in self._entries.items() if entry.age(now) > self.stale_after_seconds]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug("Swept %d stale cache entries", len(stale))
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
