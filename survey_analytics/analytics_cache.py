"""In-memory TTL cache for computed analytics results.

Entries are keyed by ``(template_id, date_from, date_to)`` and replaced as a
whole; an entry is never updated in place.  Concurrent misses for the same
key are *not* coalesced: two callers may both recompute and the last
``put`` wins.  Callers needing strict de-duplication must add their own lock
around compute-and-put.
"""
from __future__ import annotations

import datetime
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, NamedTuple, Optional

from survey_analytics import config

logger = logging.getLogger(__name__)


class CacheKey(NamedTuple):
    template_id: str
    date_from: Optional[datetime.date] = None
    date_to: Optional[datetime.date] = None


@dataclass(frozen=True, slots=True)
class CachedAnalytics:
    """A cached result together with its bookkeeping."""

    key: CacheKey
    result: Any
    computed_at: datetime.datetime
    ttl_seconds: float
    expires_at: float  # value of the cache clock

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class AnalyticsCache:
    """A thread-safe map of :class:`CacheKey` to :class:`CachedAnalytics`."""

    def __init__(
        self,
        default_ttl_seconds: float = config.CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Create a new :class:`AnalyticsCache`.

        Args:
            default_ttl_seconds: Lifetime of entries stored without an
                explicit TTL.
            clock: Monotonic time source in seconds; injectable for tests.
        """
        if default_ttl_seconds <= 0:
            raise ValueError("default_ttl_seconds must be positive")
        self._entries: Dict[CacheKey, CachedAnalytics] = {}
        self._lock = threading.Lock()
        self._default_ttl = default_ttl_seconds
        self._clock = clock

    @property
    def default_ttl_seconds(self) -> float:
        return self._default_ttl

    def get(
        self,
        template_id: str,
        date_from: Optional[datetime.date] = None,
        date_to: Optional[datetime.date] = None,
    ) -> Optional[CachedAnalytics]:
        """Return the live entry for the key or *None* on a miss.

        Expired entries are evicted on the way out.
        """
        key = CacheKey(template_id, date_from, date_to)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug("cache_miss", extra={"template_id": template_id})
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                logger.debug("cache_expired", extra={"template_id": template_id})
                return None
        logger.debug("cache_hit", extra={"template_id": template_id})
        return entry

    def put(
        self, key: CacheKey, result: Any, ttl_seconds: Optional[float] = None
    ) -> CachedAnalytics:
        """Store *result* under *key*, replacing any previous entry.

        Raises
        ------
        ValueError
            If *ttl_seconds* is not positive.
        """
        ttl = self._default_ttl if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            raise ValueError("ttl_seconds must be positive")
        with self._lock:
            entry = CachedAnalytics(
                key=key,
                result=result,
                computed_at=datetime.datetime.now(datetime.timezone.utc),
                ttl_seconds=ttl,
                expires_at=self._clock() + ttl,
            )
            self._entries[key] = entry
        logger.debug("cache_put", extra={"template_id": key.template_id, "ttl": ttl})
        return entry

    def invalidate(self, template_id: str) -> int:
        """Drop every entry of *template_id* whatever its date range.

        Returns the number of entries removed.
        """
        with self._lock:
            stale = [key for key in self._entries if key.template_id == template_id]
            for key in stale:
                del self._entries[key]
        logger.info(
            "cache_invalidated",
            extra={"template_id": template_id, "entries": len(stale)},
        )
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
