"""
Cache Service - memoizes expensive aggregate queries.

Stores arbitrary values under caller-built string keys with a per-lookup
maximum age. Lookups run concurrently under a shared read lock; stores,
invalidations and clears take the exclusive write lock.

The compute callback runs outside any lock. Two callers racing on the same
missing key may both compute; the last store wins. Values cached here are
pure re-derivations of stored card state, so a duplicate computation is
wasted work only.

Usage:
    cache = CacheService()
    due = cache.get_or_compute(due_count_key(set_ids), 30, lambda: count_due(sets))
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, TypeVar
from uuid import UUID

from loguru import logger

T = TypeVar("T")

DEFAULT_MAX_AGE_SECONDS = 60.0


@dataclass(frozen=True)
class CacheEntry:
    """A cached value and the monotonic time it was stored."""

    value: Any
    stored_at: float

    def is_fresh(self, now: float, max_age: float) -> bool:
        return now - self.stored_at <= max_age


class ReadWriteLock:
    """
    Many readers or one writer.

    Writers wait for active readers to drain; new readers wait while a writer
    is active or queued, so a steady stream of lookups cannot starve a store.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer_active = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer_active or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer_active or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer_active = True
        try:
            yield
        finally:
            with self._cond:
                self._writer_active = False
                self._cond.notify_all()


class CacheService:
    """
    Thread-safe key/value memoizer with per-entry expiration.

    Args:
        clock: Monotonic time source in seconds (injectable for tests).
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = ReadWriteLock()

    def get_or_compute(
        self,
        key: str,
        max_age: float | timedelta = DEFAULT_MAX_AGE_SECONDS,
        compute: Callable[[], T] | None = None,
    ) -> T:
        """
        Return the cached value for `key`, computing it on a miss or expiry.

        Args:
            key: Deterministic key built from the query parameters
            max_age: Maximum entry age, in seconds or as a timedelta
            compute: Zero-argument callable producing the value

        Returns:
            The cached or freshly computed value

        Raises:
            Whatever `compute` raises; nothing is stored in that case.
        """
        if compute is None:
            raise TypeError("get_or_compute() requires a compute callable")

        max_age_seconds = max_age.total_seconds() if isinstance(max_age, timedelta) else float(max_age)

        with self._lock.read():
            entry = self._entries.get(key)
            if entry is not None and entry.is_fresh(self._clock(), max_age_seconds):
                logger.debug("Cache hit: {}", key)
                return entry.value

        logger.debug("Cache miss: {}", key)
        value = compute()

        with self._lock.write():
            self._entries[key] = CacheEntry(value=value, stored_at=self._clock())

        return value

    def invalidate(self, key: str) -> None:
        """Remove a single entry; no-op if absent."""
        with self._lock.write():
            self._entries.pop(key, None)

    def invalidate_prefix(self, prefix: str) -> int:
        """
        Remove every entry whose key starts with `prefix`.

        Returns:
            Number of entries removed
        """
        with self._lock.write():
            stale = [key for key in self._entries if key.startswith(prefix)]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug("Invalidated {} cache entries with prefix {}", len(stale), prefix)
        return len(stale)

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock.write():
            self._entries.clear()

    def handle_memory_warning(self) -> None:
        """Hook for the host application's low-memory signal."""
        logger.info("Memory warning received, clearing {} cache entries", len(self))
        self.clear()

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock.read():
            return key in self._entries


# =============================================================================
# KEY BUILDERS
# =============================================================================

DUE_COUNT_PREFIX = "due_count_"
SET_STATS_PREFIX = "set_stats_"
DAILY_QUEUE_PREFIX = "daily_queue_"
FORECAST_PREFIX = "forecast_"
PROFICIENCY_PREFIX = "proficiency_"


def _joined_ids(set_ids: Iterable[UUID | str]) -> str:
    return "_".join(sorted(str(set_id) for set_id in set_ids))


def due_count_key(set_ids: Iterable[UUID | str]) -> str:
    """Key for a total due count; independent of the order of `set_ids`."""
    return f"{DUE_COUNT_PREFIX}{_joined_ids(set_ids)}"


def set_stats_key(set_id: UUID | str) -> str:
    return f"{SET_STATS_PREFIX}{set_id}"


def daily_queue_key(day: date, set_ids: Iterable[UUID | str]) -> str:
    """Key for a daily review queue; every lookup on the same calendar day collides."""
    return f"{DAILY_QUEUE_PREFIX}{day.isoformat()}_{_joined_ids(set_ids)}"


def forecast_key(day: date, set_ids: Iterable[UUID | str], days: int = 7) -> str:
    return f"{FORECAST_PREFIX}{day.isoformat()}_{days}_{_joined_ids(set_ids)}"


def proficiency_key(set_ids: Iterable[UUID | str]) -> str:
    return f"{PROFICIENCY_PREFIX}{_joined_ids(set_ids)}"
