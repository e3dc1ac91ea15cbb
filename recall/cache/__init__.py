"""
Cache Module.

In-process memoization for aggregate queries (due counts, daily queues,
per-set statistics) with deterministic key builders.
"""

from recall.cache.cache_service import (
    CacheEntry,
    CacheService,
    ReadWriteLock,
    daily_queue_key,
    due_count_key,
    forecast_key,
    proficiency_key,
    set_stats_key,
)

__all__ = [
    "CacheService",
    "CacheEntry",
    "ReadWriteLock",
    "due_count_key",
    "set_stats_key",
    "daily_queue_key",
    "forecast_key",
    "proficiency_key",
]
