"""
Unit tests for CacheService.

Tests:
- Hits within max age compute once
- Expired entries are recomputed and overwritten
- Failed computations are not cached
- Invalidation, prefix invalidation and clearing
- Key builders are deterministic and order independent
- Concurrent access
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta
from uuid import uuid4

import pytest

from recall.cache.cache_service import (
    CacheService,
    ReadWriteLock,
    daily_queue_key,
    due_count_key,
    forecast_key,
    proficiency_key,
    set_stats_key,
)


class CountingCompute:
    """Callable that records how often it ran."""

    def __init__(self, *values):
        self.values = list(values)
        self.calls = 0

    def __call__(self):
        value = self.values[min(self.calls, len(self.values) - 1)]
        self.calls += 1
        return value


class TestGetOrCompute:
    def test_same_key_within_max_age_computes_once(self, cache, timer):
        compute = CountingCompute(42, 99)

        first = cache.get_or_compute("answer", 60, compute)
        timer.advance(30)
        second = cache.get_or_compute("answer", 60, compute)

        assert first == second == 42
        assert compute.calls == 1

    def test_entry_at_exactly_max_age_is_fresh(self, cache, timer):
        compute = CountingCompute(1, 2)

        cache.get_or_compute("k", 60, compute)
        timer.advance(60)

        assert cache.get_or_compute("k", 60, compute) == 1
        assert compute.calls == 1

    def test_expired_entry_is_recomputed_and_overwritten(self, cache, timer):
        compute = CountingCompute("old", "new")

        cache.get_or_compute("k", 60, compute)
        timer.advance(61)
        refreshed = cache.get_or_compute("k", 60, compute)
        timer.advance(10)
        again = cache.get_or_compute("k", 60, compute)

        assert refreshed == "new"
        assert again == "new"
        assert compute.calls == 2

    def test_accepts_timedelta_max_age(self, cache, timer):
        compute = CountingCompute(1, 2)

        cache.get_or_compute("k", timedelta(minutes=5), compute)
        timer.advance(299)
        assert cache.get_or_compute("k", timedelta(minutes=5), compute) == 1
        timer.advance(2)
        assert cache.get_or_compute("k", timedelta(minutes=5), compute) == 2

    def test_max_age_is_per_lookup(self, cache, timer):
        compute = CountingCompute(1, 2)

        cache.get_or_compute("k", 300, compute)
        timer.advance(45)

        assert cache.get_or_compute("k", 30, compute) == 2

    def test_heterogeneous_values(self, cache):
        cache.get_or_compute("count", 60, lambda: 3)
        cache.get_or_compute("queue", 60, lambda: ["a", "b"])
        cache.get_or_compute("rate", 60, lambda: 0.75)

        assert cache.get_or_compute("count", 60, lambda: -1) == 3
        assert cache.get_or_compute("queue", 60, lambda: []) == ["a", "b"]
        assert cache.get_or_compute("rate", 60, lambda: 0.0) == 0.75

    def test_cached_none_is_a_hit(self, cache):
        compute = CountingCompute(None, "computed")

        cache.get_or_compute("k", 60, compute)

        assert cache.get_or_compute("k", 60, compute) is None
        assert compute.calls == 1

    def test_compute_failure_propagates_and_stores_nothing(self, cache):
        def boom():
            raise ValueError("store offline")

        with pytest.raises(ValueError, match="store offline"):
            cache.get_or_compute("k", 60, boom)

        assert "k" not in cache
        assert cache.get_or_compute("k", 60, lambda: "recovered") == "recovered"

    def test_compute_failure_keeps_previous_entry_untouched_until_expiry(self, cache, timer):
        cache.get_or_compute("k", 60, lambda: "good")
        timer.advance(120)

        def boom():
            raise RuntimeError("nope")

        with pytest.raises(RuntimeError):
            cache.get_or_compute("k", 60, boom)

        # no silent fallback: the stale entry is still stale
        assert cache.get_or_compute("k", 60, lambda: "fresh") == "fresh"

    def test_compute_is_required(self, cache):
        with pytest.raises(TypeError):
            cache.get_or_compute("k", 60)


class TestInvalidation:
    def test_invalidate_removes_entry(self, cache):
        compute = CountingCompute(1, 2)
        cache.get_or_compute("k", 60, compute)

        cache.invalidate("k")

        assert cache.get_or_compute("k", 60, compute) == 2

    def test_invalidate_missing_key_is_noop(self, cache):
        cache.get_or_compute("other", 60, lambda: 1)

        cache.invalidate("missing")

        assert len(cache) == 1

    def test_invalidate_prefix(self, cache):
        for key in ("due_count_a", "due_count_a_b", "set_stats_a"):
            cache.get_or_compute(key, 60, lambda: 0)

        removed = cache.invalidate_prefix("due_count_")

        assert removed == 2
        assert "set_stats_a" in cache
        assert "due_count_a" not in cache

    def test_clear(self, cache):
        for key in ("a", "b", "c"):
            cache.get_or_compute(key, 60, lambda: key)

        cache.clear()

        assert len(cache) == 0

    def test_memory_warning_clears(self, cache):
        cache.get_or_compute("a", 60, lambda: 1)

        cache.handle_memory_warning()

        assert len(cache) == 0

    def test_instances_do_not_share_entries(self, timer):
        first = CacheService(clock=timer)
        second = CacheService(clock=timer)

        first.get_or_compute("k", 60, lambda: 1)

        assert "k" not in second


class TestKeys:
    def test_due_count_key_is_order_independent(self):
        a, b, c = uuid4(), uuid4(), uuid4()

        assert due_count_key([a, b, c]) == due_count_key([c, a, b])

    def test_due_count_key_distinguishes_set_combinations(self):
        a, b, c = uuid4(), uuid4(), uuid4()

        keys = {due_count_key([a]), due_count_key([a, b]), due_count_key([a, b, c]), due_count_key([])}

        assert len(keys) == 4

    def test_daily_queue_key_uses_calendar_day(self):
        ids = [uuid4()]

        assert daily_queue_key(date(2025, 3, 10), ids) == daily_queue_key(date(2025, 3, 10), ids)
        assert daily_queue_key(date(2025, 3, 10), ids) != daily_queue_key(date(2025, 3, 11), ids)
        assert "2025-03-10" in daily_queue_key(date(2025, 3, 10), ids)

    def test_key_families_do_not_collide(self):
        set_id = uuid4()
        day = date(2025, 3, 10)

        keys = {
            due_count_key([set_id]),
            set_stats_key(set_id),
            daily_queue_key(day, [set_id]),
            forecast_key(day, [set_id]),
            proficiency_key([set_id]),
        }

        assert len(keys) == 5

    def test_forecast_key_includes_horizon(self):
        ids = [uuid4()]
        day = date(2025, 3, 10)

        assert forecast_key(day, ids, 7) != forecast_key(day, ids, 14)


class TestConcurrency:
    def test_readers_share_the_lock(self):
        lock = ReadWriteLock()
        barrier = threading.Barrier(3)

        def reader():
            with lock.read():
                # every reader must be inside at the same time to pass
                barrier.wait(timeout=5)

        threads = [threading.Thread(target=reader) for _ in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        assert not barrier.broken

    def test_writer_excludes_readers(self):
        lock = ReadWriteLock()
        events = []
        writer_inside = threading.Event()
        release_writer = threading.Event()

        def writer():
            with lock.write():
                writer_inside.set()
                release_writer.wait(timeout=5)
                events.append("writer-done")

        def reader():
            with lock.read():
                events.append("reader")

        w = threading.Thread(target=writer)
        w.start()
        writer_inside.wait(timeout=5)
        r = threading.Thread(target=reader)
        r.start()
        r.join(timeout=0.2)
        release_writer.set()
        w.join(timeout=5)
        r.join(timeout=5)

        assert events == ["writer-done", "reader"]

    def test_parallel_get_or_compute(self):
        cache = CacheService()
        computed = []
        lock = threading.Lock()

        def compute_for(key):
            def compute():
                with lock:
                    computed.append(key)
                return f"value-{key}"

            return compute

        def worker(n):
            key = f"k{n % 10}"
            if n % 17 == 0:
                cache.invalidate(key)
            return key, cache.get_or_compute(key, 60, compute_for(key))

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(worker, range(2000)))

        assert all(value == f"value-{key}" for key, value in results)
        assert len(cache) <= 10
        # duplicate computes may happen; most calls must still be hits
        assert len(computed) < 2000
