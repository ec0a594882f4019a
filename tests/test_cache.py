"""Tests for the estimation cache."""

from __future__ import annotations

import threading
from datetime import date

import pytest

from bodycomp.cache import EstimationCache, series_digest
from bodycomp.models import MetricSample, MetricSource


class TestSeriesDigest:
    """Tests for series_digest."""

    def test_same_content_same_digest(self, two_point_samples) -> None:
        copy = [MetricSample(s.date, s.weight_kg) for s in two_point_samples]
        assert series_digest(copy) == series_digest(two_point_samples)

    def test_value_change_changes_digest(self, two_point_samples) -> None:
        edited = [two_point_samples[0], MetricSample(date(2025, 1, 15), weight_kg=78.1)]
        assert series_digest(edited) != series_digest(two_point_samples)

    def test_source_is_part_of_content(self) -> None:
        manual = [MetricSample(date(2025, 1, 1), weight_kg=80.0)]
        imported = [
            MetricSample(date(2025, 1, 1), weight_kg=80.0, source=MetricSource.HEALTH_IMPORT)
        ]
        assert series_digest(manual) != series_digest(imported)

    def test_empty_series(self) -> None:
        assert series_digest([]) == series_digest([])


class TestEstimationCache:
    """Tests for EstimationCache."""

    def test_invalid_capacity(self) -> None:
        with pytest.raises(ValueError):
            EstimationCache(0)

    def test_get_put(self) -> None:
        cache = EstimationCache(4)
        key = cache.make_key("abc", "estimate", date(2025, 1, 1))
        assert cache.get(key) is None
        cache.put(key, 42)
        assert cache.get(key) == 42
        assert key in cache

    def test_evicts_least_recently_used(self) -> None:
        cache = EstimationCache(2)
        cache.put(("a",), 1)
        cache.put(("b",), 2)
        cache.get(("a",))
        cache.put(("c",), 3)

        assert ("a",) in cache
        assert ("b",) not in cache
        assert len(cache) == 2

    def test_get_or_compute_runs_once(self) -> None:
        cache = EstimationCache(4)
        calls = []

        def compute():
            calls.append(1)
            return "value"

        assert cache.get_or_compute(("k",), compute) == "value"
        assert cache.get_or_compute(("k",), compute) == "value"
        assert len(calls) == 1

    def test_none_results_cached(self) -> None:
        cache = EstimationCache(4)
        calls = []

        def compute():
            calls.append(1)
            return None

        cache.get_or_compute(("k",), compute)
        cache.get_or_compute(("k",), compute)
        assert len(calls) == 1

    def test_invalidate_by_series(self, two_point_samples) -> None:
        cache = EstimationCache(8)
        digest = series_digest(two_point_samples)
        cache.put(cache.make_key(digest, "a"), 1)
        cache.put(cache.make_key(digest, "b"), 2)
        cache.put(cache.make_key("other", "a"), 3)

        assert cache.invalidate(two_point_samples) == 2
        assert len(cache) == 1
        assert cache.invalidate(digest) == 0

    def test_stats(self) -> None:
        cache = EstimationCache(4)
        cache.get(("missing",))
        cache.put(("k",), 1)
        cache.get(("k",))

        stats = cache.stats()
        assert stats.hits == 1
        assert stats.misses == 1
        assert stats.size == 1
        assert stats.hit_rate == pytest.approx(0.5)

    def test_clear_resets(self) -> None:
        cache = EstimationCache(4)
        cache.put(("k",), 1)
        cache.get(("k",))
        cache.clear()
        assert len(cache) == 0
        assert cache.stats().hits == 0

    def test_concurrent_access(self) -> None:
        cache = EstimationCache(16)

        def worker(offset: int) -> None:
            for i in range(200):
                key = ("k", (i + offset) % 32)
                cache.get_or_compute(key, lambda: i)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(cache) <= 16
