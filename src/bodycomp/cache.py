"""Content-addressed cache for estimates and interpolation contexts.

Entries are keyed by a SHA-256 digest of the full sample series plus the
query parameters, so a changed series can never hit a stale entry. Any
edit to a series should still be followed by invalidate() to release the
old entries; there is no in-place patching.
"""

from __future__ import annotations

import hashlib
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Sequence, Union

from bodycomp.models import MetricSample

logger = logging.getLogger(__name__)

_MISSING = object()


def series_digest(samples: Sequence[MetricSample]) -> str:
    """
    Hash the full content of a sample series.

    Order-sensitive: the engine expects a sorted series, so a reordered series
    is treated as different input.

    Args:
        samples: Samples to hash

    Returns:
        Hex SHA-256 digest
    """
    hasher = hashlib.sha256()
    for sample in samples:
        hasher.update(
            "|".join(
                (
                    sample.date.isoformat(),
                    repr(sample.weight_kg),
                    repr(sample.body_fat_percent),
                    sample.source.value,
                    sample.integration_id or "",
                )
            ).encode()
        )
        hasher.update(b"\n")
    return hasher.hexdigest()


@dataclass
class CacheStats:
    """Cache counters."""

    hits: int
    misses: int
    size: int
    capacity: int

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


class EstimationCache:
    """Thread-safe bounded LRU cache keyed by (series digest, params...)."""

    def __init__(self, capacity: int = 1024):
        if capacity <= 0:
            raise ValueError("Cache capacity must be greater than zero")
        self.capacity = capacity
        self._entries: OrderedDict[tuple, Any] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: tuple) -> bool:
        with self._lock:
            return key in self._entries

    @staticmethod
    def make_key(digest: str, *params: Hashable) -> tuple:
        """Build a cache key; the digest is always the first element."""
        return (digest, *params)

    def get(self, key: tuple, default: Any = None) -> Any:
        with self._lock:
            if key not in self._entries:
                self._misses += 1
                return default
            self._entries.move_to_end(key)
            self._hits += 1
            return self._entries[key]

    def put(self, key: tuple, value: Any) -> None:
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted cache entry %s", evicted[1:])

    def get_or_compute(self, key: tuple, compute: Callable[[], Any]) -> Any:
        """
        Return the cached value for key, computing and storing it on a miss.

        The computation runs outside the lock; two threads racing on the same
        key may both compute, and the later result wins. Results are
        deterministic for a given key, so either is correct.

        Args:
            key: Key from make_key()
            compute: Zero-argument function producing the value

        Returns:
            Cached or freshly computed value (None results are cached too)
        """
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            return value

        value = compute()
        self.put(key, value)
        return value

    def invalidate(self, series: Union[str, Sequence[MetricSample]]) -> int:
        """
        Drop every entry computed from a series.

        Args:
            series: The series itself or its digest

        Returns:
            Number of entries removed
        """
        digest = series if isinstance(series, str) else series_digest(series)
        with self._lock:
            stale = [key for key in self._entries if key[0] == digest]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug("Invalidated %d cache entries for series %s", len(stale), digest[:12])
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                size=len(self._entries),
                capacity=self.capacity,
            )
