"""Configuration for the metrics engine."""

from bodycomp.config.settings import (
    CacheConfig,
    InterpolationConfig,
    ScoringConfig,
    Settings,
    TrendConfig,
)

__all__ = [
    "CacheConfig",
    "InterpolationConfig",
    "ScoringConfig",
    "Settings",
    "TrendConfig",
]
