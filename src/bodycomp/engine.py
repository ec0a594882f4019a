"""Metrics engine: one explicitly constructed entry point for hosts.

The engine owns settings and an EstimationCache. Hosts create one engine
and pass it to whatever needs estimates or scores; there is no shared
global instance.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional, Sequence

from bodycomp.cache import EstimationCache, series_digest
from bodycomp.config import Settings
from bodycomp.interpolation import (
    InterpolationContext,
    build_context,
    estimate_ffmi,
    estimate_lean_mass,
    resolve_metric,
)
from bodycomp.models import (
    BodyScoreContext,
    BodyScoreInput,
    ConfidenceLevel,
    InterpolatedMetric,
    MetricKind,
    MetricSample,
    ResolvedMetric,
    ScoreCalculation,
    UserProfile,
)
from bodycomp.scoring import BodyScoreCalculator
from bodycomp.trend import daterange, trend_series, trend_weight

logger = logging.getLogger(__name__)

# Chart series longer than this are thinned before rendering
DEFAULT_MAX_CHART_POINTS = 150


class ChartMetric(Enum):
    """Metrics a chart series can be built for."""

    WEIGHT = "weight"
    TREND_WEIGHT = "trend_weight"
    BODY_FAT = "body_fat"
    LEAN_MASS = "lean_mass"
    FFMI = "ffmi"


@dataclass(frozen=True)
class ChartPoint:
    """One point of a chart series."""

    date: date
    value: float
    is_estimated: bool
    confidence_level: Optional[ConfidenceLevel] = None


def downsample(points: Sequence[ChartPoint], target_count: int) -> list[ChartPoint]:
    """
    Thin a series to about target_count points by even striding.

    The last point is always kept so the chart ends on the latest value.

    Args:
        points: Series to thin
        target_count: Maximum number of points to return

    Returns:
        A copy of points if already short enough, otherwise a thinned copy
    """
    if target_count <= 0:
        raise ValueError("target_count must be positive")
    if len(points) <= target_count:
        return list(points)

    step = len(points) / target_count
    thinned = [points[int(i * step)] for i in range(target_count)]
    if thinned[-1] is not points[-1]:
        thinned[-1] = points[-1]
    return thinned


def settings_digest(settings: Settings) -> str:
    """Hash the settings an engine computes with; part of every cache key."""
    payload = json.dumps(settings.to_dict(), sort_keys=True)
    return hashlib.sha256(payload.encode()).hexdigest()


def _input_digest(score_input: BodyScoreInput) -> str:
    fields = (
        score_input.sex.value if score_input.sex else "",
        repr(score_input.birth_year),
        repr(score_input.height_cm),
        repr(score_input.weight_kg),
        repr(score_input.body_fat_percent),
    )
    return hashlib.sha256("|".join(fields).encode()).hexdigest()


class MetricsEngine:
    """Estimates and scores over host-supplied sample series."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        cache: Optional[EstimationCache] = None,
    ):
        """Initialize the engine.

        Args:
            settings: Engine settings (defaults if None)
            cache: Cache to use (a new one sized from settings if None)
        """
        self.settings = settings or Settings()
        self.settings_digest = settings_digest(self.settings)
        if cache is None:
            cache = EstimationCache(self.settings.cache.capacity)
        self.cache = cache
        self.calculator = BodyScoreCalculator(self.settings.scoring)

    # ------------------------------------------------------------------
    # Contexts and point estimates
    # ------------------------------------------------------------------

    def context(self, samples: Sequence[MetricSample], kind: MetricKind) -> InterpolationContext:
        """Interpolation context for a series, built once per series content."""
        key = self.cache.make_key(series_digest(samples), "context", self.settings_digest, kind)
        return self.cache.get_or_compute(
            key, lambda: self._build_context(samples, kind)
        )

    def _build_context(
        self, samples: Sequence[MetricSample], kind: MetricKind
    ) -> InterpolationContext:
        context = build_context(samples, kind, self.settings.interpolation)
        logger.debug("Built %s context over %d samples", kind.value, len(context))
        return context

    def estimate(
        self, samples: Sequence[MetricSample], kind: MetricKind, on: date
    ) -> Optional[InterpolatedMetric]:
        """Value-with-confidence for one metric on a date (None = no data)."""
        digest = series_digest(samples)
        key = self.cache.make_key(digest, "estimate", self.settings_digest, kind, on)
        return self.cache.get_or_compute(key, lambda: self.context(samples, kind).estimate(on))

    def resolve(
        self, samples: Sequence[MetricSample], kind: MetricKind, on: date
    ) -> ResolvedMetric:
        """Tagged measured/interpolated/unknown value for a date."""
        return resolve_metric(self.context(samples, kind), on)

    def trend_weight(
        self, samples: Sequence[MetricSample], on: date
    ) -> Optional[InterpolatedMetric]:
        """Smoothed trend weight on a date."""
        key = self.cache.make_key(series_digest(samples), "trend", self.settings_digest, on)
        return self.cache.get_or_compute(
            key,
            lambda: trend_weight(
                on,
                samples,
                self.settings.trend,
                self.settings.interpolation,
                context=self.context(samples, MetricKind.WEIGHT),
            ),
        )

    def weight(
        self, samples: Sequence[MetricSample], on: date, use_trend: bool = False
    ) -> Optional[InterpolatedMetric]:
        """Raw or trend weight, caller's choice."""
        if use_trend:
            return self.trend_weight(samples, on)
        return self.estimate(samples, MetricKind.WEIGHT, on)

    def lean_mass(
        self, samples: Sequence[MetricSample], on: date, use_trend: bool = False
    ) -> Optional[InterpolatedMetric]:
        """Lean mass estimate (kg) from weight and body-fat estimates."""
        return estimate_lean_mass(
            self.weight(samples, on, use_trend),
            self.estimate(samples, MetricKind.BODY_FAT, on),
        )

    def ffmi(
        self,
        samples: Sequence[MetricSample],
        height_cm: Optional[float],
        on: date,
        use_trend: bool = False,
    ) -> Optional[InterpolatedMetric]:
        """FFMI estimate on a date; None without height, weight or body fat."""
        return estimate_ffmi(
            self.weight(samples, on, use_trend),
            self.estimate(samples, MetricKind.BODY_FAT, on),
            height_cm,
        )

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def score(self, score_input: BodyScoreInput, on: date) -> ScoreCalculation:
        """Score an input snapshot, cached on (input content, date)."""
        key = self.cache.make_key(_input_digest(score_input), "score", self.settings_digest, on)
        return self.cache.get_or_compute(
            key,
            lambda: self.calculator.calculate_score(BodyScoreContext(score_input, on)),
        )

    def build_score_input(
        self,
        samples: Sequence[MetricSample],
        profile: UserProfile,
        on: date,
        use_trend: bool = False,
    ) -> BodyScoreInput:
        """
        Combine a profile with weight and body-fat estimates for a date.

        Unknown metrics stay None, which leaves the input not ready.
        """
        weight = self.weight(samples, on, use_trend)
        body_fat = self.estimate(samples, MetricKind.BODY_FAT, on)
        return BodyScoreInput(
            sex=profile.sex,
            birth_year=profile.birth_year,
            height_cm=profile.height_cm,
            weight_kg=weight.value if weight else None,
            body_fat_percent=body_fat.value if body_fat else None,
        )

    def score_on(
        self,
        samples: Sequence[MetricSample],
        profile: UserProfile,
        on: date,
        use_trend: bool = False,
    ) -> ScoreCalculation:
        """Score a user's series as of a date."""
        return self.score(self.build_score_input(samples, profile, on, use_trend), on)

    # ------------------------------------------------------------------
    # Chart series
    # ------------------------------------------------------------------

    def chart_series(
        self,
        samples: Sequence[MetricSample],
        metric: ChartMetric,
        start: date,
        end: date,
        height_cm: Optional[float] = None,
        step_days: int = 1,
        max_points: Optional[int] = DEFAULT_MAX_CHART_POINTS,
    ) -> list[ChartPoint]:
        """
        Build a chart series over a date range.

        Dates with no estimate are skipped.

        Args:
            samples: Date-ascending samples
            metric: Which metric to chart
            start: First date (inclusive)
            end: Last date (inclusive)
            height_cm: Required for FFMI
            step_days: Spacing between evaluated dates
            max_points: Thin the result to at most this many points (None = all)

        Returns:
            Chart points in date order
        """
        if end < start:
            raise ValueError("end must not be before start")
        dates = daterange(start, end, step_days)

        if metric == ChartMetric.TREND_WEIGHT:
            estimates = trend_series(
                samples, dates, self.settings.trend, self.settings.interpolation
            )
        else:
            estimates = [self._chart_estimate(samples, metric, on, height_cm) for on in dates]

        points = [
            ChartPoint(
                date=on,
                value=estimate.value,
                is_estimated=estimate.is_interpolated,
                confidence_level=estimate.confidence_level,
            )
            for on, estimate in zip(dates, estimates)
            if estimate is not None
        ]
        if max_points is not None:
            points = downsample(points, max_points)
        return points

    def _chart_estimate(
        self,
        samples: Sequence[MetricSample],
        metric: ChartMetric,
        on: date,
        height_cm: Optional[float],
    ) -> Optional[InterpolatedMetric]:
        if metric == ChartMetric.WEIGHT:
            return self.context(samples, MetricKind.WEIGHT).estimate(on)
        if metric == ChartMetric.BODY_FAT:
            return self.context(samples, MetricKind.BODY_FAT).estimate(on)
        weight = self.context(samples, MetricKind.WEIGHT).estimate(on)
        body_fat = self.context(samples, MetricKind.BODY_FAT).estimate(on)
        if metric == ChartMetric.LEAN_MASS:
            return estimate_lean_mass(weight, body_fat)
        return estimate_ffmi(weight, body_fat, height_cm)

    # ------------------------------------------------------------------
    # Cache management
    # ------------------------------------------------------------------

    def invalidate(self, samples: Sequence[MetricSample]) -> int:
        """Drop cached contexts and estimates for a series that changed."""
        removed = self.cache.invalidate(samples)
        logger.debug("Invalidated %d cached results", removed)
        return removed

    def clear_cache(self) -> None:
        self.cache.clear()
