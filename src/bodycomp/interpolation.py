"""Point-in-time estimation over sparse body-metric series.

An InterpolationContext is built once per (metric kind, series) and answers
any number of date queries with a binary search over the sample dates:

- a sample on the date is returned as-is (HIGH confidence);
- a date between two samples is linearly interpolated by elapsed days,
  with confidence banded by the gap between the two samples;
- a date outside the sampled range holds the nearest value flat, with
  confidence banded by the distance to that sample.

Flat holds instead of linear extrapolation keep a stopped logger from
producing runaway values.
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

import numpy as np

from bodycomp.config import InterpolationConfig
from bodycomp.ffmi import ffmi
from bodycomp.models import (
    ConfidenceLevel,
    InterpolatedMetric,
    MetricKind,
    MetricSample,
    ResolutionStatus,
    ResolvedMetric,
)


def confidence_for_gap(
    days: int, config: Optional[InterpolationConfig] = None
) -> ConfidenceLevel:
    """
    Band a day gap into a confidence level.

    Args:
        days: Gap between the bracketing samples, or distance past the
              nearest sample for held values
        config: Thresholds (default: HIGH <= 7 days, MEDIUM <= 30 days)

    Returns:
        HIGH, MEDIUM or LOW (thresholds inclusive)

    Example:
        >>> confidence_for_gap(7)
        <ConfidenceLevel.HIGH: 'high'>
        >>> confidence_for_gap(14)
        <ConfidenceLevel.MEDIUM: 'medium'>
        >>> confidence_for_gap(31)
        <ConfidenceLevel.LOW: 'low'>
    """
    config = config or InterpolationConfig()
    days = abs(days)
    if days <= config.high_confidence_days:
        return ConfidenceLevel.HIGH
    if days <= config.medium_confidence_days:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


class InterpolationContext:
    """Immutable lookup structure over one metric's sample series."""

    def __init__(
        self,
        dates: Sequence[date],
        values: Sequence[float],
        kind: MetricKind,
        config: Optional[InterpolationConfig] = None,
    ):
        """Initialize from parallel, date-ascending sequences.

        Prefer build_context(); this constructor does not sort.

        Args:
            dates: Sample dates, ascending, at most one per day
            values: Sample values, same length as dates
            kind: Metric kind the values belong to
            config: Confidence banding thresholds
        """
        if len(dates) != len(values):
            raise ValueError("dates and values must have the same length")

        self.kind = kind
        self.config = config or InterpolationConfig()
        self._dates: tuple[date, ...] = tuple(dates)
        self._ordinals = np.array([d.toordinal() for d in self._dates], dtype=np.int64)
        self._values = np.array(values, dtype=np.float64)
        self._ordinals.setflags(write=False)
        self._values.setflags(write=False)

    def __len__(self) -> int:
        return len(self._dates)

    @property
    def is_empty(self) -> bool:
        return len(self._dates) == 0

    @property
    def first_date(self) -> Optional[date]:
        return self._dates[0] if self._dates else None

    @property
    def last_date(self) -> Optional[date]:
        return self._dates[-1] if self._dates else None

    @property
    def dates(self) -> tuple[date, ...]:
        return self._dates

    def value_at(self, on: date) -> Optional[float]:
        """Return the directly measured value on a date, if any."""
        target = on.toordinal()
        index = int(np.searchsorted(self._ordinals, target, side="left"))
        if index < len(self._ordinals) and self._ordinals[index] == target:
            return float(self._values[index])
        return None

    def estimate(self, on: date) -> Optional[InterpolatedMetric]:
        """Estimate the metric on a date.

        Args:
            on: Calendar day to estimate

        Returns:
            InterpolatedMetric, or None when the series is empty
        """
        count = len(self._ordinals)
        if count == 0:
            return None

        target = on.toordinal()
        index = int(np.searchsorted(self._ordinals, target, side="left"))

        # Exact match
        if index < count and self._ordinals[index] == target:
            return InterpolatedMetric(
                value=float(self._values[index]),
                is_interpolated=False,
                is_last_known=False,
                confidence_level=ConfidenceLevel.HIGH,
            )

        has_prev = index > 0
        has_next = index < count

        if has_prev and has_next:
            prev_ord = int(self._ordinals[index - 1])
            next_ord = int(self._ordinals[index])
            prev_value = float(self._values[index - 1])
            next_value = float(self._values[index])

            gap_days = next_ord - prev_ord
            progress = (target - prev_ord) / gap_days
            return InterpolatedMetric(
                value=prev_value + (next_value - prev_value) * progress,
                is_interpolated=True,
                is_last_known=False,
                confidence_level=confidence_for_gap(gap_days, self.config),
            )

        # Outside the sampled range: hold the nearest value flat
        nearest = index - 1 if has_prev else index
        stale_days = abs(target - int(self._ordinals[nearest]))
        return InterpolatedMetric(
            value=float(self._values[nearest]),
            is_interpolated=True,
            is_last_known=True,
            confidence_level=confidence_for_gap(stale_days, self.config),
        )

    def resolve(self, on: date) -> ResolvedMetric:
        """Resolve a date into a tagged measured/interpolated/unknown value."""
        return resolve_metric(self, on)


def series_for_kind(
    samples: Sequence[MetricSample], kind: MetricKind
) -> tuple[list[date], list[float]]:
    """Extract (dates, values) for one metric kind, skipping unlogged values."""
    dates: list[date] = []
    values: list[float] = []
    for sample in samples:
        value = sample.value_for(kind)
        if value is None:
            continue
        dates.append(sample.date)
        values.append(float(value))
    return dates, values


def build_context(
    samples: Sequence[MetricSample],
    kind: MetricKind,
    config: Optional[InterpolationConfig] = None,
) -> InterpolationContext:
    """
    Build an interpolation context for one metric kind.

    Samples must already be sorted ascending by date with at most one per day;
    the builder copies but does not sort them.

    Args:
        samples: Date-ascending samples (may be empty)
        kind: Which sample value forms the series
        config: Confidence banding thresholds

    Returns:
        InterpolationContext (estimate() always returns None if empty)
    """
    dates, values = series_for_kind(samples, kind)
    return InterpolationContext(dates, values, kind, config)


def resolve_metric(context: InterpolationContext, on: date) -> ResolvedMetric:
    """
    Resolve a date to a tagged result so callers can tell a measurement from a guess.

    Args:
        context: Context for the metric
        on: Date to resolve

    Returns:
        ResolvedMetric with status MEASURED, INTERPOLATED or UNKNOWN
    """
    estimate = context.estimate(on)
    if estimate is None:
        return ResolvedMetric(status=ResolutionStatus.UNKNOWN)

    status = (
        ResolutionStatus.INTERPOLATED
        if estimate.is_interpolated
        else ResolutionStatus.MEASURED
    )
    return ResolvedMetric(
        status=status,
        value=estimate.value,
        confidence_level=estimate.confidence_level,
        is_last_known=estimate.is_last_known,
    )


def estimate_lean_mass(
    weight: Optional[InterpolatedMetric],
    body_fat: Optional[InterpolatedMetric],
) -> Optional[InterpolatedMetric]:
    """
    Combine weight and body-fat estimates into a lean mass estimate.

    Lean mass = weight × (1 - body_fat / 100). The result is interpolated or
    last-known if either input is, and takes the lower of the two confidences.

    Args:
        weight: Weight estimate (kg)
        body_fat: Body fat estimate (%)

    Returns:
        Lean mass estimate in kg, or None if either input is unknown
    """
    if weight is None or body_fat is None:
        return None

    return InterpolatedMetric(
        value=weight.value * (1 - body_fat.value / 100),
        is_interpolated=weight.is_interpolated or body_fat.is_interpolated,
        is_last_known=weight.is_last_known or body_fat.is_last_known,
        confidence_level=ConfidenceLevel.lowest(
            weight.confidence_level, body_fat.confidence_level
        ),
    )


def estimate_ffmi(
    weight: Optional[InterpolatedMetric],
    body_fat: Optional[InterpolatedMetric],
    height_cm: Optional[float],
) -> Optional[InterpolatedMetric]:
    """
    Estimate FFMI from weight and body-fat estimates.

    Args:
        weight: Weight estimate (kg)
        body_fat: Body fat estimate (%)
        height_cm: Height in centimeters

    Returns:
        FFMI estimate carrying the combined flags, or None when height is
        missing/non-positive or either input is unknown
    """
    if height_cm is None or height_cm <= 0:
        return None

    if weight is None or body_fat is None:
        return None

    lean = estimate_lean_mass(weight, body_fat)
    return InterpolatedMetric(
        value=ffmi(weight.value, body_fat.value, height_cm),
        is_interpolated=lean.is_interpolated,
        is_last_known=lean.is_last_known,
        confidence_level=lean.confidence_level,
    )


def find_closest_sample(
    samples: Sequence[MetricSample],
    on: date,
    max_days: int = 7,
) -> Optional[MetricSample]:
    """
    Find the sample nearest to a date within a window.

    Used to attach a measurement to a dated artifact such as a progress photo.
    Ties go to the earlier sample.

    Args:
        samples: Samples in any order
        on: Target date
        max_days: Maximum distance in days

    Returns:
        Closest sample, or None if none is within max_days
    """
    close = [s for s in samples if abs((s.date - on).days) <= max_days]
    if not close:
        return None
    return min(close, key=lambda s: (abs((s.date - on).days), s.date))
