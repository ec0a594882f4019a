"""Time-decayed trend weight for irregularly logged weights.

Daily scale readings swing with water retention, gut contents, and scale
error. The trend weight is a normalized exponentially weighted average of the
raw readings in a lookback window ending on the query date:

    w_i = exp(-Δdays_i / half_life)
    T   = Σ w_i × W_i / Σ w_i

Because weights decay with elapsed days rather than with sample count, gaps
in logging are handled directly: a reading from two weeks ago counts for
less than yesterday's no matter how many readings lie between them.

When no reading falls inside the window the raw interpolation estimate is
returned instead, so trend and raw weight never disagree about whether
there is data at all.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional, Sequence

import numpy as np

from bodycomp.config import InterpolationConfig, TrendConfig
from bodycomp.interpolation import (
    InterpolationContext,
    build_context,
    confidence_for_gap,
    series_for_kind,
)
from bodycomp.models import ConfidenceLevel, InterpolatedMetric, MetricKind, MetricSample


def decay_weights(days_elapsed: np.ndarray, half_life_days: float) -> np.ndarray:
    """
    Normalized decay weights for readings a given number of days old.

    Args:
        days_elapsed: Non-negative ages of each reading in days
        half_life_days: Decay constant in days

    Returns:
        Weights summing to 1

    Example:
        >>> decay_weights(np.array([0]), 7.0)
        array([1.])
    """
    raw = np.exp(-days_elapsed.astype(np.float64) / half_life_days)
    return raw / raw.sum()


def trend_confidence(
    stale_days: int,
    trend_config: Optional[TrendConfig] = None,
    interpolation_config: Optional[InterpolationConfig] = None,
) -> ConfidenceLevel:
    """Confidence for a trend whose newest reading is stale_days old."""
    trend_config = trend_config or TrendConfig()
    if stale_days > trend_config.half_life_days * trend_config.stale_multiplier:
        return ConfidenceLevel.LOW
    return confidence_for_gap(stale_days, interpolation_config)


def _trend_from_arrays(
    on: date,
    ordinals: np.ndarray,
    values: np.ndarray,
    trend_config: TrendConfig,
    interpolation_config: Optional[InterpolationConfig],
) -> Optional[InterpolatedMetric]:
    target = on.toordinal()
    window_start = target - trend_config.lookback_days

    lo = int(np.searchsorted(ordinals, window_start, side="left"))
    hi = int(np.searchsorted(ordinals, target, side="right"))
    if hi <= lo:
        return None

    window_ordinals = ordinals[lo:hi]
    days_elapsed = target - window_ordinals
    weights = decay_weights(days_elapsed, trend_config.half_life_days)
    trend_value = float(np.dot(weights, values[lo:hi]))

    stale_days = int(days_elapsed[-1])
    single_reading_today = (hi - lo) == 1 and stale_days == 0

    return InterpolatedMetric(
        value=trend_value,
        is_interpolated=not single_reading_today,
        is_last_known=False,
        confidence_level=trend_confidence(stale_days, trend_config, interpolation_config),
    )


def trend_weight(
    on: date,
    samples: Sequence[MetricSample],
    trend_config: Optional[TrendConfig] = None,
    interpolation_config: Optional[InterpolationConfig] = None,
    context: Optional[InterpolationContext] = None,
) -> Optional[InterpolatedMetric]:
    """
    Estimate the smoothed trend weight on a date.

    Args:
        on: Date to evaluate
        samples: Date-ascending samples; only those with a weight are used
        trend_config: Half-life, lookback window and staleness threshold
        interpolation_config: Confidence banding thresholds
        context: Prebuilt weight context for the fallback path (built on demand)

    Returns:
        Trend estimate, the raw interpolation estimate when the window is
        empty, or None when there is no weight data at all

    Example:
        >>> from datetime import date
        >>> samples = [MetricSample(date(2025, 1, 1), weight_kg=80.0)]
        >>> trend_weight(date(2025, 1, 1), samples).value
        80.0
    """
    trend_config = trend_config or TrendConfig()
    dates, values = series_for_kind(samples, MetricKind.WEIGHT)
    ordinals = np.array([d.toordinal() for d in dates], dtype=np.int64)

    result = _trend_from_arrays(
        on, ordinals, np.array(values, dtype=np.float64), trend_config, interpolation_config
    )
    if result is not None:
        return result

    if context is None:
        context = InterpolationContext(dates, values, MetricKind.WEIGHT, interpolation_config)
    return context.estimate(on)


def trend_series(
    samples: Sequence[MetricSample],
    dates: Sequence[date],
    trend_config: Optional[TrendConfig] = None,
    interpolation_config: Optional[InterpolationConfig] = None,
) -> list[Optional[InterpolatedMetric]]:
    """
    Trend weight for many dates against one series.

    Args:
        samples: Date-ascending samples
        dates: Dates to evaluate, any order
        trend_config: Smoothing parameters
        interpolation_config: Confidence banding thresholds

    Returns:
        One estimate (or None) per requested date, in the same order
    """
    trend_config = trend_config or TrendConfig()
    context = build_context(samples, MetricKind.WEIGHT, interpolation_config)
    series_dates, series_values = series_for_kind(samples, MetricKind.WEIGHT)
    ordinals = np.array([d.toordinal() for d in series_dates], dtype=np.int64)
    values = np.array(series_values, dtype=np.float64)

    results: list[Optional[InterpolatedMetric]] = []
    for on in dates:
        result = _trend_from_arrays(on, ordinals, values, trend_config, interpolation_config)
        if result is None:
            result = context.estimate(on)
        results.append(result)
    return results


def daterange(start: date, end: date, step_days: int = 1) -> list[date]:
    """Inclusive list of dates from start to end."""
    if step_days <= 0:
        raise ValueError("step_days must be positive")
    span = (end - start).days
    return [start + timedelta(days=offset) for offset in range(0, span + 1, step_days)]
