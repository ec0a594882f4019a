"""Tests for time-decayed trend weight."""

from __future__ import annotations

import math
from datetime import date, timedelta

import numpy as np
import pytest

from bodycomp.config import TrendConfig
from bodycomp.models import ConfidenceLevel, MetricSample
from bodycomp.trend import daterange, decay_weights, trend_confidence, trend_series, trend_weight


class TestDecayWeights:
    """Tests for decay_weights."""

    def test_normalized(self) -> None:
        weights = decay_weights(np.array([0, 3, 10]), 7.0)
        assert weights.sum() == pytest.approx(1.0)

    def test_newer_readings_weigh_more(self) -> None:
        weights = decay_weights(np.array([10, 3, 0]), 7.0)
        assert weights[0] < weights[1] < weights[2]

    def test_ratio_follows_decay(self) -> None:
        """A reading 7 days older weighs e^-1 as much."""
        weights = decay_weights(np.array([7, 0]), 7.0)
        assert weights[0] / weights[1] == pytest.approx(math.exp(-1))


class TestTrendWeight:
    """Tests for trend_weight."""

    def test_no_weight_data(self) -> None:
        samples = [MetricSample(date(2025, 1, 1), body_fat_percent=20.0)]
        assert trend_weight(date(2025, 1, 1), samples) is None

    def test_single_reading_today(self) -> None:
        """One reading on the date is reported as measured."""
        samples = [MetricSample(date(2025, 1, 10), weight_kg=80.0)]
        result = trend_weight(date(2025, 1, 10), samples)
        assert result.value == pytest.approx(80.0)
        assert not result.is_interpolated
        assert result.confidence_level == ConfidenceLevel.HIGH

    def test_smooths_toward_recent(self) -> None:
        """Trend lies between the readings and closer to the newest one."""
        samples = [
            MetricSample(date(2025, 1, 1), weight_kg=82.0),
            MetricSample(date(2025, 1, 10), weight_kg=80.0),
        ]
        result = trend_weight(date(2025, 1, 10), samples)
        assert 80.0 < result.value < 81.0
        assert result.is_interpolated

    def test_matches_weighted_mean(self) -> None:
        samples = [
            MetricSample(date(2025, 1, 1), weight_kg=82.0),
            MetricSample(date(2025, 1, 8), weight_kg=80.0),
        ]
        result = trend_weight(date(2025, 1, 8), samples)
        w_old, w_new = math.exp(-1), 1.0
        expected = (w_old * 82.0 + w_new * 80.0) / (w_old + w_new)
        assert result.value == pytest.approx(expected)

    def test_ignores_future_readings(self) -> None:
        samples = [
            MetricSample(date(2025, 1, 1), weight_kg=80.0),
            MetricSample(date(2025, 1, 20), weight_kg=70.0),
        ]
        result = trend_weight(date(2025, 1, 5), samples)
        assert result.value == pytest.approx(80.0)

    def test_ignores_readings_outside_lookback(self) -> None:
        samples = [
            MetricSample(date(2024, 11, 1), weight_kg=95.0),
            MetricSample(date(2025, 1, 1), weight_kg=80.0),
        ]
        result = trend_weight(date(2025, 1, 1), samples)
        assert result.value == pytest.approx(80.0)

    def test_falls_back_to_raw_estimate(self) -> None:
        """With no reading in the window, the raw held value is returned."""
        samples = [MetricSample(date(2025, 1, 1), weight_kg=80.0)]
        result = trend_weight(date(2025, 3, 1), samples)
        assert result.value == pytest.approx(80.0)
        assert result.is_last_known
        assert result.confidence_level == ConfidenceLevel.LOW

    def test_before_first_reading_falls_back(self) -> None:
        samples = [MetricSample(date(2025, 1, 10), weight_kg=80.0)]
        result = trend_weight(date(2025, 1, 5), samples)
        assert result.value == pytest.approx(80.0)
        assert result.is_last_known

    def test_stale_trend_is_low(self) -> None:
        """Newest reading more than four half-lives old drops to LOW."""
        samples = [MetricSample(date(2025, 1, 1), weight_kg=80.0)]
        result = trend_weight(date(2025, 1, 30), samples)
        assert not result.is_last_known
        assert result.confidence_level == ConfidenceLevel.LOW

    def test_custom_half_life(self) -> None:
        samples = [
            MetricSample(date(2025, 1, 1), weight_kg=82.0),
            MetricSample(date(2025, 1, 10), weight_kg=80.0),
        ]
        short = trend_weight(date(2025, 1, 10), samples, TrendConfig(half_life_days=1.0))
        long = trend_weight(date(2025, 1, 10), samples, TrendConfig(half_life_days=30.0))
        assert short.value < long.value


class TestTrendConfidence:
    """Tests for trend_confidence."""

    def test_fresh(self) -> None:
        assert trend_confidence(0) == ConfidenceLevel.HIGH

    def test_week_old(self) -> None:
        assert trend_confidence(10) == ConfidenceLevel.MEDIUM

    def test_past_stale_threshold(self) -> None:
        assert trend_confidence(29) == ConfidenceLevel.LOW


class TestTrendSeries:
    """Tests for trend_series."""

    def test_matches_pointwise(self) -> None:
        samples = [
            MetricSample(date(2025, 1, 1), weight_kg=82.0),
            MetricSample(date(2025, 1, 4), weight_kg=81.0),
            MetricSample(date(2025, 1, 9), weight_kg=80.5),
        ]
        dates = [date(2025, 1, 1) + timedelta(days=i) for i in range(12)]
        series = trend_series(samples, dates)
        assert len(series) == len(dates)
        for on, result in zip(dates, series):
            assert result == trend_weight(on, samples)

    def test_empty_samples(self) -> None:
        assert trend_series([], [date(2025, 1, 1)]) == [None]


class TestDaterange:
    """Tests for daterange."""

    def test_inclusive(self) -> None:
        dates = daterange(date(2025, 1, 1), date(2025, 1, 3))
        assert dates == [date(2025, 1, 1), date(2025, 1, 2), date(2025, 1, 3)]

    def test_step(self) -> None:
        dates = daterange(date(2025, 1, 1), date(2025, 1, 10), step_days=3)
        assert dates == [date(2025, 1, 1), date(2025, 1, 4), date(2025, 1, 7), date(2025, 1, 10)]

    def test_invalid_step(self) -> None:
        with pytest.raises(ValueError):
            daterange(date(2025, 1, 1), date(2025, 1, 2), step_days=0)
