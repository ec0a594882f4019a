"""Body Score calculation.

The Body Score combines two sub-scores, each in [0, 100]:

- FFMI sub-score: how close height-normalized lean mass is to the
  sex-specific ideal band;
- body-fat sub-score: how close body fat is to the sex-specific ideal band.

Each sub-score comes from a piecewise-linear curve of (value, score) points
that peaks at 100 on the ideal-band midpoint and falls to 0 well outside
the band. The weighted sum, plus an optional age adjustment, is rounded half
up and clamped to [0, 100]. A tagline is chosen from ordered score bands.

All curves, weights, bands and age adjustments come from ScoringConfig so
the product can tune them without code changes. No clock reads: the age is
taken from the calculation date passed in.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np

from bodycomp.config import ScoringConfig
from bodycomp.ffmi import ffmi, ffmi_status
from bodycomp.models import (
    BodyScoreContext,
    BodyScoreResult,
    ScoreCalculation,
    ScoreError,
    Sex,
    TargetRange,
)
from bodycomp.validation import check_plausibility

# Ideal body-fat bands shown alongside the score
TARGET_BODY_FAT: dict[Sex, TargetRange] = {
    Sex.MALE: TargetRange(lower_bound=8.0, upper_bound=12.0, label="Lean"),
    Sex.FEMALE: TargetRange(lower_bound=16.0, upper_bound=20.0, label="Lean"),
}

# Body fat % -> leanness percentile in the general population
LEAN_PERCENTILE_POINTS: dict[Sex, list[tuple[float, float]]] = {
    Sex.MALE: [
        (8, 99), (10, 97), (12, 94), (14, 90), (16, 82), (18, 75),
        (20, 65), (22, 55), (25, 40), (28, 25), (32, 10), (36, 3),
    ],
    Sex.FEMALE: [
        (16, 99), (18, 97), (20, 94), (22, 90), (24, 82), (26, 75),
        (28, 65), (30, 55), (34, 40), (38, 25), (42, 10), (46, 3),
    ],
}


def interpolate_curve(value: float, points: Sequence[tuple[float, float]]) -> float:
    """
    Evaluate a piecewise-linear curve, holding the end values flat outside it.

    Args:
        value: Input value
        points: (x, y) points, any order

    Returns:
        Interpolated y

    Example:
        >>> interpolate_curve(15, [(10, 0), (20, 100)])
        50.0
    """
    ordered = sorted(points)
    xs = np.array([p[0] for p in ordered], dtype=np.float64)
    ys = np.array([p[1] for p in ordered], dtype=np.float64)
    return float(np.interp(value, xs, ys))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def age_adjustment(age: Optional[int], config: ScoringConfig) -> float:
    """Points added to the score for an age; 0 when no band applies."""
    if age is None:
        return 0.0
    for min_age, points in sorted(config.age_adjustments, reverse=True):
        if age >= min_age:
            return points
    return 0.0


def lean_percentile_age_offset(age: Optional[int]) -> float:
    """Shift of the leanness percentile for younger and older populations."""
    if age is None:
        return 0.0
    if age < 25:
        return 4.0
    if age < 40:
        return 0.0
    if age < 55:
        return -3.0
    return -6.0


def lean_percentile(sex: Sex, age: Optional[int], body_fat_percent: float) -> float:
    """
    Estimate where a body-fat level sits in the population, 1-99.

    Args:
        sex: Biological sex
        age: Age in years (None = no adjustment)
        body_fat_percent: Body fat percentage

    Returns:
        Percentile clamped to [1, 99]
    """
    base = interpolate_curve(body_fat_percent, LEAN_PERCENTILE_POINTS[sex])
    return clamp(base + lean_percentile_age_offset(age), 1.0, 99.0)


def status_tagline(score: int, config: Optional[ScoringConfig] = None) -> str:
    """Pick the tagline for the highest band whose threshold the score reaches."""
    config = config or ScoringConfig()
    bands = sorted(config.tagline_bands, key=lambda band: band[0], reverse=True)
    for threshold, text in bands:
        if score >= threshold:
            return text
    return bands[-1][1]


class BodyScoreCalculator:
    """Scores a BodyScoreInput snapshot as of a date."""

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or ScoringConfig()

    def ffmi_subscore(self, value: float, sex: Sex) -> float:
        return clamp(interpolate_curve(value, self.config.ffmi_curves[sex]), 0.0, 100.0)

    def body_fat_subscore(self, body_fat_percent: float, sex: Sex) -> float:
        return clamp(
            interpolate_curve(body_fat_percent, self.config.body_fat_curves[sex]), 0.0, 100.0
        )

    def combine(self, ffmi_score: float, body_fat_score: float) -> float:
        """Weighted mean of the two sub-scores."""
        total_weight = self.config.ffmi_weight + self.config.body_fat_weight
        return (
            self.config.ffmi_weight * ffmi_score
            + self.config.body_fat_weight * body_fat_score
        ) / total_weight

    def calculate_score(self, context: BodyScoreContext) -> ScoreCalculation:
        """
        Calculate the Body Score for one input and date.

        Args:
            context: Input snapshot and calculation date

        Returns:
            ScoreCalculation with a result, or with
            error=ScoreError.INCOMPLETE_INPUT when the input is not ready
        """
        score_input = context.input
        if not score_input.is_ready_for_calculation:
            return ScoreCalculation(
                success=False,
                error=ScoreError.INCOMPLETE_INPUT,
                message=ScoreError.INCOMPLETE_INPUT.description,
            )

        # Readiness guarantees every field below is set
        sex: Sex = score_input.sex  # type: ignore
        weight_kg: float = score_input.weight_kg  # type: ignore
        height_cm: float = score_input.height_cm  # type: ignore
        body_fat: float = score_input.body_fat_percent  # type: ignore
        age = score_input.age_on(context.calculation_date)

        ffmi_value = ffmi(weight_kg, body_fat, height_cm)
        aggregate = self.combine(
            self.ffmi_subscore(ffmi_value, sex),
            self.body_fat_subscore(body_fat, sex),
        )
        aggregate += age_adjustment(age, self.config)
        final_score = int(clamp(round_half_up(aggregate), 0, 100))

        result = BodyScoreResult(
            score=final_score,
            ffmi=round(ffmi_value, 1),
            ffmi_status=ffmi_status(ffmi_value, sex),
            status_tagline=status_tagline(final_score, self.config),
            lean_percentile=round(lean_percentile(sex, age, body_fat), 1),
            target_body_fat=TARGET_BODY_FAT[sex],
        )
        return ScoreCalculation(
            success=True,
            result=result,
            message=f"Body Score {final_score}: {result.status_tagline}",
            warnings=tuple(check_plausibility(score_input)),
        )


def calculate_score(
    context: BodyScoreContext, config: Optional[ScoringConfig] = None
) -> ScoreCalculation:
    """Convenience wrapper around BodyScoreCalculator.calculate_score."""
    return BodyScoreCalculator(config).calculate_score(context)
