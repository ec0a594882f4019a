"""Body-metric interpolation and body-composition scoring engine."""

from bodycomp.cache import EstimationCache, series_digest
from bodycomp.engine import ChartMetric, ChartPoint, MetricsEngine
from bodycomp.ffmi import ffmi, ffmi_status, lean_mass_kg
from bodycomp.interpolation import (
    InterpolationContext,
    build_context,
    confidence_for_gap,
    estimate_ffmi,
    estimate_lean_mass,
    resolve_metric,
)
from bodycomp.models import (
    BodyScoreContext,
    BodyScoreInput,
    BodyScoreResult,
    ConfidenceLevel,
    InterpolatedMetric,
    MetricKind,
    MetricSample,
    MetricSource,
    ResolutionStatus,
    ResolvedMetric,
    ScoreCalculation,
    ScoreError,
    Sex,
    TargetRange,
    UserProfile,
)
from bodycomp.scoring import BodyScoreCalculator, calculate_score
from bodycomp.trend import trend_series, trend_weight

__version__ = "0.1.0"

__all__ = [
    "BodyScoreCalculator",
    "BodyScoreContext",
    "BodyScoreInput",
    "BodyScoreResult",
    "ChartMetric",
    "ChartPoint",
    "ConfidenceLevel",
    "EstimationCache",
    "InterpolatedMetric",
    "InterpolationContext",
    "MetricKind",
    "MetricSample",
    "MetricSource",
    "MetricsEngine",
    "ResolutionStatus",
    "ResolvedMetric",
    "ScoreCalculation",
    "ScoreError",
    "Sex",
    "TargetRange",
    "UserProfile",
    "build_context",
    "calculate_score",
    "confidence_for_gap",
    "estimate_ffmi",
    "estimate_lean_mass",
    "ffmi",
    "ffmi_status",
    "lean_mass_kg",
    "resolve_metric",
    "series_digest",
    "trend_series",
    "trend_weight",
]
