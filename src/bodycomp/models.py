"""Data models for body-metric samples, estimates and scores."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional


class MetricSource(Enum):
    """Where a sample came from."""

    MANUAL = "manual"
    HEALTH_IMPORT = "health_import"
    INTEGRATION = "integration"


class MetricKind(Enum):
    """Which value of a sample forms a series."""

    WEIGHT = "weight"
    BODY_FAT = "body_fat"


class ConfidenceLevel(Enum):
    """How close an estimate is, in time, to a real measurement."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Ordering key, 0 = most confident."""
        return _CONFIDENCE_ORDER.index(self)

    @classmethod
    def lowest(
        cls, *levels: Optional["ConfidenceLevel"]
    ) -> Optional["ConfidenceLevel"]:
        """Return the least confident of the given levels, ignoring None."""
        present = [level for level in levels if level is not None]
        if not present:
            return None
        return max(present, key=lambda level: level.rank)


_CONFIDENCE_ORDER = (ConfidenceLevel.HIGH, ConfidenceLevel.MEDIUM, ConfidenceLevel.LOW)


class Sex(Enum):
    """Biological sex for sex-specific reference bands."""

    MALE = "male"
    FEMALE = "female"


@dataclass(frozen=True)
class MetricSample:
    """One directly measured observation."""

    date: date
    weight_kg: Optional[float] = None
    body_fat_percent: Optional[float] = None
    source: MetricSource = MetricSource.MANUAL
    integration_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.body_fat_percent is not None and not (
            0 <= self.body_fat_percent <= 100
        ):
            raise ValueError(
                f"body_fat_percent must be between 0 and 100, got {self.body_fat_percent}"
            )
        if self.integration_id is not None and self.source != MetricSource.INTEGRATION:
            raise ValueError("integration_id is only valid for integration samples")

    def value_for(self, kind: MetricKind) -> Optional[float]:
        """Return this sample's value for a metric kind (None if not logged)."""
        if kind == MetricKind.WEIGHT:
            return self.weight_kg
        return self.body_fat_percent


@dataclass(frozen=True)
class InterpolatedMetric:
    """Best estimate of a metric on a date."""

    value: float
    is_interpolated: bool
    is_last_known: bool
    confidence_level: Optional[ConfidenceLevel] = None


class ResolutionStatus(Enum):
    """Whether a resolved value is a real measurement or a guess."""

    MEASURED = "measured"
    INTERPOLATED = "interpolated"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ResolvedMetric:
    """Tagged answer to "what is the value on this date"."""

    status: ResolutionStatus
    value: Optional[float] = None
    confidence_level: Optional[ConfidenceLevel] = None
    is_last_known: bool = False

    @property
    def is_known(self) -> bool:
        return self.status != ResolutionStatus.UNKNOWN


@dataclass(frozen=True)
class UserProfile:
    """Per-user values that do not vary by sample."""

    sex: Optional[Sex] = None
    birth_year: Optional[int] = None
    height_cm: Optional[float] = None


@dataclass(frozen=True)
class BodyScoreInput:
    """Everything needed to score one date."""

    sex: Optional[Sex] = None
    birth_year: Optional[int] = None
    height_cm: Optional[float] = None
    weight_kg: Optional[float] = None
    body_fat_percent: Optional[float] = None

    @property
    def is_ready_for_calculation(self) -> bool:
        return (
            self.sex is not None
            and self.birth_year is not None
            and self.height_cm is not None
            and self.weight_kg is not None
            and self.body_fat_percent is not None
            and math.isfinite(self.height_cm)
            and math.isfinite(self.weight_kg)
            and math.isfinite(self.body_fat_percent)
            and self.height_cm > 0
            and self.weight_kg > 0
        )

    def age_on(self, on: date) -> Optional[int]:
        """Age in whole years using year precision only."""
        if self.birth_year is None:
            return None
        return max(0, on.year - self.birth_year)


@dataclass(frozen=True)
class TargetRange:
    """Ideal body-fat band shown next to a score."""

    lower_bound: float
    upper_bound: float
    label: str


@dataclass(frozen=True)
class BodyScoreResult:
    """Output of scoring one input as of a date."""

    score: int
    ffmi: float
    ffmi_status: str
    status_tagline: str
    lean_percentile: float
    target_body_fat: TargetRange


@dataclass(frozen=True)
class BodyScoreContext:
    """Input snapshot plus the date it is scored on."""

    input: BodyScoreInput
    calculation_date: date


class ScoreError(Enum):
    """Reasons a score could not be produced."""

    INCOMPLETE_INPUT = "incomplete_input"

    @property
    def description(self) -> str:
        return "Missing required metrics to calculate Body Score."


@dataclass(frozen=True)
class ScoreCalculation:
    """Outcome of a score calculation: a result or a typed error."""

    success: bool
    result: Optional[BodyScoreResult] = None
    error: Optional[ScoreError] = None
    message: str = ""
    warnings: tuple[str, ...] = ()
