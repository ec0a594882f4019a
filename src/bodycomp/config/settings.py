"""Engine settings and configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from bodycomp.models import Sex

# (value, sub-score) points; np.interp holds the end scores flat beyond them.
DEFAULT_FFMI_CURVES: dict[Sex, list[tuple[float, float]]] = {
    Sex.MALE: [
        (14.0, 0.0),
        (17.0, 35.0),
        (20.0, 90.0),
        (21.5, 100.0),
        (23.0, 90.0),
        (26.0, 60.0),
        (30.0, 0.0),
    ],
    Sex.FEMALE: [
        (11.0, 0.0),
        (13.0, 40.0),
        (14.0, 90.0),
        (15.5, 100.0),
        (17.0, 90.0),
        (20.0, 60.0),
        (24.0, 0.0),
    ],
}

DEFAULT_BODY_FAT_CURVES: dict[Sex, list[tuple[float, float]]] = {
    Sex.MALE: [
        (3.0, 0.0),
        (6.0, 70.0),
        (8.0, 90.0),
        (10.0, 100.0),
        (12.0, 90.0),
        (15.0, 70.0),
        (20.0, 45.0),
        (25.0, 25.0),
        (30.0, 10.0),
        (35.0, 0.0),
    ],
    Sex.FEMALE: [
        (10.0, 0.0),
        (13.0, 60.0),
        (16.0, 90.0),
        (18.0, 100.0),
        (20.0, 90.0),
        (23.0, 72.0),
        (28.0, 45.0),
        (33.0, 25.0),
        (38.0, 10.0),
        (45.0, 0.0),
    ],
}

# (minimum score, tagline), highest band first
DEFAULT_TAGLINE_BANDS: list[tuple[int, str]] = [
    (90, "Elite condition"),
    (70, "Strong progress"),
    (40, "Building momentum"),
    (0, "Needs focus"),
]

# (minimum age, points added to the final score), highest age first
DEFAULT_AGE_ADJUSTMENTS: list[tuple[int, float]] = [
    (55, 4.0),
    (40, 2.0),
]


def _default_config_dir() -> Path:
    """Return the default configuration directory."""
    return Path.home() / ".bodycomp"


def _default_config_path() -> Path:
    return _default_config_dir() / "config.yaml"


@dataclass
class InterpolationConfig:
    """Confidence banding for interpolated and held values."""

    high_confidence_days: int = 7
    medium_confidence_days: int = 30


@dataclass
class TrendConfig:
    """Trend weight smoothing."""

    half_life_days: float = 7.0
    lookback_days: int = 30
    stale_multiplier: float = 4.0  # x half_life_days before confidence drops to LOW


@dataclass
class ScoringConfig:
    """Body Score normalization curves and weights."""

    ffmi_weight: float = 0.5
    body_fat_weight: float = 0.5
    ffmi_curves: dict[Sex, list[tuple[float, float]]] = field(
        default_factory=lambda: {sex: list(points) for sex, points in DEFAULT_FFMI_CURVES.items()}
    )
    body_fat_curves: dict[Sex, list[tuple[float, float]]] = field(
        default_factory=lambda: {
            sex: list(points) for sex, points in DEFAULT_BODY_FAT_CURVES.items()
        }
    )
    tagline_bands: list[tuple[int, str]] = field(
        default_factory=lambda: list(DEFAULT_TAGLINE_BANDS)
    )
    age_adjustments: list[tuple[int, float]] = field(
        default_factory=lambda: list(DEFAULT_AGE_ADJUSTMENTS)
    )

    def __post_init__(self) -> None:
        if self.ffmi_weight < 0 or self.body_fat_weight < 0:
            raise ValueError("Score weights must be non-negative")
        if self.ffmi_weight + self.body_fat_weight <= 0:
            raise ValueError("At least one score weight must be positive")


@dataclass
class CacheConfig:
    """Estimation cache sizing."""

    capacity: int = 1024


@dataclass
class Settings:
    """Main engine settings."""

    interpolation: InterpolationConfig = field(default_factory=InterpolationConfig)
    trend: TrendConfig = field(default_factory=TrendConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from YAML file or return defaults.

        Args:
            config_path: Path to config.yaml. If None, uses ~/.bodycomp/config.yaml

        Returns:
            Settings instance
        """
        if config_path is None:
            config_path = _default_config_path()

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        """Build settings from a parsed YAML mapping, keeping defaults for gaps."""
        settings = cls()

        if "interpolation" in data:
            interp_data = data["interpolation"]
            if "high_confidence_days" in interp_data:
                settings.interpolation.high_confidence_days = int(
                    interp_data["high_confidence_days"]
                )
            if "medium_confidence_days" in interp_data:
                settings.interpolation.medium_confidence_days = int(
                    interp_data["medium_confidence_days"]
                )

        if "trend" in data:
            trend_data = data["trend"]
            if "half_life_days" in trend_data:
                settings.trend.half_life_days = float(trend_data["half_life_days"])
            if "lookback_days" in trend_data:
                settings.trend.lookback_days = int(trend_data["lookback_days"])
            if "stale_multiplier" in trend_data:
                settings.trend.stale_multiplier = float(trend_data["stale_multiplier"])

        if "scoring" in data:
            score_data = data["scoring"]
            if "ffmi_weight" in score_data:
                settings.scoring.ffmi_weight = float(score_data["ffmi_weight"])
            if "body_fat_weight" in score_data:
                settings.scoring.body_fat_weight = float(score_data["body_fat_weight"])
            if "ffmi_curves" in score_data:
                settings.scoring.ffmi_curves.update(_parse_curves(score_data["ffmi_curves"]))
            if "body_fat_curves" in score_data:
                settings.scoring.body_fat_curves.update(
                    _parse_curves(score_data["body_fat_curves"])
                )
            if "tagline_bands" in score_data:
                settings.scoring.tagline_bands = [
                    (int(threshold), str(text))
                    for threshold, text in score_data["tagline_bands"]
                ]
            if "age_adjustments" in score_data:
                settings.scoring.age_adjustments = [
                    (int(min_age), float(points))
                    for min_age, points in score_data["age_adjustments"]
                ]
            settings.scoring.__post_init__()

        if "cache" in data:
            cache_data = data["cache"]
            if "capacity" in cache_data:
                settings.cache.capacity = int(cache_data["capacity"])

        return settings

    def to_dict(self) -> dict:
        """Plain mapping suitable for YAML or JSON output."""
        return {
            "interpolation": {
                "high_confidence_days": self.interpolation.high_confidence_days,
                "medium_confidence_days": self.interpolation.medium_confidence_days,
            },
            "trend": {
                "half_life_days": self.trend.half_life_days,
                "lookback_days": self.trend.lookback_days,
                "stale_multiplier": self.trend.stale_multiplier,
            },
            "scoring": {
                "ffmi_weight": self.scoring.ffmi_weight,
                "body_fat_weight": self.scoring.body_fat_weight,
                "ffmi_curves": _dump_curves(self.scoring.ffmi_curves),
                "body_fat_curves": _dump_curves(self.scoring.body_fat_curves),
                "tagline_bands": [list(band) for band in self.scoring.tagline_bands],
                "age_adjustments": [list(adj) for adj in self.scoring.age_adjustments],
            },
            "cache": {
                "capacity": self.cache.capacity,
            },
        }

    def save(self, config_path: Optional[Path] = None) -> Path:
        """Save current settings to YAML file.

        Args:
            config_path: Path to save config.yaml. If None, uses ~/.bodycomp/config.yaml

        Returns:
            The path written
        """
        if config_path is None:
            config_path = _default_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

        return config_path


def _parse_curves(raw: dict) -> dict[Sex, list[tuple[float, float]]]:
    curves: dict[Sex, list[tuple[float, float]]] = {}
    for sex_name, points in raw.items():
        sex = Sex(str(sex_name).lower())
        parsed = sorted((float(x), float(y)) for x, y in points)
        if len(parsed) < 2:
            raise ValueError(f"Curve for {sex.value} needs at least two points")
        curves[sex] = parsed
    return curves


def _dump_curves(curves: dict[Sex, list[tuple[float, float]]]) -> dict[str, list[list[float]]]:
    return {sex.value: [list(point) for point in points] for sex, points in curves.items()}
