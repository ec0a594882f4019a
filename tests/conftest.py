"""Pytest fixtures for bodycomp tests."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from bodycomp.config import Settings
from bodycomp.engine import MetricsEngine
from bodycomp.models import BodyScoreInput, MetricSample, MetricSource, Sex, UserProfile


@pytest.fixture
def two_point_samples() -> list[MetricSample]:
    """Weight logged on Jan 1 and Jan 15 only."""
    return [
        MetricSample(date(2025, 1, 1), weight_kg=80.0),
        MetricSample(date(2025, 1, 15), weight_kg=78.0),
    ]


@pytest.fixture
def mixed_samples() -> list[MetricSample]:
    """Weight and body fat logged on different days."""
    return [
        MetricSample(date(2025, 3, 1), weight_kg=85.0, body_fat_percent=20.0),
        MetricSample(date(2025, 3, 4), weight_kg=84.6),
        MetricSample(date(2025, 3, 8), weight_kg=84.1, source=MetricSource.HEALTH_IMPORT),
        MetricSample(date(2025, 3, 11), body_fat_percent=19.0),
        MetricSample(date(2025, 3, 15), weight_kg=83.5, body_fat_percent=18.6),
    ]


@pytest.fixture
def male_profile() -> UserProfile:
    return UserProfile(sex=Sex.MALE, birth_year=1990, height_cm=180.0)


@pytest.fixture
def ready_input() -> BodyScoreInput:
    """Complete input for a 35-year-old male on 2025-06-01."""
    return BodyScoreInput(
        sex=Sex.MALE,
        birth_year=1990,
        height_cm=180.0,
        weight_kg=90.0,
        body_fat_percent=12.0,
    )


@pytest.fixture
def engine() -> MetricsEngine:
    return MetricsEngine(Settings())


@pytest.fixture
def samples_csv(tmp_path: Path) -> Path:
    """CSV with weight and body fat on different days."""
    path = tmp_path / "samples.csv"
    path.write_text(
        "date,weight_kg,body_fat_percent,source,integration_id\n"
        "2025-03-01,85.0,20.0,manual,\n"
        "2025-03-04,84.6,,health_import,\n"
        "2025-03-08,84.1,,integration,scale-1\n"
        "2025-03-11,,19.0,,\n"
        "2025-03-15,83.5,18.6,manual,\n"
    )
    return path
