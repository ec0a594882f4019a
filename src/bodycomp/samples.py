"""Load body-metric samples from CSV files.

This is the stand-in for the host's sample store: it hands the engine a
date-ascending series with at most one sample per date.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Sequence

import pandas as pd

from bodycomp.models import MetricSample, MetricSource

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["date"]
VALUE_COLUMNS = ["weight_kg", "body_fat_percent"]
OPTIONAL_COLUMNS = ["source", "integration_id"]


def _clean(value: Any) -> Any:
    """Convert pandas NaN/NaT to None."""
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def _parse_date(value: Any) -> date:
    if isinstance(value, date):
        # datetime is a date subclass; drop the time of day
        return value if type(value) is date else value.date()
    return pd.Timestamp(value).date()


def _parse_source(value: Any) -> MetricSource:
    if value is None:
        return MetricSource.MANUAL
    if isinstance(value, MetricSource):
        return value
    try:
        return MetricSource(str(value).strip().lower())
    except ValueError:
        valid = [s.value for s in MetricSource]
        raise ValueError(f"source must be one of {valid}, got '{value}'") from None


def sample_from_record(record: Mapping[str, Any]) -> MetricSample:
    """
    Build a sample from a mapping with CSV-style keys.

    Args:
        record: Keys date, weight_kg, body_fat_percent, source, integration_id

    Returns:
        MetricSample
    """
    weight = _clean(record.get("weight_kg"))
    body_fat = _clean(record.get("body_fat_percent"))
    integration_id = _clean(record.get("integration_id"))
    raw_source = _clean(record.get("source"))
    if raw_source is None and integration_id is not None:
        source = MetricSource.INTEGRATION
    else:
        source = _parse_source(raw_source)

    return MetricSample(
        date=_parse_date(record["date"]),
        weight_kg=float(weight) if weight is not None else None,
        body_fat_percent=float(body_fat) if body_fat is not None else None,
        source=source,
        integration_id=str(integration_id) if integration_id is not None else None,
    )


def normalize_samples(samples: Iterable[MetricSample]) -> list[MetricSample]:
    """
    Sort samples by date and keep one per date (last write wins).

    Args:
        samples: Samples in ingestion order

    Returns:
        Date-ascending samples, one per date
    """
    by_date: dict[date, MetricSample] = {}
    for sample in samples:
        by_date[sample.date] = sample
    return [by_date[d] for d in sorted(by_date)]


def samples_from_records(records: Iterable[Mapping[str, Any]]) -> list[MetricSample]:
    """Build a normalized series from mappings (e.g. parsed JSON rows)."""
    return normalize_samples(sample_from_record(record) for record in records)


def samples_from_dataframe(df: pd.DataFrame) -> list[MetricSample]:
    """Build a normalized series from a DataFrame with CSV-style columns.

    Raises:
        ValueError: If the date column or both value columns are missing
    """
    missing = set(REQUIRED_COLUMNS) - set(df.columns)
    if missing:
        raise ValueError(
            f"Missing required columns: {missing}. "
            f"Required columns are: {REQUIRED_COLUMNS}"
        )
    if not set(VALUE_COLUMNS) & set(df.columns):
        raise ValueError(f"At least one of {VALUE_COLUMNS} must be present")

    raw = [sample_from_record(row) for row in df.to_dict(orient="records")]
    samples = normalize_samples(raw)
    if len(samples) < len(raw):
        logger.debug("Dropped %d duplicate-date samples", len(raw) - len(samples))
    return samples


def load_samples(csv_path: Path) -> list[MetricSample]:
    """Load samples from a CSV file.

    CSV format:
        date,weight_kg,body_fat_percent,source,integration_id
        2025-01-01,80.2,18.5,manual,
        2025-01-04,79.8,,health_import,

    Args:
        csv_path: Path to the CSV file

    Returns:
        Date-ascending samples, one per date

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If required columns are missing or a row is invalid
    """
    if not csv_path.exists():
        raise FileNotFoundError(f"Sample file '{csv_path}' not found")

    df = pd.read_csv(csv_path, dtype={"source": str, "integration_id": str})
    samples = samples_from_dataframe(df)
    logger.debug("Loaded %d samples from %s", len(samples), csv_path)
    return samples


def latest_complete_sample(samples: Sequence[MetricSample]) -> Optional[MetricSample]:
    """Most recent sample with both weight and body fat logged."""
    for sample in reversed(samples):
        if sample.weight_kg is not None and sample.body_fat_percent is not None:
            return sample
    return None
