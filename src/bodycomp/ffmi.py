"""Fat-Free Mass Index calculation.

FFMI normalizes lean mass by height squared, then adds a linear correction
so that values are comparable across heights:

    lean  = weight_kg × (1 - body_fat% / 100)
    FFMI  = lean / height_m² + 6.1 × (1.8 - height_m)

The correction is zero at 1.8 m and negative above it. It is never clamped.
"""

from __future__ import annotations

from bodycomp.models import Sex

# Height (m) at which the normalization correction is zero
REFERENCE_HEIGHT_M = 1.8
HEIGHT_CORRECTION_FACTOR = 6.1

# Lower bounds of each status band, highest first; below the last bound is "Developing"
FFMI_STATUS_BANDS: dict[Sex, list[tuple[float, str]]] = {
    Sex.MALE: [
        (25.0, "Elite"),
        (22.5, "Advanced"),
        (20.0, "Athletic"),
        (18.0, "Solid base"),
    ],
    Sex.FEMALE: [
        (19.0, "Elite"),
        (17.0, "Advanced"),
        (15.0, "Athletic"),
        (13.0, "Solid base"),
    ],
}
DEVELOPING_STATUS = "Developing"


def lean_mass_kg(weight_kg: float, body_fat_percent: float) -> float:
    """Fat-free mass in kg."""
    return weight_kg * (1 - body_fat_percent / 100)


def ffmi(weight_kg: float, body_fat_percent: float, height_cm: float) -> float:
    """
    Calculate height-normalized Fat-Free Mass Index.

    Args:
        weight_kg: Body weight in kilograms
        body_fat_percent: Body fat percentage (0-100)
        height_cm: Height in centimeters (> 0)

    Returns:
        FFMI in kg/m²

    Example:
        >>> round(ffmi(90, 12, 180), 2)
        24.44
    """
    height_m = height_cm / 100
    raw_ffmi = lean_mass_kg(weight_kg, body_fat_percent) / (height_m * height_m)
    return raw_ffmi + HEIGHT_CORRECTION_FACTOR * (REFERENCE_HEIGHT_M - height_m)


def ffmi_status(value: float, sex: Sex) -> str:
    """
    Bucket an FFMI value into a qualitative label.

    Bands are half-open [lower, upper) so every value maps to exactly one label.

    Args:
        value: FFMI in kg/m²
        sex: Biological sex (female bands are lower-valued)

    Returns:
        One of "Developing", "Solid base", "Athletic", "Advanced", "Elite"
    """
    for lower_bound, label in FFMI_STATUS_BANDS[sex]:
        if value >= lower_bound:
            return label
    return DEVELOPING_STATUS
