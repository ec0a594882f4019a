"""Plausibility checks for score inputs.

The engine scores out-of-range inputs rather than rejecting them; these
checks only report what looks implausible so the host can decide.
"""

from __future__ import annotations

from bodycomp.models import BodyScoreInput

WEIGHT_RANGE_KG = (20.0, 500.0)
HEIGHT_RANGE_CM = (90.0, 250.0)
BODY_FAT_RANGE = (3.0, 60.0)


def _outside(value: float, bounds: tuple[float, float]) -> bool:
    return not (bounds[0] <= value <= bounds[1])


def check_plausibility(score_input: BodyScoreInput) -> list[str]:
    """
    List implausible values in a score input.

    Args:
        score_input: Input to check; missing fields are ignored

    Returns:
        Human-readable warnings (empty if everything looks plausible)
    """
    warnings: list[str] = []

    if score_input.weight_kg is not None and _outside(score_input.weight_kg, WEIGHT_RANGE_KG):
        warnings.append(
            f"Weight {score_input.weight_kg:.1f} kg is outside "
            f"{WEIGHT_RANGE_KG[0]:.0f}-{WEIGHT_RANGE_KG[1]:.0f} kg"
        )
    if score_input.height_cm is not None and _outside(score_input.height_cm, HEIGHT_RANGE_CM):
        warnings.append(
            f"Height {score_input.height_cm:.1f} cm is outside "
            f"{HEIGHT_RANGE_CM[0]:.0f}-{HEIGHT_RANGE_CM[1]:.0f} cm"
        )
    if score_input.body_fat_percent is not None and _outside(
        score_input.body_fat_percent, BODY_FAT_RANGE
    ):
        warnings.append(
            f"Body fat {score_input.body_fat_percent:.1f}% is outside "
            f"{BODY_FAT_RANGE[0]:.0f}-{BODY_FAT_RANGE[1]:.0f}%"
        )

    return warnings
