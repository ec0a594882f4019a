"""Unit conversion for hosts that accept imperial input.

The engine works in kilograms and centimeters only; convert at the boundary.
"""

from __future__ import annotations

KG_PER_LB = 0.45359237
CM_PER_INCH = 2.54


def lbs_to_kg(lbs: float) -> float:
    return lbs * KG_PER_LB


def kg_to_lbs(kg: float) -> float:
    return kg / KG_PER_LB


def inches_to_cm(inches: float) -> float:
    return inches * CM_PER_INCH


def cm_to_inches(cm: float) -> float:
    return cm / CM_PER_INCH


def feet_inches_to_cm(feet: int, inches: float) -> float:
    """Convert a feet + inches height to centimeters."""
    return inches_to_cm(feet * 12 + inches)


def cm_to_feet_inches(cm: float) -> tuple[int, float]:
    """
    Split a height into whole feet and remaining inches.

    Example:
        >>> cm_to_feet_inches(180)
        (5, 10.87)
    """
    total_inches = cm_to_inches(cm)
    feet = int(total_inches // 12)
    return feet, round(total_inches - feet * 12, 2)


def weight_to_kg(value: float, unit: str) -> float:
    """Convert a weight in "kg" or "lbs" to kilograms."""
    unit = unit.lower()
    if unit in ("kg", "kgs", "kilograms"):
        return value
    if unit in ("lb", "lbs", "pounds"):
        return lbs_to_kg(value)
    raise ValueError(f"Unknown weight unit: {unit}")


def height_to_cm(value: float, unit: str) -> float:
    """Convert a height in "cm" or "in" to centimeters."""
    unit = unit.lower()
    if unit in ("cm", "centimeters"):
        return value
    if unit in ("in", "inches"):
        return inches_to_cm(value)
    raise ValueError(f"Unknown height unit: {unit}")
