"""Per-100g nutrient level thresholds and unit conversion."""

from __future__ import annotations

import math
from typing import Any

from nutrifacts.core.models import NutrientKind, NutrientLevel

# Open Food Facts / UK FSA front-of-pack cut points, grams per 100g.
# Each entry is (low below, moderate below); anything else is high.
LEVEL_THRESHOLDS: dict[NutrientKind, tuple[float, float]] = {
    NutrientKind.FAT: (3.0, 20.0),
    NutrientKind.SATURATED_FAT: (1.5, 5.0),
    NutrientKind.SUGARS: (5.0, 12.5),
    NutrientKind.SALT: (0.3, 1.5),
}

SODIUM_TO_SALT_FACTOR = 2.5


def parse_amount(value: Any) -> float | None:
    """
    Read a nutriment amount as a float.

    Returns None for missing, boolean, non-numeric or NaN values.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(amount):
        return None
    return amount


def classify(kind: NutrientKind, amount: Any) -> NutrientLevel:
    """
    Classify a per-100g amount against the fixed thresholds.

    Boundaries are strict less-than: fat at exactly 3g is moderate.

    Args:
        kind: Nutrient being classified
        amount: Raw amount in grams; numeric strings are accepted

    Returns:
        The level, or NutrientLevel.UNKNOWN when the amount is unreadable
    """
    parsed = parse_amount(amount)
    if parsed is None:
        return NutrientLevel.UNKNOWN
    low_below, moderate_below = LEVEL_THRESHOLDS[kind]
    if parsed < low_below:
        return NutrientLevel.LOW
    if parsed < moderate_below:
        return NutrientLevel.MODERATE
    return NutrientLevel.HIGH


def sodium_to_salt(sodium_grams: float) -> float:
    return sodium_grams * SODIUM_TO_SALT_FACTOR
