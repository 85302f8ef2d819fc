"""Tests for threshold classification and sodium conversion."""

import pytest

from nutrifacts.core.models import NutrientKind, NutrientLevel
from nutrifacts.core.thresholds import classify, parse_amount, sodium_to_salt


@pytest.mark.parametrize(
    "kind, amount, expected",
    [
        (NutrientKind.FAT, 2.999, NutrientLevel.LOW),
        (NutrientKind.FAT, 3, NutrientLevel.MODERATE),
        (NutrientKind.FAT, 19.99, NutrientLevel.MODERATE),
        (NutrientKind.FAT, 20, NutrientLevel.HIGH),
        (NutrientKind.SATURATED_FAT, 1.49, NutrientLevel.LOW),
        (NutrientKind.SATURATED_FAT, 1.5, NutrientLevel.MODERATE),
        (NutrientKind.SATURATED_FAT, 5, NutrientLevel.HIGH),
        (NutrientKind.SUGARS, 4.9, NutrientLevel.LOW),
        (NutrientKind.SUGARS, 5, NutrientLevel.MODERATE),
        (NutrientKind.SUGARS, 12.5, NutrientLevel.HIGH),
        (NutrientKind.SALT, 0.29, NutrientLevel.LOW),
        (NutrientKind.SALT, 0.3, NutrientLevel.MODERATE),
        (NutrientKind.SALT, 1.5, NutrientLevel.HIGH),
    ],
)
def test_classify_boundaries_are_strict(
    kind: NutrientKind, amount: float, expected: NutrientLevel
) -> None:
    assert classify(kind, amount) == expected


def test_classify_unreadable_amount_is_unknown() -> None:
    assert classify(NutrientKind.FAT, None) == NutrientLevel.UNKNOWN
    assert classify(NutrientKind.FAT, float("nan")) == NutrientLevel.UNKNOWN
    assert classify(NutrientKind.SUGARS, "lots") == NutrientLevel.UNKNOWN
    assert classify(NutrientKind.SALT, True) == NutrientLevel.UNKNOWN


def test_classify_accepts_numeric_strings() -> None:
    assert classify(NutrientKind.SUGARS, "2.5") == NutrientLevel.LOW


def test_parse_amount() -> None:
    assert parse_amount("0.25") == 0.25
    assert parse_amount(7) == 7.0
    assert parse_amount("") is None
    assert parse_amount([1]) is None


def test_sodium_to_salt() -> None:
    assert sodium_to_salt(1.0) == 2.5
    assert f"{sodium_to_salt(1.0):.3f}g" == "2.500g"
    assert sodium_to_salt(0.0) == 0.0
