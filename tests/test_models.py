"""Tests for core data models."""

import pytest

from nutrifacts.core.models import (
    ExtractionTrace,
    NutrientKind,
    NutrientLevel,
    NutrientLevelEntry,
    NutritionFactRow,
)
from nutrifacts.export import dataclass_to_dict


def test_entries_are_immutable() -> None:
    entry = NutrientLevelEntry(NutrientKind.FAT, NutrientLevel.LOW, "(1%)")
    with pytest.raises(Exception):  # FrozenInstanceError
        entry.level = NutrientLevel.HIGH

    row = NutritionFactRow("Fat", "1 g")
    with pytest.raises(Exception):  # FrozenInstanceError
        row.value = "2 g"


def test_nutrient_kind_values_are_display_names() -> None:
    assert [kind.value for kind in NutrientKind] == ["Fat", "Saturated fat", "Sugars", "Salt"]


def test_level_enum_compares_to_strings() -> None:
    assert NutrientLevel.MODERATE == "moderate"
    assert NutrientLevel("unknown") is NutrientLevel.UNKNOWN


def test_default_trace() -> None:
    trace = ExtractionTrace()
    assert trace.steps == ()
    assert trace.method_used == "No method used"
    assert trace.result_count == 0
    assert trace.strategy is None


def test_dataclass_to_dict() -> None:
    entry = NutrientLevelEntry(NutrientKind.SATURATED_FAT, NutrientLevel.HIGH, "6g")
    trace = ExtractionTrace(steps=("a", "b"), method_used="a", result_count=1)

    assert dataclass_to_dict(entry) == {
        "nutrient": "Saturated fat",
        "level": "high",
        "value": "6g",
    }
    assert dataclass_to_dict(trace) == {
        "steps": ["a", "b"],
        "method_used": "a",
        "result_count": 1,
        "strategy": None,
    }
    assert dataclass_to_dict(None) is None
