"""Nutriment key tables loaded from YAML templates, plus value formatting."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml

from nutrifacts.core.models import NUTRIENT_ORDER, NutrientKind

TEMPLATE_NAME = "nutrients.yaml"
DEFAULT_UNIT = "g"
PERCENT_SUFFIX = "_100g"
UNIT_SUFFIX = "_unit"


@dataclass(frozen=True)
class LevelField:
    nutrient: NutrientKind
    key: str


@dataclass(frozen=True)
class FactField:
    key: str
    name: str
    unit: str


def _load_yaml(path: Path | None, resource_name: str) -> dict[str, Any]:
    if path:
        file_path = path / resource_name
        if not file_path.exists():
            return {}
        with file_path.open("r", encoding="utf-8") as handle:
            return yaml.safe_load(handle) or {}

    try:
        resource = resources.files("nutrifacts.templates").joinpath(resource_name)
        with resource.open("r", encoding="utf-8") as handle:
            return yaml.safe_load(handle) or {}
    except FileNotFoundError:
        return {}


def _parse_nutrient(value: Any) -> NutrientKind | None:
    for kind in NutrientKind:
        if kind.value == value or kind.name.lower() == str(value).lower():
            return kind
    return None


def load_level_fields(templates_path: str | Path | None = None) -> list[LevelField]:
    """
    Load the nutriment key for each levelled nutrient.

    Entries are returned in the fixed nutrient order regardless of file order,
    one per nutrient; unknown nutrient names are ignored.
    """
    base_path = Path(templates_path) if templates_path else None
    data = _load_yaml(base_path, TEMPLATE_NAME)
    by_kind: dict[NutrientKind, LevelField] = {}
    for entry in data.get("level_nutrients", []) or []:
        if not isinstance(entry, dict) or not entry.get("key"):
            continue
        kind = _parse_nutrient(entry.get("nutrient"))
        if kind is None or kind in by_kind:
            continue
        by_kind[kind] = LevelField(nutrient=kind, key=str(entry["key"]))
    return [by_kind[kind] for kind in NUTRIENT_ORDER if kind in by_kind]


def load_fact_fields(templates_path: str | Path | None = None) -> list[FactField]:
    base_path = Path(templates_path) if templates_path else None
    data = _load_yaml(base_path, TEMPLATE_NAME)
    fact_fields: list[FactField] = []
    for entry in data.get("fact_fields", []) or []:
        if not isinstance(entry, dict):
            continue
        key = entry.get("key")
        name = entry.get("name")
        if not key or not name:
            continue
        fact_fields.append(
            FactField(key=str(key), name=str(name), unit=str(entry.get("unit") or DEFAULT_UNIT))
        )
    return fact_fields


def format_amount(value: Any) -> str:
    """
    Render a nutriment amount for display.

    Whole floats lose their trailing '.0' so that 25.0 and 25 both read '25'.
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def is_present(value: Any) -> bool:
    """True for values worth displaying: not None, empty, zero, NaN or False."""
    if value is None or value is False:
        return False
    if isinstance(value, (int, float)) and (value == 0 or math.isnan(value)):
        return False
    return value != ""


def nutriment_unit(nutriments: Mapping[str, Any], key: str, default: str = DEFAULT_UNIT) -> str:
    unit = nutriments.get(f"{key}{UNIT_SUFFIX}")
    return unit if isinstance(unit, str) and unit else default


def percentage_label(nutriments: Mapping[str, Any], key: str) -> str:
    """'(<amount>%)' from the `<key>_100g` value, or '' when absent."""
    percent = nutriments.get(f"{key}{PERCENT_SUFFIX}")
    if not is_present(percent):
        return ""
    return f"({format_amount(percent)}%)"
