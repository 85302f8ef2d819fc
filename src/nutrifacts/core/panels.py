"""Knowledge panel traversal and panel text heuristics."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Optional

from nutrifacts.core.models import NutrientKind, NutrientLevel, PanelLevelReading
from nutrifacts.core.trace import TraceRecorder

PANEL_GROUP = "panel_group"
TABLE = "table"

_PARENTHESIZED = re.compile(r"\((.*?)\)")

_EVALUATION_LEVELS = {
    "good": NutrientLevel.LOW,
    "moderate": NutrientLevel.MODERATE,
    "bad": NutrientLevel.HIGH,
}


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def title_element(panel: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    element = panel.get("title_element")
    return element if isinstance(element, Mapping) else None


def panel_elements(panel: Mapping[str, Any]) -> list[Any]:
    elements = panel.get("elements")
    return list(elements) if isinstance(elements, list) else []


def element_type(element: Any) -> str:
    if not isinstance(element, Mapping):
        return ""
    return _text(element.get("element_type"))


class KnowledgePanelWalker:
    """
    Read-only view over a product's `knowledge_panels` map.

    Any shape deviation degrades to "no data"; lookups never raise.
    """

    def __init__(self, panels: Any) -> None:
        self.panels: Mapping[str, Any] = panels if isinstance(panels, Mapping) else {}

    @classmethod
    def from_product(cls, product: Mapping[str, Any]) -> "KnowledgePanelWalker":
        return cls(product.get("knowledge_panels"))

    def __bool__(self) -> bool:
        return bool(self.panels)

    def get(self, panel_id: str) -> Optional[Mapping[str, Any]]:
        panel = self.panels.get(panel_id)
        return panel if isinstance(panel, Mapping) else None

    def items(self) -> list[tuple[str, Mapping[str, Any]]]:
        return [
            (str(panel_id), panel)
            for panel_id, panel in self.panels.items()
            if isinstance(panel, Mapping)
        ]

    def resolve_panel_group(
        self, element: Mapping[str, Any], trace: TraceRecorder
    ) -> list[tuple[str, Mapping[str, Any]]]:
        """
        Resolve a panel_group element into the sibling panels it references.

        Args:
            element: An element whose element_type is panel_group
            trace: Recorder for skipped references

        Returns:
            (panel_id, panel) pairs in panel_ids order; unknown ids are skipped
        """
        group = element.get("panel_group_element")
        if not isinstance(group, Mapping):
            trace.note("Panel group element has no panel_group_element")
            return []

        group_id = _text(group.get("panel_group_id")) or "unnamed"
        trace.note(f"Found panel group: {group_id}")

        panel_ids = group.get("panel_ids")
        if not isinstance(panel_ids, list) or not panel_ids:
            trace.note(f"Panel group {group_id} lists no panel_ids")
            return []

        resolved: list[tuple[str, Mapping[str, Any]]] = []
        for panel_id in panel_ids:
            if not isinstance(panel_id, str):
                trace.note(f"Skipping non-string panel id: {panel_id!r}")
                continue
            panel = self.get(panel_id)
            if panel is None:
                trace.note(f"Referenced panel not found: {panel_id}")
                continue
            resolved.append((panel_id, panel))
        return resolved

    def first_element(self, panel: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
        elements = panel_elements(panel)
        if not elements or not isinstance(elements[0], Mapping):
            return None
        return elements[0]

    def table_rows(self, element: Mapping[str, Any]) -> list[Any]:
        table = element.get("table_element")
        if not isinstance(table, Mapping):
            return []
        rows = table.get("rows")
        return list(rows) if isinstance(rows, list) else []


def detect_nutrient(title: str) -> Optional[NutrientKind]:
    """Map a panel title to a nutrient by case-insensitive substring. First match wins."""
    lowered = title.lower()
    if "fat" in lowered and "saturated" not in lowered:
        return NutrientKind.FAT
    if "saturated fat" in lowered:
        return NutrientKind.SATURATED_FAT
    if "sugars" in lowered:
        return NutrientKind.SUGARS
    if "salt" in lowered:
        return NutrientKind.SALT
    return None


def detect_level(subtitle: str, evaluation: Any) -> NutrientLevel:
    """Subtitle wording takes priority over the panel's evaluation tag."""
    lowered = subtitle.lower()
    if "low" in lowered:
        return NutrientLevel.LOW
    if "moderate" in lowered:
        return NutrientLevel.MODERATE
    if "high" in lowered:
        return NutrientLevel.HIGH
    if isinstance(evaluation, str):
        return _EVALUATION_LEVELS.get(evaluation, NutrientLevel.UNKNOWN)
    return NutrientLevel.UNKNOWN


def extract_parenthesized(subtitle: str) -> str:
    match = _PARENTHESIZED.search(subtitle)
    return match.group(1) if match else ""


def read_level_panel(panel: Mapping[str, Any]) -> Optional[PanelLevelReading]:
    """
    Parse the title element of a nutrient level panel.

    The nutrient comes from the title; the level and value from the subtitle,
    falling back to the panel's evaluation tag for the level.

    Returns:
        The reading, or None when the panel has no title element or the title
        names no known nutrient
    """
    element = title_element(panel)
    if element is None:
        return None
    nutrient = detect_nutrient(_text(element.get("title")))
    if nutrient is None:
        return None
    subtitle = _text(element.get("subtitle"))
    return PanelLevelReading(
        nutrient=nutrient,
        level=detect_level(subtitle, panel.get("evaluation")),
        value=extract_parenthesized(subtitle),
    )
