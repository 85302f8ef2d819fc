"""Nutri-Score component breakdown from `nutriscore_component_*` panels."""

from __future__ import annotations

import re
from collections.abc import Mapping
from functools import lru_cache
from typing import Any, Optional, Sequence

from nutrifacts.core.interfaces import ExtractionStrategy
from nutrifacts.core.models import ComponentPolarity, ExtractionTrace, NutriScoreComponent
from nutrifacts.core.panels import KnowledgePanelWalker, title_element
from nutrifacts.core.strategy import StrategyPipeline
from nutrifacts.core.trace import TraceRecorder

COMPONENT_PREFIX = "nutriscore_component_"

NEGATIVE_COMPONENTS = frozenset(
    {"energy", "sugars", "saturated_fat", "salt", "non_nutritive_sweeteners"}
)
POSITIVE_COMPONENTS = frozenset({"proteins", "fiber", "fruits_vegetables_legumes"})

# e.g. "3/10 points (176kJ)"
_POINTS_SUBTITLE = re.compile(r"(\d+)/(\d+)\s+points\s+\(([^)]+)\)")


def component_polarity(key: str) -> ComponentPolarity:
    """
    Classify a component name.

    Known names use the fixed lists. Unknown names are classified by a
    'negative' or 'positive' substring, and otherwise default to negative.
    """
    if key in NEGATIVE_COMPONENTS:
        return ComponentPolarity.NEGATIVE
    if key in POSITIVE_COMPONENTS:
        return ComponentPolarity.POSITIVE
    if "negative" in key:
        return ComponentPolarity.NEGATIVE
    if "positive" in key:
        return ComponentPolarity.POSITIVE
    return ComponentPolarity.NEGATIVE


def parse_points_subtitle(subtitle: str) -> Optional[tuple[int, int, str]]:
    match = _POINTS_SUBTITLE.search(subtitle)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2)), match.group(3)


def _display_name(key: str, panel: Mapping[str, Any]) -> str:
    title = panel.get("title")
    if isinstance(title, str) and title:
        return title
    return key[:1].upper() + key[1:].replace("_", " ")


class ComponentPanelStrategy:
    """Parse every `nutriscore_component_*` panel subtitle, in panel order."""

    label = "Scanning nutriscore_component panels"

    def attempt(self, product: dict[str, Any], trace: TraceRecorder) -> list[NutriScoreComponent]:
        walker = KnowledgePanelWalker.from_product(product)
        if not walker:
            trace.note("No knowledge_panels found in product data")
            return []

        panels = [
            (panel_id, panel)
            for panel_id, panel in walker.items()
            if panel_id.startswith(COMPONENT_PREFIX)
        ]
        if not panels:
            trace.note("No nutriscore_component panels found")
            return []
        trace.enter(self.label)

        components: list[NutriScoreComponent] = []
        for panel_id, panel in panels:
            element = title_element(panel)
            subtitle = element.get("subtitle") if element is not None else None
            if not isinstance(subtitle, str) or not subtitle:
                trace.note(f"Panel {panel_id}: no subtitle")
                continue
            parsed = parse_points_subtitle(subtitle)
            if parsed is None:
                trace.note(f"Panel {panel_id}: unrecognized subtitle {subtitle!r}")
                continue
            points, total, value = parsed
            key = panel_id[len(COMPONENT_PREFIX) :]
            polarity = component_polarity(key)
            trace.note(f"Panel {panel_id}: {points}/{total} points, {polarity.value}")
            components.append(
                NutriScoreComponent(
                    key=key,
                    display_name=_display_name(key, panel),
                    points=points,
                    total=total,
                    value=value,
                    polarity=polarity,
                )
            )
        return components


def component_totals(components: Sequence[NutriScoreComponent]) -> dict[str, str]:
    """Sum points and maxima per polarity into '<points>/<total>' labels."""
    totals = {polarity: [0, 0] for polarity in ComponentPolarity}
    for component in components:
        totals[component.polarity][0] += component.points
        totals[component.polarity][1] += component.total
    return {
        polarity.value: f"{points}/{total}" for polarity, (points, total) in totals.items()
    }


class ComponentExtractionPipeline(StrategyPipeline[NutriScoreComponent]):
    """Build the Nutri-Score component breakdown for a product."""

    name = "nutriscore_components"

    def __init__(
        self, strategies: Sequence[ExtractionStrategy[NutriScoreComponent]] | None = None
    ) -> None:
        super().__init__(strategies if strategies is not None else [ComponentPanelStrategy()])


@lru_cache(maxsize=1)
def _default_pipeline() -> ComponentExtractionPipeline:
    return ComponentExtractionPipeline()


def extract_nutriscore_components(
    product: Any,
) -> tuple[list[NutriScoreComponent], ExtractionTrace]:
    return _default_pipeline().extract(product)
