"""Nutrient level extraction: direct field, knowledge panels, then thresholds."""

from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any, Sequence

from nutrifacts.core.interfaces import ExtractionStrategy
from nutrifacts.core.models import (
    NUTRIENT_ORDER,
    ExtractionTrace,
    NutrientKind,
    NutrientLevel,
    NutrientLevelEntry,
)
from nutrifacts.core.nutrients import (
    LevelField,
    format_amount,
    is_present,
    load_level_fields,
    nutriment_unit,
    percentage_label,
)
from nutrifacts.core.panels import (
    PANEL_GROUP,
    KnowledgePanelWalker,
    element_type,
    panel_elements,
    read_level_panel,
)
from nutrifacts.core.strategy import StrategyPipeline
from nutrifacts.core.thresholds import classify, parse_amount, sodium_to_salt
from nutrifacts.core.trace import TraceRecorder

NUTRIENT_LEVELS_PANEL = "nutrient_levels"
SODIUM_KEY = "sodium"


def _nutriments(product: Mapping[str, Any]) -> Mapping[str, Any]:
    nutriments = product.get("nutriments")
    return nutriments if isinstance(nutriments, Mapping) else {}


def _verbatim_level(value: Any) -> str:
    text = value if isinstance(value, str) else str(value)
    try:
        return NutrientLevel(text)
    except ValueError:
        return text


class DirectFieldStrategy:
    """Copy levels from the product's own `nutrient_levels` map."""

    label = "Using product.nutrient_levels directly"

    def __init__(self, level_fields: Sequence[LevelField]) -> None:
        self.level_fields = list(level_fields)

    def attempt(self, product: dict[str, Any], trace: TraceRecorder) -> list[NutrientLevelEntry]:
        levels = product.get("nutrient_levels")
        if not isinstance(levels, Mapping):
            trace.note("No nutrient_levels field in product")
            return []

        trace.enter(self.label)
        nutriments = _nutriments(product)
        entries: list[NutrientLevelEntry] = []
        for level_field in self.level_fields:
            level = levels.get(level_field.key)
            if not is_present(level):
                continue
            entries.append(
                NutrientLevelEntry(
                    nutrient=level_field.nutrient,
                    level=_verbatim_level(level),
                    value=self._display_value(nutriments, level_field.key),
                )
            )

        if entries:
            trace.note(f"Found {len(entries)} level(s) in nutrient_levels")
        else:
            trace.note("nutrient_levels holds no known nutrient")
        return entries

    def _display_value(self, nutriments: Mapping[str, Any], key: str) -> str:
        # The _100g percentage wins over the raw amount when both exist.
        percentage = percentage_label(nutriments, key)
        if percentage:
            return percentage
        amount = nutriments.get(key)
        if not is_present(amount):
            return ""
        return f"{format_amount(amount)}{nutriment_unit(nutriments, key)}"


class KnowledgePanelLevelStrategy:
    """Parse the per-nutrient panels grouped under the `nutrient_levels` panel."""

    label = "Trying knowledge panels"

    def attempt(self, product: dict[str, Any], trace: TraceRecorder) -> list[NutrientLevelEntry]:
        trace.enter(self.label)
        walker = KnowledgePanelWalker.from_product(product)
        if not walker:
            trace.note("No knowledge_panels found in product data")
            return []

        panel = walker.get(NUTRIENT_LEVELS_PANEL)
        if panel is None:
            trace.note("No nutrient_levels panel found")
            return []
        trace.note("Found nutrient_levels panel")

        elements = panel_elements(panel)
        if not elements:
            trace.note("nutrient_levels panel has no elements")
            return []

        found: dict[NutrientKind, NutrientLevelEntry] = {}
        for index, element in enumerate(elements):
            kind = element_type(element)
            if kind != PANEL_GROUP:
                trace.note(f"Element {index}: skipping element_type '{kind or 'missing'}'")
                continue
            for panel_id, referenced in walker.resolve_panel_group(element, trace):
                trace.note(f"Processing panel from group: {panel_id}")
                reading = read_level_panel(referenced)
                if reading is None:
                    trace.note(f"Panel {panel_id}: no nutrient recognized")
                    continue
                if reading.nutrient in found:
                    trace.note(f"Panel {panel_id}: {reading.nutrient.value} already found, dropped")
                    continue
                found[reading.nutrient] = NutrientLevelEntry(
                    nutrient=reading.nutrient,
                    level=reading.level,
                    value=reading.value,
                )

        return [found[kind] for kind in NUTRIENT_ORDER if kind in found]


class NutrimentThresholdStrategy:
    """Classify raw nutriment amounts, synthesizing salt from sodium when needed."""

    label = "Falling back to nutriments data"

    def __init__(self, level_fields: Sequence[LevelField]) -> None:
        self.level_fields = list(level_fields)

    def attempt(self, product: dict[str, Any], trace: TraceRecorder) -> list[NutrientLevelEntry]:
        nutriments = product.get("nutriments")
        if not isinstance(nutriments, Mapping):
            trace.note("No nutriments in product")
            return []

        trace.enter(self.label)
        entries: list[NutrientLevelEntry] = []
        for level_field in self.level_fields:
            if level_field.key not in nutriments:
                continue
            amount = nutriments[level_field.key]
            level = classify(level_field.nutrient, amount)
            trace.note(f"{level_field.nutrient.value}: {amount!r} classified {level.value}")
            entries.append(
                NutrientLevelEntry(
                    nutrient=level_field.nutrient,
                    level=level,
                    value=self._display_value(nutriments, level_field.key, amount),
                )
            )

        if SODIUM_KEY in nutriments and not any(e.nutrient == NutrientKind.SALT for e in entries):
            salt_entry = self._salt_from_sodium(nutriments[SODIUM_KEY], trace)
            if salt_entry is not None:
                entries.append(salt_entry)

        if not entries:
            trace.note("nutriments holds no levelled nutrient")
        return entries

    def _display_value(self, nutriments: Mapping[str, Any], key: str, amount: Any) -> str:
        percentage = percentage_label(nutriments, key)
        if percentage:
            return percentage
        if parse_amount(amount) is None:
            return ""
        return f"{format_amount(amount)}{nutriment_unit(nutriments, key)}"

    def _salt_from_sodium(self, sodium: Any, trace: TraceRecorder) -> NutrientLevelEntry | None:
        sodium_grams = parse_amount(sodium)
        if sodium_grams is None:
            trace.note(f"Sodium amount unreadable: {sodium!r}")
            return None
        salt = sodium_to_salt(sodium_grams)
        level = classify(NutrientKind.SALT, salt)
        trace.note(f"Salt from sodium: {sodium_grams} x 2.5 = {salt:.3f}g classified {level.value}")
        return NutrientLevelEntry(nutrient=NutrientKind.SALT, level=level, value=f"{salt:.3f}g")


def default_level_strategies(
    level_fields: Sequence[LevelField],
) -> list[ExtractionStrategy[NutrientLevelEntry]]:
    return [
        DirectFieldStrategy(level_fields),
        KnowledgePanelLevelStrategy(),
        NutrimentThresholdStrategy(level_fields),
    ]


class LevelExtractionPipeline(StrategyPipeline[NutrientLevelEntry]):
    """
    Derive fat, saturated fat, sugars and salt levels for a product.

    Strategy order: direct `nutrient_levels` field, `nutrient_levels` knowledge
    panel, then threshold classification of raw nutriments.
    """

    name = "levels"

    def __init__(
        self,
        strategies: Sequence[ExtractionStrategy[NutrientLevelEntry]] | None = None,
        templates_path: str | Path | None = None,
    ) -> None:
        if strategies is None:
            strategies = default_level_strategies(load_level_fields(templates_path))
        super().__init__(strategies)


@lru_cache(maxsize=1)
def _default_pipeline() -> LevelExtractionPipeline:
    return LevelExtractionPipeline()


def extract_levels(product: Any) -> tuple[list[NutrientLevelEntry], ExtractionTrace]:
    return _default_pipeline().extract(product)
