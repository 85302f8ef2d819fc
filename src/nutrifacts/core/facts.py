"""Nutrition facts table extraction: knowledge panel table, then raw nutriments."""

from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any, Sequence

from nutrifacts.core.interfaces import ExtractionStrategy
from nutrifacts.core.models import ExtractionTrace, NutritionFactRow
from nutrifacts.core.nutrients import FactField, format_amount, load_fact_fields
from nutrifacts.core.panels import TABLE, KnowledgePanelWalker, element_type, panel_elements
from nutrifacts.core.strategy import StrategyPipeline
from nutrifacts.core.trace import TraceRecorder

NUTRITION_FACTS_PANEL = "nutrition_facts_table"
ENERGY_NAME = "Energy"
ENERGY_KCAL_KEY = "energy-kcal"
ENERGY_KJ_KEY = "energy-kj"


def _cell_text(cell: Any) -> str:
    if not isinstance(cell, Mapping):
        return ""
    text = cell.get("text")
    if text is None:
        return ""
    return text if isinstance(text, str) else str(text)


class KnowledgePanelTableStrategy:
    """Read name/value rows from the first element of `nutrition_facts_table`."""

    label = "Found knowledge_panels"

    def attempt(self, product: dict[str, Any], trace: TraceRecorder) -> list[NutritionFactRow]:
        walker = KnowledgePanelWalker.from_product(product)
        if not walker:
            trace.note("No knowledge_panels found in product data")
            return []
        trace.enter(self.label)

        panel = walker.get(NUTRITION_FACTS_PANEL)
        if panel is None or not panel_elements(panel):
            trace.note("No nutrition_facts_table panel found")
            return []
        trace.note("Found nutrition_facts_table panel")

        # Only the first element is ever considered.
        element = walker.first_element(panel)
        if element is None or element_type(element) != TABLE:
            trace.note("First element is not a table element")
            return []
        trace.note("Found table element")

        rows = walker.table_rows(element)
        if not rows:
            trace.note("No rows found in table element")
            return []
        trace.note(f"Found {len(rows)} rows")

        facts: list[NutritionFactRow] = []
        for index, row in enumerate(rows):
            cells = row.get("values") if isinstance(row, Mapping) else None
            if not isinstance(cells, list) or len(cells) < 2:
                count = len(cells) if isinstance(cells, list) else 0
                trace.note(f"Row {index}: Incomplete data, values length: {count}")
                continue
            name = _cell_text(cells[0])
            value = _cell_text(cells[1])
            trace.note(f"Row {index}: {name}, value: {value}")
            facts.append(NutritionFactRow(nutrient=name, value=value))
        return facts


class NutrimentFactsStrategy:
    """List the known raw nutriments in a fixed order."""

    label = "Falling back to nutriments data"

    def __init__(self, fact_fields: Sequence[FactField]) -> None:
        self.fact_fields = list(fact_fields)

    def attempt(self, product: dict[str, Any], trace: TraceRecorder) -> list[NutritionFactRow]:
        nutriments = product.get("nutriments")
        if not isinstance(nutriments, Mapping):
            trace.note("No nutriments in product")
            return []
        trace.enter(self.label)

        facts: list[NutritionFactRow] = []
        for fact_field in self.fact_fields:
            if fact_field.key not in nutriments:
                continue
            amount = nutriments[fact_field.key]
            if amount is None:
                trace.note(f"Skipping {fact_field.key}: value is null")
                continue
            facts.append(
                NutritionFactRow(
                    nutrient=fact_field.name,
                    value=f"{format_amount(amount)} {fact_field.unit}",
                )
            )

        kilojoules = nutriments.get(ENERGY_KJ_KEY)
        if kilojoules is not None:
            for index, fact in enumerate(facts):
                if fact.nutrient == ENERGY_NAME:
                    kilocalories = format_amount(nutriments.get(ENERGY_KCAL_KEY))
                    facts[index] = NutritionFactRow(
                        nutrient=ENERGY_NAME,
                        value=f"{format_amount(kilojoules)} kj\n({kilocalories} kcal)",
                    )
                    trace.note("Merged energy-kj into Energy row")
                    break

        trace.note(f"Listed {len(facts)} nutriment(s)")
        return facts


def default_fact_strategies(
    fact_fields: Sequence[FactField],
) -> list[ExtractionStrategy[NutritionFactRow]]:
    return [KnowledgePanelTableStrategy(), NutrimentFactsStrategy(fact_fields)]


class FactsExtractionPipeline(StrategyPipeline[NutritionFactRow]):
    """Build the ordered nutrition facts table for a product."""

    name = "facts"

    def __init__(
        self,
        strategies: Sequence[ExtractionStrategy[NutritionFactRow]] | None = None,
        templates_path: str | Path | None = None,
    ) -> None:
        if strategies is None:
            strategies = default_fact_strategies(load_fact_fields(templates_path))
        super().__init__(strategies)


@lru_cache(maxsize=1)
def _default_pipeline() -> FactsExtractionPipeline:
    return FactsExtractionPipeline()


def extract_facts(product: Any) -> tuple[list[NutritionFactRow], ExtractionTrace]:
    return _default_pipeline().extract(product)
