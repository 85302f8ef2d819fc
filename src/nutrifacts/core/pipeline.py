"""Pipeline orchestration: runs every extraction pipeline over one product."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from nutrifacts.core.components import ComponentExtractionPipeline, component_totals
from nutrifacts.core.facts import FactsExtractionPipeline
from nutrifacts.core.grades import ValueExtractionPipeline, nova_pipeline, nutriscore_pipeline
from nutrifacts.core.levels import LevelExtractionPipeline
from nutrifacts.core.markers import ProcessingMarkerExtractor
from nutrifacts.core.models import ProductReport
from nutrifacts.core.product import load_product

logger = logging.getLogger(__name__)


class PipelineRunner:
    """
    Orchestrates every extraction pipeline over one product record.

    All pipelines are injected, so implementations can be swapped at runtime.
    Each runs independently on the same unmodified product record.
    """

    def __init__(
        self,
        levels: Optional[LevelExtractionPipeline] = None,
        facts: Optional[FactsExtractionPipeline] = None,
        nutriscore: Optional[ValueExtractionPipeline[str]] = None,
        nova: Optional[ValueExtractionPipeline[int]] = None,
        components: Optional[ComponentExtractionPipeline] = None,
        markers: Optional[ProcessingMarkerExtractor] = None,
    ) -> None:
        self.levels = levels or LevelExtractionPipeline()
        self.facts = facts or FactsExtractionPipeline()
        self.nutriscore = nutriscore or nutriscore_pipeline()
        self.nova = nova or nova_pipeline()
        self.components = components or ComponentExtractionPipeline()
        self.markers = markers or ProcessingMarkerExtractor()

    def run(self, product: Mapping[str, Any]) -> ProductReport:
        """Run all pipelines on an already unwrapped product record."""
        levels, levels_trace = self.levels.extract(product)
        facts, facts_trace = self.facts.extract(product)
        grade, nutriscore_trace = self.nutriscore.extract_value(product)
        group, nova_trace = self.nova.extract_value(product)
        components, components_trace = self.components.extract(product)
        markers, markers_trace = self.markers.extract(product)
        logger.debug(
            "Extracted %d level(s), %d fact row(s), nutriscore=%s, nova=%s",
            len(levels),
            len(facts),
            grade,
            group,
        )
        return ProductReport(
            levels=levels,
            facts=facts,
            nutriscore_grade=grade,
            nova_group=group,
            nutriscore_components=components,
            nutriscore_totals=component_totals(components),
            processing_markers=markers,
            levels_trace=levels_trace,
            facts_trace=facts_trace,
            nutriscore_trace=nutriscore_trace,
            nova_trace=nova_trace,
            components_trace=components_trace,
            markers_trace=markers_trace,
        )

    def run_response(self, raw: bytes | str | Mapping[str, Any]) -> ProductReport:
        """
        Full run: unwrap the API response, then extract.

        Raises:
            ProductLoadError: If the response does not hold a product
        """
        return self.run(load_product(raw))
