"""nutrifacts: nutrient levels and nutrition facts from Open Food Facts product records."""

__version__ = "0.1.0"

# Core exports
from nutrifacts.core.models import (
    NutrientKind,
    NutrientLevel,
    NutrientLevelEntry,
    NutritionFactRow,
    ExtractionTrace,
    ProductReport,
    NutriScoreComponent,
    ComponentPolarity,
    ProcessingMarker,
    MarkerKind,
)
from nutrifacts.core.interfaces import ExtractionStrategy
from nutrifacts.core.thresholds import classify, sodium_to_salt
from nutrifacts.core.panels import KnowledgePanelWalker
from nutrifacts.core.trace import TraceRecorder
from nutrifacts.core.strategy import StrategyPipeline
from nutrifacts.core.levels import LevelExtractionPipeline, extract_levels
from nutrifacts.core.facts import FactsExtractionPipeline, extract_facts
from nutrifacts.core.grades import extract_nova_group, extract_nutriscore_grade
from nutrifacts.core.components import component_totals, extract_nutriscore_components
from nutrifacts.core.markers import extract_processing_markers
from nutrifacts.core.product import ProductLoadError, load_product
from nutrifacts.core.pipeline import PipelineRunner

__all__ = [
    "NutrientKind",
    "NutrientLevel",
    "NutrientLevelEntry",
    "NutritionFactRow",
    "ExtractionTrace",
    "ProductReport",
    "NutriScoreComponent",
    "ComponentPolarity",
    "ProcessingMarker",
    "MarkerKind",
    "ExtractionStrategy",
    "classify",
    "sodium_to_salt",
    "KnowledgePanelWalker",
    "TraceRecorder",
    "StrategyPipeline",
    "LevelExtractionPipeline",
    "extract_levels",
    "FactsExtractionPipeline",
    "extract_facts",
    "extract_nova_group",
    "extract_nutriscore_grade",
    "component_totals",
    "extract_nutriscore_components",
    "extract_processing_markers",
    "ProductLoadError",
    "load_product",
    "PipelineRunner",
]
