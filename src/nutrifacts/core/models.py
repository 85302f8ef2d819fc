"""Core immutable data models for extraction results and traces."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from nutrifacts.export import dataclass_to_dict


class NutrientKind(str, Enum):
    """Nutrients that carry a traffic-light level. Values are display names."""

    FAT = "Fat"
    SATURATED_FAT = "Saturated fat"
    SUGARS = "Sugars"
    SALT = "Salt"


NUTRIENT_ORDER = (
    NutrientKind.FAT,
    NutrientKind.SATURATED_FAT,
    NutrientKind.SUGARS,
    NutrientKind.SALT,
)


class NutrientLevel(str, Enum):
    """Coarse per-100g classification of a nutrient."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class NutrientLevelEntry:
    """
    One nutrient level row.

    `level` is a NutrientLevel member, except for levels copied verbatim from the
    product's own `nutrient_levels` field, which keep the upstream string.
    """

    nutrient: NutrientKind
    level: str
    value: str = ""
    """Display magnitude, e.g. '(12%)' or '2.5g'. Empty when unknown."""


@dataclass(frozen=True)
class NutritionFactRow:
    """One row of the nutrition facts table."""

    nutrient: str
    value: str


@dataclass(frozen=True)
class ExtractionTrace:
    """
    Diagnostic record of a single pipeline invocation.

    Built once by a TraceRecorder and never mutated afterwards.
    """

    steps: tuple[str, ...] = ()
    """Ordered decision log."""

    method_used: str = "No method used"
    """Label of the first strategy branch that was entered."""

    result_count: int = 0
    """Number of results the pipeline returned."""

    strategy: Optional[str] = None
    """Label of the strategy whose results were returned, None when all came up empty."""


@dataclass(frozen=True)
class PanelLevelReading:
    """Nutrient level parsed from the title element of a knowledge panel."""

    nutrient: NutrientKind
    level: NutrientLevel
    value: str = ""


class ComponentPolarity(str, Enum):
    """Whether a Nutri-Score component counts against or for the product."""

    NEGATIVE = "negative"
    POSITIVE = "positive"


@dataclass(frozen=True)
class NutriScoreComponent:
    """One `nutriscore_component_*` panel, parsed from its subtitle."""

    key: str
    """Component name without the panel prefix, e.g. 'saturated_fat'."""

    display_name: str
    points: int
    total: int
    value: str
    """Measured amount shown in parentheses, e.g. '176kJ'."""

    polarity: ComponentPolarity


class MarkerKind(str, Enum):
    ADDITIVE = "additive"
    INGREDIENT = "ingredient"


@dataclass(frozen=True)
class ProcessingMarker:
    """Evidence of food processing found in the product's ingredient data."""

    kind: MarkerKind
    name: str
    code: Optional[str] = None
    """Upper-case E-number for additives, None for ingredient markers."""


@dataclass
class ProductReport:
    """Output of PipelineRunner: every derived artifact for one product."""

    levels: list[NutrientLevelEntry] = field(default_factory=list)
    facts: list[NutritionFactRow] = field(default_factory=list)
    nutriscore_grade: Optional[str] = None
    nova_group: Optional[int] = None
    nutriscore_components: list[NutriScoreComponent] = field(default_factory=list)
    nutriscore_totals: dict[str, str] = field(default_factory=dict)
    """'<points>/<total>' per polarity value."""

    processing_markers: list[ProcessingMarker] = field(default_factory=list)
    levels_trace: ExtractionTrace = field(default_factory=ExtractionTrace)
    facts_trace: ExtractionTrace = field(default_factory=ExtractionTrace)
    nutriscore_trace: ExtractionTrace = field(default_factory=ExtractionTrace)
    nova_trace: ExtractionTrace = field(default_factory=ExtractionTrace)
    components_trace: ExtractionTrace = field(default_factory=ExtractionTrace)
    markers_trace: ExtractionTrace = field(default_factory=ExtractionTrace)

    def to_dict(self, include_traces: bool = True) -> dict[str, Any]:
        data = dataclass_to_dict(self)
        if not include_traces:
            for key in [name for name in data if name.endswith("_trace")]:
                data.pop(key)
        return data
