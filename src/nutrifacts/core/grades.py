"""Nutri-Score grade and NOVA group lookup across field and panel schemas."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

from nutrifacts.core.interfaces import ExtractionStrategy
from nutrifacts.core.models import ExtractionTrace
from nutrifacts.core.panels import KnowledgePanelWalker, panel_elements, title_element
from nutrifacts.core.strategy import StrategyPipeline
from nutrifacts.core.thresholds import parse_amount
from nutrifacts.core.trace import TraceRecorder

T = TypeVar("T")

NUTRISCORE_PANELS = (
    "nutriscore",
    "nutriscore_2023",
    "nutriscore_2021",
    "nutri-score",
    "nutrition_score",
)
NOVA_PANELS = ("nova", "nova_group", "nova_groups", "food_processing", "processing")

# Upper bounds of the Nutri-Score points for grades A to D; anything above is E.
NUTRISCORE_BANDS = ((-1, "A"), (2, "B"), (10, "C"), (18, "D"))


def normalize_nutriscore(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    grade = value.strip().lower()
    if len(grade) == 1 and grade in "abcde":
        return grade.upper()
    return None


def normalize_nova(value: Any) -> Optional[int]:
    amount = parse_amount(value)
    if amount is None or not amount.is_integer():
        return None
    group = int(amount)
    return group if 1 <= group <= 4 else None


@dataclass(frozen=True)
class PanelValueReader(Generic[T]):
    """How to read one grade-like value out of a panel."""

    attribute: str
    """Key carrying the value on title elements and elements ('grade', 'group')."""

    text_pattern: re.Pattern[str]
    """Pattern whose first group holds the value inside element text."""

    normalize: Callable[[Any], Optional[T]]

    def read_title(self, panel: Mapping[str, Any]) -> Optional[T]:
        element = title_element(panel)
        if element is None:
            return None
        return self.normalize(element.get(self.attribute))

    def read(self, panel: Mapping[str, Any]) -> Optional[T]:
        value = self.read_title(panel)
        if value is not None:
            return value
        for element in panel_elements(panel):
            if not isinstance(element, Mapping):
                continue
            value = self.normalize(element.get(self.attribute))
            if value is not None:
                return value
            text = element.get("text")
            if isinstance(text, str):
                match = self.text_pattern.search(text)
                if match:
                    value = self.normalize(match.group(1))
                    if value is not None:
                        return value
        return None


NUTRISCORE_READER: PanelValueReader[str] = PanelValueReader(
    attribute="grade",
    text_pattern=re.compile(r"grade ([a-e])", re.IGNORECASE),
    normalize=normalize_nutriscore,
)
NOVA_READER: PanelValueReader[int] = PanelValueReader(
    attribute="group",
    text_pattern=re.compile(r"group ([1-4])", re.IGNORECASE),
    normalize=normalize_nova,
)


class DirectFieldValueStrategy(Generic[T]):
    """Read the value from top-level product fields, first usable key wins."""

    def __init__(self, keys: Sequence[str], normalize: Callable[[Any], Optional[T]]) -> None:
        self.keys = list(keys)
        self.normalize = normalize
        self.label = f"Using product field {' / '.join(self.keys)}"

    def attempt(self, product: dict[str, Any], trace: TraceRecorder) -> list[T]:
        present = [key for key in self.keys if key in product]
        if not present:
            trace.note(f"No {' or '.join(self.keys)} in product")
            return []
        trace.enter(self.label)
        for key in present:
            value = self.normalize(product[key])
            if value is not None:
                trace.note(f"{key} = {value}")
                return [value]
            trace.note(f"{key} is not usable: {product[key]!r}")
        return []


class NamedPanelValueStrategy(Generic[T]):
    """Read the value from well-known panel ids, in order."""

    label = "Trying named knowledge panels"

    def __init__(self, panel_ids: Sequence[str], reader: PanelValueReader[T]) -> None:
        self.panel_ids = list(panel_ids)
        self.reader = reader

    def attempt(self, product: dict[str, Any], trace: TraceRecorder) -> list[T]:
        walker = KnowledgePanelWalker.from_product(product)
        if not walker:
            trace.note("No knowledge_panels found in product data")
            return []
        trace.enter(self.label)
        for panel_id in self.panel_ids:
            panel = walker.get(panel_id)
            if panel is None:
                continue
            value = self.reader.read(panel)
            if value is not None:
                trace.note(f"Panel {panel_id}: {value}")
                return [value]
            trace.note(f"Panel {panel_id}: no {self.reader.attribute} found")
        return []


class PanelSearchValueStrategy(Generic[T]):
    """
    Scan every panel whose id looks relevant, then any panel whose title
    element carries the attribute, then the elements of panels whose title
    mentions the keyword.
    """

    label = "Searching all knowledge panels"

    def __init__(
        self,
        id_matches: Callable[[str], bool],
        title_keyword: str,
        reader: PanelValueReader[T],
    ) -> None:
        self.id_matches = id_matches
        self.title_keyword = title_keyword
        self.reader = reader

    def attempt(self, product: dict[str, Any], trace: TraceRecorder) -> list[T]:
        walker = KnowledgePanelWalker.from_product(product)
        if not walker:
            return []
        trace.enter(self.label)
        panels = walker.items()

        for panel_id, panel in panels:
            if not self.id_matches(panel_id.lower()):
                continue
            value = self.reader.read(panel)
            if value is not None:
                trace.note(f"Panel {panel_id}: {value}")
                return [value]

        for panel_id, panel in panels:
            value = self.reader.read_title(panel)
            if value is not None:
                trace.note(f"Panel {panel_id} title element: {value}")
                return [value]

        for panel_id, panel in panels:
            title = panel.get("title")
            if not isinstance(title, str) or self.title_keyword not in title:
                continue
            value = self.reader.read(panel)
            if value is not None:
                trace.note(f"Panel {panel_id} titled {self.title_keyword}: {value}")
                return [value]

        trace.note(f"No panel carries a {self.reader.attribute}")
        return []


class ScoreConversionStrategy:
    """Convert the numeric `nutriscore_score` into its letter grade."""

    label = "Converting nutriscore_score"

    def attempt(self, product: dict[str, Any], trace: TraceRecorder) -> list[str]:
        if "nutriscore_score" not in product:
            trace.note("No nutriscore_score in product")
            return []
        trace.enter(self.label)
        score = parse_amount(product["nutriscore_score"])
        if score is None:
            trace.note(f"nutriscore_score unreadable: {product['nutriscore_score']!r}")
            return []
        grade = next((letter for bound, letter in NUTRISCORE_BANDS if score <= bound), "E")
        trace.note(f"Score {score:g} -> {grade}")
        return [grade]


class ValueExtractionPipeline(StrategyPipeline[T]):
    """Strategy pipeline for a single value rather than a list of rows."""

    def extract_value(self, product: Any) -> tuple[Optional[T], ExtractionTrace]:
        results, trace = self.extract(product)
        return (results[0] if results else None), trace


def nutriscore_pipeline() -> ValueExtractionPipeline[str]:
    strategies: list[ExtractionStrategy[str]] = [
        DirectFieldValueStrategy(("nutriscore_grade", "nutrition_grades"), normalize_nutriscore),
        NamedPanelValueStrategy(NUTRISCORE_PANELS, NUTRISCORE_READER),
        PanelSearchValueStrategy(
            lambda panel_id: "nutri" in panel_id and "score" in panel_id,
            "Nutri-Score",
            NUTRISCORE_READER,
        ),
        ScoreConversionStrategy(),
    ]
    pipeline = ValueExtractionPipeline(strategies)
    pipeline.name = "nutriscore"
    return pipeline


def nova_pipeline() -> ValueExtractionPipeline[int]:
    strategies: list[ExtractionStrategy[int]] = [
        DirectFieldValueStrategy(("nova_group", "nova_groups"), normalize_nova),
        NamedPanelValueStrategy(NOVA_PANELS, NOVA_READER),
        PanelSearchValueStrategy(
            lambda panel_id: "nova" in panel_id or "processing" in panel_id,
            "NOVA",
            NOVA_READER,
        ),
    ]
    pipeline = ValueExtractionPipeline(strategies)
    pipeline.name = "nova"
    return pipeline


def extract_nutriscore_grade(product: Any) -> tuple[Optional[str], ExtractionTrace]:
    return nutriscore_pipeline().extract_value(product)


def extract_nova_group(product: Any) -> tuple[Optional[int], ExtractionTrace]:
    return nova_pipeline().extract_value(product)
