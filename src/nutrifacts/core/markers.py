"""NOVA processing markers: E-number additives and flavouring ingredients."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any, Sequence

from nutrifacts.core.interfaces import ExtractionStrategy
from nutrifacts.core.models import ExtractionTrace, MarkerKind, ProcessingMarker
from nutrifacts.core.trace import TraceRecorder

logger = logging.getLogger(__name__)

_ADDITIVE_TAG = re.compile(r"en:e(\d+)([a-z]*)", re.IGNORECASE)

FLAVOURING_WORDS = ("flavour", "flavor", "aroma")
FLAVOURING_NAME = "Flavouring"


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


class AdditiveMarkerDetector:
    """One marker per `additives_tags` entry that names an E-number."""

    label = "Reading additives_tags"

    def attempt(self, product: dict[str, Any], trace: TraceRecorder) -> list[ProcessingMarker]:
        tags = product.get("additives_tags")
        if not isinstance(tags, list) or not tags:
            trace.note("No additives_tags in product")
            return []
        trace.enter(self.label)
        original_tags = _string_list(product.get("additives_original_tags"))

        markers: list[ProcessingMarker] = []
        for tag in tags:
            if not isinstance(tag, str):
                trace.note(f"Skipping non-string additive tag: {tag!r}")
                continue
            match = _ADDITIVE_TAG.search(tag)
            if not match:
                trace.note(f"Additive tag is not an E-number: {tag}")
                continue
            code = f"E{match.group(1)}{match.group(2)}".upper()
            name = next(
                (
                    original.replace("en:", "", 1)
                    for original in original_tags
                    if match.group(0) in original
                ),
                "",
            )
            trace.note(f"Additive {code}")
            markers.append(ProcessingMarker(kind=MarkerKind.ADDITIVE, name=name, code=code))
        return markers


class FlavouringMarkerDetector:
    """A single marker when any ingredient text mentions a flavouring."""

    label = "Checking ingredients for flavourings"

    def attempt(self, product: dict[str, Any], trace: TraceRecorder) -> list[ProcessingMarker]:
        ingredients = product.get("ingredients")
        if not isinstance(ingredients, list) or not ingredients:
            trace.note("No ingredients in product")
            return []
        trace.enter(self.label)

        matches: list[str] = []
        for ingredient in ingredients:
            text = ingredient.get("text") if isinstance(ingredient, Mapping) else None
            if isinstance(text, str) and any(word in text.lower() for word in FLAVOURING_WORDS):
                matches.append(text)
        if not matches:
            trace.note("No flavouring ingredients")
            return []
        trace.note(f"Flavouring ingredients: {', '.join(matches)}")
        return [ProcessingMarker(kind=MarkerKind.INGREDIENT, name=FLAVOURING_NAME)]


def default_marker_detectors() -> list[ExtractionStrategy[ProcessingMarker]]:
    return [AdditiveMarkerDetector(), FlavouringMarkerDetector()]


class ProcessingMarkerExtractor:
    """
    Collect processing markers from every detector.

    Unlike StrategyPipeline, detectors do not compete: all of them run and
    their markers are concatenated in detector order. The trace's strategy is
    the first detector that found anything.
    """

    name = "processing_markers"

    def __init__(
        self, detectors: Sequence[ExtractionStrategy[ProcessingMarker]] | None = None
    ) -> None:
        self.detectors = list(detectors) if detectors is not None else default_marker_detectors()

    def extract(self, product: Any) -> tuple[list[ProcessingMarker], ExtractionTrace]:
        record: dict[str, Any] = dict(product) if isinstance(product, Mapping) else {}
        trace = TraceRecorder()
        markers: list[ProcessingMarker] = []
        first: str | None = None
        for detector in self.detectors:
            found = list(detector.attempt(record, trace))
            if found and first is None:
                first = detector.label
            markers.extend(found)
        logger.debug("%s: %d marker(s)", self.name, len(markers))
        return markers, trace.build(len(markers), strategy=first)


def extract_processing_markers(
    product: Any,
) -> tuple[list[ProcessingMarker], ExtractionTrace]:
    return ProcessingMarkerExtractor().extract(product)
