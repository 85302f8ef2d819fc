"""Tests for NOVA processing marker detection."""

from nutrifacts.core.markers import (
    AdditiveMarkerDetector,
    ProcessingMarkerExtractor,
    extract_processing_markers,
)
from nutrifacts.core.models import MarkerKind, ProcessingMarker


def test_additive_codes_and_names() -> None:
    product = {
        "additives_tags": ["en:e150d", "en:E322i", "en:not-an-additive", 42],
        "additives_original_tags": ["en:e150d-caramel", "en:e322"],
    }

    markers, trace = extract_processing_markers(product)

    assert markers == [
        ProcessingMarker(MarkerKind.ADDITIVE, "e150d-caramel", "E150D"),
        ProcessingMarker(MarkerKind.ADDITIVE, "", "E322I"),
    ]
    assert "Additive tag is not an E-number: en:not-an-additive" in trace.steps
    assert "Skipping non-string additive tag: 42" in trace.steps
    assert trace.strategy == "Reading additives_tags"


def test_flavouring_marker_added_once() -> None:
    product = {
        "ingredients": [
            {"text": "Sugar"},
            {"text": "Natural FLAVOURINGS"},
            {"text": "vanilla flavor"},
            {"text": "aroma"},
            {"id": "en:water"},
        ]
    }

    markers, trace = extract_processing_markers(product)

    assert markers == [ProcessingMarker(MarkerKind.INGREDIENT, "Flavouring")]
    assert trace.strategy == "Checking ingredients for flavourings"
    assert trace.method_used == "Checking ingredients for flavourings"


def test_markers_are_combined_across_detectors() -> None:
    product = {
        "additives_tags": ["en:e330"],
        "ingredients": [{"text": "Flavouring"}],
    }

    markers, trace = extract_processing_markers(product)

    assert [marker.kind for marker in markers] == [MarkerKind.ADDITIVE, MarkerKind.INGREDIENT]
    assert markers[0].code == "E330"
    assert trace.strategy == "Reading additives_tags"
    assert trace.result_count == 2


def test_no_markers() -> None:
    markers, trace = extract_processing_markers({"ingredients": [{"text": "Water"}]})

    assert markers == []
    assert trace.steps == (
        "No additives_tags in product",
        "Checking ingredients for flavourings",
        "No flavouring ingredients",
    )
    assert trace.strategy is None


def test_injected_detectors() -> None:
    extractor = ProcessingMarkerExtractor(detectors=[AdditiveMarkerDetector()])
    markers, _ = extractor.extract({"additives_tags": [], "ingredients": [{"text": "aroma"}]})
    assert markers == []
