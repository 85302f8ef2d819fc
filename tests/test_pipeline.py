"""Pipeline integration smoke tests."""

import json
from pathlib import Path

import pytest

from nutrifacts.core.levels import LevelExtractionPipeline, NutrimentThresholdStrategy
from nutrifacts.core.models import NutrientLevel
from nutrifacts.core.nutrients import load_level_fields
from nutrifacts.core.pipeline import PipelineRunner
from nutrifacts.core.product import ProductLoadError

FIXTURE = Path(__file__).resolve().parent / "fixtures" / "product_with_panels.json"


def test_pipeline_end_to_end() -> None:
    report = PipelineRunner().run_response(FIXTURE.read_bytes())

    assert len(report.levels) == 4
    assert len(report.facts) == 3
    assert report.nutriscore_grade == "E"
    assert report.nova_group == 4
    assert report.levels_trace.result_count == 4
    assert report.facts_trace.result_count == 3


def test_pipeline_with_injected_levels() -> None:
    levels = LevelExtractionPipeline(strategies=[NutrimentThresholdStrategy(load_level_fields())])
    runner = PipelineRunner(levels=levels)

    report = runner.run({"nutriments": {"sugars": 56.3}})

    assert report.levels[0].level == NutrientLevel.HIGH
    assert report.facts[0].value == "56.3 g"


def test_pipeline_not_found() -> None:
    with pytest.raises(ProductLoadError):
        PipelineRunner().run_response({"status": 0})


def test_report_to_dict() -> None:
    report = PipelineRunner().run({"nutriments": {"energy-kcal": 100, "energy-kj": 418}})

    data = report.to_dict()
    slim = report.to_dict(include_traces=False)

    assert data["facts"] == [{"nutrient": "Energy", "value": "418 kj\n(100 kcal)"}]
    assert data["facts_trace"]["result_count"] == 1
    assert isinstance(data["facts_trace"]["steps"], list)
    assert "levels_trace" not in slim
    assert json.loads(json.dumps(slim)) == slim


def test_pipeline_breakdown_and_markers_from_fixture() -> None:
    report = PipelineRunner().run_response(FIXTURE.read_bytes())

    assert [component.key for component in report.nutriscore_components] == [
        "energy",
        "sugars",
        "proteins",
    ]
    assert report.nutriscore_totals == {"negative": "21/25", "positive": "4/7"}
    assert [marker.code for marker in report.processing_markers] == ["E322", "E322I", None]
    assert report.processing_markers[0].name == "e322"
    assert report.processing_markers[2].name == "Flavouring"
    assert report.components_trace.result_count == 3
    assert report.markers_trace.result_count == 3

    data = report.to_dict(include_traces=False)
    assert data["nutriscore_components"][0]["polarity"] == "negative"
    assert data["processing_markers"][0]["kind"] == "additive"
    assert "markers_trace" not in data
