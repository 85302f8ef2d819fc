"""Tests for Nutri-Score grade and NOVA group lookup."""

from nutrifacts.core.grades import (
    extract_nova_group,
    extract_nutriscore_grade,
    normalize_nova,
    normalize_nutriscore,
)


def test_nutriscore_direct_field() -> None:
    grade, trace = extract_nutriscore_grade({"nutriscore_grade": "b", "nutriscore_score": 30})
    assert grade == "B"
    assert trace.strategy == "Using product field nutriscore_grade / nutrition_grades"


def test_nutriscore_unusable_field_falls_through() -> None:
    grade, trace = extract_nutriscore_grade(
        {"nutriscore_grade": "unknown", "nutrition_grades": "d"}
    )
    assert grade == "D"
    assert "nutriscore_grade is not usable: 'unknown'" in trace.steps


def test_nutriscore_named_panel_title_grade() -> None:
    product = {"knowledge_panels": {"nutriscore_2023": {"title_element": {"grade": "a"}}}}
    grade, trace = extract_nutriscore_grade(product)
    assert grade == "A"
    assert trace.strategy == "Trying named knowledge panels"


def test_nutriscore_named_panel_element_text() -> None:
    product = {
        "knowledge_panels": {
            "nutriscore": {
                "elements": [
                    {"element_type": "text", "text": "Nutri-Score is computed per 100g"},
                    {"element_type": "text", "text": "This product has Grade C"},
                ]
            }
        }
    }
    grade, _ = extract_nutriscore_grade(product)
    assert grade == "C"


def test_nutriscore_panel_search_by_id() -> None:
    product = {"knowledge_panels": {"Nutri_Score_v3": {"elements": [{"grade": "e"}]}}}
    grade, trace = extract_nutriscore_grade(product)
    assert grade == "E"
    assert trace.strategy == "Searching all knowledge panels"


def test_nutriscore_score_conversion() -> None:
    cases = {-5: "A", -1: "A", 0: "B", 2: "B", 5: "C", 10: "C", 18: "D", 19: "E"}
    for score, expected in cases.items():
        grade, _ = extract_nutriscore_grade({"nutriscore_score": score})
        assert grade == expected


def test_nutriscore_missing() -> None:
    grade, trace = extract_nutriscore_grade({"knowledge_panels": {"other": {}}})
    assert grade is None
    assert trace.result_count == 0
    assert trace.strategy is None


def test_nova_direct_field() -> None:
    group, _ = extract_nova_group({"nova_group": "3"})
    assert group == 3


def test_nova_from_panel_text() -> None:
    product = {
        "knowledge_panels": {
            "food_processing": {"elements": [{"text": "Ultra-processed foods: NOVA group 4"}]}
        }
    }
    group, _ = extract_nova_group(product)
    assert group == 4


def test_nova_rejects_out_of_range() -> None:
    group, trace = extract_nova_group({"nova_group": 7})
    assert group is None
    assert trace.result_count == 0


def test_normalizers() -> None:
    assert normalize_nutriscore(" c ") == "C"
    assert normalize_nutriscore("not-applicable") is None
    assert normalize_nutriscore(None) is None
    assert normalize_nova(2.0) == 2
    assert normalize_nova(2.5) is None
    assert normalize_nova(True) is None


def test_nutriscore_title_grade_checked_before_titled_panels() -> None:
    product = {
        "knowledge_panels": {
            "health_card": {"title": "Nutri-Score", "elements": [{"grade": "d"}]},
            "summary": {"title_element": {"grade": "b"}},
        }
    }
    grade, trace = extract_nutriscore_grade(product)
    assert grade == "B"
    assert "Panel summary title element: B" in trace.steps


def test_nutriscore_from_titled_panel_elements() -> None:
    product = {
        "knowledge_panels": {
            "health_card": {
                "title": "Nutri-Score",
                "elements": [{"text": "This product has grade d"}],
            }
        }
    }
    grade, trace = extract_nutriscore_grade(product)
    assert grade == "D"
    assert "Panel health_card titled Nutri-Score: D" in trace.steps


def test_nova_from_titled_panel_elements() -> None:
    product = {"knowledge_panels": {"card": {"title": "NOVA", "elements": [{"group": 2}]}}}
    group, _ = extract_nova_group(product)
    assert group == 2
