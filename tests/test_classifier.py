"""Tests for the weighted threshold classifier."""

from cambodia_intel.scoring.classifier import (
    CategoryRule,
    ClassifierConfig,
    Deduction,
    Trigger,
    classify,
    label_for,
    score_category,
)

CUT_POINTS = ((90, "Low Risk"), (60, "Medium Risk"))

CONFIG = ClassifierConfig(
    categories={
        "identity": CategoryRule(weight=50, deductions=(Deduction("id_check", ("Not completed",), 2),)),
        "credit": CategoryRule(weight=50, deductions=(Deduction("bureau", ("Not obtained",), 4),)),
    },
    cut_points=CUT_POINTS,
    fallback_label="High Risk",
    triggers=(Trigger("sanctions_match", "sanctions", ("Match found",)),),
    worst_label="High Risk",
)


def test_all_clear_scores_full_marks():
    result = classify({"id_check": "Verified", "bureau": "Obtained"}, CONFIG)
    assert result.composite_score == 100
    assert result.label == "Low Risk"
    assert result.defaulted_categories == []
    assert result.risk_factors == []


def test_deductions_respect_floor():
    sub_score, defaulted = score_category(CONFIG.categories["credit"], {"bureau": "not obtained"})
    assert sub_score == 1
    assert defaulted is False


def test_absent_category_uses_default_score():
    result = classify({"id_check": "Verified"}, CONFIG)
    assert result.category_scores["credit"] == 3
    assert result.defaulted_categories == ["credit"]
    assert result.composite_score == 80
    assert result.label == "Medium Risk"


def test_score_stays_within_bounds():
    result = classify({"id_check": "Not completed", "bureau": "Not obtained"}, CONFIG)
    assert 0 <= result.composite_score <= 100
    assert result.label == "High Risk"
    assert "Credit Risk: Below acceptable threshold" in result.risk_factors


def test_trigger_forces_worst_label():
    record = {"id_check": "Verified", "bureau": "Obtained", "sanctions": "Match found"}
    result = classify(record, CONFIG)
    assert result.composite_score == 100
    assert result.label == "High Risk"
    assert result.triggered_overrides == ["sanctions_match"]


def test_category_not_applicable_scores_max():
    rule = CategoryRule(
        weight=10,
        deductions=(Deduction("license", ("Not verified",), 2),),
        applies=lambda record: record.get("kind") == "business",
    )
    assert score_category(rule, {"kind": "individual", "license": "Not verified"}) == (5, False)
    assert score_category(rule, {"kind": "business", "license": "Not verified"}) == (3, False)


def test_label_for_uses_first_reached_cut_point():
    assert label_for(90, CUT_POINTS, "High Risk") == "Low Risk"
    assert label_for(89, CUT_POINTS, "High Risk") == "Medium Risk"
    assert label_for(10, CUT_POINTS, "High Risk") == "High Risk"


def test_result_to_dict():
    data = classify({"id_check": "Verified", "bureau": "Obtained"}, CONFIG).to_dict()
    assert data["label"] == "Low Risk"
    assert set(data["category_scores"]) == {"identity", "credit"}


def test_classification_is_repeatable():
    record = {"id_check": "Not completed", "sanctions": "Match found"}
    first = classify(record, CONFIG)
    second = classify(record, CONFIG)
    assert first == second
    assert first.to_dict() == second.to_dict()
