"""Tests for scoring.aggregator."""

from __future__ import annotations

import pytest

from ppm_survey.scoring.aggregator import (
    analyze_answers,
    category_score,
    dimension_score,
    overall_score,
)
from ppm_survey.scoring.models import CategoryScore
from ppm_survey.scoring.registry import WeightRegistry
from ppm_survey.scoring.weights import CategoryWeightEntry, WeightEntry, WeightSnapshot


def _registry(*entries, categories=()):
    return WeightRegistry(
        WeightSnapshot(question_weights=tuple(entries), category_weights=tuple(categories))
    )


def test_scale_answer_contributes_weighted_score(catalog):
    registry = _registry(
        WeightEntry("f1_q01", 2, "Usabilidade", "satisfaction"),
        categories=[CategoryWeightEntry("Usabilidade", 5)],
    )
    result = category_score(
        "Usabilidade", {"f1": {"f1_q01": "4"}}, catalog=catalog, registry=registry
    )
    assert result.score == 8
    assert result.max_score == 10
    assert result.percentage == pytest.approx(80.0)
    assert result.question_count == 1
    assert result.weight == 5


def test_multi_select_contribution(catalog, registry):
    result = category_score(
        "Business Intelligence",
        {"f2": {"f2_q01": ["A", "B", "C"]}},
        catalog=catalog,
        registry=registry,
    )
    assert (result.score, result.max_score) == (12, 20)
    assert result.percentage == pytest.approx(60.0)


def test_inactive_and_unknown_questions_are_skipped(catalog):
    registry = _registry(
        WeightEntry("f1_q01", 1, "Usabilidade"),
        WeightEntry("f1_q03", 5, "Usabilidade"),
        WeightEntry("f9_q99", 5, "Usabilidade"),
    )
    result = category_score(
        "Usabilidade", {"f1": {"f1_q01": "5", "f1_q03": "5"}}, catalog=catalog, registry=registry
    )
    assert result.question_count == 1
    assert result.max_score == 5
    assert result.percentage == pytest.approx(100.0)


def test_empty_category_is_zero_percent(catalog):
    registry = _registry(WeightEntry("f9_q99", 3, "Fantasma"))
    result = category_score("Fantasma", {}, catalog=catalog, registry=registry)
    assert result.max_score == 0
    assert result.percentage == 0
    # unregistered category weight defaults to 1
    assert result.weight == 1


def test_answers_are_read_from_the_prefixed_form(catalog, registry):
    # an answer filed under the wrong form is not seen
    result = category_score(
        "Integrações Críticas", {"f1": {"f3_q01": "10"}}, catalog=catalog, registry=registry
    )
    assert result.score == 0


def test_dimension_score_ignores_category_weight(catalog, registry):
    answers = {"f1": {"f1_q01": "5", "f1_q02": "Sim"}}
    result = dimension_score("satisfaction", answers, catalog=catalog, registry=registry)
    assert result.score == 25
    assert result.max_score == 25
    assert result.label == "satisfaction"


def test_overall_uses_category_weights():
    cats = [
        CategoryScore("A", 10, 10, 100.0, 1, 5),
        CategoryScore("B", 0, 10, 0.0, 1, 1),
    ]
    assert overall_score(cats).percentage == pytest.approx(500 / 600 * 100)


def test_overall_through_full_pass(catalog):
    registry = _registry(
        WeightEntry("f1_q01", 1, "A", "satisfaction"),
        WeightEntry("f1_q02", 1, "B", "satisfaction"),
        categories=[CategoryWeightEntry("A", 5), CategoryWeightEntry("B", 1)],
    )
    result = analyze_answers(catalog, {"f1": {"f1_q01": "5"}}, registry)
    assert result.overall_score.percentage == pytest.approx(83.333, abs=0.01)
    assert [c.category for c in result.category_scores] == ["A", "B"]


def test_analyze_answers_sorts_and_fills_dimensions(catalog, registry):
    answers = {
        "f1": {"f1_q01": "2", "f1_q02": "Não"},
        "f2": {"f2_q01": ["A", "B", "C", "D", "E"], "f2_q02": "ok"},
        "f3": {"f3_q01": "3"},
    }
    result = analyze_answers(catalog, answers, registry)

    percentages = [c.percentage for c in result.category_scores]
    assert percentages == sorted(percentages, reverse=True)
    assert result.functionality_score.percentage == pytest.approx(100.0)
    assert result.integration_score.percentage == pytest.approx(30.0)
    assert result.usage_score.percentage == pytest.approx(60.0)
    assert "Forte necessidade de melhorar integrações entre sistemas" in result.insights
    assert "Priorizar projeto de integração entre sistemas" in result.recommendations


def test_analyze_answers_with_no_answers_is_zero(catalog, registry):
    result = analyze_answers(catalog, {}, registry)
    assert result.overall_score.percentage == 0
    assert all(c.percentage == 0 for c in result.category_scores)
