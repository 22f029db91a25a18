"""Unit tests for consolidated report assembly."""
from __future__ import annotations

import pytest

from ppm_survey.interview import Interview
from ppm_survey.reporting.context import (
    ConsolidatedReportData,
    RespondentMeta,
    build_consolidated_report,
    status_label,
)

ANSWERS = {
    "f1": {"f1_q01": "4", "f1_q02": "Parcialmente"},
    "f2": {"f2_q01": ["A", "B"]},
    "f3": {"f3_q01": "2"},
}


@pytest.fixture()
def report(catalog, registry) -> ConsolidatedReportData:
    meta = RespondentMeta(respondent_name="Ana", respondent_department="PMO")
    return build_consolidated_report(
        catalog, ANSWERS, meta, registry, generated_at="2025-01-02T10:00:00Z"
    )


@pytest.mark.parametrize(
    "pct,label",
    [(80, "Excelente"), (79.9, "Bom"), (70, "Bom"), (60, "Regular"), (40, "Ruim"), (39.9, "Crítico")],
)
def test_status_label_breakpoints(pct, label):
    assert status_label(pct) == label


def test_metadata_counts_active_questions(report):
    meta = report.metadata
    assert meta.generated_at == "2025-01-02T10:00:00Z"
    assert meta.total_questions == 5
    assert meta.answered_questions == 4
    assert meta.completion_rate == pytest.approx(80.0)
    assert meta.respondent_info.respondent_name == "Ana"


def test_detailed_rows_include_unanswered(report):
    rows = {r.question_id: r for r in report.detailed_responses}
    assert "f1_q03" not in rows
    assert rows["f2_q02"].raw_answer == ""
    assert rows["f2_q02"].numeric_score == 0
    assert rows["f1_q01"].numeric_score == 4
    assert rows["f1_q01"].score_percentage == pytest.approx(80.0)
    assert rows["f3_q01"].max_possible_score == 10
    assert rows["f2_q01"].raw_answer == ["A", "B"]


def test_unweighted_question_gets_default_category(catalog, registry):
    registry.remove("f2_q02")
    report = build_consolidated_report(catalog, ANSWERS, RespondentMeta(), registry)
    row = next(r for r in report.detailed_responses if r.question_id == "f2_q02")
    assert row.category == "Sem Categoria"
    assert row.weight == 1


def test_category_summary(report):
    summary = {c.category: c for c in report.category_summary}
    usab = summary["Usabilidade"]
    assert usab.score_percentage == pytest.approx(68.0)
    assert usab.status == "Regular"
    assert usab.total_questions == 2
    assert usab.answered_questions == 2
    assert usab.average_score == pytest.approx(8.5)
    assert usab.weighted_score == pytest.approx(85.0)
    assert usab.key_insights == [
        "Usabilidade tem potencial de melhoria",
        "Oportunidade de otimização identificada",
    ]
    assert summary["Feedback"].answered_questions == 0
    assert summary["Integrações Críticas"].status == "Crítico"


def test_prioritized_recommendations(report):
    recs = [(r.priority, r.category) for r in report.prioritized_recommendations]
    assert recs == [
        ("Alta", "Business Intelligence"),
        ("Alta", "Integrações Críticas"),
        ("Média", "Usabilidade"),
    ]
    high = report.prioritized_recommendations[0]
    assert high.recommendation == "Implementar dashboards executivos com KPIs em tempo real"
    assert (high.impact, high.effort, high.timeline) == ("Alto", "Alto", "3-6 meses")
    medium = report.prioritized_recommendations[-1]
    assert medium.recommendation == "Melhorar Usabilidade conforme análise detalhada"
    assert (medium.impact, medium.effort, medium.timeline) == ("Médio", "Baixo", "6-12 meses")


def test_to_dict_and_call_alias(report):
    as_dict = report.to_dict()
    assert as_dict["metadata"]["total_questions"] == 5
    assert as_dict["analysis"]["overall_score"]["label"] == "Geral"
    assert report() == as_dict


def test_respondent_meta_from_interview():
    interview = Interview(
        "i1", is_interviewer=True, interviewer_name="Bia", respondent_name="Caio"
    )
    meta = RespondentMeta.from_interview(interview)
    assert meta.is_interviewer is True
    assert meta.interviewer_name == "Bia"
    assert meta.respondent_name == "Caio"
    assert meta.respondent_department is None
