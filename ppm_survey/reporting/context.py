"""Consolidated report assembly.

This module defines :class:`ConsolidatedReportData`, a typed container that
holds everything the report exports and the Markdown template
(``templates/report.md.j2``) need for one interview:

    • the :class:`~ppm_survey.scoring.models.AnalysisResult`;
    • one :class:`DetailedResponse` row per active catalog question;
    • one :class:`CategorySummary` per scored category;
    • tiered :class:`PrioritizedRecommendation` entries.

Everything here is a derived snapshot, recomputed from the current answers
and weights on every call and never persisted on its own.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime as _dt
from datetime import timezone as _tz
from typing import Any, Dict, List, Optional, Union

from ppm_survey.catalog import QuestionCatalog
from ppm_survey.interview import Interview
from ppm_survey.reporting import config
from ppm_survey.scoring.aggregator import (
    FormAnswers,
    analyze_answers,
    lookup_answer,
    resolve_question,
)
from ppm_survey.scoring.insights import (
    effort_estimate,
    recommendation_for_category_with_fallback,
)
from ppm_survey.scoring.models import AnalysisResult, CategoryScore, percentage_of
from ppm_survey.scoring.normalizer import is_answered, max_for, normalize
from ppm_survey.scoring.registry import WeightRegistry

__all__ = [
    "RespondentMeta",
    "ReportMetadata",
    "DetailedResponse",
    "CategorySummary",
    "PrioritizedRecommendation",
    "ConsolidatedReportData",
    "status_label",
    "build_consolidated_report",
]

UNCATEGORIZED = "Sem Categoria"


@dataclass(slots=True)
class RespondentMeta:
    """Who answered and, optionally, who conducted the interview."""

    is_interviewer: bool = False
    interviewer_name: Optional[str] = None
    respondent_name: Optional[str] = None
    respondent_department: Optional[str] = None

    @classmethod
    def from_interview(cls, interview: Interview) -> "RespondentMeta":
        return cls(
            is_interviewer=interview.is_interviewer,
            interviewer_name=interview.interviewer_name,
            respondent_name=interview.respondent_name,
            respondent_department=interview.respondent_department,
        )


@dataclass(slots=True)
class ReportMetadata:
    generated_at: str
    respondent_info: RespondentMeta
    total_questions: int
    answered_questions: int
    completion_rate: float


@dataclass(slots=True)
class DetailedResponse:
    """Per-question row, including unanswered questions (score 0)."""

    form_id: str
    form_title: str
    question_id: str
    question_text: str
    question_type: str
    category: str
    weight: int
    raw_answer: Union[str, List[str]]
    numeric_score: int
    max_possible_score: int
    score_percentage: float


@dataclass(slots=True)
class CategorySummary:
    category: str
    total_questions: int
    answered_questions: int
    average_score: float
    max_score: float
    score_percentage: float
    weight: int
    weighted_score: float
    status: str
    key_insights: List[str] = field(default_factory=list)


@dataclass(slots=True)
class PrioritizedRecommendation:
    priority: str  # "Alta" | "Média"
    category: str
    recommendation: str
    impact: str
    effort: str
    timeline: str


@dataclass(slots=True)
class ConsolidatedReportData:
    """Container with all fields used by the report exporters and template."""

    metadata: ReportMetadata
    analysis: AnalysisResult
    detailed_responses: List[DetailedResponse] = field(default_factory=list)
    category_summary: List[CategorySummary] = field(default_factory=list)
    prioritized_recommendations: List[PrioritizedRecommendation] = field(
        default_factory=list
    )

    def to_dict(self) -> Dict[str, Any]:  # noqa: D401 – simple helper
        """Return a *plain* ``dict`` (recursively) for Jinja rendering."""
        return asdict(self)

    # Alias for convenience (e.g. template kwargs)
    __call__ = to_dict


# ---------------------------------------------------------------------------
# Local helper functions
# ---------------------------------------------------------------------------
def status_label(percentage: float) -> str:
    """Return the qualitative status for a category percentage."""
    if percentage >= 80:
        return "Excelente"
    if percentage >= 70:
        return "Bom"
    if percentage >= 60:
        return "Regular"
    if percentage >= 40:
        return "Ruim"
    return "Crítico"


def _category_insights(category: str, percentage: float) -> List[str]:
    if percentage < 50:
        insights = [
            f"{category} requer atenção imediata",
            "Impacto significativo na eficiência operacional",
        ]
    elif percentage < 70:
        insights = [
            f"{category} tem potencial de melhoria",
            "Oportunidade de otimização identificada",
        ]
    else:
        insights = [f"{category} está funcionando bem", "Manter práticas atuais"]
    return insights[: config.MAX_CATEGORY_INSIGHTS]


def _detailed_responses(
    catalog: QuestionCatalog, answers: FormAnswers, registry: WeightRegistry
) -> List[DetailedResponse]:
    rows: List[DetailedResponse] = []
    for form, question in catalog.iter_questions():
        entry = registry.get_question_weight(question.id)
        answer = (answers.get(form.id) or {}).get(question.id)
        numeric = normalize(answer, question.type)
        max_score = max_for(question.type)
        rows.append(
            DetailedResponse(
                form_id=form.id,
                form_title=form.title,
                question_id=question.id,
                question_text=question.label,
                question_type=question.type,
                category=entry.category if entry else UNCATEGORIZED,
                weight=entry.weight if entry else 1,
                raw_answer=answer if is_answered(answer) else "",
                numeric_score=numeric,
                max_possible_score=max_score,
                score_percentage=percentage_of(numeric, max_score),
            )
        )
    return rows


def _answered_in_category(
    category: str,
    catalog: QuestionCatalog,
    answers: FormAnswers,
    registry: WeightRegistry,
) -> int:
    return sum(
        1
        for entry in registry.entries_for_category(category)
        if resolve_question(catalog, entry.question_id) is not None
        and is_answered(lookup_answer(answers, entry.question_id))
    )


def _category_summary(
    cat: CategoryScore,
    catalog: QuestionCatalog,
    answers: FormAnswers,
    registry: WeightRegistry,
) -> CategorySummary:
    count = cat.question_count
    return CategorySummary(
        category=cat.category,
        total_questions=count,
        answered_questions=_answered_in_category(cat.category, catalog, answers, registry),
        average_score=cat.score / count if count else 0.0,
        max_score=cat.max_score / count if count else 0.0,
        score_percentage=cat.percentage,
        weight=cat.weight,
        weighted_score=cat.score * cat.weight,
        status=status_label(cat.percentage),
        key_insights=_category_insights(cat.category, cat.percentage),
    )


def _prioritized_recommendations(analysis: AnalysisResult) -> List[PrioritizedRecommendation]:
    recommendations: List[PrioritizedRecommendation] = []

    critical = [
        c
        for c in analysis.category_scores
        if c.percentage < 50 and c.weight >= config.CRITICAL_CATEGORY_WEIGHT
    ]
    for cat in critical[: config.MAX_HIGH_PRIORITY]:
        recommendations.append(
            PrioritizedRecommendation(
                priority="Alta",
                category=cat.category,
                recommendation=recommendation_for_category_with_fallback(cat.category, "high"),
                impact="Alto",
                effort=effort_estimate(cat.category),
                timeline="3-6 meses",
            )
        )

    medium = [c for c in analysis.category_scores if 50 <= c.percentage < 70]
    for cat in medium[: config.MAX_MEDIUM_PRIORITY]:
        recommendations.append(
            PrioritizedRecommendation(
                priority="Média",
                category=cat.category,
                recommendation=recommendation_for_category_with_fallback(
                    cat.category, "medium"
                ),
                impact="Médio",
                effort=effort_estimate(cat.category),
                timeline="6-12 meses",
            )
        )

    return recommendations


# ---------------------------------------------------------------------------
# Conversion helper
# ---------------------------------------------------------------------------
def build_consolidated_report(
    catalog: QuestionCatalog,
    answers: FormAnswers,
    meta: RespondentMeta,
    registry: WeightRegistry,
    *,
    generated_at: Optional[str] = None,
) -> ConsolidatedReportData:
    """Assemble :class:`ConsolidatedReportData` for one answer set.

    The function is *pure* with respect to its inputs; only the timestamp
    defaults to "now".
    """
    analysis = analyze_answers(catalog, answers, registry)

    total_questions = catalog.question_count()
    answered_questions = sum(
        1
        for form, question in catalog.iter_questions()
        if is_answered((answers.get(form.id) or {}).get(question.id))
    )

    metadata = ReportMetadata(
        generated_at=generated_at or _dt.now(tz=_tz.utc).isoformat(),
        respondent_info=meta,
        total_questions=total_questions,
        answered_questions=answered_questions,
        completion_rate=percentage_of(answered_questions, total_questions),
    )

    return ConsolidatedReportData(
        metadata=metadata,
        analysis=analysis,
        detailed_responses=_detailed_responses(catalog, answers, registry),
        category_summary=[
            _category_summary(cat, catalog, answers, registry)
            for cat in analysis.category_scores
        ],
        prioritized_recommendations=_prioritized_recommendations(analysis),
    )
