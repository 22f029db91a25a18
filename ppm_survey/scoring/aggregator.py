"""Fold normalized answers into category, dimension and overall scores."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional, Tuple, Union

from ppm_survey.catalog import Question, QuestionCatalog, form_id_for
from ppm_survey.scoring.insights import generate_insights, generate_recommendations
from ppm_survey.scoring.models import AnalysisResult, CategoryScore, ScoreResult
from ppm_survey.scoring.normalizer import Answer, max_for, normalize
from ppm_survey.scoring.registry import WeightRegistry
from ppm_survey.scoring.weights import DIMENSIONS, AnalysisType, WeightEntry

logger = logging.getLogger(__name__)

# {"f1": {"f1_q01": "4", ...}, "f2": {...}, "f3": {...}}
FormAnswers = Mapping[str, Mapping[str, Answer]]

OVERALL_LABEL = "Geral"


def lookup_answer(answers: FormAnswers, question_id: str) -> Optional[Answer]:
    """Return the answer to *question_id* from the form its id prefix names."""
    return (answers.get(form_id_for(question_id)) or {}).get(question_id)


def resolve_question(catalog: QuestionCatalog, question_id: str) -> Optional[Question]:
    """Return the scorable catalog question, or ``None`` if unknown or inactive."""
    question = catalog.find_question(question_id)
    if question is None:
        logger.debug("Skipping weight for unknown question %s", question_id)
        return None
    if not question.active:
        logger.debug("Skipping weight for inactive question %s", question_id)
        return None
    return question


def _accumulate(
    entries: Iterable[WeightEntry], answers: FormAnswers, catalog: QuestionCatalog
) -> Tuple[float, float, int]:
    score = 0.0
    max_score = 0.0
    count = 0
    for entry in entries:
        question = resolve_question(catalog, entry.question_id)
        if question is None:
            continue
        value = normalize(lookup_answer(answers, entry.question_id), question.type)
        score += value * entry.weight
        max_score += max_for(question.type) * entry.weight
        count += 1
    return score, max_score, count


def category_score(
    category: str,
    answers: FormAnswers,
    *,
    catalog: QuestionCatalog,
    registry: WeightRegistry,
) -> CategoryScore:
    """Score *category* from every weight entry that belongs to it."""
    score, max_score, count = _accumulate(
        registry.entries_for_category(category), answers, catalog
    )
    category_weight = registry.get_category_weight(category)
    result = ScoreResult.compute(score, max_score, category)
    return CategoryScore(
        category=category,
        score=result.score,
        max_score=result.max_score,
        percentage=result.percentage,
        question_count=count,
        weight=category_weight.weight if category_weight else 1,
    )


def dimension_score(
    analysis_type: Union[AnalysisType, str],
    answers: FormAnswers,
    *,
    catalog: QuestionCatalog,
    registry: WeightRegistry,
) -> ScoreResult:
    """Score one analytical dimension; category weights play no part here."""
    dimension = AnalysisType(analysis_type)
    score, max_score, _count = _accumulate(
        registry.entries_for_dimension(dimension), answers, catalog
    )
    return ScoreResult.compute(score, max_score, dimension.value)


def overall_score(category_scores: Iterable[CategoryScore]) -> ScoreResult:
    """Weight each category's score and maximum by the category weight."""
    total = 0.0
    total_max = 0.0
    for cat in category_scores:
        total += cat.score * cat.weight
        total_max += cat.max_score * cat.weight
    return ScoreResult.compute(total, total_max, OVERALL_LABEL)


def analyze_answers(
    catalog: QuestionCatalog, answers: FormAnswers, registry: WeightRegistry
) -> AnalysisResult:
    """Run the full scoring pass for one interview's answers.

    Pure with respect to its inputs: the registry is only read.
    """
    category_scores = [
        category_score(category, answers, catalog=catalog, registry=registry)
        for category in registry.categories()
    ]
    overall = overall_score(category_scores)

    dims = {
        dim: dimension_score(dim, answers, catalog=catalog, registry=registry)
        for dim in DIMENSIONS
    }
    satisfaction = dims[AnalysisType.SATISFACTION]
    functionality = dims[AnalysisType.FUNCTIONALITY]
    integration = dims[AnalysisType.INTEGRATION]

    insights = generate_insights(category_scores, satisfaction, functionality, integration)
    recommendations = generate_recommendations(
        category_scores, satisfaction, functionality, integration
    )

    return AnalysisResult(
        overall_score=overall,
        category_scores=sorted(category_scores, key=lambda c: c.percentage, reverse=True),
        satisfaction_score=satisfaction,
        functionality_score=functionality,
        integration_score=integration,
        usage_score=dims[AnalysisType.USAGE],
        insights=insights,
        recommendations=recommendations,
    )
