"""Aggregate scores across many interviews into dashboard statistics."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List

from ppm_survey.catalog import QuestionCatalog
from ppm_survey.interview import Interview
from ppm_survey.scoring.aggregator import analyze_answers
from ppm_survey.scoring.models import percentage_of
from ppm_survey.scoring.registry import WeightRegistry

logger = logging.getLogger(__name__)

_SCORE_FIELDS = (
    ("overallScore", "overall_score"),
    ("satisfactionScore", "satisfaction_score"),
    ("functionalityScore", "functionality_score"),
    ("integrationScore", "integration_score"),
    ("usageScore", "usage_score"),
)


@dataclass(slots=True)
class InterviewsSummary:
    """Counts and average percentages over a set of interviews."""

    total_interviews: int
    completed_interviews: int
    analyzed_interviews: int
    completion_rate: float
    average_scores: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def summarize_interviews(
    interviews: Iterable[Interview],
    catalog: QuestionCatalog,
    registry: WeightRegistry,
) -> InterviewsSummary:
    """Score every interview holding answers and average its percentages.

    Interviews without any answered form count toward the totals but not
    toward the averages. The function is read-only.
    """
    items: List[Interview] = list(interviews)
    sums: Dict[str, float] = defaultdict(float)
    analyzed = 0

    for interview in items:
        answers = interview.form_answers()
        if not any(answers.values()):
            continue
        result = analyze_answers(catalog, answers, registry)
        for key, attr in _SCORE_FIELDS:
            sums[key] += getattr(result, attr).percentage
        analyzed += 1

    completed = sum(1 for i in items if i.is_completed)
    averages = {key: sums[key] / analyzed for key, _ in _SCORE_FIELDS} if analyzed else {}

    logger.debug("Summarized %d interviews (%d analyzed)", len(items), analyzed)
    return InterviewsSummary(
        total_interviews=len(items),
        completed_interviews=completed,
        analyzed_interviews=analyzed,
        completion_rate=percentage_of(completed, len(items)),
        average_scores=averages,
    )
