"""Data structures produced by the scoring pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List


def percentage_of(score: float, max_score: float) -> float:
    """Return ``100 * score / max_score``, or 0 when *max_score* is 0."""
    return (score / max_score) * 100 if max_score > 0 else 0.0


@dataclass(frozen=True, slots=True)
class ScoreResult:
    """A score against its attainable maximum."""

    score: float
    max_score: float
    percentage: float
    label: str

    @classmethod
    def compute(cls, score: float, max_score: float, label: str) -> "ScoreResult":
        return cls(score, max_score, percentage_of(score, max_score), label)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class CategoryScore:
    """Weighted score of one category plus the category's own weight."""

    category: str
    score: float
    max_score: float
    percentage: float
    question_count: int
    weight: int

    @property
    def label(self) -> str:
        return self.category

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Scores, insights and recommendations for one answer set."""

    overall_score: ScoreResult
    category_scores: List[CategoryScore]
    satisfaction_score: ScoreResult
    functionality_score: ScoreResult
    integration_score: ScoreResult
    usage_score: ScoreResult
    insights: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:  # noqa: D401 – simple helper
        """Return a *plain* ``dict`` (recursively), e.g. for the analyses API."""
        return asdict(self)
