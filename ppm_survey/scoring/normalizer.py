"""Convert one raw survey answer into a bounded numeric score."""
from __future__ import annotations

import re
from typing import List, Optional, Union

from ppm_survey.catalog import QuestionType

__all__ = [
    "Answer",
    "LIST_DELIMITER",
    "is_answered",
    "leading_int",
    "normalize",
    "max_for",
]

Answer = Union[str, List[str]]

# Separator used when a multi-select answer travels as a single string
LIST_DELIMITER = ";"

YES_NO_MARKER = "sim/não"
MULTI_SELECT_CAP = 5
PRESENCE_SCORE = 3
DEFAULT_MAX = 5

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def is_answered(answer: Optional[Answer]) -> bool:
    """Return *True* unless *answer* is ``None``, an empty string or an empty list."""
    if answer is None:
        return False
    if isinstance(answer, str):
        return answer != ""
    return len(answer) > 0


def _as_text(answer: Answer) -> str:
    if isinstance(answer, str):
        return answer
    return LIST_DELIMITER.join(str(item) for item in answer)


def leading_int(text: str) -> Optional[int]:
    """Return the integer *text* starts with (after whitespace), or None."""
    match = _LEADING_INT_RE.match(text)
    return int(match.group(1)) if match else None


def max_for(question_type: str) -> int:
    """Return the maximum attainable score for *question_type*."""
    if question_type == QuestionType.SCALE_0_10.value:
        return 10
    return DEFAULT_MAX


def _scale(text: str, upper: int) -> int:
    value = leading_int(text)
    if value is None:
        return 0
    return max(0, min(value, upper))


def _yes_no(text: str) -> int:
    lowered = text.lower()
    if "sim" in lowered:
        return 5
    if "parcialmente" in lowered:
        return 3
    if "não" in lowered:
        return 1
    return 0


def _multi_select(answer: Answer) -> int:
    if isinstance(answer, str):
        count = len(answer.split(LIST_DELIMITER))
    else:
        count = len(answer)
    return min(count, MULTI_SELECT_CAP)


def normalize(answer: Optional[Answer], question_type: str) -> int:
    """Return the score of *answer* for a question of *question_type*.

    Total over every type tag: numeric scales parse the leading integer,
    any tag containing the yes/no marker maps sim/parcialmente/não to 5/3/1,
    multi-select counts options, and every other answered type earns a flat
    presence score. Unanswered input always scores 0.
    """
    if answer is None or not is_answered(answer):
        return 0

    if question_type == QuestionType.SCALE_0_10.value:
        return _scale(_as_text(answer), 10)
    if question_type == QuestionType.SCALE_1_5.value:
        return _scale(_as_text(answer), 5)
    if YES_NO_MARKER in question_type:
        return _yes_no(_as_text(answer))
    if question_type == QuestionType.MULTIPLE.value:
        return _multi_select(answer)
    return PRESENCE_SCORE if _as_text(answer).strip() else 0
