"""Flat-file exchange format for survey answers.

Writing is strict: every data field is double-quoted with inner quotes
doubled, and line breaks inside values are flattened to spaces so one record
is always one line.

Reading the consolidated format is deliberately naive: lines are split on
commas and quotes are stripped. Free text containing commas therefore
misaligns columns on re-import; files already in circulation were produced
by the strict writer and are read this way. The wide import template is
parsed with :mod:`csv` instead.
"""
from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ppm_survey.interview import AnswerSet, utc_now_iso
from ppm_survey.scoring.normalizer import LIST_DELIMITER

__all__ = [
    "REQUIRED_IMPORT_HEADERS",
    "format_value",
    "encode_rows",
    "split_line_naive",
    "read_table",
    "split_answer",
    "InterviewGroup",
    "group_rows",
    "validate_consolidated_csv",
    "parse_template_csv",
]

logger = logging.getLogger(__name__)


REQUIRED_IMPORT_HEADERS: Tuple[str, ...] = ("respondent_name", "question_id", "resposta")

# every separator str.splitlines() honours
_LINE_BREAK_RE = re.compile(r"\r\n|[\n\r\v\f\x1c\x1d\x1e\x85\u2028\u2029]")
_RECORD_SEP_RE = re.compile(r"\r\n|\n|\r")


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


def format_value(value: Any) -> str:
    """Return the text form of one cell value."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        value = LIST_DELIMITER.join(str(v) for v in value)
    return _LINE_BREAK_RE.sub(" ", str(value))


def encode_rows(headers: Sequence[str], rows: Iterable[Mapping[str, Any]]) -> str:
    """Return a header line followed by one fully quoted line per row."""
    buffer = io.StringIO()
    buffer.write(",".join(headers))
    buffer.write("\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        writer.writerow([format_value(row.get(header)) for header in headers])
    return buffer.getvalue().rstrip("\n")


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


def split_line_naive(line: str) -> List[str]:
    """Split on every comma and strip quotes and surrounding whitespace."""
    return [cell.replace('"', "").strip() for cell in line.split(",")]


def read_table(text: str) -> Tuple[List[str], List[List[str]]]:
    """Return ``(headers, rows)`` from consolidated CSV *text*.

    Records are separated by CR, LF or CRLF only. Blank lines are dropped.
    A leading statistics preamble is skipped: the header line is the first
    line whose cells include ``question_id``; when no line qualifies the
    first non-blank line is used.
    """
    lines = [line for line in _RECORD_SEP_RE.split(text) if line.strip()]
    if not lines:
        return [], []

    start = 0
    for idx, line in enumerate(lines):
        if "question_id" in split_line_naive(line):
            start = idx
            break

    headers = split_line_naive(lines[start])
    rows = [split_line_naive(line) for line in lines[start + 1 :]]
    return headers, rows


def split_answer(value: str) -> Any:
    """Rebuild a multi-select answer from its ``;``-joined text form."""
    if LIST_DELIMITER in value:
        return [part.strip() for part in value.split(LIST_DELIMITER) if part.strip()]
    return value


def _cell(values: Sequence[str], index: int) -> str:
    if 0 <= index < len(values):
        return values[index]
    return ""


def _index(headers: Sequence[str], name: str) -> int:
    try:
        return headers.index(name)
    except ValueError:
        return -1


@dataclass(slots=True)
class InterviewGroup:
    """All rows of one (respondent_name, timestamp) pair."""

    respondent_name: str
    timestamp: str
    respondent_department: str = ""
    interviewer_name: str = ""
    is_completed: bool = False
    answers: AnswerSet = field(default_factory=dict)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.respondent_name, self.timestamp)


def group_rows(
    headers: Sequence[str],
    rows: Iterable[Sequence[str]],
    *,
    default_timestamp: Optional[str] = None,
) -> Dict[Tuple[str, str], InterviewGroup]:
    """Group data rows into one answer set per respondent and timestamp.

    Rows without a respondent name are ignored. Rows missing a timestamp
    share *default_timestamp* (the parse time when omitted). The first row
    of a group supplies its respondent metadata.
    """
    name_idx = _index(headers, "respondent_name")
    dept_idx = _index(headers, "respondent_department")
    interviewer_idx = _index(headers, "interviewer_name")
    question_idx = _index(headers, "question_id")
    answer_idx = _index(headers, "resposta")
    ts_idx = _index(headers, "timestamp")
    completed_idx = _index(headers, "is_completed")

    fallback_ts = default_timestamp or utc_now_iso()
    groups: Dict[Tuple[str, str], InterviewGroup] = {}

    for values in rows:
        name = _cell(values, name_idx)
        if not name or name == "respondent_name":
            continue
        timestamp = _cell(values, ts_idx) or fallback_ts

        group = groups.get((name, timestamp))
        if group is None:
            group = InterviewGroup(
                respondent_name=name,
                timestamp=timestamp,
                respondent_department=_cell(values, dept_idx),
                interviewer_name=_cell(values, interviewer_idx),
                is_completed=_cell(values, completed_idx) == "true",
            )
            groups[group.key] = group

        question_id = _cell(values, question_idx)
        answer = _cell(values, answer_idx)
        if question_id and answer:
            group.answers[question_id] = split_answer(answer)

    return groups


def validate_consolidated_csv(text: str) -> List[str]:
    """Return the list of problems that make *text* unimportable (empty if valid)."""
    errors: List[str] = []
    headers, rows = read_table(text)

    if not headers or not rows:
        errors.append("Arquivo deve ter pelo menos cabeçalho e uma linha de dados")
        return errors

    for required in REQUIRED_IMPORT_HEADERS:
        if required not in headers:
            errors.append(f"Coluna obrigatória não encontrada: {required}")

    name_idx = _index(headers, "respondent_name")
    has_valid_data = any(
        _cell(values, name_idx) not in ("", "respondent_name") for values in rows
    )
    if not has_valid_data:
        errors.append("Nenhum dado válido encontrado no arquivo")

    return errors


# ---------------------------------------------------------------------------
# Wide import template (one row per respondent, one column per question)
# ---------------------------------------------------------------------------


def parse_template_csv(text: str) -> List[Dict[str, str]]:
    """Return one ``{header: cell}`` dict per data row of an import-template file.

    Cells are read with :mod:`csv`, so commas inside quoted answers survive.
    Blank lines are ignored; rows whose column count differs from the header
    are logged and skipped.

    Raises
    ------
    ValueError
        If *text* has no header plus at least one data line.
    """
    lines = [line for line in _RECORD_SEP_RE.split(text.strip()) if line.strip()]
    if len(lines) < 2:
        raise ValueError("CSV deve conter pelo menos cabeçalho e uma linha de dados")

    headers = split_line_naive(lines[0])
    rows: List[Dict[str, str]] = []
    for number, line in enumerate(lines[1:], start=2):
        values = [cell.strip() for cell in next(csv.reader([line]))]
        if len(values) != len(headers):
            logger.warning(
                "Skipping template line %d: %d columns, expected %d",
                number,
                len(values),
                len(headers),
            )
            continue
        rows.append(dict(zip(headers, values)))
    return rows
