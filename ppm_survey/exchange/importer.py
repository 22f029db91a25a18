"""Import of survey CSV files into the interview store.

Two layouts are accepted: the consolidated-per-form export (one row per
answered question) and the wide import template (one row per respondent).
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Sequence, Set, Tuple

from ppm_survey.catalog import FORM_IDS, QuestionCatalog, QuestionType
from ppm_survey.exceptions import InterviewStoreError
from ppm_survey.exchange.csv_codec import (
    group_rows,
    parse_template_csv,
    read_table,
    validate_consolidated_csv,
)
from ppm_survey.interview import AnswerSet
from ppm_survey.interview_store import InterviewStore
from ppm_survey.scoring.normalizer import LIST_DELIMITER, leading_int

__all__ = [
    "ImportResult",
    "import_consolidated_csv",
    "validate_template_rows",
    "import_template_rows",
    "import_template_csv",
]

logger = logging.getLogger(__name__)

# Inclusive bounds checked on template import, by question type
_SCALE_BOUNDS = {
    QuestionType.SCALE_1_5.value: (1, 5),
    QuestionType.SCALE_0_10.value: (0, 10),
}


@dataclass(slots=True)
class ImportResult:
    success: bool = False
    message: str = ""
    imported_interviews: int = 0
    skipped_interviews: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _discard(store: InterviewStore, interview_id: str) -> None:
    """Delete a partially imported interview so a later retry is not skipped."""
    try:
        store.delete_interview(interview_id)
    except InterviewStoreError as exc:
        logger.warning("Could not remove partial interview %s: %s", interview_id, exc)


def _finish(result: ImportResult, summary: str) -> None:
    result.success = result.imported_interviews > 0
    result.message = summary
    if result.errors:
        result.message += f"\n{len(result.errors)} erros encontrados"


# ---------------------------------------------------------------------------
# Consolidated-per-form files
# ---------------------------------------------------------------------------


def import_consolidated_csv(
    text: str,
    store: InterviewStore,
    catalog: QuestionCatalog,
    form_id: str,
) -> ImportResult:
    """Create one interview per (respondent, timestamp) group found in *text*.

    The form and the file are validated first and the import is refused as a
    whole when either is invalid. Groups are processed one at a time; a store
    failure on one group is recorded in ``errors``, the partial interview is
    removed, and the next group is attempted. Groups whose respondent name
    and timestamp match an existing interview's creation time are skipped.
    """
    result = ImportResult()

    if form_id not in FORM_IDS or catalog.get_form(form_id) is None:
        error = f"Formulário {form_id} não encontrado"
        result.errors = [error]
        result.message = f"Importação não realizada: {error}"
        logger.warning("Consolidated import refused: unknown form %s", form_id)
        return result

    errors = validate_consolidated_csv(text)
    if errors:
        result.errors = errors
        result.message = "Arquivo CSV inválido: " + "; ".join(errors)
        logger.warning("Consolidated import refused: %s", "; ".join(errors))
        return result

    headers, rows = read_table(text)
    groups = group_rows(headers, rows)

    try:
        existing: Set[Tuple[str, str]] = {
            (i.respondent_name or "", i.created_at) for i in store.list_interviews()
        }
    except InterviewStoreError as exc:
        result.errors.append(f"Erro ao buscar entrevistas existentes: {exc}")
        result.message = "Importação não realizada: falha ao consultar entrevistas"
        logger.error("Consolidated import aborted: %s", exc)
        return result

    snapshot = catalog.to_dict()
    for key, group in groups.items():
        if key in existing:
            result.skipped_interviews += 1
            logger.debug("Skipping already imported interview %s @ %s", *key)
            continue
        interview = None
        try:
            interview = store.create_interview(
                is_interviewer=bool(group.interviewer_name),
                interviewer_name=group.interviewer_name or None,
                respondent_name=group.respondent_name,
                respondent_department=group.respondent_department or None,
                created_at=group.timestamp,
            )
            if group.answers:
                store.save_answers(interview.interview_id, form_id, group.answers)
            if group.is_completed:
                store.complete_interview(interview.interview_id, snapshot)
        except InterviewStoreError as exc:
            if interview is not None:
                _discard(store, interview.interview_id)
            message = f"Erro ao importar entrevista {group.respondent_name}_{group.timestamp}: {exc}"
            result.errors.append(message)
            logger.error(message)
            continue
        existing.add(key)
        result.imported_interviews += 1

    _finish(
        result,
        f"Importação concluída: {result.imported_interviews} entrevistas importadas, "
        f"{result.skipped_interviews} ignoradas",
    )
    logger.info(
        "Consolidated import finished",
        extra={
            "form_id": form_id,
            "imported": result.imported_interviews,
            "skipped": result.skipped_interviews,
            "errors": len(result.errors),
        },
    )
    return result


# ---------------------------------------------------------------------------
# Wide import template
# ---------------------------------------------------------------------------


def validate_template_rows(
    rows: Sequence[Mapping[str, str]], catalog: QuestionCatalog
) -> List[str]:
    """Return itemized problems in parsed template *rows* (empty if valid).

    Line numbers count the header as line 1.
    """
    if not rows:
        return ["Nenhuma linha de dados encontrada"]

    errors: List[str] = []
    for line, row in enumerate(rows, start=2):
        if not (row.get("respondent_name") or "").strip():
            errors.append(f"Linha {line}: Campo obrigatório 'respondent_name' está vazio")

        for _form, question in catalog.iter_questions():
            bounds = _SCALE_BOUNDS.get(question.type)
            answer = (row.get(question.id) or "").strip()
            if bounds is None or not answer:
                continue
            low, high = bounds
            value = leading_int(answer)
            if value is None or not low <= value <= high:
                errors.append(
                    f"Linha {line}: Pergunta {question.id} deve ser um número entre {low} e {high}"
                )
    return errors


def _template_answers(row: Mapping[str, str], catalog: QuestionCatalog) -> Dict[str, AnswerSet]:
    answers: Dict[str, AnswerSet] = {}
    for form, question in catalog.iter_questions():
        raw = (row.get(question.id) or "").strip()
        if not raw:
            continue
        value: Any = raw
        if question.type == QuestionType.MULTIPLE.value and LIST_DELIMITER in raw:
            value = [part.strip() for part in raw.split(LIST_DELIMITER) if part.strip()]
        answers.setdefault(form.id, {})[question.id] = value
    return answers


def import_template_rows(
    rows: Sequence[Mapping[str, str]],
    store: InterviewStore,
    catalog: QuestionCatalog,
) -> ImportResult:
    """Create one interview per template row, with its answers split by form.

    Rows are expected to have passed :func:`validate_template_rows`. Only
    ``;``-joined answers to multi-select questions become lists. A store
    failure on one row is recorded, the partial interview is removed, and
    the next row is attempted.
    """
    result = ImportResult()

    for line, row in enumerate(rows, start=2):
        name = (row.get("respondent_name") or "").strip()
        interviewer = (row.get("interviewer_name") or "").strip()
        interview = None
        try:
            interview = store.create_interview(
                is_interviewer=bool(interviewer),
                interviewer_name=interviewer or None,
                respondent_name=name or None,
                respondent_department=(row.get("respondent_department") or "").strip() or None,
                created_at=(row.get("timestamp") or "").strip() or None,
            )
            for form_id, answers in _template_answers(row, catalog).items():
                store.save_answers(interview.interview_id, form_id, answers)
        except InterviewStoreError as exc:
            if interview is not None:
                _discard(store, interview.interview_id)
            message = f"Erro ao importar linha {line} ({name}): {exc}"
            result.errors.append(message)
            logger.error(message)
            continue
        result.imported_interviews += 1

    _finish(result, f"{result.imported_interviews} registro(s) importado(s) com sucesso")
    logger.info(
        "Template import finished",
        extra={"imported": result.imported_interviews, "errors": len(result.errors)},
    )
    return result


def import_template_csv(
    text: str, store: InterviewStore, catalog: QuestionCatalog
) -> ImportResult:
    """Parse, validate and import a filled-in import template."""
    try:
        rows = parse_template_csv(text)
    except ValueError as exc:
        return ImportResult(message=f"Erro ao ler arquivo: {exc}", errors=[str(exc)])

    errors = validate_template_rows(rows, catalog)
    if errors:
        logger.warning("Template import refused: %d validation errors", len(errors))
        return ImportResult(
            message="Erros de validação:\n" + "\n".join(errors), errors=errors
        )
    return import_template_rows(rows, store, catalog)
