"""CSV exports of survey answers and consolidated reports.

Three export shapes are produced here:

* per-form (or all-forms) answer rows for a single interview;
* the consolidated-per-form file, one row per answered question across every
  stored interview, preceded by a five-line statistics block;
* the sectioned consolidated report of one interview.

Plus the blank import template listing every active question.
"""
from __future__ import annotations

import csv
import datetime
import io
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ppm_survey.catalog import QuestionCatalog, QuestionType
from ppm_survey.exchange.csv_codec import encode_rows, format_value
from ppm_survey.interview_store import InterviewStore
from ppm_survey.reporting.context import ConsolidatedReportData, RespondentMeta
from ppm_survey.scoring.normalizer import is_answered

__all__ = [
    "ALL_FORMS",
    "ANSWER_HEADERS",
    "CONSOLIDATED_FORM_HEADERS",
    "ConsolidatedFormRow",
    "FormConsolidationStats",
    "generate_answer_rows",
    "generate_answers_csv",
    "consolidate_form_interviews",
    "generate_consolidated_form_csv",
    "export_consolidated_report_csv",
    "generate_import_template",
    "generate_file_name",
    "consolidated_file_name",
]

logger = logging.getLogger(__name__)

ALL_FORMS = "consolidado"
ANONYMOUS = "Anônimo"

ANSWER_HEADERS = (
    "form_id",
    "question_id",
    "pergunta",
    "resposta",
    "is_interviewer",
    "interviewer_name",
    "respondent_name",
    "respondent_department",
    "timestamp",
)

CONSOLIDATED_FORM_HEADERS = (
    "form_id",
    "form_title",
    "question_id",
    "pergunta",
    "question_type",
    "category",
    "respondent_name",
    "respondent_department",
    "interviewer_name",
    "resposta",
    "timestamp",
    "interview_id",
    "is_completed",
)

_TEMPLATE_EXAMPLES = {
    QuestionType.SCALE_1_5.value: "3",
    QuestionType.SCALE_0_10.value: "7",
    QuestionType.YES_NO.value: "Sim",
    QuestionType.YES_NO_PARTIAL.value: "Parcialmente",
    QuestionType.MULTIPLE.value: "Opção 1;Opção 2",
    QuestionType.SELECT_ONE.value: "Opção escolhida",
    QuestionType.TEXT.value: "Resposta em texto livre",
}


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _parse_iso(value: Optional[str]) -> Optional[datetime.datetime]:
    if not value:
        return None
    try:
        parsed = datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


# ---------------------------------------------------------------------------
# Single-interview answer export
# ---------------------------------------------------------------------------


def generate_answer_rows(
    catalog: QuestionCatalog,
    form_id: str,
    answers: Mapping[str, Mapping[str, Any]],
    meta: RespondentMeta,
    *,
    timestamp: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Return one row per question of *form_id* (or every form for ``"consolidado"``).

    Unanswered questions are exported with an empty ``resposta``; all rows
    share a single export timestamp.
    """
    stamp = timestamp or _now().isoformat()
    forms = [f for f in catalog.forms if form_id == ALL_FORMS or f.id == form_id]

    rows: List[Dict[str, Any]] = []
    for form in forms:
        form_answers = answers.get(form.id) or {}
        for question in form.questions:
            answer = form_answers.get(question.id)
            rows.append(
                {
                    "form_id": form.id,
                    "question_id": question.id,
                    "pergunta": question.label,
                    "resposta": answer if is_answered(answer) else "",
                    "is_interviewer": meta.is_interviewer,
                    "interviewer_name": meta.interviewer_name or "",
                    "respondent_name": meta.respondent_name or "",
                    "respondent_department": meta.respondent_department or "",
                    "timestamp": stamp,
                }
            )
    return rows


def generate_answers_csv(rows: Iterable[Mapping[str, Any]]) -> str:
    return encode_rows(ANSWER_HEADERS, rows)


# ---------------------------------------------------------------------------
# Consolidation across interviews
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class ConsolidatedFormRow:
    form_id: str
    form_title: str
    question_id: str
    pergunta: str
    question_type: str
    category: str
    respondent_name: str
    respondent_department: str
    interviewer_name: str
    resposta: Any
    timestamp: str
    interview_id: str
    is_completed: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class FormConsolidationStats:
    form_id: str
    form_title: str
    total_interviews: int
    completed_interviews: int
    total_questions: int
    completion_rate: float
    earliest: Optional[datetime.datetime] = None
    latest: Optional[datetime.datetime] = None


def consolidate_form_interviews(
    store: InterviewStore,
    catalog: QuestionCatalog,
    form_id: str,
) -> Tuple[List[ConsolidatedFormRow], FormConsolidationStats]:
    """Collect every stored answer to *form_id* into flat rows.

    Interviews whose blob for the form is empty are ignored. An interview
    whose blob cannot be decoded is logged and skipped; it still counts in
    the statistics.

    Raises
    ------
    ValueError
        If *form_id* is not in the catalog.
    InterviewStoreError
        If the interview list cannot be fetched.
    """
    form = catalog.get_form(form_id)
    if form is None:
        raise ValueError(f"Formulário {form_id} não encontrado")

    interviews = [i for i in store.list_interviews() if i.has_answers(form_id)]
    rows: List[ConsolidatedFormRow] = []
    dates: List[datetime.datetime] = []

    for interview in interviews:
        try:
            answers = interview.answers_for(form_id)
        except ValueError as exc:
            logger.warning(
                "Skipping interview %s: unreadable %s answers (%s)",
                interview.interview_id,
                form_id,
                exc,
            )
            continue

        created = _parse_iso(interview.created_at)
        if created is not None:
            dates.append(created)

        for question in form.questions:
            answer = answers.get(question.id)
            if not is_answered(answer):
                continue
            rows.append(
                ConsolidatedFormRow(
                    form_id=form.id,
                    form_title=form.title,
                    question_id=question.id,
                    pergunta=question.label,
                    question_type=question.type,
                    category=question.category or "",
                    respondent_name=interview.respondent_name or ANONYMOUS,
                    respondent_department=interview.respondent_department or "",
                    interviewer_name=interview.interviewer_name or "",
                    resposta=answer,
                    timestamp=interview.created_at,
                    interview_id=interview.interview_id,
                    is_completed=interview.is_completed,
                )
            )

    completed = sum(1 for i in interviews if i.is_completed)
    stats = FormConsolidationStats(
        form_id=form.id,
        form_title=form.title,
        total_interviews=len(interviews),
        completed_interviews=completed,
        total_questions=len(form.questions),
        completion_rate=completed / len(interviews) * 100 if interviews else 0.0,
        earliest=min(dates) if dates else None,
        latest=max(dates) if dates else None,
    )
    logger.info(
        "Consolidated form %s: %d rows from %d interviews",
        form_id,
        len(rows),
        len(interviews),
        extra={"form_id": form_id, "rows": len(rows)},
    )
    return rows, stats


def _date_label(value: Optional[datetime.datetime]) -> str:
    return value.strftime("%d/%m/%Y") if value else "-"


def generate_consolidated_form_csv(
    rows: Sequence[ConsolidatedFormRow],
    stats: FormConsolidationStats,
    *,
    generated_at: Optional[datetime.datetime] = None,
) -> str:
    """Return the statistics block followed by the strict CSV table."""
    generated = generated_at or _now()
    preamble = [
        f"=== CONSOLIDADO {stats.form_title.upper()} ===",
        f"Total de Entrevistas: {stats.total_interviews}",
        f"Entrevistas Completas: {stats.completed_interviews}",
        f"Taxa de Conclusão: {stats.completion_rate:.1f}%",
        f"Período: {_date_label(stats.earliest)} a {_date_label(stats.latest)}",
        f"Gerado em: {generated.strftime('%d/%m/%Y %H:%M:%S')}",
        "",
    ]
    table = encode_rows(CONSOLIDATED_FORM_HEADERS, (row.to_dict() for row in rows))
    return "\n".join(preamble) + "\n" + table


# ---------------------------------------------------------------------------
# Sectioned report export
# ---------------------------------------------------------------------------


def _pct(value: float) -> str:
    return f"{value:.1f}%"


def _section(title: str, header: Optional[Sequence[str]], rows: Iterable[Sequence[Any]]) -> str:
    buffer = io.StringIO()
    buffer.write(f"=== {title} ===\n")
    writer = csv.writer(buffer, lineterminator="\n")
    if header:
        writer.writerow(header)
    for row in rows:
        writer.writerow([format_value(cell) for cell in row])
    return buffer.getvalue()


def export_consolidated_report_csv(report: ConsolidatedReportData) -> str:
    """Serialize a consolidated report into titled CSV sections."""
    meta = report.metadata
    analysis = report.analysis

    sections = [
        _section(
            "METADADOS",
            None,
            [
                ("Data de Geração", meta.generated_at),
                ("Total de Perguntas", meta.total_questions),
                ("Perguntas Respondidas", meta.answered_questions),
                ("Taxa de Conclusão", _pct(meta.completion_rate)),
            ],
        ),
        _section(
            "SCORES GERAIS",
            None,
            [
                ("Score Geral", _pct(analysis.overall_score.percentage)),
                ("Satisfação", _pct(analysis.satisfaction_score.percentage)),
                ("Funcionalidades", _pct(analysis.functionality_score.percentage)),
                ("Integração", _pct(analysis.integration_score.percentage)),
                ("Uso e Adoção", _pct(analysis.usage_score.percentage)),
            ],
        ),
        _section(
            "RESUMO POR CATEGORIA",
            ("Categoria", "Score", "Status", "Peso", "Perguntas", "Insights"),
            [
                (
                    cat.category,
                    _pct(cat.score_percentage),
                    cat.status,
                    cat.weight,
                    cat.total_questions,
                    "; ".join(cat.key_insights),
                )
                for cat in report.category_summary
            ],
        ),
        _section(
            "RECOMENDAÇÕES PRIORIZADAS",
            ("Prioridade", "Categoria", "Recomendação", "Impacto", "Esforço", "Timeline"),
            [
                (rec.priority, rec.category, rec.recommendation, rec.impact, rec.effort, rec.timeline)
                for rec in report.prioritized_recommendations
            ],
        ),
        _section(
            "RESPOSTAS DETALHADAS",
            ("Formulário", "Pergunta", "Categoria", "Peso", "Resposta", "Score", "Score%"),
            [
                (
                    resp.form_title,
                    resp.question_text,
                    resp.category,
                    resp.weight,
                    "; ".join(resp.raw_answer)
                    if isinstance(resp.raw_answer, list)
                    else resp.raw_answer,
                    resp.numeric_score,
                    _pct(resp.score_percentage),
                )
                for resp in report.detailed_responses
            ],
        ),
    ]
    return "\n".join(sections).rstrip("\n")


# ---------------------------------------------------------------------------
# Import template and file names
# ---------------------------------------------------------------------------


def generate_import_template(
    catalog: QuestionCatalog, *, now: Optional[datetime.datetime] = None
) -> str:
    """Return a header of respondent fields plus active question ids and one example row."""
    stamp = (now or _now()).strftime("%Y-%m-%d %H:%M:%S")
    headers = ["respondent_name", "respondent_department", "interviewer_name", "timestamp"]
    example = [
        "Nome do Respondente",
        "Departamento/Área",
        "Nome do Entrevistador (opcional)",
        stamp,
    ]
    for _form, question in catalog.iter_questions():
        headers.append(question.id)
        example.append(
            _TEMPLATE_EXAMPLES.get(question.type, "Resposta conforme tipo da pergunta")
        )

    buffer = io.StringIO()
    buffer.write(",".join(headers) + "\n")
    csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="").writerow(example)
    return buffer.getvalue()


def _file_stamp(now: Optional[datetime.datetime]) -> str:
    return (now or _now()).strftime("%Y%m%d-%H%M")


def generate_file_name(form_id: str, *, now: Optional[datetime.datetime] = None) -> str:
    """Return ``PPM_form_f1_YYYYMMDD-HHMM.csv`` (or ``PPM_consolidado_...``)."""
    label = ALL_FORMS if form_id == ALL_FORMS else f"form_{form_id}"
    return f"PPM_{label}_{_file_stamp(now)}.csv"


def consolidated_file_name(
    stats: FormConsolidationStats, *, now: Optional[datetime.datetime] = None
) -> str:
    return (
        f"PPM_Consolidado_{stats.form_id.upper()}_"
        f"{stats.total_interviews}entrevistas_{_file_stamp(now)}.csv"
    )
