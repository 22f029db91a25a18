"""Question catalog: the read-only description of the three survey forms.

The catalog is supplied by an external configuration collaborator as a JSON
document shaped like::

    {"forms": [{"id": "f1", "title": "...", "questions": [
        {"id": "f1_q01", "pergunta": "...", "tipo": "escala_1_5",
         "legenda": "...", "categoria": "...", "active": true}]}],
     "lookups": {"SISTEMAS_ESSENCIAIS": [...], ...}}

The engine never mutates it; everything here is frozen once loaded.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from ppm_survey.exceptions import CatalogError

__all__ = [
    "FORM_IDS",
    "QuestionType",
    "Question",
    "FormSpec",
    "QuestionCatalog",
    "form_id_for",
]

FORM_IDS: Tuple[str, ...] = ("f1", "f2", "f3")


class QuestionType(str, Enum):
    """Question type tags known to the survey configuration."""

    SCALE_0_10 = "escala_0_10"
    SCALE_1_5 = "escala_1_5"
    PRIORITY_LIST = "lista_de_priorização_(arrastar_e_soltar_ou_ranking_1_3)"
    EXPERIENCE = "lista_suspensa_(<_1_Ano,_1_3_Anos,_3_5_Anos,_5_10_Anos,_>_10_Anos)"
    FREQUENCY = (
        "lista_suspensa_(Diariamente,_Semanalmente,_Quinzenalmente,"
        "_Mensalmente,_Esporadicamente)"
    )
    ROLE = (
        "lista_suspensa_(Gerente_de_Projeto,_Analista,_Coordenador,_Diretor,"
        "_Consultor,_Scrum_Master,_Outro)"
    )
    DATA_FLOW = (
        "lista_suspensa_(Integração_Automática,_Export/Import,_Digitação_Manual,"
        "_Não_Há_Troca,_Não_Sei)"
    )
    DEPARTMENT = (
        "lista_suspensa_(TI,_Finanças,_RH,_Operações,_Marketing,_PMO,_Estratégia,_Outro)"
    )
    DEPENDENT_LIST = "lista_suspensa_baseada_na_resposta_anterior"
    DEPENDENT_LIST_MULTI = "lista_suspensa_baseada_nas_respostas_anteriores"
    MULTIPLE = "multipla"
    SELECT_ONE = "selecionar_1"
    YES_NO = "sim/não"
    YES_NO_PARTIAL = "sim/não/parcialmente_+_campo_para_especificar_quais"
    YES_NO_FILTER = "sim/não_(pergunta_filtro)"
    TEXT = "texto"


def form_id_for(question_id: str) -> str:
    """Return the form a question belongs to (``"f1_q03"`` → ``"f1"``)."""
    return question_id[:2]


@dataclass(frozen=True)
class Question:
    """A single survey question. Identity is ``id``."""

    id: str
    type: str
    label: str
    caption: str = ""
    category: Optional[str] = None
    active: bool = True

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Question":
        qid = raw.get("id")
        qtype = raw.get("tipo", raw.get("type"))
        if not qid or not isinstance(qid, str):
            raise CatalogError(f"Question without a valid id: {raw!r}")
        if not qtype or not isinstance(qtype, str):
            raise CatalogError(f"Question {qid} has no type")
        return cls(
            id=qid,
            type=qtype,
            label=str(raw.get("pergunta", raw.get("label", ""))),
            caption=str(raw.get("legenda", raw.get("caption", "")) or ""),
            category=raw.get("categoria", raw.get("category")),
            # only an explicit ``false`` deactivates a question
            active=raw.get("active") is not False,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "pergunta": self.label,
            "tipo": self.type,
            "legenda": self.caption,
        }
        if self.category is not None:
            data["categoria"] = self.category
        if not self.active:
            data["active"] = False
        return data


@dataclass(frozen=True)
class FormSpec:
    """One of the three fixed question groupings."""

    id: str
    title: str
    questions: Tuple[Question, ...] = ()

    def active_questions(self) -> List[Question]:
        return [q for q in self.questions if q.active]


@dataclass(frozen=True)
class QuestionCatalog:
    """Read-only view over the configured forms and lookup tables."""

    forms: Tuple[FormSpec, ...] = ()
    lookups: Mapping[str, List[str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "QuestionCatalog":
        """Build a catalog from the configuration JSON payload.

        Raises
        ------
        CatalogError
            If a form id is not one of ``f1``/``f2``/``f3`` or a question
            entry is malformed.
        """
        forms: List[FormSpec] = []
        for raw_form in raw.get("forms") or []:
            form_id = raw_form.get("id")
            if form_id not in FORM_IDS:
                raise CatalogError(f"Unknown form id: {form_id!r}")
            questions = tuple(
                Question.from_dict(q) for q in raw_form.get("questions") or []
            )
            forms.append(
                FormSpec(id=form_id, title=str(raw_form.get("title", "")), questions=questions)
            )
        lookups = {
            key: list(values) for key, values in (raw.get("lookups") or {}).items()
        }
        return cls(forms=tuple(forms), lookups=lookups)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "forms": [
                {
                    "id": form.id,
                    "title": form.title,
                    "questions": [q.to_dict() for q in form.questions],
                }
                for form in self.forms
            ],
            "lookups": {key: list(values) for key, values in self.lookups.items()},
        }

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_form(self, form_id: str) -> Optional[FormSpec]:
        for form in self.forms:
            if form.id == form_id:
                return form
        return None

    def find_question(self, question_id: str) -> Optional[Question]:
        """Return the question with *question_id* or ``None`` if unknown."""
        for form in self.forms:
            for question in form.questions:
                if question.id == question_id:
                    return question
        return None

    def iter_questions(self, *, include_inactive: bool = False) -> Iterator[Tuple[FormSpec, Question]]:
        """Yield ``(form, question)`` pairs in configuration order."""
        for form in self.forms:
            for question in form.questions:
                if question.active or include_inactive:
                    yield form, question

    def question_count(self, *, include_inactive: bool = False) -> int:
        return sum(1 for _ in self.iter_questions(include_inactive=include_inactive))
