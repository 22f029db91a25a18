"""Shared fixtures: a small three-form catalog and a matching weight registry."""

from __future__ import annotations

import pytest

from ppm_survey.catalog import QuestionCatalog
from ppm_survey.interview_store import InMemoryInterviewStore
from ppm_survey.scoring.registry import InMemoryWeightStore, WeightRegistry
from ppm_survey.scoring.weights import CategoryWeightEntry, WeightEntry, WeightSnapshot

CATALOG_PAYLOAD = {
    "forms": [
        {
            "id": "f1",
            "title": "Avaliação Geral",
            "questions": [
                {"id": "f1_q01", "pergunta": "Facilidade de uso", "tipo": "escala_1_5"},
                {"id": "f1_q02", "pergunta": "Recomendaria?", "tipo": "sim/não"},
                {
                    "id": "f1_q03",
                    "pergunta": "Pergunta desativada",
                    "tipo": "escala_1_5",
                    "active": False,
                },
            ],
        },
        {
            "id": "f2",
            "title": "Funcionalidades",
            "questions": [
                {"id": "f2_q01", "pergunta": "Recursos usados", "tipo": "multipla"},
                {"id": "f2_q02", "pergunta": "Comentários", "tipo": "texto"},
            ],
        },
        {
            "id": "f3",
            "title": "Integrações",
            "questions": [
                {"id": "f3_q01", "pergunta": "Nota das integrações", "tipo": "escala_0_10"},
            ],
        },
    ],
    "lookups": {"SISTEMAS_ESSENCIAIS": ["ERP", "CRM"]},
}


def make_snapshot() -> WeightSnapshot:
    return WeightSnapshot(
        question_weights=(
            WeightEntry("f1_q01", 2, "Usabilidade", "satisfaction"),
            WeightEntry("f1_q02", 3, "Usabilidade", "satisfaction"),
            WeightEntry("f1_q03", 5, "Usabilidade", "satisfaction"),
            WeightEntry("f2_q01", 4, "Business Intelligence", "functionality"),
            WeightEntry("f2_q02", 1, "Feedback", "usage"),
            WeightEntry("f3_q01", 5, "Integrações Críticas", "integration"),
        ),
        category_weights=(
            CategoryWeightEntry("Usabilidade", 5, "Facilidade de uso"),
            CategoryWeightEntry("Business Intelligence", 4, "Relatórios"),
            CategoryWeightEntry("Integrações Críticas", 5, "Integrações"),
        ),
    )


@pytest.fixture
def catalog() -> QuestionCatalog:
    return QuestionCatalog.from_dict(CATALOG_PAYLOAD)


@pytest.fixture
def weight_store() -> InMemoryWeightStore:
    return InMemoryWeightStore()


@pytest.fixture
def registry(weight_store) -> WeightRegistry:
    return WeightRegistry(make_snapshot(), store=weight_store)


@pytest.fixture
def interview_store() -> InMemoryInterviewStore:
    return InMemoryInterviewStore()
