"""Weight entries and the compiled-in default weight tables."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Tuple

__all__ = [
    "AnalysisType",
    "DIMENSIONS",
    "WeightEntry",
    "CategoryWeightEntry",
    "WeightSnapshot",
    "DEFAULT_QUESTION_WEIGHTS",
    "DEFAULT_CATEGORY_WEIGHTS",
    "default_snapshot",
]

MIN_WEIGHT = 1
MAX_WEIGHT = 5


class AnalysisType(str, Enum):
    """Cross-cutting analytical axis a question contributes to."""

    SATISFACTION = "satisfaction"
    USAGE = "usage"
    FUNCTIONALITY = "functionality"
    INTEGRATION = "integration"
    DEMOGRAPHIC = "demographic"


# The four scored dimensions; demographic questions are never scored as one.
DIMENSIONS: Tuple[AnalysisType, ...] = (
    AnalysisType.SATISFACTION,
    AnalysisType.FUNCTIONALITY,
    AnalysisType.INTEGRATION,
    AnalysisType.USAGE,
)


def _check_weight(weight: Any, owner: str) -> int:
    if isinstance(weight, bool) or not isinstance(weight, int):
        raise ValueError(f"Weight for {owner} must be an integer, got {weight!r}")
    if not MIN_WEIGHT <= weight <= MAX_WEIGHT:
        raise ValueError(
            f"Weight for {owner} must be between {MIN_WEIGHT} and {MAX_WEIGHT}, got {weight}"
        )
    return weight


@dataclass(frozen=True)
class WeightEntry:
    """Importance of one question and the category/dimension it feeds."""

    question_id: str
    weight: int
    category: str
    analysis_type: AnalysisType = AnalysisType.FUNCTIONALITY

    def __post_init__(self) -> None:
        _check_weight(self.weight, self.question_id)
        # accept plain strings for convenience
        object.__setattr__(self, "analysis_type", AnalysisType(self.analysis_type))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionId": self.question_id,
            "weight": self.weight,
            "category": self.category,
            "analysisType": self.analysis_type.value,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "WeightEntry":
        return cls(
            question_id=str(raw["questionId"]),
            weight=raw["weight"],
            category=str(raw["category"]),
            analysis_type=AnalysisType(raw.get("analysisType", "functionality")),
        )


@dataclass(frozen=True)
class CategoryWeightEntry:
    """Category-level multiplier used by the overall score."""

    category: str
    weight: int
    description: str = ""

    def __post_init__(self) -> None:
        _check_weight(self.weight, self.category)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "CategoryWeightEntry":
        return cls(
            category=str(raw["category"]),
            weight=raw["weight"],
            description=str(raw.get("description", "")),
        )


@dataclass(frozen=True)
class WeightSnapshot:
    """Full registry content, the unit of export/import and persistence."""

    question_weights: Tuple[WeightEntry, ...] = field(default_factory=tuple)
    category_weights: Tuple[CategoryWeightEntry, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "questionWeights": [w.to_dict() for w in self.question_weights],
            "categoryWeights": [c.to_dict() for c in self.category_weights],
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "WeightSnapshot":
        """Parse a persisted snapshot.

        Raises
        ------
        ValueError
            If the payload is not a mapping with both weight lists or any
            entry is invalid (``KeyError``/``TypeError`` are folded in).
        """
        if not isinstance(raw, Mapping):
            raise ValueError("Weight snapshot must be a JSON object")
        try:
            questions = tuple(WeightEntry.from_dict(w) for w in raw["questionWeights"])
            categories = tuple(
                CategoryWeightEntry.from_dict(c) for c in raw["categoryWeights"]
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Invalid weight snapshot: {exc}") from exc
        return cls(question_weights=questions, category_weights=categories)


def _q(question_id: str, weight: int, category: str, analysis_type: str) -> WeightEntry:
    return WeightEntry(question_id, weight, category, AnalysisType(analysis_type))


DEFAULT_QUESTION_WEIGHTS: Tuple[WeightEntry, ...] = (
    # Form 1 – general assessment
    _q("f1_q01", 1, "Demográfico", "demographic"),
    _q("f1_q02", 1, "Demográfico", "demographic"),
    _q("f1_q03", 2, "Experiência", "usage"),
    _q("f1_q04", 3, "Ferramentas Utilizadas", "usage"),
    _q("f1_q05", 3, "Frequência de Uso", "usage"),
    _q("f1_q06", 4, "Criticidade", "usage"),
    _q("f1_q07", 4, "Ferramenta Crítica", "usage"),
    _q("f1_q08", 5, "Usabilidade", "satisfaction"),
    _q("f1_q09", 4, "Eficiência", "satisfaction"),
    _q("f1_q10", 4, "Interface", "satisfaction"),
    _q("f1_q11", 5, "Produtividade", "satisfaction"),
    _q("f1_q12", 4, "Acompanhamento", "functionality"),
    _q("f1_q13", 5, "Tomada de Decisão", "functionality"),
    _q("f1_q14", 5, "Satisfação Geral", "satisfaction"),
    _q("f1_q15", 3, "Recomendação", "satisfaction"),
    # Form 2 – functionality analysis
    _q("f2_q01", 4, "Planejamento", "functionality"),
    _q("f2_q02", 4, "Gestão de Recursos", "functionality"),
    _q("f2_q03", 5, "Controle Orçamentário", "functionality"),
    _q("f2_q04", 4, "Gestão de Riscos", "functionality"),
    _q("f2_q05", 5, "Visão de Portfólio", "functionality"),
    _q("f2_q06", 5, "Priorização Estratégica", "functionality"),
    _q("f2_q07", 4, "Análise de Dependências", "functionality"),
    _q("f2_q08", 4, "Workflows", "functionality"),
    _q("f2_q09", 3, "Comunicação", "functionality"),
    _q("f2_q10", 3, "Notificações", "functionality"),
    _q("f2_q11", 5, "Business Intelligence", "functionality"),
    _q("f2_q12", 4, "Relatórios", "functionality"),
    _q("f2_q13", 5, "KPIs e Métricas", "functionality"),
    _q("f2_q14", 4, "Gap Analysis", "functionality"),
    # Form 3 – integration needs
    _q("f3_q01", 3, "Sistemas Essenciais", "integration"),
    _q("f3_q02", 4, "Frequência de Integração", "integration"),
    _q("f3_q03", 4, "Dados para PPM", "integration"),
    _q("f3_q04", 3, "Integrações Existentes", "integration"),
    _q("f3_q05", 3, "Fluxo de Dados", "integration"),
    _q("f3_q06", 4, "Esforço Manual", "integration"),
    _q("f3_q07", 5, "Integrações Críticas", "integration"),
    _q("f3_q08", 4, "Sincronização de Dados", "integration"),
    _q("f3_q09", 3, "Automação de Processos", "integration"),
    _q("f3_q10", 4, "Impacto do Retrabalho", "integration"),
    _q("f3_q11", 4, "Inconsistência de Dados", "integration"),
    _q("f3_q12", 5, "Qualidade das Decisões", "integration"),
    _q("f3_q13", 5, "Integração Prioritária", "integration"),
)

DEFAULT_CATEGORY_WEIGHTS: Tuple[CategoryWeightEntry, ...] = (
    CategoryWeightEntry("Demográfico", 1, "Informações básicas do respondente"),
    CategoryWeightEntry("Experiência", 2, "Tempo de experiência com ferramentas PPM"),
    CategoryWeightEntry("Ferramentas Utilizadas", 3, "Ferramentas atualmente em uso"),
    CategoryWeightEntry("Frequência de Uso", 3, "Intensidade de uso das ferramentas"),
    CategoryWeightEntry("Criticidade", 4, "Importância das ferramentas no trabalho"),
    CategoryWeightEntry("Ferramenta Crítica", 4, "Ferramenta mais importante"),
    CategoryWeightEntry("Usabilidade", 5, "Facilidade de uso das ferramentas"),
    CategoryWeightEntry("Eficiência", 4, "Velocidade para encontrar informações"),
    CategoryWeightEntry("Interface", 4, "Clareza e intuitividade da interface"),
    CategoryWeightEntry("Produtividade", 5, "Impacto na produtividade do trabalho"),
    CategoryWeightEntry("Acompanhamento", 4, "Facilidade para acompanhar projetos"),
    CategoryWeightEntry("Tomada de Decisão", 5, "Suporte para decisões estratégicas"),
    CategoryWeightEntry("Satisfação Geral", 5, "Satisfação geral com as ferramentas"),
    CategoryWeightEntry("Recomendação", 3, "Disposição para recomendar"),
    CategoryWeightEntry("Planejamento", 4, "Funcionalidades de planejamento"),
    CategoryWeightEntry("Gestão de Recursos", 4, "Gestão de pessoas e equipamentos"),
    CategoryWeightEntry("Controle Orçamentário", 5, "Controle de custos e orçamento"),
    CategoryWeightEntry("Gestão de Riscos", 4, "Identificação e gestão de riscos"),
    CategoryWeightEntry("Visão de Portfólio", 5, "Visão consolidada de múltiplos projetos"),
    CategoryWeightEntry("Priorização Estratégica", 5, "Priorização baseada em estratégia"),
    CategoryWeightEntry("Análise de Dependências", 4, "Análise de interdependências"),
    CategoryWeightEntry("Workflows", 4, "Fluxos de aprovação e processos"),
    CategoryWeightEntry("Comunicação", 3, "Facilitação da comunicação"),
    CategoryWeightEntry("Notificações", 3, "Sistema de alertas e notificações"),
    CategoryWeightEntry("Business Intelligence", 5, "Painéis e dashboards analíticos"),
    CategoryWeightEntry("Relatórios", 4, "Geração de relatórios gerenciais"),
    CategoryWeightEntry("KPIs e Métricas", 5, "Métricas e indicadores de performance"),
    CategoryWeightEntry("Gap Analysis", 4, "Identificação de lacunas funcionais"),
    CategoryWeightEntry("Sistemas Essenciais", 3, "Sistemas considerados essenciais"),
    CategoryWeightEntry("Frequência de Integração", 4, "Necessidade de acessar múltiplos sistemas"),
    CategoryWeightEntry("Dados para PPM", 4, "Dados que deveriam estar no PPM"),
    CategoryWeightEntry("Integrações Existentes", 3, "Integrações já implementadas"),
    CategoryWeightEntry("Fluxo de Dados", 3, "Como os dados transitam hoje"),
    CategoryWeightEntry("Esforço Manual", 4, "Tempo gasto em transferência manual"),
    CategoryWeightEntry("Integrações Críticas", 5, "Integrações mais importantes"),
    CategoryWeightEntry("Sincronização de Dados", 4, "Tipos de dados para sincronização"),
    CategoryWeightEntry("Automação de Processos", 3, "Processos que podem ser automatizados"),
    CategoryWeightEntry("Impacto do Retrabalho", 4, "Retrabalho causado por falta de integração"),
    CategoryWeightEntry("Inconsistência de Dados", 4, "Problemas de consistência entre sistemas"),
    CategoryWeightEntry("Qualidade das Decisões", 5, "Impacto da integração nas decisões"),
    CategoryWeightEntry("Integração Prioritária", 5, "Integração que traria maior benefício"),
)


def default_snapshot() -> WeightSnapshot:
    return WeightSnapshot(
        question_weights=DEFAULT_QUESTION_WEIGHTS,
        category_weights=DEFAULT_CATEGORY_WEIGHTS,
    )
