"""Rule-based insights and recommendations over aggregated scores.

Every rule is a fixed threshold on a percentage; evaluation order only
decides the order in which messages are listed.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from ppm_survey.reporting import config
from ppm_survey.scoring.models import CategoryScore, ScoreResult

__all__ = [
    "generate_insights",
    "generate_recommendations",
    "recommendation_for_category_strict",
    "recommendation_for_category_with_fallback",
    "effort_estimate",
]

# Texts used by the base engine; categories not listed get no extra text.
_CATEGORY_RECOMMENDATIONS: Dict[str, str] = {
    "Business Intelligence": "Implementar dashboards executivos e relatórios automatizados",
    "Visão de Portfólio": "Configurar visões consolidadas de múltiplos projetos",
    "Controle Orçamentário": "Integrar sistema financeiro com ferramenta PPM",
    "Integrações Críticas": "Mapear e implementar integrações prioritárias identificadas",
}

# Texts used by the consolidated report, per priority tier.
_TIERED_RECOMMENDATIONS: Dict[str, Dict[str, str]] = {
    "Business Intelligence": {
        "high": "Implementar dashboards executivos com KPIs em tempo real",
        "medium": "Melhorar relatórios existentes com mais visualizações",
    },
    "Visão de Portfólio": {
        "high": "Configurar visão consolidada de múltiplos projetos com priorização",
        "medium": "Otimizar filtros e agrupamentos na visão atual",
    },
    "Controle Orçamentário": {
        "high": "Integrar sistema financeiro com ferramenta PPM para controle em tempo real",
        "medium": "Implementar alertas de desvio orçamentário",
    },
    "Integrações Críticas": {
        "high": "Desenvolver integrações prioritárias identificadas na pesquisa",
        "medium": "Automatizar transferência de dados entre sistemas principais",
    },
}

_HIGH_EFFORT = frozenset({"Business Intelligence", "Integrações Críticas"})
_MEDIUM_EFFORT = frozenset({"Visão de Portfólio", "Controle Orçamentário"})


def recommendation_for_category_strict(category: str) -> Optional[str]:
    """Return the base-engine text for *category*, or ``None`` if unmapped."""
    return _CATEGORY_RECOMMENDATIONS.get(category)


def recommendation_for_category_with_fallback(category: str, priority: str = "high") -> str:
    """Return the tiered text for *category*, or a generic one if unmapped.

    *priority* is ``"high"`` or ``"medium"``.
    """
    texts = _TIERED_RECOMMENDATIONS.get(category, {})
    return texts.get(priority) or f"Melhorar {category} conforme análise detalhada"


def effort_estimate(category: str) -> str:
    if category in _HIGH_EFFORT:
        return "Alto"
    if category in _MEDIUM_EFFORT:
        return "Médio"
    return "Baixo"


def _names(categories: Sequence[CategoryScore]) -> str:
    return ", ".join(c.category for c in categories)


def generate_insights(
    category_scores: Sequence[CategoryScore],
    satisfaction: ScoreResult,
    functionality: ScoreResult,
    integration: ScoreResult,
) -> List[str]:
    """Return findings for the given scores in presentation order."""
    insights: List[str] = []

    if satisfaction.percentage >= 80:
        insights.append("Alta satisfação geral com as ferramentas PPM atuais")
    elif satisfaction.percentage >= 60:
        insights.append(
            "Satisfação moderada com as ferramentas PPM - há espaço para melhorias"
        )
    else:
        insights.append(
            "Baixa satisfação com as ferramentas PPM atuais - necessária revisão urgente"
        )

    if functionality.percentage < 60:
        insights.append(
            "Funcionalidades das ferramentas PPM não atendem adequadamente às necessidades"
        )

    if integration.percentage < 50:
        insights.append("Forte necessidade de melhorar integrações entre sistemas")

    weak = sorted(
        (c for c in category_scores if c.percentage < 60), key=lambda c: c.percentage
    )[: config.MAX_WEAK_CATEGORIES]
    if weak:
        insights.append(f"Principais áreas de melhoria: {_names(weak)}")

    strong = sorted(
        (c for c in category_scores if c.percentage >= 80),
        key=lambda c: c.percentage,
        reverse=True,
    )[: config.MAX_STRONG_CATEGORIES]
    if strong:
        insights.append(f"Pontos fortes identificados: {_names(strong)}")

    return insights


def generate_recommendations(
    category_scores: Sequence[CategoryScore],
    satisfaction: ScoreResult,
    functionality: ScoreResult,
    integration: ScoreResult,
) -> List[str]:
    """Return prioritized action items for the given scores."""
    recommendations: List[str] = []

    if satisfaction.percentage < 70:
        recommendations.append(
            "Considerar treinamento adicional ou mudança de ferramenta PPM"
        )
        recommendations.append("Realizar workshop de usabilidade com usuários")

    if functionality.percentage < 60:
        recommendations.append("Avaliar ferramentas PPM com funcionalidades mais robustas")
        recommendations.append("Implementar customizações nas ferramentas atuais")

    if integration.percentage < 50:
        recommendations.append("Priorizar projeto de integração entre sistemas")
        recommendations.append("Considerar plataforma de integração (iPaaS)")

    critical = sorted(
        (
            c
            for c in category_scores
            if c.percentage < 50 and c.weight >= config.CRITICAL_CATEGORY_WEIGHT
        ),
        key=lambda c: c.percentage,
    )
    for cat in critical[: config.MAX_CATEGORY_RECOMMENDATIONS]:
        text = recommendation_for_category_strict(cat.category)
        if text is not None:
            recommendations.append(text)

    return recommendations
