"""Render consolidated reports using Jinja2 templates."""
from __future__ import annotations

import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from ppm_survey.reporting.context import ConsolidatedReportData

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).parent / "templates"

# Markdown output; HTML escaping would mangle quotes and accents.
_env = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
)


def _pct(value: float) -> str:
    return f"{value:.1f}%"


def _answer(value) -> str:
    if isinstance(value, (list, tuple)):
        return "; ".join(str(v) for v in value)
    return str(value) if value else "-"


_env.filters["pct"] = _pct
_env.filters["answer"] = _answer


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def render_report(report: ConsolidatedReportData) -> str:
    """Render a Markdown report from ``ConsolidatedReportData``."""

    template = _env.get_template("report.md.j2")
    text = template.render(**report.to_dict())
    logger.debug(
        "Report rendered for respondent=%s len=%d",
        report.metadata.respondent_info.respondent_name,
        len(text),
    )
    return text
