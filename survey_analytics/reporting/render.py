"""Render detailed survey reports using Jinja2 templates."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from jinja2 import Environment, FileSystemLoader

from survey_analytics.reporting.context import build_report_context
from survey_analytics.reporting.models import DetailedReport
from survey_analytics.survey_data import SurveyTemplate

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).parent / "templates"

# Output is Markdown; HTML escaping would mangle quotes in free-text answers.
_env = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_report(
    report: DetailedReport, template: SurveyTemplate, meta: Dict[str, Any]
) -> str:
    """Render a Markdown report from a :class:`DetailedReport`."""

    context = build_report_context(report, template, meta)

    text = _env.get_template("report.md.j2").render(**context.to_dict())
    logger.debug("Report rendered for template=%s len=%d", template.id, len(text))
    return text
