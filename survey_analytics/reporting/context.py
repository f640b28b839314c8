"""Context dataclass for rendering detailed survey reports.

This module defines `ReportContext`, a typed container that holds all
values expected by the Jinja2 template located in
`survey_analytics/reporting/templates/report.md.j2`.

Keeping context building apart from template rendering lets the report
logic be unit-tested without touching template strings, and lets other
output formats reuse the same context object.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from survey_analytics.reporting import config as cfg
from survey_analytics.reporting.models import DetailedReport, QuestionAnalysis
from survey_analytics.survey_data import QuestionType, SurveyTemplate

__all__ = [
    "QuestionSection",
    "ReportContext",
    "build_report_context",
]


@dataclass(slots=True)
class QuestionSection:
    """One question as shown in the report."""

    question_id: str
    question_text: str
    question_type: str
    response_count: int
    response_rate_pct: float
    # (label, count, bar) rows for choice and scale questions
    rows: List[List[Any]] = field(default_factory=list)
    average: Optional[float] = None
    median: Optional[float] = None
    average_word_count: Optional[float] = None
    themes: List[Dict[str, Any]] = field(default_factory=list)
    samples: List[str] = field(default_factory=list)


@dataclass(slots=True)
class ReportContext:
    """Container with all fields used by the Markdown report template."""

    # Header & meta
    template_id: str
    template_name: str
    generated_at: str  # ISO-8601 timestamp (UTC)
    description: Optional[str] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None

    # Totals
    total_responses: int = 0
    completed_responses: int = 0

    questions: List[QuestionSection] = field(default_factory=list)
    cross_tabs: List[Dict[str, Any]] = field(default_factory=list)
    segmentation: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:  # noqa: D401 – simple helper
        """Return a *plain* ``dict`` (recursively) for Jinja rendering."""
        return asdict(self)

    # Alias for convenience (e.g. template kwargs)
    __call__ = to_dict


def _bar(count: int, total: int, width: Optional[int] = None) -> str:
    """Return a block bar proportional to *count* / *total*."""
    if total <= 0 or count <= 0:
        return ""
    width = cfg.BAR_WIDTH if width is None else width
    return "█" * max(1, round(count / total * width))


def _section(analysis: QuestionAnalysis) -> QuestionSection:
    payload = analysis.payload
    section = QuestionSection(
        question_id=analysis.question_id,
        question_text=analysis.question_text,
        question_type=analysis.question_type.value,
        response_count=analysis.response_count,
        response_rate_pct=round(analysis.response_rate * 100, 1),
    )

    if analysis.question_type in (QuestionType.RADIO, QuestionType.CHECKBOX):
        distribution = payload.get("distribution", {})
        labels = payload.get("labels", {})
        total = sum(distribution.values())
        section.rows = [
            [labels.get(value, value), count, _bar(count, total)]
            for value, count in distribution.items()
        ]
    elif analysis.question_type is QuestionType.SCALE:
        histogram = payload.get("distribution", {})
        total = sum(histogram.values())
        section.rows = [[point, count, _bar(count, total)] for point, count in histogram.items()]
        section.average = payload.get("average")
        section.median = payload.get("median")
    else:
        section.average_word_count = payload.get("average_word_count")
        section.themes = list(payload.get("common_themes", []))[: cfg.MAX_THEMES]
        section.samples = list(payload.get("sample_responses", []))
    return section


def build_report_context(
    report: DetailedReport,
    template: SurveyTemplate,
    meta: Dict[str, Any],
) -> ReportContext:
    """Convert a :class:`DetailedReport` into :class:`ReportContext`.

    *meta* is the metadata block returned with the report
    (``generated_at``, ``total_responses``, ``query_params``).
    The function is *pure*; it does not mutate *report*.
    """

    params = meta.get("query_params", {})
    return ReportContext(
        template_id=template.id,
        template_name=template.name,
        description=template.description,
        generated_at=meta.get("generated_at", ""),
        date_from=params.get("date_from"),
        date_to=params.get("date_to"),
        total_responses=meta.get("total_responses", 0),
        completed_responses=report.summary.get("total_completed_responses", 0),
        questions=[_section(qa) for qa in report.question_analysis],
        cross_tabs=[ct.to_dict() for ct in report.cross_tabulation],
        segmentation=report.segmentation.to_dict(),
    )
