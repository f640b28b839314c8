"""Aggregate raw survey responses into a structured :class:`DetailedReport`."""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Sequence

from survey_analytics.analysis.crosstab import generate_cross_tabs
from survey_analytics.analysis.questions import analyze_questions
from survey_analytics.analysis.schema import extract_questions
from survey_analytics.analysis.segments import generate_segmentation
from survey_analytics.reporting.models import DetailedReport
from survey_analytics.survey_data import QuestionDescriptor, ResponseRecord

logger = logging.getLogger(__name__)


def completed_responses(responses: Iterable[ResponseRecord]) -> List[ResponseRecord]:
    """Return only the responses whose lifecycle reached ``completed``."""
    return [r for r in responses if r.is_completed]


def build_detailed_report(
    responses: Sequence[ResponseRecord],
    questions: Sequence[QuestionDescriptor],
) -> DetailedReport:
    """Run every analysis over the completed subset of *responses*."""

    completed = completed_responses(responses)

    return DetailedReport(
        summary={
            "total_completed_responses": len(completed),
            "questions_analyzed": len(questions),
        },
        question_analysis=analyze_questions(questions, completed),
        cross_tabulation=generate_cross_tabs(completed, questions),
        segmentation=generate_segmentation(completed),
    )


def generate_detailed_report(
    responses: Sequence[ResponseRecord],
    schema: Any,
) -> DetailedReport:
    """Convert *responses* and a raw template *schema* into :class:`DetailedReport`.

    The function is read-only and deterministic: the same inputs always give
    an equal report.  Timestamps are left to the caller's metadata.
    """

    questions = extract_questions(schema)
    report = build_detailed_report(responses, questions)
    logger.info(
        "Detailed report computed: responses=%d completed=%d questions=%d cross_tabs=%d",
        len(responses),
        report.summary["total_completed_responses"],
        len(questions),
        len(report.cross_tabulation),
    )
    return report
