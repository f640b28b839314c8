"""Live dashboard summary: response lifecycle counts and the invitation funnel."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence

from survey_analytics import config
from survey_analytics.analysis.questions import analyze_question
from survey_analytics.analysis.schema import extract_questions
from survey_analytics.reporting.models import LiveSummary
from survey_analytics.survey_data import (
    MISSING,
    CompletionStatus,
    InvitationRecord,
    InvitationStatus,
    QuestionDescriptor,
    QuestionType,
    ResponseRecord,
    SurveyTemplate,
)

logger = logging.getLogger(__name__)


def _percent(part: int, whole: int) -> float:
    """Return *part* of *whole* as a percentage rounded to 2 decimals (0 if empty)."""
    if whole <= 0:
        return 0
    return round(part / whole * 100, 2)


def average_completion_time(completed: Sequence[ResponseRecord]) -> Optional[float]:
    """Mean ``session_duration`` (seconds) of responses that recorded one."""

    durations = [r.session_duration for r in completed if r.session_duration is not None]
    if not durations:
        return None
    return round(sum(durations) / len(durations), 2)


def nps_score(
    completed: Sequence[ResponseRecord], question_id: str = config.NPS_QUESTION
) -> Optional[float]:
    """Net promoter score: % of 9-10 answers minus % of 0-6 answers.

    Answers outside 0-10 are ignored.  Returns *None* without valid answers.
    """

    scores: List[int] = []
    for response in completed:
        answer = response.answer(question_id)
        value = answer.as_int() if answer is not MISSING else None
        if value is not None and 0 <= value <= 10:
            scores.append(value)
    if not scores:
        return None
    promoters = sum(1 for s in scores if s >= 9)
    detractors = sum(1 for s in scores if s <= 6)
    return round((promoters - detractors) / len(scores) * 100, 2)


def invitation_funnel(invitations: Sequence[InvitationRecord]) -> Dict[str, float]:
    """Return sent → opened → completed counts and rates (percent of sent)."""

    total_sent = sum(1 for inv in invitations if inv.was_sent)
    opened = sum(1 for inv in invitations if inv.was_opened)
    completed = sum(1 for inv in invitations if inv.status is InvitationStatus.COMPLETED)
    return {
        "total_invitations": len(invitations),
        "total_sent": total_sent,
        "opened": opened,
        "completed": completed,
        "open_rate": _percent(opened, total_sent),
        "completion_rate": _percent(completed, total_sent),
    }


def response_timeline(responses: Sequence[ResponseRecord]) -> Dict[str, int]:
    """Responses per UTC day, ordered by day."""

    per_day = Counter(r.created_at.date().isoformat() for r in responses)
    return dict(sorted(per_day.items()))


def question_analytics(
    questions: Sequence[QuestionDescriptor], completed: Sequence[ResponseRecord]
) -> List[Dict[str, Any]]:
    """Per-question answer counts for the dashboard, in schema order.

    Scale questions also carry ``rating_analysis`` (average and histogram).
    """

    rows: List[Dict[str, Any]] = []
    for question in questions:
        analysis = analyze_question(question, completed)
        row: Dict[str, Any] = {
            "question_id": analysis.question_id,
            "question_text": analysis.question_text,
            "question_type": analysis.question_type.value,
            "response_count": analysis.response_count,
            "response_rate": analysis.response_rate,
        }
        if question.type is QuestionType.SCALE:
            row["rating_analysis"] = {
                "average": analysis.payload["average"],
                "distribution": analysis.payload["distribution"],
            }
        rows.append(row)
    return rows


def build_overview(
    responses: Sequence[ResponseRecord],
    invitations: Sequence[InvitationRecord] = (),
    template: Optional[SurveyTemplate] = None,
) -> LiveSummary:
    """Convert *responses* and *invitations* into a :class:`LiveSummary`.

    With a *template*, the summary also names it and lists per-question
    analytics over the completed responses.  The function is read-only; it
    does not mutate its inputs.
    """

    by_status = Counter(r.completion_status for r in responses)
    completed = [r for r in responses if r.is_completed]
    total = len(responses)

    status_distribution = {
        "completed": by_status[CompletionStatus.COMPLETED],
        "in_progress": by_status[CompletionStatus.IN_PROGRESS],
        "abandoned": by_status[CompletionStatus.ABANDONED],
        "started": by_status[CompletionStatus.STARTED],
    }

    overview = {
        "total_responses": total,
        "completed_responses": status_distribution["completed"],
        "in_progress_responses": status_distribution["in_progress"],
        "abandoned_responses": status_distribution["abandoned"],
        "started_responses": status_distribution["started"],
        "completion_rate": _percent(len(completed), total),
        "average_completion_time": average_completion_time(completed),
        "nps_score": nps_score(completed),
    }

    logger.debug(
        "Overview built: total=%d completed=%d invitations=%d",
        total,
        len(completed),
        len(invitations),
    )

    summary = LiveSummary(
        overview=overview,
        invitations=invitation_funnel(invitations),
        status_distribution=status_distribution,
        timeline=response_timeline(responses),
    )
    if template is not None:
        summary.template = {
            "id": template.id,
            "name": template.name,
            "description": template.description,
        }
        summary.question_analytics = question_analytics(
            extract_questions(template.questions), completed
        )
    return summary
