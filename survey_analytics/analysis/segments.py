"""Fixed business segmentation of completed responses.

The partitions are evaluated independently, so a response usually shows up
in more than one of them.
"""
from __future__ import annotations

from typing import Any, Dict, List, Sequence

from survey_analytics import config
from survey_analytics.reporting.models import Segmentation
from survey_analytics.survey_data import MISSING, ResponseRecord, ScalarAnswer


def segment_by_analysis_completion(
    responses: Sequence[ResponseRecord],
    question_id: str = config.DID_ANALYSIS_QUESTION,
) -> Dict[str, int]:
    did, did_not = 0, 0
    for response in responses:
        answer = response.answer(question_id)
        if isinstance(answer, ScalarAnswer):
            if answer.value == "yes":
                did += 1
            elif answer.value == "no":
                did_not += 1
    return {"did_analysis": did, "did_not_analysis": did_not}


def segment_by_company_size(
    responses: Sequence[ResponseRecord],
    question_id: str = config.COMPANY_SIZE_QUESTION,
) -> Dict[str, int]:
    segments: Dict[str, int] = {}
    for response in responses:
        answer = response.answer(question_id)
        if answer is MISSING:
            continue
        size = answer.key()
        segments[size] = segments.get(size, 0) + 1
    return segments


def segment_by_satisfaction(
    responses: Sequence[ResponseRecord],
    question_id: str = config.SATISFACTION_QUESTION,
) -> Dict[str, Any]:
    """Bucket the numeric satisfaction score: >=4, ==3 and <=2."""

    scores: List[int] = []
    for response in responses:
        score = response.answer(question_id)
        value = score.as_int() if score is not MISSING else None
        if value is not None:
            scores.append(value)

    return {
        "very_satisfied": sum(1 for s in scores if s >= 4),
        "neutral": sum(1 for s in scores if s == 3),
        "dissatisfied": sum(1 for s in scores if s <= 2),
        "average_satisfaction": sum(scores) / len(scores) if scores else None,
    }


def generate_segmentation(responses: Sequence[ResponseRecord]) -> Segmentation:
    """Return all fixed segments of the (completed) *responses*."""

    return Segmentation(
        by_analysis_completion=segment_by_analysis_completion(responses),
        by_company_size=segment_by_company_size(responses),
        by_satisfaction=segment_by_satisfaction(responses),
    )
