"""Per-question statistics, dispatched on the question type."""
from __future__ import annotations

import logging
import statistics
from typing import Any, Callable, Dict, List, Optional, Sequence

from survey_analytics import config
from survey_analytics.analysis.themes import average_word_count, extract_themes
from survey_analytics.reporting.models import QuestionAnalysis
from survey_analytics.survey_data import (
    MISSING,
    AnswerValue,
    ListAnswer,
    QuestionDescriptor,
    QuestionType,
    ResponseRecord,
    ScalarAnswer,
)

logger = logging.getLogger(__name__)

# Used when a scale question does not declare its range
DEFAULT_SCALE_MIN = 1
DEFAULT_SCALE_MAX = 5


def _choice_distribution(
    question: QuestionDescriptor, answers: List[AnswerValue]
) -> Dict[str, Any]:
    """Count option choices.

    For checkbox questions every list element increments its own bucket, so
    one response can land in several buckets.  A radio question counts each
    answer once; a list submitted to it is treated as one (joined) value.
    """

    declared = [option.value for option in question.options]
    distribution: Dict[str, int] = {value: 0 for value in declared}
    labels = {option.value: option.label for option in question.options}
    multi_select = question.type is QuestionType.CHECKBOX
    unrecognized = 0

    for answer in answers:
        if multi_select and isinstance(answer, ListAnswer):
            chosen = answer.values
        else:
            chosen = (answer.key(),)
        for value in chosen:
            if value in distribution:
                distribution[value] += 1
            elif not declared:
                distribution[value] = 1
            else:
                unrecognized += 1

    return {
        "distribution": distribution,
        "labels": labels,
        "total_responses": len(answers),
        "unrecognized_responses": unrecognized,
    }


def _scale_summary(
    question: QuestionDescriptor, answers: List[AnswerValue]
) -> Dict[str, Any]:
    """Average, median and histogram of the numeric answers."""

    numeric: List[int] = []
    for answer in answers:
        value = answer.as_int()
        if value is not None:
            numeric.append(value)

    scale_min = question.scale.min if question.scale else DEFAULT_SCALE_MIN
    scale_max = question.scale.max if question.scale else DEFAULT_SCALE_MAX
    scale_info = {"min": scale_min, "max": scale_max}

    if not numeric:
        return {
            "average": None,
            "median": None,
            "distribution": {},
            "total_responses": 0,
            "scale_info": scale_info,
        }

    histogram: Dict[int, int] = {point: 0 for point in range(scale_min, scale_max + 1)}
    for value in numeric:
        # Out-of-range values still count towards average and median
        if value in histogram:
            histogram[value] += 1

    return {
        "average": round(sum(numeric) / len(numeric), 2),
        "median": statistics.median(numeric),
        "distribution": histogram,
        "total_responses": len(numeric),
        "scale_info": scale_info,
    }


def _text_summary(
    question: QuestionDescriptor, answers: List[AnswerValue]
) -> Dict[str, Any]:
    """Word statistics and frequent terms of the free-text answers."""

    texts = [
        answer.value
        for answer in answers
        if isinstance(answer, ScalarAnswer) and answer.value.strip()
    ]
    return {
        "total_responses": len(texts),
        "average_word_count": average_word_count(texts),
        "common_themes": extract_themes(texts, max_themes=config.MAX_THEMES),
        "sample_responses": texts[: config.MAX_SAMPLE_RESPONSES],
    }


_ANALYZERS: Dict[
    QuestionType, Callable[[QuestionDescriptor, List[AnswerValue]], Dict[str, Any]]
] = {
    QuestionType.RADIO: _choice_distribution,
    QuestionType.CHECKBOX: _choice_distribution,
    QuestionType.SCALE: _scale_summary,
    QuestionType.TEXT: _text_summary,
    QuestionType.TEXTAREA: _text_summary,
}


def collect_answers(
    question_id: str, responses: Sequence[ResponseRecord]
) -> List[AnswerValue]:
    """Return the non-missing answers to *question_id* in response order."""

    return [
        answer
        for answer in (response.answer(question_id) for response in responses)
        if answer is not MISSING
    ]


def analyze_question(
    question: QuestionDescriptor,
    completed: Sequence[ResponseRecord],
    *,
    completed_count: Optional[int] = None,
) -> QuestionAnalysis:
    """Return :class:`QuestionAnalysis` for *question* over *completed* responses.

    *completed* must already be filtered to completed responses.  The rate
    denominator defaults to ``len(completed)``; a rate of ``0`` is returned
    when there is nothing to divide by.
    """

    total = len(completed) if completed_count is None else completed_count
    answers = collect_answers(question.id, completed)
    response_rate = len(answers) / total if total > 0 else 0

    return QuestionAnalysis(
        question_id=question.id,
        question_text=question.text,
        question_type=question.type,
        response_count=len(answers),
        response_rate=response_rate,
        payload=_ANALYZERS[question.type](question, answers),
    )


def analyze_questions(
    questions: Sequence[QuestionDescriptor], completed: Sequence[ResponseRecord]
) -> List[QuestionAnalysis]:
    """Analyze every question in schema order."""

    results = [analyze_question(question, completed) for question in questions]
    logger.debug(
        "Analyzed %d question(s) over %d completed response(s)",
        len(results),
        len(completed),
    )
    return results
