"""Cross-tabulation between pairs of key questions."""
from __future__ import annotations

import itertools
import logging
from typing import Dict, Iterable, List, Optional, Sequence

from survey_analytics import config
from survey_analytics.reporting.models import CrossTab
from survey_analytics.survey_data import MISSING, QuestionDescriptor, ResponseRecord

logger = logging.getLogger(__name__)


def generate_cross_tab(
    responses: Sequence[ResponseRecord],
    question_a: QuestionDescriptor,
    question_b: QuestionDescriptor,
    *,
    min_sample: int = config.CROSSTAB_MIN_SAMPLE,
) -> Optional[CrossTab]:
    """Return the joint frequency table of two questions.

    Responses missing either answer are ignored.  Returns *None* when fewer
    than *min_sample* responses answered both questions.
    """

    pairs = []
    for response in responses:
        answer_a = response.answer(question_a.id)
        answer_b = response.answer(question_b.id)
        if answer_a is MISSING or answer_b is MISSING:
            continue
        pairs.append((answer_a.key(), answer_b.key()))

    if len(pairs) < min_sample:
        logger.debug(
            "Skipping cross-tab %s x %s: %d paired answer(s) < %d",
            question_a.id,
            question_b.id,
            len(pairs),
            min_sample,
        )
        return None

    joint_counts: Dict[str, Dict[str, int]] = {}
    for value_a, value_b in pairs:
        row = joint_counts.setdefault(value_a, {})
        row[value_b] = row.get(value_b, 0) + 1

    return CrossTab(
        question_a={"id": question_a.id, "text": question_a.text},
        question_b={"id": question_b.id, "text": question_b.text},
        joint_counts=joint_counts,
        sample_size=len(pairs),
    )


def generate_cross_tabs(
    responses: Sequence[ResponseRecord],
    questions: Sequence[QuestionDescriptor],
    *,
    key_questions: Iterable[str] = config.KEY_QUESTIONS,
    min_sample: int = config.CROSSTAB_MIN_SAMPLE,
) -> List[CrossTab]:
    """Cross-tabulate every unordered pair of key questions found in *questions*.

    Pairs follow schema order; pairs below *min_sample* are left out.
    """

    allowed = set(key_questions)
    selected = [question for question in questions if question.id in allowed]

    tables: List[CrossTab] = []
    for question_a, question_b in itertools.combinations(selected, 2):
        table = generate_cross_tab(responses, question_a, question_b, min_sample=min_sample)
        if table is not None:
            tables.append(table)
    return tables
