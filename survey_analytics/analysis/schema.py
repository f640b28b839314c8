"""Flatten a nested template schema into question descriptors."""
from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Tuple

from survey_analytics.survey_data import (
    QuestionDescriptor,
    QuestionOption,
    QuestionType,
    ScaleRange,
    scalar_text,
)

logger = logging.getLogger(__name__)


def _parse_options(raw_options: Any) -> Tuple[QuestionOption, ...]:
    options: List[QuestionOption] = []
    for raw in raw_options or ():
        if isinstance(raw, Mapping):
            value = scalar_text(raw.get("value"))
            if not value:
                continue
            label = raw.get("label")
            options.append(QuestionOption(value=value, label=str(label) if label else value))
        else:
            value = scalar_text(raw)
            if value:
                options.append(QuestionOption(value=value, label=value))
    return tuple(options)


def _parse_scale(raw_scale: Any) -> Optional[ScaleRange]:
    if not isinstance(raw_scale, Mapping):
        return None
    try:
        return ScaleRange(min=int(raw_scale.get("min", 1)), max=int(raw_scale.get("max", 5)))
    except (TypeError, ValueError):
        logger.warning("Ignoring malformed scale definition: %s", raw_scale)
        return None


def parse_question(raw: Mapping[str, Any]) -> Optional[QuestionDescriptor]:
    """Return a :class:`QuestionDescriptor` for *raw* or *None* if unusable."""

    question_id = raw.get("id")
    if not question_id:
        logger.warning("Skipping question without id: %s", raw.get("text"))
        return None
    try:
        question_type = QuestionType(raw.get("type"))
    except ValueError:
        logger.warning(
            "Skipping question %s with unsupported type %r", question_id, raw.get("type")
        )
        return None

    return QuestionDescriptor(
        id=str(question_id),
        text=str(raw.get("text") or ""),
        type=question_type,
        options=_parse_options(raw.get("options")),
        scale=_parse_scale(raw.get("scale")),
    )


def extract_questions(schema: Any) -> List[QuestionDescriptor]:
    """Flatten ``schema["sections"][*]["questions"]`` in source order.

    Sections without a ``questions`` field are skipped.  Duplicate question
    ids are kept as-is; lookups by id see whichever comes last.
    """

    if not isinstance(schema, Mapping):
        return []

    questions: List[QuestionDescriptor] = []
    for section in schema.get("sections") or ():
        if not isinstance(section, Mapping) or not section.get("questions"):
            continue
        for raw in section["questions"]:
            if not isinstance(raw, Mapping):
                continue
            question = parse_question(raw)
            if question is not None:
                questions.append(question)
    return questions
