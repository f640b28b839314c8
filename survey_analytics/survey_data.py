"""Typed records for survey templates, responses and invitations.

Raw records arrive as loosely-typed JSON: an answer can be a string, a
number, a list of option values, ``null`` or something else entirely.  This
module is the ingestion boundary; everything past it works with the closed
variants defined here (:class:`ScalarAnswer`, :class:`ListAnswer`,
:data:`MISSING`) instead of branching on runtime types.
"""
from __future__ import annotations

import datetime
import enum
import logging
import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)

# Leading integer, the way a lenient integer parser reads "4", " 4 ", "4.7" or "4abc"
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


class QuestionType(enum.Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    SCALE = "scale"


class CompletionStatus(enum.Enum):
    STARTED = "started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class InvitationStatus(enum.Enum):
    PENDING = "pending"
    SENT = "sent"
    OPENED = "opened"
    COMPLETED = "completed"


# ---------------------------------------------------------------------------
# Answer variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ScalarAnswer:
    """A single answer value (radio choice, scale point, free text)."""

    value: str

    def as_int(self) -> Optional[int]:
        """Return the leading integer of the value or *None* if there is none."""
        match = _LEADING_INT_RE.match(self.value)
        return int(match.group(1)) if match else None

    def key(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class ListAnswer:
    """A multi-select answer (checkbox)."""

    values: Tuple[str, ...]

    def as_int(self) -> Optional[int]:  # noqa: D401 – lists are never numeric
        return None

    def key(self) -> str:
        return ",".join(self.values)


class MissingAnswer:
    """Marker for "no answer": absent key, ``null``, ``""`` or unusable input."""

    _instance: Optional["MissingAnswer"] = None

    def __new__(cls) -> "MissingAnswer":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING = MissingAnswer()

AnswerValue = Union[ScalarAnswer, ListAnswer, MissingAnswer]


def scalar_text(raw: Any) -> Optional[str]:
    """Return the canonical string form of a JSON scalar, or *None*."""
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, int):
        return str(raw)
    if isinstance(raw, float):
        if raw != raw or raw in (float("inf"), float("-inf")):
            return None
        return str(int(raw)) if raw.is_integer() else repr(raw)
    if isinstance(raw, str):
        return raw
    return None


def canonical_id(raw: Any) -> str:
    """Return *raw* as a string; UUIDs are lower-cased and hyphenated."""
    text = str(raw).strip()
    try:
        return str(uuid.UUID(text))
    except ValueError:
        return text


def normalize_answer(raw: Any) -> AnswerValue:
    """Map a raw JSON answer onto :data:`AnswerValue`.

    ``None``, the empty string, an empty list and anything that is neither a
    JSON scalar nor a list all become :data:`MISSING`.
    """
    if raw is None or raw == "":
        return MISSING
    if isinstance(raw, (list, tuple)):
        values = []
        for item in raw:
            text = scalar_text(item)
            if text is not None and text != "":
                values.append(text)
        return ListAnswer(tuple(values)) if values else MISSING
    text = scalar_text(raw)
    if text is None:
        logger.debug("Dropping unsupported answer value of type %s", type(raw).__name__)
        return MISSING
    return ScalarAnswer(text)


def parse_timestamp(raw: Union[str, datetime.datetime, datetime.date]) -> datetime.datetime:
    """Return *raw* as an aware UTC :class:`datetime.datetime`.

    Accepts ISO-8601 strings (including a trailing ``Z``), datetimes and
    dates.  Naive values are taken to be UTC.
    """
    if isinstance(raw, datetime.datetime):
        value = raw
    elif isinstance(raw, datetime.date):
        value = datetime.datetime.combine(raw, datetime.time())
    elif isinstance(raw, str):
        text = raw.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.datetime.fromisoformat(text)
    else:
        raise ValueError(f"Unsupported timestamp value: {raw!r}")
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(datetime.timezone.utc)


# ---------------------------------------------------------------------------
# Schema types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class QuestionOption:
    value: str
    label: str


@dataclass(frozen=True, slots=True)
class ScaleRange:
    min: int
    max: int


@dataclass(frozen=True, slots=True)
class QuestionDescriptor:
    """One question of a template, flattened out of its section."""

    id: str
    text: str
    type: QuestionType
    options: Tuple[QuestionOption, ...] = ()
    scale: Optional[ScaleRange] = None


@dataclass(frozen=True, slots=True)
class SurveyTemplate:
    """A reusable survey definition; ``questions`` is the raw nested schema."""

    id: str
    name: str
    description: Optional[str] = None
    questions: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "SurveyTemplate":
        return cls(
            id=canonical_id(raw["id"]),
            name=str(raw.get("name") or ""),
            description=raw.get("description"),
            questions=raw.get("questions") or {},
        )


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ResponseRecord:
    """One respondent's answers to a template.

    Records are created by the response-submission path and are read-only
    to the analytics engine.
    """

    id: str
    template_id: str
    completion_status: CompletionStatus
    answers: Mapping[str, AnswerValue]
    created_at: datetime.datetime
    session_duration: Optional[int] = None

    def answer(self, question_id: str) -> AnswerValue:
        """Return the answer for *question_id* or :data:`MISSING`."""
        return self.answers.get(question_id, MISSING)

    @property
    def is_completed(self) -> bool:  # noqa: D401 – property
        return self.completion_status is CompletionStatus.COMPLETED

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ResponseRecord":
        """Build a record from a raw store row.

        Raises
        ------
        ValueError
            If ``completion_status`` is not a known status.
        """
        raw_answers = raw.get("answers") or {}
        answers: Dict[str, AnswerValue] = {}
        if isinstance(raw_answers, Mapping):
            for question_id, value in raw_answers.items():
                normalized = normalize_answer(value)
                if normalized is not MISSING:
                    answers[str(question_id)] = normalized

        duration = raw.get("session_duration")
        if isinstance(duration, bool) or not isinstance(duration, (int, float)):
            duration = None

        return cls(
            id=str(raw["id"]),
            template_id=canonical_id(raw["template_id"]),
            completion_status=CompletionStatus(raw.get("completion_status", "started")),
            answers=answers,
            created_at=parse_timestamp(raw["created_at"]),
            session_duration=int(duration) if duration is not None else None,
        )

    def __repr__(self) -> str:
        return (
            f"ResponseRecord(id='{self.id}', template_id='{self.template_id}', "
            f"status={self.completion_status.value}, answers={len(self.answers)}, "
            f"created_at='{self.created_at.isoformat()}')"
        )


@dataclass(frozen=True, slots=True)
class InvitationRecord:
    """An emailed survey invitation and how far the recipient got."""

    id: str
    template_id: str
    status: InvitationStatus
    created_at: datetime.datetime

    @property
    def was_sent(self) -> bool:
        return self.status is not InvitationStatus.PENDING

    @property
    def was_opened(self) -> bool:
        return self.status in (InvitationStatus.OPENED, InvitationStatus.COMPLETED)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "InvitationRecord":
        return cls(
            id=str(raw["id"]),
            template_id=canonical_id(raw["template_id"]),
            status=InvitationStatus(raw.get("invitation_status", raw.get("status", "pending"))),
            created_at=parse_timestamp(raw["created_at"]),
        )
