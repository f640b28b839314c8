"""Data structures for reporting pipeline."""

from __future__ import annotations

import datetime
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from survey_analytics.survey_data import QuestionType

# Which key carries the type-specific statistics of a question
_PAYLOAD_KEYS: Dict[QuestionType, str] = {
    QuestionType.RADIO: "value_distribution",
    QuestionType.CHECKBOX: "value_distribution",
    QuestionType.SCALE: "scale_analysis",
    QuestionType.TEXT: "text_analysis",
    QuestionType.TEXTAREA: "text_analysis",
}


@dataclass(slots=True)
class AnalyticsQuery:
    """Validated parameters of an analytics or report request."""

    template_id: str
    date_from: Optional[datetime.date] = None
    date_to: Optional[datetime.date] = None
    refresh: bool = False
    no_cache: bool = False

    def to_params(self) -> Dict[str, Any]:
        """Return the parameters in JSON-friendly form, as echoed in ``meta``."""
        return {
            "template_id": self.template_id,
            "date_from": self.date_from.isoformat() if self.date_from else None,
            "date_to": self.date_to.isoformat() if self.date_to else None,
            "refresh": self.refresh,
            "no_cache": self.no_cache,
        }


@dataclass(slots=True)
class QuestionAnalysis:
    """Statistics of one question over the completed responses."""

    question_id: str
    question_text: str
    question_type: QuestionType
    response_count: int
    response_rate: float
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def payload_key(self) -> str:
        return _PAYLOAD_KEYS[self.question_type]

    def to_dict(self) -> Dict[str, Any]:  # noqa: D401 – simple helper
        """Return a *plain* ``dict`` with the payload under its type-specific key."""
        return {
            "question_id": self.question_id,
            "question_text": self.question_text,
            "question_type": self.question_type.value,
            "response_count": self.response_count,
            "response_rate": self.response_rate,
            self.payload_key: self.payload,
        }


@dataclass(slots=True)
class CrossTab:
    """Joint frequencies of two key questions."""

    question_a: Dict[str, str]
    question_b: Dict[str, str]
    joint_counts: Dict[str, Dict[str, int]]
    sample_size: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class Segmentation:
    """Named cohort counts over the completed responses."""

    by_analysis_completion: Dict[str, int]
    by_company_size: Dict[str, int]
    by_satisfaction: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class DetailedReport:
    """Full question-level report of a template."""

    summary: Dict[str, Any]
    question_analysis: List[QuestionAnalysis]
    cross_tabulation: List[CrossTab]
    segmentation: Segmentation

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": dict(self.summary),
            "question_analysis": [qa.to_dict() for qa in self.question_analysis],
            "cross_tabulation": [ct.to_dict() for ct in self.cross_tabulation],
            "segmentation": self.segmentation.to_dict(),
        }


@dataclass(slots=True)
class LiveSummary:
    """Cheap dashboard counts of a template, served through the cache."""

    overview: Dict[str, Any]
    invitations: Dict[str, Any]
    status_distribution: Dict[str, int]
    timeline: Dict[str, int] = field(default_factory=dict)
    # {id, name, description} of the analyzed template
    template: Dict[str, Any] = field(default_factory=dict)
    question_analytics: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
