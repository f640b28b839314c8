import datetime
import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Union

from survey_analytics.survey_data import (
    InvitationRecord,
    ResponseRecord,
    SurveyTemplate,
    canonical_id,
)


class TemplateStore(Protocol):
    """Read access to survey templates."""

    def get_template(self, template_id: str) -> Optional[SurveyTemplate]:
        ...


class ResponseStore(Protocol):
    """Read access to responses and invitations of a template."""

    def list_responses(
        self,
        template_id: str,
        date_from: Optional[datetime.date] = None,
        date_to: Optional[datetime.date] = None,
    ) -> List[ResponseRecord]:
        ...

    def list_invitations(self, template_id: str) -> List[InvitationRecord]:
        ...


class ThreadSafeSurveyStore:
    """A thread-safe, in-memory store for templates, responses and invitations.

    Implements both :class:`TemplateStore` and :class:`ResponseStore`.  The
    analytics engine only reads from it; writers are the ingestion helpers
    below (or tests).  Template ids are keyed in :func:`canonical_id` form, so
    a UUID is found whatever its case or hyphenation.
    """

    def __init__(self):
        self._templates: Dict[str, SurveyTemplate] = {}
        self._responses: Dict[str, List[ResponseRecord]] = {}
        self._invitations: Dict[str, List[InvitationRecord]] = {}
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add_template(self, template: SurveyTemplate) -> None:
        """
        Adds a template to the store.
        Raises ValueError if a template with the same ID already exists.
        """
        with self._lock:
            key = canonical_id(template.id)
            if key in self._templates:
                raise ValueError(f"Template with ID {template.id} already exists.")
            self._templates[key] = template

    def add_response(self, response: ResponseRecord) -> None:
        """Appends a response to its template's response list."""
        with self._lock:
            self._responses.setdefault(canonical_id(response.template_id), []).append(response)

    def add_invitation(self, invitation: InvitationRecord) -> None:
        with self._lock:
            self._invitations.setdefault(canonical_id(invitation.template_id), []).append(invitation)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_template(self, template_id: str) -> Optional[SurveyTemplate]:
        """Retrieves a template by its ID. Returns None if not found."""
        with self._lock:
            return self._templates.get(canonical_id(template_id))

    def list_responses(
        self,
        template_id: str,
        date_from: Optional[datetime.date] = None,
        date_to: Optional[datetime.date] = None,
    ) -> List[ResponseRecord]:
        """Return responses of *template_id* created within the inclusive UTC date range."""
        with self._lock:
            responses = list(self._responses.get(canonical_id(template_id), ()))
        return [
            r
            for r in responses
            if (date_from is None or r.created_at.date() >= date_from)
            and (date_to is None or r.created_at.date() <= date_to)
        ]

    def list_invitations(self, template_id: str) -> List[InvitationRecord]:
        with self._lock:
            return list(self._invitations.get(canonical_id(template_id), ()))

    def count(self) -> int:
        """Returns the total number of stored responses."""
        with self._lock:
            return sum(len(items) for items in self._responses.values())

    # ------------------------------------------------------------------
    # Loading helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ThreadSafeSurveyStore":
        """Build a store from ``{"templates": [...], "responses": [...], "invitations": [...]}``.

        Raises
        ------
        ValueError
            If a record is malformed (unknown status, bad timestamp, duplicate template).
        KeyError
            If a record lacks a required field.
        """
        store = cls()
        for raw in data.get("templates", ()):
            store.add_template(SurveyTemplate.from_dict(raw))
        for raw in data.get("responses", ()):
            store.add_response(ResponseRecord.from_dict(raw))
        for raw in data.get("invitations", ()):
            store.add_invitation(InvitationRecord.from_dict(raw))
        store._logger.info(
            "store_loaded",
            extra={
                "templates": len(store._templates),
                "responses": store.count(),
            },
        )
        return store

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "ThreadSafeSurveyStore":
        """Load a store from a JSON dump on disk."""
        with open(path, encoding="utf-8") as fh:
            return cls.from_dict(json.load(fh))
