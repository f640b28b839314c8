"""Unit tests for answer normalization and record ingestion."""
from __future__ import annotations

import datetime

import pytest

from survey_analytics.survey_data import (
    MISSING,
    CompletionStatus,
    InvitationRecord,
    InvitationStatus,
    ListAnswer,
    ResponseRecord,
    ScalarAnswer,
    normalize_answer,
    parse_timestamp,
)


@pytest.mark.parametrize("raw", [None, "", [], [None, ""], {"nested": 1}, object()])
def test_no_answer_values_become_missing(raw):
    assert normalize_answer(raw) is MISSING


def test_scalars_are_normalized_to_strings():
    assert normalize_answer("yes") == ScalarAnswer("yes")
    assert normalize_answer(4) == ScalarAnswer("4")
    assert normalize_answer(4.0) == ScalarAnswer("4")
    assert normalize_answer(4.5) == ScalarAnswer("4.5")
    assert normalize_answer(True) == ScalarAnswer("true")


def test_lists_keep_order_and_drop_empty_items():
    assert normalize_answer(["a", None, "", 2]) == ListAnswer(("a", "2"))


def test_whitespace_only_string_is_still_an_answer():
    # Only text analysis filters whitespace; presence counting does not
    assert normalize_answer("   ") == ScalarAnswer("   ")


@pytest.mark.parametrize(
    "value,expected",
    [("4", 4), (" 4 ", 4), ("4.7", 4), ("-2", -2), ("4abc", 4), ("abc", None), ("", None)],
)
def test_scalar_as_int_is_lenient(value, expected):
    assert ScalarAnswer(value).as_int() == expected


def test_list_answer_is_never_numeric():
    assert ListAnswer(("4",)).as_int() is None
    assert ListAnswer(("a", "b")).key() == "a,b"


def test_missing_is_falsy_singleton():
    assert not MISSING
    assert type(MISSING)() is MISSING


def test_response_from_dict():
    record = ResponseRecord.from_dict(
        {
            "id": "r1",
            "template_id": "t1",
            "completion_status": "completed",
            "answers": {"q1": "yes", "q2": None, "q3": ["a", "b"], "q4": 3},
            "created_at": "2024-03-01T10:15:00Z",
            "session_duration": 120,
        }
    )

    assert record.completion_status is CompletionStatus.COMPLETED
    assert record.is_completed
    assert record.answer("q1") == ScalarAnswer("yes")
    assert record.answer("q2") is MISSING
    assert record.answer("q3") == ListAnswer(("a", "b"))
    assert record.answer("q4").as_int() == 3
    assert record.answer("unknown") is MISSING
    assert record.created_at == datetime.datetime(2024, 3, 1, 10, 15, tzinfo=datetime.timezone.utc)
    assert record.session_duration == 120


def test_response_from_dict_rejects_unknown_status():
    with pytest.raises(ValueError):
        ResponseRecord.from_dict(
            {
                "id": "r1",
                "template_id": "t1",
                "completion_status": "finished",
                "answers": {},
                "created_at": "2024-03-01",
            }
        )


def test_response_from_dict_ignores_non_numeric_duration():
    record = ResponseRecord.from_dict(
        {
            "id": "r1",
            "template_id": "t1",
            "completion_status": "started",
            "answers": None,
            "created_at": "2024-03-01",
            "session_duration": "long",
        }
    )
    assert record.session_duration is None
    assert record.answers == {}


def test_parse_timestamp_converts_to_utc():
    parsed = parse_timestamp("2024-03-01T12:00:00+02:00")
    assert parsed == datetime.datetime(2024, 3, 1, 10, 0, tzinfo=datetime.timezone.utc)
    assert parse_timestamp(datetime.date(2024, 3, 1)).tzinfo is datetime.timezone.utc


def test_invitation_funnel_flags():
    invitation = InvitationRecord.from_dict(
        {
            "id": "i1",
            "template_id": "t1",
            "invitation_status": "completed",
            "created_at": "2024-03-01",
        }
    )
    assert invitation.status is InvitationStatus.COMPLETED
    assert invitation.was_sent and invitation.was_opened

    pending = InvitationRecord.from_dict(
        {"id": "i2", "template_id": "t1", "status": "pending", "created_at": "2024-03-01"}
    )
    assert not pending.was_sent
    assert not pending.was_opened
