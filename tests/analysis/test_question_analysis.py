"""Unit tests for the per-question aggregator."""
from __future__ import annotations

import datetime
from typing import Any, Dict, List

import pytest

from survey_analytics.analysis.questions import analyze_question, analyze_questions
from survey_analytics.survey_data import (
    CompletionStatus,
    QuestionDescriptor,
    QuestionOption,
    QuestionType,
    ResponseRecord,
    ScaleRange,
    normalize_answer,
)


def _responses(answer_sets: List[Dict[str, Any]]) -> List[ResponseRecord]:  # helper
    created = datetime.datetime(2024, 5, 1, tzinfo=datetime.timezone.utc)
    return [
        ResponseRecord(
            id=f"r{i}",
            template_id="t1",
            completion_status=CompletionStatus.COMPLETED,
            answers={k: normalize_answer(v) for k, v in answers.items()},
            created_at=created,
        )
        for i, answers in enumerate(answer_sets)
    ]


def _options(*values: str):
    return tuple(QuestionOption(v, v.upper()) for v in values)


SCALE_Q = QuestionDescriptor("sat", "Satisfaction", QuestionType.SCALE, scale=ScaleRange(1, 5))
RADIO_Q = QuestionDescriptor("role", "Role", QuestionType.RADIO, options=_options("ceo", "cfo", "other"))
CHECKBOX_Q = QuestionDescriptor("topics", "Topics", QuestionType.CHECKBOX, options=_options("a", "b", "c"))
TEXT_Q = QuestionDescriptor("comments", "Comments", QuestionType.TEXTAREA)


def test_scale_scenario_mean_median_histogram():
    responses = _responses([{"sat": 3}, {"sat": 4}, {"sat": 5}, {"sat": 2}])

    analysis = analyze_question(SCALE_Q, responses)

    scale = analysis.payload
    assert analysis.response_count == 4
    assert analysis.response_rate == 1
    assert scale["average"] == 3.5
    assert scale["median"] == 3.5
    assert scale["distribution"] == {1: 0, 2: 1, 3: 1, 4: 1, 5: 1}
    assert scale["total_responses"] == 4


def test_scale_odd_count_median_and_rounding():
    responses = _responses([{"sat": "1"}, {"sat": "2"}, {"sat": "2"}])
    scale = analyze_question(SCALE_Q, responses).payload
    assert scale["median"] == 2
    assert scale["average"] == 1.67


def test_scale_drops_non_numeric_answers():
    responses = _responses([{"sat": "great"}, {"sat": "4"}, {"sat": ["4"]}])

    analysis = analyze_question(SCALE_Q, responses)

    # All three count as answered, only one is numeric
    assert analysis.response_count == 3
    assert analysis.payload["total_responses"] == 1
    assert analysis.payload["average"] == 4


def test_scale_without_numeric_answers_is_empty_not_an_error():
    analysis = analyze_question(SCALE_Q, _responses([{"sat": "n/a"}]))
    assert analysis.payload["average"] is None
    assert analysis.payload["median"] is None
    assert analysis.payload["distribution"] == {}


def test_scale_histogram_keys_are_exactly_the_declared_range():
    question = QuestionDescriptor("nps", "NPS", QuestionType.SCALE, scale=ScaleRange(0, 10))
    responses = _responses([{"nps": 10}, {"nps": 15}, {"nps": 0}])

    scale = analyze_question(question, responses).payload

    assert list(scale["distribution"]) == list(range(0, 11))
    assert sum(scale["distribution"].values()) == 2
    # Out-of-range value still feeds the average
    assert scale["average"] == pytest.approx(8.33)


def test_scale_defaults_to_one_to_five():
    question = QuestionDescriptor("q", "Q", QuestionType.SCALE)
    scale = analyze_question(question, _responses([{"q": 2}])).payload
    assert list(scale["distribution"]) == [1, 2, 3, 4, 5]


def test_checkbox_scenario_counts_each_element():
    responses = _responses([{"topics": ["a", "b"]}, {"topics": ["b", "c"]}])

    analysis = analyze_question(CHECKBOX_Q, responses)

    assert analysis.payload["distribution"] == {"a": 1, "b": 2, "c": 1}
    assert analysis.payload["labels"] == {"a": "A", "b": "B", "c": "C"}
    # Checkbox totals may exceed the number of responses
    assert sum(analysis.payload["distribution"].values()) > len(responses)


def test_radio_preseeds_unchosen_options_and_excludes_unknown_values():
    responses = _responses([{"role": "ceo"}, {"role": "ceo"}, {"role": "intern"}, {}])

    analysis = analyze_question(RADIO_Q, responses)

    assert analysis.payload["distribution"] == {"ceo": 2, "cfo": 0, "other": 0}
    assert analysis.payload["unrecognized_responses"] == 1
    assert analysis.response_count == 3
    assert analysis.response_rate == 0.75
    assert sum(analysis.payload["distribution"].values()) <= len(responses)


def test_radio_counts_list_answer_once():
    question = QuestionDescriptor("role", "Role", QuestionType.RADIO)
    responses = _responses([{"role": ["ceo", "cfo"]}, {"role": "ceo"}])

    distribution = analyze_question(question, responses).payload["distribution"]

    assert distribution == {"ceo,cfo": 1, "ceo": 1}
    assert sum(distribution.values()) <= len(responses)


def test_choice_without_declared_options_uses_observed_values():
    question = QuestionDescriptor("size", "Size", QuestionType.RADIO)
    responses = _responses([{"size": "small"}, {"size": "large"}, {"size": "small"}])
    assert analyze_question(question, responses).payload["distribution"] == {
        "small": 2,
        "large": 1,
    }


def test_text_summary():
    responses = _responses(
        [
            {"comments": "Great service, quick answers"},
            {"comments": "   "},
            {"comments": "Service was great!"},
            {"comments": ""},
        ]
    )

    analysis = analyze_question(TEXT_Q, responses)
    text = analysis.payload

    # Whitespace-only counts as answered but not as text
    assert analysis.response_count == 3
    assert text["total_responses"] == 2
    assert text["average_word_count"] == 3.5
    assert text["common_themes"][:2] == [
        {"word": "great", "count": 2},
        {"word": "service", "count": 2},
    ]
    assert text["sample_responses"] == [
        "Great service, quick answers",
        "Service was great!",
    ]


def test_text_samples_capped_at_five():
    responses = _responses([{"comments": f"answer number {i}"} for i in range(8)])
    text = analyze_question(TEXT_Q, responses).payload
    assert len(text["sample_responses"]) == 5
    assert text["sample_responses"][0] == "answer number 0"


def test_no_completed_responses_gives_zero_rate():
    for question in (SCALE_Q, RADIO_Q, CHECKBOX_Q, TEXT_Q):
        analysis = analyze_question(question, [])
        assert analysis.response_count == 0
        assert analysis.response_rate == 0


def test_to_dict_uses_type_specific_key():
    results = analyze_questions([RADIO_Q, SCALE_Q, TEXT_Q], _responses([{}]))
    keys = [set(r.to_dict()) - {"question_id", "question_text", "question_type", "response_count", "response_rate"} for r in results]
    assert keys == [{"value_distribution"}, {"scale_analysis"}, {"text_analysis"}]
    assert results[0].to_dict()["question_type"] == "radio"


def test_response_rate_within_bounds():
    responses = _responses([{"role": "ceo"}, {}, {"role": "cfo"}])
    rate = analyze_question(RADIO_Q, responses).response_rate
    assert 0 <= rate <= 1
    assert rate == pytest.approx(2 / 3)
