"""Word-frequency theme extraction for free-text answers.

This is plain term counting, not language understanding: answers are
lower-cased, punctuation becomes whitespace, short tokens and stop words are
dropped and the remaining words are ranked by how often they occur.
"""
from __future__ import annotations

import re
from collections import Counter
from typing import AbstractSet, Dict, Iterable, List

from survey_analytics import config

# Anything that is neither a word character nor whitespace counts as punctuation
_PUNCTUATION_RE = re.compile(r"[^\w\s]")


def tokenize(
    text: str,
    *,
    stop_words: AbstractSet[str] = config.STOP_WORDS,
    min_length: int = config.MIN_WORD_LENGTH,
) -> List[str]:
    """Return the qualifying lower-case tokens of *text* in order."""

    cleaned = _PUNCTUATION_RE.sub(" ", text.lower())
    return [
        word
        for word in cleaned.split()
        if len(word) >= min_length and word not in stop_words
    ]


def count_words(
    answers: Iterable[str],
    *,
    stop_words: AbstractSet[str] = config.STOP_WORDS,
    min_length: int = config.MIN_WORD_LENGTH,
) -> Counter:
    """Return token counts in first-encountered order."""

    return Counter(
        word
        for answer in answers
        for word in tokenize(answer, stop_words=stop_words, min_length=min_length)
    )


def extract_themes(
    answers: Iterable[str],
    *,
    max_themes: int = config.MAX_THEMES,
    stop_words: AbstractSet[str] = config.STOP_WORDS,
    min_length: int = config.MIN_WORD_LENGTH,
) -> List[Dict[str, object]]:
    """Return up to *max_themes* ``{"word", "count"}`` entries, most frequent first.

    Parameters
    ----------
    answers
        Free-text answers.
    max_themes
        Maximum number of entries returned (default 10).
    stop_words
        Words never reported as themes.
    min_length
        Shortest token length that is counted.

    Ties keep the order in which words were first seen, so identical input
    always yields identical output.
    """

    if max_themes <= 0:
        return []

    counts = count_words(answers, stop_words=stop_words, min_length=min_length)
    # most_common() keeps first-seen order among equal counts
    return [{"word": word, "count": count} for word, count in counts.most_common(max_themes)]


def average_word_count(answers: List[str]) -> float:
    """Mean whitespace-separated word count, rounded to 2 decimals (0 if empty)."""

    if not answers:
        return 0
    total = sum(len(answer.split()) for answer in answers)
    return round(total / len(answers), 2)
