"""Configuration constants for the analytics engine."""
from __future__ import annotations

import os
from typing import FrozenSet, Tuple


def _csv_env(key: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(key)
    if not raw:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


# How long a cached live summary stays valid (seconds)
CACHE_TTL_SECONDS: float = float(os.getenv("ANALYTICS_CACHE_TTL_SECONDS", "300"))

# Minimum number of paired answers before a cross-tab is emitted
CROSSTAB_MIN_SAMPLE: int = int(os.getenv("ANALYTICS_CROSSTAB_MIN_SAMPLE", "5"))

# Maximum number of words listed as common themes per text question
MAX_THEMES: int = int(os.getenv("ANALYTICS_MAX_THEMES", "10"))

# Raw answers kept verbatim as samples per text question
MAX_SAMPLE_RESPONSES: int = int(os.getenv("ANALYTICS_MAX_SAMPLE_RESPONSES", "5"))

# Tokens shorter than this are ignored by the text miner
MIN_WORD_LENGTH: int = int(os.getenv("ANALYTICS_MIN_WORD_LENGTH", "3"))

# Surveys are run in Finnish, so the default stop-word list is Finnish
DEFAULT_STOP_WORDS: Tuple[str, ...] = (
    "ja", "tai", "on", "ei", "se", "että", "kun", "niin", "kuin", "vaan",
    "jos", "oli", "olla", "ole", "olen", "olet", "hän", "me", "te", "he",
    "tämä", "tuo", "nämä", "nuo", "ne",
)
STOP_WORDS: FrozenSet[str] = frozenset(
    word.lower() for word in _csv_env("ANALYTICS_STOP_WORDS", DEFAULT_STOP_WORDS)
)

# Questions considered for pairwise cross-tabulation (schema order is kept)
KEY_QUESTIONS: Tuple[str, ...] = _csv_env(
    "ANALYTICS_KEY_QUESTIONS",
    ("did_analysis", "role", "company_size", "overall_satisfaction", "nps_score"),
)

# Question ids driving the fixed segmentation and the NPS figure
DID_ANALYSIS_QUESTION: str = os.getenv("ANALYTICS_DID_ANALYSIS_QUESTION", "did_analysis")
COMPANY_SIZE_QUESTION: str = os.getenv("ANALYTICS_COMPANY_SIZE_QUESTION", "company_size")
SATISFACTION_QUESTION: str = os.getenv(
    "ANALYTICS_SATISFACTION_QUESTION", "overall_satisfaction"
)
NPS_QUESTION: str = os.getenv("ANALYTICS_NPS_QUESTION", "nps_score")
