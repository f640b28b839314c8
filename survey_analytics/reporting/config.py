"""Configuration constants for the Markdown report."""
from __future__ import annotations

import os

# Width (in characters) of a full histogram bar
BAR_WIDTH: int = int(os.getenv("REPORT_BAR_WIDTH", "20"))

# Maximum number of common words listed per text question
MAX_THEMES: int = int(os.getenv("REPORT_MAX_THEMES", "5"))
