"""
Configuration management for fittrack.

Loads settings from environment variables (and a .env file in the project root).
"""

import os
from dotenv import load_dotenv

# Load .env file from project root
load_dotenv()

ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
INSIGHT_MODEL = os.getenv("FITTRACK_INSIGHT_MODEL", "claude-sonnet-4-20250514")

FITTRACK_DB_PATH = os.getenv("FITTRACK_DB_PATH")


def _split_list(raw: str | None, default: str) -> list[str]:
    """Split a comma-separated setting into stripped, non-empty items."""
    value = raw if raw is not None else default
    return [item.strip() for item in value.split(",") if item.strip()]


# Display-only: categories matching these substrings take the first chart slots
PRIORITY_CATEGORIES = _split_list(
    os.getenv("FITTRACK_PRIORITY_CATEGORIES"), "şınav,mekik,barfiks"
)

SERIES_PALETTE = _split_list(
    os.getenv("FITTRACK_SERIES_PALETTE"),
    "#4f46e5,#2563eb,#10b981,#f59e0b,#ef4444,#8b5cf6",
)

INTENSITY_THRESHOLDS = _split_list(
    os.getenv("FITTRACK_INTENSITY_THRESHOLDS"), "50,100,200"
)


def validate_config():
    """Validate that configuration values parse and are usable."""
    problems = []

    if len(INTENSITY_THRESHOLDS) != 3:
        problems.append("FITTRACK_INTENSITY_THRESHOLDS (expected three numbers)")
    else:
        try:
            [float(value) for value in INTENSITY_THRESHOLDS]
        except ValueError:
            problems.append("FITTRACK_INTENSITY_THRESHOLDS (not numeric)")

    if not SERIES_PALETTE:
        problems.append("FITTRACK_SERIES_PALETTE (empty)")

    if problems:
        raise ValueError(
            f"Invalid configuration: {', '.join(problems)}\n"
            "Please check your .env file (see .env.example)."
        )
