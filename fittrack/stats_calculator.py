"""
Calculate dashboard statistics and category chart data.
"""

from typing import Iterable, Sequence

from fittrack.category_order import assign_series_colors, order_categories
from fittrack.date_keys import to_date
from fittrack.models import ActivityCategory, ActivityRecord
from fittrack.rollup import aggregate
from fittrack.streak_calculator import summarize_streaks

# Longest window the contiguous streak looks back over
STREAK_LOOKBACK_DAYS = 366


def calculate_stats(
    records: Iterable[ActivityRecord],
    categories: Iterable[ActivityCategory],
    reference_date,
) -> dict:
    """
    Calculate the dashboard statistics.

    Args:
        records: Every activity record of the user
        categories: Categories visible to the user
        reference_date: Today's date

    Returns:
        Dictionary with dashboard statistics:
        - today_count: Records logged for today
        - total: Records ever logged
        - last_7_days: List of {date, count} for the last 7 days, oldest first
        - score: Sum of the last 7 days' counts
        - streak: Capped dashboard streak
        - current_streak / longest_streak / last_active_date: day-based streaks
    """
    records = list(records)
    categories = list(categories)
    today = to_date(reference_date)

    last_7 = aggregate(records, categories, today, window_days=7)
    history = aggregate(records, categories, today, window_days=STREAK_LOOKBACK_DAYS)

    streaks = summarize_streaks(records, history, today)

    return {
        "today_count": last_7[-1].record_count,
        "total": len(records),
        "last_7_days": [
            {"date": bucket.date_key, "count": bucket.record_count} for bucket in last_7
        ],
        "score": sum(bucket.record_count for bucket in last_7),
        **streaks,
    }


def build_category_series(
    records: Iterable[ActivityRecord],
    categories: Iterable[ActivityCategory],
    reference_date,
    window_days: int = 7,
    priority_substrings: Sequence[str] = (),
    palette: Sequence[str] = ("#4f46e5",),
) -> dict:
    """
    Build a stacked per-category chart for a trailing window.

    Returns:
        Dictionary with:
            - series: [{category_id, name, unit, color}] in stacking order
            - days: [{date, count, total, per_category}] oldest first
            - period: Start/end dates and total days
    """
    ordered = order_categories(categories, priority_substrings)
    buckets = aggregate(records, ordered, reference_date, window_days=window_days)

    return {
        "series": assign_series_colors(ordered, palette),
        "days": [bucket.to_dict() for bucket in buckets],
        "period": {
            "start": buckets[0].date_key if buckets else None,
            "end": buckets[-1].date_key if buckets else None,
            "total_days": len(buckets),
        },
    }
