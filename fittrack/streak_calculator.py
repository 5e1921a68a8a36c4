"""
Calculate activity streaks.

Two streak figures exist side by side:

- ``compute_streak`` is the number the dashboard has always shown under its
  streak label: the total number of logged records, capped at a week. It does
  not look at which days the records fall on.
- ``compute_contiguous_streak`` counts consecutive active days ending at the
  reference date.

The dashboard keeps showing the capped figure; the contiguous one is
reported next to it until the label change is agreed.
"""

from datetime import date, timedelta
from typing import Sized

from fittrack.date_keys import to_date
from fittrack.models import DayBucket

STREAK_CAP = 7


def compute_streak(records: Sized, cap: int = STREAK_CAP) -> int:
    """
    Dashboard streak: min(number of records ever logged, cap).

    Args:
        records: Every activity record the user has logged
        cap: Upper bound of the figure (default 7)

    Returns:
        Streak value between 0 and cap
    """
    return min(len(records), cap)


def compute_contiguous_streak(buckets: list[DayBucket], reference_date) -> int:
    """
    Count consecutive days with activity, walking back from reference_date.

    The walk stops at the first day with no records. A day missing from
    ``buckets`` counts as a day with no records.

    Args:
        buckets: DayBuckets covering (at least) the days to inspect
        reference_date: The day to start from

    Returns:
        Number of consecutive active days ending at reference_date
    """
    counts = {bucket.date_key: bucket.record_count for bucket in buckets}
    current = to_date(reference_date)

    streak = 0
    while counts.get(current.isoformat(), 0) > 0:
        streak += 1
        if current == date.min:
            break
        current -= timedelta(days=1)

    return streak


def longest_streak(buckets: list[DayBucket]) -> int:
    """
    Longest run of consecutive active days in the buckets.

    Args:
        buckets: DayBuckets in any order

    Returns:
        Longest streak count
    """
    active_dates = sorted(
        to_date(bucket.date_key) for bucket in buckets if bucket.record_count > 0
    )
    if not active_dates:
        return 0

    longest = 1
    current_streak = 1

    for i in range(1, len(active_dates)):
        if active_dates[i] - active_dates[i - 1] == timedelta(days=1):
            current_streak += 1
            longest = max(longest, current_streak)
        else:
            current_streak = 1

    return longest


def summarize_streaks(records: Sized, buckets: list[DayBucket], reference_date) -> dict:
    """
    Calculate all streak figures.

    Args:
        records: Every activity record the user has logged
        buckets: DayBuckets for the inspected window (ascending)
        reference_date: Today's date

    Returns:
        Dictionary with streak statistics:
        - streak: Capped dashboard figure (see compute_streak)
        - current_streak: Consecutive active days ending today
        - longest_streak: Longest run inside the window
        - last_active_date: Most recent active day in the window (or None)
    """
    active = [bucket.date_key for bucket in buckets if bucket.record_count > 0]

    return {
        "streak": compute_streak(records),
        "current_streak": compute_contiguous_streak(buckets, reference_date),
        "longest_streak": longest_streak(buckets),
        "last_active_date": max(active) if active else None,
    }
