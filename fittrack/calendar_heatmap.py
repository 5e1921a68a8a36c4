"""
Calendar heatmap for activity.

Calculates daily activity totals and intensity tiers for a monthly calendar
or a trailing GitHub-style grid.
"""

from typing import Iterable, Optional

from fittrack.date_keys import to_date
from fittrack.intensity import DEFAULT_THRESHOLDS, IntensityThresholds, classify
from fittrack.models import ActivityCategory, ActivityRecord
from fittrack.rollup import aggregate


def build_calendar(
    records: Iterable[ActivityRecord],
    categories: Iterable[ActivityCategory],
    reference_date,
    window_days: Optional[int] = None,
    thresholds: IntensityThresholds = DEFAULT_THRESHOLDS,
) -> dict:
    """
    Calculate the activity calendar for heatmap display.

    Args:
        records: Activity records snapshot
        categories: Known categories
        reference_date: Today's date
        window_days: Trailing window length. When None, the whole calendar
            month containing reference_date is used.
        thresholds: Intensity tier thresholds

    Returns:
        Dictionary with:
            - days: List of {date, count, total, tier} for each day
            - period: Start/end dates and total days
            - max_total: Largest daily total
            - leading_blanks: Weekday of the first day (Monday = 0), for
              laying out a Monday-first grid
    """
    buckets = aggregate(
        records,
        categories,
        reference_date,
        window_days=window_days if window_days is not None else 0,
        calendar_month=window_days is None,
    )

    day_list = []
    max_total = 0.0

    for bucket in buckets:
        max_total = max(max_total, bucket.total_magnitude)
        day_list.append({
            "date": bucket.date_key,
            "count": bucket.record_count,
            "total": bucket.total_magnitude,
            "tier": classify(bucket.total_magnitude, thresholds).value,
        })

    if not buckets:
        return {
            "days": [],
            "period": {"start": None, "end": None, "total_days": 0},
            "max_total": 0.0,
            "leading_blanks": 0,
        }

    return {
        "days": day_list,
        "period": {
            "start": buckets[0].date_key,
            "end": buckets[-1].date_key,
            "total_days": len(buckets),
        },
        "max_total": max_total,
        "leading_blanks": to_date(buckets[0].date_key).weekday(),
    }
