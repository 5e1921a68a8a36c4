"""
Per-day rollups of activity records.

Turns a flat snapshot of activity records into a dense, ordered sequence of
DayBuckets for a trailing window or a calendar month.
"""

import calendar
import logging
import math
from datetime import date, timedelta
from typing import Iterable

from fittrack.date_keys import InvalidDateInput, normalize, to_date
from fittrack.models import ActivityCategory, ActivityRecord, DayBucket
from fittrack.records import resolved_only

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"


def window_dates(reference_date, window_days) -> list[date]:
    """
    Dates of the trailing window ending at (and including) reference_date.

    Returns an empty list for a non-positive or non-integer window. A window
    reaching back past the first representable date stops at date.min.
    """
    if isinstance(window_days, bool) or not isinstance(window_days, int):
        return []
    if window_days <= 0:
        return []

    end = to_date(reference_date)
    window_days = min(window_days, (end - date.min).days + 1)
    start = end - timedelta(days=window_days - 1)
    return [start + timedelta(days=i) for i in range(window_days)]


def month_dates(reference_date) -> list[date]:
    """Every date of the calendar month containing reference_date."""
    ref = to_date(reference_date)
    days_in_month = calendar.monthrange(ref.year, ref.month)[1]
    return [date(ref.year, ref.month, day) for day in range(1, days_in_month + 1)]


def _valid_magnitude(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value >= 0


def aggregate(
    records: Iterable[ActivityRecord],
    categories: Iterable[ActivityCategory],
    reference_date,
    window_days: int = 7,
    calendar_month: bool = False,
    category_filter: str = ALL_CATEGORIES,
) -> list[DayBucket]:
    """
    Roll records up into one bucket per day of the requested window.

    Args:
        records: Activity records snapshot. Records with an unparseable date,
            an unknown category or an invalid magnitude are skipped.
        categories: Known categories. In "all" mode every one of them gets
            an entry in ``per_category_magnitude``, in this order.
        reference_date: The last day of a trailing window, or any day of the
            month for ``calendar_month``.
        window_days: Length of the trailing window. Ignored for
            ``calendar_month``. Non-positive or non-integer gives ``[]``.
        calendar_month: Cover the whole month containing reference_date,
            including days still in the future.
        category_filter: ALL_CATEGORIES, or a single category id to restrict
            counting and summation to that category.

    Returns:
        DayBuckets in ascending date order, zero-filled, one per window day.
    """
    categories = list(categories)

    if calendar_month:
        days = month_dates(reference_date)
    else:
        days = window_dates(reference_date, window_days)
    if not days:
        return []

    all_mode = category_filter == ALL_CATEGORIES
    category_ids = [category.id for category in categories]

    counts = {day.isoformat(): 0 for day in days}
    totals = {key: 0.0 for key in counts}
    per_category = {key: {cid: 0.0 for cid in category_ids} for key in counts}

    for item in resolved_only(records, categories):
        record = item.record
        if not all_mode and record.category_id != category_filter:
            continue

        try:
            key = normalize(record.calendar_date)
        except InvalidDateInput as e:
            logger.debug("Skipping record %s: %s", record.id, e)
            continue

        # Outside the window
        if key not in counts:
            continue

        if not _valid_magnitude(record.magnitude):
            logger.debug("Skipping record %s: bad magnitude %r", record.id, record.magnitude)
            continue

        counts[key] += 1
        if all_mode:
            per_category[key][record.category_id] += record.magnitude
        else:
            totals[key] += record.magnitude

    buckets = []
    for key in counts:
        if all_mode:
            day_categories = per_category[key]
            buckets.append(
                DayBucket(
                    date_key=key,
                    record_count=counts[key],
                    total_magnitude=sum(day_categories.values(), 0.0),
                    per_category_magnitude=day_categories,
                )
            )
        else:
            buckets.append(
                DayBucket(
                    date_key=key,
                    record_count=counts[key],
                    total_magnitude=totals[key],
                )
            )

    return buckets
