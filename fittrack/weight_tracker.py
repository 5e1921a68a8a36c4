"""
Body-weight summary and chart series.
"""

import logging
from typing import Iterable

from fittrack.date_keys import InvalidDateInput, normalize
from fittrack.models import WeightRecord

logger = logging.getLogger(__name__)

# Changes within +/- this many kilograms count as stable
TREND_TOLERANCE_KG = 0.5


def _entry_order(record: WeightRecord) -> int:
    """Database ids grow with each entry; non-numeric ids keep input order."""
    try:
        return int(record.id)
    except (TypeError, ValueError):
        return 0


def _dated_records(weight_records: Iterable[WeightRecord]) -> list[tuple[str, WeightRecord]]:
    """Pair records with their date key, oldest first, skipping bad dates."""
    dated = []
    for record in weight_records:
        try:
            dated.append((normalize(record.calendar_date), record))
        except InvalidDateInput as e:
            logger.debug("Skipping weight record %s: %s", record.id, e)
    # Same-day measurements in the order they were entered
    dated.sort(key=lambda pair: (pair[0], _entry_order(pair[1])))
    return dated


def summarize_weights(weight_records: Iterable[WeightRecord]) -> dict:
    """
    Summarize body-weight measurements.

    Args:
        weight_records: Weight measurements in any order

    Returns:
        Dictionary with:
        - current: Latest measurement (kg)
        - start: Earliest measurement (kg)
        - change: current - start
        - trend: "down", "up" or "stable"
        - measurements: Number of measurements used
        - series: [{date, weight}] oldest first, for the chart
    """
    dated = _dated_records(weight_records)

    if not dated:
        return {
            "current": 0.0,
            "start": 0.0,
            "change": 0.0,
            "trend": "stable",
            "measurements": 0,
            "series": [],
        }

    start = dated[0][1].weight
    current = dated[-1][1].weight
    change = current - start

    if change < -TREND_TOLERANCE_KG:
        trend = "down"
    elif change > TREND_TOLERANCE_KG:
        trend = "up"
    else:
        trend = "stable"

    return {
        "current": current,
        "start": start,
        "change": change,
        "trend": trend,
        "measurements": len(dated),
        "series": [{"date": key, "weight": record.weight} for key, record in dated],
    }
