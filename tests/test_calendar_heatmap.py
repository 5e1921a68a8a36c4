"""
Tests for the calendar heatmap module.
"""

from datetime import date

import pytest

from fittrack.calendar_heatmap import build_calendar
from fittrack.intensity import IntensityThresholds
from fittrack.models import ActivityCategory, ActivityRecord


@pytest.fixture
def categories():
    return [
        ActivityCategory(id="1", display_name="Push-ups", unit="reps"),
        ActivityCategory(id="2", display_name="Sit-ups", unit="reps"),
    ]


def _record(record_id, category_id, magnitude, calendar_date):
    return ActivityRecord(
        id=str(record_id), category_id=category_id, magnitude=magnitude, calendar_date=calendar_date
    )


class TestMonthCalendar:
    """Month view (the default)."""

    def test_empty_input_returns_zero_days(self, categories):
        result = build_calendar([], categories, date(2026, 1, 26))

        assert len(result["days"]) == 31
        for day in result["days"]:
            assert day["count"] == 0
            assert day["total"] == 0
            assert day["tier"] == "none"

    def test_period_metadata(self, categories):
        result = build_calendar([], categories, date(2026, 2, 10))

        assert result["period"] == {
            "start": "2026-02-01",
            "end": "2026-02-28",
            "total_days": 28,
        }

    def test_leading_blanks_is_weekday_of_first_day(self, categories):
        # 2026-01-01 is a Thursday
        result = build_calendar([], categories, date(2026, 1, 26))
        assert result["leading_blanks"] == 3

    def test_tiers_follow_daily_totals(self, categories):
        records = [
            _record(1, "1", 20, "2026-01-03"),
            _record(2, "1", 30, "2026-01-04"),
            _record(3, "2", 20, "2026-01-04"),
            _record(4, "1", 100, "2026-01-05"),
            _record(5, "2", 150, "2026-01-06"),
            _record(6, "1", 50, "2026-01-06"),
        ]
        result = build_calendar(records, categories, date(2026, 1, 26))
        day_map = {d["date"]: d for d in result["days"]}

        assert day_map["2026-01-03"]["tier"] == "low"
        assert day_map["2026-01-04"]["tier"] == "medium"
        assert day_map["2026-01-04"]["count"] == 2
        assert day_map["2026-01-05"]["tier"] == "high"
        assert day_map["2026-01-06"]["tier"] == "veryHigh"
        assert day_map["2026-01-06"]["total"] == 200
        assert result["max_total"] == 200

    def test_other_months_ignored(self, categories):
        records = [
            _record(1, "1", 80, "2025-12-31"),
            _record(2, "1", 10, "2026-02-01"),
        ]
        result = build_calendar(records, categories, date(2026, 1, 26))

        assert sum(d["count"] for d in result["days"]) == 0
        assert result["max_total"] == 0

    def test_custom_thresholds(self, categories):
        records = [_record(1, "1", 12, "2026-01-10")]
        thresholds = IntensityThresholds(medium=5, high=10, very_high=15)

        result = build_calendar(records, categories, date(2026, 1, 26), thresholds=thresholds)
        day_map = {d["date"]: d for d in result["days"]}

        assert day_map["2026-01-10"]["tier"] == "high"


class TestTrailingCalendar:
    """Trailing window view."""

    def test_trailing_window(self, categories):
        result = build_calendar([], categories, date(2026, 1, 26), window_days=84)

        assert len(result["days"]) == 84
        assert result["period"]["start"] == "2025-11-04"
        assert result["period"]["end"] == "2026-01-26"

    def test_non_positive_window_is_empty(self, categories):
        result = build_calendar([], categories, date(2026, 1, 26), window_days=0)

        assert result["days"] == []
        assert result["period"]["total_days"] == 0
        assert result["max_total"] == 0
