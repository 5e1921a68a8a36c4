"""
Tests for CLI display functions and the console entry point.
"""

import io
from contextlib import redirect_stdout
from unittest.mock import patch

import pytest

from fittrack.cli import (
    display_calendar,
    display_stats,
    display_streak,
    display_weight,
    format_log,
    get_milestone_message,
)
from fittrack.main import main, serve
from fittrack.storage import FitnessStorage


def _capture(func, *args):
    output = io.StringIO()
    with redirect_stdout(output):
        result = func(*args)
    return output.getvalue(), result


class TestGetMilestoneMessage:
    """Tests for milestone messages."""

    def test_7_day_milestone(self):
        assert get_milestone_message(7) == "One week strong!"

    def test_30_day_milestone(self):
        assert get_milestone_message(30) == "One month champion!"

    def test_100_day_milestone(self):
        assert get_milestone_message(100) == "100 days - legendary!"

    def test_no_milestone(self):
        assert get_milestone_message(5) is None
        assert get_milestone_message(99) is None


class TestDisplayStreak:
    """Tests for streak display."""

    def test_no_training(self):
        stats = {"streak": 0, "current_streak": 0, "last_active_date": None}
        result, _ = _capture(display_streak, stats)

        assert "No training logged yet" in result
        assert "Last activity" not in result

    def test_single_day(self):
        stats = {"streak": 1, "current_streak": 1, "last_active_date": "2026-01-20"}
        result, _ = _capture(display_streak, stats)

        assert "Training Streak: 1" in result
        assert "1 day in a row" in result
        assert "2026-01-20" in result

    def test_milestone_shown(self):
        stats = {"streak": 7, "current_streak": 7, "last_active_date": "2026-01-20"}
        result, _ = _capture(display_streak, stats)

        assert "7 days in a row" in result
        assert "One week strong!" in result


class TestDisplayStats:
    """Tests for stats display."""

    def test_labels(self):
        stats = {"today_count": 1, "total": 12, "score": 5}
        result, _ = _capture(display_stats, stats)

        assert "1 workout" in result
        assert "12 logs" in result
        assert "7-day score: 5" in result


class TestDisplayCalendar:
    """Tests for calendar display."""

    def test_grid_with_leading_blanks(self):
        calendar = {
            "days": [
                {"date": "2026-01-01", "count": 0, "total": 0, "tier": "none"},
                {"date": "2026-01-02", "count": 1, "total": 30, "tier": "low"},
                {"date": "2026-01-03", "count": 2, "total": 250, "tier": "veryHigh"},
            ],
            "period": {"start": "2026-01-01", "end": "2026-01-03", "total_days": 3},
            "max_total": 250,
            "leading_blanks": 3,
        }
        result, _ = _capture(display_calendar, calendar)
        lines = result.splitlines()

        assert "2026-01-01 to 2026-01-03" in lines[0]
        assert "Mon" in lines[1]
        assert lines[2] == "  " + " ".join(["   "] * 3 + ["[ ]", "[.]", "[#]"])


class TestDisplayWeight:
    """Tests for weight display."""

    def test_no_measurements(self):
        result, _ = _capture(display_weight, {"measurements": 0})
        assert "No weight measurements yet" in result

    def test_summary(self):
        summary = {
            "current": 80.0,
            "start": 82.5,
            "change": -2.5,
            "trend": "down",
            "measurements": 2,
            "series": [],
        }
        result, _ = _capture(display_weight, summary)

        assert "Current: 80.0 kg" in result
        assert "Change:  -2.5 kg (down)" in result


class TestFormatLog:
    """Tests for log formatting."""

    def test_basic(self):
        result = format_log({
            "date": "2026-01-20",
            "activity": "Push-ups",
            "value": 25.0,
            "unit": "reps",
        })
        assert result.startswith("  2026-01-20  Push-ups")
        assert "25 reps" in result

    def test_long_notes_truncated(self):
        result = format_log({
            "date": "2026-01-20",
            "activity": "Running",
            "value": 5.5,
            "unit": "km",
            "notes": "x" * 60,
        })
        assert result.endswith("x" * 37 + "...")


class TestMain:
    """Tests for the console entry point."""

    @pytest.fixture
    def db_path(self, tmp_path):
        return tmp_path / "fittrack.db"

    def test_unknown_user(self, db_path):
        result, code = _capture(main, ["nobody@example.com", "--db", str(db_path)])

        assert code == 1
        assert "No user registered" in result

    def test_bad_today(self, db_path):
        result, code = _capture(
            main, ["ada@example.com", "--db", str(db_path), "--today", "someday"]
        )

        assert code == 1
        assert "Configuration Error" in result

    def test_dashboard(self, db_path):
        storage = FitnessStorage(db_path)
        user = storage.create_user("ada@example.com", "secret1", "Ada Lovelace")
        push_ups = storage.create_activity_type("Push-ups", "reps")
        storage.log_activity(user.id, push_ups.id, 25, "2026-01-20", "morning set")

        result, code = _capture(
            main, ["ada@example.com", "--db", str(db_path), "--today", "2026-01-20"]
        )

        assert code == 0
        assert "Training Streak: 1" in result
        assert "Activity Calendar (2026-01-01 to 2026-01-31)" in result
        assert "Push-ups" in result
        assert "morning set" in result


class TestServe:
    """Tests for the web server entry point."""

    @patch("fittrack.main.uvicorn.run")
    def test_runs_app_with_defaults(self, mock_run):
        assert serve([]) == 0

        mock_run.assert_called_once_with(
            "fittrack.app:app",
            host="127.0.0.1",
            port=8000,
            reload=False,
            log_level="info",
        )

    @patch("fittrack.main.uvicorn.run")
    def test_host_port_and_debug(self, mock_run):
        serve(["--host", "0.0.0.0", "--port", "5000", "--reload", "-v"])

        kwargs = mock_run.call_args.kwargs
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == 5000
        assert kwargs["reload"] is True
        assert kwargs["log_level"] == "debug"

    @patch("fittrack.main.uvicorn.run")
    def test_bad_config_does_not_start(self, mock_run):
        with patch("fittrack.main.validate_config", side_effect=ValueError("bad palette")):
            result, code = _capture(serve, [])

        assert code == 1
        assert "bad palette" in result
        mock_run.assert_not_called()
