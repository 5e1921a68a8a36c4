"""
fittrack: a fitness self-tracking service

Console entry points: `main` prints a user's dashboard from the local
database and `serve` runs the web app under uvicorn.
"""

import argparse
import logging
from datetime import date

import uvicorn

from fittrack.calendar_heatmap import build_calendar
from fittrack.cli import display_calendar, display_stats, display_streak, display_weight, format_log
from fittrack.config import INTENSITY_THRESHOLDS, validate_config
from fittrack.date_keys import InvalidDateInput, to_date
from fittrack.intensity import IntensityThresholds
from fittrack.records import resolved_only
from fittrack.stats_calculator import calculate_stats
from fittrack.storage import FitnessStorage
from fittrack.weight_tracker import summarize_weights


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Show a fittrack dashboard")
    parser.add_argument("email", help="Email of the user to show")
    parser.add_argument("--db", help="Path to the SQLite database")
    parser.add_argument("--today", help="Reference date (YYYY-MM-DD), defaults to today")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv=None):
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("fittrack - Keep your training on track!")
    print("-" * 50)

    # Validate configuration
    try:
        validate_config()
        thresholds = IntensityThresholds.from_values(INTENSITY_THRESHOLDS)
        today = to_date(args.today) if args.today else date.today()
    except (ValueError, InvalidDateInput) as e:
        print(f"\nConfiguration Error:\n{e}")
        return 1

    storage = FitnessStorage(args.db)
    user = next((u for u in storage.list_users() if u.email == args.email), None)
    if user is None:
        print(f"\nNo user registered with {args.email}")
        return 1

    records, categories = storage.load_snapshot(user.id)

    stats = calculate_stats(records, categories, today)
    display_streak(stats)
    display_stats(stats)
    display_calendar(build_calendar(records, categories, today, thresholds=thresholds))
    display_weight(summarize_weights(storage.get_weight_logs(user.id)))

    resolved = resolved_only(records, categories)
    if not resolved:
        print("No activity logged yet.")
        return 0

    print("Recent activity:\n")
    for item in resolved[:10]:
        print(format_log({
            "date": item.record.calendar_date,
            "activity": item.category.display_name,
            "value": item.record.magnitude,
            "unit": item.category.unit,
            "notes": item.record.note,
        }))
    print()

    return 0


def serve(argv=None):
    parser = argparse.ArgumentParser(description="Run the fittrack web server")
    parser.add_argument("--host", default="127.0.0.1", help="Server host address")
    parser.add_argument("--port", type=int, default=8000, help="Server port")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        validate_config()
    except ValueError as e:
        print(f"\nConfiguration Error:\n{e}")
        return 1

    uvicorn.run(
        "fittrack.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="debug" if args.verbose else "info",
    )
    return 0


if __name__ == "__main__":
    exit(main())
