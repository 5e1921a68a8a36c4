"""
CLI display functions for fittrack.
"""

TIER_SYMBOLS = {
    "none": "[ ]",
    "low": "[.]",
    "medium": "[o]",
    "high": "[O]",
    "veryHigh": "[#]",
}


def get_milestone_message(streak_days: int) -> str | None:
    """
    Get milestone message for a given streak length.

    Args:
        streak_days: Current streak in days

    Returns:
        Milestone message string or None if no milestone
    """
    milestones = {
        7: "One week strong!",
        14: "Two weeks of consistency!",
        30: "One month champion!",
        60: "Two months unstoppable!",
        100: "100 days - legendary!",
    }
    return milestones.get(streak_days)


def display_streak(stats: dict) -> None:
    """
    Display streak information to the console.

    Args:
        stats: Dictionary from calculate_stats() containing:
            - streak: int
            - current_streak: int
            - last_active_date: str or None
    """
    streak = stats["streak"]
    current = stats["current_streak"]
    last_date = stats["last_active_date"]

    if streak == 0:
        status = "No training logged yet"
    else:
        status = f"Training Streak: {streak}"

    day_word = "day" if current == 1 else "days"
    line = f"   Active {current} {day_word} in a row"
    milestone = get_milestone_message(current)
    if milestone:
        line = f"{line} - {milestone}"

    print(f"🔥 {status}")
    print(line)
    if last_date:
        print(f"   Last activity: {last_date}")
    print()


def display_calendar(calendar: dict) -> None:
    """
    Display a text-based activity heatmap.

    Args:
        calendar: Dictionary from build_calendar()
    """
    day_abbrevs = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

    cells = ["   "] * calendar["leading_blanks"]
    cells += [TIER_SYMBOLS[day["tier"]] for day in calendar["days"]]

    period = calendar["period"]
    print(f"Activity Calendar ({period['start']} to {period['end']}):")
    print("  " + " ".join(day_abbrevs))

    for start in range(0, len(cells), 7):
        week = cells[start:start + 7]
        print(("  " + " ".join(week)).rstrip())

    print()


def display_stats(stats: dict) -> None:
    """
    Display activity statistics to the console.

    Args:
        stats: Dictionary from calculate_stats() containing:
            - today_count: int
            - total: int
            - score: int
    """
    today = stats["today_count"]
    total = stats["total"]
    score = stats["score"]

    today_label = "workout" if today == 1 else "workouts"
    total_label = "log" if total == 1 else "logs"

    print("📊 Activity Stats:")
    print(f"   Today:       {today} {today_label}")
    print(f"   Total:       {total} {total_label}")
    print(f"   7-day score: {score}")
    print()


def display_weight(summary: dict) -> None:
    """
    Display the body-weight summary.

    Args:
        summary: Dictionary from summarize_weights()
    """
    if summary["measurements"] == 0:
        print("⚖️  No weight measurements yet")
        print()
        return

    sign = "+" if summary["change"] >= 0 else ""
    print("⚖️  Weight:")
    print(f"   Current: {summary['current']:.1f} kg")
    print(f"   Start:   {summary['start']:.1f} kg")
    print(f"   Change:  {sign}{summary['change']:.1f} kg ({summary['trend']})")
    print()


def format_log(log: dict) -> str:
    """
    Format an activity log for display.

    Args:
        log: Dictionary containing:
            - date: str
            - activity: str
            - value: float
            - unit: str
            - notes: str (optional)

    Returns:
        Formatted string for display
    """
    notes = log.get("notes") or ""

    # Truncate long notes
    if len(notes) > 40:
        notes = notes[:37] + "..."

    amount = f"{log['value']:g} {log['unit']}".strip()
    return f"  {log['date']}  {log['activity']:<20} {amount:<14} {notes}".rstrip()
