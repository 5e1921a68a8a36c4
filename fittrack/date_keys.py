"""
Canonical calendar-day keys.

Every day identity in fittrack is a ``YYYY-MM-DD`` string built here from the
local calendar components of a date-like value. Time-of-day and UTC offsets
are ignored rather than converted, so a late-evening entry never slides into
the next or previous day.
"""

import re
from datetime import date, datetime

_DATE_PREFIX = re.compile(r"^\s*(\d{4})-(\d{1,2})-(\d{1,2})(?:$|[T\s])")


class InvalidDateInput(ValueError):
    """Raised when a value has no parseable year/month/day."""

    pass


def to_date(date_like) -> date:
    """
    Convert a date-like value to a ``datetime.date``.

    Args:
        date_like: A date, a datetime (naive or aware), an ISO-8601 string
            optionally carrying a time and offset, or any object with
            integer ``year``, ``month`` and ``day`` attributes.

    Returns:
        The calendar date made of the value's own year/month/day.

    Raises:
        InvalidDateInput: If no valid calendar date can be read.
    """
    if isinstance(date_like, bool) or date_like is None:
        raise InvalidDateInput(f"Not a date: {date_like!r}")

    # datetime is a date subclass; its components are already local
    if isinstance(date_like, date):
        if isinstance(date_like, datetime):
            return date_like.date()
        return date_like

    if isinstance(date_like, str):
        match = _DATE_PREFIX.match(date_like)
        if not match:
            raise InvalidDateInput(f"Unrecognised date string: {date_like!r}")
        year, month, day = (int(part) for part in match.groups())
    else:
        try:
            year, month, day = date_like.year, date_like.month, date_like.day
        except AttributeError:
            raise InvalidDateInput(f"Not a date: {date_like!r}") from None
        if not all(isinstance(part, int) for part in (year, month, day)):
            raise InvalidDateInput(f"Non-integer date components: {date_like!r}")

    try:
        return date(year, month, day)
    except ValueError as e:
        raise InvalidDateInput(f"Impossible date {date_like!r}: {e}") from e


def normalize(date_like) -> str:
    """
    Build the canonical ``YYYY-MM-DD`` key for a date-like value.

    Two values describing the same local calendar day always produce the
    same key, whatever clock time or offset they carry.

    Raises:
        InvalidDateInput: If no valid calendar date can be read.
    """
    return to_date(date_like).isoformat()
