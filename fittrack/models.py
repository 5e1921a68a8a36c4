"""
Data model for fittrack.

Activity and weight records are supplied by the storage layer as snapshots;
the computation modules only read them.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union


@dataclass(frozen=True)
class ActivityCategory:
    """A kind of activity that can be logged (push-ups, running, ...)."""

    id: str
    display_name: str
    unit: str = ""


@dataclass(frozen=True)
class ActivityRecord:
    """A single logged activity.

    ``calendar_date`` is the day the activity happened, not the time the
    record was created. It may be a date, a datetime or an ISO string.
    """

    id: str
    category_id: str
    magnitude: float
    calendar_date: Any
    note: Optional[str] = None


@dataclass(frozen=True)
class WeightRecord:
    """A body-weight measurement in kilograms."""

    id: str
    weight: float
    calendar_date: Any
    note: Optional[str] = None


@dataclass(frozen=True)
class UserProfile:
    """A registered user."""

    id: str
    email: str
    full_name: str = ""
    role: str = "user"
    created_at: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class DayBucket:
    """Aggregated activity for one calendar day."""

    date_key: str
    record_count: int = 0
    total_magnitude: float = 0.0
    per_category_magnitude: Optional[dict[str, float]] = None

    def to_dict(self) -> dict:
        data = {
            "date": self.date_key,
            "count": self.record_count,
            "total": self.total_magnitude,
        }
        if self.per_category_magnitude is not None:
            data["per_category"] = dict(self.per_category_magnitude)
        return data


@dataclass(frozen=True)
class ResolvedRecord:
    """An activity record joined with its category."""

    record: ActivityRecord
    category: ActivityCategory


@dataclass(frozen=True)
class UnresolvedRecord:
    """An activity record whose category is not among the known categories."""

    record: ActivityRecord


RecordResolution = Union[ResolvedRecord, UnresolvedRecord]
