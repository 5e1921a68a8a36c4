"""
FastAPI web application for fittrack.

Provides REST API endpoints for activity logs, dashboards, calendars, weight
tracking, the AI insight and admin tools, plus an HTML dashboard.

The caller identifies itself with the ``X-User-Id`` header. Endpoints that
depend on "today" accept a ``today`` query parameter to override the clock.

Warning: the header is trusted as-is, so anyone who knows an admin's id can
act as that admin. Run this only behind a proxy that authenticates the
caller and sets the header itself.
"""

import datetime
import logging
from datetime import date
from pathlib import Path

from fastapi import FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, Field

from fittrack.admin import (
    AdminPermissionError,
    AdminService,
    SelfRoleChangeError,
    UserNotFoundError,
)
from fittrack.calendar_heatmap import build_calendar
from fittrack.config import (
    INTENSITY_THRESHOLDS,
    PRIORITY_CATEGORIES,
    SERIES_PALETTE,
    validate_config,
)
from fittrack.intensity import IntensityThresholds
from fittrack.llm_client import InsightClient
from fittrack.models import UserProfile
from fittrack.records import resolved_only, search_records
from fittrack.rollup import ALL_CATEGORIES, aggregate
from fittrack.stats_calculator import build_category_series, calculate_stats
from fittrack.storage import DuplicateError, FitnessStorage
from fittrack.weight_tracker import summarize_weights

logger = logging.getLogger(__name__)

app = FastAPI(
    title="fittrack",
    description="A fitness self-tracking service",
    version="0.1.0",
)

templates = Jinja2Templates(directory=Path(__file__).parent / "templates")

MAX_WINDOW_DAYS = 366


class RegisterRequest(BaseModel):
    """Request model for registering a user."""

    email: str = Field(..., min_length=3, max_length=320, description="Email address")
    password: str = Field(..., min_length=6, max_length=72, description="Password")
    full_name: str = Field(..., min_length=1, max_length=200, description="Full name")


class LoginRequest(BaseModel):
    """Request model for logging in."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ActivityTypeCreate(BaseModel):
    """Request model for creating a personal activity type."""

    name: str = Field(..., min_length=1, max_length=100, description="Activity name")
    unit: str = Field("reps", min_length=1, max_length=30, description="Unit of the logged value")


class ActivityLogCreate(BaseModel):
    """Request model for logging an activity."""

    activity_type_id: int = Field(..., ge=1)
    value: float = Field(..., ge=0, description="Logged quantity (reps, km, ...)")
    date: datetime.date | None = Field(None, description="Day of the activity, defaults to today")
    notes: str | None = Field(None, max_length=1000)


class WeightCreate(BaseModel):
    """Request model for logging a body-weight measurement."""

    weight: float = Field(..., gt=0, le=500, description="Weight in kg")
    date: datetime.date | None = Field(None, description="Day of the measurement, defaults to today")
    notes: str | None = Field(None, max_length=1000)


def _reference_date(today: date | None) -> date:
    """The reference clock: an explicit override or the local date."""
    return today or date.today()


def _thresholds() -> IntensityThresholds:
    try:
        validate_config()
        return IntensityThresholds.from_values(INTENSITY_THRESHOLDS)
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        raise HTTPException(status_code=500, detail=f"Configuration error: {e}")


def _require_user(storage: FitnessStorage, user_id: str | None) -> UserProfile:
    """
    Resolve the calling user.

    Raises:
        HTTPException: 401 when the id is missing, malformed or unknown
    """
    if not user_id or not user_id.strip().isdigit():
        raise HTTPException(status_code=401, detail="Missing or invalid X-User-Id header")

    user = storage.get_user(int(user_id))
    if user is None:
        raise HTTPException(status_code=401, detail="Unknown user")
    return user


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


# Auth endpoints
@app.post("/api/auth/register", status_code=201)
def register(request: RegisterRequest):
    """
    Register a new user with the standard role.

    Returns:
        JSON with the created user
    """
    storage = FitnessStorage()
    try:
        user = storage.create_user(request.email, request.password, request.full_name)
    except DuplicateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"user": user.to_dict()}


@app.post("/api/auth/login")
def login(request: LoginRequest):
    """
    Check credentials.

    Returns:
        JSON with the user profile
    """
    storage = FitnessStorage()
    user = storage.authenticate(request.email, request.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return {"user": user.to_dict()}


# Activity type endpoints
@app.get("/api/activity-types")
def get_activity_types(x_user_id: str | None = Header(None)):
    """Activity types visible to the user (global and personal)."""
    storage = FitnessStorage()
    user = _require_user(storage, x_user_id)
    types = storage.get_activity_types(user.id)
    return {
        "activity_types": [
            {"id": t.id, "name": t.display_name, "unit": t.unit} for t in types
        ]
    }


@app.post("/api/activity-types", status_code=201)
def create_activity_type(activity_type: ActivityTypeCreate, x_user_id: str | None = Header(None)):
    """Create a personal activity type."""
    storage = FitnessStorage()
    user = _require_user(storage, x_user_id)
    try:
        created = storage.create_activity_type(activity_type.name, activity_type.unit, user.id)
    except DuplicateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"activity_type": {"id": created.id, "name": created.display_name, "unit": created.unit}}


# Activity log endpoints
@app.get("/api/logs")
def get_logs(search: str | None = None, x_user_id: str | None = Header(None)):
    """
    The user's activity logs, newest first, optionally filtered.

    Args:
        search: Matches category name or notes (case-insensitive)
    """
    storage = FitnessStorage()
    user = _require_user(storage, x_user_id)
    records, categories = storage.load_snapshot(user.id)
    matches = search_records(resolved_only(records, categories), search)

    return {
        "logs": [
            {
                "id": item.record.id,
                "activity_type_id": item.category.id,
                "activity": item.category.display_name,
                "unit": item.category.unit,
                "value": item.record.magnitude,
                "date": item.record.calendar_date,
                "notes": item.record.note,
            }
            for item in matches
        ]
    }


@app.post("/api/logs", status_code=201)
def create_log(
    log: ActivityLogCreate,
    today: date | None = None,
    x_user_id: str | None = Header(None),
):
    """Log an activity for the user."""
    storage = FitnessStorage()
    user = _require_user(storage, x_user_id)

    visible = {t.id for t in storage.get_activity_types(user.id)}
    if str(log.activity_type_id) not in visible:
        raise HTTPException(status_code=404, detail="Activity type not found")

    log_date = log.date or _reference_date(today)
    record = storage.log_activity(
        user.id, log.activity_type_id, log.value, log_date.isoformat(), log.notes
    )
    return {
        "log": {
            "id": record.id,
            "activity_type_id": record.category_id,
            "value": record.magnitude,
            "date": record.calendar_date,
            "notes": record.note,
        }
    }


@app.delete("/api/logs/{log_id}")
def delete_log(log_id: int, x_user_id: str | None = Header(None)):
    """Delete one of the user's logs."""
    storage = FitnessStorage()
    user = _require_user(storage, x_user_id)
    if not storage.delete_activity_log(user.id, log_id):
        raise HTTPException(status_code=404, detail="Log not found")
    return {"deleted": str(log_id)}


# Dashboard endpoints
def _fetch_dashboard_data(storage: FitnessStorage, user: UserProfile, today: date) -> dict:
    """Build the dashboard view model for a user."""
    records, categories = storage.load_snapshot(user.id)
    resolved = resolved_only(records, categories)
    thresholds = _thresholds()

    return {
        "user": user.to_dict(),
        "today": today.isoformat(),
        "stats": calculate_stats(records, categories, today),
        "calendar": build_calendar(records, categories, today, thresholds=thresholds),
        "category_chart": build_category_series(
            records,
            categories,
            today,
            priority_substrings=PRIORITY_CATEGORIES,
            palette=SERIES_PALETTE,
        ),
        "recent_logs": [
            {
                "id": item.record.id,
                "activity": item.category.display_name,
                "unit": item.category.unit,
                "value": item.record.magnitude,
                "date": item.record.calendar_date,
            }
            for item in resolved[:6]
        ],
    }


@app.get("/", response_class=HTMLResponse)
def index(request: Request, user_id: str | None = None, today: date | None = None):
    """Render the dashboard page for ?user_id=."""
    storage = FitnessStorage()
    user = _require_user(storage, user_id)
    data = _fetch_dashboard_data(storage, user, _reference_date(today))
    return templates.TemplateResponse(request, "index.html", data)


@app.get("/api/dashboard")
def get_dashboard(today: date | None = None, x_user_id: str | None = Header(None)):
    """
    Get the dashboard view model.

    Returns:
        JSON with stats, month calendar, category chart and recent logs
    """
    storage = FitnessStorage()
    user = _require_user(storage, x_user_id)
    return _fetch_dashboard_data(storage, user, _reference_date(today))


@app.get("/api/rollup")
def get_rollup(
    window_days: int = Query(7, le=MAX_WINDOW_DAYS),
    month: bool = False,
    category: str = ALL_CATEGORIES,
    today: date | None = None,
    x_user_id: str | None = Header(None),
):
    """
    Per-day rollups for a trailing window or the current month.

    Args:
        window_days: Trailing window length (non-positive gives no days)
        month: Use the calendar month containing today instead
        category: "all" or a single activity type id
    """
    storage = FitnessStorage()
    user = _require_user(storage, x_user_id)
    records, categories = storage.load_snapshot(user.id)
    reference = _reference_date(today)

    buckets = aggregate(
        records,
        categories,
        reference,
        window_days=window_days,
        calendar_month=month,
        category_filter=category,
    )
    return {"days": [bucket.to_dict() for bucket in buckets]}


@app.get("/api/calendar")
def get_calendar(
    window_days: int | None = Query(None, le=MAX_WINDOW_DAYS),
    today: date | None = None,
    x_user_id: str | None = Header(None),
):
    """
    Get the activity heatmap.

    Returns:
        JSON with daily totals and intensity tiers for the current month,
        or for the trailing window_days when given
    """
    storage = FitnessStorage()
    user = _require_user(storage, x_user_id)
    records, categories = storage.load_snapshot(user.id)
    return build_calendar(
        records,
        categories,
        _reference_date(today),
        window_days=window_days,
        thresholds=_thresholds(),
    )


@app.get("/api/category-chart")
def get_category_chart(
    window_days: int = Query(7, ge=1, le=MAX_WINDOW_DAYS),
    today: date | None = None,
    x_user_id: str | None = Header(None),
):
    """Stacked per-category chart for the trailing window."""
    storage = FitnessStorage()
    user = _require_user(storage, x_user_id)
    records, categories = storage.load_snapshot(user.id)
    return build_category_series(
        records,
        categories,
        _reference_date(today),
        window_days=window_days,
        priority_substrings=PRIORITY_CATEGORIES,
        palette=SERIES_PALETTE,
    )


# Weight endpoints
@app.get("/api/weights")
def get_weights(x_user_id: str | None = Header(None)):
    """Weight logs (newest first) and their summary."""
    storage = FitnessStorage()
    user = _require_user(storage, x_user_id)
    weights = storage.get_weight_logs(user.id)
    return {
        "logs": [
            {"id": w.id, "weight": w.weight, "date": w.calendar_date, "notes": w.note}
            for w in weights
        ],
        "summary": summarize_weights(weights),
    }


@app.post("/api/weights", status_code=201)
def create_weight(
    weight: WeightCreate,
    today: date | None = None,
    x_user_id: str | None = Header(None),
):
    """Log a body-weight measurement."""
    storage = FitnessStorage()
    user = _require_user(storage, x_user_id)
    measured_on = weight.date or _reference_date(today)
    record = storage.add_weight(user.id, weight.weight, measured_on.isoformat(), weight.notes)
    return {
        "log": {
            "id": record.id,
            "weight": record.weight,
            "date": record.calendar_date,
            "notes": record.note,
        }
    }


@app.delete("/api/weights/{log_id}")
def delete_weight(log_id: int, x_user_id: str | None = Header(None)):
    """Delete one of the user's weight logs."""
    storage = FitnessStorage()
    user = _require_user(storage, x_user_id)
    if not storage.delete_weight_log(user.id, log_id):
        raise HTTPException(status_code=404, detail="Weight log not found")
    return {"deleted": str(log_id)}


# AI insight endpoint
@app.post("/api/insight")
def create_insight(x_user_id: str | None = Header(None)):
    """
    Generate the AI progress insight.

    Always succeeds: failures are replaced by a fixed fallback message.

    Returns:
        JSON with the insight text and its source
    """
    storage = FitnessStorage()
    user = _require_user(storage, x_user_id)
    records, categories = storage.load_snapshot(user.id)

    result = InsightClient(storage).generate_insight(resolved_only(records, categories))
    return {"insight": result.text, "source": result.source}


# Admin endpoints
@app.get("/api/admin/overview")
def admin_overview(search: str | None = None, x_user_id: str | None = Header(None)):
    """
    Site-wide statistics, recent logs and users.

    Args:
        search: Filter users by email or full name
    """
    storage = FitnessStorage()
    actor = _require_user(storage, x_user_id)
    admin = AdminService(storage)

    try:
        overview = admin.overview(actor)
        users = admin.search_users(actor, search)
    except AdminPermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))

    overview["users"] = [user.to_dict() for user in users]
    return overview


@app.post("/api/admin/users/{target_id}/toggle-role")
def admin_toggle_role(target_id: int, x_user_id: str | None = Header(None)):
    """Switch a user between the admin and user roles."""
    storage = FitnessStorage()
    actor = _require_user(storage, x_user_id)

    try:
        updated = AdminService(storage).toggle_role(actor, str(target_id))
    except AdminPermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except SelfRoleChangeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UserNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {"user": updated.to_dict()}
