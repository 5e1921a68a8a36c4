"""
SQLite-based storage for fittrack.

Holds users, activity types, activity logs and weight logs, and hands the
computation modules point-in-time snapshots of a user's data.
"""

import logging
import os
import sqlite3
from datetime import datetime, timedelta
from pathlib import Path

import bcrypt

from fittrack.config import FITTRACK_DB_PATH
from fittrack.models import ActivityCategory, ActivityRecord, UserProfile, WeightRecord

logger = logging.getLogger(__name__)

VALID_ROLES = ("admin", "user")


class DuplicateError(Exception):
    """Raised when a unique value (email, category name) already exists."""

    pass


def _get_default_db_path() -> Path:
    """Get the default database path."""
    env_path = os.environ.get("FITTRACK_DB_PATH") or FITTRACK_DB_PATH
    if env_path:
        return Path(env_path)
    return Path.home() / ".fittrack" / "fittrack.db"


def _hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def _check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        # bcrypt rejects passwords over 72 bytes and malformed hashes
        return False


def _row_to_user(row) -> UserProfile:
    return UserProfile(
        id=str(row["id"]),
        email=row["email"],
        full_name=row["full_name"] or "",
        role=row["role"],
        created_at=row["created_at"],
    )


def _row_to_category(row) -> ActivityCategory:
    return ActivityCategory(id=str(row["id"]), display_name=row["name"], unit=row["unit"])


def _row_to_record(row) -> ActivityRecord:
    return ActivityRecord(
        id=str(row["id"]),
        category_id=str(row["activity_type_id"]),
        magnitude=row["value"],
        calendar_date=row["date"],
        note=row["notes"],
    )


def _row_to_weight(row) -> WeightRecord:
    return WeightRecord(
        id=str(row["id"]),
        weight=row["weight"],
        calendar_date=row["date"],
        note=row["notes"],
    )


class FitnessStorage:
    """SQLite-based storage for users and their fitness logs."""

    def __init__(self, db_path: str | Path | None = None):
        """
        Initialize the storage.

        Args:
            db_path: Path to the SQLite database file.
                     Defaults to ~/.fittrack/fittrack.db
        """
        if db_path is None:
            db_path = _get_default_db_path()
        self.db_path = Path(db_path)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Create tables and indexes if they don't exist."""
        # Ensure parent directory exists
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    email TEXT NOT NULL UNIQUE,
                    full_name TEXT,
                    role TEXT NOT NULL DEFAULT 'user',
                    password_hash TEXT NOT NULL,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS activity_types (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    unit TEXT NOT NULL,
                    icon TEXT NOT NULL DEFAULT 'Activity',
                    user_id INTEGER,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS activity_logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL,
                    activity_type_id INTEGER NOT NULL,
                    value REAL NOT NULL,
                    date TEXT NOT NULL,
                    notes TEXT,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_activity_logs_user_date
                ON activity_logs(user_id, date)
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS weight_logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL,
                    weight REAL NOT NULL,
                    date TEXT NOT NULL,
                    notes TEXT,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS cache (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    expires_at TEXT NOT NULL
                )
            """)
            conn.commit()

    # Users

    def create_user(
        self, email: str, password: str, full_name: str = "", role: str = "user"
    ) -> UserProfile:
        """
        Register a new user.

        Raises:
            DuplicateError: If the email is already registered
            ValueError: If the role is unknown or the password is too long
        """
        if role not in VALID_ROLES:
            raise ValueError(f"Unknown role: {role}")

        with self._connect() as conn:
            try:
                cursor = conn.execute(
                    """
                    INSERT INTO users (email, full_name, role, password_hash)
                    VALUES (?, ?, ?, ?)
                    """,
                    (email, full_name, role, _hash_password(password)),
                )
            except sqlite3.IntegrityError as e:
                raise DuplicateError(f"Email already in use: {email}") from e
            conn.commit()
            user_id = cursor.lastrowid

        logger.info("Registered user %s (%s)", user_id, role)
        return self.get_user(user_id)

    def authenticate(self, email: str, password: str) -> UserProfile | None:
        """Return the user when email and password match, otherwise None."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE email = ?", (email,)
            ).fetchone()

        if row is None or not _check_password(password, row["password_hash"]):
            return None
        return _row_to_user(row)

    def get_user(self, user_id: int | str) -> UserProfile | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE id = ?", (user_id,)
            ).fetchone()
        return _row_to_user(row) if row else None

    def list_users(self) -> list[UserProfile]:
        """All users, newest first."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM users ORDER BY created_at DESC, id DESC"
            ).fetchall()
        return [_row_to_user(row) for row in rows]

    def set_user_role(self, user_id: int | str, role: str) -> UserProfile | None:
        """
        Change a user's role.

        Returns:
            The updated user, or None if the user doesn't exist
        """
        if role not in VALID_ROLES:
            raise ValueError(f"Unknown role: {role}")

        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE users SET role = ? WHERE id = ?", (role, user_id)
            )
            conn.commit()

        if cursor.rowcount == 0:
            return None
        logger.info("User %s is now %s", user_id, role)
        return self.get_user(user_id)

    # Activity types

    def create_activity_type(
        self, name: str, unit: str, user_id: int | str | None = None
    ) -> ActivityCategory:
        """
        Create an activity type, global when user_id is None.

        Raises:
            DuplicateError: If the owner already has a type with this name
        """
        with self._connect() as conn:
            existing = conn.execute(
                """
                SELECT id FROM activity_types
                WHERE lower(name) = lower(?) AND user_id IS ?
                """,
                (name, user_id),
            ).fetchone()
            if existing:
                raise DuplicateError(f"Activity type already exists: {name}")

            cursor = conn.execute(
                "INSERT INTO activity_types (name, unit, user_id) VALUES (?, ?, ?)",
                (name, unit, user_id),
            )
            conn.commit()

        return ActivityCategory(id=str(cursor.lastrowid), display_name=name, unit=unit)

    def get_activity_types(self, user_id: int | str | None = None) -> list[ActivityCategory]:
        """
        Activity types visible to a user: global ones plus their own, by name.
        """
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT id, name, unit FROM activity_types
                WHERE user_id IS NULL OR user_id = ?
                ORDER BY name, id
                """,
                (user_id,),
            ).fetchall()
        return [_row_to_category(row) for row in rows]

    # Activity logs

    def log_activity(
        self,
        user_id: int | str,
        activity_type_id: int | str,
        value: float,
        date: str,
        notes: str | None = None,
    ) -> ActivityRecord:
        """Insert an activity log and return it as a record."""
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO activity_logs (user_id, activity_type_id, value, date, notes)
                VALUES (?, ?, ?, ?, ?)
                """,
                (user_id, activity_type_id, value, date, notes),
            )
            conn.commit()

        logger.info("User %s logged %s of type %s on %s", user_id, value, activity_type_id, date)
        return ActivityRecord(
            id=str(cursor.lastrowid),
            category_id=str(activity_type_id),
            magnitude=value,
            calendar_date=date,
            note=notes,
        )

    def get_activity_logs(self, user_id: int | str) -> list[ActivityRecord]:
        """A user's activity logs, newest date first."""
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT id, activity_type_id, value, date, notes
                FROM activity_logs
                WHERE user_id = ?
                ORDER BY date DESC, id DESC
                """,
                (user_id,),
            ).fetchall()
        return [_row_to_record(row) for row in rows]

    def delete_activity_log(self, user_id: int | str, log_id: int | str) -> bool:
        """Delete one of the user's logs. Returns False if nothing matched."""
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM activity_logs WHERE id = ? AND user_id = ?",
                (log_id, user_id),
            )
            conn.commit()
        return cursor.rowcount > 0

    def get_all_activity_logs(self, limit: int | None = None) -> list[dict]:
        """
        Every user's logs joined with user and type names, newest first.

        Rows whose user or type is gone keep None for the missing names.
        """
        query = """
            SELECT l.id, l.user_id, l.value, l.date, l.notes, l.created_at,
                   u.email, u.full_name, t.name AS type_name, t.unit
            FROM activity_logs l
            LEFT JOIN users u ON u.id = l.user_id
            LEFT JOIN activity_types t ON t.id = l.activity_type_id
            ORDER BY l.created_at DESC, l.id DESC
        """
        params: tuple = ()
        if limit is not None:
            query += " LIMIT ?"
            params = (limit,)

        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()

        return [
            {
                "id": str(row["id"]),
                "user_id": str(row["user_id"]),
                "email": row["email"],
                "full_name": row["full_name"],
                "activity": row["type_name"],
                "unit": row["unit"],
                "value": row["value"],
                "date": row["date"],
                "notes": row["notes"],
                "created_at": row["created_at"],
            }
            for row in rows
        ]

    def count_activity_logs(self) -> int:
        with self._connect() as conn:
            return conn.execute("SELECT COUNT(*) FROM activity_logs").fetchone()[0]

    # Weight logs

    def add_weight(
        self, user_id: int | str, weight: float, date: str, notes: str | None = None
    ) -> WeightRecord:
        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO weight_logs (user_id, weight, date, notes) VALUES (?, ?, ?, ?)",
                (user_id, weight, date, notes),
            )
            conn.commit()
        return WeightRecord(id=str(cursor.lastrowid), weight=weight, calendar_date=date, note=notes)

    def get_weight_logs(self, user_id: int | str) -> list[WeightRecord]:
        """A user's weight logs, newest date first."""
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT id, weight, date, notes FROM weight_logs
                WHERE user_id = ?
                ORDER BY date DESC, id DESC
                """,
                (user_id,),
            ).fetchall()
        return [_row_to_weight(row) for row in rows]

    def delete_weight_log(self, user_id: int | str, log_id: int | str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM weight_logs WHERE id = ? AND user_id = ?",
                (log_id, user_id),
            )
            conn.commit()
        return cursor.rowcount > 0

    # Snapshots

    def load_snapshot(
        self, user_id: int | str
    ) -> tuple[list[ActivityRecord], list[ActivityCategory]]:
        """
        Read a user's records and visible categories in one go.

        A database error gives two empty lists so the dashboards still render.
        """
        try:
            return self.get_activity_logs(user_id), self.get_activity_types(user_id)
        except sqlite3.Error as e:
            logger.warning("Could not load snapshot for user %s: %s", user_id, e)
            return [], []

    # Settings and cache

    def get_setting(self, key: str, default: str | None = None) -> str | None:
        """
        Get a setting value by key.

        Args:
            key: The setting key
            default: Default value if key doesn't exist

        Returns:
            The setting value or default
        """
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM settings WHERE key = ?",
                (key,),
            ).fetchone()
        return row[0] if row else default

    def set_setting(self, key: str, value: str) -> None:
        """
        Set a setting value (upserts).

        Args:
            key: The setting key
            value: The value to store
        """
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO settings (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value),
            )
            conn.commit()

    def get_cache(self, key: str) -> str | None:
        """Return a cached value, or None if missing or expired."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value, expires_at FROM cache WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            return None
        if datetime.fromisoformat(row["expires_at"]) <= datetime.now():
            return None
        return row["value"]

    def set_cache(self, key: str, value: str, hours: int = 24) -> None:
        """Store a value that expires after the given number of hours."""
        expires_at = (datetime.now() + timedelta(hours=hours)).isoformat()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO cache (key, value, expires_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    expires_at = excluded.expires_at
                """,
                (key, value, expires_at),
            )
            conn.commit()
