"""Tests for the fitness storage module."""

import os
import sqlite3
import tempfile
from pathlib import Path
from unittest.mock import patch

import bcrypt
import pytest

from fittrack.models import ActivityCategory, ActivityRecord
from fittrack.storage import DuplicateError, FitnessStorage


@pytest.fixture
def temp_db():
    """Create a temporary database file for testing."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)
    yield db_path
    # Cleanup
    if db_path.exists():
        db_path.unlink()


@pytest.fixture
def storage(temp_db):
    """Create a FitnessStorage instance with a temporary database."""
    return FitnessStorage(temp_db)


@pytest.fixture
def user(storage):
    return storage.create_user("ada@example.com", "secret1", "Ada Lovelace")


class TestDatabaseInitialization:
    """Tests for database initialization."""

    def test_creates_db_file(self, temp_db):
        """Database file is created on initialization."""
        if temp_db.exists():
            temp_db.unlink()

        FitnessStorage(temp_db)
        assert temp_db.exists()

    def test_creates_parent_directories(self):
        """Parent directories are created if they don't exist."""
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "subdir" / "nested" / "fittrack.db"
            FitnessStorage(db_path)
            assert db_path.exists()

    def test_initialization_is_idempotent(self, temp_db):
        """Multiple initializations don't cause errors."""
        FitnessStorage(temp_db)
        FitnessStorage(temp_db)
        storage = FitnessStorage(temp_db)
        assert storage.list_users() == []

    def test_default_path_uses_home_directory(self):
        """Default path uses ~/.fittrack/fittrack.db."""
        with patch.dict(os.environ, {}, clear=True), patch(
            "fittrack.storage.FITTRACK_DB_PATH", None
        ):
            from fittrack.storage import _get_default_db_path

            path = _get_default_db_path()
            assert path == Path.home() / ".fittrack" / "fittrack.db"

    def test_env_var_overrides_default_path(self):
        """FITTRACK_DB_PATH environment variable overrides default."""
        with patch.dict(os.environ, {"FITTRACK_DB_PATH": "/custom/path.db"}):
            from fittrack.storage import _get_default_db_path

            path = _get_default_db_path()
            assert path == Path("/custom/path.db")


class TestUsers:
    """Tests for user accounts."""

    def test_create_user(self, user):
        assert user.email == "ada@example.com"
        assert user.full_name == "Ada Lovelace"
        assert user.role == "user"
        assert user.id

    def test_duplicate_email(self, storage, user):
        with pytest.raises(DuplicateError):
            storage.create_user("ada@example.com", "other-pass", "Someone")

    def test_unknown_role(self, storage):
        with pytest.raises(ValueError):
            storage.create_user("x@example.com", "secret1", "X", role="root")

    def test_authenticate(self, storage, user):
        assert storage.authenticate("ada@example.com", "secret1") == user
        assert storage.authenticate("ada@example.com", "wrong") is None
        assert storage.authenticate("nobody@example.com", "secret1") is None

    def test_password_stored_as_bcrypt_hash(self, storage, user):
        with sqlite3.connect(storage.db_path) as conn:
            stored = conn.execute("SELECT password_hash FROM users").fetchone()[0]
        assert stored != "secret1"
        assert stored.startswith("$2")
        assert bcrypt.checkpw(b"secret1", stored.encode())

    def test_each_user_gets_own_salt(self, storage, user):
        storage.create_user("grace@example.com", "secret1", "Grace Hopper")
        with sqlite3.connect(storage.db_path) as conn:
            hashes = [row[0] for row in conn.execute("SELECT password_hash FROM users")]
        assert hashes[0] != hashes[1]

    def test_authenticate_overlong_password(self, storage, user):
        assert storage.authenticate("ada@example.com", "x" * 100) is None

    def test_get_user(self, storage, user):
        assert storage.get_user(user.id) == user
        assert storage.get_user(9999) is None

    def test_list_users(self, storage, user):
        other = storage.create_user("grace@example.com", "secret2", "Grace Hopper")
        assert {u.id for u in storage.list_users()} == {user.id, other.id}

    def test_set_user_role(self, storage, user):
        updated = storage.set_user_role(user.id, "admin")
        assert updated.role == "admin"
        assert updated.is_admin
        assert storage.set_user_role(9999, "admin") is None


class TestActivityTypes:
    """Tests for activity types."""

    def test_global_and_own_types_visible(self, storage, user):
        other = storage.create_user("grace@example.com", "secret2", "Grace Hopper")
        storage.create_activity_type("Push-ups", "reps")
        storage.create_activity_type("Running", "km", user.id)
        storage.create_activity_type("Swimming", "m", other.id)

        names = [t.display_name for t in storage.get_activity_types(user.id)]
        assert names == ["Push-ups", "Running"]

    def test_duplicate_name_per_owner(self, storage, user):
        storage.create_activity_type("Plank", "seconds", user.id)
        with pytest.raises(DuplicateError):
            storage.create_activity_type("plank", "seconds", user.id)

    def test_same_name_for_different_owners(self, storage, user):
        storage.create_activity_type("Plank", "seconds")
        created = storage.create_activity_type("Plank", "seconds", user.id)
        assert isinstance(created, ActivityCategory)


class TestActivityLogs:
    """Tests for activity logs."""

    def test_log_and_read_back(self, storage, user):
        push_ups = storage.create_activity_type("Push-ups", "reps")
        record = storage.log_activity(user.id, push_ups.id, 25, "2026-01-20", "morning")

        assert isinstance(record, ActivityRecord)
        logs = storage.get_activity_logs(user.id)
        assert len(logs) == 1
        assert logs[0].category_id == push_ups.id
        assert logs[0].magnitude == 25
        assert logs[0].calendar_date == "2026-01-20"
        assert logs[0].note == "morning"

    def test_logs_newest_date_first(self, storage, user):
        push_ups = storage.create_activity_type("Push-ups", "reps")
        storage.log_activity(user.id, push_ups.id, 1, "2026-01-18")
        storage.log_activity(user.id, push_ups.id, 2, "2026-01-20")
        storage.log_activity(user.id, push_ups.id, 3, "2026-01-19")

        dates = [r.calendar_date for r in storage.get_activity_logs(user.id)]
        assert dates == ["2026-01-20", "2026-01-19", "2026-01-18"]

    def test_logs_are_per_user(self, storage, user):
        other = storage.create_user("grace@example.com", "secret2", "Grace Hopper")
        push_ups = storage.create_activity_type("Push-ups", "reps")
        storage.log_activity(other.id, push_ups.id, 10, "2026-01-20")

        assert storage.get_activity_logs(user.id) == []

    def test_delete_only_own_logs(self, storage, user):
        other = storage.create_user("grace@example.com", "secret2", "Grace Hopper")
        push_ups = storage.create_activity_type("Push-ups", "reps")
        record = storage.log_activity(other.id, push_ups.id, 10, "2026-01-20")

        assert storage.delete_activity_log(user.id, record.id) is False
        assert storage.delete_activity_log(other.id, record.id) is True
        assert storage.get_activity_logs(other.id) == []

    def test_all_logs_joined(self, storage, user):
        push_ups = storage.create_activity_type("Push-ups", "reps")
        storage.log_activity(user.id, push_ups.id, 10, "2026-01-20")

        rows = storage.get_all_activity_logs()
        assert len(rows) == 1
        assert rows[0]["email"] == "ada@example.com"
        assert rows[0]["activity"] == "Push-ups"
        assert rows[0]["unit"] == "reps"
        assert storage.count_activity_logs() == 1

    def test_all_logs_limit(self, storage, user):
        push_ups = storage.create_activity_type("Push-ups", "reps")
        for i in range(5):
            storage.log_activity(user.id, push_ups.id, i, "2026-01-20")

        assert len(storage.get_all_activity_logs(limit=3)) == 3


class TestSnapshot:
    """Tests for load_snapshot."""

    def test_snapshot(self, storage, user):
        push_ups = storage.create_activity_type("Push-ups", "reps")
        storage.log_activity(user.id, push_ups.id, 10, "2026-01-20")

        records, categories = storage.load_snapshot(user.id)
        assert len(records) == 1
        assert categories == [push_ups]

    def test_database_error_gives_empty_snapshot(self, storage, user):
        with patch.object(
            storage, "get_activity_logs", side_effect=sqlite3.OperationalError("locked")
        ):
            assert storage.load_snapshot(user.id) == ([], [])


class TestWeightLogs:
    """Tests for weight logs."""

    def test_add_and_list(self, storage, user):
        storage.add_weight(user.id, 80.5, "2026-01-01")
        storage.add_weight(user.id, 79.0, "2026-01-15", "after holidays")

        logs = storage.get_weight_logs(user.id)
        assert [w.weight for w in logs] == [79.0, 80.5]
        assert logs[0].note == "after holidays"

    def test_delete(self, storage, user):
        record = storage.add_weight(user.id, 80.5, "2026-01-01")
        assert storage.delete_weight_log(user.id, record.id) is True
        assert storage.delete_weight_log(user.id, record.id) is False


class TestSettingsAndCache:
    """Tests for settings and the TTL cache."""

    def test_setting_default(self, storage):
        assert storage.get_setting("missing", "fallback") == "fallback"

    def test_setting_upsert(self, storage):
        storage.set_setting("key", "one")
        storage.set_setting("key", "two")
        assert storage.get_setting("key") == "two"

    def test_cache_roundtrip(self, storage):
        storage.set_cache("insight", "Great week!", hours=1)
        assert storage.get_cache("insight") == "Great week!"

    def test_expired_cache(self, storage):
        storage.set_cache("insight", "Old news", hours=-1)
        assert storage.get_cache("insight") is None

    def test_missing_cache(self, storage):
        assert storage.get_cache("nothing") is None
