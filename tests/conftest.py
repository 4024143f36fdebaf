"""Shared test fixtures and configuration.

Sets fake environment variables before any src import so src.config loads
predictable settings, and provides temp-DB backed stores.
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("DATABASE_PATH", "data/test-events.db")
os.environ.setdefault("TIMEZONE", "UTC")
os.environ.setdefault("APP_URL", "https://calendar.test")
os.environ.setdefault("NOTIFICATION_CHANNEL", "log")
os.environ.setdefault("REMINDER_TRACK_SENT", "false")

from datetime import datetime, timezone

import pytest


NOW = datetime(2026, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    """A fixed 'current time' used across tests."""
    return NOW


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_events.db")


@pytest.fixture
def user_db(tmp_db_path):
    """Return a UserDB instance backed by a temp file."""
    from src.data.db import UserDB
    return UserDB(db_path=tmp_db_path)


@pytest.fixture
def event_db(tmp_db_path, user_db):
    """Return an EventDB sharing the user DB's temp file."""
    from src.data.db import EventDB
    return EventDB(db_path=tmp_db_path)


@pytest.fixture
def user(user_db):
    return user_db.add_user(name="Dana", email="dana@example.com", timezone="UTC")


@pytest.fixture
def make_event(event_db, user):
    """Factory fixture: insert an event for `user` with sensible defaults."""
    def _make(**overrides):
        attrs = {
            "user_id": user.id,
            "title": "Standup",
            "date": NOW,
            "event_type": "work",
        }
        attrs.update(overrides)
        return event_db.add_event(**attrs)
    return _make
