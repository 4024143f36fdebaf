"""
Event Calendar — SQLite storage.

Users and their events live in a single SQLite file. Events are removed
together with their owner (ON DELETE CASCADE). Older databases are migrated
in place by adding missing columns on startup.
"""

from __future__ import annotations

import logging
import math
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from src.data import scopes
from src.data.models import Event, EventType, User
from src.data.scopes import Scope, from_db_timestamp, to_db_timestamp

logger = logging.getLogger(__name__)

PER_PAGE_OPTIONS = (10, 25, 50)

_USERS_DDL = """
    CREATE TABLE IF NOT EXISTS users (
        id                INTEGER PRIMARY KEY AUTOINCREMENT,
        name              TEXT    NOT NULL,
        email             TEXT    NOT NULL UNIQUE,
        timezone          TEXT    NOT NULL DEFAULT 'UTC',
        telegram_chat_id  INTEGER,
        created_at        TEXT    NOT NULL
    )
"""

_EVENTS_DDL = """
    CREATE TABLE IF NOT EXISTS events (
        id                 INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id            INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        title              TEXT    NOT NULL,
        description        TEXT,
        date               TEXT    NOT NULL,
        location           TEXT,
        event_type         TEXT    NOT NULL,
        is_recurring       INTEGER NOT NULL DEFAULT 0,
        recurrence_pattern TEXT,
        reminder           INTEGER,
        reminder_sent_at   TEXT,
        created_at         TEXT    NOT NULL,
        updated_at         TEXT    NOT NULL
    )
"""


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


@dataclass
class Page:
    """One page of a date-ordered event listing."""

    items: list[Event] = field(default_factory=list)
    total: int = 0
    page: int = 1
    per_page: int = 10

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total / self.per_page))

    @property
    def has_more(self) -> bool:
        return self.page < self.last_page


class _SQLiteDB:
    """Connection handling shared by the user and event stores."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from src.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        conn.create_function("local_month", 2, scopes.local_month, deterministic=True)
        return conn

    def _init_db(self) -> None:
        """Create both tables if they don't exist, and migrate schema."""
        with self._connect() as conn:
            conn.execute(_USERS_DDL)
            conn.execute(_EVENTS_DDL)

            # Migrate existing DBs: add new columns if missing
            user_cols = {
                row[1] for row in conn.execute("PRAGMA table_info(users)").fetchall()
            }
            if "timezone" not in user_cols:
                conn.execute(
                    "ALTER TABLE users ADD COLUMN timezone TEXT NOT NULL DEFAULT 'UTC'"
                )
            if "telegram_chat_id" not in user_cols:
                conn.execute("ALTER TABLE users ADD COLUMN telegram_chat_id INTEGER")

            event_cols = {
                row[1] for row in conn.execute("PRAGMA table_info(events)").fetchall()
            }
            if "reminder_sent_at" not in event_cols:
                conn.execute("ALTER TABLE events ADD COLUMN reminder_sent_at TEXT")

            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_events_user_date ON events (user_id, date)"
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_events_user_type ON events (user_id, event_type)"
            )
        logger.debug("Tables initialized at %s", self._db_path)


class UserDB(_SQLiteDB):
    """SQLite-backed storage for calendar owners."""

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            timezone=row["timezone"],
            telegram_chat_id=row["telegram_chat_id"],
            created_at=row["created_at"],
        )

    def add_user(
        self,
        name: str,
        email: str,
        timezone: str | None = None,
        telegram_chat_id: int | None = None,
    ) -> User:
        """Register a new user. Timezone defaults to the configured TIMEZONE."""
        if timezone is None:
            from src.config import settings
            timezone = settings.TIMEZONE

        now = _now_iso()
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO users (name, email, timezone, telegram_chat_id, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (name, email, timezone, telegram_chat_id, now),
            )
            user_id = cursor.lastrowid

        logger.info("User registered: #%d '%s' <%s>", user_id, name, email)
        return User(
            id=user_id,
            name=name,
            email=email,
            timezone=timezone,
            telegram_chat_id=telegram_chat_id,
            created_at=now,
        )

    def get_user(self, user_id: int) -> User | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def first_user(self) -> User | None:
        """The earliest registered user, if any."""
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM users ORDER BY id LIMIT 1").fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def list_users(self) -> list[User]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM users ORDER BY id").fetchall()
        return [self._row_to_user(r) for r in rows]

    def set_telegram_chat_id(self, user_id: int, chat_id: int | None) -> None:
        with self._connect() as conn:
            conn.execute(
                "UPDATE users SET telegram_chat_id = ? WHERE id = ?",
                (chat_id, user_id),
            )
        logger.info("Telegram chat set for user #%d", user_id)

    def delete_user(self, user_id: int) -> bool:
        """Permanently delete a user and, by cascade, all of their events."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("User #%d deleted with their events", user_id)
        return deleted


class EventDB(_SQLiteDB):
    """SQLite-backed storage for calendar events."""

    _UPDATABLE = frozenset({
        "title", "description", "date", "location", "event_type",
        "is_recurring", "recurrence_pattern", "reminder",
    })

    @staticmethod
    def _row_to_event(row: sqlite3.Row) -> Event:
        return Event(
            id=row["id"],
            user_id=row["user_id"],
            title=row["title"],
            description=row["description"],
            date=from_db_timestamp(row["date"]),
            location=row["location"],
            event_type=row["event_type"],
            is_recurring=bool(row["is_recurring"]),
            recurrence_pattern=row["recurrence_pattern"],
            reminder=row["reminder"],
            reminder_sent_at=from_db_timestamp(row["reminder_sent_at"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def add_event(
        self,
        user_id: int,
        title: str,
        date: datetime,
        event_type: str | EventType = EventType.PERSONAL,
        description: str | None = None,
        location: str | None = None,
        is_recurring: bool = False,
        recurrence_pattern: str | None = None,
        reminder: int | None = None,
    ) -> Event:
        """Insert a new event. `date` must be timezone-aware."""
        if isinstance(event_type, EventType):
            event_type = event_type.value
        now = _now_iso()

        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO events
                    (user_id, title, description, date, location, event_type,
                     is_recurring, recurrence_pattern, reminder,
                     created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id, title, description, to_db_timestamp(date), location,
                    event_type, int(is_recurring), recurrence_pattern, reminder,
                    now, now,
                ),
            )
            event_id = cursor.lastrowid

        logger.info("Event added: #%d '%s' for user #%d", event_id, title, user_id)
        return self.get_event(event_id)

    def get_event(self, event_id: int) -> Event | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM events WHERE id = ?", (event_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_event(row)

    def update_event(self, event_id: int, **changes) -> Event | None:
        """Apply field changes. Changing the date or reminder re-arms the reminder."""
        unknown = set(changes) - self._UPDATABLE
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")
        if not changes:
            return self.get_event(event_id)

        values = dict(changes)
        if "date" in values:
            values["date"] = to_db_timestamp(values["date"])
        if "is_recurring" in values:
            values["is_recurring"] = int(values["is_recurring"])
        if isinstance(values.get("event_type"), EventType):
            values["event_type"] = values["event_type"].value

        assignments = [f"{col} = ?" for col in values]
        params = list(values.values())
        if "date" in values or "reminder" in values:
            assignments.append("reminder_sent_at = NULL")
        assignments.append("updated_at = ?")
        params.append(_now_iso())
        params.append(event_id)

        with self._connect() as conn:
            cursor = conn.execute(
                f"UPDATE events SET {', '.join(assignments)} WHERE id = ?", params,
            )
        if cursor.rowcount == 0:
            return None
        logger.info("Event #%d updated: %s", event_id, ", ".join(sorted(changes)))
        return self.get_event(event_id)

    def delete_event(self, event_id: int) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM events WHERE id = ?", (event_id,))
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Event #%d deleted", event_id)
        return deleted

    def delete_events(self, event_ids: list[int], user_id: int | None = None) -> int:
        """Bulk delete, optionally restricted to one owner. Returns rows removed."""
        if not event_ids:
            return 0
        placeholders = ", ".join("?" for _ in event_ids)
        query = f"DELETE FROM events WHERE id IN ({placeholders})"
        params: list = list(event_ids)
        if user_id is not None:
            query += " AND user_id = ?"
            params.append(user_id)
        with self._connect() as conn:
            cursor = conn.execute(query, params)
        logger.info("Bulk-deleted %d events", cursor.rowcount)
        return cursor.rowcount

    def mark_reminder_sent(self, event_id: int, sent_at: datetime) -> None:
        with self._connect() as conn:
            conn.execute(
                "UPDATE events SET reminder_sent_at = ? WHERE id = ?",
                (to_db_timestamp(sent_at), event_id),
            )

    def find(
        self,
        *filters: Scope,
        descending: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Event]:
        """Events matching all scopes, ordered by date."""
        where, params = scopes.combine(filters)
        query = "SELECT * FROM events"
        if where:
            query += " WHERE " + where
        query += " ORDER BY date DESC, id DESC" if descending else " ORDER BY date, id"
        if limit is not None:
            query += " LIMIT ? OFFSET ?"
            params.extend([limit, offset])

        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_event(r) for r in rows]

    def count(self, *filters: Scope) -> int:
        where, params = scopes.combine(filters)
        query = "SELECT COUNT(*) FROM events"
        if where:
            query += " WHERE " + where
        with self._connect() as conn:
            return conn.execute(query, params).fetchone()[0]

    def paginate(self, *filters: Scope, page: int = 1, per_page: int = 10) -> Page:
        """One page of matching events, ordered by date ascending."""
        if per_page not in PER_PAGE_OPTIONS:
            raise ValueError(f"per_page must be one of {PER_PAGE_OPTIONS}")
        page = max(1, page)
        total = self.count(*filters)
        items = self.find(*filters, limit=per_page, offset=(page - 1) * per_page)
        return Page(items=items, total=total, page=page, per_page=per_page)
