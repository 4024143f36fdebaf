"""
Event Calendar — Event query scopes.

Each scope is a small SQL predicate with its parameters. Scopes are pure
and combine with AND, so the dashboard, the admin table and the reminder
dispatcher all share the same filters:

    db.find(scopes.owned_by(1), scopes.upcoming(now), scopes.by_type("work"))

Calendar-day and calendar-month scopes are evaluated in the caller's
timezone by converting local boundaries to UTC, since dates are stored as
UTC timestamps. A month without a year has no such bounds and goes through
the local_month() SQL function instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo

from src.data.models import EventType

DB_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class Scope:
    sql: str
    params: tuple = ()


def to_db_timestamp(value: datetime) -> str:
    """Serialize an aware datetime as a sortable UTC string."""
    if value.tzinfo is None:
        raise ValueError(f"Naive datetime not allowed: {value!r}")
    return value.astimezone(timezone.utc).strftime(DB_TIMESTAMP_FORMAT)


def from_db_timestamp(value: str | None) -> datetime | None:
    if value is None:
        return None
    return datetime.strptime(value, DB_TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def combine(scopes: tuple[Scope, ...] | list[Scope]) -> tuple[str, list]:
    """AND all scopes together. Returns ("", []) when there are none."""
    if not scopes:
        return "", []
    clause = " AND ".join(f"({s.sql})" for s in scopes)
    params: list = []
    for s in scopes:
        params.extend(s.params)
    return clause, params


# ---------------------------------------------------------------------------
# Scopes
# ---------------------------------------------------------------------------


def owned_by(user_id: int) -> Scope:
    return Scope("user_id = ?", (user_id,))


def upcoming(now: datetime) -> Scope:
    """Events at or after `now`."""
    return Scope("date >= ?", (to_db_timestamp(now),))


def today(now: datetime, tz: tzinfo) -> Scope:
    """Events on the calendar day containing `now`, as seen in `tz`."""
    local_day = now.astimezone(tz).date()
    start = datetime.combine(local_day, time.min, tzinfo=tz)
    end = datetime.combine(local_day + timedelta(days=1), time.min, tzinfo=tz)
    return _between(start, end)


def this_month(now: datetime, tz: tzinfo) -> Scope:
    """Events in the calendar month and year containing `now`, as seen in `tz`."""
    local = now.astimezone(tz)
    return in_month(local.month, local.year, tz)


def tz_key(tz: tzinfo) -> str:
    """Name `tz` so local_month() can rebuild it: an IANA key or "+<seconds>"."""
    key = getattr(tz, "key", None)
    if key:
        return key
    offset = tz.utcoffset(None)
    if offset is None:
        raise ValueError(f"Cannot name timezone {tz!r}")
    return f"{int(offset.total_seconds()):+d}"


def local_month(value: str | None, key: str) -> int | None:
    """SQL function: month-of-year of a stored UTC timestamp in timezone `key`.

    Registered on every connection by the stores.
    """
    if value is None:
        return None
    if key[:1] in "+-":
        tz: tzinfo = timezone(timedelta(seconds=int(key)))
    else:
        tz = ZoneInfo(key)
    return from_db_timestamp(value).astimezone(tz).month


def in_month(month: int | None, year: int | None, tz: tzinfo) -> Scope:
    """Events in the given month and/or year (local to `tz`).

    A year alone selects the whole year; a month alone selects that month
    in every year.
    """
    if month is not None and not 1 <= month <= 12:
        raise ValueError(f"Month out of range: {month}")
    if month is None and year is None:
        return Scope("1 = 1")
    if year is None:
        return Scope("local_month(date, ?) = ?", (tz_key(tz), month))
    if month is None:
        start = datetime(year, 1, 1, tzinfo=tz)
        end = datetime(year + 1, 1, 1, tzinfo=tz)
        return _between(start, end)
    start = datetime(year, month, 1, tzinfo=tz)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=tz)
    else:
        end = datetime(year, month + 1, 1, tzinfo=tz)
    return _between(start, end)


def by_type(event_type: str | EventType) -> Scope:
    if isinstance(event_type, EventType):
        event_type = event_type.value
    return Scope("event_type = ?", (event_type,))


def has_reminder() -> Scope:
    return Scope("reminder IS NOT NULL")


def search(term: str) -> Scope:
    """Case-insensitive substring match on title or description."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{escaped}%"
    return Scope(
        "title LIKE ? ESCAPE '\\' OR description LIKE ? ESCAPE '\\'",
        (pattern, pattern),
    )


def reminder_candidates(now: datetime, lookahead_minutes: int) -> Scope:
    """Events with a reminder, strictly after `now`, within the look-ahead."""
    horizon = now + timedelta(minutes=lookahead_minutes)
    return Scope(
        "reminder IS NOT NULL AND date > ? AND date <= ?",
        (to_db_timestamp(now), to_db_timestamp(horizon)),
    )


def reminder_not_sent() -> Scope:
    return Scope("reminder_sent_at IS NULL")


def _between(start: datetime, end: datetime) -> Scope:
    """Half-open [start, end) range on the event date."""
    return Scope("date >= ? AND date < ?", (to_db_timestamp(start), to_db_timestamp(end)))
