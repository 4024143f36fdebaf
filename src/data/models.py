"""
Event Calendar — Data Models.

Users own events; an event may carry a recurrence label and a reminder
offset in minutes. Event dates are timezone-aware and stored in UTC.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from zoneinfo import ZoneInfo


class EventType(str, Enum):
    """Closed set of event categories, each with a label and a badge color."""

    PERSONAL = "personal"
    WORK = "work"
    SOCIAL = "social"
    FAMILY = "family"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def color(self) -> str:
        return _BADGE_COLORS[self]

    @classmethod
    def badge_color_for(cls, value: str | None) -> str:
        """Badge color for a raw stored value, "gray" for unknown values."""
        try:
            return cls(value).color
        except ValueError:
            return "gray"


_BADGE_COLORS = {
    EventType.PERSONAL: "info",
    EventType.WORK: "danger",
    EventType.SOCIAL: "warning",
    EventType.FAMILY: "success",
}

# Dot/pill colors used by the dashboard listings
_DISPLAY_COLORS = {
    "personal": "blue",
    "work": "green",
    "social": "purple",
    "family": "orange",
}


def event_type_color(event_type: str | None) -> str:
    """Display color for an event type; any other input maps to "gray"."""
    return _DISPLAY_COLORS.get(event_type or "", "gray")


class RecurrencePattern(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def label(self) -> str:
        return self.value.capitalize()


# minutes -> label, in display order
REMINDER_OPTIONS: dict[int, str] = {
    15: "15 minutes before",
    30: "30 minutes before",
    60: "1 hour before",
    120: "2 hours before",
    1440: "1 day before",
}


@dataclass
class User:
    """A calendar owner. Reminders are delivered to their email or chat."""

    id: int
    name: str
    email: str
    timezone: str = "UTC"
    telegram_chat_id: int | None = None
    created_at: str = ""

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@dataclass
class Event:
    """A single calendar entry.

    `reminder` is the number of minutes before `date` at which the owner
    should be notified. `recurrence_pattern` is descriptive only; no
    additional occurrences are generated from it.
    """

    id: int
    user_id: int
    title: str
    date: datetime                         # aware, UTC
    event_type: str = EventType.PERSONAL.value
    description: str | None = None
    location: str | None = None
    is_recurring: bool = False
    recurrence_pattern: str | None = None
    reminder: int | None = None            # minutes before date
    reminder_sent_at: datetime | None = None
    created_at: str = ""
    updated_at: str = ""

    def local_date(self, tz: ZoneInfo | None = None) -> datetime:
        """The event date converted to `tz` (UTC when omitted)."""
        if tz is None:
            return self.date
        return self.date.astimezone(tz)

    def formatted_date(self, tz: ZoneInfo | None = None) -> str:
        """e.g. "Jan 15, 2024 2:30 PM"."""
        d = self.local_date(tz)
        return f"{d:%b} {d.day}, {d.year} {_clock(d)}"

    def formatted_time(self, tz: ZoneInfo | None = None) -> str:
        """e.g. "2:30 PM"."""
        return _clock(self.local_date(tz))

    @property
    def event_type_color(self) -> str:
        return event_type_color(self.event_type)

    @property
    def event_type_label(self) -> str:
        try:
            return EventType(self.event_type).label
        except ValueError:
            return (self.event_type or "").capitalize()


def _clock(d: datetime) -> str:
    """12-hour clock without a leading zero, e.g. "9:05 AM"."""
    hour = d.hour % 12 or 12
    return f"{hour}:{d.minute:02d} {'AM' if d.hour < 12 else 'PM'}"
