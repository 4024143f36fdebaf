"""
Event Calendar — Test-data factory and sample seeder.

EventFactory produces random but plausible event attributes; chained
states pin individual attributes (event type, date range). The seeder
inserts a fixed set of sample events for a first user.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime, time, timedelta
from typing import TYPE_CHECKING

from src.data.models import REMINDER_OPTIONS, EventType, RecurrencePattern

if TYPE_CHECKING:
    from src.data.db import EventDB, UserDB
    from src.data.models import Event, User

logger = logging.getLogger(__name__)

_WORDS = (
    "planning", "review", "lunch", "call", "workshop", "checkup", "party",
    "sync", "dinner", "meetup", "session", "visit", "training", "trip",
)
_CITIES = (
    "Springfield", "Riverside", "Fairview", "Madison", "Georgetown",
    "Clinton", "Arlington", "Salem", "Franklin", "Greenville",
)
_SENTENCES = (
    "Bring the notes from last time.",
    "Remember to confirm with everyone the day before.",
    "Parking is available behind the building.",
    "Agenda will be shared in advance.",
    "Dress code is casual.",
)


class EventFactory:
    """Builds event attribute dicts and persists them.

    Probabilities: 20% recurring (random pattern), 70% with a description,
    60% with a location, 40% with a reminder. Dates fall between now and
    two months ahead unless a state narrows the range.
    """

    def __init__(self, rng: random.Random | None = None, now: datetime | None = None) -> None:
        from src.core.clock import utc_now

        self._rng = rng or random.Random()
        self._now = now or utc_now()
        self._states: dict = {}
        self._date_range: tuple[datetime, datetime] | None = None

    # -- states ---------------------------------------------------------------

    def _with(self, **attrs) -> EventFactory:
        clone = EventFactory(self._rng, self._now)
        clone._states = {**self._states, **attrs}
        clone._date_range = self._date_range
        return clone

    def _between(self, start: datetime, end: datetime) -> EventFactory:
        clone = self._with()
        clone._date_range = (start, end)
        return clone

    def personal(self) -> EventFactory:
        return self._with(event_type=EventType.PERSONAL.value)

    def work(self) -> EventFactory:
        return self._with(event_type=EventType.WORK.value)

    def social(self) -> EventFactory:
        return self._with(event_type=EventType.SOCIAL.value)

    def family(self) -> EventFactory:
        return self._with(event_type=EventType.FAMILY.value)

    def today(self) -> EventFactory:
        """Dated between midnight and 23:00 of the current day (UTC)."""
        midnight = datetime.combine(self._now.date(), time.min, tzinfo=self._now.tzinfo)
        return self._between(midnight, midnight + timedelta(hours=23))

    def this_week(self) -> EventFactory:
        return self._between(self._now, self._now + timedelta(weeks=1))

    def this_month(self) -> EventFactory:
        return self._between(self._now, self._now + timedelta(days=30))

    # -- building -------------------------------------------------------------

    def _random_date(self) -> datetime:
        start, end = self._date_range or (self._now, self._now + timedelta(days=60))
        span = int((end - start).total_seconds())
        moment = start + timedelta(seconds=self._rng.randint(0, max(span, 0)))
        return moment.replace(microsecond=0)

    def definition(self) -> dict:
        rng = self._rng
        is_recurring = rng.random() < 0.2
        title = " ".join(rng.choice(_WORDS) for _ in range(3)).capitalize() + "."
        return {
            "title": title,
            "description": rng.choice(_SENTENCES) if rng.random() < 0.7 else None,
            "date": self._random_date(),
            "location": rng.choice(_CITIES) if rng.random() < 0.6 else None,
            "event_type": rng.choice([t.value for t in EventType]),
            "is_recurring": is_recurring,
            "recurrence_pattern": (
                rng.choice([p.value for p in RecurrencePattern]) if is_recurring else None
            ),
            "reminder": rng.choice(list(REMINDER_OPTIONS)) if rng.random() < 0.4 else None,
        }

    def make(self, **overrides) -> dict:
        """Attribute dict: random definition, then states, then overrides."""
        return {**self.definition(), **self._states, **overrides}

    def create(self, event_db: EventDB, user_id: int, **overrides) -> Event:
        return event_db.add_event(user_id=user_id, **self.make(**overrides))

    def create_many(self, event_db: EventDB, user_id: int, count: int) -> list[Event]:
        return [self.create(event_db, user_id) for _ in range(count)]


# ---------------------------------------------------------------------------
# Seeder
# ---------------------------------------------------------------------------


def _next_weekday(day: datetime, weekday: int) -> datetime:
    """The next date strictly after `day` falling on `weekday` (Mon=0)."""
    ahead = (weekday - day.weekday() - 1) % 7 + 1
    return day + timedelta(days=ahead)


def seed_sample_events(user_db: UserDB, event_db: EventDB, now: datetime) -> tuple[User, list[Event]]:
    """Insert four sample events for the first user (created if missing).

    Times are set in the user's timezone.
    """
    user = user_db.first_user()
    if user is None:
        user = user_db.add_user(name="Test User", email="test@example.com")

    local = now.astimezone(user.tz)

    def at(day: datetime, hour: int, minute: int = 0) -> datetime:
        return day.replace(hour=hour, minute=minute, second=0, microsecond=0)

    samples = [
        dict(
            title="Team Meeting",
            description="Weekly team sync meeting",
            date=at(local + timedelta(days=1), 9),
            location="Conference Room A",
            event_type=EventType.WORK.value,
            is_recurring=True,
            recurrence_pattern=RecurrencePattern.WEEKLY.value,
            reminder=30,
        ),
        dict(
            title="Dinner with Friends",
            description="Catch up with old friends",
            date=at(local + timedelta(days=2), 19),
            location="Local Restaurant",
            event_type=EventType.SOCIAL.value,
            reminder=60,
        ),
        dict(
            title="Doctor Appointment",
            description="Annual checkup",
            date=at(local + timedelta(days=5), 14, 30),
            location="Medical Center",
            event_type=EventType.PERSONAL.value,
            reminder=120,
        ),
        dict(
            title="Family Dinner",
            description="Sunday family dinner",
            date=at(_next_weekday(local, 6), 18),
            location="Home",
            event_type=EventType.FAMILY.value,
            is_recurring=True,
            recurrence_pattern=RecurrencePattern.WEEKLY.value,
            reminder=60,
        ),
    ]

    events = [event_db.add_event(user_id=user.id, **attrs) for attrs in samples]
    logger.info("Seeded %d sample events for user #%d", len(events), user.id)
    return user, events
