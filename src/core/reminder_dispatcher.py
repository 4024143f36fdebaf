"""
Event Calendar — Reminder Dispatcher.

One run scans the events starting within the look-ahead window (30 minutes
by default) and sends a reminder for every event whose reminder time,
`date - reminder minutes`, is within +/- tolerance (1 minute by default)
of now. The tolerance absorbs the jitter of a once-a-minute scheduler.

Without REMINDER_TRACK_SENT nothing is persisted about sent reminders: a
reminder whose send failed is not retried, because the next run's window
has already moved past it. With tracking enabled each successful send is
stamped on the event and stamped events are skipped, which makes repeated
or overlapping runs safe.

This module is channel-agnostic: it depends on the NotificationPort
protocol and an injected clock, never on the wall clock directly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from src.core.clock import Clock, utc_now
from src.data import scopes

if TYPE_CHECKING:
    from src.data.db import EventDB, UserDB
    from src.data.models import Event, User
    from src.ports.notification_port import NotificationPort

logger = logging.getLogger(__name__)


@dataclass
class ReminderRunResult:
    """Outcome of a single dispatcher run."""

    candidates: int = 0
    sent: int = 0
    failures: list[tuple[int, str]] = field(default_factory=list)  # (event_id, error)


def reminder_time(event: Event) -> datetime:
    """The moment the reminder is meant to fire."""
    return event.date - timedelta(minutes=event.reminder or 0)


def is_reminder_due(event: Event, now: datetime, tolerance_minutes: int = 1) -> bool:
    """True when `now` lies within [reminder_time - tol, reminder_time + tol]."""
    if event.reminder is None:
        return False
    fire_at = reminder_time(event)
    tolerance = timedelta(minutes=tolerance_minutes)
    return fire_at - tolerance <= now <= fire_at + tolerance


def find_candidates(
    event_db: EventDB,
    now: datetime,
    lookahead_minutes: int = 30,
    skip_sent: bool = False,
) -> list[Event]:
    """Events with a reminder that start after `now` and within the look-ahead."""
    filters = [scopes.reminder_candidates(now, lookahead_minutes)]
    if skip_sent:
        filters.append(scopes.reminder_not_sent())
    return event_db.find(*filters)


async def send_due_reminders(
    event_db: EventDB,
    user_db: UserDB,
    notifier: NotificationPort,
    clock: Clock = utc_now,
    lookahead_minutes: int | None = None,
    tolerance_minutes: int | None = None,
    track_sent: bool | None = None,
) -> ReminderRunResult:
    """Run the dispatcher once and return what happened.

    A failure to deliver one reminder is logged and recorded, and never
    stops the remaining events from being processed. Errors outside the
    per-event loop (e.g. the database being unreachable) propagate.
    """
    if lookahead_minutes is None or tolerance_minutes is None or track_sent is None:
        from src.config import settings

        if lookahead_minutes is None:
            lookahead_minutes = settings.REMINDER_LOOKAHEAD_MINUTES
        if tolerance_minutes is None:
            tolerance_minutes = settings.REMINDER_TOLERANCE_MINUTES
        if track_sent is None:
            track_sent = settings.REMINDER_TRACK_SENT

    logger.info("Starting to send event reminders...")
    now = clock()
    result = ReminderRunResult()

    events = find_candidates(event_db, now, lookahead_minutes, skip_sent=track_sent)
    result.candidates = len(events)
    owners: dict[int, User | None] = {}

    for event in events:
        if not is_reminder_due(event, now, tolerance_minutes):
            continue

        try:
            if event.user_id not in owners:
                owners[event.user_id] = user_db.get_user(event.user_id)
            owner = owners[event.user_id]
            if owner is None:
                raise LookupError(f"owner #{event.user_id} not found")

            await notifier.send_reminder(owner, event)
            result.sent += 1
            logger.info("Sent reminder for event: %s (ID: %d)", event.title, event.id)
        except Exception as exc:
            result.failures.append((event.id, str(exc)))
            logger.error("Failed to send reminder for event %d: %s", event.id, exc)
            continue

        if track_sent:
            try:
                event_db.mark_reminder_sent(event.id, now)
            except Exception as exc:
                logger.error("Failed to record reminder for event %d: %s", event.id, exc)

    logger.info(
        "Completed! Sent %d reminders (%d candidates, %d failed).",
        result.sent, result.candidates, len(result.failures),
    )
    return result
