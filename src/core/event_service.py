"""
Event Calendar — Owner-scoped event service.

Create, edit and delete events on behalf of a user. Every operation checks
ownership, and every write validates the complete record first, so a
rejected submission never leaves a partial change behind.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import TYPE_CHECKING

from src.core.event_form import EventValidationError, validate_event_input
from src.data import scopes

if TYPE_CHECKING:
    from src.data.db import EventDB, Page, UserDB
    from src.data.models import Event, User
    from src.data.scopes import Scope

logger = logging.getLogger(__name__)

_FORM_FIELDS = (
    "title", "description", "date", "location", "event_type",
    "is_recurring", "recurrence_pattern", "reminder",
)


class EventNotFoundError(LookupError):
    """Raised when an event does not exist or belongs to another user."""


class EventService:
    """Event CRUD used by the admin surface and the dashboard."""

    def __init__(self, event_db: EventDB, user_db: UserDB) -> None:
        self._events = event_db
        self._users = user_db

    def _owner(self, user_id: int) -> User:
        user = self._users.get_user(user_id)
        if user is None:
            raise EventValidationError({"user_id": f"Unknown user #{user_id}"})
        return user

    def get_event(self, user_id: int, event_id: int) -> Event:
        event = self._events.get_event(event_id)
        if event is None or event.user_id != user_id:
            raise EventNotFoundError(f"Event #{event_id} not found")
        return event

    def list_events(
        self,
        user_id: int,
        *filters: Scope,
        page: int = 1,
        per_page: int = 10,
    ) -> Page:
        """The user's events, date ascending, narrowed by any extra scopes."""
        return self._events.paginate(
            scopes.owned_by(user_id), *filters, page=page, per_page=per_page,
        )

    def create_event(self, user_id: int, data: dict) -> Event:
        owner = self._owner(user_id)
        form = validate_event_input(data)
        event = self._events.add_event(user_id=user_id, **form.to_record(owner.tz))
        logger.info("Created event #%d for user #%d", event.id, user_id)
        return event

    def update_event(self, user_id: int, event_id: int, data: dict) -> Event:
        """Apply a (possibly partial) edit after validating the merged record."""
        owner = self._owner(user_id)
        current = self.get_event(user_id, event_id)

        stored = {k: v for k, v in asdict(current).items() if k in _FORM_FIELDS}
        submitted = {k: v for k, v in data.items() if k in _FORM_FIELDS}
        untouched = frozenset(
            k for k in _FORM_FIELDS if k not in submitted or submitted[k] == stored[k]
        )
        form = validate_event_input({**stored, **submitted}, untouched=untouched)

        record = form.to_record(owner.tz)
        changes = {k: v for k, v in record.items() if getattr(current, k) != v}
        if not changes:
            return current
        logger.info("Updated event #%d: %s", event_id, ", ".join(sorted(changes)))
        return self._events.update_event(event_id, **changes)

    def delete_event(self, user_id: int, event_id: int) -> None:
        self.get_event(user_id, event_id)
        self._events.delete_event(event_id)
        logger.info("Deleted event #%d", event_id)

    def delete_events(self, user_id: int, event_ids: list[int]) -> int:
        """Bulk delete; ids that belong to other users are ignored."""
        return self._events.delete_events(event_ids, user_id=user_id)
