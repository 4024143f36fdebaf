"""
Event Calendar — Event input validation.

The create/edit form submits plain dicts; EventInput validates them in one
go so a bad submission is rejected before anything is written.
"""

from __future__ import annotations

from datetime import datetime, tzinfo

from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from src.data.models import REMINDER_OPTIONS, EventType, RecurrencePattern

TITLE_MAX = 255
DESCRIPTION_MAX = 1000
LOCATION_MAX = 255


class EventValidationError(Exception):
    """Raised when submitted event data is invalid.

    `errors` maps each offending field to a human-readable message.
    """

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = errors
        detail = "; ".join(f"{k}: {v}" for k, v in errors.items())
        super().__init__(f"Invalid event data: {detail}")


class EventInput(BaseModel):
    """Validated create/edit form submission.

    JSON example:
    {
        "title": "Team Meeting",
        "date": "2026-03-02T09:00:00",
        "event_type": "work",
        "is_recurring": true,
        "recurrence_pattern": "weekly",
        "reminder": 30
    }
    """
    title: str = Field(max_length=TITLE_MAX)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX)
    date: datetime
    location: str | None = Field(default=None, max_length=LOCATION_MAX)
    event_type: EventType = EventType.PERSONAL
    is_recurring: bool = False
    recurrence_pattern: RecurrencePattern | None = None
    reminder: int | None = None       # minutes before, one of REMINDER_OPTIONS

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("The title field is required.")
        return v.strip()

    @field_validator("description", "location", "recurrence_pattern", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("reminder", mode="before")
    @classmethod
    def check_reminder(cls, v, info: ValidationInfo):
        if v is None or v == "":
            return None
        minutes = int(v)
        if "reminder" in _untouched(info):
            return minutes
        if minutes not in REMINDER_OPTIONS:
            allowed = ", ".join(str(m) for m in REMINDER_OPTIONS)
            raise ValueError(f"Reminder must be one of: {allowed} minutes.")
        return minutes

    @model_validator(mode="after")
    def drop_pattern_when_not_recurring(self, info: ValidationInfo) -> EventInput:
        # The pattern selector is only shown for recurring events.
        if {"is_recurring", "recurrence_pattern"} <= _untouched(info):
            return self
        if not self.is_recurring:
            self.recurrence_pattern = None
        return self

    def resolved_date(self, tz: tzinfo) -> datetime:
        """The event date as an aware datetime; naive input is taken as `tz` local."""
        if self.date.tzinfo is None:
            return self.date.replace(tzinfo=tz)
        return self.date

    def to_record(self, tz: tzinfo) -> dict:
        """Column values ready for EventDB."""
        return {
            "title": self.title,
            "description": self.description,
            "date": self.resolved_date(tz),
            "location": self.location,
            "event_type": self.event_type.value,
            "is_recurring": self.is_recurring,
            "recurrence_pattern": (
                self.recurrence_pattern.value if self.recurrence_pattern else None
            ),
            "reminder": self.reminder,
        }


def _untouched(info: ValidationInfo) -> frozenset[str]:
    return (info.context or {}).get("untouched", frozenset())


def validate_event_input(data: dict, untouched: frozenset[str] = frozenset()) -> EventInput:
    """Validate a form submission, raising EventValidationError on any problem.

    Fields named in `untouched` keep their stored value on an edit and skip
    the reminder-option and recurrence-consistency checks.
    """
    try:
        return EventInput.model_validate(data, context={"untouched": untouched})
    except ValidationError as exc:
        errors: dict[str, str] = {}
        for err in exc.errors():
            loc = str(err["loc"][0]) if err["loc"] else "__all__"
            errors.setdefault(loc, err["msg"])
        raise EventValidationError(errors) from exc
