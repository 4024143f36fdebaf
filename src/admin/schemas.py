"""
Event Calendar — Admin panel configuration.

Plain declarative descriptions of the event create/edit form, the events
table and the event detail view. A rendering layer reads these structures;
nothing here renders anything itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from src.core.event_form import DESCRIPTION_MAX, LOCATION_MAX, TITLE_MAX
from src.data import scopes
from src.data.db import PER_PAGE_OPTIONS
from src.data.models import REMINDER_OPTIONS, EventType, RecurrencePattern

if TYPE_CHECKING:
    from datetime import datetime, tzinfo

    from src.data.scopes import Scope

DATE_DISPLAY_FORMAT = "M j, Y g:i A"


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------


@dataclass
class FormField:
    name: str
    kind: str                                   # text | textarea | datetime | select | toggle | hidden
    label: str = ""
    required: bool = False
    max_length: int | None = None
    default: object = None
    placeholder: str = ""
    helper_text: str = ""
    options: dict = field(default_factory=dict)
    visible_when: str | None = None             # name of a toggle controlling visibility
    rows: int | None = None
    display_format: str | None = None


@dataclass
class TableColumn:
    name: str
    searchable: bool = False
    sortable: bool = False
    limit: int | None = None
    badge: bool = False
    label: str = ""
    placeholder: str = ""
    display_format: str | None = None
    color: Callable[[str], str] | None = None
    format_state: Callable[[object], str] | None = None


@dataclass
class TableFilter:
    name: str
    label: str
    options: dict = field(default_factory=dict)  # select filters only
    scope: str | None = None                     # name in src.data.scopes


@dataclass
class TableConfig:
    columns: list[TableColumn]
    filters: list[TableFilter]
    record_actions: list[str]
    bulk_actions: list[str]
    default_sort: tuple[str, str] = ("date", "asc")
    page_size_options: tuple[int, ...] = PER_PAGE_OPTIONS


@dataclass
class InfolistEntry:
    name: str
    label: str
    placeholder: str = ""
    badge: bool = False
    markdown: bool = False
    display_format: str | None = None
    color: Callable[[str], str] | None = None
    format_state: Callable[[object], str] | None = None


@dataclass
class InfolistSection:
    title: str
    description: str
    rows: list[list[InfolistEntry]]
    collapsible: bool = True


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


def format_reminder_short(state: object) -> str:
    """Table cell: "30 min" or "None"."""
    return f"{state} min" if state else "None"


def format_reminder_long(state: object) -> str:
    """Detail view: "30 minutes before" or "No reminder set"."""
    return f"{state} minutes before" if state else "No reminder set"


# ---------------------------------------------------------------------------
# Event resource
# ---------------------------------------------------------------------------


def event_form(current_user_id: int | None = None) -> list[FormField]:
    """Fields of the create/edit form, in display order."""
    return [
        FormField("user_id", "hidden", default=current_user_id),
        FormField(
            "title", "text", label="Title", required=True, max_length=TITLE_MAX,
            placeholder="Enter event title",
        ),
        FormField(
            "description", "textarea", label="Description", max_length=DESCRIPTION_MAX,
            placeholder="Optional event description", rows=3,
        ),
        FormField(
            "date", "datetime", label="Date", required=True, default="now",
            display_format=DATE_DISPLAY_FORMAT, placeholder="Select event date and time",
        ),
        FormField(
            "location", "text", label="Location", max_length=LOCATION_MAX,
            placeholder="Optional event location",
        ),
        FormField(
            "event_type", "select", label="Event type", required=True,
            default=EventType.PERSONAL.value,
            options={t.value: t.label for t in EventType},
            placeholder="Select event type",
        ),
        FormField("is_recurring", "toggle", label="Recurring Event", default=False),
        FormField(
            "recurrence_pattern", "select", label="Recurrence pattern",
            options={p.value: p.label for p in RecurrencePattern},
            visible_when="is_recurring", placeholder="Select recurrence pattern",
        ),
        FormField(
            "reminder", "select", label="Reminder", options=dict(REMINDER_OPTIONS),
            placeholder="Optional reminder",
            helper_text="Set a reminder notification for this event",
        ),
    ]


def events_table() -> TableConfig:
    return TableConfig(
        columns=[
            TableColumn("title", searchable=True, sortable=True, limit=50),
            TableColumn("event_type", badge=True, color=EventType.badge_color_for),
            TableColumn(
                "date", searchable=True, sortable=True, display_format=DATE_DISPLAY_FORMAT,
            ),
            TableColumn("location", searchable=True, limit=30, placeholder="No location"),
            TableColumn("is_recurring", badge=True, label="Recurring"),
            TableColumn(
                "reminder", placeholder="No reminder", format_state=format_reminder_short,
            ),
        ],
        filters=[
            TableFilter(
                "event_type", "All types",
                options={t.value: t.label for t in EventType}, scope="by_type",
            ),
            TableFilter("upcoming", "Upcoming Events", scope="upcoming"),
            TableFilter("today", "Today's Events", scope="today"),
            TableFilter("this_month", "This Month", scope="this_month"),
            TableFilter("has_reminder", "Has Reminder", scope="has_reminder"),
        ],
        record_actions=["view", "edit"],
        bulk_actions=["delete"],
    )


def event_infolist() -> list[InfolistSection]:
    return [
        InfolistSection(
            title="Event Details",
            description="Basic event information and scheduling",
            rows=[
                [
                    InfolistEntry("title", "Event Title"),
                    InfolistEntry(
                        "event_type", "Event Type", badge=True,
                        color=EventType.badge_color_for,
                    ),
                ],
                [
                    InfolistEntry(
                        "description", "Description", markdown=True,
                        placeholder="No description provided",
                    ),
                ],
                [
                    InfolistEntry("date", "Date & Time", display_format=DATE_DISPLAY_FORMAT),
                    InfolistEntry("location", "Location", placeholder="No location specified"),
                ],
                [
                    InfolistEntry("is_recurring", "Recurring Event"),
                    InfolistEntry(
                        "recurrence_pattern", "Recurrence Pattern",
                        placeholder="Not applicable",
                    ),
                    InfolistEntry("reminder", "Reminder", format_state=format_reminder_long),
                ],
            ],
        ),
    ]


def table_scopes(
    active: dict[str, object],
    now: datetime,
    tz: tzinfo,
    search: str = "",
) -> list[Scope]:
    """Translate the table's active filters (and search box) into query scopes.

    `active` maps a filter name to its value: the selected option for select
    filters, a truthy flag for toggle filters.
    """
    result: list[Scope] = []
    if search:
        result.append(scopes.search(search))
    for flt in events_table().filters:
        value = active.get(flt.name)
        if not value:
            continue
        if flt.scope == "by_type":
            result.append(scopes.by_type(str(value)))
        elif flt.scope in ("today", "this_month"):
            result.append(getattr(scopes, flt.scope)(now, tz))
        elif flt.scope == "upcoming":
            result.append(scopes.upcoming(now))
        elif flt.scope == "has_reminder":
            result.append(scopes.has_reminder())
    return result
