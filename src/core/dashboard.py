"""
Event Calendar — Dashboard calendar.

Backs the dashboard page: a month navigator with search, a paginated list
of the selected month's events, today's events and the next few upcoming
events. Any change to the filters sends the listing back to page 1.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from typing import TYPE_CHECKING

from src.core.clock import Clock, utc_now
from src.data import scopes

if TYPE_CHECKING:
    from datetime import datetime, tzinfo

    from src.data.db import EventDB, Page
    from src.data.models import Event, User

UPCOMING_LIMIT = 5


@dataclass
class MonthNavigator:
    """Selected month/year, search term and page of the dashboard listing."""

    selected_month: int
    selected_year: int
    search: str = ""
    page: int = 1

    @classmethod
    def starting_at(cls, now: datetime, tz: tzinfo) -> MonthNavigator:
        local = now.astimezone(tz)
        return cls(selected_month=local.month, selected_year=local.year)

    @property
    def month_name(self) -> str:
        return calendar.month_name[self.selected_month]

    @property
    def previous_month_number(self) -> int:
        return 12 if self.selected_month == 1 else self.selected_month - 1

    @property
    def next_month_number(self) -> int:
        return 1 if self.selected_month == 12 else self.selected_month + 1

    def previous_month(self) -> None:
        if self.selected_month == 1:
            self.selected_month = 12
            self.selected_year -= 1
        else:
            self.selected_month -= 1
        self.page = 1

    def next_month(self) -> None:
        if self.selected_month == 12:
            self.selected_month = 1
            self.selected_year += 1
        else:
            self.selected_month += 1
        self.page = 1

    def set_search(self, term: str) -> None:
        self.search = term
        self.page = 1

    def set_month(self, month: int) -> None:
        if not 1 <= month <= 12:
            raise ValueError(f"Month out of range: {month}")
        self.selected_month = month
        self.page = 1

    def set_year(self, year: int) -> None:
        self.selected_year = year
        self.page = 1


class Dashboard:
    """Read-only dashboard listings for one user."""

    def __init__(
        self,
        event_db: EventDB,
        user: User,
        clock: Clock = utc_now,
        navigator: MonthNavigator | None = None,
    ) -> None:
        self._events = event_db
        self._user = user
        self._clock = clock
        self.navigator = navigator or MonthNavigator.starting_at(clock(), user.tz)

    def events(self, per_page: int = 10) -> Page:
        """The selected month's events, filtered by the search term."""
        nav = self.navigator
        filters = [scopes.owned_by(self._user.id)]
        if nav.search:
            filters.append(scopes.search(nav.search))
        filters.append(scopes.in_month(nav.selected_month, nav.selected_year, self._user.tz))
        return self._events.paginate(*filters, page=nav.page, per_page=per_page)

    def todays_events(self) -> list[Event]:
        return self._events.find(
            scopes.owned_by(self._user.id),
            scopes.today(self._clock(), self._user.tz),
        )

    def upcoming_events(self, limit: int = UPCOMING_LIMIT) -> list[Event]:
        return self._events.find(
            scopes.owned_by(self._user.id),
            scopes.upcoming(self._clock()),
            limit=limit,
        )

    def empty_message(self) -> str:
        nav = self.navigator
        if nav.search:
            return "No events match your search."
        return f"No events scheduled for {nav.month_name} {nav.selected_year}."
