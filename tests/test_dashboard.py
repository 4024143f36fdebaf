"""Tests for src.core.dashboard — month navigation and dashboard listings."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from src.core.clock import fixed_clock
from src.core.dashboard import Dashboard, MonthNavigator

UTC = timezone.utc


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------


class TestMonthNavigator:
    def test_starting_at_uses_local_month(self):
        # 23:30 UTC on Mar 31 is already April 1 in Tokyo
        now = datetime(2026, 3, 31, 23, 30, tzinfo=UTC)
        nav = MonthNavigator.starting_at(now, ZoneInfo("Asia/Tokyo"))
        assert (nav.selected_month, nav.selected_year) == (4, 2026)

    def test_month_name(self):
        assert MonthNavigator(2, 2026).month_name == "February"

    def test_previous_from_january_rolls_year(self):
        nav = MonthNavigator(1, 2026)
        nav.previous_month()
        assert (nav.selected_month, nav.selected_year) == (12, 2025)

    def test_next_from_december_rolls_year(self):
        nav = MonthNavigator(12, 2026)
        nav.next_month()
        assert (nav.selected_month, nav.selected_year) == (1, 2027)

    def test_plain_steps(self):
        nav = MonthNavigator(6, 2026)
        nav.next_month()
        assert nav.selected_month == 7
        nav.previous_month()
        nav.previous_month()
        assert (nav.selected_month, nav.selected_year) == (5, 2026)

    @pytest.mark.parametrize("month,prev,nxt", [(1, 12, 2), (6, 5, 7), (12, 11, 1)])
    def test_neighbour_numbers(self, month, prev, nxt):
        nav = MonthNavigator(month, 2026)
        assert nav.previous_month_number == prev
        assert nav.next_month_number == nxt

    @pytest.mark.parametrize("change", [
        lambda n: n.next_month(),
        lambda n: n.previous_month(),
        lambda n: n.set_search("gym"),
        lambda n: n.set_month(8),
        lambda n: n.set_year(2030),
    ])
    def test_any_change_resets_page(self, change):
        nav = MonthNavigator(3, 2026, page=4)
        change(nav)
        assert nav.page == 1

    def test_set_month_out_of_range(self):
        with pytest.raises(ValueError):
            MonthNavigator(3, 2026).set_month(0)


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


@pytest.fixture
def dashboard(event_db, user, now):
    return Dashboard(event_db, user, clock=fixed_clock(now))


class TestDashboardEvents:
    def test_defaults_to_current_month(self, dashboard):
        assert (dashboard.navigator.selected_month, dashboard.navigator.selected_year) == (3, 2026)

    def test_lists_selected_month_only(self, dashboard, make_event):
        make_event(title="Feb", date=datetime(2026, 2, 20, tzinfo=UTC))
        make_event(title="Mar", date=datetime(2026, 3, 20, tzinfo=UTC))
        make_event(title="Apr", date=datetime(2026, 4, 2, tzinfo=UTC))

        assert [e.title for e in dashboard.events().items] == ["Mar"]
        dashboard.navigator.next_month()
        assert [e.title for e in dashboard.events().items] == ["Apr"]

    def test_only_own_events(self, dashboard, event_db, user_db, make_event, now):
        other = user_db.add_user(name="Other", email="other@example.com")
        event_db.add_event(user_id=other.id, title="Not mine", date=now)
        make_event(title="Mine")
        assert [e.title for e in dashboard.events().items] == ["Mine"]

    def test_search_within_month(self, dashboard, make_event, now):
        make_event(title="Dentist", date=now)
        make_event(title="Gym", date=now + timedelta(hours=1))
        make_event(title="Dentist again", date=datetime(2026, 5, 1, tzinfo=UTC))

        dashboard.navigator.set_search("dentist")
        assert [e.title for e in dashboard.events().items] == ["Dentist"]

    def test_paginated_by_ten(self, dashboard, make_event, now):
        for i in range(12):
            make_event(title=f"E{i:02d}", date=now + timedelta(hours=i))

        first = dashboard.events()
        assert len(first.items) == 10
        assert first.total == 12
        dashboard.navigator.page = 2
        assert [e.title for e in dashboard.events().items] == ["E10", "E11"]


class TestTodayAndUpcoming:
    def test_todays_events(self, dashboard, make_event):
        make_event(title="Morning", date=datetime(2026, 3, 10, 8, 0, tzinfo=UTC))
        make_event(title="Tomorrow", date=datetime(2026, 3, 11, 8, 0, tzinfo=UTC))
        assert [e.title for e in dashboard.todays_events()] == ["Morning"]

    def test_upcoming_limited_to_five_soonest(self, dashboard, make_event, now):
        make_event(title="Past", date=now - timedelta(hours=1))
        for i in range(7):
            make_event(title=f"U{i}", date=now + timedelta(days=i + 1))
        assert [e.title for e in dashboard.upcoming_events()] == ["U0", "U1", "U2", "U3", "U4"]

    def test_upcoming_crosses_months(self, dashboard, make_event):
        make_event(title="Next month", date=datetime(2026, 4, 15, tzinfo=UTC))
        assert [e.title for e in dashboard.upcoming_events()] == ["Next month"]


class TestEmptyMessage:
    def test_month_message(self, dashboard):
        assert dashboard.empty_message() == "No events scheduled for March 2026."

    def test_search_message(self, dashboard):
        dashboard.navigator.set_search("nothing")
        assert dashboard.empty_message() == "No events match your search."
