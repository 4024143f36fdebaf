"""Tests for src.data.scopes — composable event query predicates."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from src.data import scopes

UTC = timezone.utc


def _titles(events):
    return [e.title for e in events]


class TestTimestamps:
    def test_round_trip_preserves_instant(self):
        tz = ZoneInfo("America/New_York")
        local = datetime(2026, 7, 4, 9, 15, tzinfo=tz)
        stored = scopes.to_db_timestamp(local)
        assert stored == "2026-07-04 13:15:00"
        assert scopes.from_db_timestamp(stored) == local

    def test_naive_datetime_rejected(self):
        with pytest.raises(ValueError):
            scopes.to_db_timestamp(datetime(2026, 1, 1, 9, 0))

    def test_combine_empty(self):
        assert scopes.combine([]) == ("", [])


class TestUpcoming:
    def test_includes_now_and_future(self, event_db, make_event, now):
        make_event(title="Past", date=now - timedelta(minutes=1))
        make_event(title="Now", date=now)
        make_event(title="Later", date=now + timedelta(days=1))
        assert _titles(event_db.find(scopes.upcoming(now))) == ["Now", "Later"]


class TestToday:
    def test_end_of_day_matches_next_day_does_not(self, event_db, make_event, now):
        make_event(title="Late tonight", date=datetime(2026, 3, 10, 23, 59, tzinfo=UTC))
        make_event(title="Tomorrow", date=datetime(2026, 3, 11, 0, 1, tzinfo=UTC))
        make_event(title="Early today", date=datetime(2026, 3, 10, 0, 0, tzinfo=UTC))
        result = event_db.find(scopes.today(now, UTC))
        assert _titles(result) == ["Early today", "Late tonight"]

    def test_uses_owner_timezone(self, event_db, make_event, now):
        tokyo = ZoneInfo("Asia/Tokyo")  # UTC+9: local now is 21:00 on Mar 10
        make_event(title="Tokyo 23:30", date=datetime(2026, 3, 10, 23, 30, tzinfo=tokyo))
        make_event(title="Tokyo next day", date=datetime(2026, 3, 11, 0, 30, tzinfo=tokyo))
        assert _titles(event_db.find(scopes.today(now, tokyo))) == ["Tokyo 23:30"]


class TestMonths:
    def test_this_month(self, event_db, make_event, now):
        make_event(title="Feb", date=datetime(2026, 2, 28, 23, 59, tzinfo=UTC))
        make_event(title="Mar 1", date=datetime(2026, 3, 1, 0, 0, tzinfo=UTC))
        make_event(title="Mar 31", date=datetime(2026, 3, 31, 23, 59, tzinfo=UTC))
        make_event(title="Apr", date=datetime(2026, 4, 1, 0, 0, tzinfo=UTC))
        make_event(title="Mar last year", date=datetime(2025, 3, 15, tzinfo=UTC))
        assert _titles(event_db.find(scopes.this_month(now, UTC))) == ["Mar 1", "Mar 31"]

    def test_december_rolls_into_next_year(self, event_db, make_event):
        make_event(title="Dec 31", date=datetime(2026, 12, 31, 22, 0, tzinfo=UTC))
        make_event(title="Jan 1", date=datetime(2027, 1, 1, 0, 0, tzinfo=UTC))
        assert _titles(event_db.find(scopes.in_month(12, 2026, UTC))) == ["Dec 31"]

    def test_year_only(self, event_db, make_event):
        make_event(title="2026", date=datetime(2026, 6, 1, tzinfo=UTC))
        make_event(title="2027", date=datetime(2027, 6, 1, tzinfo=UTC))
        assert _titles(event_db.find(scopes.in_month(None, 2026, UTC))) == ["2026"]

    def test_no_month_no_year_matches_all(self, event_db, make_event):
        make_event(title="A")
        assert len(event_db.find(scopes.in_month(None, None, UTC))) == 1

    def test_month_alone_matches_every_year(self, event_db, make_event):
        make_event(title="Mar 2025", date=datetime(2025, 3, 15, tzinfo=UTC))
        make_event(title="Feb 2026", date=datetime(2026, 2, 15, tzinfo=UTC))
        make_event(title="Mar 2026", date=datetime(2026, 3, 1, 0, 0, tzinfo=UTC))
        make_event(title="Mar 2027", date=datetime(2027, 3, 31, 23, 59, tzinfo=UTC))
        result = event_db.find(scopes.in_month(3, None, UTC))
        assert _titles(result) == ["Mar 2025", "Mar 2026", "Mar 2027"]

    def test_month_alone_uses_local_month(self, event_db, make_event):
        tokyo = ZoneInfo("Asia/Tokyo")
        # 2026-03-31 16:00 UTC is already April 1 in Tokyo
        make_event(title="April in Tokyo", date=datetime(2026, 3, 31, 16, 0, tzinfo=UTC))
        make_event(title="March in Tokyo", date=datetime(2026, 3, 31, 14, 0, tzinfo=UTC))
        assert _titles(event_db.find(scopes.in_month(4, None, tokyo))) == ["April in Tokyo"]
        assert _titles(event_db.find(scopes.in_month(3, None, tokyo))) == ["March in Tokyo"]

    def test_month_alone_with_fixed_offset(self, event_db, make_event):
        minus_five = timezone(timedelta(hours=-5))
        make_event(title="Still Feb", date=datetime(2026, 3, 1, 3, 0, tzinfo=UTC))
        assert _titles(event_db.find(scopes.in_month(2, None, minus_five))) == ["Still Feb"]

    def test_month_alone_combines_with_search(self, event_db, make_event):
        make_event(title="Dentist", date=datetime(2025, 3, 2, tzinfo=UTC))
        make_event(title="Gym", date=datetime(2026, 3, 2, tzinfo=UTC))
        make_event(title="Dentist", date=datetime(2026, 5, 2, tzinfo=UTC))
        result = event_db.find(scopes.search("dentist"), scopes.in_month(3, None, UTC))
        assert [e.date.year for e in result] == [2025]

    def test_month_alone_out_of_range_raises(self):
        with pytest.raises(ValueError):
            scopes.in_month(0, None, UTC)

    def test_month_out_of_range_raises(self):
        with pytest.raises(ValueError):
            scopes.in_month(13, 2026, UTC)


class TestTypeReminderSearch:
    def test_by_type(self, event_db, make_event):
        from src.data.models import EventType

        make_event(title="W", event_type="work")
        make_event(title="F", event_type="family")
        assert _titles(event_db.find(scopes.by_type("family"))) == ["F"]
        assert _titles(event_db.find(scopes.by_type(EventType.WORK))) == ["W"]

    def test_has_reminder(self, event_db, make_event):
        make_event(title="No reminder")
        make_event(title="Reminder", reminder=15)
        assert _titles(event_db.find(scopes.has_reminder())) == ["Reminder"]

    def test_search_title_or_description(self, event_db, make_event, now):
        make_event(title="Dentist", date=now)
        make_event(title="Lunch", description="with the dentist team", date=now + timedelta(hours=1))
        make_event(title="Gym", date=now + timedelta(hours=2))
        assert _titles(event_db.find(scopes.search("DENTIST"))) == ["Dentist", "Lunch"]

    def test_search_combines_with_other_scopes(self, event_db, make_event, now):
        make_event(title="Dentist", event_type="personal")
        make_event(title="Work lunch", description="dentist nearby", event_type="work")
        result = event_db.find(scopes.search("dentist"), scopes.by_type("work"))
        assert _titles(result) == ["Work lunch"]

    def test_search_escapes_wildcards(self, event_db, make_event):
        make_event(title="100% done")
        make_event(title="1000 done")
        assert _titles(event_db.find(scopes.search("0%"))) == ["100% done"]

    def test_owned_by(self, event_db, user_db, make_event):
        other = user_db.add_user(name="Other", email="other@example.com")
        make_event(title="Mine")
        event_db.add_event(user_id=other.id, title="Theirs", date=datetime(2026, 3, 10, tzinfo=UTC))
        assert _titles(event_db.find(scopes.owned_by(other.id))) == ["Theirs"]


class TestReminderCandidates:
    def test_window_bounds(self, event_db, make_event, now):
        make_event(title="Starts now", date=now, reminder=15)
        make_event(title="In 30", date=now + timedelta(minutes=30), reminder=30)
        make_event(title="In 31", date=now + timedelta(minutes=31), reminder=30)
        make_event(title="No reminder", date=now + timedelta(minutes=10))
        result = event_db.find(scopes.reminder_candidates(now, 30))
        assert _titles(result) == ["In 30"]
