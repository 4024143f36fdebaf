"""Tests for src.core.reminder_notification — reminder content renderings."""

from datetime import datetime, timezone

from src.core.reminder_notification import MailMessage, ReminderNotification
from src.data.models import Event, User


def _user(**kw):
    attrs = dict(id=7, name="Dana", email="dana@example.com", timezone="UTC")
    attrs.update(kw)
    return User(**attrs)


def _event(**kw):
    attrs = dict(
        id=42,
        user_id=7,
        title="Dentist",
        date=datetime(2026, 3, 10, 14, 30, tzinfo=timezone.utc),
        event_type="personal",
        reminder=30,
    )
    attrs.update(kw)
    return Event(**attrs)


class TestMail:
    def test_subject_and_greeting(self):
        mail = ReminderNotification(_event(), app_url="https://cal.test").to_mail(_user())
        assert mail.subject == "Reminder: Dentist starts soon"
        assert mail.greeting == "Hello Dana!"

    def test_date_and_time_lines(self):
        mail = ReminderNotification(_event(), app_url="https://cal.test").to_mail(_user())
        assert "📅 **Date:** Tuesday, March 10, 2026" in mail.lines
        assert "🕐 **Time:** 2:30 PM" in mail.lines

    def test_uses_recipient_timezone(self):
        user = _user(timezone="America/New_York")  # UTC-4 after DST starts Mar 8
        mail = ReminderNotification(_event(), app_url="https://cal.test").to_mail(user)
        assert "🕐 **Time:** 10:30 AM" in mail.lines

    def test_optional_lines_omitted(self):
        mail = ReminderNotification(_event(), app_url="https://cal.test").to_mail(_user())
        text = "\n".join(mail.lines)
        assert "Location" not in text
        assert "Description" not in text
        assert "recurring" not in text

    def test_optional_lines_present(self):
        event = _event(
            location="Main St 1", description="Bring X-rays",
            is_recurring=True, recurrence_pattern="yearly",
        )
        mail = ReminderNotification(event, app_url="https://cal.test").to_mail(_user())
        assert "📍 **Location:** Main St 1" in mail.lines
        assert "📝 **Description:** Bring X-rays" in mail.lines
        assert "🔄 This is a recurring event" in mail.lines
        assert "**Event Type:** Personal" in mail.lines

    def test_action_link(self):
        mail = ReminderNotification(_event(), app_url="https://cal.test/").to_mail(_user())
        assert mail.action_text == "View Event Details"
        assert mail.action_url == "https://cal.test/admin/events/42"

    def test_app_url_defaults_to_settings(self):
        notification = ReminderNotification(_event())
        assert notification.event_url == "https://calendar.test/admin/events/42"


class TestRendering:
    def test_render_text_strips_markdown(self):
        mail = ReminderNotification(_event(), app_url="https://cal.test").to_mail(_user())
        text = mail.render_text()
        assert "**" not in text
        assert text.startswith("Hello Dana!")
        assert "View Event Details: https://cal.test/admin/events/42" in text

    def test_render_html_escapes_and_bolds(self):
        mail = MailMessage(
            subject="s", greeting="Hi <b>",
            lines=["**Title:** a & b"], action_text="Go", action_url="https://x/?a=1&b=2",
        )
        body = mail.render_html()
        assert "Hi &lt;b&gt;" in body
        assert "<strong>Title:</strong> a &amp; b" in body
        assert 'href="https://x/?a=1&amp;b=2"' in body

    def test_to_text(self):
        text = ReminderNotification(_event(), app_url="https://cal.test").to_text(_user())
        assert text.startswith("Reminder: Dentist starts soon")
        assert text.endswith("https://cal.test/admin/events/42")
        assert "**" not in text


class TestToDict:
    def test_machine_readable_fields(self):
        data = ReminderNotification(_event(), app_url="https://cal.test").to_dict()
        assert data == {
            "event_id": 42,
            "event_title": "Dentist",
            "event_date": "2026-03-10T14:30:00+00:00",
            "event_type": "personal",
            "reminder_minutes": 30,
        }
