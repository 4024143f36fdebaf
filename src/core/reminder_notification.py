"""
Event Calendar — Reminder notification content.

Builds the three renderings of an event reminder: a mail message (subject,
greeting, detail lines, action link), a plain-text message for chat
channels, and a machine-readable dict. Dates and times are shown in the
recipient's timezone.

No I/O: delivery is handled by the notifier adapters.
"""

from __future__ import annotations

import html
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.data.models import Event, User


@dataclass
class MailMessage:
    """Channel-neutral mail content, rendered to text or HTML by the sender."""

    subject: str
    greeting: str
    lines: list[str] = field(default_factory=list)
    action_text: str = ""
    action_url: str = ""
    outro: str = ""

    def render_text(self) -> str:
        parts = [self.greeting, ""]
        parts.extend(line.replace("**", "") for line in self.lines)
        if self.action_url:
            parts.extend(["", f"{self.action_text}: {self.action_url}"])
        if self.outro:
            parts.extend(["", self.outro])
        return "\n".join(parts)

    def render_html(self) -> str:
        paragraphs = [f"<h1>{html.escape(self.greeting)}</h1>"]
        paragraphs.extend(f"<p>{_bold(html.escape(line))}</p>" for line in self.lines)
        if self.action_url:
            paragraphs.append(
                f'<p><a href="{html.escape(self.action_url, quote=True)}">'
                f"{html.escape(self.action_text)}</a></p>"
            )
        if self.outro:
            paragraphs.append(f"<p>{html.escape(self.outro)}</p>")
        return "<html><body>" + "".join(paragraphs) + "</body></html>"


def _bold(text: str) -> str:
    """Turn **x** pairs into <strong>x</strong>."""
    pieces = text.split("**")
    out = []
    for i, piece in enumerate(pieces):
        if i % 2 == 1 and i < len(pieces) - 1:
            out.append(f"<strong>{piece}</strong>")
        elif i % 2 == 1:
            out.append("**" + piece)
        else:
            out.append(piece)
    return "".join(out)


class ReminderNotification:
    """The "your event starts soon" notification for a single event."""

    def __init__(self, event: Event, app_url: str | None = None) -> None:
        if app_url is None:
            from src.config import settings
            app_url = settings.APP_URL
        self.event = event
        self._app_url = app_url.rstrip("/")

    @property
    def subject(self) -> str:
        return f"Reminder: {self.event.title} starts soon"

    @property
    def event_url(self) -> str:
        return f"{self._app_url}/admin/events/{self.event.id}"

    def detail_lines(self, user: User) -> list[str]:
        ev = self.event
        local = ev.local_date(user.tz)
        event_date = f"{local:%A}, {local:%B} {local.day}, {local.year}"

        lines = [
            f"This is a reminder that your event **{ev.title}** is starting soon.",
            "**Event Details:**",
            f"📅 **Date:** {event_date}",
            f"🕐 **Time:** {ev.formatted_time(user.tz)}",
        ]
        if ev.location:
            lines.append(f"📍 **Location:** {ev.location}")
        if ev.description:
            lines.append(f"📝 **Description:** {ev.description}")
        lines.append(f"**Event Type:** {ev.event_type_label}")
        if ev.is_recurring:
            lines.append("🔄 This is a recurring event")
        return lines

    def to_mail(self, user: User) -> MailMessage:
        return MailMessage(
            subject=self.subject,
            greeting=f"Hello {user.name}!",
            lines=self.detail_lines(user),
            action_text="View Event Details",
            action_url=self.event_url,
            outro="Thank you for using our application!",
        )

    def to_text(self, user: User) -> str:
        """Compact plain-text form for chat channels."""
        body = "\n".join(line.replace("**", "") for line in self.detail_lines(user))
        return f"{self.subject}\n\n{body}\n\n{self.event_url}"

    def to_dict(self) -> dict:
        ev = self.event
        return {
            "event_id": ev.id,
            "event_title": ev.title,
            "event_date": ev.date.isoformat(),
            "event_type": ev.event_type,
            "reminder_minutes": ev.reminder,
        }
