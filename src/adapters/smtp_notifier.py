"""SMTP email adapter — implements NotificationPort.

Sends the reminder as a multipart (text + HTML) email. smtplib is blocking,
so each send runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from typing import TYPE_CHECKING

from src.core.reminder_notification import ReminderNotification
from src.ports.notification_port import NotificationError

if TYPE_CHECKING:
    from src.data.models import Event, User

logger = logging.getLogger(__name__)


class SMTPNotifier:
    """Email implementation of NotificationPort."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        from_address: str = "calendar@example.com",
        from_name: str = "Event Calendar",
        app_url: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._from = formataddr((from_name, from_address))
        self._app_url = app_url
        self._timeout = timeout

    def build_message(self, user: User, event: Event) -> EmailMessage:
        if not user.email:
            raise NotificationError(f"User #{user.id} has no email address")

        mail = ReminderNotification(event, app_url=self._app_url).to_mail(user)
        msg = EmailMessage()
        msg["Subject"] = mail.subject
        msg["From"] = self._from
        msg["To"] = formataddr((user.name, user.email))
        msg.set_content(mail.render_text())
        msg.add_alternative(mail.render_html(), subtype="html")
        return msg

    async def send_reminder(self, user: User, event: Event) -> None:
        msg = self.build_message(user, event)
        await asyncio.to_thread(self._deliver, msg)
        logger.debug("Reminder mail for event #%d sent to %s", event.id, user.email)

    def _deliver(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
            if self._use_tls:
                smtp.starttls()
            if self._username:
                smtp.login(self._username, self._password)
            smtp.send_message(msg)
