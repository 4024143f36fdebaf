"""Log notification adapter — implements NotificationPort.

Writes reminders to the application log instead of delivering them.
Intended for local development.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from src.core.reminder_notification import ReminderNotification

if TYPE_CHECKING:
    from src.data.models import Event, User

logger = logging.getLogger(__name__)


class LogNotifier:
    """Logging implementation of NotificationPort."""

    def __init__(self, app_url: str | None = None) -> None:
        self._app_url = app_url

    async def send_reminder(self, user: User, event: Event) -> None:
        notification = ReminderNotification(event, app_url=self._app_url)
        logger.info(
            "Reminder for user #%d <%s>: %s %s",
            user.id, user.email, notification.subject,
            json.dumps(notification.to_dict(), ensure_ascii=False),
        )
