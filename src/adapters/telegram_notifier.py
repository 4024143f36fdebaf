"""Telegram notification adapter — implements NotificationPort.

Wraps a telegram.Bot instance and sends the plain-text reminder to the
owner's linked chat.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from telegram import Bot

from src.core.reminder_notification import ReminderNotification
from src.ports.notification_port import NotificationError

if TYPE_CHECKING:
    from src.data.models import Event, User

logger = logging.getLogger(__name__)


class TelegramNotifier:
    """Telegram implementation of NotificationPort."""

    def __init__(self, bot: Bot, app_url: str | None = None) -> None:
        self._bot = bot
        self._app_url = app_url

    async def send_reminder(self, user: User, event: Event) -> None:
        if user.telegram_chat_id is None:
            raise NotificationError(f"User #{user.id} has no linked Telegram chat")
        text = ReminderNotification(event, app_url=self._app_url).to_text(user)
        await self._bot.send_message(chat_id=user.telegram_chat_id, text=text)
