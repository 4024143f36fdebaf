"""Notifier factory — creates the right adapter based on config."""

from __future__ import annotations

from src.config import settings
from src.ports.notification_port import NotificationPort


def create_notifier(channel: str | None = None) -> NotificationPort:
    """Return the notifier matching NOTIFICATION_CHANNEL (or `channel`)."""
    channel = (channel or settings.NOTIFICATION_CHANNEL).lower()

    if channel == "mail":
        from src.adapters.smtp_notifier import SMTPNotifier

        return SMTPNotifier(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USERNAME,
            password=settings.SMTP_PASSWORD,
            use_tls=settings.SMTP_USE_TLS,
            from_address=settings.MAIL_FROM_ADDRESS,
            from_name=settings.MAIL_FROM_NAME,
            app_url=settings.APP_URL,
        )

    if channel == "telegram":
        if not settings.TELEGRAM_BOT_TOKEN:
            raise ValueError("TELEGRAM_BOT_TOKEN is required for the telegram channel")
        from telegram import Bot

        from src.adapters.telegram_notifier import TelegramNotifier

        return TelegramNotifier(Bot(settings.TELEGRAM_BOT_TOKEN), app_url=settings.APP_URL)

    if channel == "log":
        from src.adapters.log_notifier import LogNotifier

        return LogNotifier(app_url=settings.APP_URL)

    raise ValueError(f"Unknown NOTIFICATION_CHANNEL: {channel!r}")
