"""
Event Calendar — Centralized configuration.

Loads all settings from .env and validates them.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

# Load .env from project root (two levels up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)

_CHANNELS = ("mail", "telegram", "log")


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # SQLite
    DATABASE_PATH: str = "data/events.db"

    # Default timezone for users that have none configured
    TIMEZONE: str = "UTC"

    # Base URL used for deep links in notifications
    APP_URL: str = "http://localhost:8000"

    # Notification channel: "mail" | "telegram" | "log"
    NOTIFICATION_CHANNEL: str = "mail"

    # SMTP (only needed when NOTIFICATION_CHANNEL=mail)
    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_USE_TLS: bool = True
    MAIL_FROM_ADDRESS: str = "calendar@example.com"
    MAIL_FROM_NAME: str = "Event Calendar"

    # Telegram (only needed when NOTIFICATION_CHANNEL=telegram)
    TELEGRAM_BOT_TOKEN: str = ""

    # Reminder dispatcher
    REMINDER_LOOKAHEAD_MINUTES: int = 30
    REMINDER_TOLERANCE_MINUTES: int = 1
    REMINDER_TRACK_SENT: bool = False   # persist reminder_sent_at and skip repeats
    SCHEDULE_INTERVAL_MINUTES: int = 1

    LOG_LEVEL: str = "INFO"

    @field_validator("TIMEZONE")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {v!r}") from exc
        return v

    @field_validator("NOTIFICATION_CHANNEL", mode="before")
    @classmethod
    def check_channel(cls, v: str) -> str:
        v = str(v).strip().lower()
        if v not in _CHANNELS:
            raise ValueError(f"NOTIFICATION_CHANNEL must be one of {_CHANNELS}, got {v!r}")
        return v

    @field_validator("SMTP_USE_TLS", "REMINDER_TRACK_SENT", mode="before")
    @classmethod
    def parse_bool(cls, v: str | bool) -> bool:
        if isinstance(v, bool):
            return v
        return str(v).strip().lower() in ("1", "true", "yes", "on")

    @field_validator(
        "REMINDER_LOOKAHEAD_MINUTES",
        "REMINDER_TOLERANCE_MINUTES",
        "SCHEDULE_INTERVAL_MINUTES",
        mode="before",
    )
    @classmethod
    def parse_minutes(cls, v: str | int) -> int:
        minutes = int(v)
        if minutes < 0:
            raise ValueError("minutes must be >= 0")
        return minutes


def _load_settings() -> Settings:
    """Load settings from environment, exiting on invalid values."""
    try:
        return Settings(
            DATABASE_PATH=os.getenv("DATABASE_PATH", "data/events.db"),
            TIMEZONE=os.getenv("TIMEZONE", "UTC"),
            APP_URL=os.getenv("APP_URL", "http://localhost:8000").rstrip("/"),
            NOTIFICATION_CHANNEL=os.getenv("NOTIFICATION_CHANNEL", "mail"),
            SMTP_HOST=os.getenv("SMTP_HOST", "localhost"),
            SMTP_PORT=os.getenv("SMTP_PORT", "587"),
            SMTP_USERNAME=os.getenv("SMTP_USERNAME", ""),
            SMTP_PASSWORD=os.getenv("SMTP_PASSWORD", ""),
            SMTP_USE_TLS=os.getenv("SMTP_USE_TLS", "true"),
            MAIL_FROM_ADDRESS=os.getenv("MAIL_FROM_ADDRESS", "calendar@example.com"),
            MAIL_FROM_NAME=os.getenv("MAIL_FROM_NAME", "Event Calendar"),
            TELEGRAM_BOT_TOKEN=os.getenv("TELEGRAM_BOT_TOKEN", ""),
            REMINDER_LOOKAHEAD_MINUTES=os.getenv("REMINDER_LOOKAHEAD_MINUTES", "30"),
            REMINDER_TOLERANCE_MINUTES=os.getenv("REMINDER_TOLERANCE_MINUTES", "1"),
            REMINDER_TRACK_SENT=os.getenv("REMINDER_TRACK_SENT", "false"),
            SCHEDULE_INTERVAL_MINUTES=os.getenv("SCHEDULE_INTERVAL_MINUTES", "1"),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
    except ValidationError as exc:
        print(f"ERROR: invalid configuration in .env:\n{exc}", file=sys.stderr)
        sys.exit(1)


# Singleton — imported by all other modules as:
#   from src.config import settings
settings = _load_settings()
