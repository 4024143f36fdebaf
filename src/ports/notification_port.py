"""Notification port — abstract interface for delivering event reminders.

Core modules depend on this protocol, never on a specific delivery channel.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from src.data.models import Event, User


class NotificationError(Exception):
    """Raised when a reminder cannot be delivered on a channel."""


class NotificationPort(Protocol):
    """Abstract reminder delivery interface used by core modules."""

    async def send_reminder(self, user: User, event: Event) -> None: ...
