"""
Event Calendar — Command line.

    python main.py send-reminders        # one dispatcher run (for cron)
    python main.py schedule [--interval] # run the dispatcher every N minutes
    python main.py seed                  # insert sample events

send-reminders exits 0 when the run completes, even if individual
reminders failed; it exits 1 only when the run itself cannot complete.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import TYPE_CHECKING

from src.config import settings

if TYPE_CHECKING:
    from src.core.reminder_dispatcher import ReminderRunResult
    from src.ports.notification_port import NotificationPort

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


async def run_reminders_once(notifier: NotificationPort | None = None) -> ReminderRunResult:
    """Wire the stores and notifier from settings and run the dispatcher once."""
    from src.adapters.notifier_factory import create_notifier
    from src.core.reminder_dispatcher import send_due_reminders
    from src.data.db import EventDB, UserDB

    if notifier is None:
        notifier = create_notifier()
    return await send_due_reminders(EventDB(), UserDB(), notifier)


def cmd_send_reminders(args: argparse.Namespace) -> int:
    try:
        asyncio.run(run_reminders_once())
    except Exception as exc:
        logger.exception("Reminder run failed: %s", exc)
        return EXIT_FAILURE
    return EXIT_OK


async def _schedule_loop(interval_minutes: float, max_runs: int | None = None) -> None:
    """Run the dispatcher, then sleep; a failed run is logged and the loop goes on."""
    from src.adapters.notifier_factory import create_notifier

    notifier = create_notifier()
    runs = 0
    while max_runs is None or runs < max_runs:
        try:
            await run_reminders_once(notifier)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.exception("Scheduled reminder run failed: %s", exc)
        runs += 1
        if max_runs is not None and runs >= max_runs:
            break
        await asyncio.sleep(interval_minutes * 60)


def cmd_schedule(args: argparse.Namespace) -> int:
    interval = settings.SCHEDULE_INTERVAL_MINUTES if args.interval is None else args.interval
    if interval <= 0:
        logger.error("Schedule interval must be positive, got %s", interval)
        return EXIT_FAILURE
    logger.info("Sending reminders every %s minute(s); Ctrl+C to stop", interval)
    try:
        asyncio.run(_schedule_loop(interval))
    except KeyboardInterrupt:
        logger.info("Scheduler stopped")
    except Exception as exc:
        logger.exception("Scheduler failed: %s", exc)
        return EXIT_FAILURE
    return EXIT_OK


def cmd_seed(args: argparse.Namespace) -> int:
    from src.core.clock import utc_now
    from src.data.db import EventDB, UserDB
    from src.data.factory import seed_sample_events

    try:
        user, events = seed_sample_events(UserDB(), EventDB(), utc_now())
    except Exception as exc:
        logger.exception("Seeding failed: %s", exc)
        return EXIT_FAILURE
    logger.info("Seeded %d events for %s <%s>", len(events), user.name, user.email)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="event-calendar", description=__doc__.split("\n\n")[0].strip())
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("send-reminders", help="Send reminder notifications for upcoming events")
    p.set_defaults(func=cmd_send_reminders)

    p = sub.add_parser("schedule", help="Send reminders repeatedly at a fixed interval")
    p.add_argument("--interval", type=float, default=None, help="Minutes between runs")
    p.set_defaults(func=cmd_schedule)

    p = sub.add_parser("seed", help="Insert sample events")
    p.set_defaults(func=cmd_seed)

    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    args = build_parser().parse_args(argv)
    return args.func(args)
