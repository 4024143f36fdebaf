"""
Event Calendar — Entry Point.

`python main.py send-reminders` is meant to be run by cron every minute.
See src/cli.py for the other commands.
"""

import sys

from src.cli import main

if __name__ == "__main__":
    sys.exit(main())
