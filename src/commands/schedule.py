#!/usr/bin/env python3
"""
Schedule command endpoints for the periodic collection.
"""

import logging
from argparse import Namespace

from .base import BaseCommand
from core.formatters import format_schedule
from core.scheduling import CronSchedule

logger = logging.getLogger(__name__)


class ScheduleCommand(BaseCommand):
    """Inspect and run the periodic collection."""

    SUBCOMMANDS = ('show', 'once', 'run')

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute schedule subcommand."""
        try:
            if subcommand == "show":
                return self.show(args)
            elif subcommand == "once":
                return self.once(args)
            elif subcommand == "run":
                return self.run(args)
            else:
                available = ", ".join(self.get_available_subcommands())
                self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
                return 1

        except (Exception, KeyboardInterrupt) as e:
            return self.handle_error(e, f"schedule {subcommand}")

    def show(self, args: Namespace) -> int:
        """Print the cron expression and the next fire times."""
        count = getattr(args, 'count', None) or 3
        if count < 1:
            raise ValueError(f"--count must be at least 1, got {count}")

        collection = self.config.collection
        schedule = CronSchedule.parse(collection.schedule, collection.timezone)
        print(format_schedule(schedule.expression, schedule.upcoming(count)))
        return 0

    def once(self, args: Namespace) -> int:
        """Run a single periodic collection now."""
        periodic = self.create_periodic_collector()
        if not periodic.enabled:
            print("⚠️  CHANNEL_ID not set - periodic collection is disabled")
            return 1

        posted = self.run_async(periodic.run_once())
        if posted is None:
            print("ℹ️  Nothing was posted (no articles or delivery failed, see log)")
        else:
            print("✅ Periodic collection posted")
        return 0

    def run(self, args: Namespace) -> int:
        """Run the periodic loop until interrupted."""
        collection = self.config.collection
        self.logger.info(f"Default query: {collection.default_query}")
        self.logger.info(f"Default max results: {collection.default_max_results}")
        self.logger.info(f"Schedule: {collection.schedule} ({collection.timezone})")

        periodic = self.create_periodic_collector()
        if not periodic.enabled:
            print("⚠️  CHANNEL_ID not set - periodic collection is disabled")
            return 1

        self.run_async(periodic.run_forever())
        return 0
