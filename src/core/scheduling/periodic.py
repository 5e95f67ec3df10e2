#!/usr/bin/env python3
"""
Periodic collection.

Runs the aggregator over every source on a cron schedule and posts the
formatted digest to a fixed channel.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

import pytz

from core.aggregator import Aggregator, SCOPE_ALL
from core.exceptions import ScheduleError
from core.formatters import format_articles_response
from .cron import CronSchedule

logger = logging.getLogger(__name__)


class PeriodicCollector:
    """Scheduled entry point sharing the aggregator used by the dispatcher."""

    LABEL = 'scheduled collection'

    def __init__(self,
                 aggregator: Aggregator,
                 publisher,
                 schedule: CronSchedule,
                 channel_id: Optional[str],
                 default_query: str,
                 default_max_results: int):
        """
        Initialize periodic collector.

        Args:
            aggregator: Shared aggregator instance
            publisher: Object with ``send_message(text, channel_id) -> bool``
            schedule: When to run
            channel_id: Destination channel; None disables periodic collection
            default_query: Query used for every scheduled run
            default_max_results: Per-source limit for every scheduled run
        """
        self.aggregator = aggregator
        self.publisher = publisher
        self.schedule = schedule
        self.channel_id = channel_id
        self.default_query = default_query
        self.default_max_results = default_max_results

    @property
    def enabled(self) -> bool:
        return bool(self.channel_id)

    async def run_once(self) -> Optional[str]:
        """
        Collect from all sources and post the digest.

        Returns:
            The posted text, or None when disabled, empty or undelivered
        """
        if not self.enabled:
            logger.warning("CHANNEL_ID not set, periodic collection disabled")
            return None

        logger.info("Running periodic collection")
        result = await self.aggregator.aggregate(SCOPE_ALL, self.default_query, self.default_max_results)

        for failure in result.errors:
            logger.error(f"Periodic collection error from {failure.source}: {failure.error}")

        if not result.articles:
            logger.info("Periodic collection found no articles, nothing posted")
            return None

        response = format_articles_response(result.articles, self.LABEL)
        delivered = await asyncio.to_thread(self.publisher.send_message, response, self.channel_id)

        if not delivered:
            logger.error(f"Error sending periodic collection message to channel {self.channel_id}")
            return None

        logger.info(f"Posted {result.total} articles to channel {self.channel_id}")
        return response

    async def run_forever(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """
        Sleep until each scheduled instant and run a collection.

        Individual run failures are logged and do not stop the loop.
        Returns when ``stop_event`` is set or the schedule has no further
        firing time.
        """
        if not self.enabled:
            logger.warning("CHANNEL_ID not set, periodic collection disabled")
            return

        stop_event = stop_event or asyncio.Event()
        logger.info(f"Periodic collection will post to channel {self.channel_id} on '{self.schedule.expression}'")

        while not stop_event.is_set():
            now = datetime.now(pytz.utc)
            try:
                next_run = self.schedule.next_after(now)
            except ScheduleError as e:
                logger.error(f"Periodic collection cannot continue: {e}")
                break
            delay = max(0.0, (next_run - now).total_seconds())
            logger.info(f"Next periodic collection at {next_run.isoformat()}")

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=delay)
                break
            except asyncio.TimeoutError:
                pass

            try:
                await self.run_once()
            except Exception as e:
                logger.error(f"Periodic collection failed: {e}", exc_info=True)

        logger.info("Periodic collection stopped")
