#!/usr/bin/env python3
"""
Command dispatcher.

Turns structured command invocations coming from the chat boundary into
aggregator calls and returns the text reply to deliver.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from core.aggregator import Aggregator
from core.collectors.registry import CollectorRegistry
from core.config import Config, MIN_RESULTS, MAX_RESULTS
from core.exceptions import CollectionError, ScheduleError, UnknownSourceError
from core.formatters import (
    format_articles_response,
    format_error,
    format_schedule,
    format_sources_listing,
)
from core.scheduling.cron import CronSchedule

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = 'arxiv'
SCHEDULE_PREVIEW_COUNT = 3


@dataclass
class CommandInvocation:
    """A command as delivered by the chat boundary."""
    command_name: str
    options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_interaction(cls, payload: Dict[str, Any]) -> 'CommandInvocation':
        """
        Build an invocation from a slash-command interaction payload.

        Only ``data.name`` and the top-level ``data.options`` name/value
        pairs are read.
        """
        data = payload.get('data') or {}
        options = {
            option['name']: option.get('value')
            for option in data.get('options') or []
            if 'name' in option
        }
        return cls(command_name=data.get('name', ''), options=options)


def clamp_max_results(value: Any, default: int) -> int:
    """Coerce a requested limit into the supported range."""
    try:
        requested = int(value) if value is not None else default
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric max_results: {value!r}")
        requested = default
    return max(MIN_RESULTS, min(MAX_RESULTS, requested))


class CommandDispatcher:
    """Routes collect, sources and schedule commands."""

    def __init__(self, aggregator: Aggregator, registry: CollectorRegistry, config: Config):
        self.aggregator = aggregator
        self.registry = registry
        self.config = config

    async def dispatch(self, invocation: CommandInvocation) -> Optional[str]:
        """
        Handle one invocation.

        Returns:
            Reply text, or None for an unknown command
        """
        logger.info(f"Received command: {invocation.command_name}")

        if invocation.command_name == 'collect':
            return await self.handle_collect(invocation.options)
        elif invocation.command_name == 'sources':
            return self.handle_sources()
        elif invocation.command_name == 'schedule':
            return self.handle_schedule()

        logger.warning(f"Unknown command: {invocation.command_name}")
        return None

    async def handle_collect(self, options: Dict[str, Any]) -> str:
        """Run a collection for the requested source and format the reply."""
        source = options.get('source') or DEFAULT_SOURCE
        query = options.get('query') or self.config.collection.default_query
        max_results = clamp_max_results(options.get('max_results'), self.config.collection.default_max_results)

        try:
            result = await self.aggregator.aggregate(source, query, max_results)
        except UnknownSourceError as e:
            return format_error(f"Unknown source: {e.source_name}")
        except CollectionError as e:
            logger.error(f"Error collecting from {e.source_name}: {e}")
            return format_error(f"Error: {e}")

        for failure in result.errors:
            logger.error(f"Error collecting from {failure.source}: {failure.error}")

        return format_articles_response(result.articles, source)

    def handle_sources(self) -> str:
        return format_sources_listing(self.registry.collectors())

    def handle_schedule(self) -> str:
        collection = self.config.collection
        try:
            schedule = CronSchedule.parse(collection.schedule, collection.timezone)
            upcoming = schedule.upcoming(SCHEDULE_PREVIEW_COUNT)
        except ScheduleError as e:
            logger.error(f"Invalid collection schedule: {e}")
            return format_error(f"Error: {e}")
        return format_schedule(schedule.expression, upcoming)
