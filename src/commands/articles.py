#!/usr/bin/env python3
"""
Article command endpoints for collecting articles and listing sources.
"""

import logging
from argparse import Namespace
from typing import Any, Dict

from .base import BaseCommand
from core.dispatcher import CommandInvocation

logger = logging.getLogger(__name__)


class ArticlesCommand(BaseCommand):
    """Collect articles and list the registered sources."""

    SUBCOMMANDS = ('collect', 'sources')

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute articles subcommand."""
        try:
            if subcommand == "collect":
                return self.collect(args)
            elif subcommand == "sources":
                return self.sources(args)
            else:
                available = ", ".join(self.get_available_subcommands())
                self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
                return 1

        except (Exception, KeyboardInterrupt) as e:
            return self.handle_error(e, f"articles {subcommand}")

    def collect(self, args: Namespace) -> int:
        """
        Run a collect command the same way a chat invocation would.

        The reply is printed, and posted to the configured channel when
        ``--post`` is given.
        """
        options: Dict[str, Any] = {}
        if getattr(args, 'source', None):
            options['source'] = args.source
        if getattr(args, 'query', None):
            options['query'] = args.query
        if getattr(args, 'max_results', None) is not None:
            options['max_results'] = args.max_results

        reply = self.run_async(self.dispatcher.dispatch(CommandInvocation('collect', options)))
        self.print_output(reply)

        if getattr(args, 'post', False):
            client = self.create_discord_client()
            if not client.send_message(reply):
                print("❌ Failed to post reply to Discord")
                return 1
            print("✅ Reply posted to Discord")

        return 0

    def sources(self, args: Namespace) -> int:
        """List available sources."""
        reply = self.run_async(self.dispatcher.dispatch(CommandInvocation('sources')))
        self.print_output(reply)
        return 0
