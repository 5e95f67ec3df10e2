#!/usr/bin/env python3
"""
CLI Router for the Article Collector.

Routes two-level commands (``<command> <subcommand>``) to command classes.
"""

import argparse
import logging
import sys
from typing import Dict, Optional, List

from commands import get_command, COMMANDS
from core.config import get_config_manager
from core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class CLIRouter:
    """
    CLI router for article collection commands.

    Command structure:
    - python run.py articles collect --source arxiv --query "cat:cs.LG"
    - python run.py articles sources
    - python run.py schedule show --count 5
    - python run.py integrations register-commands
    - python run.py integrations serve --port 8080
    """

    def __init__(self, container=None):
        """
        Initialize CLI router.

        Args:
            container: Optional service container handed to every command
        """
        self._container = container
        self._command_parsers: Dict[str, argparse.ArgumentParser] = {}
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the main argument parser."""
        parser = argparse.ArgumentParser(
            description="Article Collector bot for Discord",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=self._get_examples_text()
        )

        subparsers = parser.add_subparsers(
            dest='command',
            help='Available commands',
            metavar='{command}'
        )

        self._add_articles_parser(subparsers)
        self._add_schedule_parser(subparsers)
        self._add_integrations_parser(subparsers)

        return parser

    def _add_articles_parser(self, subparsers):
        """Add articles command parser."""
        articles_parser = subparsers.add_parser(
            'articles',
            help='Article collection operations'
        )
        self._command_parsers['articles'] = articles_parser

        articles_subparsers = articles_parser.add_subparsers(
            dest='subcommand',
            help='Article operations',
            metavar='{collect,sources}'
        )

        # Collect subcommand
        collect_parser = articles_subparsers.add_parser('collect', help='Collect articles from one or all sources')
        collect_parser.add_argument('--source', default=None, help='Source name or "all" (default: arxiv)')
        collect_parser.add_argument('--query', default=None, help='Search query (default: ARXIV_SEARCH_QUERY)')
        collect_parser.add_argument('--max-results', dest='max_results', type=int, default=None, help='Maximum results per source, clamped to 1-20')
        collect_parser.add_argument('--post', action='store_true', help='Also post the reply to CHANNEL_ID')

        # Sources subcommand
        articles_subparsers.add_parser('sources', help='List available sources')

    def _add_schedule_parser(self, subparsers):
        """Add schedule command parser."""
        schedule_parser = subparsers.add_parser(
            'schedule',
            help='Periodic collection operations'
        )
        self._command_parsers['schedule'] = schedule_parser

        schedule_subparsers = schedule_parser.add_subparsers(
            dest='subcommand',
            help='Schedule operations',
            metavar='{show,once,run}'
        )

        show_parser = schedule_subparsers.add_parser('show', help='Show the cron schedule and next run times')
        show_parser.add_argument('--count', type=int, default=3, help='Number of upcoming runs to show (default: 3)')

        schedule_subparsers.add_parser('once', help='Run one periodic collection now')
        schedule_subparsers.add_parser('run', help='Run the periodic collection loop until interrupted')

    def _add_integrations_parser(self, subparsers):
        """Add integrations command parser."""
        integrations_parser = subparsers.add_parser(
            'integrations',
            help='Chat platform integration management'
        )
        self._command_parsers['integrations'] = integrations_parser

        integrations_subparsers = integrations_parser.add_subparsers(
            dest='subcommand',
            help='Integration operations',
            metavar='{register-commands,test,status,serve}'
        )

        register_parser = integrations_subparsers.add_parser('register-commands', help='Register slash commands')
        register_parser.add_argument('--guild-id', dest='guild_id', default=None, help='Guild to register for (default: GUILD_ID)')

        integrations_subparsers.add_parser('test', help='Send a test message to CHANNEL_ID')
        integrations_subparsers.add_parser('status', help='Show integration status')

        serve_parser = integrations_subparsers.add_parser('serve', help='Serve slash-command interactions over HTTP')
        serve_parser.add_argument('--host', default=None, help='Interface to bind (default: INTERACTIONS_HOST)')
        serve_parser.add_argument('--port', type=int, default=None, help='Port to bind (default: INTERACTIONS_PORT)')

    def _get_examples_text(self) -> str:
        """Get examples text for help."""
        return """
Examples:
  python run.py articles collect                              # arXiv, default query
  python run.py articles collect --source all --max-results 5
  python run.py articles collect --query "cat:cs.LG" --post   # Also post to Discord
  python run.py articles sources

  python run.py schedule show --count 5
  python run.py schedule run

  python run.py integrations register-commands
  python run.py integrations status
  python run.py integrations serve --port 8080               # Interactions endpoint
"""

    def route_command(self, args: Optional[List[str]] = None) -> int:
        """
        Route command to appropriate handler.

        Args:
            args: Command line arguments (uses sys.argv if None)

        Returns:
            Exit code
        """
        try:
            if args is None:
                args = sys.argv[1:]

            parsed_args = self.parser.parse_args(args)

            if not parsed_args.command:
                self.parser.print_help()
                return 1

            return self._handle_command(parsed_args)

        except SystemExit as e:
            # argparse calls sys.exit() on error or help
            return e.code if e.code is not None else 0
        except Exception as e:
            logger.error(f"CLI routing error: {e}", exc_info=True)
            return 1

    def _handle_command(self, args: argparse.Namespace) -> int:
        """Handle command structure."""
        logger.debug(f"Handling command: {args.command}")

        if args.command not in COMMANDS:
            available = ', '.join(COMMANDS.keys())
            logger.error(f"Unknown command '{args.command}'. Available: {available}")
            return 1

        subcommand = getattr(args, 'subcommand', None)
        if not subcommand:
            logger.error(f"No subcommand specified for '{args.command}'")
            self._command_parsers[args.command].print_help()
            return 1

        try:
            command = get_command(args.command, self._container)
            return command.execute(subcommand, args)
        except Exception as e:
            logger.error(f"Error executing {args.command} {subcommand}: {e}", exc_info=True)
            return 1


def main(args: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code
    """
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        get_config_manager().update_logging()
    except (ConfigurationError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        return 22

    router = CLIRouter()
    return router.route_command(args)


if __name__ == '__main__':
    exit_code = main()
    sys.exit(exit_code)
