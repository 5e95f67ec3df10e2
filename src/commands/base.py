#!/usr/bin/env python3
"""
Base command class for the modular command architecture.

Provides common functionality and interface that all commands inherit.
Uses dependency injection for better testability and maintainability.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, List, Optional, Tuple, TypeVar
from argparse import Namespace

from core.container import get_container
from core.exceptions import CollectorBotError, ConfigurationError

logger = logging.getLogger(__name__)

T = TypeVar('T')


class BaseCommand(ABC):
    """
    Base class for all CLI command endpoints.

    Exposes the shared services (config, registry, aggregator, dispatcher,
    chat client) through the dependency injection container.
    """

    SUBCOMMANDS: Tuple[str, ...] = ()

    def __init__(self, container=None):
        """
        Initialize base command with dependency injection container.

        Args:
            container: Optional container instance. If None, uses global container.
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self._container = container or get_container()

    @property
    def config(self):
        """Get configuration from container."""
        return self._container.get('config')

    @property
    def registry(self):
        """Get collector registry from container."""
        return self._container.get('registry')

    @property
    def aggregator(self):
        """Get aggregator from container."""
        return self._container.get('aggregator')

    @property
    def dispatcher(self):
        """Get command dispatcher from container."""
        return self._container.get('dispatcher')

    def create_discord_client(self):
        """Get the Discord client (requires DISCORD_TOKEN)."""
        return self._container.get('discord_client')

    def create_periodic_collector(self):
        """Create a periodic collector bound to the shared aggregator."""
        return self._container.get('periodic_collector')

    def create_interaction_server(self):
        """Get the interactions endpoint (requires DISCORD_PUBLIC_KEY)."""
        return self._container.get('interaction_server')

    def run_async(self, coro: Awaitable[T]) -> T:
        """Run a coroutine to completion from synchronous command code."""
        return asyncio.run(coro)

    @abstractmethod
    def execute(self, subcommand: str, args: Namespace) -> int:
        """
        Execute the command with given subcommand and arguments.

        Args:
            subcommand: The specific action to perform
            args: Parsed command line arguments

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        pass

    def get_available_subcommands(self) -> List[str]:
        """
        Get list of available subcommands for this command.

        Returns:
            List of subcommand names
        """
        return list(self.SUBCOMMANDS)

    def handle_error(self, error: BaseException, context: str = "") -> int:
        """
        Standard error handling for commands.

        Args:
            error: The exception that occurred
            context: Additional context about where the error occurred

        Returns:
            Appropriate exit code
        """
        error_msg = f"{context}: {error}" if context else str(error)

        if isinstance(error, KeyboardInterrupt):
            self.logger.info("Command interrupted by user")
            return 130

        # Known failures get a one-line log, anything else a traceback
        if isinstance(error, CollectorBotError):
            self.logger.error(error_msg)
        else:
            self.logger.error(error_msg, exc_info=True)

        if isinstance(error, (ConfigurationError, ValueError)):
            return 22
        return 1

    def print_output(self, text: Optional[str]) -> None:
        """Print a reply to stdout."""
        if text:
            print(text)
