#!/usr/bin/env python3
"""
Integrations command endpoints for managing the chat platform connection.
"""

import logging
from argparse import Namespace

from .base import BaseCommand
from core.config import get_config_manager
from integrations.command_definitions import all_commands

logger = logging.getLogger(__name__)


class IntegrationsCommand(BaseCommand):
    """Handle chat platform integration operations."""

    SUBCOMMANDS = ('register-commands', 'test', 'status', 'serve')

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute integrations subcommand."""
        try:
            if subcommand == "register-commands":
                return self.register_commands(args)
            elif subcommand == "test":
                return self.test(args)
            elif subcommand == "status":
                return self.status(args)
            elif subcommand == "serve":
                return self.serve(args)
            else:
                available = ", ".join(self.get_available_subcommands())
                self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
                return 1

        except (Exception, KeyboardInterrupt) as e:
            return self.handle_error(e, f"integrations {subcommand}")

    def register_commands(self, args: Namespace) -> int:
        """Register the slash commands, for the configured guild if any."""
        client = self.create_discord_client()
        guild_id = getattr(args, 'guild_id', None) or self.config.discord.guild_id

        count = client.register_commands(all_commands(), guild_id)
        scope = f"guild {guild_id}" if guild_id else "global scope"
        print(f"✅ Registered {count} commands for {scope}")
        return 0

    def test(self, args: Namespace) -> int:
        """Send a test message to the configured channel."""
        print("🔍 Testing Discord connection...")
        client = self.create_discord_client()

        if client.test_connection():
            print("✅ Discord integration working")
            return 0

        print("❌ Discord integration failed - check DISCORD_TOKEN and CHANNEL_ID")
        return 1

    def status(self, args: Namespace) -> int:
        """Show which integration settings are present."""
        status = get_config_manager().get_integration_status()

        print("=== Integration Status ===")
        print(f"🔑 Discord token: {'✅ Configured' if status['discord_token'] else '❌ Missing'}")
        print(f"🏠 Guild ID: {'✅ Configured' if status['guild_id'] else '⚪ Not set (global commands)'}")
        print(f"📢 Channel ID: {'✅ Configured' if status['channel_id'] else '⚪ Not set (periodic collection disabled)'}")
        print(f"🔏 Public key: {'✅ Configured' if status['public_key'] else '⚪ Not set (interactions endpoint disabled)'}")
        return 0

    def serve(self, args: Namespace) -> int:
        """Serve slash-command interactions over HTTP until interrupted."""
        discord = self.config.discord
        host = getattr(args, 'host', None) or discord.interactions_host
        port = getattr(args, 'port', None) or discord.interactions_port

        server = self.create_interaction_server()
        server.run(host, port)
        return 0
