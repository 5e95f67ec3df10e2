#!/usr/bin/env python3
"""
Discord integration for posting collection results.

Sends messages to channels and registers slash commands through the
Discord REST API using the bot token.
"""

import logging
from typing import Any, Dict, List, Optional
from datetime import datetime

import requests

from core.exceptions import DeliveryError
from core.formatters import enforce_message_limit

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://discord.com/api/v10"


class DiscordClient:
    """Handles outbound calls to the Discord REST API."""

    def __init__(self,
                 token: str,
                 channel_id: Optional[str] = None,
                 api_base_url: str = DEFAULT_API_BASE_URL,
                 timeout: int = 10,
                 session: Optional[requests.Session] = None):
        """
        Initialize Discord client.

        Args:
            token: Bot token
            channel_id: Default destination channel
            api_base_url: REST API root
            timeout: Request timeout in seconds
            session: Optional pre-built requests session
        """
        if not token:
            raise ValueError("Discord bot token not provided")

        self.channel_id = channel_id
        self.api_base_url = api_base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f'Bot {token}',
            'User-Agent': 'ArticleCollectorBot (https://github.com, 1.0)',
        })

    def _request(self, method: str, path: str, payload: Optional[Any] = None,
                 channel_id: Optional[str] = None, operation: str = "request") -> Any:
        """
        Perform one API call.

        Raises:
            DeliveryError: On connection failure or non-success status
        """
        url = f"{self.api_base_url}{path}"
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Discord {operation} failed: {e}")
            raise DeliveryError(channel_id, operation, e) from e

        if not 200 <= response.status_code < 300:
            logger.error(f"Discord {operation} failed with status {response.status_code}: {response.text}")
            raise DeliveryError(channel_id, operation, f"HTTP {response.status_code}: {response.text[:200]}")

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def post_message(self, text: str, channel_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Post text to a channel.

        Raises:
            DeliveryError: If no channel is known or the call fails
        """
        target = channel_id or self.channel_id
        if not target:
            raise DeliveryError(None, "send message", "no channel id configured")

        return self._request(
            'POST',
            f"/channels/{target}/messages",
            payload={'content': enforce_message_limit(text)},
            channel_id=target,
            operation="send message"
        )

    def send_message(self, text: str, channel_id: Optional[str] = None) -> bool:
        """
        Post text to a channel.

        Returns:
            True if sent successfully, False otherwise
        """
        try:
            self.post_message(text, channel_id)
        except DeliveryError as e:
            logger.error(f"Failed to send Discord message: {e}")
            return False

        logger.info("Discord message sent successfully")
        return True

    def edit_interaction_response(self, application_id: str, interaction_token: str, text: str) -> Dict[str, Any]:
        """
        Replace the content of a deferred interaction response.

        Raises:
            DeliveryError: If the call fails
        """
        return self._request(
            'PATCH',
            f"/webhooks/{application_id}/{interaction_token}/messages/@original",
            payload={'content': enforce_message_limit(text)},
            operation="interaction response"
        )

    def get_application_id(self) -> str:
        """Look up the application id that owns the bot token."""
        data = self._request('GET', "/oauth2/applications/@me", operation="application lookup")
        return str(data['id'])

    def register_commands(self, commands: List[Dict[str, Any]], guild_id: Optional[str] = None) -> int:
        """
        Overwrite the registered slash commands.

        Registers for one guild when ``guild_id`` is given, globally otherwise.

        Returns:
            Number of commands registered
        """
        application_id = self.get_application_id()
        if guild_id:
            path = f"/applications/{application_id}/guilds/{guild_id}/commands"
        else:
            path = f"/applications/{application_id}/commands"

        registered = self._request('PUT', path, payload=commands, operation="command registration") or []

        if guild_id:
            logger.info(f"Registered commands for guild {guild_id}")
        else:
            logger.info("Registered global commands")
        return len(registered)

    def test_connection(self, channel_id: Optional[str] = None) -> bool:
        """Send a test message to the channel."""
        text = f"🧪 Test message from Article Collector - {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}"
        success = self.send_message(text, channel_id)

        if success:
            logger.info("Discord connection test successful")
        else:
            logger.error("Discord connection test failed")

        return success
