#!/usr/bin/env python3
"""
Discord interactions endpoint.

Receives slash-command interactions over HTTP, verifies the Ed25519
request signature, runs the command through the shared dispatcher and
answers with the reply text. Commands that may take longer than Discord's
response window are deferred and completed by editing the original
response.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional, Set

from aiohttp import web
from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

from core.dispatcher import CommandDispatcher, CommandInvocation
from core.exceptions import ConfigurationError, DeliveryError
from core.formatters import format_error

logger = logging.getLogger(__name__)

INTERACTIONS_PATH = '/interactions'

SIGNATURE_HEADER = 'X-Signature-Ed25519'
TIMESTAMP_HEADER = 'X-Signature-Timestamp'

# Interaction types
PING = 1
APPLICATION_COMMAND = 2

# Interaction callback types
PONG = 1
CHANNEL_MESSAGE_WITH_SOURCE = 4
DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE = 5

EPHEMERAL = 1 << 6

# Commands that run a collection and can outlast the response window
DEFERRED_COMMANDS = frozenset({'collect'})


class InteractionServer:
    """HTTP entry point for slash commands, sharing the dispatcher with the CLI."""

    def __init__(self,
                 dispatcher: CommandDispatcher,
                 public_key: str,
                 discord_client=None):
        """
        Initialize interactions server.

        Args:
            dispatcher: Shared command dispatcher
            public_key: Application public key (hex) used to verify requests
            discord_client: Object with ``edit_interaction_response``; when
                None every command is answered inline
        """
        if not public_key:
            raise ConfigurationError('DISCORD_PUBLIC_KEY', 'must be set to serve interactions')
        try:
            self.verify_key = VerifyKey(bytes.fromhex(public_key))
        except (TypeError, ValueError) as e:
            raise ConfigurationError('DISCORD_PUBLIC_KEY', f"not a valid Ed25519 public key: {e}") from e

        self.dispatcher = dispatcher
        self.discord_client = discord_client
        self._pending: Set[asyncio.Task] = set()

    def verify(self, signature: Optional[str], timestamp: Optional[str], body: bytes) -> bool:
        """Check the request signature over ``timestamp + body``."""
        if not signature or not timestamp:
            return False
        try:
            self.verify_key.verify(timestamp.encode() + body, bytes.fromhex(signature))
        except (BadSignatureError, ValueError):
            return False
        return True

    async def handle_interaction(self, request: web.Request) -> web.Response:
        body = await request.read()

        if not self.verify(request.headers.get(SIGNATURE_HEADER), request.headers.get(TIMESTAMP_HEADER), body):
            logger.warning("Rejected interaction with invalid signature")
            return web.json_response({'error': 'invalid request signature'}, status=401)

        try:
            payload = json.loads(body)
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            logger.warning("Rejected interaction with malformed body")
            return web.json_response({'error': 'malformed interaction'}, status=400)

        interaction_type = payload.get('type')
        if interaction_type == PING:
            return web.json_response({'type': PONG})
        if interaction_type != APPLICATION_COMMAND:
            logger.warning(f"Unsupported interaction type: {interaction_type}")
            return web.json_response({'error': 'unsupported interaction type'}, status=400)

        invocation = CommandInvocation.from_interaction(payload)

        if self._can_defer(invocation, payload):
            self._defer(str(payload['application_id']), payload['token'], invocation)
            return web.json_response({'type': DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE})

        reply = await self.dispatcher.dispatch(invocation)
        return web.json_response(message_response(invocation, reply))

    def _can_defer(self, invocation: CommandInvocation, payload: Dict[str, Any]) -> bool:
        return (
            invocation.command_name in DEFERRED_COMMANDS
            and self.discord_client is not None
            and bool(payload.get('application_id'))
            and bool(payload.get('token'))
        )

    def _defer(self, application_id: str, interaction_token: str, invocation: CommandInvocation) -> None:
        task = asyncio.create_task(self._complete_deferred(application_id, interaction_token, invocation))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _complete_deferred(self, application_id: str, interaction_token: str,
                                 invocation: CommandInvocation) -> None:
        """Run a deferred command and edit its reply into the original response."""
        try:
            reply = await self.dispatcher.dispatch(invocation)
        except Exception as e:
            logger.error(f"Deferred {invocation.command_name} failed: {e}", exc_info=True)
            reply = format_error(f"Error: {e}")

        content = message_response(invocation, reply)['data']['content']
        try:
            await asyncio.to_thread(self.discord_client.edit_interaction_response,
                                    application_id, interaction_token, content)
        except DeliveryError as e:
            logger.error(f"Cannot respond to slash command: {e}")

    async def wait_for_pending(self) -> None:
        """Wait until every deferred command has been answered."""
        if self._pending:
            logger.info(f"Waiting for {len(self._pending)} deferred command(s)")
            await asyncio.gather(*self._pending, return_exceptions=True)

    async def _drain(self, app: web.Application) -> None:
        await self.wait_for_pending()

    def create_app(self) -> web.Application:
        app = web.Application()
        app.router.add_post(INTERACTIONS_PATH, self.handle_interaction)
        app.on_shutdown.append(self._drain)
        return app

    def run(self, host: str, port: int) -> None:
        """Serve until interrupted."""
        logger.info(f"Serving Discord interactions on http://{host}:{port}{INTERACTIONS_PATH}")
        web.run_app(self.create_app(), host=host, port=port, print=None)


def message_response(invocation: CommandInvocation, reply: Optional[str]) -> Dict[str, Any]:
    """
    Build an immediate message response.

    An unknown command has no dispatcher reply; the user gets an
    ephemeral error instead of a failed interaction.
    """
    if reply is None:
        return {
            'type': CHANNEL_MESSAGE_WITH_SOURCE,
            'data': {
                'content': format_error(f"Unknown command: {invocation.command_name}"),
                'flags': EPHEMERAL,
            },
        }
    return {'type': CHANNEL_MESSAGE_WITH_SOURCE, 'data': {'content': reply}}
