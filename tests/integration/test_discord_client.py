from typing import Any, Dict, List, Optional

import pytest
import requests

from core.exceptions import DeliveryError
from core.formatters import MESSAGE_LIMIT
from integrations.command_definitions import all_commands
from integrations.discord_client import DiscordClient


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.content = b"" if payload is None else b"{}"

    def json(self) -> Any:
        return self._payload


class FakeSession:
    def __init__(self, responses: Optional[List[Any]] = None) -> None:
        self.headers: Dict[str, str] = {}
        self.responses = list(responses or [])
        self.requests: List[Dict[str, Any]] = []

    def request(self, method: str, url: str, json: Any = None, timeout: Any = None) -> FakeResponse:
        self.requests.append({"method": method, "url": url, "json": json, "timeout": timeout})
        response = self.responses.pop(0) if self.responses else FakeResponse(200, {"id": "1"})
        if isinstance(response, Exception):
            raise response
        return response


def make_client(responses=None, channel_id="555"):
    session = FakeSession(responses)
    client = DiscordClient("secret", channel_id=channel_id, api_base_url="https://discord.test/api/v10/",
                           session=session)
    return client, session


def test_requires_token():
    with pytest.raises(ValueError):
        DiscordClient("")


def test_sets_bot_authorization_header():
    _, session = make_client()

    assert session.headers["Authorization"] == "Bot secret"


def test_send_message_posts_to_channel():
    client, session = make_client([FakeResponse(200, {"id": "m1"})])

    assert client.send_message("hello")

    request = session.requests[0]
    assert request["method"] == "POST"
    assert request["url"] == "https://discord.test/api/v10/channels/555/messages"
    assert request["json"] == {"content": "hello"}


def test_send_message_explicit_channel_wins():
    client, session = make_client([FakeResponse(200, {"id": "m1"})])

    client.send_message("hello", channel_id="777")

    assert session.requests[0]["url"].endswith("/channels/777/messages")


def test_long_messages_are_capped():
    client, session = make_client([FakeResponse(200, {"id": "m1"})])

    client.send_message("x" * 5000)

    assert len(session.requests[0]["json"]["content"]) == MESSAGE_LIMIT


def test_http_error_returns_false():
    client, _ = make_client([FakeResponse(403, None, text="Missing Access")])

    assert client.send_message("hello") is False


def test_post_message_raises_delivery_error():
    client, _ = make_client([requests.ConnectionError("connection reset")])

    with pytest.raises(DeliveryError) as exc_info:
        client.post_message("hello")

    assert "connection reset" in str(exc_info.value)


def test_no_channel_configured():
    client, session = make_client(channel_id=None)

    assert client.send_message("hello") is False
    assert session.requests == []


def test_register_commands_for_guild():
    commands = all_commands()
    client, session = make_client([
        FakeResponse(200, {"id": "app-1"}),
        FakeResponse(200, commands),
    ])

    assert client.register_commands(commands, guild_id="g-9") == 3

    assert session.requests[0]["url"].endswith("/oauth2/applications/@me")
    put = session.requests[1]
    assert put["method"] == "PUT"
    assert put["url"] == "https://discord.test/api/v10/applications/app-1/guilds/g-9/commands"
    assert put["json"] == commands


def test_register_commands_globally():
    client, session = make_client([FakeResponse(200, {"id": "app-1"}), FakeResponse(200, [])])

    client.register_commands(all_commands())

    assert session.requests[1]["url"] == "https://discord.test/api/v10/applications/app-1/commands"


def test_command_definitions():
    names = [command["name"] for command in all_commands()]
    collect = all_commands()[0]

    assert names == ["collect", "sources", "schedule"]
    options = {option["name"]: option for option in collect["options"]}
    assert options["source"]["required"] is True
    assert options["query"]["required"] is False
    assert (options["max_results"]["min_value"], options["max_results"]["max_value"]) == (1, 20)


def test_edit_interaction_response_patches_original_message():
    client, session = make_client([FakeResponse(200, {"id": "m2"})])

    client.edit_interaction_response("app-1", "tok-en", "x" * 5000)

    request = session.requests[0]
    assert request["method"] == "PATCH"
    assert request["url"] == "https://discord.test/api/v10/webhooks/app-1/tok-en/messages/@original"
    assert len(request["json"]["content"]) == MESSAGE_LIMIT


def test_edit_interaction_response_failure_raises_delivery_error():
    client, _ = make_client([FakeResponse(404, None, text="Unknown Webhook")])

    with pytest.raises(DeliveryError):
        client.edit_interaction_response("app-1", "expired", "hello")
