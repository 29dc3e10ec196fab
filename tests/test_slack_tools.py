from __future__ import annotations

import json

import pytest

from core.config import Settings
from core.errors import SlackApiError
from core.slack_api import SlackClientProvider
from tests.conftest import FakeProvider, FakeSlack
from tools import build_registry
from tools.dispatcher import Dispatcher
from tools.slack import slack_tools

EXPECTED_TOOLS = [
    "slack_auth_test",
    "slack_get_workspace_info",
    "slack_send_message",
    "slack_chat_update",
    "slack_chat_delete",
    "slack_list_channels",
    "slack_get_channel_history",
    "slack_conversations_info",
    "slack_conversations_replies",
    "slack_create_channel",
    "slack_join_channel",
    "slack_leave_channel",
    "slack_archive_channel",
    "slack_get_user_info",
    "slack_list_users",
    "slack_users_lookup_by_email",
    "slack_set_status",
    "slack_reactions_add",
    "slack_reactions_remove",
    "slack_reactions_get",
    "slack_pins_add",
    "slack_pins_list",
    "slack_search_messages",
]


def _dispatcher(provider: FakeProvider) -> Dispatcher:
    return Dispatcher(build_registry(Settings(), provider))


def test_registry_holds_fixed_tool_set_in_order() -> None:
    registry = build_registry(Settings())

    assert list(registry.names()) == EXPECTED_TOOLS
    assert registry.sealed


def test_every_tool_publishes_an_object_schema() -> None:
    for meta in build_registry(Settings()).list_all():
        schema = meta["inputSchema"]
        assert schema["type"] == "object"
        assert isinstance(schema["properties"], dict)
        assert meta["description"]


def test_send_message_schema_requires_channel_and_text() -> None:
    tool = {t.name: t for t in slack_tools(FakeProvider())}["slack_send_message"]

    schema = tool.metadata()["inputSchema"]
    assert set(schema["required"]) == {"channel", "text"}
    assert schema["additionalProperties"] is False


@pytest.mark.asyncio
async def test_send_message_posts_to_resolved_channel(provider: FakeProvider, fake_slack: FakeSlack) -> None:
    fake_slack.responses["chat.postMessage"] = {"ts": "1700000000.000100", "channel": "CGENERAL"}

    envelope = await _dispatcher(provider).call("slack_send_message", {"channel": "#general", "text": "hello"})

    assert envelope.is_error is False
    method, params = fake_slack.calls[0]
    assert method == "chat.postMessage"
    assert params["channel"] == "CGENERAL"
    assert params["text"] == "hello"
    assert params["unfurl_links"] is True
    assert "reply_broadcast" not in params
    body = json.loads(envelope.text)
    assert body["success"] is True
    assert body["message"]["permalink"] == "https://slack.com/archives/CGENERAL/p1700000000000100"


@pytest.mark.asyncio
async def test_thread_reply_keeps_broadcast_flag(provider: FakeProvider, fake_slack: FakeSlack) -> None:
    await _dispatcher(provider).call(
        "slack_send_message",
        {"channel": "C1", "text": "re", "thread_ts": "1.2", "reply_broadcast": True},
    )

    _, params = fake_slack.calls[0]
    assert params["thread_ts"] == "1.2"
    assert params["reply_broadcast"] is True


@pytest.mark.asyncio
async def test_send_message_rejects_missing_text(provider: FakeProvider, fake_slack: FakeSlack) -> None:
    envelope = await _dispatcher(provider).call("slack_send_message", {"channel": "C1"})

    assert envelope.is_error is True
    assert "text" in json.loads(envelope.text)["error"]
    assert fake_slack.calls == []


@pytest.mark.asyncio
async def test_unknown_fields_are_rejected(provider: FakeProvider) -> None:
    envelope = await _dispatcher(provider).call("slack_join_channel", {"channel": "C1", "surprise": 1})

    assert envelope.is_error is True


@pytest.mark.asyncio
async def test_slack_errors_become_friendly_envelopes(provider: FakeProvider) -> None:
    envelope = await _dispatcher(provider).call("slack_get_channel_history", {"channel": "#missing"})

    body = json.loads(envelope.text)
    assert envelope.is_error is True
    assert body["error"] == "Channel not found. Please check the channel name or ID."
    assert body["tool"] == "slack_get_channel_history"


@pytest.mark.asyncio
async def test_platform_error_from_call_is_reported(provider: FakeProvider, fake_slack: FakeSlack) -> None:
    fake_slack.responses["conversations.join"] = SlackApiError("is_archived", "conversations.join")

    envelope = await _dispatcher(provider).call("slack_join_channel", {"channel": "C1"})

    assert json.loads(envelope.text)["error"] == "Slack Platform Error: is_archived"


@pytest.mark.asyncio
async def test_missing_token_is_a_call_time_error() -> None:
    dispatcher = Dispatcher(build_registry(Settings()))

    envelope = await dispatcher.call("slack_auth_test", {})

    body = json.loads(envelope.text)
    assert envelope.is_error is True
    assert "SLACK_BOT_TOKEN" in body["error"]


@pytest.mark.asyncio
async def test_workspace_info_combines_auth_and_team(provider: FakeProvider, fake_slack: FakeSlack) -> None:
    fake_slack.responses.update(
        {
            "auth.test": {"team_id": "T1", "url": "https://acme.slack.com/", "user_id": "UB", "user": "bot"},
            "team.info": {"team": {"name": "Acme", "domain": "acme"}},
        }
    )

    envelope = await _dispatcher(provider).call("slack_get_workspace_info", {})

    workspace = json.loads(envelope.text)["workspace"]
    assert workspace == {
        "id": "T1",
        "name": "Acme",
        "domain": "acme",
        "email_domain": None,
        "url": "https://acme.slack.com/",
        "bot": {"id": "UB", "name": "bot"},
    }


@pytest.mark.asyncio
async def test_create_channel_sets_topic(provider: FakeProvider, fake_slack: FakeSlack) -> None:
    fake_slack.responses["conversations.create"] = {"channel": {"id": "CNEW", "name": "proj-x", "is_private": False}}

    envelope = await _dispatcher(provider).call("slack_create_channel", {"name": "proj-x", "topic": "Project X"})

    assert envelope.is_error is False
    assert fake_slack.methods() == ["conversations.create", "conversations.setTopic"]
    assert fake_slack.calls[1][1] == {"channel": "CNEW", "topic": "Project X"}


@pytest.mark.asyncio
async def test_create_channel_validates_name(provider: FakeProvider, fake_slack: FakeSlack) -> None:
    envelope = await _dispatcher(provider).call("slack_create_channel", {"name": "Not Valid!"})

    assert envelope.is_error is True
    assert fake_slack.calls == []


@pytest.mark.asyncio
async def test_reaction_names_lose_their_colons(provider: FakeProvider, fake_slack: FakeSlack) -> None:
    await _dispatcher(provider).call("slack_reactions_add", {"channel": "C1", "timestamp": "1.2", "name": ":tada:"})

    assert fake_slack.calls[0] == ("reactions.add", {"channel": "C1", "timestamp": "1.2", "name": "tada"})


@pytest.mark.asyncio
async def test_list_users_filters_bots(provider: FakeProvider, fake_slack: FakeSlack) -> None:
    fake_slack.responses["users.list"] = {
        "members": [
            {"id": "U1", "name": "ada"},
            {"id": "U2", "name": "robot", "is_bot": True},
            {"id": "U3", "name": "gone", "deleted": True},
        ]
    }

    envelope = await _dispatcher(provider).call("slack_list_users", {})

    users = json.loads(envelope.text)["users"]
    assert [u["id"] for u in users] == ["U1"]


@pytest.mark.asyncio
async def test_search_and_status_use_the_user_token() -> None:
    bot, user = FakeSlack(), FakeSlack({"search.messages": {"messages": {"matches": [], "total": 0}}})
    dispatcher = _dispatcher(FakeProvider(bot, user))

    await dispatcher.call("slack_search_messages", {"query": "deploy"})
    await dispatcher.call("slack_set_status", {"status_text": "lunch", "status_emoji": ":taco:"})

    assert bot.calls == []
    assert user.methods() == ["search.messages", "users.profile.set"]
    assert user.calls[1][1]["profile"] == {"status_text": "lunch", "status_emoji": ":taco:", "status_expiration": 0}


@pytest.mark.asyncio
async def test_chat_update_needs_text_or_blocks(provider: FakeProvider, fake_slack: FakeSlack) -> None:
    envelope = await _dispatcher(provider).call("slack_chat_update", {"channel": "C1", "ts": "1.2"})

    assert envelope.is_error is True
    assert fake_slack.calls == []


def test_default_provider_is_lazy() -> None:
    provider = SlackClientProvider(Settings())

    registry = build_registry(Settings(), provider)

    assert len(registry) == len(EXPECTED_TOOLS)
