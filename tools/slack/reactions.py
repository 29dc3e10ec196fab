from __future__ import annotations
from typing import Any, Dict, List

from pydantic import Field, field_validator

from core.slack_api import SlackClientProvider
from tools.contract import Tool, define_tool
from tools.slack.common import MessageRefArgs, ok


class ReactionArgs(MessageRefArgs):
    name: str = Field(min_length=1, description="Emoji name, with or without colons")

    @field_validator("name")
    @classmethod
    def _strip_colons(cls, v: str) -> str:
        v = v.strip().strip(":")
        if not v:
            raise ValueError("emoji name is empty")
        return v


class ReactionsGetArgs(MessageRefArgs):
    full: bool = Field(default=True, description="Return the complete reaction list")


def build(slack: SlackClientProvider) -> List[Tool]:
    def _reaction_tool(tool_name: str, description: str, method: str, result_key: str) -> Tool:
        @define_tool(tool_name, description, ReactionArgs)
        async def run(args: Dict[str, Any]) -> Dict[str, Any]:
            client = slack.bot()
            channel_id = await client.aresolve_channel_id(args["channel"])
            await client.acall(method, channel=channel_id, timestamp=args["timestamp"], name=args["name"])
            return ok(channel=channel_id, timestamp=args["timestamp"], reaction=args["name"], **{result_key: True})

        return run

    @define_tool("slack_reactions_get", "Get the reactions on a message", ReactionsGetArgs)
    async def reactions_get(args: Dict[str, Any]) -> Dict[str, Any]:
        client = slack.bot()
        channel_id = await client.aresolve_channel_id(args["channel"])
        r = await client.acall("reactions.get", **dict(args, channel=channel_id))
        message = r.get("message") or {}
        reactions = [
            {"name": x.get("name"), "count": x.get("count", 0), "users": x.get("users") or []}
            for x in message.get("reactions") or []
        ]
        return ok(
            channel=channel_id,
            timestamp=args["timestamp"],
            reactions=reactions,
            total_reactions=sum(x["count"] for x in reactions),
        )

    return [
        _reaction_tool("slack_reactions_add", "Add an emoji reaction to a message", "reactions.add", "added"),
        _reaction_tool("slack_reactions_remove", "Remove an emoji reaction from a message", "reactions.remove", "removed"),
        reactions_get,
    ]
