from __future__ import annotations
from typing import Any, Dict, List

from core.slack_api import SlackClientProvider
from tools.contract import Tool, define_tool
from tools.slack.common import ChannelArgs, MessageRefArgs, message_summary, ok


def build(slack: SlackClientProvider) -> List[Tool]:
    @define_tool("slack_pins_add", "Pin a message to a channel", MessageRefArgs)
    async def pins_add(args: Dict[str, Any]) -> Dict[str, Any]:
        client = slack.bot()
        channel_id = await client.aresolve_channel_id(args["channel"])
        await client.acall("pins.add", channel=channel_id, timestamp=args["timestamp"])
        return ok(channel=channel_id, timestamp=args["timestamp"], pinned=True)

    @define_tool("slack_pins_list", "List the pinned items in a channel", ChannelArgs)
    async def pins_list(args: Dict[str, Any]) -> Dict[str, Any]:
        client = slack.bot()
        channel_id = await client.aresolve_channel_id(args["channel"])
        r = await client.acall("pins.list", channel=channel_id)
        items = []
        for item in r.get("items") or []:
            entry: Dict[str, Any] = {"type": item.get("type"), "created": item.get("created"), "created_by": item.get("created_by")}
            if item.get("message"):
                entry["message"] = message_summary(item["message"])
            items.append(entry)
        return ok(channel=channel_id, items=items, total=len(items))

    return [pins_add, pins_list]
