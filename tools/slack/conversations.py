from __future__ import annotations
from typing import Any, Dict, List, Optional

from pydantic import Field

from core.slack_api import SlackClientProvider
from tools.contract import Tool, define_tool
from tools.slack.common import (
    ChannelArgs,
    SlackArgs,
    channel_summary,
    message_summary,
    next_cursor,
    ok,
)


class ListChannelsArgs(SlackArgs):
    types: str = Field(default="public_channel,private_channel", description="Comma-separated conversation types")
    exclude_archived: bool = Field(default=True, description="Leave archived channels out")
    limit: int = Field(default=100, ge=1, le=1000, description="Maximum channels to return")
    cursor: Optional[str] = Field(default=None, description="Pagination cursor from a previous call")


class ChannelHistoryArgs(ChannelArgs):
    limit: int = Field(default=50, ge=1, le=1000, description="Maximum messages to return")
    oldest: Optional[str] = Field(default=None, description="Only messages after this timestamp")
    latest: Optional[str] = Field(default=None, description="Only messages before this timestamp")
    inclusive: bool = Field(default=False, description="Include messages at oldest/latest")
    cursor: Optional[str] = Field(default=None, description="Pagination cursor from a previous call")


class ConversationsInfoArgs(ChannelArgs):
    include_num_members: bool = Field(default=True, description="Include the member count")


class ConversationsRepliesArgs(ChannelArgs):
    ts: str = Field(min_length=1, description="Timestamp of the thread's parent message")
    limit: int = Field(default=100, ge=1, le=1000, description="Maximum replies to return")
    cursor: Optional[str] = Field(default=None, description="Pagination cursor from a previous call")


class CreateChannelArgs(SlackArgs):
    name: str = Field(
        pattern=r"^[a-z0-9_-]{1,80}$",
        description="Channel name: lowercase letters, numbers, hyphens and underscores",
    )
    is_private: bool = Field(default=False, description="Create a private channel")
    topic: Optional[str] = Field(default=None, max_length=250, description="Initial channel topic")
    purpose: Optional[str] = Field(default=None, max_length=250, description="Initial channel purpose")


def build(slack: SlackClientProvider) -> List[Tool]:
    @define_tool("slack_list_channels", "List channels in the workspace", ListChannelsArgs)
    async def list_channels(args: Dict[str, Any]) -> Dict[str, Any]:
        r = await slack.bot().acall("conversations.list", **args)
        channels = [channel_summary(ch) for ch in r.get("channels") or []]
        return ok(channels=channels, total=len(channels), next_cursor=next_cursor(r))

    @define_tool("slack_get_channel_history", "Get recent messages from a channel", ChannelHistoryArgs)
    async def channel_history(args: Dict[str, Any]) -> Dict[str, Any]:
        client = slack.bot()
        channel_id = await client.aresolve_channel_id(args["channel"])
        r = await client.acall("conversations.history", **dict(args, channel=channel_id))
        messages = [message_summary(m) for m in r.get("messages") or []]
        return ok(
            channel=channel_id,
            messages=messages,
            total=len(messages),
            has_more=r.get("has_more", False),
            next_cursor=next_cursor(r),
        )

    @define_tool("slack_conversations_info", "Get detailed information about a channel", ConversationsInfoArgs)
    async def conversations_info(args: Dict[str, Any]) -> Dict[str, Any]:
        client = slack.bot()
        channel_id = await client.aresolve_channel_id(args["channel"])
        r = await client.acall("conversations.info", **dict(args, channel=channel_id))
        return ok(channel=channel_summary(r.get("channel") or {}))

    @define_tool("slack_conversations_replies", "Get the replies in a message thread", ConversationsRepliesArgs)
    async def conversations_replies(args: Dict[str, Any]) -> Dict[str, Any]:
        client = slack.bot()
        channel_id = await client.aresolve_channel_id(args["channel"])
        r = await client.acall("conversations.replies", **dict(args, channel=channel_id))
        messages = [message_summary(m) for m in r.get("messages") or []]
        return ok(
            channel=channel_id,
            thread_ts=args["ts"],
            messages=messages,
            has_more=r.get("has_more", False),
            next_cursor=next_cursor(r),
        )

    @define_tool("slack_create_channel", "Create a new public or private channel", CreateChannelArgs)
    async def create_channel(args: Dict[str, Any]) -> Dict[str, Any]:
        client = slack.bot()
        r = await client.acall("conversations.create", name=args["name"], is_private=args["is_private"])
        channel = r.get("channel") or {}
        channel_id = channel.get("id")
        if args.get("topic"):
            await client.acall("conversations.setTopic", channel=channel_id, topic=args["topic"])
        if args.get("purpose"):
            await client.acall("conversations.setPurpose", channel=channel_id, purpose=args["purpose"])
        return ok(
            channel={
                "id": channel_id,
                "name": channel.get("name", args["name"]),
                "is_private": channel.get("is_private", args["is_private"]),
                "topic": args.get("topic"),
                "purpose": args.get("purpose"),
            }
        )

    def _membership_tool(tool_name: str, description: str, method: str, result_key: str) -> Tool:
        @define_tool(tool_name, description, ChannelArgs)
        async def run(args: Dict[str, Any]) -> Dict[str, Any]:
            client = slack.bot()
            channel_id = await client.aresolve_channel_id(args["channel"])
            await client.acall(method, channel=channel_id)
            return ok(channel=channel_id, **{result_key: True})

        return run

    return [
        list_channels,
        channel_history,
        conversations_info,
        conversations_replies,
        create_channel,
        _membership_tool("slack_join_channel", "Join a public channel", "conversations.join", "joined"),
        _membership_tool("slack_leave_channel", "Leave a channel", "conversations.leave", "left"),
        _membership_tool("slack_archive_channel", "Archive a channel", "conversations.archive", "archived"),
    ]
