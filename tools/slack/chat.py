from __future__ import annotations
from typing import Any, Dict, List, Optional

from pydantic import Field, model_validator

from core.slack_api import SlackClientProvider
from tools.contract import Tool, define_tool
from tools.slack.common import ChannelArgs, ok, permalink


class SendMessageArgs(ChannelArgs):
    text: str = Field(min_length=1, description="Message text (supports Slack mrkdwn formatting)")
    thread_ts: Optional[str] = Field(default=None, description="Timestamp of parent message to reply in thread")
    blocks: Optional[List[Dict[str, Any]]] = Field(default=None, description="Slack Block Kit blocks")
    attachments: Optional[List[Dict[str, Any]]] = Field(default=None, description="Legacy message attachments")
    unfurl_links: bool = Field(default=True, description="Enable automatic link unfurling")
    unfurl_media: bool = Field(default=True, description="Enable automatic media unfurling")
    reply_broadcast: bool = Field(default=False, description="Broadcast thread reply to channel")
    link_names: bool = Field(default=True, description="Find and link channel names and usernames")


class ChatUpdateArgs(ChannelArgs):
    ts: str = Field(min_length=1, description="Timestamp of the message to update")
    text: Optional[str] = Field(default=None, description="New message text")
    blocks: Optional[List[Dict[str, Any]]] = Field(default=None, description="New Block Kit blocks")

    @model_validator(mode="after")
    def _needs_content(self) -> "ChatUpdateArgs":
        if not self.text and not self.blocks:
            raise ValueError("either text or blocks is required")
        return self


class ChatDeleteArgs(ChannelArgs):
    ts: str = Field(min_length=1, description="Timestamp of the message to delete")


def build(slack: SlackClientProvider) -> List[Tool]:
    @define_tool(
        "slack_send_message",
        "Send a message to a Slack channel, with optional threading, blocks and attachments",
        SendMessageArgs,
    )
    async def send_message(args: Dict[str, Any]) -> Dict[str, Any]:
        client = slack.bot()
        channel_id = await client.aresolve_channel_id(args["channel"])
        payload = dict(args, channel=channel_id)
        if "thread_ts" not in payload:
            payload.pop("reply_broadcast", None)

        r = await client.acall("chat.postMessage", **payload)
        return ok(
            message={
                "ts": r.get("ts"),
                "channel": r.get("channel", channel_id),
                "text": args["text"],
                "permalink": permalink(channel_id, r.get("ts")),
            },
            metadata={
                "channel_id": channel_id,
                "thread_ts": args.get("thread_ts"),
                "has_blocks": "blocks" in args,
                "has_attachments": "attachments" in args,
            },
        )

    @define_tool("slack_chat_update", "Update the text or blocks of an existing message", ChatUpdateArgs)
    async def chat_update(args: Dict[str, Any]) -> Dict[str, Any]:
        client = slack.bot()
        channel_id = await client.aresolve_channel_id(args["channel"])
        r = await client.acall("chat.update", **dict(args, channel=channel_id))
        return ok(channel=channel_id, ts=r.get("ts"), text=r.get("text"))

    @define_tool("slack_chat_delete", "Delete a message", ChatDeleteArgs)
    async def chat_delete(args: Dict[str, Any]) -> Dict[str, Any]:
        client = slack.bot()
        channel_id = await client.aresolve_channel_id(args["channel"])
        r = await client.acall("chat.delete", channel=channel_id, ts=args["ts"])
        return ok(channel=channel_id, ts=r.get("ts", args["ts"]), deleted=True)

    return [send_message, chat_update, chat_delete]
