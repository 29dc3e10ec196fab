from __future__ import annotations
from typing import Any, Dict, List, Literal

from pydantic import Field

from core.slack_api import SlackClientProvider
from tools.contract import Tool, define_tool
from tools.slack.common import SlackArgs, ok


class SearchMessagesArgs(SlackArgs):
    query: str = Field(min_length=1, description="Search query; Slack search modifiers such as in:#channel work")
    count: int = Field(default=20, ge=1, le=100, description="Results per page")
    page: int = Field(default=1, ge=1, description="Result page")
    sort: Literal["score", "timestamp"] = Field(default="score", description="Sort field")
    sort_dir: Literal["asc", "desc"] = Field(default="desc", description="Sort direction")


def build(slack: SlackClientProvider) -> List[Tool]:
    # search.messages only accepts user tokens
    @define_tool("slack_search_messages", "Search messages across the workspace (needs SLACK_USER_TOKEN)", SearchMessagesArgs)
    async def search_messages(args: Dict[str, Any]) -> Dict[str, Any]:
        r = await slack.user().acall("search.messages", **args)
        found = r.get("messages") or {}
        matches = [
            {
                "ts": m.get("ts"),
                "text": m.get("text", ""),
                "user": m.get("user") or m.get("username"),
                "channel": (m.get("channel") or {}).get("name"),
                "permalink": m.get("permalink"),
            }
            for m in found.get("matches") or []
        ]
        paging = found.get("paging") or {}
        return ok(
            query=args["query"],
            matches=matches,
            total=found.get("total", len(matches)),
            page=paging.get("page", args["page"]),
            pages=paging.get("pages", 1),
        )

    return [search_messages]
