from __future__ import annotations
from typing import Any, Dict, List, Optional

from pydantic import Field

from core.slack_api import SlackClientProvider
from tools.contract import Tool, define_tool
from tools.slack.common import SlackArgs, next_cursor, ok, user_summary


class GetUserInfoArgs(SlackArgs):
    user: str = Field(min_length=1, description="User ID, @username or real name")


class ListUsersArgs(SlackArgs):
    limit: int = Field(default=100, ge=1, le=1000, description="Maximum users to return")
    cursor: Optional[str] = Field(default=None, description="Pagination cursor from a previous call")
    include_bots: bool = Field(default=False, description="Include bot users")
    include_deleted: bool = Field(default=False, description="Include deactivated users")


class LookupByEmailArgs(SlackArgs):
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", description="Email address of the user")


class SetStatusArgs(SlackArgs):
    status_text: str = Field(default="", max_length=100, description="Status text; empty clears it")
    status_emoji: str = Field(default="", description="Status emoji, e.g. :coffee:")
    status_expiration: int = Field(default=0, ge=0, description="Unix time the status expires; 0 never")


def build(slack: SlackClientProvider) -> List[Tool]:
    @define_tool("slack_get_user_info", "Get profile information about a user", GetUserInfoArgs)
    async def get_user_info(args: Dict[str, Any]) -> Dict[str, Any]:
        client = slack.bot()
        user_id = await client.aresolve_user_id(args["user"])
        r = await client.acall("users.info", user=user_id)
        return ok(user=user_summary(r.get("user") or {}))

    @define_tool("slack_list_users", "List members of the workspace", ListUsersArgs)
    async def list_users(args: Dict[str, Any]) -> Dict[str, Any]:
        r = await slack.bot().acall("users.list", limit=args["limit"], cursor=args.get("cursor"))
        members = []
        for member in r.get("members") or []:
            if member.get("is_bot") and not args["include_bots"]:
                continue
            if member.get("deleted") and not args["include_deleted"]:
                continue
            members.append(user_summary(member))
        return ok(users=members, total=len(members), next_cursor=next_cursor(r))

    @define_tool("slack_users_lookup_by_email", "Find a user by email address", LookupByEmailArgs)
    async def lookup_by_email(args: Dict[str, Any]) -> Dict[str, Any]:
        r = await slack.bot().acall("users.lookupByEmail", email=args["email"])
        return ok(user=user_summary(r.get("user") or {}))

    @define_tool("slack_set_status", "Set the status of the user owning SLACK_USER_TOKEN", SetStatusArgs)
    async def set_status(args: Dict[str, Any]) -> Dict[str, Any]:
        r = await slack.user().acall("users.profile.set", profile=args)
        profile = r.get("profile") or {}
        return ok(
            status={
                "text": profile.get("status_text", args["status_text"]),
                "emoji": profile.get("status_emoji", args["status_emoji"]),
                "expiration": profile.get("status_expiration", args["status_expiration"]),
            }
        )

    return [get_user_info, list_users, lookup_by_email, set_status]
