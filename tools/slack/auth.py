from __future__ import annotations
import asyncio
from typing import Any, Dict, List

from core.slack_api import SlackClientProvider
from tools.contract import Tool, define_tool
from tools.slack.common import ok


def build(slack: SlackClientProvider) -> List[Tool]:
    @define_tool("slack_auth_test", "Test Slack authentication and return the identity behind the bot token")
    async def auth_test(args: Dict[str, Any]) -> Dict[str, Any]:
        r = await slack.bot().acall("auth.test")
        return ok(
            auth={
                "url": r.get("url"),
                "team": r.get("team"),
                "team_id": r.get("team_id"),
                "user": r.get("user"),
                "user_id": r.get("user_id"),
                "bot_id": r.get("bot_id"),
                "is_enterprise_install": r.get("is_enterprise_install", False),
            }
        )

    @define_tool("slack_get_workspace_info", "Get information about the Slack workspace the bot is installed in")
    async def workspace_info(args: Dict[str, Any]) -> Dict[str, Any]:
        client = slack.bot()
        auth, team = await asyncio.gather(client.acall("auth.test"), client.acall("team.info"))
        info = team.get("team") or {}
        return ok(
            workspace={
                "id": auth.get("team_id"),
                "name": info.get("name"),
                "domain": info.get("domain"),
                "email_domain": info.get("email_domain") or None,
                "url": auth.get("url"),
                "bot": {"id": auth.get("user_id"), "name": auth.get("user")},
            }
        )

    return [auth_test, workspace_info]
