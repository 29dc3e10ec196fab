"""Concrete Slack tools, registered in a fixed order at startup."""

from __future__ import annotations

from typing import List

from core.slack_api import SlackClientProvider
from tools.contract import Tool
from tools.slack import auth, chat, conversations, pins, reactions, search, users

MODULES = (auth, chat, conversations, users, reactions, pins, search)


def slack_tools(slack: SlackClientProvider) -> List[Tool]:
    tools: List[Tool] = []
    for module in MODULES:
        tools.extend(module.build(slack))
    return tools


__all__ = ["slack_tools"]
