import logging
from typing import Optional

from core.config import Settings
from core.slack_api import SlackClientProvider
from tools.contract import Tool, define_tool
from tools.dispatcher import Dispatcher, Envelope
from tools.registry import ToolRegistry
from tools.slack import slack_tools

logger = logging.getLogger(__name__)


def build_registry(settings: Settings, slack: Optional[SlackClientProvider] = None) -> ToolRegistry:
    """Register the fixed tool set and seal the registry."""
    registry = ToolRegistry(slack_tools(slack or SlackClientProvider(settings)))
    registry.seal()
    logger.info("Registered %d tools in registry", len(registry))
    return registry


__all__ = ["Dispatcher", "Envelope", "Tool", "ToolRegistry", "build_registry", "define_tool"]
