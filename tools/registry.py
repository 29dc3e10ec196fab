"""In-memory tool catalog, written once at startup."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional, Tuple

from core.errors import DuplicateToolError, RegistrySealedError
from tools.contract import Tool

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Name -> Tool mapping preserving insertion order.

    Populate it, call ``seal()``, then share it freely: after sealing it is
    only ever read, so concurrent lookups need no locking.
    """

    def __init__(self, tools: Iterable[Tool] = ()) -> None:
        self._tools: Dict[str, Tool] = {}
        self._sealed = False
        self.register_all(tools)

    def register(self, tool: Tool) -> None:
        if self._sealed:
            raise RegistrySealedError(tool.name)
        if tool.name in self._tools:
            raise DuplicateToolError(tool.name)
        self._tools[tool.name] = tool
        logger.debug("Registered tool: %s", tool.name)

    def register_all(self, tools: Iterable[Tool]) -> None:
        for tool in tools:
            self.register(tool)

    def seal(self) -> None:
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def lookup(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def list_all(self) -> Tuple[Dict[str, Any], ...]:
        return tuple(tool.metadata() for tool in self._tools.values())

    def names(self) -> Tuple[str, ...]:
        return tuple(self._tools.keys())

    def stats(self) -> Dict[str, Any]:
        return {"total_tools": len(self._tools), "tool_names": list(self._tools.keys())}

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools
