"""Protocol handler: answers list/call requests from the registry.

``Dispatcher.call`` is total. Whatever the request or the tool does, it
returns exactly one ``Envelope``; failures are normalized into the error
payload instead of propagating.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from core.errors import MalformedRequestError, ToolNotFoundError, ToolTimeoutError, error_payload, normalize_error
from core.io_utils import dump_json, utc_now_iso
from tools.contract import Tool
from tools.registry import ToolRegistry
from tools.validation import ArgumentValidator, validate_arguments

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Success:
    value: Any


@dataclass(frozen=True)
class Failure:
    error: Exception


Outcome = Union[Success, Failure]


@dataclass(frozen=True)
class Envelope:
    tool: str
    payload: Any
    is_error: bool = False
    text: str = ""

    def to_wire(self) -> Dict[str, Any]:
        wire: Dict[str, Any] = {"content": [{"type": "text", "text": self.text}]}
        if self.is_error:
            wire["isError"] = True
        return wire


class Dispatcher:
    def __init__(
        self,
        registry: ToolRegistry,
        *,
        validator: ArgumentValidator = validate_arguments,
        timeout: Optional[float] = None,
        clock: Callable[[], str] = utc_now_iso,
    ) -> None:
        self.registry = registry
        self.validator = validator
        self.timeout = timeout
        self.clock = clock

    # -----------------------------
    # tools/list
    # -----------------------------

    def list_tools(self) -> List[Dict[str, Any]]:
        tools = list(self.registry.list_all())
        logger.info("Listing %d available tools", len(tools))
        return tools

    # -----------------------------
    # tools/call
    # -----------------------------

    async def call(self, name: Any, arguments: Any = None) -> Envelope:
        tool_tag = name if isinstance(name, str) else ""
        outcome = await self._dispatch(name, arguments)

        if isinstance(outcome, Success):
            try:
                return Envelope(tool=tool_tag, payload=outcome.value, text=dump_json(outcome.value))
            except Exception as e:
                outcome = Failure(e)

        return self._error_envelope(tool_tag, outcome.error)

    async def _dispatch(self, name: Any, arguments: Any) -> Outcome:
        try:
            if not isinstance(name, str) or not name.strip():
                raise MalformedRequestError("Tool name must be a non-empty string")
            if arguments is None:
                arguments = {}
            if not isinstance(arguments, Mapping):
                raise MalformedRequestError(f"Arguments for tool '{name}' must be an object")

            tool = self.registry.lookup(name)
            if tool is None:
                raise ToolNotFoundError(name)

            logger.info("Executing tool: %s", name, extra={"context": {"arg_keys": sorted(str(k) for k in arguments)}})
            started = time.monotonic()
            validated = self.validator(tool, dict(arguments))
            value = await self._execute(tool, validated)
            logger.info(
                "Tool '%s' executed successfully",
                name,
                extra={"context": {"duration_ms": int((time.monotonic() - started) * 1000)}},
            )
            return Success(value)
        except Exception as e:
            return Failure(e)

    async def _execute(self, tool: Tool, arguments: Dict[str, Any]) -> Any:
        result = tool.execute(arguments)
        if not inspect.isawaitable(result):
            return result
        if self.timeout is None:
            return await result
        try:
            return await asyncio.wait_for(result, self.timeout)
        except asyncio.TimeoutError:
            raise ToolTimeoutError(tool.name, self.timeout) from None

    def _error_envelope(self, tool: str, error: Exception) -> Envelope:
        message = normalize_error(error)
        logger.error("Tool '%s' execution failed: %s", tool, message)
        # traceback goes to the log only, never to the client
        logger.debug("Failure detail for '%s'", tool, exc_info=error)
        payload = error_payload(tool, error, self.clock())
        return Envelope(tool=tool, payload=payload, is_error=True, text=dump_json(payload))
