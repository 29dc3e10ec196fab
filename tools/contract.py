"""The shape every tool satisfies."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Type, Union

from pydantic import BaseModel

ToolResult = Any
ToolExecute = Callable[[Dict[str, Any]], Union[Awaitable[ToolResult], ToolResult]]

EMPTY_SCHEMA: Dict[str, Any] = {"type": "object", "properties": {}}


def schema_for(arguments_model: Optional[Type[BaseModel]]) -> Dict[str, Any]:
    if arguments_model is None:
        return copy.deepcopy(EMPTY_SCHEMA)
    schema = arguments_model.model_json_schema()
    schema.pop("title", None)
    schema.setdefault("type", "object")
    schema.setdefault("properties", {})
    return schema


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    input_schema: Mapping[str, Any]
    execute: ToolExecute = field(repr=False, compare=False)
    arguments_model: Optional[Type[BaseModel]] = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Tool name must be a non-empty string")
        if not callable(self.execute):
            raise TypeError(f"Tool '{self.name}' execute must be callable")
        # private copy so later edits to the caller's dict cannot leak in
        object.__setattr__(self, "input_schema", copy.deepcopy(dict(self.input_schema)))

    def metadata(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": copy.deepcopy(dict(self.input_schema)),
        }


def define_tool(
    name: str,
    description: str,
    arguments_model: Optional[Type[BaseModel]] = None,
    input_schema: Optional[Mapping[str, Any]] = None,
) -> Callable[[ToolExecute], Tool]:
    """Decorator turning an (async) function into a ``Tool``.

    With an ``arguments_model`` and no explicit ``input_schema`` the
    published schema is generated from the model, which is also what the
    dispatcher validates against.
    """

    def decorate(fn: ToolExecute) -> Tool:
        return Tool(
            name=name,
            description=description,
            input_schema=input_schema if input_schema is not None else schema_for(arguments_model),
            execute=fn,
            arguments_model=arguments_model,
        )

    return decorate
