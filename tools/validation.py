"""Argument validation, run between resolution and execution."""

from __future__ import annotations

from typing import Any, Callable, Dict

from pydantic import ValidationError

from core.errors import MalformedRequestError
from tools.contract import Tool

ArgumentValidator = Callable[[Tool, Dict[str, Any]], Dict[str, Any]]

MAX_REPORTED_ISSUES = 5


def _describe_issues(exc: ValidationError) -> str:
    issues = []
    for err in exc.errors()[:MAX_REPORTED_ISSUES]:
        loc = ".".join(str(part) for part in err.get("loc", ())) or "arguments"
        issues.append(f"{loc}: {err.get('msg', 'invalid value')}")
    extra = exc.error_count() - len(issues)
    if extra > 0:
        issues.append(f"... and {extra} more")
    return "; ".join(issues)


def validate_arguments(tool: Tool, arguments: Dict[str, Any]) -> Dict[str, Any]:
    """Check ``arguments`` against the tool's pydantic model, if it has one.

    Returns the arguments with defaults applied and unset optionals dropped.
    Input values are never echoed back in the error message.
    """
    if tool.arguments_model is None:
        return dict(arguments)
    try:
        model = tool.arguments_model.model_validate(arguments)
    except ValidationError as exc:
        raise MalformedRequestError(f"Invalid arguments for tool '{tool.name}': {_describe_issues(exc)}") from None
    return model.model_dump(exclude_none=True)


def passthrough(tool: Tool, arguments: Dict[str, Any]) -> Dict[str, Any]:
    return dict(arguments)
