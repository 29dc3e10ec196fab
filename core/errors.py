"""Error taxonomy and the error normalizer.

Everything that happens while a single tool call is dispatched ends up as a
``DispatchError`` or some other ``Exception``; ``normalize_error`` turns any
of them (or any other value) into a short client-safe message. Startup
errors are the only fatal ones.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping, Optional

UNKNOWN_ERROR = "unknown error"
MAX_MESSAGE_LENGTH = 500

_TOKEN_RE = re.compile(r"xox[a-z]-[A-Za-z0-9-]+")
_BEARER_RE = re.compile(r"(?i)bearer\s+[A-Za-z0-9._~+/=-]+")
_WS_RE = re.compile(r"\s+")


class GatewayError(Exception):
    """Base class for errors raised by the gateway itself."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


# -----------------------------
# Per-request (recoverable)
# -----------------------------

class DispatchError(GatewayError):
    """A single call could not be completed; reported in its envelope."""


class ToolNotFoundError(DispatchError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Tool '{name}' not found")
        self.name = name


class MalformedRequestError(DispatchError):
    pass


class ToolTimeoutError(DispatchError):
    def __init__(self, name: str, seconds: float) -> None:
        super().__init__(f"Tool '{name}' timed out after {seconds:g}s")
        self.name = name
        self.seconds = seconds


# -----------------------------
# Boundary (fatal)
# -----------------------------

class StartupError(GatewayError):
    """The process cannot serve; logged and turned into exit status 1."""


class ConfigError(StartupError):
    pass


class TransportError(StartupError):
    pass


class DuplicateToolError(StartupError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Tool '{name}' is already registered")
        self.name = name


class RegistrySealedError(StartupError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Cannot register '{name}': registry is sealed")
        self.name = name


# -----------------------------
# Slack Web API
# -----------------------------

HTTP_ERROR_MESSAGES = {
    401: "Authentication failed. Please check your Slack bot token.",
    403: "Permission denied. The bot may not have the required permissions.",
    404: "Resource not found. Please check the channel or user ID.",
    429: "Rate limit exceeded. Please try again later.",
}

PLATFORM_ERROR_MESSAGES = {
    "channel_not_found": "Channel not found. Please check the channel name or ID.",
    "user_not_found": "User not found. Please check the username or user ID.",
    "users_not_found": "User not found. Please check the username or user ID.",
    "not_in_channel": "Bot is not a member of this channel. Please invite the bot first.",
    "invalid_auth": "Invalid authentication token. Please check your bot token.",
    "not_authed": "No authentication token provided. Please set SLACK_BOT_TOKEN.",
    "missing_scope": "Missing required OAuth scope. Please check bot permissions.",
    "file_not_found": "File not found. Please check the file ID.",
    "too_long": "Message is too long. Please shorten your message.",
    "message_not_found": "Message not found. Please check the message timestamp.",
    "already_reacted": "This reaction has already been added to the message.",
    "no_reaction": "The message has no such reaction.",
    "name_taken": "A channel with this name already exists.",
    "already_archived": "Channel is already archived.",
    "ratelimited": "Rate limit exceeded. Please try again later.",
}


class SlackError(Exception):
    """Base for Slack failures; ``str()`` is always a client-safe message."""


class SlackConfigurationError(SlackError):
    pass


class SlackConnectionError(SlackError):
    def __init__(self, method: str = "") -> None:
        self.method = method
        super().__init__("Could not reach the Slack API. Please check network connectivity.")


class SlackHTTPError(SlackError):
    def __init__(self, status_code: int, method: str = "") -> None:
        self.status_code = status_code
        self.method = method
        message = HTTP_ERROR_MESSAGES.get(status_code, f"Slack HTTP Error ({status_code})")
        super().__init__(message)


class SlackApiError(SlackError):
    def __init__(self, error_code: str, method: str = "", data: Optional[Dict[str, Any]] = None) -> None:
        self.error_code = error_code
        self.method = method
        # raw response stays here for logs, never in the message
        self.data = data or {}
        message = PLATFORM_ERROR_MESSAGES.get(error_code, f"Slack Platform Error: {error_code}")
        super().__init__(message)


# -----------------------------
# Normalizer
# -----------------------------

def _describe(failure: object) -> str:
    if isinstance(failure, BaseException):
        try:
            return str(failure)
        except Exception:
            return ""
    if isinstance(failure, str):
        return failure
    if isinstance(failure, Mapping):
        for key in ("message", "error"):
            value = failure.get(key)
            if isinstance(value, str):
                return value
    return ""


def _sanitize(text: str) -> str:
    text = _TOKEN_RE.sub("[redacted]", text)
    text = _BEARER_RE.sub("Bearer [redacted]", text)
    text = _WS_RE.sub(" ", text).strip()
    if len(text) > MAX_MESSAGE_LENGTH:
        text = text[: MAX_MESSAGE_LENGTH - 3].rstrip() + "..."
    return text


def normalize_error(failure: object) -> str:
    """Return a non-empty, client-safe description of ``failure``.

    Accepts anything: exceptions, strings, mappings carrying a ``message``
    or ``error`` string, ``None``, numbers. Never raises.
    """
    try:
        text = _sanitize(_describe(failure))
    except Exception:
        return UNKNOWN_ERROR
    return text or UNKNOWN_ERROR


def error_payload(tool: str, failure: object, timestamp: str) -> Dict[str, Any]:
    return {
        "success": False,
        "error": normalize_error(failure),
        "tool": tool,
        "timestamp": timestamp,
    }
