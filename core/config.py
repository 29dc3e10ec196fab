"""Environment-driven settings, loaded once at startup."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv

from core.errors import ConfigError

LOG_LEVELS = ("DEBUG", "INFO", "WARN", "WARNING", "ERROR")
ENVIRONMENTS = ("development", "production", "test")


def env(key: str, default: str | None = None, environ: Mapping[str, str] | None = None) -> str | None:
    source = os.environ if environ is None else environ
    v = source.get(key)
    if v is None or v.strip() == "":
        return default
    return v.strip()


@dataclass(frozen=True)
class Settings:
    server_name: str = "enhanced-slack-mcp-server"
    server_version: str = "2.0.0"
    environment: str = "development"
    log_level: str = "INFO"
    log_file: Optional[str] = None

    slack_bot_token: Optional[str] = None
    slack_user_token: Optional[str] = None
    slack_api_base_url: str = "https://slack.com/api"
    slack_api_timeout_ms: int = 30000
    slack_api_max_retries: int = 3

    # None = no per-call limit; tools own their own timeouts
    tool_timeout_seconds: Optional[float] = None

    @property
    def slack_api_timeout_seconds(self) -> float:
        return self.slack_api_timeout_ms / 1000.0

    def to_public_dict(self) -> Dict[str, Any]:
        """Snapshot without credentials, safe for health responses."""
        return {
            "server_name": self.server_name,
            "server_version": self.server_version,
            "environment": self.environment,
            "log_level": self.log_level,
            "slack": {
                "bot_token_configured": bool(self.slack_bot_token),
                "user_token_configured": bool(self.slack_user_token),
                "api_base_url": self.slack_api_base_url,
                "timeout_ms": self.slack_api_timeout_ms,
                "max_retries": self.slack_api_max_retries,
            },
            "tool_timeout_seconds": self.tool_timeout_seconds,
        }


def _int(environ: Mapping[str, str], key: str, default: int, *, minimum: int) -> int:
    raw = env(key, None, environ)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ConfigError(f"{key} must be >= {minimum}, got {value}")
    return value


def _positive_float(environ: Mapping[str, str], key: str) -> float | None:
    raw = env(key, None, environ)
    if raw is None:
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{key} must be > 0, got {raw}")
    return value


def load_settings(environ: Mapping[str, str] | None = None, *, dotenv: bool = True) -> Settings:
    """Build ``Settings`` from the environment.

    A ``.env`` file in the working directory is honoured when ``dotenv`` is
    true and no explicit ``environ`` is given. Existing variables win over
    the file.
    """
    if environ is None:
        if dotenv:
            load_dotenv(override=False)
        environ = os.environ

    log_level = (env("LOG_LEVEL", None, environ) or env("SLACK_LOG_LEVEL", "INFO", environ) or "INFO").upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")

    environment = (env("APP_ENV", "development", environ) or "development").lower()
    if environment not in ENVIRONMENTS:
        raise ConfigError(f"APP_ENV must be one of {', '.join(ENVIRONMENTS)}, got {environment!r}")

    return Settings(
        server_name=env("MCP_SERVER_NAME", Settings.server_name, environ) or Settings.server_name,
        server_version=env("MCP_SERVER_VERSION", Settings.server_version, environ) or Settings.server_version,
        environment=environment,
        log_level=log_level,
        log_file=env("LOG_FILE", None, environ),
        slack_bot_token=env("SLACK_BOT_TOKEN", None, environ),
        slack_user_token=env("SLACK_USER_TOKEN", None, environ),
        slack_api_base_url=(env("SLACK_API_BASE_URL", Settings.slack_api_base_url, environ) or "").rstrip("/"),
        slack_api_timeout_ms=_int(environ, "SLACK_API_TIMEOUT_MS", 30000, minimum=1),
        slack_api_max_retries=_int(environ, "SLACK_API_MAX_RETRIES", 3, minimum=0),
        tool_timeout_seconds=_positive_float(environ, "TOOL_TIMEOUT_SECONDS"),
    )
